"""Fetching and filtering the remote file list of a homework."""

from __future__ import annotations

from typing import Optional, Protocol

from gsc.errors import MultipleSourcesOneDestination, NoSuchRemoteFile
from gsc.messages import FileMeta
from gsc.paths import RemotePattern
from gsc.patterns import compile_pattern


class FileListSource(Protocol):
    def fetch_file_list(self, user: str, hw: int) -> list[FileMeta]: ...


class FileListing:
    """
    File Listing Service for one user.

    Lists are fetched fresh on every call; only the submission URIs are
    cached, by the client.
    """

    def __init__(self, source: FileListSource, user: str):
        self.source = source
        self.user = user

    def list(self, hw: int) -> list[FileMeta]:
        return self.source.fetch_file_list(self.user, hw)

    def list_matching(self, pattern: RemotePattern) -> list[FileMeta]:
        matches = compile_pattern(pattern.name)
        return [meta for meta in self.list(pattern.hw) if matches(meta.name)]

    def require_nonempty_matching(self, pattern: RemotePattern) -> list[FileMeta]:
        """
        Like list_matching, for callers that expect at least one file.

        Raises:
            NoSuchRemoteFile: If nothing matches
        """
        files = self.list_matching(pattern)
        if not files:
            raise NoSuchRemoteFile(pattern)
        return files

    def require_exactly_one_matching(self, pattern: RemotePattern) -> FileMeta:
        """
        Resolve a pattern that must name a single remote file.

        Raises:
            NoSuchRemoteFile: If nothing matches
            MultipleSourcesOneDestination: If the pattern is ambiguous
        """
        files = self.require_nonempty_matching(pattern)
        if len(files) > 1:
            raise MultipleSourcesOneDestination(pattern)
        return files[0]

    def find_exact(self, hw: int, name: str) -> Optional[FileMeta]:
        """Look a file up by its literal name (no glob interpretation)."""
        for meta in self.list(hw):
            if meta.name == name:
                return meta
        return None
