"""Copy resolution engine: decides what ``gsc cp SRC... DST`` does."""

import os
import stat
from enum import Enum
from typing import Protocol, Sequence

from gsc.errors import (
    BadLocalPath,
    CannotCopyLocalToLocal,
    CannotCopyLocalToLocalHw,
    CannotCopyRemoteToRemote,
    DestinationPatternIsMultiple,
    FilenameNotUtf8,
    MultipleSourcesOneDestination,
    SourceHwToDestinationFile,
    Warnings,
)
from gsc.listing import FileListing
from gsc.logging_config import get_logger
from gsc.messages import FileMeta
from gsc.overwrite import OverwriteState
from gsc.paths import CpArg, LocalArg, RemoteArg, RemotePattern, looks_like_bare_hw

logger = get_logger(__name__)


class Transfer(Protocol):
    def upload_file(self, user: str, src: str, dst: RemotePattern) -> None: ...

    def download_file(self, meta: FileMeta, dst: str) -> None: ...


class DstType(Enum):
    DIR = 'dir'
    FILE = 'file'
    DOES_NOT_EXIST = 'does_not_exist'


def classify_local(path: str) -> DstType:
    """
    Probe a local destination.

    Raises:
        OSError: For anything but "does not exist" (e.g. permission denied)
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return DstType.DOES_NOT_EXIST
    if stat.S_ISDIR(st.st_mode):
        return DstType.DIR
    return DstType.FILE


def ends_in_separator(path: str) -> bool:
    return path.endswith(os.sep) or (os.altsep is not None and path.endswith(os.altsep))


def base_filename(path: str) -> str:
    """
    Name a local file gets on the server when uploaded to a whole homework.

    Raises:
        BadLocalPath: If the path has no final component (``/``, ``..``)
        FilenameNotUtf8: If the name cannot be encoded as UTF-8
    """
    name = os.path.basename(os.path.normpath(path))
    if name in ('', '.', '..') or name == os.sep:
        raise BadLocalPath(path)
    try:
        name.encode('utf-8')
    except UnicodeEncodeError:
        raise FilenameNotUtf8(path) from None
    return name


class CopyEngine:
    """
    Resolves one cp invocation into uploads and downloads.

    Multi-file work is sequential. Failures of individual items in a batch
    are recorded in ``warnings`` and the batch goes on; structural errors
    (local-to-local, remote-to-remote, whole homework onto a file...) are
    raised before anything is transferred.
    """

    def __init__(self, listing: FileListing, transfer: Transfer,
                 overwrite: OverwriteState, warnings: Warnings):
        self.listing = listing
        self.transfer = transfer
        self.overwrite = overwrite
        self.warnings = warnings

    @property
    def user(self) -> str:
        return self.listing.user

    def copy(self, srcs: Sequence[CpArg], dst: CpArg) -> None:
        """
        Copy every source to the destination.

        Args:
            srcs: Local paths or remote patterns
            dst: Local path or remote pattern
        """
        if isinstance(dst, RemoteArg):
            self.upload(srcs, dst.pattern)
        else:
            self.download(srcs, dst.path)

    # --- upload ---

    def upload(self, srcs: Sequence[CpArg], dst: RemotePattern) -> None:
        local_srcs = []
        for src in srcs:
            if isinstance(src, RemoteArg):
                raise CannotCopyRemoteToRemote(src.pattern, dst)
            local_srcs.append(src.path)

        if dst.is_whole_hw():
            for path in local_srcs:
                self.warnings.attempt(self._upload_under_own_name, path, dst)
            return

        if len(local_srcs) != 1:
            raise MultipleSourcesOneDestination(dst)

        existing = self.listing.list_matching(dst)
        if len(existing) > 1:
            raise DestinationPatternIsMultiple(dst, [meta.name for meta in existing])
        name = existing[0].name if existing else dst.name
        self.transfer.upload_file(self.user, local_srcs[0], dst.with_name(name))

    def _upload_under_own_name(self, path: str, dst: RemotePattern) -> None:
        name = base_filename(path)
        self.transfer.upload_file(self.user, path, dst.with_name(name))

    # --- download ---

    def download(self, srcs: Sequence[CpArg], dst: str) -> None:
        patterns = []
        for src in srcs:
            if isinstance(src, LocalArg):
                if looks_like_bare_hw(dst):
                    raise CannotCopyLocalToLocalHw(src.path, dst)
                raise CannotCopyLocalToLocal(src.path, dst)
            patterns.append(src.pattern)

        dst_type = classify_local(dst)

        if dst_type is DstType.DIR:
            self._download_into_dir(patterns, dst)
        elif dst_type is DstType.FILE:
            self._download_onto_file(patterns, dst, check_overwrite=True)
        elif ends_in_separator(dst) or any(p.is_whole_hw() for p in patterns):
            logger.debug(f"Creating directory ‘{dst}’")
            os.makedirs(dst, exist_ok=True)
            self._download_into_dir(patterns, dst)
        else:
            # Nothing says "directory", so dst names a single new file.
            self._download_onto_file(patterns, dst, check_overwrite=False)

    def _download_onto_file(self, patterns: list[RemotePattern], dst: str,
                            check_overwrite: bool) -> None:
        if len(patterns) != 1:
            raise MultipleSourcesOneDestination(dst)
        pattern = patterns[0]
        if pattern.is_whole_hw():
            raise SourceHwToDestinationFile(pattern.hw, dst)
        meta = self.listing.require_exactly_one_matching(pattern)
        if check_overwrite:
            self._write(meta, dst)
        else:
            self.transfer.download_file(meta, dst)

    def _download_into_dir(self, patterns: list[RemotePattern], dst: str) -> None:
        for pattern in patterns:
            self.warnings.attempt(self._download_pattern_into_dir, pattern, dst)

    def _download_pattern_into_dir(self, pattern: RemotePattern, dst: str) -> None:
        files = self.listing.require_nonempty_matching(pattern)

        if pattern.is_whole_hw():
            for meta in files:
                if meta.purpose.is_auto_deletable():
                    logger.debug(f"Skipping {meta.purpose.value} file ‘{meta}’")
                    continue
                subdir = os.path.normpath(os.path.join(dst, meta.purpose.to_dir()))
                os.makedirs(subdir, exist_ok=True)
                self.warnings.attempt(self._write, meta, os.path.join(subdir, meta.name))
        else:
            for meta in files:
                self.warnings.attempt(self._write, meta, os.path.join(dst, meta.name))

    def _write(self, meta: FileMeta, target: str) -> None:
        """Download one file, consulting the overwrite policy if target exists."""
        if os.path.lexists(target) and not self.overwrite.confirm(target):
            return
        self.transfer.download_file(meta, target)
