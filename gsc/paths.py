"""Remote path model: ``hw3:foo.c`` patterns, destinations and cp arguments."""

import re
from dataclasses import dataclass
from typing import Optional, Union

from gsc.errors import ParseError

_HW_SPEC_RE = re.compile(r'hw(\d+)(?::(.*))?', re.DOTALL)
_REMOTE_PATTERN_RE = re.compile(r'hw(\d+):(.*)', re.DOTALL)
_BARE_HW_RE = re.compile(r'hw(\d+)')


@dataclass(frozen=True)
class RemotePattern:
    """
    A homework number plus an optional filename or glob.

    An empty ``name`` refers to every file of the homework.
    """

    hw: int
    name: str = ""

    def is_whole_hw(self) -> bool:
        return not self.name

    def with_name(self, name: str) -> 'RemotePattern':
        return RemotePattern(self.hw, name)

    def __str__(self) -> str:
        return f"hw{self.hw}:{self.name}"


@dataclass(frozen=True)
class RemoteDestination:
    """Target of a move: the homework may be left out to keep the source's."""

    hw: Optional[int]
    name: str = ""

    def resolve(self, default: RemotePattern) -> RemotePattern:
        """
        Fill in whatever this destination leaves unspecified from ``default``.

        Args:
            default: The source the destination is relative to

        Returns:
            Fully qualified remote pattern

        Raises:
            ParseError: If neither homework nor name was given
        """
        if self.hw is None and not self.name:
            raise ParseError("remote destination", str(self))
        hw = default.hw if self.hw is None else self.hw
        name = self.name or default.name
        return RemotePattern(hw, name)

    def __str__(self) -> str:
        if self.hw is None:
            return f":{self.name}"
        return f"hw{self.hw}:{self.name}"


@dataclass(frozen=True)
class LocalArg:
    """A local file or directory given to cp."""

    path: str

    def is_whole_hw(self) -> bool:
        return False

    def __str__(self) -> str:
        return f":{self.path}"


@dataclass(frozen=True)
class RemoteArg:
    """A remote pattern given to cp."""

    pattern: RemotePattern

    def is_whole_hw(self) -> bool:
        return self.pattern.is_whole_hw()

    def __str__(self) -> str:
        return str(self.pattern)


CpArg = Union[LocalArg, RemoteArg]


def parse_hw_spec(token: str) -> RemotePattern:
    """
    Parse ``hw<N>`` or ``hw<N>:<pattern>``.

    Args:
        token: Command-line token

    Returns:
        RemotePattern, whole-homework when no pattern was given

    Raises:
        ParseError: If the token is not a homework spec
    """
    match = _HW_SPEC_RE.fullmatch(token)
    if match is None:
        raise ParseError("homework spec", token)
    return RemotePattern(int(match.group(1)), match.group(2) or "")


def parse_hw_number(token: str) -> int:
    """Parse a bare ``hw<N>`` token (no pattern allowed)."""
    match = _BARE_HW_RE.fullmatch(token)
    if match is None:
        raise ParseError("homework number (e.g. ‘hw3’)", token)
    return int(match.group(1))


def parse_remote_pattern(token: str) -> RemotePattern:
    """
    Parse ``hw<N>:<pattern>``; the pattern may be empty.

    Raises:
        ParseError: If the token is not a remote file spec
    """
    match = _REMOTE_PATTERN_RE.fullmatch(token)
    if match is None:
        raise ParseError("remote file spec", token)
    return RemotePattern(int(match.group(1)), match.group(2))


def parse_remote_destination(token: str) -> RemoteDestination:
    """
    Parse a move target: ``hw<N>``, ``hw<N>:<name>``, ``:<name>`` or ``<name>``.
    """
    match = _HW_SPEC_RE.fullmatch(token)
    if match is not None:
        return RemoteDestination(int(match.group(1)), match.group(2) or "")
    name = token[1:] if token.startswith(':') else token
    if not name:
        raise ParseError("remote destination", token)
    return RemoteDestination(None, name)


def parse_cp_arg(token: str, whole_hw: bool = False) -> CpArg:
    """
    Parse one cp source or destination.

    ``:<path>`` is always local, any other token containing a colon is a remote
    pattern, and everything else is local. With ``whole_hw`` (``cp -a``) a bare
    ``hw<N>`` means the whole homework.

    Args:
        token: Command-line token
        whole_hw: Treat bare ``hw<N>`` as a remote whole-homework reference

    Returns:
        LocalArg or RemoteArg

    Raises:
        ParseError: On an empty local name or a malformed remote spec
    """
    if token.startswith(':'):
        if len(token) == 1:
            raise ParseError("local filename after ‘:’", token)
        return LocalArg(token[1:])

    if ':' in token:
        return RemoteArg(parse_remote_pattern(token))

    if whole_hw and _BARE_HW_RE.fullmatch(token):
        return RemoteArg(parse_hw_spec(token))

    return LocalArg(token)


def looks_like_bare_hw(token: str) -> bool:
    """True for tokens such as ``hw3`` that probably lack their colon."""
    return _BARE_HW_RE.fullmatch(token) is not None
