"""Exception classes and the warning accumulator for the GSC client."""

from typing import Callable, Optional, TypeVar

from gsc.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class GscError(Exception):
    """
    Base exception class for all user-facing client errors.
    """
    pass


class ParseError(GscError):
    """
    Raised when a command-line token does not have the expected syntax.
    """

    def __init__(self, expected: str, literal: str):
        self.expected = expected
        self.literal = literal
        super().__init__(f"Syntax error: expected {expected} but got ‘{literal}’")


class UsageError(GscError):
    """
    Raised when a command is given the wrong number or kind of arguments.
    """
    pass


class PatternError(GscError):
    """Raised when a filename glob cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Bad file pattern ‘{pattern}’: {reason}")


class LoginPlease(GscError):
    """
    Raised when a command needs credentials but nobody is logged in.
    """

    def __init__(self):
        super().__init__("You are not logged in. Please run: gsc auth <username>")


class PasswordMismatch(GscError):
    """Raised when the two typed passwords differ."""

    def __init__(self):
        super().__init__("Passwords do not match")


class ServerError(GscError):
    """
    Raised for any non-2xx response; keeps the server's status, title and message.
    """

    def __init__(self, status: int, title: str, message: str):
        self.status = status
        self.title = title
        self.message = message
        super().__init__(f"{title} ({status}): {message}" if message else f"{title} ({status})")


class TransportError(GscError):
    """Raised when the HTTP request itself fails (connection, timeout...)."""
    pass


class BadResponse(GscError):
    """Raised when a 2xx response body cannot be understood."""
    pass


class UnknownHomework(GscError):
    """Raised when the user has no submission for the requested homework."""

    def __init__(self, hw: int):
        self.hw = hw
        super().__init__(f"Homework hw{hw} does not exist")


class NoSuchRemoteFile(GscError):
    """Raised when a remote pattern matches no files."""

    def __init__(self, pattern):
        self.pattern = pattern
        super().__init__(f"No remote file matching ‘{pattern}’")


class NoSuchLocalFile(GscError):
    """Raised when a local upload source does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Local file ‘{path}’ does not exist")


class MultipleSourcesOneDestination(GscError):
    """
    Raised when several sources would have to be written to one file.
    """

    def __init__(self, dst):
        self.dst = dst
        super().__init__(f"Cannot copy multiple sources to single destination ‘{dst}’")


class DestinationPatternIsMultiple(GscError):
    """Raised when an upload destination pattern matches more than one remote file."""

    def __init__(self, pattern, matches: list[str]):
        self.pattern = pattern
        self.matches = matches
        names = ', '.join(f"‘{name}’" for name in matches)
        super().__init__(
            f"Destination pattern ‘{pattern}’ matches multiple files: {names}"
        )


class CannotCopyLocalToLocal(GscError):
    """Raised when both source and destination of a copy are local."""

    hint = ""

    def __init__(self, src: str, dst: str):
        self.src = src
        self.dst = dst
        super().__init__(
            f"Cannot copy local file ‘{src}’ to local destination ‘{dst}’{self.hint}"
        )


class CannotCopyLocalToLocalHw(CannotCopyLocalToLocal):
    """
    Local-to-local copy where the destination looks like a homework missing
    its colon, e.g. ``gsc cp foo.c hw3``.
    """

    def __init__(self, src: str, dst: str):
        self.hint = f" (did you mean ‘{dst}:’?)"
        super().__init__(src, dst)


class CannotCopyRemoteToRemote(GscError):
    """Raised when both source and destination of a copy are remote."""

    def __init__(self, src, dst):
        self.src = src
        self.dst = dst
        super().__init__(f"Cannot copy remote file ‘{src}’ to remote destination ‘{dst}’")


class SourceHwToDestinationFile(GscError):
    """Raised when a whole homework is copied onto a single local file."""

    def __init__(self, hw: int, dst: str):
        self.hw = hw
        self.dst = dst
        super().__init__(f"Cannot copy whole homework hw{hw} to file ‘{dst}’")


class BadLocalPath(GscError):
    """Raised when a local path has no usable final component."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Bad local path: ‘{path}’")


class FilenameNotUtf8(GscError):
    """Raised when a local filename cannot be sent to the server."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Filename is not valid UTF-8: ‘{path}’")


class DestinationExists(GscError):
    """Raised when a destination exists and the overwrite policy is NEVER."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"Destination ‘{target}’ already exists")


class Cancelled(Exception):
    """
    Raised when the user cancels at an interactive prompt.

    Deliberately not a GscError: batch loops must never catch it.
    """

    def __init__(self):
        super().__init__("Cancelled")


class Warnings:
    """
    Records non-fatal per-item failures of a batch command.

    Each failing item is logged at WARNING level and sets ``had_warning``,
    which the entry point reads once to choose the exit status.
    """

    def __init__(self):
        self.had_warning = False
        self.messages: list[str] = []

    def warn(self, error: Exception) -> None:
        logger.warning(str(error))
        self.messages.append(str(error))
        self.had_warning = True

    def attempt(self, action: Callable[..., T], *args, **kwargs) -> Optional[T]:
        """
        Run one batch item, turning a GscError into a warning.

        LoginPlease is not about the item and ends the whole command.

        Args:
            action: Callable performing the item
            *args: Positional arguments for action
            **kwargs: Keyword arguments for action

        Returns:
            The action's result, or None if it failed
        """
        try:
            return action(*args, **kwargs)
        except LoginPlease:
            raise
        except GscError as e:
            self.warn(e)
            return None
