"""Command request and response data types for CLI."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional, Union

from gsc.messages import UserRole
from gsc.overwrite import OverwritePolicy
from gsc.paths import CpArg, RemoteDestination, RemotePattern


@dataclass(frozen=True)
class GlobalOptions:
    """Options accepted by every command (``-u``, ``-v``, ``-q``, ``-j``/``-H``)."""

    user: Optional[str] = None
    verbose: int = 0
    quiet: int = 0
    json: Optional[bool] = None


@dataclass(frozen=True)
class AuthCommand:
    """Log in; the password is prompted for."""

    username: str
    command: Literal["auth"] = "auth"


@dataclass(frozen=True)
class CreateCommand:
    """Create a new account; the password is prompted for twice."""

    username: str
    command: Literal["create"] = "create"


@dataclass(frozen=True)
class DeauthCommand:
    """Forget stored credentials."""

    command: Literal["deauth"] = "deauth"


@dataclass(frozen=True)
class PasswdCommand:
    """Change the password of the selected user."""

    command: Literal["passwd"] = "passwd"


@dataclass(frozen=True)
class WhoamiCommand:
    """Print the logged-in username."""

    command: Literal["whoami"] = "whoami"


@dataclass(frozen=True)
class LsCommand:
    """List remote files matching homework specs."""

    patterns: tuple[RemotePattern, ...]
    command: Literal["ls"] = "ls"


@dataclass(frozen=True)
class CatCommand:
    """Print remote files."""

    patterns: tuple[RemotePattern, ...]
    number_lines: bool = False
    command: Literal["cat"] = "cat"


@dataclass(frozen=True)
class CpCommand:
    """Copy files to or from the server."""

    srcs: tuple[CpArg, ...]
    dst: CpArg
    overwrite: Optional[OverwritePolicy] = None
    command: Literal["cp"] = "cp"


@dataclass(frozen=True)
class MvCommand:
    """Rename a remote file or move it to another homework."""

    src: RemotePattern
    dst: RemoteDestination
    overwrite: Optional[OverwritePolicy] = None
    command: Literal["mv"] = "mv"


@dataclass(frozen=True)
class RmCommand:
    """Remove remote files."""

    patterns: tuple[RemotePattern, ...]
    command: Literal["rm"] = "rm"


@dataclass(frozen=True)
class StatusCommand:
    """User status, or the status of one submission."""

    hw: Optional[int] = None
    command: Literal["status"] = "status"


@dataclass(frozen=True)
class PartnerCommand:
    """Send, accept or cancel a partner request."""

    action: Literal["request", "accept", "cancel"]
    hw: int
    partner: str
    command: Literal["partner"] = "partner"


@dataclass(frozen=True)
class EvalGetCommand:
    """Show one self-evaluation item."""

    hw: int
    number: int
    command: Literal["eval get"] = "eval get"


@dataclass(frozen=True)
class EvalSetCommand:
    """Answer one self-evaluation item."""

    hw: int
    number: int
    score: float
    explanation: str = ""
    command: Literal["eval set"] = "eval set"


@dataclass(frozen=True)
class AdminCsvCommand:
    """Print the grade spreadsheet."""

    command: Literal["admin csv"] = "admin csv"


@dataclass(frozen=True)
class AdminAddUserCommand:
    """Add a user with a role."""

    username: str
    role: UserRole = UserRole.STUDENT
    command: Literal["admin add_user"] = "admin add_user"


@dataclass(frozen=True)
class AdminDelUserCommand:
    """Delete a user."""

    username: str
    command: Literal["admin del_user"] = "admin del_user"


@dataclass(frozen=True)
class AdminDivorceCommand:
    """End the partnership on one submission."""

    hw: int
    username: str
    command: Literal["admin divorce"] = "admin divorce"


@dataclass(frozen=True)
class AdminExtendCommand:
    """Move a submission's due date (or self-eval date with ``-e``)."""

    hw: int
    username: str
    date: datetime
    eval_date: bool = False
    command: Literal["admin extend"] = "admin extend"


@dataclass(frozen=True)
class AdminPartnersCommand:
    """Show who owns a submission."""

    hw: int
    username: str
    command: Literal["admin partners"] = "admin partners"


@dataclass(frozen=True)
class AdminSetExamCommand:
    """Record an exam grade."""

    exam: int
    username: str
    points: int
    possible: int
    command: Literal["admin set_exam"] = "admin set_exam"


@dataclass(frozen=True)
class AdminSubmissionsCommand:
    """List every submission of a homework."""

    hw: int
    command: Literal["admin submissions"] = "admin submissions"


CommandRequest = Union[
    AuthCommand,
    CreateCommand,
    DeauthCommand,
    PasswdCommand,
    WhoamiCommand,
    LsCommand,
    CatCommand,
    CpCommand,
    MvCommand,
    RmCommand,
    StatusCommand,
    PartnerCommand,
    EvalGetCommand,
    EvalSetCommand,
    AdminCsvCommand,
    AdminAddUserCommand,
    AdminDelUserCommand,
    AdminDivorceCommand,
    AdminExtendCommand,
    AdminPartnersCommand,
    AdminSetExamCommand,
    AdminSubmissionsCommand,
]


@dataclass(frozen=True)
class Invocation:
    """A parsed command line: the command plus its global options."""

    request: CommandRequest
    options: GlobalOptions = field(default_factory=GlobalOptions)


@dataclass(frozen=True)
class CommandResponse:
    """What a handler produced: text to print and whether any item failed."""

    message: str
    had_warning: bool = False
