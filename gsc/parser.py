"""Command parser for CLI input."""

import shlex
from collections import Counter
from datetime import datetime
from typing import Optional

from gsc.errors import ParseError, UsageError
from gsc.messages import UserRole
from gsc.models import (
    AdminAddUserCommand,
    AdminCsvCommand,
    AdminDelUserCommand,
    AdminDivorceCommand,
    AdminExtendCommand,
    AdminPartnersCommand,
    AdminSetExamCommand,
    AdminSubmissionsCommand,
    AuthCommand,
    CatCommand,
    CommandRequest,
    CpCommand,
    CreateCommand,
    DeauthCommand,
    EvalGetCommand,
    EvalSetCommand,
    GlobalOptions,
    Invocation,
    LsCommand,
    MvCommand,
    PartnerCommand,
    PasswdCommand,
    RmCommand,
    StatusCommand,
    WhoamiCommand,
)
from gsc.overwrite import OverwritePolicy
from gsc.paths import (
    RemotePattern,
    parse_cp_arg,
    parse_hw_number,
    parse_hw_spec,
    parse_remote_destination,
    parse_remote_pattern,
)

_GLOBAL_FLAGS = {
    '-v': 'verbose', '--verbose': 'verbose',
    '-q': 'quiet', '--quiet': 'quiet',
    '-j': 'json', '--json': 'json',
    '-H': 'human', '--human': 'human',
}

_ALL_FLAG = {'-a': 'all', '--all': 'all'}
_OVERWRITE_FLAGS = {'-f': 'always', '-i': 'ask', '-n': 'never'}
_CAT_FLAGS = {**_ALL_FLAG, '-n': 'number', '--number': 'number'}
_CP_FLAGS = {**_ALL_FLAG, **_OVERWRITE_FLAGS}
_ADD_USER_FLAGS = {'--grader': 'grader', '--admin': 'admin'}
_EXTEND_FLAGS = {'-e': 'eval', '--eval': 'eval'}

DATESPEC_FORMATS = (
    '%Y-%m-%d %H:%M:%S %z',
    '%Y-%m-%d %H:%M %z',
    '%Y-%m-%dT%H:%M:%S%z',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%d',
)


class _ArgScanner:
    """
    Separates options from positional arguments.

    Global options may appear anywhere on the line and accumulate here;
    command-specific flags are counted and returned to the caller.
    """

    def __init__(self):
        self.user: Optional[str] = None
        self.verbose = 0
        self.quiet = 0
        self.json: Optional[bool] = None

    def options(self) -> GlobalOptions:
        return GlobalOptions(user=self.user, verbose=self.verbose,
                             quiet=self.quiet, json=self.json)

    def scan(self, args: list[str], flags: Optional[dict] = None) -> tuple[list[str], Counter]:
        """
        Args:
            args: Tokens to scan
            flags: Command-specific flags, option string -> name

        Returns:
            (positional arguments, count of each command flag by name)

        Raises:
            UsageError: On an unknown option or a missing ``-u`` value
        """
        known = {**_GLOBAL_FLAGS, **(flags or {})}
        positionals: list[str] = []
        counts: Counter = Counter()
        only_positionals = False
        i = 0

        while i < len(args):
            arg = args[i]
            i += 1

            if only_positionals or arg == '-' or not arg.startswith('-'):
                positionals.append(arg)
                continue
            if arg == '--':
                only_positionals = True
                continue

            if arg.startswith('--'):
                name, sep, value = arg.partition('=')
                if name == '--user':
                    if not sep:
                        if i >= len(args):
                            raise UsageError("--user requires a USER argument")
                        value = args[i]
                        i += 1
                    self.user = value
                elif name in known and not sep:
                    self._count(known[name], counts)
                else:
                    raise UsageError(f"Unknown option ‘{arg}’")
                continue

            letters = arg[1:]
            for j, letter in enumerate(letters):
                if letter == 'u':
                    value = letters[j + 1:]
                    if not value:
                        if i >= len(args):
                            raise UsageError("-u requires a USER argument")
                        value = args[i]
                        i += 1
                    self.user = value
                    break
                name = known.get('-' + letter)
                if name is None:
                    raise UsageError(f"Unknown option ‘-{letter}’")
                self._count(name, counts)

        return positionals, counts

    def _count(self, name: str, counts: Counter) -> None:
        if name == 'verbose':
            self.verbose += 1
        elif name == 'quiet':
            self.quiet += 1
        elif name == 'json':
            self.json = True
        elif name == 'human':
            self.json = False
        else:
            counts[name] += 1


def _consumes_next(token: str) -> bool:
    """True if an option token takes the following token as its value."""
    if token == '--user':
        return True
    if token.startswith('--'):
        return False
    letters = token[1:]
    return letters.find('u') == len(letters) - 1


def _split_command(args: list[str]) -> tuple[list[str], Optional[str], list[str]]:
    """
    Split ``[options...] NAME rest...``.

    Returns:
        (leading options, command name or None, remaining tokens)
    """
    i = 0
    while i < len(args) and args[i].startswith('-') and args[i] not in ('-', '--'):
        if _consumes_next(args[i]):
            i += 1
        i += 1
    if i < len(args) and args[i] == '--':
        i += 1
    if i >= len(args):
        return args, None, []
    return args[:i], args[i], args[i + 1:]


def parse_command(input_line: str) -> Invocation:
    """Parse user input into an Invocation.

    Args:
        input_line: Raw user input from REPL

    Returns:
        Invocation holding the CommandRequest and global options

    Raises:
        UsageError: If the command line is malformed
        ParseError: If an argument has the wrong syntax
    """
    if not input_line.strip():
        raise UsageError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise UsageError(f"Invalid syntax: {e}") from e

    return parse_args(tokens)


def parse_args(argv: list[str]) -> Invocation:
    """Parse an already tokenized command line (e.g. ``sys.argv[1:]``)."""
    scanner = _ArgScanner()
    leading, command_name, rest = _split_command(argv)
    scanner.scan(leading)

    if command_name is None:
        raise UsageError("No command given (try 'help')")

    parsers = {
        "auth": _parse_auth,
        "create": _parse_create,
        "deauth": _parse_deauth,
        "passwd": _parse_passwd,
        "whoami": _parse_whoami,
        "ls": _parse_ls,
        "cat": _parse_cat,
        "cp": _parse_cp,
        "mv": _parse_mv,
        "rm": _parse_rm,
        "status": _parse_status,
        "partner": _parse_partner,
        "eval": _parse_eval,
        "admin": _parse_admin,
    }
    parse = parsers.get(command_name)
    if parse is None:
        raise UsageError(f"Unknown command: {command_name}")

    request = parse(scanner, rest)
    return Invocation(request=request, options=scanner.options())


def _expect_count(name: str, args: list[str], usage: str, low: int, high: Optional[int] = None) -> None:
    high = low if high is None else high
    if not low <= len(args) <= high:
        raise UsageError(f"usage: {name} {usage}".rstrip())


def _parse_int(token: str, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise ParseError(what, token) from None


def _parse_score(token: str) -> float:
    try:
        score = float(token)
    except ValueError:
        raise ParseError("score between 0.0 and 1.0", token) from None
    if not 0.0 <= score <= 1.0:
        raise ParseError("score between 0.0 and 1.0", token)
    return score


def parse_datespec(token: str) -> datetime:
    """
    Parse a due date such as ``2024-03-01 23:59:00 -0600``.

    Dates without an offset are taken as local time.

    Raises:
        ParseError: If no known format matches
    """
    for fmt in DATESPEC_FORMATS:
        try:
            value = datetime.strptime(token, fmt)
        except ValueError:
            continue
        if value.tzinfo is None:
            value = value.astimezone()
        return value
    raise ParseError("date (e.g. ‘2024-03-01 23:59:00 -0600’)", token)


def _overwrite_policy(counts: Counter) -> Optional[OverwritePolicy]:
    chosen = [name for name in ('always', 'ask', 'never') if counts[name]]
    if len(chosen) > 1:
        raise UsageError("-f, -i and -n are mutually exclusive")
    if not chosen:
        return None
    return OverwritePolicy(chosen[0])


def _parse_file_specs(tokens: list[str], whole_hw: bool) -> tuple[RemotePattern, ...]:
    """Parse cat/rm arguments; whole homeworks need ``-a``."""
    patterns = []
    for token in tokens:
        if whole_hw:
            patterns.append(parse_hw_spec(token))
            continue
        pattern = parse_remote_pattern(token)
        if pattern.is_whole_hw():
            raise UsageError(f"‘{token}’ names a whole homework; use -a to mean every file")
        patterns.append(pattern)
    return tuple(patterns)


def _parse_auth(scanner: _ArgScanner, args: list[str]) -> AuthCommand:
    """Parse 'auth USER' command."""
    args, _ = scanner.scan(args)
    _expect_count("auth", args, "USER", 1)
    return AuthCommand(username=args[0])


def _parse_create(scanner: _ArgScanner, args: list[str]) -> CreateCommand:
    """Parse 'create USER' command."""
    args, _ = scanner.scan(args)
    _expect_count("create", args, "USER", 1)
    return CreateCommand(username=args[0])


def _parse_deauth(scanner: _ArgScanner, args: list[str]) -> DeauthCommand:
    args, _ = scanner.scan(args)
    _expect_count("deauth", args, "", 0)
    return DeauthCommand()


def _parse_passwd(scanner: _ArgScanner, args: list[str]) -> PasswdCommand:
    args, _ = scanner.scan(args)
    _expect_count("passwd", args, "", 0)
    return PasswdCommand()


def _parse_whoami(scanner: _ArgScanner, args: list[str]) -> WhoamiCommand:
    args, _ = scanner.scan(args)
    _expect_count("whoami", args, "", 0)
    return WhoamiCommand()


def _parse_ls(scanner: _ArgScanner, args: list[str]) -> LsCommand:
    """Parse 'ls SPEC...' command."""
    args, _ = scanner.scan(args)
    if not args:
        raise UsageError("usage: ls SPEC...")
    return LsCommand(patterns=tuple(parse_hw_spec(token) for token in args))


def _parse_cat(scanner: _ArgScanner, args: list[str]) -> CatCommand:
    """Parse 'cat [-a] [-n] SPEC...' command."""
    args, counts = scanner.scan(args, _CAT_FLAGS)
    if not args:
        raise UsageError("usage: cat [-a] [-n] SPEC...")
    patterns = _parse_file_specs(args, whole_hw=counts['all'] > 0)
    return CatCommand(patterns=patterns, number_lines=counts['number'] > 0)


def _parse_cp(scanner: _ArgScanner, args: list[str]) -> CpCommand:
    """Parse 'cp [-a] [-f|-i|-n] SRC... DST' command."""
    args, counts = scanner.scan(args, _CP_FLAGS)
    if len(args) < 2:
        raise UsageError("usage: cp [-a] [-f|-i|-n] SRC... DST")
    whole_hw = counts['all'] > 0
    srcs = tuple(parse_cp_arg(token, whole_hw) for token in args[:-1])
    dst = parse_cp_arg(args[-1], whole_hw)
    return CpCommand(srcs=srcs, dst=dst, overwrite=_overwrite_policy(counts))


def _parse_mv(scanner: _ArgScanner, args: list[str]) -> MvCommand:
    """Parse 'mv [-f|-i|-n] SRC DST' command."""
    args, counts = scanner.scan(args, _OVERWRITE_FLAGS)
    _expect_count("mv", args, "[-f|-i|-n] SRC DST", 2)
    return MvCommand(
        src=parse_remote_pattern(args[0]),
        dst=parse_remote_destination(args[1]),
        overwrite=_overwrite_policy(counts),
    )


def _parse_rm(scanner: _ArgScanner, args: list[str]) -> RmCommand:
    """Parse 'rm [-a] SPEC...' command."""
    args, counts = scanner.scan(args, _ALL_FLAG)
    if not args:
        raise UsageError("usage: rm [-a] SPEC...")
    return RmCommand(patterns=_parse_file_specs(args, whole_hw=counts['all'] > 0))


def _parse_status(scanner: _ArgScanner, args: list[str]) -> StatusCommand:
    """Parse 'status [HW]' command."""
    args, _ = scanner.scan(args)
    _expect_count("status", args, "[HW]", 0, 1)
    if not args:
        return StatusCommand()
    return StatusCommand(hw=parse_hw_number(args[0]))


def _parse_partner(scanner: _ArgScanner, args: list[str]) -> PartnerCommand:
    """Parse 'partner request|accept|cancel HW USER' command."""
    leading, action, rest = _split_command(args)
    scanner.scan(leading)
    if action not in ("request", "accept", "cancel"):
        raise UsageError("usage: partner request|accept|cancel HW USER")
    rest, _ = scanner.scan(rest)
    _expect_count(f"partner {action}", rest, "HW USER", 2)
    return PartnerCommand(action=action, hw=parse_hw_number(rest[0]), partner=rest[1])


def _parse_eval(scanner: _ArgScanner, args: list[str]) -> CommandRequest:
    """Parse 'eval get HW NUMBER' and 'eval set HW NUMBER SCORE [EXPLANATION]'."""
    leading, action, rest = _split_command(args)
    scanner.scan(leading)
    rest, _ = scanner.scan(rest)

    if action == "get":
        _expect_count("eval get", rest, "HW NUMBER", 2)
        return EvalGetCommand(hw=parse_hw_number(rest[0]),
                              number=_parse_int(rest[1], "eval item number"))
    if action == "set":
        _expect_count("eval set", rest, "HW NUMBER SCORE [EXPLANATION]", 3, 4)
        return EvalSetCommand(
            hw=parse_hw_number(rest[0]),
            number=_parse_int(rest[1], "eval item number"),
            score=_parse_score(rest[2]),
            explanation=rest[3] if len(rest) > 3 else "",
        )
    raise UsageError("usage: eval get|set HW NUMBER ...")


def _parse_admin(scanner: _ArgScanner, args: list[str]) -> CommandRequest:
    """Parse the 'admin ...' subcommands."""
    leading, action, rest = _split_command(args)
    scanner.scan(leading)

    if action == "csv":
        rest, _ = scanner.scan(rest)
        _expect_count("admin csv", rest, "", 0)
        return AdminCsvCommand()

    if action == "add_user":
        rest, counts = scanner.scan(rest, _ADD_USER_FLAGS)
        _expect_count("admin add_user", rest, "[--grader|--admin] USER", 1)
        if counts['grader'] and counts['admin']:
            raise UsageError("--grader and --admin are mutually exclusive")
        role = UserRole.STUDENT
        if counts['grader']:
            role = UserRole.GRADER
        elif counts['admin']:
            role = UserRole.ADMIN
        return AdminAddUserCommand(username=rest[0], role=role)

    if action == "del_user":
        rest, _ = scanner.scan(rest)
        _expect_count("admin del_user", rest, "USER", 1)
        return AdminDelUserCommand(username=rest[0])

    if action == "divorce":
        rest, _ = scanner.scan(rest)
        _expect_count("admin divorce", rest, "HW USER", 2)
        return AdminDivorceCommand(hw=parse_hw_number(rest[0]), username=rest[1])

    if action == "extend":
        rest, counts = scanner.scan(rest, _EXTEND_FLAGS)
        _expect_count("admin extend", rest, "[-e] HW USER DATESPEC", 3)
        return AdminExtendCommand(
            hw=parse_hw_number(rest[0]),
            username=rest[1],
            date=parse_datespec(rest[2]),
            eval_date=counts['eval'] > 0,
        )

    if action == "partners":
        rest, _ = scanner.scan(rest)
        _expect_count("admin partners", rest, "HW USER", 2)
        return AdminPartnersCommand(hw=parse_hw_number(rest[0]), username=rest[1])

    if action == "set_exam":
        rest, _ = scanner.scan(rest)
        _expect_count("admin set_exam", rest, "EXAM USER POINTS POSSIBLE", 4)
        return AdminSetExamCommand(
            exam=_parse_int(rest[0], "exam number"),
            username=rest[1],
            points=_parse_int(rest[2], "points"),
            possible=_parse_int(rest[3], "points possible"),
        )

    if action == "submissions":
        rest, _ = scanner.scan(rest)
        _expect_count("admin submissions", rest, "HW", 1)
        return AdminSubmissionsCommand(hw=parse_hw_number(rest[0]))

    raise UsageError(
        "usage: admin csv|add_user|del_user|divorce|extend|partners|set_exam|submissions ..."
    )
