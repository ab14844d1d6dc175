"""Command handler functions for CLI operations."""

from typing import Optional

from gsc.client import GscClient
from gsc.config import Config, default_config_path
from gsc.copy import CopyEngine
from gsc.errors import LoginPlease, ServerError, Warnings
from gsc.listing import FileListing
from gsc.logging_config import get_logger
from gsc.messages import (
    Eval,
    ExamGrade,
    FileMeta,
    FileMetaChange,
    PartnerRequest,
    PartnerRequestStatus,
    SelfEvalChange,
    Submission,
    SubmissionChange,
    SubmissionShort,
    User,
    UserChange,
)
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
    CommandResponse,
    CpCommand,
    CreateCommand,
    DeauthCommand,
    EvalGetCommand,
    EvalSetCommand,
    GlobalOptions,
    LsCommand,
    MvCommand,
    PartnerCommand,
    PasswdCommand,
    RmCommand,
    StatusCommand,
    WhoamiCommand,
)
from gsc.overwrite import OverwritePolicy, OverwriteState
from gsc.paths import RemoteDestination, RemotePattern
from gsc.utils import (
    format_byte_count,
    format_datetime,
    format_file_size,
    format_percentage,
    format_table,
    get_matching_passwords,
    hanging,
    number_lines,
    read_password,
)

logger = get_logger(__name__)


_client: Optional[GscClient] = None

_PARTNER_STATUS = {
    "request": PartnerRequestStatus.OUTGOING,
    "accept": PartnerRequestStatus.ACCEPTED,
    "cancel": PartnerRequestStatus.CANCELED,
}


def get_client() -> GscClient:
    """
    Get or create global GscClient instance.

    Returns:
        GscClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new GscClient instance")
        config = Config(default_config_path())
        _client = GscClient(config)
    return _client


def apply_options(client: GscClient, options: GlobalOptions) -> None:
    """Make ``-u`` and ``-j``/``-H`` take effect for the next command."""
    client.config.on_behalf = options.user
    client.config.json_override = options.json


def _require_user(client: GscClient) -> str:
    user = client.config.select_user()
    if not user:
        raise LoginPlease()
    return user


def _overwrite_state(policy: Optional[OverwritePolicy], config: Config) -> OverwriteState:
    if policy is None:
        policy = OverwritePolicy.from_name(config.get_overwrite_policy())
    return OverwriteState(policy)


# --- accounts ---

def handle_auth(cmd: AuthCommand, client: Optional[GscClient] = None) -> str:
    """
    Handle 'auth' command.

    Prompts for the password until the server accepts it; any error other
    than 401 Unauthorized ends the command.

    Args:
        cmd: AuthCommand with username
        client: Optional GscClient for dependency injection (testing)

    Returns:
        Empty string (confirmation is logged)
    """
    if client is None:
        client = get_client()
    while True:
        password = read_password(f"Password for {cmd.username}: ")
        try:
            client.authenticate(cmd.username, password)
            return ""
        except ServerError as e:
            if e.status != 401:
                raise
            logger.error(str(e))


def handle_create(cmd: CreateCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    password = get_matching_passwords(cmd.username, read=read_password)
    client.create_account(cmd.username, password)
    logger.info(f"Created account: {cmd.username}.")
    return ""


def handle_deauth(cmd: DeauthCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    client.config.clear_credentials()
    logger.info("Deauthenticated.")
    return ""


def handle_passwd(cmd: PasswdCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    user = _require_user(client)
    password = get_matching_passwords(user, read=read_password)
    client.change_password(user, password)
    logger.info(f"Changed password for user {user}.")
    return ""


def handle_whoami(cmd: WhoamiCommand, client: Optional[GscClient] = None) -> str:
    """
    Handle 'whoami' command.

    Raises:
        LoginPlease: If nobody is logged in
    """
    if client is None:
        client = get_client()
    username = client.config.get_username()
    if not username:
        raise LoginPlease()
    return username


# --- files ---

def _file_table(files: list[FileMeta]) -> str:
    rows = [
        [format_byte_count(meta.byte_count), format_datetime(meta.upload_time),
         meta.purpose.to_char(), meta.name]
        for meta in files
    ]
    return format_table(rows, 'rlll', separators=["", "  ", "  [", "] "])


def handle_ls(cmd: LsCommand, client: Optional[GscClient] = None,
              warnings: Optional[Warnings] = None) -> str:
    """
    Handle 'ls' command.

    Args:
        cmd: LsCommand with homework specs
        client: Optional GscClient for dependency injection (testing)
        warnings: Accumulator for specs that match nothing

    Returns:
        One table per spec (raw JSON file lists with -j)
    """
    if client is None:
        client = get_client()
    if warnings is None:
        warnings = Warnings()
    user = client.config.select_user()

    if client.config.json_output():
        return "\n".join(client.fetch_raw_file_list(user, pattern.hw) for pattern in cmd.patterns)

    listing = FileListing(client, user)
    sections = []
    for pattern in cmd.patterns:
        files = warnings.attempt(listing.require_nonempty_matching, pattern)
        if files is None:
            continue
        table = _file_table(files)
        if len(cmd.patterns) > 1:
            table = f"{pattern}:\n{table}"
        sections.append(table)
    return "\n\n".join(sections)


def handle_cat(cmd: CatCommand, client: Optional[GscClient] = None,
               warnings: Optional[Warnings] = None) -> str:
    """
    Handle 'cat' command.

    Returns:
        Contents of every matching file, in listing order
    """
    if client is None:
        client = get_client()
    if warnings is None:
        warnings = Warnings()
    listing = FileListing(client, client.config.select_user())

    chunks = []
    for pattern in cmd.patterns:
        files = warnings.attempt(listing.require_nonempty_matching, pattern)
        for meta in files or []:
            content = warnings.attempt(client.fetch_file_content, meta)
            if content is None:
                continue
            text = content.decode('utf-8', errors='replace')
            if cmd.number_lines and meta.purpose.is_text():
                text = number_lines(text)
            chunks.append(text)
    return "".join(chunks)


def handle_cp(cmd: CpCommand, client: Optional[GscClient] = None,
              warnings: Optional[Warnings] = None) -> str:
    """
    Handle 'cp' command.

    Args:
        cmd: CpCommand with sources, destination and overwrite policy
        client: Optional GscClient for dependency injection (testing)
        warnings: Accumulator for per-file failures

    Returns:
        Empty string (progress is logged)
    """
    if client is None:
        client = get_client()
    if warnings is None:
        warnings = Warnings()
    logger.debug(f"Executing cp: {[str(src) for src in cmd.srcs]} -> {cmd.dst}")
    listing = FileListing(client, client.config.select_user())
    overwrite = _overwrite_state(cmd.overwrite, client.config)
    CopyEngine(listing, client, overwrite, warnings).copy(cmd.srcs, cmd.dst)
    return ""


def _move(client: GscClient, listing: FileListing, src: RemotePattern,
          dst: RemoteDestination, overwrite: OverwriteState) -> None:
    meta = listing.require_exactly_one_matching(src)
    target = dst.resolve(RemotePattern(meta.hw, meta.name))

    new_hw = target.hw if target.hw != meta.hw else None
    new_name = target.name if target.name != meta.name else None
    if new_hw is None and new_name is None:
        logger.info("Source and destination are identical.")
        return

    if listing.find_exact(target.hw, target.name) is not None:
        if not overwrite.confirm(str(target)):
            return

    logger.info(f"Moving remote file ‘{meta}’ to ‘{target}’...")
    client.change_file(meta, FileMetaChange(hw=new_hw, name=new_name, overwrite=True))


def handle_mv(cmd: MvCommand, client: Optional[GscClient] = None) -> str:
    """
    Handle 'mv' command.

    The destination inherits whatever it leaves out (homework or name)
    from the source file. A single move, so any failure is an error.
    """
    if client is None:
        client = get_client()
    listing = FileListing(client, client.config.select_user())
    overwrite = _overwrite_state(cmd.overwrite, client.config)
    _move(client, listing, cmd.src, cmd.dst, overwrite)
    return ""


def handle_rm(cmd: RmCommand, client: Optional[GscClient] = None,
              warnings: Optional[Warnings] = None) -> str:
    if client is None:
        client = get_client()
    if warnings is None:
        warnings = Warnings()
    listing = FileListing(client, client.config.select_user())

    for pattern in cmd.patterns:
        files = warnings.attempt(listing.require_nonempty_matching, pattern)
        for meta in files or []:
            warnings.attempt(client.delete_file, meta)

    logger.info("Done.")
    return ""


# --- status ---

def _format_submission(hw: int, submission: Submission) -> str:
    rows = [["Submission status:", submission.status.describe()]]
    if submission.status.is_self_eval():
        rows.append(["Evaluation status:", submission.eval_status.value])
    rows.extend([
        ["Open date:", format_datetime(submission.open_date)],
        ["Submission due date:", format_datetime(submission.due_date)],
        ["Self-eval due date:", format_datetime(submission.eval_date)],
        ["Last modified:", format_datetime(submission.last_modified)],
        ["Quota remaining:", (
            f"{format_percentage(submission.quota_remaining())} "
            f"({format_file_size(submission.bytes_used)} of "
            f"{format_file_size(submission.bytes_quota)} used)"
        )],
    ])
    table = format_table(rows, 'll', separators=["  ", "  "])
    return f"hw{hw} ({submission.owners()})\n{table}"


def _submission_rows(submissions: list[SubmissionShort]) -> list[list[str]]:
    rows = []
    for submission in submissions:
        owners = submission.owner1.name
        if submission.owner2 is not None:
            owners += f" and {submission.owner2.name}"
        rows.append([
            f"hw{submission.assignment_number}",
            submission.status.describe(),
            format_percentage(100 * submission.grade),
            owners,
        ])
    return rows


def _format_user(user: User) -> str:
    lines = [f"{user.name} ({user.role.value})"]

    if user.submissions:
        lines.append("Submissions:")
        lines.append(format_table(_submission_rows(user.submissions), 'llrl',
                                  separators=["  ", "  ", "  ", "  "]))

    if user.partner_requests:
        lines.append("Partner requests:")
        rows = [[f"hw{request.assignment_number}", request.status.value, request.user]
                for request in user.partner_requests]
        lines.append(format_table(rows, 'lll', separators=["  ", "  ", "  "]))

    if user.exam_grades:
        lines.append("Exam grades:")
        rows = [[f"exam {grade.number}", f"{grade.points}/{grade.possible}"]
                for grade in user.exam_grades]
        lines.append(format_table(rows, 'lr', separators=["  ", "  "]))

    return "\n".join(lines)


def handle_status(cmd: StatusCommand, client: Optional[GscClient] = None) -> str:
    """
    Handle 'status' command.

    Without a homework shows the user record (submissions, partner requests,
    exam grades); with one shows that submission's dates and quota.
    """
    if client is None:
        client = get_client()
    user = _require_user(client)
    json_output = client.config.json_output()

    if cmd.hw is None:
        if json_output:
            return client.fetch_raw_user(user)
        return _format_user(client.fetch_user(user))

    if json_output:
        return client.fetch_raw_submission(user, cmd.hw)
    return _format_submission(cmd.hw, client.fetch_submission(user, cmd.hw))


# --- partners and evaluation ---

def handle_partner(cmd: PartnerCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    user = _require_user(client)
    request = PartnerRequest(
        assignment_number=cmd.hw,
        user=cmd.partner,
        status=_PARTNER_STATUS[cmd.action],
    )
    client.update_user(user, UserChange(partner_requests=[request]))
    logger.info(f"Partner {cmd.action} for hw{cmd.hw} with {cmd.partner} sent.")
    return ""


def _format_eval(hw: int, eval_: Eval) -> str:
    lines = [
        f"hw{hw} eval item {eval_.sequence} ({eval_.eval_type.value}, worth {eval_.value})",
        hanging(eval_.prompt),
    ]
    if eval_.self_eval is None:
        lines.append("Self evaluation: not yet answered")
    else:
        lines.append(f"Self evaluation: {format_percentage(100 * eval_.self_eval.score)}")
        if eval_.self_eval.explanation:
            lines.append(hanging(eval_.self_eval.explanation))
    if eval_.grader_eval is not None:
        grader = eval_.grader_eval
        lines.append(
            f"Grader evaluation ({grader.grader}, {grader.status}): "
            f"{format_percentage(100 * grader.score)}"
        )
        if grader.explanation:
            lines.append(hanging(grader.explanation))
    return "\n".join(lines)


def handle_eval_get(cmd: EvalGetCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    eval_ = client.fetch_eval(client.config.select_user(), cmd.hw, cmd.number)
    if client.config.json_output():
        return eval_.model_dump_json(by_alias=True)
    return _format_eval(cmd.hw, eval_)


def handle_eval_set(cmd: EvalSetCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    eval_ = client.fetch_eval(client.config.select_user(), cmd.hw, cmd.number)
    client.set_self_eval(eval_, SelfEvalChange(score=cmd.score, explanation=cmd.explanation))
    logger.info(f"Recorded self evaluation for hw{cmd.hw} item {cmd.number}.")
    return ""


# --- administration ---

def handle_admin_csv(cmd: AdminCsvCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.grades_csv()


def handle_admin_add_user(cmd: AdminAddUserCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    client.add_user(cmd.username, cmd.role)
    logger.info(f"Added {cmd.role.value} {cmd.username}.")
    return ""


def handle_admin_del_user(cmd: AdminDelUserCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    client.delete_user(cmd.username)
    logger.info(f"Deleted user {cmd.username}.")
    return ""


def handle_admin_divorce(cmd: AdminDivorceCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    client.update_submission(cmd.username, cmd.hw, SubmissionChange(remove_owner2=True))
    logger.info(f"Divorced hw{cmd.hw} of {cmd.username}.")
    return ""


def handle_admin_extend(cmd: AdminExtendCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    if cmd.eval_date:
        change = SubmissionChange(eval_date=cmd.date)
    else:
        change = SubmissionChange(due_date=cmd.date)
    client.update_submission(cmd.username, cmd.hw, change)
    logger.info(f"Extended hw{cmd.hw} for {cmd.username} to {format_datetime(cmd.date)}.")
    return ""


def handle_admin_partners(cmd: AdminPartnersCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    if client.config.json_output():
        return client.fetch_raw_submission(cmd.username, cmd.hw)
    submission = client.fetch_submission(cmd.username, cmd.hw)
    return f"hw{cmd.hw}: {submission.owners()}"


def handle_admin_set_exam(cmd: AdminSetExamCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    grade = ExamGrade(number=cmd.exam, points=cmd.points, possible=cmd.possible)
    client.update_user(cmd.username, UserChange(exam_grades=[grade]))
    logger.info(f"Set exam {cmd.exam} grade for {cmd.username}: {cmd.points}/{cmd.possible}.")
    return ""


def handle_admin_submissions(cmd: AdminSubmissionsCommand, client: Optional[GscClient] = None) -> str:
    if client is None:
        client = get_client()
    if client.config.json_output():
        return client.fetch_raw_assignment_submissions(cmd.hw)
    submissions = client.fetch_assignment_submissions(cmd.hw)
    return format_table(_submission_rows(submissions), 'llrl')


def dispatch_command(cmd_obj: CommandRequest, client: Optional[GscClient] = None) -> CommandResponse:
    """
    Run one parsed command.

    Clears the client's submission cache first, so nothing fetched by a
    previous REPL line is reused.

    Args:
        cmd_obj: Parsed command
        client: Optional GscClient for dependency injection (testing)

    Returns:
        CommandResponse with the text to print and the warning flag
    """
    if client is None:
        client = get_client()
    client.reset_cache()
    warnings = Warnings()

    if isinstance(cmd_obj, LsCommand):
        message = handle_ls(cmd_obj, client, warnings)
    elif isinstance(cmd_obj, CatCommand):
        message = handle_cat(cmd_obj, client, warnings)
    elif isinstance(cmd_obj, CpCommand):
        message = handle_cp(cmd_obj, client, warnings)
    elif isinstance(cmd_obj, RmCommand):
        message = handle_rm(cmd_obj, client, warnings)
    else:
        handler = _SIMPLE_HANDLERS.get(type(cmd_obj))
        if handler is None:
            raise TypeError(f"Unknown command type: {type(cmd_obj)}")
        message = handler(cmd_obj, client)

    return CommandResponse(message=message, had_warning=warnings.had_warning)


_SIMPLE_HANDLERS = {
    AuthCommand: handle_auth,
    CreateCommand: handle_create,
    DeauthCommand: handle_deauth,
    PasswdCommand: handle_passwd,
    WhoamiCommand: handle_whoami,
    StatusCommand: handle_status,
    MvCommand: handle_mv,
    PartnerCommand: handle_partner,
    EvalGetCommand: handle_eval_get,
    EvalSetCommand: handle_eval_set,
    AdminCsvCommand: handle_admin_csv,
    AdminAddUserCommand: handle_admin_add_user,
    AdminDelUserCommand: handle_admin_del_user,
    AdminDivorceCommand: handle_admin_divorce,
    AdminExtendCommand: handle_admin_extend,
    AdminPartnersCommand: handle_admin_partners,
    AdminSetExamCommand: handle_admin_set_exam,
    AdminSubmissionsCommand: handle_admin_submissions,
}
