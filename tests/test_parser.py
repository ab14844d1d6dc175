"""Tests for the command-line parser."""

from datetime import datetime, timedelta, timezone

import pytest

from gsc.errors import ParseError, UsageError
from gsc.messages import UserRole
from gsc.models import (
    AdminAddUserCommand,
    AdminCsvCommand,
    AdminExtendCommand,
    AdminSetExamCommand,
    AuthCommand,
    CatCommand,
    CpCommand,
    EvalGetCommand,
    EvalSetCommand,
    LsCommand,
    MvCommand,
    PartnerCommand,
    RmCommand,
    StatusCommand,
    WhoamiCommand,
)
from gsc.overwrite import OverwritePolicy
from gsc.parser import parse_args, parse_command, parse_datespec
from gsc.paths import LocalArg, RemoteArg, RemoteDestination, RemotePattern


def test_parse_simple_commands():
    assert parse_command("whoami").request == WhoamiCommand()
    assert parse_command("auth alice").request == AuthCommand(username='alice')
    assert parse_command("status").request == StatusCommand()
    assert parse_command("status hw3").request == StatusCommand(hw=3)


def test_parse_ls():
    request = parse_command("ls hw3 'hw4:*.c'").request

    assert request == LsCommand(patterns=(RemotePattern(3, ''), RemotePattern(4, '*.c')))


def test_parse_cat_flags():
    request = parse_command("cat -n hw3:main.c").request
    assert request == CatCommand(patterns=(RemotePattern(3, 'main.c'),), number_lines=True)

    request = parse_command("cat -an hw3").request
    assert request == CatCommand(patterns=(RemotePattern(3, ''),), number_lines=True)


def test_whole_homework_needs_all_flag():
    """Test that cat and rm refuse a bare homework without -a."""
    with pytest.raises(UsageError):
        parse_command("rm hw3:")

    with pytest.raises(ParseError):
        parse_command("rm hw3")

    assert parse_command("rm -a hw3").request == RmCommand(patterns=(RemotePattern(3, ''),))


def test_parse_cp():
    request = parse_command("cp -f a.c b.c hw3:").request

    assert isinstance(request, CpCommand)
    assert request.srcs == (LocalArg('a.c'), LocalArg('b.c'))
    assert request.dst == RemoteArg(RemotePattern(3, ''))
    assert request.overwrite is OverwritePolicy.ALWAYS


def test_parse_cp_whole_homework():
    request = parse_command("cp -a hw3 out").request

    assert request.srcs == (RemoteArg(RemotePattern(3, '')),)
    assert request.dst == LocalArg('out')
    assert request.overwrite is None


def test_parse_cp_bare_hw_is_local_without_all():
    request = parse_command("cp foo.c hw3").request

    assert request.dst == LocalArg('hw3')


def test_overwrite_flags_are_exclusive():
    with pytest.raises(UsageError):
        parse_command("cp -f -n a.c hw3:")


def test_parse_cp_needs_two_arguments():
    with pytest.raises(UsageError):
        parse_command("cp a.c")


def test_parse_mv():
    request = parse_command("mv -n hw3:a.c :b.c").request

    assert request == MvCommand(
        src=RemotePattern(3, 'a.c'),
        dst=RemoteDestination(None, 'b.c'),
        overwrite=OverwritePolicy.NEVER,
    )


def test_parse_partner():
    request = parse_command("partner request hw2 bob").request

    assert request == PartnerCommand(action='request', hw=2, partner='bob')

    with pytest.raises(UsageError):
        parse_command("partner divorce hw2 bob")


def test_parse_eval():
    assert parse_command("eval get hw1 3").request == EvalGetCommand(hw=1, number=3)

    request = parse_command("eval set hw1 3 0.5 'half done'").request
    assert request == EvalSetCommand(hw=1, number=3, score=0.5, explanation='half done')


def test_eval_score_out_of_range():
    with pytest.raises(ParseError):
        parse_command("eval set hw1 3 1.5")

    with pytest.raises(ParseError):
        parse_command("eval set hw1 3 lots")


def test_parse_admin():
    assert parse_command("admin csv").request == AdminCsvCommand()
    assert parse_command("admin add_user --grader carol").request == AdminAddUserCommand(
        username='carol', role=UserRole.GRADER
    )
    assert parse_command("admin set_exam 1 bob 45 50").request == AdminSetExamCommand(
        exam=1, username='bob', points=45, possible=50
    )

    with pytest.raises(UsageError):
        parse_command("admin add_user --grader --admin carol")


def test_parse_admin_extend():
    request = parse_command("admin extend -e hw3 bob '2024-03-01 23:59:00 -0600'").request

    assert isinstance(request, AdminExtendCommand)
    assert request.eval_date is True
    assert request.date == datetime(2024, 3, 1, 23, 59, tzinfo=timezone(timedelta(hours=-6)))


def test_global_options_anywhere():
    """Test that -u, -v, -j may come before or after the command name."""
    invocation = parse_args(['-v', 'ls', '-u', 'bob', 'hw1', '-j'])

    assert invocation.request == LsCommand(patterns=(RemotePattern(1, ''),))
    assert invocation.options.user == 'bob'
    assert invocation.options.verbose == 1
    assert invocation.options.json is True


def test_user_option_forms():
    assert parse_args(['-ubob', 'whoami']).options.user == 'bob'
    assert parse_args(['--user=bob', 'whoami']).options.user == 'bob'
    assert parse_args(['--user', 'bob', 'whoami']).options.user == 'bob'
    assert parse_args(['-vu', 'bob', 'whoami']).options.verbose == 1


def test_human_overrides_json():
    assert parse_args(['-j', 'status', '-H']).options.json is False
    assert parse_args(['status']).options.json is None


def test_double_dash_ends_options():
    request = parse_args(['cp', '--', '-weird.c', 'hw3:']).request

    assert request.srcs == (LocalArg('-weird.c'),)


def test_unknown_option():
    with pytest.raises(UsageError) as exc_info:
        parse_command("ls -x hw1")

    assert '-x' in str(exc_info.value)


def test_unknown_command():
    with pytest.raises(UsageError):
        parse_command("frobnicate")


def test_empty_and_unbalanced_input():
    with pytest.raises(UsageError):
        parse_command("   ")

    with pytest.raises(UsageError):
        parse_command("cat 'hw1:a")


def test_wrong_argument_count():
    with pytest.raises(UsageError) as exc_info:
        parse_command("auth")

    assert str(exc_info.value) == 'usage: auth USER'


def test_parse_datespec_formats():
    assert parse_datespec('2024-03-01').date() == datetime(2024, 3, 1).date()
    assert parse_datespec('2024-03-01 12:30').tzinfo is not None

    with pytest.raises(ParseError):
        parse_datespec('next tuesday')
