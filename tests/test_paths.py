"""Tests for the remote path model."""

import pytest

from gsc.errors import ParseError
from gsc.paths import (
    LocalArg,
    RemoteArg,
    RemoteDestination,
    RemotePattern,
    looks_like_bare_hw,
    parse_cp_arg,
    parse_hw_number,
    parse_hw_spec,
    parse_remote_destination,
    parse_remote_pattern,
)


def test_parse_hw_spec_whole_homework():
    """Test that hw3 and hw3: both mean the whole homework."""
    assert parse_hw_spec('hw3') == RemotePattern(3, '')
    assert parse_hw_spec('hw3:') == RemotePattern(3, '')


def test_parse_hw_spec_with_pattern():
    assert parse_hw_spec('hw12:*.c') == RemotePattern(12, '*.c')


@pytest.mark.parametrize('token', ['hw', 'hwx', 'homework3', '3', 'hw3x', ''])
def test_parse_hw_spec_rejects_malformed(token):
    """Test malformed homework specs raise ParseError naming the expectation."""
    with pytest.raises(ParseError) as exc_info:
        parse_hw_spec(token)

    assert exc_info.value.expected == 'homework spec'
    assert exc_info.value.literal == token


def test_parse_remote_pattern_requires_colon():
    assert parse_remote_pattern('hw3:foo.c') == RemotePattern(3, 'foo.c')
    assert parse_remote_pattern('hw3:') == RemotePattern(3, '')

    with pytest.raises(ParseError, match='remote file spec'):
        parse_remote_pattern('hw3')


def test_pattern_name_may_contain_colon():
    assert parse_remote_pattern('hw3:a:b') == RemotePattern(3, 'a:b')


def test_whole_hw_predicate():
    """Test is_whole_hw is true exactly when the name is empty."""
    assert parse_remote_pattern('hw3:').is_whole_hw()
    assert not parse_remote_pattern('hw3:foo.c').is_whole_hw()


@pytest.mark.parametrize('text', ['hw3:foo.c', 'hw0:*.txt', 'hw12:a b.c', 'hw3:'])
def test_display_round_trip(text):
    """Test str(parse(s)) == s for remote patterns."""
    assert str(parse_remote_pattern(text)) == text


def test_display_normalizes_bare_homework():
    assert str(parse_hw_spec('hw3')) == 'hw3:'


def test_parse_cp_arg_local_and_remote():
    assert parse_cp_arg('lab.c') == LocalArg('lab.c')
    assert parse_cp_arg(':hw3') == LocalArg('hw3')
    assert parse_cp_arg('hw3:lab.c') == RemoteArg(RemotePattern(3, 'lab.c'))
    assert parse_cp_arg('hw3:') == RemoteArg(RemotePattern(3, ''))


def test_parse_cp_arg_bare_hw_is_local_without_all():
    assert parse_cp_arg('hw3') == LocalArg('hw3')
    assert parse_cp_arg('hw3', whole_hw=True) == RemoteArg(RemotePattern(3, ''))


def test_parse_cp_arg_lone_colon_is_error():
    with pytest.raises(ParseError) as exc_info:
        parse_cp_arg(':')

    assert 'local filename' in str(exc_info.value)


def test_parse_cp_arg_bad_remote_spec():
    with pytest.raises(ParseError):
        parse_cp_arg('src/dir:file')


def test_cp_arg_display():
    assert str(LocalArg('notes.txt')) == ':notes.txt'
    assert str(RemoteArg(RemotePattern(2, 'x'))) == 'hw2:x'
    assert not LocalArg('x').is_whole_hw()
    assert RemoteArg(RemotePattern(2, '')).is_whole_hw()


def test_parse_hw_number():
    assert parse_hw_number('hw7') == 7

    with pytest.raises(ParseError):
        parse_hw_number('hw7:foo')


def test_parse_remote_destination_forms():
    assert parse_remote_destination('hw4') == RemoteDestination(4, '')
    assert parse_remote_destination('hw4:new.c') == RemoteDestination(4, 'new.c')
    assert parse_remote_destination(':new.c') == RemoteDestination(None, 'new.c')
    assert parse_remote_destination('new.c') == RemoteDestination(None, 'new.c')


def test_parse_remote_destination_empty_name():
    with pytest.raises(ParseError):
        parse_remote_destination(':')


def test_destination_resolve_fills_missing_parts():
    src = RemotePattern(3, 'old.c')

    assert RemoteDestination(4, '').resolve(src) == RemotePattern(4, 'old.c')
    assert RemoteDestination(None, 'new.c').resolve(src) == RemotePattern(3, 'new.c')
    assert RemoteDestination(5, 'new.c').resolve(src) == RemotePattern(5, 'new.c')


def test_destination_resolve_requires_something():
    with pytest.raises(ParseError):
        RemoteDestination(None, '').resolve(RemotePattern(3, 'old.c'))


def test_looks_like_bare_hw():
    assert looks_like_bare_hw('hw3')
    assert not looks_like_bare_hw('hw3:')
    assert not looks_like_bare_hw('homework')
