"""Tests for logging setup and sensitive data masking."""

import logging

from gsc.logging_config import SensitiveDataFilter, resolve_level, verbosity_to_level


def make_record(msg, args=()):
    return logging.LogRecord('gsc', logging.INFO, __file__, 1, msg, args, None)


def test_filter_masks_cookie_and_password():
    log_filter = SensitiveDataFilter()
    record = make_record('Cookie: session=abc123 password=hunter2')

    log_filter.filter(record)

    assert 'abc123' not in record.msg
    assert 'hunter2' not in record.msg
    assert 'session=' in record.msg


def test_filter_masks_args():
    log_filter = SensitiveDataFilter()
    record = make_record('header %s', ('Authorization: Basic YWxpY2U6cHc=',))

    log_filter.filter(record)

    assert 'YWxpY2U6cHc=' not in record.args[0]


def test_verbosity_to_level():
    assert verbosity_to_level(0, 0) == 'WARNING'
    assert verbosity_to_level(1, 0) == 'INFO'
    assert verbosity_to_level(5, 0) == 'DEBUG'
    assert verbosity_to_level(0, 1) == 'ERROR'
    assert verbosity_to_level(1, 1) == 'WARNING'


def test_resolve_level(monkeypatch):
    monkeypatch.delenv('LOG_LEVEL', raising=False)
    assert resolve_level() == 'WARNING'
    assert resolve_level(debug=True, quiet=1) == 'DEBUG'

    monkeypatch.setenv('LOG_LEVEL', 'INFO')
    assert resolve_level() == 'INFO'
    assert resolve_level(quiet=1) == 'ERROR'
