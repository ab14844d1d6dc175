"""Tests for output formatting helpers."""

import pytest

from gsc.errors import PasswordMismatch
from gsc.utils import (
    format_byte_count,
    format_file_size,
    format_percentage,
    format_table,
    get_matching_passwords,
    number_lines,
    print_output,
)


def test_format_file_size():
    assert format_file_size(512) == '512 B'
    assert format_file_size(1536) == '1.50 KiB'
    assert format_file_size(5 * 1024 * 1024) == '5.00 MiB'


def test_format_byte_count():
    assert format_byte_count(12345) == '12,345'
    assert format_byte_count(7) == '7'


def test_format_percentage():
    assert format_percentage(87.26) == '87.3%'
    assert format_percentage(100) == '100.0%'


def test_format_table_alignment():
    rows = [['1', 'a.c'], ['1,000', 'long_name.c']]

    assert format_table(rows, 'rl') == '    1  a.c\n1,000  long_name.c'


def test_format_table_pads_inner_left_columns():
    rows = [['x', 'open', 'alice'], ['yy', 'closed', 'bob']]

    table = format_table(rows, 'lll', separators=['', ' | ', ' | '])

    assert table.splitlines() == ['x  | open   | alice', 'yy | closed | bob']


def test_format_table_empty():
    assert format_table([], 'rl') == ''


def test_number_lines():
    text = ''.join(f'line {i}\n' for i in range(10))

    numbered = number_lines(text).splitlines()

    assert numbered[0] == ' 1  line 0'
    assert numbered[9] == '10  line 9'


def test_number_lines_keeps_missing_final_newline():
    assert number_lines('a\nb') == '1  a\n2  b'


def test_get_matching_passwords():
    answers = iter(['pw', 'pw'])
    assert get_matching_passwords('alice', read=lambda q: next(answers)) == 'pw'

    answers = iter(['pw', 'other'])
    with pytest.raises(PasswordMismatch):
        get_matching_passwords('alice', read=lambda q: next(answers))


def test_print_output_adds_single_newline(capsys):
    print_output('hello')
    print_output('already\n')
    print_output('')

    assert capsys.readouterr().out == 'hello\nalready\n'
