"""Utility functions for CLI output and terminal prompts."""

import shutil
import sys
import textwrap
from datetime import datetime
from typing import Sequence

from prompt_toolkit import prompt as pt_prompt

from gsc.errors import Cancelled, PasswordMismatch

HANGING_INDENT = "    "


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def format_byte_count(size_bytes: int) -> str:
    """Exact byte count with thousands separators, e.g. "12,345"."""
    return f"{size_bytes:,}"


def format_datetime(value: datetime) -> str:
    """
    Render a server timestamp in local time.

    Args:
        value: Timezone-aware datetime

    Returns:
        e.g. "Tue 05 Mar, 23:59 (-0600)"
    """
    return value.astimezone().strftime('%a %d %b, %H:%M (%z)')


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def format_table(rows: Sequence[Sequence[str]], aligns: str, separators: Sequence[str] = ()) -> str:
    """
    Lay out rows of cells in aligned columns.

    Args:
        rows: Table rows; every row has len(aligns) cells
        aligns: One character per column, 'l' (left) or 'r' (right)
        separators: Text placed before each column (default two spaces
            between columns, nothing before the first)

    Returns:
        Table text, one line per row, without trailing newline
    """
    if not rows:
        return ""
    if not separators:
        separators = [""] + ["  "] * (len(aligns) - 1)

    widths = [max(len(row[i]) for row in rows) for i in range(len(aligns))]
    lines = []
    for row in rows:
        parts = []
        for i, cell in enumerate(row):
            is_last = i == len(aligns) - 1
            if aligns[i] == 'r':
                cell = cell.rjust(widths[i])
            elif not is_last:
                cell = cell.ljust(widths[i])
            parts.append(separators[i] + cell)
        lines.append("".join(parts))
    return "\n".join(lines)


def hanging(text: str) -> str:
    """Wrap text to the terminal width with a hanging indent."""
    width = shutil.get_terminal_size().columns - len(HANGING_INDENT)
    return textwrap.indent(textwrap.fill(text, max(width, 20)), HANGING_INDENT)


def read_password(question: str) -> str:
    """
    Read a password without echoing it.

    Falls back to reading a plain line when stdin is not a terminal.

    Raises:
        Cancelled: If input is closed
    """
    if sys.stdin.isatty():
        try:
            return pt_prompt(question, is_password=True)
        except EOFError:
            raise Cancelled() from None
    sys.stderr.write(question)
    sys.stderr.flush()
    line = sys.stdin.readline()
    if not line:
        raise Cancelled()
    return line.rstrip('\n')


def get_matching_passwords(username: str, read=read_password) -> str:
    """
    Ask for a new password twice.

    Args:
        username: Account the password is for
        read: Password reader (injectable for tests)

    Raises:
        PasswordMismatch: If the two entries differ
    """
    password1 = read(f"New password for {username}: ")
    password2 = read(f"Confirm password for {username}: ")
    if password1 != password2:
        raise PasswordMismatch()
    return password1


def number_lines(text: str) -> str:
    """Prefix every line with its right-aligned line number."""
    lines = text.splitlines(keepends=True)
    width = len(str(len(lines)))
    return "".join(f"{i:>{width}}  {line}" for i, line in enumerate(lines, 1))


def print_output(message: str) -> None:
    """Write command output to stdout, adding a newline only if it lacks one."""
    if not message:
        return
    sys.stdout.write(message if message.endswith('\n') else message + '\n')
    sys.stdout.flush()


def print_error(error: BaseException) -> None:
    """
    Print ``Error: <message>`` and then each underlying cause on its own line.
    """
    print(f"Error: {error}", file=sys.stderr)
    cause = error.__cause__
    while cause is not None:
        print(f"  caused by: {cause}", file=sys.stderr)
        cause = cause.__cause__
