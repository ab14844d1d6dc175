"""Shell-style filename matching for remote file patterns."""

import fnmatch
from typing import Callable

from gsc.errors import PatternError

Matcher = Callable[[str], bool]


def _check_brackets(pattern: str) -> None:
    """Reject unterminated ``[...]`` classes, which fnmatch would take literally."""
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c != '[':
            continue
        j = i
        if j < n and pattern[j] == '!':
            j += 1
        if j < n and pattern[j] == ']':
            j += 1
        while j < n and pattern[j] != ']':
            j += 1
        if j >= n:
            raise PatternError(pattern, "unclosed character class")
        i = j + 1


def compile_pattern(pattern: str) -> Matcher:
    """
    Build a matcher for remote filenames.

    Args:
        pattern: Glob such as ``*.c``; the empty string matches everything

    Returns:
        Predicate over filenames

    Raises:
        PatternError: If the glob is malformed
    """
    if not pattern:
        return lambda name: True
    _check_brackets(pattern)
    return lambda name: fnmatch.fnmatchcase(name, pattern)
