"""Overwrite policy shared across one batch of copy operations."""

import sys
from enum import Enum
from typing import Callable, Optional

from prompt_toolkit import prompt as pt_prompt

from gsc.errors import Cancelled, DestinationExists
from gsc.logging_config import get_logger

logger = get_logger(__name__)

ANSWER_LEGEND = """  y - overwrite this file
  n - skip this file
  a - overwrite this and all remaining files
  c - cancel (stop copying now)"""


class OverwritePolicy(Enum):
    ALWAYS = 'always'
    NEVER = 'never'
    ASK = 'ask'

    @classmethod
    def from_name(cls, name: str) -> 'OverwritePolicy':
        try:
            return cls(name.lower())
        except ValueError:
            logger.warning(f"Unknown overwrite policy ‘{name}’ in config; asking instead")
            return cls.ASK


def read_answer(question: str) -> Optional[str]:
    """
    Ask one question on the terminal.

    Returns:
        The typed line, or None when input is closed
    """
    if sys.stdin.isatty():
        try:
            return pt_prompt(question)
        except EOFError:
            return None
    sys.stderr.write(question)
    sys.stderr.flush()
    line = sys.stdin.readline()
    if not line:
        return None
    return line.rstrip('\n')


class OverwriteState:
    """
    Mutable overwrite policy for one command.

    Only ASK -> ALWAYS ever happens (answer ``a``); once ALWAYS it stays so
    for the rest of the batch.
    """

    def __init__(self, policy: OverwritePolicy,
                 ask: Callable[[str], Optional[str]] = read_answer):
        self.policy = policy
        self._ask = ask

    def confirm(self, target: str) -> bool:
        """
        Decide whether an existing ``target`` may be overwritten.

        Args:
            target: Human-readable destination (local path or ``hwN:name``)

        Returns:
            True to overwrite, False to skip this one file

        Raises:
            DestinationExists: If the policy is NEVER
            Cancelled: If the user cancels or input is closed
        """
        if self.policy is OverwritePolicy.ALWAYS:
            return True
        if self.policy is OverwritePolicy.NEVER:
            raise DestinationExists(target)

        question = f"Overwrite ‘{target}’? [y/n/a/c] "
        while True:
            answer = self._ask(question)
            if answer is None:
                raise Cancelled()
            answer = answer.strip().lower()
            if answer in ('y', 'yes'):
                return True
            if answer in ('n', 'no'):
                logger.info(f"Skipping ‘{target}’")
                return False
            if answer in ('a', 'all'):
                self.policy = OverwritePolicy.ALWAYS
                return True
            if answer in ('c', 'cancel'):
                raise Cancelled()
            print(ANSWER_LEGEND, file=sys.stderr)
