"""REPL with prompt_toolkit for user interaction."""

import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from gsc.commands import apply_options, dispatch_command, get_client
from gsc.constants import (
    COMMANDS,
    EXIT_ERROR,
    HELP_TEXT,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from gsc.errors import Cancelled, GscError
from gsc.logging_config import get_logger, resolve_level, setup_logging
from gsc.parser import parse_command
from gsc.utils import print_error, print_output

logger = get_logger(__name__)


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def run_line(user_input: str, debug: bool = False) -> None:
    """
    Parse and run one REPL line, printing its output or error.

    Global options given on the line (``-u``, ``-v``...) apply to that
    line only.
    """
    invocation = parse_command(user_input)
    options = invocation.options
    setup_logging('gsc', log_level=resolve_level(options.verbose, options.quiet, debug))
    client = get_client()
    apply_options(client, options)
    response = dispatch_command(invocation.request, client)
    print_output(response.message)


def repl_loop(debug: bool = False) -> None:
    """Start interactive REPL with prompt_toolkit."""
    completer = WordCompleter(COMMANDS, ignore_case=True)
    history = InMemoryHistory()
    session: PromptSession = PromptSession(
        completer=completer, history=history, style=STYLE
    )

    show_welcome()

    while True:
        try:
            user_input = session.prompt([("class:prompt", PROMPT_TEXT)])

            if not user_input.strip():
                continue

            if user_input.strip() == "exit":
                print("Goodbye!")
                break

            if user_input.strip() == "help":
                print(HELP_TEXT)
                continue

            if user_input.strip() == "clear":
                clear_screen()
                show_welcome()
                continue

            run_line(user_input, debug=debug)

        except Cancelled as e:
            print_error(e)
            sys.exit(EXIT_ERROR)
        except (GscError, OSError) as e:
            logger.debug("Command failed", exc_info=True)
            print_error(e)
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break
