"""CLI entry point."""

import sys
from typing import Optional

from gsc.commands import apply_options, dispatch_command, get_client
from gsc.constants import EXIT_ERROR, EXIT_OK, EXIT_WARNING
from gsc.errors import Cancelled, GscError
from gsc.logging_config import resolve_level, setup_logging
from gsc.parser import parse_args
from gsc.repl import repl_loop
from gsc.utils import print_error, print_output


def run(argv: list[str], debug: bool = False) -> int:
    """
    Parse and run one command line.

    Returns:
        Exit status: 0 success, 1 error, 2 completed with warnings
    """
    logger = setup_logging('gsc', log_level=resolve_level(debug=debug), timestamps=debug)

    try:
        invocation = parse_args(argv)
        options = invocation.options
        setup_logging('gsc', log_level=resolve_level(options.verbose, options.quiet, debug))
        client = get_client()
        apply_options(client, options)
        response = dispatch_command(invocation.request, client)
    except Cancelled as e:
        print_error(e)
        return EXIT_ERROR
    except (GscError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print_error(e)
        return EXIT_ERROR

    print_output(response.message)
    return EXIT_WARNING if response.had_warning else EXIT_OK


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for CLI."""
    if argv is None:
        argv = sys.argv[1:]
    debug = '--debug' in argv
    argv = [arg for arg in argv if arg != '--debug']

    if not argv:
        logger = setup_logging('gsc', log_level=resolve_level(debug=debug), timestamps=debug)
        if debug:
            logger.info("Debug logging enabled")
        repl_loop(debug=debug)
        sys.exit(EXIT_OK)

    sys.exit(run(argv, debug=debug))


if __name__ == "__main__":
    main()
