import logging
import os
import re
import sys
from typing import Optional


class SensitiveDataFilter(logging.Filter):
    """Filter to mask passwords and session cookies in log records."""

    PATTERNS = [
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE), r'\1***MASKED***'),
        (re.compile(r'(cookie["\']?\s*[:=]\s*["\']?[^=\s"\']+=)([^"\'};\s,]+)', re.IGNORECASE), r'\1***MASKED***'),
        # Credentials first, then the scheme word in front of them
        (re.compile(r'(basic\s+)([^\s,}\'\"]+)', re.IGNORECASE), r'\1***MASKED***'),
        (re.compile(r'(authorization["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE), r'\1***MASKED***'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask sensitive data in the log message."""
        if isinstance(record.msg, str):
            for pattern, replacement in self.PATTERNS:
                record.msg = pattern.sub(replacement, record.msg)

        if hasattr(record, 'args') and record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._mask_value(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._mask_value(arg) for arg in record.args)

        return True

    def _mask_value(self, value):
        """Mask sensitive values in arguments."""
        if isinstance(value, str):
            for pattern, replacement in self.PATTERNS:
                value = pattern.sub(replacement, value)
        return value


def verbosity_to_level(verbose: int, quiet: int) -> str:
    """
    Map -v / -q counts onto a log level name.

    Args:
        verbose: Number of -v flags
        quiet: Number of -q flags

    Returns:
        Level name for setup_logging
    """
    if quiet > verbose:
        return 'ERROR'
    return ['WARNING', 'INFO', 'DEBUG'][min(verbose - quiet, 2)]


def resolve_level(verbose: int = 0, quiet: int = 0, debug: bool = False) -> str:
    """--debug wins, then the LOG_LEVEL env var, then -v / -q counts."""
    if debug:
        return 'DEBUG'
    env_level = os.getenv('LOG_LEVEL')
    if env_level and not (verbose or quiet):
        return env_level
    return verbosity_to_level(verbose, quiet)


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    timestamps: bool = False
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Diagnostics go to stderr so that command output on stdout stays clean
    for pipes (``gsc cat hw3:foo.c > foo.c``).

    Args:
        component_name: Name of the root logger of the component (e.g., 'gsc')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or WARNING
        timestamps: Use the long timestamped format (for --debug)

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'WARNING')

    level = getattr(logging, log_level.upper(), logging.WARNING)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if timestamps:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        formatter = logging.Formatter('%(message)s')

    handler.setFormatter(formatter)
    handler.addFilter(SensitiveDataFilter())

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
