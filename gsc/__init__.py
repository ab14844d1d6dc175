"""gsc: command-line client for the GSC homework submission server."""

__version__ = "0.1.0"
