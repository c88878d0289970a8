"""
Console output: reports to stdout, errors and log records to stderr.
"""

import logging
import sys


def write(message: str):
    """Writes text to stdout as is, without adding a new line."""
    sys.stdout.write(message)
    sys.stdout.flush()

def write_error(program: str, message: str):
    """Writes `program: message` to stderr."""
    print(f"{program}: {message}", file=sys.stderr)

def configure_logging(program: str, level: int = logging.WARNING):
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format=f"{program}: %(levelname)s: %(message)s",
        force=True,
    )
