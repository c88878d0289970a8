"""
Drive substitutions and network connections scraped from the `subst` and `net use` commands.
"""

import logging
import re
import subprocess


SUBST_COMMAND = ["subst"]
NET_USE_COMMAND = ["net", "use"]
COMMAND_TIMEOUT = 30  # seconds

NET_USE_STATUSES = {"ok", "disconnected", "unavailable"}
NET_USE_ROW = re.compile(r"^(?P<status>\S+)\s+(?P<drive>[A-Za-z]):\s+(?P<remote>\\\\\S.*?)(?:\s{2,}|\s*$)")

logger = logging.getLogger(__name__)


def run_command(command: list[str]) -> str|None:
    """Runs a helper command and returns its output, or None if it could not be run."""
    try:
        completed = subprocess.run(command, capture_output=True, text=True, errors="replace",
                                   timeout=COMMAND_TIMEOUT, check=True)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("'%s' command failed: %s", " ".join(command), e)
        return None
    return completed.stdout

def parse_subst_output(text: str) -> dict[str, str]:
    """
    Parses lines like `X:\\: => C:\\some\\path` into {"X": "C:\\some\\path"}.
    """
    substitutions = {}
    for line in text.splitlines():
        head, separator, target = line.partition("=> ")
        if not separator or not head or not head[0].isalpha():
            continue
        target = target.strip()
        if target:
            substitutions[head[0].upper()] = target
    return substitutions

def parse_net_use_output(text: str) -> dict[str, str]:
    """
    Picks `<status> X: \\\\server\\share ...` rows out of the `net use` table.
    The remote path runs up to the next gap of two or more spaces, so share
    names with single spaces survive.
    """
    connections = {}
    for line in text.splitlines():
        match = NET_USE_ROW.match(line)
        if not match or match["status"].lower() not in NET_USE_STATUSES:
            continue
        connections[match["drive"].upper()] = match["remote"]
    return connections

def get_drive_substitutions() -> dict[str, str]:
    output = run_command(SUBST_COMMAND)
    return parse_subst_output(output) if output else {}

def get_net_use_connections() -> dict[str, str]:
    output = run_command(NET_USE_COMMAND)
    return parse_net_use_output(output) if output else {}
