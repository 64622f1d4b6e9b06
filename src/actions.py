"""
GitHub Actions input/output helpers.

Inputs arrive as ``INPUT_<NAME>`` environment variables; outputs are appended
to the file named by ``GITHUB_OUTPUT``; annotations are workflow commands
printed to stdout.
"""

import logging
import os
import sys

logger = logging.getLogger(__name__)


def input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, default: str = "") -> str:
    """Return the stripped value of an action input, or ``default`` if unset."""
    return os.environ.get(input_env_name(name), default).strip()


def set_output(name: str, value: str) -> None:
    """
    Publish a step output.

    Outside of Actions (no ``GITHUB_OUTPUT``) the output is only logged.
    """
    path = os.environ.get("GITHUB_OUTPUT")
    if not path:
        logger.debug(f"GITHUB_OUTPUT not set; output {name}={value}")
        return
    with open(path, "a", encoding="utf-8") as fh:
        fh.write(f"{name}={value}\n")


def add_mask(value: str) -> None:
    """Ask the runner to redact ``value`` from all later log output."""
    if value:
        _command("add-mask", value)


def error(message: str) -> None:
    _command("error", message)


def _command(command: str, value: str) -> None:
    # Newlines would end the workflow command early
    escaped = value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    sys.stdout.write(f"::{command}::{escaped}\n")
    sys.stdout.flush()
