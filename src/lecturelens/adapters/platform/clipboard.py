"""System clipboard access through the platform's copy tool."""

import logging
import shutil
import subprocess
import sys

logger = logging.getLogger(__name__)

LINUX_COMMANDS = (
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
)


def clipboard_command() -> list[str] | None:
    """Return the copy command for this platform, or None if there is none."""
    if sys.platform == "darwin":
        return ["pbcopy"]
    if sys.platform == "win32":
        return ["clip"]
    for command in LINUX_COMMANDS:
        if shutil.which(command[0]):
            return command
    return None


def copy_to_clipboard(text: str) -> bool:
    """Copy text to the system clipboard.

    Returns False if no clipboard tool is available.
    """
    command = clipboard_command()
    if command is None:
        logger.warning("No clipboard tool found (install wl-clipboard, xclip or xsel)")
        return False

    try:
        subprocess.run(command, input=text, text=True, check=True, capture_output=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning(f"Clipboard copy failed ({command[0]}): {e}")
        return False

    logger.debug(f"Copied {len(text)} chars with {command[0]}")
    return True
