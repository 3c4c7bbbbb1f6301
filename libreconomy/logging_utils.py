"""Logging utilities for libreconomy simulations.

Provides color-coded console output so decision, reputation and error lines
are easy to tell apart while a simulation runs.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Decision engine output
    CYAN = "\033[96m"      # Reputation updates / info
    RED = "\033[91m"       # Errors
    GREEN = "\033[92m"     # Success/completion
    YELLOW = "\033[93m"    # Degraded outcomes (no feasible target)

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if LIBRECONOMY_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("LIBRECONOMY_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def is_verbose() -> bool:
    """Return True when per-agent/per-event output is requested."""
    return os.getenv("LIBRECONOMY_VERBOSE", "").lower() in ("1", "true", "yes")


def log_decision(message: str) -> None:
    """Log a decision engine result (blue)."""
    print(colored(f"{LOG_TAG_DECISION} {message}", Color.BLUE))


def log_reputation(message: str) -> None:
    """Log a reputation update or decay pass (cyan)."""
    print(colored(f"{LOG_TAG_REPUTATION} {message}", Color.CYAN))


def log_warning(message: str) -> None:
    """Log a degraded but valid outcome (yellow)."""
    print(colored(f"{LOG_TAG_WARNING} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error (red)."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


# Markers for operation types (color-blind accessible)
LOG_TAG_DECISION = "[•]"
LOG_TAG_REPUTATION = "[β]"
LOG_TAG_WARNING = "[~]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"
