"""
Output formatting utilities for CLI.

Renders analysis results and condition statistics as terminal text.
"""
from __future__ import annotations

import json
import math
import sys
from typing import Any, Dict, Iterable

from colorama import Fore, Style


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats with None so the output is strict JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def format_result_json(data: Dict[str, Any]) -> str:
    """Return an indented JSON rendering of an analysis result dict."""
    cleaned = {key: _json_safe(value) for key, value in data.items()}
    return json.dumps(cleaned, ensure_ascii=False, indent=2)


def print_stats(lines: Iterable[str]) -> None:
    """Print condition statistics, highlighting the header line."""
    for line in lines:
        if line.startswith("["):
            print(f"{Fore.CYAN}{line}{Style.RESET_ALL}")
        else:
            print(line)


def print_result(message: str, success: bool = True) -> None:
    """Print command result to terminal.

    Args:
        message: Plain text to display.
        success: Whether the command succeeded (affects exit behavior).
    """
    print(message)

    if not success:
        sys.exit(1)


def print_error(message: str) -> None:
    """Print error message to stderr and exit with code 1.

    Args:
        message: Error message to display.
    """
    print(f"{Fore.RED}Error: {message}{Style.RESET_ALL}", file=sys.stderr)
    sys.exit(1)
