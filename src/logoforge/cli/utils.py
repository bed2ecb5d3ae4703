"""
Utility functions for the CLI.

Exit code constants and output file naming.
"""

import re

# Exit codes (130 = common for SIGINT)
EXIT_SUCCESS = 0
EXIT_API_OR_NETWORK = 1
EXIT_VALIDATION_OR_CONFIG = 2
EXIT_CANCELLED = 130

DEFAULT_OUTPUT_STEM = "logoforge_logo"


def default_output_path(server_name: str, fmt: str) -> str:
    """Return the default file name: server name with whitespace runs as '_', plus extension."""
    stem = re.sub(r"\s+", "_", server_name.strip()) or DEFAULT_OUTPUT_STEM
    return f"{stem}.{fmt or 'png'}"


__all__ = [
    "DEFAULT_OUTPUT_STEM",
    "EXIT_SUCCESS",
    "EXIT_API_OR_NETWORK",
    "EXIT_VALIDATION_OR_CONFIG",
    "EXIT_CANCELLED",
    "default_output_path",
]
