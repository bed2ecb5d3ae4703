"""
Logging configuration for logoforge.

Logging is configured lazily: library users who never call set_verbosity or
configure_logging get no output unless they configure logging themselves.

Verbosity levels:
- 0 (default): INFO; session activity and timings only
- 1: INFO plus the composed prompt text sent to the model
- 2: DEBUG plus prompt text; API calls and session state transitions

LOGOFORGE_VERBOSITY env (0/1/2) is read when the CLI starts; CLI flags win.
"""

import logging
import os

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "logoforge"
VERBOSITY_ENV = "LOGOFORGE_VERBOSITY"

# verbosity -> (logger level, log prompt text)
_VERBOSITY_LEVELS: dict[int, tuple[int, bool]] = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

_log_prompts: bool = False


def _root_logger() -> logging.Logger:
    """Return the package root logger, attaching a stderr handler on first use."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root


def set_verbosity(level: int) -> None:
    """
    Set logging verbosity.

    Levels below 0 behave like 0 and levels above 2 like 2. Secrets (API keys)
    are never logged at any level.
    """
    global _log_prompts
    clamped = min(max(level, 0), 2)
    log_level, prompts = _VERBOSITY_LEVELS[clamped]
    _root_logger().setLevel(log_level)
    _log_prompts = prompts


def log_prompts() -> bool:
    """Return True if prompt text should be logged at INFO (verbosity 1 or 2)."""
    return _log_prompts


def configure_logging(verbose_level: int = 0, quiet: bool = False) -> None:
    """
    Configure logging from the CLI or a library caller.

    quiet wins over verbose_level and limits output to warnings and errors.
    """
    global _log_prompts
    if quiet:
        _root_logger().setLevel(logging.WARNING)
        _log_prompts = False
        return
    set_verbosity(verbose_level)


def get_verbosity_from_env() -> int:
    """Read LOGOFORGE_VERBOSITY (0, 1 or 2); anything else means 0."""
    raw = os.environ.get(VERBOSITY_ENV, "0").strip()
    return int(raw) if raw in ("1", "2") else 0


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under logoforge (e.g. logoforge.core.session)."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "configure_logging",
    "get_logger",
    "get_verbosity_from_env",
    "log_prompts",
    "set_verbosity",
]
