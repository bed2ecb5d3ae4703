"""
Error handling for the CLI.

Maps library exceptions to exit codes and user messages so command bodies
stay free of try/except for known errors.
"""

import sys
from collections.abc import Callable

import click

from logoforge import (
    AuthenticationError,
    ConfigurationError,
    ImageProcessingError,
    LogoforgeError,
    ServiceError,
    ValidationError,
)
from logoforge.cli import progress
from logoforge.cli.utils import (
    EXIT_API_OR_NETWORK,
    EXIT_CANCELLED,
    EXIT_VALIDATION_OR_CONFIG,
)


def map_exception_to_exit(exc: BaseException) -> tuple[int, str]:
    """Map library and known exceptions to (exit_code, user_message)."""
    if isinstance(exc, ValidationError):
        msg = exc.args[0] if exc.args else "Validation failed."
        if getattr(exc, "field", None):
            msg = f"{msg} (field: {exc.field})"
        return (EXIT_VALIDATION_OR_CONFIG, msg)
    if isinstance(exc, ConfigurationError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Invalid configuration.")
    if isinstance(exc, AuthenticationError):
        msg = exc.args[0] if exc.args else "Authentication failed."
        return (EXIT_VALIDATION_OR_CONFIG, f"{msg} Reconnect your API key and try again.")
    if isinstance(exc, ImageProcessingError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Image processing failed.")
    if isinstance(exc, FileNotFoundError):
        return (EXIT_VALIDATION_OR_CONFIG, str(exc))
    if isinstance(exc, KeyboardInterrupt):
        return (EXIT_CANCELLED, "Cancelled.")
    if isinstance(exc, ServiceError):
        msg = exc.args[0] if exc.args else "Service error."
        if exc.retryable:
            msg = f"{msg} You can try again."
        return (EXIT_API_OR_NETWORK, msg)
    if isinstance(exc, LogoforgeError):
        return (EXIT_API_OR_NETWORK, exc.args[0] if exc.args else "An error occurred.")
    # Unhandled
    return (EXIT_API_OR_NETWORK, str(exc) if exc.args else "An unexpected error occurred.")


def report_error(msg: str, quiet: bool) -> None:
    """Print an error the way the current output mode expects."""
    if quiet:
        click.echo(msg, err=True)
    else:
        progress.print_error(msg)


def run_with_error_handling(
    fn: Callable[[], None],
    *,
    quiet: bool = False,
    debug: bool = False,
) -> None:
    """
    Run fn(); on exception map to exit code and message, print and sys.exit.
    """
    try:
        fn()
    except (LogoforgeError, FileNotFoundError) as e:
        code, msg = map_exception_to_exit(e)
        report_error(msg, quiet)
        sys.exit(code)
    except KeyboardInterrupt as e:
        code, msg = map_exception_to_exit(e)
        if not quiet:
            progress.print_warning(msg)
        sys.exit(code)
    except Exception as e:
        if debug:
            raise
        code, msg = map_exception_to_exit(e)
        report_error(msg, quiet)
        sys.exit(code)


__all__ = [
    "map_exception_to_exit",
    "report_error",
    "run_with_error_handling",
]
