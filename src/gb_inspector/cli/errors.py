"""
CLI Error Reporting
===================

Maps the exceptions that reach the command line to a diagnostic on stderr
and a process exit code.

Exit codes:
    0  success
    1  the ROM image could not be decoded (header or instruction stream)
    2  invalid arguments, or the ROM file could not be opened
    3  unexpected internal error
    4  the reference data tables could not be loaded
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn, Optional, Tuple

import click

from gb_inspector.errors import GBInspectorError, MalformedReferenceDataError


class ExitCode(IntEnum):
    """Exit codes for gbdisasm."""
    SUCCESS = 0
    DECODE_ERROR = 1     # Header field, opcode or image bounds failure
    INVALID_ARGS = 2     # Invalid arguments or unreadable ROM file
    INTERNAL_ERROR = 3   # Unexpected internal error
    DATA_ERROR = 4       # Reference tables missing or malformed


def classify_error(error: Exception, error_type: Optional[str] = None) -> Tuple[ExitCode, str]:
    """
    Decide the exit code and diagnostic line for an exception.

    Args:
        error: The exception that was raised
        error_type: Optional prefix for decode diagnostics (e.g., "Decode")

    Returns:
        Tuple of (exit code, message)
    """
    if isinstance(error, MalformedReferenceDataError):
        # A broken table is a setup problem, not a property of the ROM
        return ExitCode.DATA_ERROR, (
            f"Reference data error: {error}\n"
            "Check --data-dir or $GB_INSPECTOR_DATA_DIR, or unset both "
            "to use the bundled tables."
        )

    if isinstance(error, GBInspectorError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        return ExitCode.DECODE_ERROR, f"{prefix}{error}"

    if isinstance(error, (click.BadParameter, OSError)):
        return ExitCode.INVALID_ARGS, f"Error: {error}"

    return ExitCode.INTERNAL_ERROR, f"Internal error: {error}"


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: Optional[str] = None,
) -> NoReturn:
    """
    Report an exception and terminate the process.

    In verbose mode a traceback follows the diagnostic for internal errors.

    Raises:
        SystemExit: Always, with the code chosen by classify_error()
    """
    code, message = classify_error(error, error_type)
    click.echo(message, err=True)
    if verbose and code == ExitCode.INTERNAL_ERROR:
        traceback.print_exc()
    sys.exit(code)
