"""
GB Inspector Error Hierarchy
============================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from GBInspectorError, allowing callers to catch
every decoding-related error with a single except clause if desired.

Exception Hierarchy
-------------------
GBInspectorError (base)
├── TruncatedImageError - image shorter than a required byte window
│   └── TruncatedInstructionError - instruction runs past end of image
├── UnknownOpcodeError - opcode byte absent from an instruction table
├── MissingLookupKeyError - header code absent from a name table
├── MalformedReferenceDataError - reference JSON does not match its schema
└── InvalidHeaderCodeError - RAM/ROM size code outside the hardware tables

Design Philosophy
-----------------
Every error is raised by the library and handled by the caller. Nothing in
the decoding core terminates the process: the command-line driver decides
whether an error aborts the run or whether the walker resynchronizes and
continues (see gb_inspector.cli.errors).

Each exception keeps the offending offset or code as attributes, so callers
can build their own diagnostics. The default message names them in hex:
    unknown opcode 0xD3 at offset 0x150
    instruction at offset 0x7ffe needs 3 bytes, only 2 available
"""

from pathlib import Path
from typing import Optional, Union


# =============================================================================
# Base Exception Class
# =============================================================================

class GBInspectorError(Exception):
    """
    Base exception for all GB Inspector errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch every decoding error with a single except clause:

        try:
            records = disasm.disassemble_rom(image)
        except GBInspectorError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Image Bounds Exceptions
# =============================================================================

class TruncatedImageError(GBInspectorError):
    """
    The ROM image is shorter than a window the decoder needs to read.

    Raised when:
    - The cartridge header window (0x134-0x14F) is not fully present
    - The entrypoint word at 0x102 is not fully present
    - A decode step is requested at an offset beyond the image

    Attributes:
        offset: Start of the window that was requested
        required: Number of bytes the window needs
        available: Number of bytes actually present from offset
    """

    def __init__(
        self,
        offset: int,
        required: int,
        available: int,
        message: str = "",
    ):
        self.offset = offset
        self.required = required
        self.available = max(available, 0)
        if not message:
            message = (
                f"image truncated at offset 0x{offset:x}: "
                f"need {required} bytes, only {self.available} available"
            )
        super().__init__(message)


class TruncatedInstructionError(TruncatedImageError):
    """
    An instruction's encoded length runs past the end of the image.

    The walker raises this instead of reading out of bounds. It always
    refers to the last instruction of the image, since every earlier one
    was fully present.
    """

    def __init__(self, offset: int, mnemonic: str, required: int, available: int):
        self.mnemonic = mnemonic
        message = (
            f"instruction {mnemonic} at offset 0x{offset:x} needs {required} "
            f"bytes, only {max(available, 0)} available"
        )
        super().__init__(offset, required, available, message)


# =============================================================================
# Decoding Exceptions
# =============================================================================

class UnknownOpcodeError(GBInspectorError):
    """
    An opcode byte has no entry in the instruction table.

    Unknown opcodes are a hard decode error, never a default or no-op
    instruction. The prefixed flag tells which table was consulted.

    Attributes:
        opcode: The byte value that failed to resolve
        prefixed: True if the lookup was in the CB-prefixed table
        offset: Image offset of the opcode, if known
    """

    def __init__(self, opcode: int, prefixed: bool = False, offset: Optional[int] = None):
        self.opcode = opcode
        self.prefixed = prefixed
        self.offset = offset
        table = "prefixed" if prefixed else "unprefixed"
        message = f"unknown opcode 0x{opcode:02X} in {table} table"
        if offset is not None:
            message += f" at offset 0x{offset:x}"
        super().__init__(message)

    def at(self, offset: int) -> "UnknownOpcodeError":
        """Return a copy of this error bound to an image offset."""
        return UnknownOpcodeError(self.opcode, self.prefixed, offset)


class InvalidHeaderCodeError(GBInspectorError):
    """
    A RAM or ROM size code is outside the fixed hardware table.

    These tables are defined by the hardware, so an unlisted code means the
    header is corrupt (or not a Game Boy header at all).
    """

    def __init__(self, field_name: str, code: int):
        self.field_name = field_name
        self.code = code
        super().__init__(f"invalid {field_name} code 0x{code:02X}")


# =============================================================================
# Reference Data Exceptions
# =============================================================================

class MissingLookupKeyError(GBInspectorError):
    """
    A header code has no entry in an auxiliary name table.

    Raised by NameTable.lookup() for cartridge types and licensee codes.
    Missing names are never silently ignored.
    """

    def __init__(self, code: Union[int, str], table: str):
        self.code = code
        self.table = table
        key = f"0x{code:02X}" if isinstance(code, int) else repr(code)
        super().__init__(f"code {key} not found in {table} table")


class MalformedReferenceDataError(GBInspectorError):
    """
    A reference JSON document fails to parse into the expected schema.

    Raised when:
    - The file cannot be read or is not valid JSON
    - The root is not an object keyed by "0xNN" strings
    - An instruction entry is missing a field or has the wrong type
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        self.detail = message
        if self.path is not None:
            message = f"{self.path}: {message}"
        super().__init__(message)
