"""
GB Inspector - Game Boy Cartridge ROM Inspector
===============================================

This package inspects Game Boy cartridge ROM images: it decodes the fixed
cartridge header and produces a linear disassembly of the Sharp SM83
machine code starting at the entrypoint.

Main Components
---------------
- **cartridge**: Header decoding (title, licensee, ROM/RAM sizes, checksums)
- **isa**: Instruction table model for the unprefixed and CB-prefixed
  opcode spaces
- **disassembler**: Sequential walker producing one record per instruction
- **refdata**: Loader for the JSON reference tables (bundled copies in data/)
- **report**: Line-oriented text report
- **cli**: Command-line tool (gbdisasm)

Quick Start
-----------
Decode a header:
    >>> from gb_inspector import decode_header
    >>> meta = decode_header(open("tetris.gb", "rb").read())
    >>> print(meta.title)

Disassemble from the entrypoint:
    >>> from gb_inspector import SM83Disassembler, load_reference_data
    >>> refdata = load_reference_data()
    >>> disasm = SM83Disassembler(refdata.instruction_set)
    >>> for instr in disasm.disassemble_rom(image, count=10):
    ...     print(instr)

Or use the command-line tool:
    $ gbdisasm tetris.gb

Reference Documentation
-----------------------
- Pan Docs: https://gbdev.io/pandocs/
- Opcode tables: https://gbdev.io/gb-opcodes/optables/
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from gb_inspector.errors import (
    GBInspectorError,
    TruncatedImageError,
    TruncatedInstructionError,
    UnknownOpcodeError,
    MissingLookupKeyError,
    MalformedReferenceDataError,
    InvalidHeaderCodeError,
)
from gb_inspector.cartridge import (
    CartridgeMetadata,
    NameTable,
    decode_header,
    read_entrypoint,
    ram_size_label,
    rom_size_kb,
)
from gb_inspector.isa import Instruction, InstructionSet, InstructionTable, Operand
from gb_inspector.disassembler import SM83Disassembler, DisassembledInstruction
from gb_inspector.refdata import ReferenceData, load_reference_data

__all__ = [
    "__version__",
    # Errors
    "GBInspectorError",
    "TruncatedImageError",
    "TruncatedInstructionError",
    "UnknownOpcodeError",
    "MissingLookupKeyError",
    "MalformedReferenceDataError",
    "InvalidHeaderCodeError",
    # Cartridge header
    "CartridgeMetadata",
    "NameTable",
    "decode_header",
    "read_entrypoint",
    "ram_size_label",
    "rom_size_kb",
    # Instruction set
    "Instruction",
    "InstructionSet",
    "InstructionTable",
    "Operand",
    # Disassembler
    "SM83Disassembler",
    "DisassembledInstruction",
    # Reference data
    "ReferenceData",
    "load_reference_data",
]
