"""
GB Inspector ISA Package
========================

Instruction set definitions for the Game Boy CPU (Sharp SM83).

The disassembler consumes these types; the reference data loader builds
them from JSON. Keeping them here avoids either side owning the other.

Usage:
    from gb_inspector.isa import (
        Instruction,
        InstructionSet,
        InstructionTable,
        Operand,
    )
"""

from gb_inspector.isa.instructions import (
    # Core types
    Flags,
    Operand,
    Instruction,
    InstructionTable,
    InstructionSet,
    # Constants
    PREFIX_OPCODE,
    PREFIX_MNEMONIC,
    # Key helpers
    to_hex_key,
    parse_hex_key,
)

__all__ = [
    "Flags",
    "Operand",
    "Instruction",
    "InstructionTable",
    "InstructionSet",
    "PREFIX_OPCODE",
    "PREFIX_MNEMONIC",
    "to_hex_key",
    "parse_hex_key",
]
