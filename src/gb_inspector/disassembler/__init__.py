"""
GB Inspector Disassembler Module
================================

This module provides linear disassembly of Game Boy (SM83) machine code.

Usage:
    from gb_inspector.disassembler import SM83Disassembler

    disasm = SM83Disassembler(refdata.instruction_set)
    instructions = disasm.disassemble(image, start=0x150)
"""

from .sm83 import SM83Disassembler, DisassembledInstruction, render_operand

__all__ = [
    "SM83Disassembler",
    "DisassembledInstruction",
    "render_operand",
]
