"""
SM83 Disassembler
=================

Disassembles Game Boy (Sharp SM83) machine code into a linear listing.

The disassembler is a sequential walker: starting at the entrypoint it
decodes one instruction, advances by that instruction's length, and repeats
until the end of the image. It never follows jumps or calls; they are
listed like any other instruction.

Architecture:
    - 8-bit opcodes, one escape opcode (0xCB) into a second table
    - Little-endian immediates (n16/a16 stored low byte first)
    - Instruction lengths of 1 to 3 bytes

Decoding Steps
--------------
For the instruction at offset pc:
    1. Read the opcode byte at pc
    2. Look it up in the unprefixed table
    3. If it resolves to PREFIX, look the same byte up in the prefixed table
    4. Check that pc + length fits in the image
    5. Slice the raw bytes
    6. Render each operand: encoded operands as hex literals, implied ones
       by name
    7. Emit a DisassembledInstruction and advance pc by the length

Usage:
    disasm = SM83Disassembler(instruction_set)

    # Walk from the header entrypoint to the end of the image
    for instr in disasm.iter_disassemble(image, start=0x150):
        print(instr)

    # Decode a single instruction
    instr = disasm.disassemble_one(image, pc=0x150)
    print(f"{instr.offset:x}: {instr.mnemonic} {instr.operand_str}")
"""

from dataclasses import dataclass
from itertools import islice
from typing import Iterator, List, Optional, Tuple
import logging

from gb_inspector.cartridge.header import read_entrypoint
from gb_inspector.errors import (
    GBInspectorError,
    TruncatedImageError,
    TruncatedInstructionError,
    UnknownOpcodeError,
)
from gb_inspector.isa.instructions import Instruction, InstructionSet, Operand

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================

@dataclass(frozen=True)
class DisassembledInstruction:
    """
    Represents a single decoded SM83 instruction.

    Attributes:
        offset: Image offset of the first byte
        raw_bytes: All bytes comprising this instruction, in storage order
        instruction: The resolved table entry (prefixed entry for CB xx)
        operands: Rendered operand tokens, in listing order
    """
    offset: int
    raw_bytes: bytes
    instruction: Instruction
    operands: Tuple[str, ...]

    @property
    def mnemonic(self) -> str:
        return self.instruction.mnemonic

    @property
    def size(self) -> int:
        return len(self.raw_bytes)

    @property
    def opcode(self) -> int:
        return self.raw_bytes[0]

    @property
    def end(self) -> int:
        """Offset of the byte following this instruction."""
        return self.offset + self.size

    @property
    def operand_str(self) -> str:
        return " ".join(self.operands)

    def __str__(self) -> str:
        """Format as listing line: OFFSET: BYTES MNEMONIC OPERANDS"""
        hex_bytes = "".join(f" {b:x}" for b in self.raw_bytes)
        # 3-byte dumps are wide enough to need one tab less
        gap = " \t" if self.size == 3 else " \t\t"
        line = f"{self.offset:x}: \t{hex_bytes}{gap}{self.mnemonic}"
        for token in self.operands:
            line += f" {token}"
        return line

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "offset": f"0x{self.offset:x}",
            "offset_int": self.offset,
            "opcode": f"0x{self.opcode:02X}",
            "mnemonic": self.mnemonic,
            "operands": list(self.operands),
            "size": self.size,
            "bytes": [f"{b:02x}" for b in self.raw_bytes],
            "cycles": list(self.instruction.cycles),
            "flags": str(self.instruction.flags),
        }


# =============================================================================
# Operand Rendering
# =============================================================================

def render_operand(operand: Operand, encoded: bytes) -> str:
    """
    Render one operand token.

    Encoded operands are stored little-endian after the opcode; the value is
    rendered most significant byte first as lowercase hex without padding
    (05 -> "0x5", 34 12 -> "0x1234"). Implied operands render as their name.

    Args:
        operand: The operand description
        encoded: The operand's bytes as stored (empty for implied operands)
    """
    if not operand.is_encoded:
        return operand.name
    return f"0x{int.from_bytes(encoded, 'little'):x}"


# =============================================================================
# SM83 Disassembler
# =============================================================================

class SM83Disassembler:
    """
    Sequential disassembler for SM83 machine code.

    The instruction set is handed in fully loaded and is only read. The
    disassembler keeps no state between calls, so decoding the same image
    twice yields identical records.

    Attributes:
        instruction_set: Unprefixed and prefixed instruction tables
        resync: When True, a failed decode step is logged and skipped and
                the walk resumes at the next byte; when False (default) the
                error propagates to the caller
    """

    def __init__(self, instruction_set: InstructionSet, resync: bool = False):
        """
        Initialize the disassembler.

        Args:
            instruction_set: The loaded instruction tables
            resync: Skip undecodable bytes instead of raising
        """
        self.instruction_set = instruction_set
        self.resync = resync

    def disassemble_one(self, image: bytes, pc: int) -> DisassembledInstruction:
        """
        Disassemble the single instruction at pc.

        Args:
            image: The full ROM image
            pc: Offset of the opcode byte

        Returns:
            DisassembledInstruction with decoded information

        Raises:
            TruncatedImageError: If pc is beyond the image
            UnknownOpcodeError: If the opcode is in neither table
            TruncatedInstructionError: If the instruction runs past the end
        """
        if pc >= len(image):
            raise TruncatedImageError(pc, 1, len(image) - pc)

        opcode = image[pc]
        try:
            instr = self.instruction_set.resolve(opcode)
        except UnknownOpcodeError as e:
            raise e.at(pc) from None

        length = instr.length
        if pc + length > len(image):
            raise TruncatedInstructionError(pc, instr.mnemonic, length, len(image) - pc)

        raw_bytes = bytes(image[pc:pc + length])

        # Encoded operands follow the opcode in order
        operands = []
        cursor = 1
        for operand in instr.operands:
            width = operand.width
            operands.append(render_operand(operand, raw_bytes[cursor:cursor + width]))
            cursor += width

        return DisassembledInstruction(
            offset=pc,
            raw_bytes=raw_bytes,
            instruction=instr,
            operands=tuple(operands),
        )

    def iter_disassemble(
        self,
        image: bytes,
        start: int,
        errors: Optional[List[GBInspectorError]] = None,
    ) -> Iterator[DisassembledInstruction]:
        """
        Lazily walk the image from start to its end.

        Args:
            image: The full ROM image
            start: Offset of the first instruction
            errors: Optional list receiving the errors skipped in resync mode

        Yields:
            One DisassembledInstruction per decoded instruction, in order

        Raises:
            GBInspectorError: On the first decode failure, unless resync
        """
        pc = start
        while pc < len(image):
            try:
                instr = self.disassemble_one(image, pc)
            except GBInspectorError as e:
                if not self.resync:
                    raise
                logger.warning(f"skipping byte at 0x{pc:x}: {e}")
                if errors is not None:
                    errors.append(e)
                pc += 1
                continue

            yield instr
            pc += instr.size

        logger.debug(f"walk finished at 0x{pc:x} (image is 0x{len(image):x} bytes)")

    def disassemble(
        self,
        image: bytes,
        start: int,
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble multiple instructions.

        Args:
            image: The full ROM image
            start: Offset of the first instruction
            count: Maximum number of instructions (None = to end of image)

        Returns:
            List of DisassembledInstruction objects
        """
        # The limit is applied before decoding, so bytes past it are never read
        return list(islice(self.iter_disassemble(image, start), count))

    def disassemble_rom(
        self,
        image: bytes,
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble from the entrypoint stored in the cartridge header.

        Raises:
            TruncatedImageError: If the image has no entrypoint word
        """
        return self.disassemble(image, read_entrypoint(image), count)

    def disassemble_to_text(
        self,
        image: bytes,
        start: int,
        count: Optional[int] = None,
    ) -> str:
        """
        Disassemble and return the listing as text, one line per instruction.
        """
        instructions = self.disassemble(image, start, count)
        return "\n".join(str(instr) for instr in instructions)
