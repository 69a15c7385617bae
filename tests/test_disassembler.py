"""
Unit Tests for the Disassembler Module
======================================

Tests for the sequential SM83 walker using a small synthetic instruction
set (see conftest.py).

Test coverage includes:
- Operand rendering (implied, 8-bit, 16-bit little-endian)
- The CB escape opcode
- Cursor advance and end-of-image handling
- Error cases (unknown opcode, truncated instruction)
- Resynchronization after errors
- Listing line format
"""

import pytest

from gb_inspector.disassembler import DisassembledInstruction, SM83Disassembler, render_operand
from gb_inspector.errors import (
    TruncatedImageError,
    TruncatedInstructionError,
    UnknownOpcodeError,
)
from gb_inspector.isa import Operand

from conftest import build_rom


# =============================================================================
# Operand Rendering Tests
# =============================================================================

class TestRenderOperand:
    """Tests for render_operand()."""

    def test_implied_operand_renders_name(self):
        assert render_operand(Operand("A"), b"") == "A"

    def test_zero_width_renders_name(self):
        assert render_operand(Operand("HL", immediate=False, bytes=0), b"") == "HL"

    def test_8bit_unpadded(self):
        assert render_operand(Operand("n8", bytes=1), bytes([0x05])) == "0x5"

    def test_16bit_reversed(self):
        assert render_operand(Operand("n16", bytes=2), bytes([0x34, 0x12])) == "0x1234"

    def test_16bit_low_zero(self):
        assert render_operand(Operand("a16", bytes=2), bytes([0x00, 0x01])) == "0x100"


# =============================================================================
# Single Instruction Tests
# =============================================================================

class TestDisassembleOne:
    """Tests for SM83Disassembler.disassemble_one()."""

    @pytest.fixture(autouse=True)
    def _disasm(self, instruction_set):
        self.disasm = SM83Disassembler(instruction_set)

    def test_nop(self):
        instr = self.disasm.disassemble_one(bytes([0x00]), 0)

        assert instr.mnemonic == "NOP"
        assert instr.size == 1
        assert instr.offset == 0
        assert instr.raw_bytes == b"\x00"
        assert instr.operands == ()
        assert instr.operand_str == ""

    def test_8bit_immediate(self):
        instr = self.disasm.disassemble_one(bytes([0x3E, 0x05]), 0)

        assert instr.mnemonic == "LD"
        assert instr.size == 2
        assert instr.operands == ("A", "0x5")

    def test_16bit_immediate(self):
        instr = self.disasm.disassemble_one(bytes([0x01, 0x34, 0x12]), 0)

        assert instr.mnemonic == "LD"
        assert instr.operands == ("BC", "0x1234")
        assert instr.raw_bytes == bytes([0x01, 0x34, 0x12])

    def test_encoded_operand_listed_first(self):
        """Encoded bytes belong to the encoded operand wherever it is listed."""
        instr = self.disasm.disassemble_one(bytes([0xEA, 0x00, 0xC0]), 0)
        assert instr.operands == ("0xc000", "A")

    def test_offset_inside_image(self):
        image = bytes([0x00, 0x00, 0xC3, 0x50, 0x01])
        instr = self.disasm.disassemble_one(image, 2)

        assert instr.offset == 2
        assert instr.mnemonic == "JP"
        assert instr.operands == ("0x150",)
        assert instr.end == 5

    def test_prefix_uses_prefixed_table_keyed_by_same_byte(self):
        """CB resolves through the prefixed table entry for 0xCB."""
        instr = self.disasm.disassemble_one(bytes([0xCB, 0x37]), 0)

        assert instr.mnemonic == "SET"
        assert instr.operands == ("1", "E")
        assert instr.size == 2
        assert instr.raw_bytes == bytes([0xCB, 0x37])
        assert instr.instruction is self.disasm.instruction_set.prefixed.lookup(0xCB)

    def test_unknown_opcode(self):
        with pytest.raises(UnknownOpcodeError) as exc_info:
            self.disasm.disassemble_one(bytes([0x00, 0xD3]), 1)

        assert exc_info.value.opcode == 0xD3
        assert exc_info.value.offset == 1
        assert not exc_info.value.prefixed
        assert "0xD3" in str(exc_info.value)

    def test_unknown_prefixed_opcode(self, unprefixed_doc, prefixed_doc):
        from gb_inspector.isa import InstructionSet, InstructionTable

        del prefixed_doc["0xCB"]
        disasm = SM83Disassembler(InstructionSet(
            InstructionTable.from_document(unprefixed_doc),
            InstructionTable.from_document(prefixed_doc, prefixed=True),
        ))

        with pytest.raises(UnknownOpcodeError) as exc_info:
            disasm.disassemble_one(bytes([0xCB, 0x37]), 0)

        assert exc_info.value.prefixed
        assert exc_info.value.opcode == 0xCB

    def test_truncated_instruction(self):
        with pytest.raises(TruncatedInstructionError) as exc_info:
            self.disasm.disassemble_one(bytes([0xC3, 0x50]), 0)

        error = exc_info.value
        assert isinstance(error, TruncatedImageError)
        assert error.mnemonic == "JP"
        assert error.required == 3
        assert error.available == 2

    def test_offset_past_end(self):
        with pytest.raises(TruncatedImageError):
            self.disasm.disassemble_one(bytes([0x00]), 1)


# =============================================================================
# Walker Tests
# =============================================================================

class TestWalker:
    """Tests for the sequential walk."""

    @pytest.fixture(autouse=True)
    def _disasm(self, instruction_set):
        self.disasm = SM83Disassembler(instruction_set)

    def test_single_nop_then_end(self):
        """Entry byte 0x00 followed by end-of-image yields one record."""
        image = build_rom(code=bytes([0x00]))
        records = self.disasm.disassemble_rom(image)

        assert len(records) == 1
        assert records[0].offset == 0x150
        assert records[0].mnemonic == "NOP"

    def test_unknown_opcode_at_entrypoint(self):
        image = build_rom(code=bytes([0xD3, 0x00]))
        records = []

        with pytest.raises(UnknownOpcodeError) as exc_info:
            for instr in self.disasm.iter_disassemble(image, 0x150):
                records.append(instr)

        assert records == []
        assert exc_info.value.offset == 0x150

    def test_cursor_advance(self):
        code = bytes([0x00, 0x3E, 0x05, 0x01, 0x34, 0x12, 0xCB, 0x37, 0x76])
        image = build_rom(code=code)
        records = self.disasm.disassemble(image, 0x150)

        assert [r.mnemonic for r in records] == ["NOP", "LD", "LD", "SET", "HALT"]
        for prev, nxt in zip(records, records[1:]):
            assert nxt.offset == prev.offset + prev.size
        assert records[-1].end == len(image)

    def test_jumps_are_not_followed(self):
        """JP is listed and the walk continues right after it."""
        image = build_rom(code=bytes([0xC3, 0x00, 0x02, 0x76]))
        records = self.disasm.disassemble(image, 0x150)

        assert [r.offset for r in records] == [0x150, 0x153]

    def test_truncated_last_instruction(self):
        image = build_rom(code=bytes([0x00, 0xC3, 0x50]))
        records = []

        with pytest.raises(TruncatedInstructionError) as exc_info:
            for instr in self.disasm.iter_disassemble(image, 0x150):
                records.append(instr)

        assert len(records) == 1
        assert exc_info.value.offset == 0x151

    def test_deterministic(self):
        image = build_rom(code=bytes([0x00, 0x3E, 0x05, 0xC3, 0x50, 0x01]))
        assert self.disasm.disassemble(image, 0x150) == self.disasm.disassemble(image, 0x150)

    def test_count_limit(self):
        image = build_rom(code=bytes([0x00] * 10))
        assert len(self.disasm.disassemble(image, 0x150, count=4)) == 4

    def test_count_stops_before_bad_byte(self):
        """Bytes past the requested count are never decoded."""
        image = build_rom(code=bytes([0x00, 0xD3]))
        records = self.disasm.disassemble(image, 0x150, count=1)

        assert [r.mnemonic for r in records] == ["NOP"]

    def test_count_stops_before_truncated_instruction(self):
        image = build_rom(code=bytes([0x00, 0xC3, 0x50]))
        assert len(self.disasm.disassemble(image, 0x150, count=1)) == 1

    def test_count_zero_decodes_nothing(self):
        image = build_rom(code=bytes([0xD3]))
        assert self.disasm.disassemble(image, 0x150, count=0) == []
        assert self.disasm.disassemble_rom(image, count=0) == []

    def test_start_at_end_is_done(self):
        image = build_rom()
        assert self.disasm.disassemble(image, len(image)) == []
        assert self.disasm.disassemble(image, len(image) + 10) == []

    def test_disassemble_rom_uses_entrypoint(self):
        image = build_rom(code=bytes([0x76, 0x00]), entrypoint=0x0160)
        records = self.disasm.disassemble_rom(image)

        assert records[0].offset == 0x160
        assert records[0].mnemonic == "HALT"
        assert len(records) == 2

    def test_disassemble_to_text(self):
        image = build_rom(code=bytes([0x00, 0x76]))
        text = self.disasm.disassemble_to_text(image, 0x150)

        lines = text.split("\n")
        assert len(lines) == 2
        assert lines[0].startswith("150:")
        assert lines[1].endswith("HALT")


# =============================================================================
# Resynchronization Tests
# =============================================================================

class TestResync:
    """Tests for resync mode."""

    def test_skips_unknown_byte(self, instruction_set):
        disasm = SM83Disassembler(instruction_set, resync=True)
        image = build_rom(code=bytes([0x00, 0xD3, 0x3E, 0x05]))
        errors = []

        records = list(disasm.iter_disassemble(image, 0x150, errors))

        assert [r.offset for r in records] == [0x150, 0x152]
        assert len(errors) == 1
        assert isinstance(errors[0], UnknownOpcodeError)
        assert errors[0].offset == 0x151

    def test_skips_truncated_tail(self, instruction_set):
        disasm = SM83Disassembler(instruction_set, resync=True)
        image = build_rom(code=bytes([0x00, 0x01, 0x00]))
        errors = []

        records = list(disasm.iter_disassemble(image, 0x150, errors))

        # 01 needs 3 bytes, then the trailing 00 decodes as NOP
        assert [r.offset for r in records] == [0x150, 0x152]
        assert isinstance(errors[0], TruncatedInstructionError)

    def test_logs_warning(self, instruction_set, caplog):
        disasm = SM83Disassembler(instruction_set, resync=True)
        image = build_rom(code=bytes([0xD3]))

        with caplog.at_level("WARNING", logger="gb_inspector.disassembler.sm83"):
            assert disasm.disassemble(image, 0x150) == []

        assert "0x150" in caplog.text


# =============================================================================
# Output Format Tests
# =============================================================================

class TestFormatting:
    """Tests for DisassembledInstruction formatting."""

    @pytest.fixture(autouse=True)
    def _disasm(self, instruction_set):
        self.disasm = SM83Disassembler(instruction_set)

    def test_three_byte_line(self):
        instr = self.disasm.disassemble_one(build_rom(code=bytes([0xC3, 0x34, 0x12])), 0x150)
        assert str(instr) == "150: \t c3 34 12 \tJP 0x1234"

    def test_one_byte_line(self):
        instr = self.disasm.disassemble_one(build_rom(code=bytes([0x00])), 0x150)
        assert str(instr) == "150: \t 0 \t\tNOP"

    def test_two_byte_line(self):
        instr = self.disasm.disassemble_one(build_rom(code=bytes([0x3E, 0x0A])), 0x150)
        assert str(instr) == "150: \t 3e a \t\tLD A 0xa"

    def test_raw_bytes_in_storage_order(self):
        instr = self.disasm.disassemble_one(bytes([0x01, 0x34, 0x12]), 0)
        assert " 1 34 12 " in str(instr)

    def test_to_dict(self):
        instr = self.disasm.disassemble_one(bytes([0x01, 0x34, 0x12]), 0)
        d = instr.to_dict()

        assert d["offset"] == "0x0"
        assert d["offset_int"] == 0
        assert d["opcode"] == "0x01"
        assert d["mnemonic"] == "LD"
        assert d["operands"] == ["BC", "0x1234"]
        assert d["size"] == 3
        assert d["bytes"] == ["01", "34", "12"]
        assert d["cycles"] == [12]

    def test_records_are_frozen(self):
        instr = self.disasm.disassemble_one(bytes([0x00]), 0)
        assert isinstance(instr, DisassembledInstruction)
        with pytest.raises(AttributeError):
            instr.offset = 5
