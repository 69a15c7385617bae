"""
GB Inspector - Test Configuration
=================================

Shared fixtures for the test suite:
- Small synthetic instruction tables (built through the JSON schema parser)
- A ROM image builder with a valid cartridge header
"""

from typing import Optional

import pytest

from gb_inspector.cartridge.names import NameTable
from gb_inspector.isa import InstructionSet, InstructionTable
from gb_inspector.refdata import ReferenceData


NO_FLAGS = {"Z": "-", "N": "-", "H": "-", "C": "-"}


def instr_doc(mnemonic: str, length: int, operands=(), cycles=(4,), immediate: bool = True) -> dict:
    """Build an instruction object in reference document form."""
    return {
        "mnemonic": mnemonic,
        "bytes": length,
        "cycles": list(cycles),
        "operands": list(operands),
        "immediate": immediate,
        "flags": dict(NO_FLAGS),
    }


def reg(name: str, immediate: bool = True) -> dict:
    return {"name": name, "immediate": immediate}


def imm(name: str, width: int) -> dict:
    return {"name": name, "bytes": width, "immediate": True}


UNPREFIXED_DOC = {
    "0x00": instr_doc("NOP", 1),
    "0x01": instr_doc("LD", 3, [reg("BC"), imm("n16", 2)], cycles=(12,)),
    "0x3E": instr_doc("LD", 2, [reg("A"), imm("n8", 1)], cycles=(8,)),
    "0x76": instr_doc("HALT", 1),
    "0xC3": instr_doc("JP", 3, [imm("a16", 2)], cycles=(16,)),
    "0xCB": instr_doc("PREFIX", 1),
    "0xEA": instr_doc("LD", 3, [{"name": "a16", "bytes": 2, "immediate": False}, reg("A")],
                      cycles=(16,), immediate=False),
}

PREFIXED_DOC = {
    "0x37": instr_doc("SWAP", 2, [reg("A")], cycles=(8,)),
    "0xCB": instr_doc("SET", 2, [reg("1"), reg("E")], cycles=(8,)),
}


@pytest.fixture
def unprefixed_doc() -> dict:
    return {key: dict(value) for key, value in UNPREFIXED_DOC.items()}


@pytest.fixture
def prefixed_doc() -> dict:
    return {key: dict(value) for key, value in PREFIXED_DOC.items()}


@pytest.fixture
def instruction_set(unprefixed_doc, prefixed_doc) -> InstructionSet:
    """
    Minimal instruction set.

    Unprefixed: NOP, LD BC,n16, LD A,n8, HALT, JP a16, PREFIX, LD (a16),A
    Prefixed: SWAP A (0x37), SET 1,E (0xCB)
    """
    return InstructionSet(
        unprefixed=InstructionTable.from_document(unprefixed_doc),
        prefixed=InstructionTable.from_document(prefixed_doc, prefixed=True),
    )


@pytest.fixture
def refdata(instruction_set) -> ReferenceData:
    return ReferenceData(
        instruction_set=instruction_set,
        cartridge_types=NameTable("cartridge type", {0x00: "ROM ONLY", 0x01: "MBC1"}),
        old_licensees=NameTable("old licensee", {0x01: "Nintendo"}),
        new_licensees=NameTable("new licensee", {"01": "Nintendo R&D1"}),
    )


def build_rom(
    code: bytes = b"",
    entrypoint: int = 0x150,
    title: bytes = b"TESTROM",
    new_licensee: bytes = b"01",
    sgb_flag: int = 0x00,
    cartridge_type: int = 0x00,
    rom_size_code: int = 0x00,
    ram_size_code: int = 0x00,
    destination_code: int = 0x00,
    old_licensee_code: int = 0x01,
    mask_rom_version: int = 0x00,
    header_checksum: int = 0x5A,
    global_checksum: int = 0xBEEF,
    code_offset: Optional[int] = None,
) -> bytes:
    """
    Build a ROM image with a cartridge header and code.

    The code is placed at code_offset (default: entrypoint) and the image
    ends right after it.
    """
    offset = entrypoint if code_offset is None else code_offset
    image = bytearray(max(0x150, offset))
    image[0x102:0x104] = entrypoint.to_bytes(2, "little")
    image[0x134:0x144] = title.ljust(16, b"\x00")[:16]
    image[0x144:0x146] = new_licensee
    image[0x146] = sgb_flag
    image[0x147] = cartridge_type
    image[0x148] = rom_size_code
    image[0x149] = ram_size_code
    image[0x14A] = destination_code
    image[0x14B] = old_licensee_code
    image[0x14C] = mask_rom_version
    image[0x14D] = header_checksum
    image[0x14E:0x150] = global_checksum.to_bytes(2, "big")
    image[offset:offset + len(code)] = code
    return bytes(image)


@pytest.fixture
def rom_builder():
    """Fixture: the build_rom helper."""
    return build_rom
