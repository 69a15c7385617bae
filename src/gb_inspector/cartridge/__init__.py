"""
Game Boy Cartridge Header Handling
==================================

This package decodes the cartridge header found at 0x100-0x14F of every
Game Boy ROM image, and provides the name tables used to present it.

This package provides:
- **decode_header**: Parse the 28-byte metadata window at 0x134
- **read_entrypoint**: Read the entrypoint word at 0x102
- **ram_size_label / rom_size_kb**: Hardware-defined size tables
- **NameTable**: Cartridge type and licensee name lookups

Quick Start
-----------
    >>> from gb_inspector.cartridge import decode_header, rom_size_kb
    >>> meta = decode_header(image)
    >>> print(f"{meta.title}: {rom_size_kb(meta.rom_size_code)}kB")
"""

from gb_inspector.cartridge.header import (
    # Constants
    ENTRYPOINT_OFFSET,
    HEADER_START,
    HEADER_SIZE,
    NEW_LICENSEE_MARKER,
    ROM_BANK_SIZE,
    RAM_SIZE_LABELS,
    ROM_BANK_COUNTS,
    # Data structures
    CartridgeMetadata,
    # Functions
    decode_header,
    read_entrypoint,
    ram_size_label,
    rom_size_kb,
)
from gb_inspector.cartridge.names import NameTable

__all__ = [
    "ENTRYPOINT_OFFSET",
    "HEADER_START",
    "HEADER_SIZE",
    "NEW_LICENSEE_MARKER",
    "ROM_BANK_SIZE",
    "RAM_SIZE_LABELS",
    "ROM_BANK_COUNTS",
    "CartridgeMetadata",
    "decode_header",
    "read_entrypoint",
    "ram_size_label",
    "rom_size_kb",
    "NameTable",
]
