"""
Cartridge Header Decoder
========================

Decodes the fixed-layout cartridge header of a Game Boy ROM image.

Header Layout
-------------
The header occupies 0x100-0x14F. This module reads the entrypoint word and
the 28-byte metadata window that starts at 0x134:

    0x102-0x103  entrypoint (little-endian jump target of the boot JP)
    0x134-0x143  title (16 bytes; 0x143 doubles as the CGB flag)
    0x144-0x145  new licensee code (two ASCII characters)
    0x146        SGB flag
    0x147        cartridge type
    0x148        ROM size code
    0x149        RAM size code
    0x14A        destination code (0x00 = Japan)
    0x14B        old licensee code (0x33 = use new licensee code)
    0x14C        mask ROM version
    0x14D        header checksum
    0x14E-0x14F  global checksum (big-endian)

The RAM and ROM size tables are fixed by the hardware and live here. The
cartridge type and licensee names are presentation data and are loaded
from reference documents (see gb_inspector.cartridge.names).

Usage:
    meta = decode_header(image)
    print(meta.title, rom_size_kb(meta.rom_size_code), "kB")

Reference
---------
- Pan Docs, The Cartridge Header: https://gbdev.io/pandocs/The_Cartridge_Header.html
"""

from dataclasses import dataclass
import struct

from gb_inspector.errors import InvalidHeaderCodeError, TruncatedImageError


# =============================================================================
# Constants
# =============================================================================

ENTRYPOINT_OFFSET = 0x102
HEADER_START = 0x134
HEADER_FORMAT = ">16sHBBBBBBBBH"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 28 bytes, 0x134-0x14F

# Old licensee code that defers to the new licensee code at 0x144
NEW_LICENSEE_MARKER = 0x33

ROM_BANK_SIZE = 0x4000

RAM_SIZE_LABELS = {
    0x00: "None",
    0x01: "2kb",
    0x02: "8kb",
    0x03: "32kb",   # 4 banks
    0x04: "128kb",  # 16 banks
    0x05: "64kb",   # 8 banks
}

ROM_BANK_COUNTS = {
    0x00: 0x002,  # no ROM banking
    0x01: 0x004,
    0x02: 0x008,
    0x03: 0x010,
    0x04: 0x020,
    0x05: 0x040,  # only 0x3F banks used by MBC1
    0x06: 0x080,  # only 0x7D banks used by MBC1
    0x07: 0x100,
    0x08: 0x200,
    0x52: 0x048,
    0x53: 0x050,
    0x54: 0x060,
}


# =============================================================================
# Cartridge Metadata
# =============================================================================

@dataclass(frozen=True)
class CartridgeMetadata:
    """
    Decoded cartridge header fields, read-only after construction.

    Attributes:
        title_bytes: Raw 16-byte title field, CGB flag byte included
        new_licensee_code: 2-byte new licensee code (big-endian word)
        sgb_flag: Super Game Boy support flag
        cartridge_type: Memory bank controller / hardware type code
        rom_size_code: ROM size code (see rom_size_kb)
        ram_size_code: External RAM size code (see ram_size_label)
        destination_code: 0x00 Japanese, 0x01 overseas
        old_licensee_code: Publisher code, 0x33 defers to new_licensee_code
        mask_rom_version: Version number of the game
        header_checksum: Stored checksum over 0x134-0x14C
        global_checksum: Stored 16-bit sum over the whole image
    """
    title_bytes: bytes
    new_licensee_code: int
    sgb_flag: int
    cartridge_type: int
    rom_size_code: int
    ram_size_code: int
    destination_code: int
    old_licensee_code: int
    mask_rom_version: int
    header_checksum: int
    global_checksum: int

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = HEADER_START) -> "CartridgeMetadata":
        """
        Unpack the 28-byte header window starting at offset.

        Raises:
            TruncatedImageError: If fewer than 28 bytes remain from offset
        """
        if len(data) < offset + HEADER_SIZE:
            raise TruncatedImageError(offset, HEADER_SIZE, len(data) - offset)
        return cls(*struct.unpack_from(HEADER_FORMAT, data, offset))

    @property
    def title(self) -> str:
        """
        Title as text.

        All 16 bytes are decoded, including 0x143, which newer cartridges
        use as the CGB flag. Only NUL padding is stripped.
        """
        return self.title_bytes.decode("ascii", errors="replace").rstrip("\x00")

    @property
    def new_licensee(self) -> str:
        """New licensee code as its two ASCII characters (e.g. "01")."""
        return self.new_licensee_code.to_bytes(2, "big").decode("ascii", errors="replace")

    @property
    def uses_new_licensee(self) -> bool:
        return self.old_licensee_code == NEW_LICENSEE_MARKER

    @property
    def color_flag(self) -> bool:
        """Color Game Boy indicator, inferred from the new licensee marker."""
        return self.uses_new_licensee

    @property
    def is_japanese(self) -> bool:
        return self.destination_code == 0x00

    @property
    def sgb_support(self) -> bool:
        # reported as flag == 0x00, matching the listing format
        return self.sgb_flag == 0x00

    @property
    def ram_size(self) -> str:
        return ram_size_label(self.ram_size_code)

    @property
    def rom_size(self) -> int:
        return rom_size_kb(self.rom_size_code)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization (raw codes only)."""
        return {
            "title": self.title,
            "new_licensee_code": self.new_licensee,
            "sgb_flag": self.sgb_flag,
            "cartridge_type": self.cartridge_type,
            "rom_size_code": self.rom_size_code,
            "ram_size_code": self.ram_size_code,
            "destination_code": self.destination_code,
            "old_licensee_code": self.old_licensee_code,
            "mask_rom_version": self.mask_rom_version,
            "header_checksum": self.header_checksum,
            "global_checksum": self.global_checksum,
        }


# =============================================================================
# Decoding Functions
# =============================================================================

def decode_header(image: bytes) -> CartridgeMetadata:
    """
    Decode the cartridge header of a ROM image.

    Pure function of the input bytes: decoding the same bytes twice yields
    equal CartridgeMetadata.

    Args:
        image: The full ROM image

    Returns:
        The decoded CartridgeMetadata

    Raises:
        TruncatedImageError: If the image ends before 0x150
    """
    return CartridgeMetadata.from_bytes(image, HEADER_START)


def read_entrypoint(image: bytes) -> int:
    """
    Read the entrypoint offset stored little-endian at 0x102.

    Raises:
        TruncatedImageError: If the image ends before 0x104
    """
    if len(image) < ENTRYPOINT_OFFSET + 2:
        raise TruncatedImageError(ENTRYPOINT_OFFSET, 2, len(image) - ENTRYPOINT_OFFSET)
    return int.from_bytes(image[ENTRYPOINT_OFFSET:ENTRYPOINT_OFFSET + 2], "little")


def ram_size_label(code: int) -> str:
    """
    Convert a RAM size code to its human-readable label.

    Raises:
        InvalidHeaderCodeError: For codes outside 0x00-0x05
    """
    try:
        return RAM_SIZE_LABELS[code]
    except KeyError:
        raise InvalidHeaderCodeError("RAM size", code) from None


def rom_size_kb(code: int) -> int:
    """
    Convert a ROM size code to the ROM size in kilobytes.

    Each code selects a bank count; banks are 16KB (0x4000 bytes).

    Raises:
        InvalidHeaderCodeError: For codes other than 0x00-0x08 and 0x52-0x54
    """
    try:
        banks = ROM_BANK_COUNTS[code]
    except KeyError:
        raise InvalidHeaderCodeError("ROM size", code) from None
    return banks * ROM_BANK_SIZE // 1024
