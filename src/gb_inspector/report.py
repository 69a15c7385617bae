"""
Text Report
===========

Builds the line-oriented inspection report: the decoded header block, the
entrypoint, then one listing line per disassembled instruction.

Example output:

    Title: TETRIS
    Publisher: Nintendo
    Cartridge type: ROM ONLY
    Destination code (Japanese Version): true
    Super GameBoy: true
    Color GameBoy: false
    RAM size: None
    ROM size: 32kB
    Global checksum: 16BF
    Header checksum: A
    Entrypoint: 0x150
    150: 	 c3 8b 2	JP 0x28b
"""

from itertools import islice
from typing import Iterator, List, Optional

from gb_inspector.cartridge.header import CartridgeMetadata, decode_header, read_entrypoint
from gb_inspector.disassembler.sm83 import SM83Disassembler
from gb_inspector.refdata import ReferenceData


def _flag(value: bool) -> str:
    return "true" if value else "false"


def publisher_name(metadata: CartridgeMetadata, refdata: ReferenceData) -> Optional[str]:
    """
    Resolve the publisher name for a header.

    Returns None when the header defers to the new licensee code and no new
    licensee table is loaded.

    Raises:
        MissingLookupKeyError: If the code has no entry in its table
    """
    if not metadata.uses_new_licensee:
        return refdata.old_licensees.lookup(metadata.old_licensee_code)
    if refdata.new_licensees is None:
        return None
    return refdata.new_licensees.lookup(metadata.new_licensee)


def header_report_lines(metadata: CartridgeMetadata, refdata: ReferenceData) -> List[str]:
    """
    Format the decoded header fields.

    Raises:
        MissingLookupKeyError: If a code has no name entry
        InvalidHeaderCodeError: If a RAM/ROM size code is invalid
    """
    lines = [f"Title: {metadata.title}"]

    publisher = publisher_name(metadata, refdata)
    if publisher is not None:
        lines.append(f"Publisher: {publisher}")

    lines.extend([
        f"Cartridge type: {refdata.cartridge_types.lookup(metadata.cartridge_type)}",
        f"Destination code (Japanese Version): {_flag(metadata.is_japanese)}",
        f"Super GameBoy: {_flag(metadata.sgb_support)}",
        f"Color GameBoy: {_flag(metadata.color_flag)}",
        f"RAM size: {metadata.ram_size}",
        f"ROM size: {metadata.rom_size}kB",
        f"Global checksum: {metadata.global_checksum:X}",
        f"Header checksum: {metadata.header_checksum:X}",
    ])
    return lines


def build_report(
    image: bytes,
    refdata: ReferenceData,
    start: Optional[int] = None,
    count: Optional[int] = None,
    resync: bool = False,
    header_only: bool = False,
) -> Iterator[str]:
    """
    Yield the full report for an image, line by line.

    Lines are produced lazily, so everything decoded before a failure has
    already been yielded when the error propagates.

    Args:
        image: The full ROM image
        refdata: Loaded reference tables
        start: Disassembly start offset (None = header entrypoint)
        count: Maximum number of instructions (None = all)
        resync: Skip undecodable bytes instead of raising
        header_only: Stop after the header block

    Raises:
        GBInspectorError: On the first unrecoverable failure
    """
    yield from header_report_lines(decode_header(image), refdata)

    entrypoint = read_entrypoint(image)
    yield f"Entrypoint: 0x{entrypoint:X}"
    if header_only:
        return

    disasm = SM83Disassembler(refdata.instruction_set, resync=resync)
    pc = entrypoint if start is None else start
    for instr in islice(disasm.iter_disassemble(image, pc), count):
        yield str(instr)
