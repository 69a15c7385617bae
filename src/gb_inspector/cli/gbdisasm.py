"""
gbdisasm - Game Boy ROM Inspector Command-Line Interface
=========================================================

This module implements the command-line interface for inspecting Game Boy
ROM images. It prints the decoded cartridge header followed by a linear
disassembly from the entrypoint to the end of the image.

Usage Examples
--------------
Inspect a ROM with the bundled reference tables:
    $ gbdisasm tetris.gb

Use a custom reference data directory:
    $ gbdisasm tetris.gb --data-dir ./data

Start at a given offset and stop after 20 instructions:
    $ gbdisasm tetris.gb --start 0x150 --count 20

Skip undecodable bytes instead of stopping:
    $ gbdisasm hacked.gb --resync

Header only, as JSON:
    $ gbdisasm tetris.gb --header-only --json
"""

import json
import logging
from itertools import islice
from pathlib import Path
from typing import List, Optional, Tuple

import click

from gb_inspector import __version__
from gb_inspector.cartridge.header import decode_header, read_entrypoint
from gb_inspector.cli.errors import handle_cli_exception
from gb_inspector.config import InspectorConfig, parse_address
from gb_inspector.disassembler import SM83Disassembler
from gb_inspector.errors import GBInspectorError
from gb_inspector.refdata import ReferenceData, load_reference_data
from gb_inspector.report import build_report, publisher_name

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def build_json_report(
    image: bytes,
    refdata: ReferenceData,
    config: InspectorConfig,
) -> Tuple[dict, Optional[GBInspectorError]]:
    """
    Build the report as a JSON-serializable dictionary.

    Decoding stops at the first unrecoverable failure. Everything decoded up
    to that point stays in the report and the failure is recorded under
    "error", so the caller can write the partial report before exiting.

    Returns:
        Tuple of (report, error); error is None when decoding completed
    """
    result: dict = {}
    errors: List[GBInspectorError] = []

    try:
        metadata = decode_header(image)
        header = metadata.to_dict()
        header.update({
            "publisher": publisher_name(metadata, refdata),
            "cartridge_type_name": refdata.cartridge_types.lookup(metadata.cartridge_type),
            "ram_size": metadata.ram_size,
            "rom_size_kb": metadata.rom_size,
            "japanese": metadata.is_japanese,
            "sgb": metadata.sgb_support,
            "cgb": metadata.color_flag,
        })
        result["header"] = header

        entrypoint = read_entrypoint(image)
        result["entrypoint"] = entrypoint
        if config.header_only:
            return result, None

        disasm = SM83Disassembler(refdata.instruction_set, resync=config.resync)
        start = entrypoint if config.start is None else config.start
        instructions = result["instructions"] = []
        for instr in islice(disasm.iter_disassemble(image, start, errors), config.count):
            instructions.append(instr.to_dict())
    except GBInspectorError as e:
        failure = e
        result["error"] = str(e)
    else:
        failure = None

    if "instructions" in result:
        result["skipped"] = [str(skipped) for skipped in errors]
    return result, failure


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "rom_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-d", "--data-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Reference data directory (default: $GB_INSPECTOR_DATA_DIR or bundled tables)",
)
@click.option(
    "-s", "--start",
    type=str,
    default=None,
    help="Start offset (hex with 0x prefix or decimal). Default: header entrypoint",
)
@click.option(
    "-c", "--count",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "--resync/--strict",
    default=None,
    help="On a decode error, skip one byte and continue (default: --strict, "
         "or $GB_INSPECTOR_RESYNC)",
)
@click.option(
    "--header-only",
    is_flag=True,
    help="Print the header report without disassembling",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Emit the report as JSON",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="gbdisasm")
def main(
    rom_file: Path,
    data_dir: Optional[Path],
    start: Optional[str],
    count: Optional[int],
    resync: Optional[bool],
    header_only: bool,
    as_json: bool,
    output: Optional[Path],
    verbose: bool,
) -> None:
    """
    Inspect a Game Boy ROM: cartridge header and linear disassembly.

    ROM_FILE is the cartridge image to inspect.

    The disassembly walks sequentially from the header entrypoint to the
    end of the image. Jumps and calls are listed but never followed.

    Examples:

        # Header and full listing
        gbdisasm tetris.gb

        # First 20 instructions from offset 0x150
        gbdisasm tetris.gb --start 0x150 --count 20 -o listing.txt
    """
    setup_logging(verbose)

    config = InspectorConfig.from_env()
    config.rom_path = rom_file
    config.count = count
    config.header_only = header_only
    config.verbose = verbose
    if data_dir is not None:
        config.data_dir = data_dir
    if resync is not None:
        config.resync = resync

    if start is not None:
        try:
            config.start = parse_address(start)
        except ValueError:
            handle_cli_exception(click.BadParameter(f"invalid start offset '{start}'"))

    try:
        image = config.rom_path.read_bytes()
    except OSError as e:
        handle_cli_exception(e, verbose)

    logger.debug(f"Input file: {config.rom_path} ({len(image)} bytes)")

    try:
        refdata = load_reference_data(config.data_dir)
    except GBInspectorError as e:
        handle_cli_exception(e, verbose)

    target = str(output) if output else "-"
    with click.open_file(target, "w", encoding="utf-8") as out:
        try:
            if as_json:
                result, failure = build_json_report(image, refdata, config)
                out.write(json.dumps(result, indent=2) + "\n")
                if failure is not None:
                    raise failure
            else:
                # Lines are written as decoded so a failure keeps the prefix
                for line in build_report(
                    image,
                    refdata,
                    start=config.start,
                    count=config.count,
                    resync=config.resync,
                    header_only=config.header_only,
                ):
                    out.write(line + "\n")
        except Exception as e:
            out.flush()
            handle_cli_exception(e, verbose, error_type="Decode")

    if output:
        logger.debug(f"Output written to: {output}")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
