"""
GB Inspector Configuration
==========================

Run configuration for the inspector. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (gb_inspector.cli.gbdisasm)

Environment variables (all optional):
    GB_INSPECTOR_DATA_DIR: Directory holding the reference JSON documents
    GB_INSPECTOR_RESYNC: Skip undecodable bytes instead of stopping (1/true/yes)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os


DATA_DIR_ENV = "GB_INSPECTOR_DATA_DIR"
RESYNC_ENV = "GB_INSPECTOR_RESYNC"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class InspectorConfig:
    """
    Configuration for one inspection run.

    Attributes:
        rom_path: ROM image to inspect
        data_dir: Reference data directory (None = bundled tables)
        start: Disassembly start offset (None = header entrypoint)
        count: Maximum number of instructions (None = to end of image)
        resync: Resume at the next byte after a decode error
        header_only: Print the header report without disassembling
        verbose: Enable debug logging
    """
    rom_path: Optional[Path] = None
    data_dir: Optional[Path] = None
    start: Optional[int] = None
    count: Optional[int] = None
    resync: bool = False
    header_only: bool = False
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "InspectorConfig":
        """
        Create InspectorConfig from environment variables.

        Unrecognized values are ignored and the default is kept.
        """
        config = cls()

        if data_dir := os.environ.get(DATA_DIR_ENV):
            config.data_dir = Path(data_dir)

        if resync := os.environ.get(RESYNC_ENV):
            value = resync.strip().lower()
            if value in _TRUE_VALUES:
                config.resync = True
            elif value in _FALSE_VALUES:
                config.resync = False

        return config


def parse_address(text: str) -> int:
    """
    Parse an offset given as 0x-hex, $-hex, or decimal.

    Raises:
        ValueError: If the text is not a number or is negative
    """
    text = text.strip()
    if text.lower().startswith("0x"):
        value = int(text, 16)
    elif text.startswith("$"):
        value = int(text[1:], 16)
    else:
        value = int(text)

    if value < 0:
        raise ValueError(f"offset must not be negative: {text}")
    return value
