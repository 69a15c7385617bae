"""
Reference Data Loader
=====================

Loads the static JSON documents the decoder depends on:

    unprefixed.json       SM83 single-byte opcode table
    prefixed.json         SM83 CB-prefixed opcode table
    cartridge_types.json  cartridge type code -> name
    old_licensees.json    old licensee code -> publisher name
    new_licensees.json    new licensee code -> publisher name (optional)

The documents are read once at startup into immutable structures and then
passed explicitly to the header report and the disassembler. The decoding
core never touches the filesystem.

A copy of every document ships in the gb_inspector/data directory and is
used when no data directory is configured.

Usage:
    >>> from gb_inspector.refdata import load_reference_data
    >>> refdata = load_reference_data()               # bundled tables
    >>> refdata = load_reference_data("my/tables")    # custom directory
    >>> refdata.cartridge_types.lookup(0x01)
    'MBC1'
"""

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Optional, Union
import json
import logging

from gb_inspector.cartridge.names import NameTable
from gb_inspector.errors import MalformedReferenceDataError
from gb_inspector.isa.instructions import InstructionSet, InstructionTable

# Logger for this module
logger = logging.getLogger(__name__)


UNPREFIXED_FILE = "unprefixed.json"
PREFIXED_FILE = "prefixed.json"
CARTRIDGE_TYPES_FILE = "cartridge_types.json"
OLD_LICENSEES_FILE = "old_licensees.json"
NEW_LICENSEES_FILE = "new_licensees.json"


@dataclass(frozen=True)
class ReferenceData:
    """
    All reference tables, loaded once and shared read-only.

    Attributes:
        instruction_set: Unprefixed and prefixed instruction tables
        cartridge_types: Cartridge type names
        old_licensees: Publisher names for the old licensee code
        new_licensees: Publisher names for the new licensee code, if available
    """
    instruction_set: InstructionSet
    cartridge_types: NameTable
    old_licensees: NameTable
    new_licensees: Optional[NameTable] = None


def bundled_data_dir():
    """Return the directory holding the bundled reference documents."""
    return resources.files("gb_inspector") / "data"


def load_json_document(path) -> Any:
    """
    Read and parse one JSON document.

    Args:
        path: A filesystem path or importlib.resources Traversable

    Returns:
        The parsed JSON object (always a dict)

    Raises:
        MalformedReferenceDataError: If the file is missing, unreadable, not
            JSON, or its root is not an object
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MalformedReferenceDataError(f"cannot read document: {e}", path=str(path))

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedReferenceDataError(f"invalid JSON: {e}", path=str(path))

    if not isinstance(doc, dict):
        raise MalformedReferenceDataError("document root must be an object", path=str(path))

    logger.debug(f"Loaded {path} ({len(doc)} entries)")
    return doc


def _with_path(error: MalformedReferenceDataError, path) -> MalformedReferenceDataError:
    if error.path is not None:
        return error
    return MalformedReferenceDataError(error.detail, path=str(path))


def load_instruction_table(path, prefixed: bool = False) -> InstructionTable:
    """
    Load one instruction table document.

    Raises:
        MalformedReferenceDataError: If the document does not match the schema
    """
    doc = load_json_document(path)
    try:
        return InstructionTable.from_document(doc, prefixed=prefixed)
    except MalformedReferenceDataError as e:
        raise _with_path(e, path) from None


def load_name_table(path, table: str, hex_keys: bool = True) -> NameTable:
    """
    Load one code-to-name document.

    Raises:
        MalformedReferenceDataError: If the document does not match the schema
    """
    doc = load_json_document(path)
    try:
        return NameTable.from_document(doc, table, hex_keys=hex_keys)
    except MalformedReferenceDataError as e:
        raise _with_path(e, path) from None


def load_reference_data(data_dir: Optional[Union[str, Path]] = None) -> ReferenceData:
    """
    Load every reference document from a directory.

    Args:
        data_dir: Directory holding the documents (None = bundled copies)

    Returns:
        A ReferenceData instance

    Raises:
        MalformedReferenceDataError: If a required document is missing or
            malformed. new_licensees.json is optional.
    """
    root = bundled_data_dir() if data_dir is None else Path(data_dir)
    logger.debug(f"Loading reference data from {root}")

    instruction_set = InstructionSet(
        unprefixed=load_instruction_table(root / UNPREFIXED_FILE),
        prefixed=load_instruction_table(root / PREFIXED_FILE, prefixed=True),
    )

    new_licensees = None
    new_path = root / NEW_LICENSEES_FILE
    if new_path.is_file():
        new_licensees = load_name_table(new_path, "new licensee", hex_keys=False)
    else:
        logger.debug(f"No {NEW_LICENSEES_FILE} in {root}, new licensee names disabled")

    return ReferenceData(
        instruction_set=instruction_set,
        cartridge_types=load_name_table(root / CARTRIDGE_TYPES_FILE, "cartridge type"),
        old_licensees=load_name_table(root / OLD_LICENSEES_FILE, "old licensee"),
        new_licensees=new_licensees,
    )
