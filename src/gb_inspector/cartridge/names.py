"""
Cartridge Name Tables
=====================

Code-to-name lookups for header fields that are only meaningful to people:
cartridge type names and publisher (licensee) names.

Old licensee and cartridge type documents are keyed "0xNN" like the
instruction tables. The new licensee document is keyed by the two ASCII
characters stored at 0x144 (e.g. "01", "A4").
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Union

from gb_inspector.errors import MalformedReferenceDataError, MissingLookupKeyError
from gb_inspector.isa.instructions import parse_hex_key


Code = Union[int, str]


@dataclass(frozen=True)
class NameTable:
    """
    Immutable code-to-name mapping.

    Attributes:
        table: Label used in diagnostics ("cartridge type", "old licensee")
        names: Mapping from code to display name
    """
    table: str
    names: Dict[Code, str] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Any, table: str, hex_keys: bool = True) -> "NameTable":
        """
        Build a table from a parsed JSON document.

        Args:
            doc: Mapping of code keys to name strings
            table: Label for diagnostics
            hex_keys: Parse keys as "0xNN" bytes; when False keys are kept
                      as strings (new licensee codes)

        Raises:
            MalformedReferenceDataError: If the document is not a mapping of
                valid keys to strings
        """
        if not isinstance(doc, dict):
            raise MalformedReferenceDataError(f"{table} table root must be an object")

        names: Dict[Code, str] = {}
        for key, name in doc.items():
            if not isinstance(name, str):
                raise MalformedReferenceDataError(
                    f"{table} table: value for {key!r} must be a string"
                )
            code = parse_hex_key(key) if hex_keys else key
            # "0x0a" and "0x0A" name the same code
            if code in names:
                raise MalformedReferenceDataError(f"{table} table: duplicate key {key!r}")
            names[code] = name
        return cls(table=table, names=names)

    def lookup(self, code: Code) -> str:
        """
        Return the name for a code.

        Raises:
            MissingLookupKeyError: If the code has no entry
        """
        try:
            return self.names[code]
        except KeyError:
            raise MissingLookupKeyError(code, self.table) from None

    def __contains__(self, code: object) -> bool:
        return code in self.names

    def __len__(self) -> int:
        return len(self.names)
