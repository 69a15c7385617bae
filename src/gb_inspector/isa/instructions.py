"""
SM83 Instruction Table Model
============================

Data model for the Game Boy CPU (Sharp SM83) instruction tables.

The tables themselves are reference data: they are loaded from two JSON
documents (see gb_inspector.refdata) and never built by the decoder. This
module only describes their shape and how they are looked up.

Two Opcode Spaces
-----------------
- **Unprefixed**: one table keyed by the first opcode byte (0x00-0xFF).
- **Prefixed**: a second table for the CB escape space. In the unprefixed
  table opcode 0xCB carries the sentinel mnemonic "PREFIX", which tells the
  walker to consult the prefixed table instead.

JSON Schema
-----------
Each document maps "0xNN" keys to instruction objects:

    "0x3E": {
        "mnemonic": "LD",
        "bytes": 2,
        "cycles": [8],
        "operands": [
            {"name": "A", "immediate": true},
            {"name": "n8", "bytes": 1, "immediate": true}
        ],
        "immediate": true,
        "flags": {"Z": "-", "N": "-", "H": "-", "C": "-"}
    }

Usage:
    table = InstructionTable.from_document(json.loads(text))
    instr = table.lookup(0x3E)
    print(instr.mnemonic, instr.length)
"""

from dataclasses import dataclass
import string
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from gb_inspector.errors import MalformedReferenceDataError, UnknownOpcodeError


# =============================================================================
# Constants
# =============================================================================

# Opcode that escapes into the prefixed table
PREFIX_OPCODE = 0xCB

# Mnemonic carried by PREFIX_OPCODE in the unprefixed table
PREFIX_MNEMONIC = "PREFIX"

FLAG_NAMES = ("Z", "N", "H", "C")


def to_hex_key(code: int) -> str:
    """Format a code byte the way reference documents key it ("0x3E")."""
    return f"0x{code:02X}"


def parse_hex_key(key: str) -> int:
    """
    Parse a "0xNN" document key into a byte value.

    Raises:
        MalformedReferenceDataError: If the key is not a two-digit hex byte
    """
    if (
        not isinstance(key, str)
        or len(key) != 4
        or not key.lower().startswith("0x")
        or not all(c in string.hexdigits for c in key[2:])
    ):
        raise MalformedReferenceDataError(f"invalid key {key!r}, expected '0xNN'")
    return int(key[2:], 16)


def _require(doc: Mapping[str, Any], name: str, kind: type, where: str) -> Any:
    if name not in doc:
        raise MalformedReferenceDataError(f"{where}: missing field '{name}'")
    value = doc[name]
    # bool is an int subclass; never accept it where a number is expected
    if kind is int and isinstance(value, bool):
        raise MalformedReferenceDataError(f"{where}: field '{name}' must be int")
    if not isinstance(value, kind):
        raise MalformedReferenceDataError(
            f"{where}: field '{name}' must be {kind.__name__}"
        )
    return value


# =============================================================================
# Data Structures
# =============================================================================

@dataclass(frozen=True)
class Flags:
    """Effect of an instruction on the Z, N, H and C flags ("-", "0", "1", "Z"...)."""
    z: str = "-"
    n: str = "-"
    h: str = "-"
    c: str = "-"

    @classmethod
    def from_document(cls, doc: Any, where: str = "flags") -> "Flags":
        if not isinstance(doc, dict):
            raise MalformedReferenceDataError(f"{where}: flags must be an object")
        values = [_require(doc, name, str, where) for name in FLAG_NAMES]
        return cls(*values)

    def __str__(self) -> str:
        return f"{self.z}{self.n}{self.h}{self.c}"


@dataclass(frozen=True)
class Operand:
    """
    One operand of an instruction.

    Attributes:
        name: Register, condition or literal slot name (e.g. "A", "NZ", "n16")
        immediate: False when the operand is dereferenced, e.g. "(HL)"
        bytes: Width of the literal encoded after the opcode, None if the
               operand is implied by the opcode itself
    """
    name: str
    immediate: bool = True
    bytes: Optional[int] = None

    @property
    def width(self) -> int:
        """Number of encoded bytes, zero for implied operands."""
        return self.bytes or 0

    @property
    def is_encoded(self) -> bool:
        return self.width > 0

    @classmethod
    def from_document(cls, doc: Any, where: str = "operand") -> "Operand":
        if not isinstance(doc, dict):
            raise MalformedReferenceDataError(f"{where}: operand must be an object")
        name = _require(doc, "name", str, where)
        immediate = _require(doc, "immediate", bool, where)
        width = doc.get("bytes")
        if width is not None:
            if isinstance(width, bool) or not isinstance(width, int) or width < 0:
                raise MalformedReferenceDataError(
                    f"{where}: operand '{name}' has invalid bytes {width!r}"
                )
        return cls(name=name, immediate=immediate, bytes=width)


@dataclass(frozen=True)
class Instruction:
    """
    Static description of one opcode, owned by an InstructionTable.

    Attributes:
        mnemonic: Operation name ("LD", "JP", ...) or "PREFIX" for 0xCB
        length: Encoded length in bytes, opcode byte(s) included
        cycles: Machine cycles; two values for conditional instructions
        operands: Operands in listing order
        immediate: False when the instruction accesses memory indirectly
        flags: Flag effects
    """
    mnemonic: str
    length: int
    cycles: Tuple[int, ...] = ()
    operands: Tuple[Operand, ...] = ()
    immediate: bool = True
    flags: Flags = Flags()

    @property
    def is_prefix(self) -> bool:
        """True for the escape sentinel that selects the prefixed table."""
        return self.mnemonic == PREFIX_MNEMONIC

    @property
    def operand_width(self) -> int:
        """Total number of operand bytes encoded after the opcode."""
        return sum(op.width for op in self.operands)

    @classmethod
    def from_document(cls, doc: Any, where: str = "instruction") -> "Instruction":
        """
        Build an Instruction from its JSON object.

        Raises:
            MalformedReferenceDataError: On any missing or mistyped field
        """
        if not isinstance(doc, dict):
            raise MalformedReferenceDataError(f"{where}: instruction must be an object")

        mnemonic = _require(doc, "mnemonic", str, where)
        length = _require(doc, "bytes", int, where)
        if length < 1:
            raise MalformedReferenceDataError(f"{where}: bytes must be >= 1, got {length}")

        cycles = _require(doc, "cycles", list, where)
        if not all(isinstance(c, int) and not isinstance(c, bool) for c in cycles):
            raise MalformedReferenceDataError(f"{where}: cycles must be integers")

        operands = tuple(
            Operand.from_document(op, f"{where} operand {i}")
            for i, op in enumerate(_require(doc, "operands", list, where))
        )
        immediate = _require(doc, "immediate", bool, where)
        flags = Flags.from_document(_require(doc, "flags", dict, where), f"{where} flags")

        instr = cls(
            mnemonic=mnemonic,
            length=length,
            cycles=tuple(cycles),
            operands=operands,
            immediate=immediate,
            flags=flags,
        )
        # Operands can never need more bytes than follow the opcode
        if not instr.is_prefix and instr.operand_width > length - 1:
            raise MalformedReferenceDataError(
                f"{where}: operands need {instr.operand_width} bytes "
                f"but instruction is {length} bytes long"
            )
        return instr


# =============================================================================
# Instruction Tables
# =============================================================================

class InstructionTable:
    """
    Immutable mapping from opcode byte to Instruction.

    Lookups for absent byte values raise UnknownOpcodeError; there is no
    default instruction.
    """

    def __init__(self, entries: Mapping[int, Instruction], prefixed: bool = False):
        for opcode in entries:
            if not 0 <= opcode <= 0xFF:
                raise ValueError(f"opcode {opcode!r} out of byte range")
        self._entries: Dict[int, Instruction] = dict(entries)
        self.prefixed = prefixed

    @classmethod
    def from_document(cls, doc: Any, prefixed: bool = False) -> "InstructionTable":
        """
        Build a table from a parsed JSON document.

        Raises:
            MalformedReferenceDataError: If the root is not an object or any
                entry does not match the schema
        """
        if not isinstance(doc, dict):
            raise MalformedReferenceDataError("instruction table root must be an object")

        entries = {}
        for key, value in doc.items():
            opcode = parse_hex_key(key)
            if opcode in entries:
                raise MalformedReferenceDataError(f"duplicate opcode key {key!r}")
            entries[opcode] = Instruction.from_document(value, f"opcode {key}")
        return cls(entries, prefixed=prefixed)

    def lookup(self, opcode: int) -> Instruction:
        """
        Return the Instruction for an opcode byte.

        Raises:
            UnknownOpcodeError: If the byte is not in the table
        """
        try:
            return self._entries[opcode]
        except KeyError:
            raise UnknownOpcodeError(opcode, prefixed=self.prefixed) from None

    def __contains__(self, opcode: object) -> bool:
        return opcode in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._entries))

    def __repr__(self) -> str:
        kind = "prefixed" if self.prefixed else "unprefixed"
        return f"InstructionTable({kind}, {len(self)} opcodes)"


@dataclass(frozen=True)
class InstructionSet:
    """
    The pair of tables covering the full SM83 decode space.

    Attributes:
        unprefixed: Single-byte opcode table (0xCB maps to PREFIX)
        prefixed: CB escape table
    """
    unprefixed: InstructionTable
    prefixed: InstructionTable

    def resolve(self, opcode: int) -> Instruction:
        """
        Resolve an opcode byte to the Instruction that is emitted.

        The unprefixed table is consulted first. If it yields the escape
        sentinel, exactly one more lookup is made in the prefixed table,
        keyed by the same byte value. The prefixed entry's length governs
        how many bytes the instruction consumes.

        Raises:
            UnknownOpcodeError: If either lookup fails
        """
        instr = self.unprefixed.lookup(opcode)
        if instr.is_prefix:
            instr = self.prefixed.lookup(opcode)
        return instr
