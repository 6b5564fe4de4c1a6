"""Field elements — integers in [0, MODULUS) for the Starknet scalar field.

Two ways in, deliberately distinct:
  - reduce_to_field(n): any non-negative int, reduced mod MODULUS
  - parse_strict_felt(s): untrusted hex, rejected (never reduced) if out of range
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from fileproof.errors import MalformedScalar

MODULUS = 2**251 + 17 * 2**192 + 1

FELT_BYTES = 32

_HEX_BODY = re.compile(r"[0-9a-fA-F]+")


@dataclass(frozen=True, order=True)
class FieldElement:
    """Immutable scalar with 0 <= value < MODULUS."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise MalformedScalar(f"Field element must be an int, got {type(self.value).__name__}")
        if not 0 <= self.value < MODULUS:
            raise MalformedScalar(f"Value out of field range: {self.value:#x}")

    @classmethod
    def from_hex(cls, s: str) -> FieldElement:
        return parse_strict_felt(s)

    def to_hex(self) -> str:
        """Lowercase, 0x-prefixed, no zero padding."""
        return hex(self.value)

    def to_bytes(self) -> bytes:
        """32-byte big-endian representation."""
        return self.value.to_bytes(FELT_BYTES, "big")

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.to_hex()


def reduce_to_field(n: int) -> FieldElement:
    """Reduce a non-negative integer into the field."""
    if n < 0:
        raise MalformedScalar(f"Cannot reduce negative value: {n}")
    return FieldElement(n % MODULUS)


def parse_strict_felt(s: str) -> FieldElement:
    """Parse a 0x-prefixed hex string, rejecting anything outside the field.

    Raises MalformedScalar for a missing prefix, an empty or non-hex body,
    or a value >= MODULUS.
    """
    if not isinstance(s, str) or not s.startswith("0x"):
        raise MalformedScalar(f"Expected 0x-prefixed hex, got {s!r}")
    body = s[2:]
    # int(..., 16) would also accept "_" separators and surrounding whitespace
    if not _HEX_BODY.fullmatch(body):
        raise MalformedScalar(f"Invalid hex body: {s!r}")
    value = int(body, 16)
    if value >= MODULUS:
        raise MalformedScalar(f"Value not below field modulus: {s}")
    return FieldElement(value)
