"""Content hashing — file bytes to a field element.

Hash = int.from_bytes(digest(bytes), "big") mod MODULUS

The default digest is Keccak-256. Starknet's native Poseidon can be
plugged in by passing any bytes -> 32-byte callable as ``digest``.
No salt, no randomness: identical bytes always give the same element.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from eth_utils import keccak

from fileproof.errors import MalformedScalar
from fileproof.felt import FieldElement, parse_strict_felt, reduce_to_field

Digest = Callable[[bytes], bytes]


def keccak256(data: bytes) -> bytes:
    """Keccak-256 (pre-NIST padding, as used by Ethereum/Starknet tooling)."""
    return keccak(data)


class ContentHasher:
    """Reduces arbitrary bytes to a FieldElement."""

    def __init__(self, digest: Digest = keccak256):
        self._digest = digest

    def hash(self, data: bytes) -> FieldElement:
        # Empty input is hashed like any other; emptiness is an upload policy
        digest = self._digest(bytes(data))
        return reduce_to_field(int.from_bytes(digest, "big"))

    def hash_utf8(self, text: str) -> FieldElement:
        return self.hash(text.encode("utf-8"))

    def hash_file(self, path: str | Path) -> FieldElement:
        """Hash a file's full contents. Same result as hash(path.read_bytes())."""
        return self.hash(Path(path).read_bytes())


def is_valid_field_hex(s: str) -> bool:
    """True iff s is 0x-prefixed hex with a value below MODULUS. Never raises."""
    try:
        parse_strict_felt(s)
    except MalformedScalar:
        return False
    return True
