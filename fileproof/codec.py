"""Scalar codec — felts <-> short strings, u64 <-> hex.

Short strings are Starknet's packing of up to 31 ASCII characters into
one felt, big-endian, first character in the most significant byte.
Decoding skips zero bytes (padding). The encoding is ambiguous for
arbitrary binary values, so anything that is not valid text decodes
to the original hex instead of failing. Each byte is one character, so
any byte at or above 0x80 also falls back to hex.
"""

from __future__ import annotations

import logging
import re

from fileproof.errors import MalformedScalar
from fileproof.felt import FieldElement, parse_strict_felt

log = logging.getLogger("fileproof.codec")

SHORT_STRING_MAX_LEN = 31
U64_MAX = 2**64 - 1

_HEX_BODY = re.compile(r"[0-9a-fA-F]+")


def felt_to_short_string(felt: FieldElement | str) -> str:
    """Decode a packed short string. Falls back to hex on undecodable input."""
    if isinstance(felt, str):
        try:
            felt = parse_strict_felt(felt)
        except MalformedScalar:
            log.warning("Short string decode: not a felt: %r", felt)
            return felt

    packed = bytes(b for b in felt.to_bytes() if b != 0)
    try:
        return packed.decode("ascii")
    except UnicodeDecodeError:
        log.warning("Short string decode: not text: %s", felt.to_hex())
        return felt.to_hex()


def short_string_to_felt(text: str) -> FieldElement:
    """Pack ASCII text (<= 31 chars) into a felt."""
    if len(text) > SHORT_STRING_MAX_LEN:
        raise MalformedScalar(f"Short string longer than {SHORT_STRING_MAX_LEN} chars: {text!r}")
    try:
        raw = text.encode("ascii")
    except UnicodeEncodeError as e:
        raise MalformedScalar(f"Short string must be ASCII: {text!r}") from e
    return FieldElement(int.from_bytes(raw, "big"))


def hex_to_unsigned_int(s: str) -> int:
    """Parse hex (optional 0x prefix) into an unsigned 64-bit int."""
    body = s[2:] if s.startswith("0x") else s
    if not _HEX_BODY.fullmatch(body):
        raise MalformedScalar(f"Invalid hex: {s!r}")
    value = int(body, 16)
    if value > U64_MAX:
        raise MalformedScalar(f"Hex value overflows 64 bits: {s}")
    return value


def unsigned_int_to_hex(n: int) -> str:
    """Lowercase, 0x-prefixed, minimal width."""
    if isinstance(n, bool) or not isinstance(n, int) or not 0 <= n <= U64_MAX:
        raise MalformedScalar(f"Not an unsigned 64-bit int: {n!r}")
    return hex(n)
