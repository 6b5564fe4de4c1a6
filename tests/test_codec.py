"""Tests for the scalar codec — short strings and u64 hex."""

from __future__ import annotations

import pytest

from fileproof.codec import (
    felt_to_short_string,
    hex_to_unsigned_int,
    short_string_to_felt,
    unsigned_int_to_hex,
)
from fileproof.errors import MalformedScalar
from fileproof.felt import FieldElement


class TestFeltToShortString:
    def test_zero_padded_hi(self):
        felt = FieldElement(int.from_bytes(bytes([0, 0, 72, 105]), "big"))
        assert felt_to_short_string(felt) == "Hi"

    def test_from_hex_string(self):
        assert felt_to_short_string("0x4869") == "Hi"

    def test_interior_zero_bytes_skipped(self):
        felt = FieldElement(int.from_bytes(bytes([72, 0, 105]), "big"))
        assert felt_to_short_string(felt) == "Hi"

    def test_zero_is_empty_string(self):
        assert felt_to_short_string(FieldElement(0)) == ""

    def test_full_31_chars(self):
        text = "a" * 31
        assert felt_to_short_string(short_string_to_felt(text)) == text

    def test_malformed_hex_returned_as_is(self):
        assert felt_to_short_string("0xnothex") == "0xnothex"
        assert felt_to_short_string("plain") == "plain"

    def test_non_text_falls_back_to_hex(self):
        assert felt_to_short_string(FieldElement(0xFF)) == "0xff"

    def test_high_bytes_fall_back_to_hex(self):
        # 0xC3A9 is "é" in UTF-8 but not a pair of one-byte characters
        assert felt_to_short_string(FieldElement(0xC3A9)) == "0xc3a9"


class TestShortStringToFelt:
    def test_packs_big_endian(self):
        assert short_string_to_felt("Hi") == FieldElement(0x4869)

    def test_empty(self):
        assert short_string_to_felt("") == FieldElement(0)

    def test_too_long(self):
        with pytest.raises(MalformedScalar):
            short_string_to_felt("a" * 32)

    def test_non_ascii(self):
        with pytest.raises(MalformedScalar):
            short_string_to_felt("café")


class TestHexToUnsignedInt:
    def test_with_and_without_prefix(self):
        assert hex_to_unsigned_int("0x1a") == 26
        assert hex_to_unsigned_int("1a") == 26
        assert hex_to_unsigned_int("0xFF") == 255

    def test_max_u64(self):
        assert hex_to_unsigned_int("0xffffffffffffffff") == 2**64 - 1

    def test_overflow(self):
        with pytest.raises(MalformedScalar):
            hex_to_unsigned_int("0x10000000000000000")

    @pytest.mark.parametrize("bad", ["", "0x", "0xg", "xyz", "0x1_0", "-1"])
    def test_malformed(self, bad):
        with pytest.raises(MalformedScalar):
            hex_to_unsigned_int(bad)


class TestUnsignedIntToHex:
    def test_minimal_lowercase(self):
        assert unsigned_int_to_hex(0) == "0x0"
        assert unsigned_int_to_hex(255) == "0xff"
        assert unsigned_int_to_hex(2**64 - 1) == "0xffffffffffffffff"

    def test_out_of_range(self):
        with pytest.raises(MalformedScalar):
            unsigned_int_to_hex(-1)
        with pytest.raises(MalformedScalar):
            unsigned_int_to_hex(2**64)

    @pytest.mark.parametrize("s", ["0x0", "0x1", "0x1a", "0xdeadbeef", "0xffffffffffffffff"])
    def test_canonical_round_trip(self, s):
        assert unsigned_int_to_hex(hex_to_unsigned_int(s)) == s
