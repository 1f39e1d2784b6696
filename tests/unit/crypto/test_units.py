"""Unit tests for ether/wei conversion and seed generation."""

from decimal import Decimal

import pytest

from hashchain.crypto.units import from_wei, generate_seed, to_wei


class TestToWei:
    def test_whole_ether(self) -> None:
        assert to_wei("1") == 10**18

    def test_fractional_ether(self) -> None:
        assert to_wei("0.0001") == 10**14

    @pytest.mark.parametrize("value", [0.5, Decimal("0.5"), "0.5"])
    def test_accepts_float_decimal_and_str(self, value) -> None:
        assert to_wei(value) == 5 * 10**17


class TestFromWei:
    def test_normalizes_trailing_zeros(self) -> None:
        assert from_wei(10**14) == "0.0001"

    def test_whole_ether_has_no_exponent(self) -> None:
        assert from_wei(2 * 10**18) == "2"

    def test_zero(self) -> None:
        assert from_wei(0) == "0"


class TestGenerateSeed:
    def test_is_32_byte_hex(self) -> None:
        seed = generate_seed()
        assert seed.startswith("0x")
        assert len(bytes.fromhex(seed[2:])) == 32

    def test_seeds_differ(self) -> None:
        assert generate_seed() != generate_seed()
