"""Conversion helpers between ether and wei, plus random seed generation."""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Union

from eth_utils import from_wei as _from_wei
from eth_utils import keccak, to_wei as _to_wei


def to_wei(ether: Union[str, int, float, Decimal]) -> int:
    """Convert an ether amount into wei."""
    return _to_wei(Decimal(str(ether)), "ether")


def from_wei(wei: int) -> str:
    """Convert wei into a normalized ether string (e.g. ``"0.0001"``)."""
    value = _from_wei(wei, "ether")
    return format(Decimal(value).normalize(), "f")


def generate_seed() -> str:
    """Return a fresh random 0x-prefixed 32-byte seed."""
    return "0x" + keccak(os.urandom(32)).hex()
