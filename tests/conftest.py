"""Shared pytest fixtures: deterministic accounts and addresses."""

from __future__ import annotations

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

PAYER_KEY = "0x" + "11" * 32
MERCHANT_KEY = "0x" + "22" * 32
TOKEN_ADDRESS = to_checksum_address("0x" + "7e" * 20)


@pytest.fixture
def payer_account() -> LocalAccount:
    return Account.from_key(PAYER_KEY)


@pytest.fixture
def merchant_account() -> LocalAccount:
    return Account.from_key(MERCHANT_KEY)


@pytest.fixture
def payer_address(payer_account: LocalAccount) -> str:
    return payer_account.address


@pytest.fixture
def merchant_address(merchant_account: LocalAccount) -> str:
    return merchant_account.address


@pytest.fixture
def token_address() -> str:
    return TOKEN_ADDRESS
