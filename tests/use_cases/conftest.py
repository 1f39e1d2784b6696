"""Pytest fixtures for use case tests."""

from __future__ import annotations

from typing import AsyncGenerator

import pytest

from hashchain.application.channel.use_cases.channel_lifecycle import (
    ChannelClientConfig,
    HashchainChannelService,
)
from tests.fixtures import (
    InMemoryChannelLedger,
    InMemoryLedgerState,
    InMemoryTokenLedger,
)


# ============================================================================
# Ledger Fixtures
# ============================================================================


@pytest.fixture
async def ledger_state() -> AsyncGenerator[InMemoryLedgerState, None]:
    """Create the chain state shared by payer and merchant bindings."""
    state = InMemoryLedgerState()
    yield state
    state.clear()


@pytest.fixture
def payer_token_ledger(
    ledger_state: InMemoryLedgerState, payer_address: str
) -> InMemoryTokenLedger:
    return InMemoryTokenLedger(payer_address, ledger_state)


@pytest.fixture
def payer_ledger(
    ledger_state: InMemoryLedgerState,
    payer_address: str,
    payer_token_ledger: InMemoryTokenLedger,
) -> InMemoryChannelLedger:
    """Channel binding signing as the payer."""
    return InMemoryChannelLedger(ledger_state, payer_address, payer_token_ledger)


@pytest.fixture
def merchant_ledger(
    ledger_state: InMemoryLedgerState, merchant_address: str
) -> InMemoryChannelLedger:
    """Channel binding signing as the merchant."""
    return InMemoryChannelLedger(ledger_state, merchant_address)


@pytest.fixture
def read_only_ledger(ledger_state: InMemoryLedgerState) -> InMemoryChannelLedger:
    """Binding with no signer attached."""
    return InMemoryChannelLedger(ledger_state, None)


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def payer_service(
    payer_ledger: InMemoryChannelLedger, payer_token_ledger: InMemoryTokenLedger
) -> HashchainChannelService:
    return HashchainChannelService(
        ChannelClientConfig(ledger=payer_ledger, token_ledger=payer_token_ledger)
    )


@pytest.fixture
def merchant_service(merchant_ledger: InMemoryChannelLedger) -> HashchainChannelService:
    return HashchainChannelService(ChannelClientConfig(ledger=merchant_ledger))


@pytest.fixture
def read_only_service(read_only_ledger: InMemoryChannelLedger) -> HashchainChannelService:
    return HashchainChannelService(ChannelClientConfig(ledger=read_only_ledger))
