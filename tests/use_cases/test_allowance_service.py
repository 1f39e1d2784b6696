"""Use case tests for AllowanceService using the in-memory token ledger."""

from __future__ import annotations

import pytest

from hashchain.application.channel.use_cases.allowance import AllowanceService
from hashchain.domain.channel.entities import ZERO_ADDRESS
from hashchain.domain.errors import ApprovalFailedError
from tests.fixtures import InMemoryChannelLedger, InMemoryTokenLedger

SPENDER = InMemoryChannelLedger.address


@pytest.mark.asyncio
async def test_ensure_allowance_approves_when_insufficient(
    payer_token_ledger: InMemoryTokenLedger, payer_address: str, token_address: str
) -> None:
    """A missing allowance is raised to the exact amount, and the approval is awaited."""
    service = AllowanceService(payer_token_ledger)

    tx = await service.ensure_allowance(payer_address, token_address, SPENDER, 500)

    assert tx is not None
    assert tx.waited == 1
    assert [name for name, _ in payer_token_ledger.calls] == ["allowance", "approve"]
    assert payer_token_ledger.calls[1][1]["amount"] == 500
    assert payer_token_ledger.allowance_of(token_address, payer_address, SPENDER) == 500


@pytest.mark.asyncio
async def test_ensure_allowance_skips_when_sufficient(
    payer_token_ledger: InMemoryTokenLedger, payer_address: str, token_address: str
) -> None:
    payer_token_ledger.set_allowance(token_address, payer_address, SPENDER, 1000)
    service = AllowanceService(payer_token_ledger)

    tx = await service.ensure_allowance(payer_address, token_address, SPENDER, 1000)

    assert tx is None
    assert [name for name, _ in payer_token_ledger.calls] == ["allowance"]


@pytest.mark.asyncio
async def test_current_allowance_reads_ledger(
    payer_token_ledger: InMemoryTokenLedger, payer_address: str, token_address: str
) -> None:
    payer_token_ledger.set_allowance(token_address, payer_address, SPENDER, 42)
    service = AllowanceService(payer_token_ledger)

    assert (
        await service.current_allowance(payer_address.lower(), token_address, SPENDER)
        == 42
    )


@pytest.mark.asyncio
async def test_native_currency_has_no_allowance(
    payer_token_ledger: InMemoryTokenLedger, payer_address: str
) -> None:
    service = AllowanceService(payer_token_ledger)

    with pytest.raises(ValueError, match="Native currency"):
        await service.current_allowance(payer_address, ZERO_ADDRESS, SPENDER)
    assert payer_token_ledger.calls == []


@pytest.mark.asyncio
async def test_negative_approval_rejected(
    payer_token_ledger: InMemoryTokenLedger, token_address: str
) -> None:
    service = AllowanceService(payer_token_ledger)

    with pytest.raises(ValueError, match=">= 0"):
        await service.approve(token_address, SPENDER, -1)
    assert payer_token_ledger.calls == []


@pytest.mark.asyncio
async def test_reverted_approval_raises(
    payer_token_ledger: InMemoryTokenLedger, payer_address: str, token_address: str
) -> None:
    """An approval mined with a failed status is not treated as granted."""
    payer_token_ledger.set_approval_status(0)
    service = AllowanceService(payer_token_ledger)

    with pytest.raises(ApprovalFailedError, match="reverted"):
        await service.ensure_allowance(payer_address, token_address, SPENDER, 500)

    assert payer_token_ledger.allowance_of(token_address, payer_address, SPENDER) == 0
