"""Story: A client without a signer cannot submit transactions."""

from __future__ import annotations

import pytest

from hashchain.application.channel.dtos import (
    CreateChannelParams,
    ReclaimChannelParams,
    RedeemChannelParams,
)
from hashchain.application.channel.use_cases.channel_lifecycle import (
    HashchainChannelService,
)
from hashchain.crypto.hashchain import HashChain
from hashchain.domain.errors import SignerRequiredError
from tests.fixtures import InMemoryChannelLedger


@pytest.mark.asyncio
async def test_read_only_client_cannot_create(
    read_only_service: HashchainChannelService,
    read_only_ledger: InMemoryChannelLedger,
    merchant_address: str,
) -> None:
    """
    Story: Create fails with SignerRequiredError before the ledger is touched,
    even when the parameters are also invalid.
    """
    chain = HashChain.create(length=10, seed="seed")
    params = CreateChannelParams(
        merchant=merchant_address,
        trust_anchor=chain.trust_anchor,
        amount=100,
        number_of_tokens=70_000,
    )

    with pytest.raises(SignerRequiredError):
        await read_only_service.create_channel(params)

    assert read_only_ledger.calls == []


@pytest.mark.asyncio
async def test_read_only_client_can_still_read(
    read_only_service: HashchainChannelService,
    payer_address: str,
    merchant_address: str,
) -> None:
    assert await read_only_service.get_channel(payer_address, merchant_address) is None


@pytest.mark.asyncio
async def test_read_only_client_cannot_redeem(
    read_only_service: HashchainChannelService,
    read_only_ledger: InMemoryChannelLedger,
    payer_address: str,
) -> None:
    """
    Story: Redeem without a signer fails locally instead of reaching the ledger.
    """
    chain = HashChain.create(length=10, seed="seed")

    with pytest.raises(SignerRequiredError):
        await read_only_service.redeem_channel(
            RedeemChannelParams(
                payer=payer_address,
                final_hash_value=chain.token_at(3),
                number_of_tokens_used=3,
            ),
            trust_anchor=chain.trust_anchor,
        )

    assert read_only_ledger.calls == []


@pytest.mark.asyncio
async def test_read_only_client_cannot_reclaim(
    read_only_service: HashchainChannelService,
    read_only_ledger: InMemoryChannelLedger,
    merchant_address: str,
) -> None:
    """
    Story: Reclaim without a signer fails locally instead of reaching the ledger.
    """
    with pytest.raises(SignerRequiredError):
        await read_only_service.reclaim_channel(
            ReclaimChannelParams(merchant=merchant_address)
        )

    assert read_only_ledger.calls == []
