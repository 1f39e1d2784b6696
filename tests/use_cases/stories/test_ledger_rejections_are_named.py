"""Story: Ledger rejections reach the caller as named contract errors."""

from __future__ import annotations

import pytest

from hashchain.application.channel.dtos import CreateChannelParams, RedeemChannelParams
from hashchain.application.channel.use_cases.channel_lifecycle import (
    HashchainChannelService,
)
from hashchain.crypto.hashchain import HashChain
from hashchain.domain.errors import ContractError


@pytest.mark.asyncio
async def test_duplicate_channel_is_rejected(
    payer_service: HashchainChannelService,
    merchant_address: str,
) -> None:
    """
    Story: A second channel for the same (payer, merchant, token) is refused.
    """
    chain = HashChain.create(length=10, seed="dup-seed")
    params = CreateChannelParams(
        merchant=merchant_address,
        trust_anchor=chain.trust_anchor,
        amount=100,
        number_of_tokens=10,
    )
    await payer_service.create_channel(params)

    with pytest.raises(ContractError) as exc_info:
        await payer_service.create_channel(params)

    assert exc_info.value.name == "ChannelAlreadyExist"
    assert str(exc_info.value) == "Contract Error: ChannelAlreadyExist"


@pytest.mark.asyncio
async def test_forged_token_is_rejected_by_ledger(
    payer_service: HashchainChannelService,
    merchant_service: HashchainChannelService,
    payer_address: str,
    merchant_address: str,
) -> None:
    """
    Story: Claiming more tokens than the disclosed digest covers fails
    verification on the ledger.
    """
    chain = HashChain.create(length=9000, seed="initial-seed")
    await payer_service.create_channel(
        CreateChannelParams(
            merchant=merchant_address,
            trust_anchor=chain.trust_anchor,
            amount=9000,
            number_of_tokens=9000,
        )
    )

    with pytest.raises(ContractError) as exc_info:
        await merchant_service.redeem_channel(
            RedeemChannelParams(
                payer=payer_address,
                final_hash_value=chain.digests[1000],
                number_of_tokens_used=7999,
            )
        )

    assert exc_info.value.name == "HashchainVerificationFailed"
    # The channel stays open for a correct claim
    tx = await merchant_service.redeem_channel(
        RedeemChannelParams(
            payer=payer_address,
            final_hash_value=chain.digests[1000],
            number_of_tokens_used=8000,
        )
    )
    assert (await tx.wait()).succeeded


@pytest.mark.asyncio
async def test_overclaim_is_rejected_by_ledger(
    payer_service: HashchainChannelService,
    merchant_service: HashchainChannelService,
    payer_address: str,
    merchant_address: str,
) -> None:
    chain = HashChain.create(length=10, seed="over-seed")
    await payer_service.create_channel(
        CreateChannelParams(
            merchant=merchant_address,
            trust_anchor=chain.trust_anchor,
            amount=100,
            number_of_tokens=10,
        )
    )

    with pytest.raises(ContractError) as exc_info:
        await merchant_service.redeem_channel(
            RedeemChannelParams(
                payer=payer_address,
                final_hash_value=chain.digests[0],
                number_of_tokens_used=11,
            )
        )

    assert exc_info.value.name == "TokenCountExceeded"
