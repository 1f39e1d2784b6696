"""Story: Payer opens a native-currency channel (use case-based test)."""

from __future__ import annotations

import pytest

from hashchain.application.channel.dtos import CreateChannelParams
from hashchain.application.channel.use_cases.channel_lifecycle import (
    HashchainChannelService,
)
from hashchain.crypto.hashchain import HashChain
from hashchain.crypto.units import to_wei


@pytest.mark.asyncio
async def test_payer_opens_native_channel(
    payer_service: HashchainChannelService,
    payer_address: str,
    merchant_address: str,
) -> None:
    """
    Story: Payer commits to a 100-token chain and deposits 0.001 ether.

    The deposit is attached as the transaction value and the ledger stores
    the trust anchor under (payer, merchant, native).
    """
    # Given: A fresh hash chain
    chain = HashChain.create(length=100, seed="initial-seed")
    params = CreateChannelParams(
        merchant=merchant_address,
        trust_anchor=chain.trust_anchor,
        amount=to_wei("0.001"),
        number_of_tokens=100,
    )

    # When: Payer opens the channel and waits for confirmation
    tx = await payer_service.create_channel(params)
    receipt = await tx.wait()

    # Then: The channel is on the ledger with the committed anchor
    assert tx.hash.startswith("0x")
    assert receipt.succeeded
    assert receipt.logs[0]["event"] == "ChannelCreated"

    channel = await payer_service.get_channel(payer_address, merchant_address)
    assert channel is not None
    assert channel.trust_anchor == chain.trust_anchor
    assert channel.amount == 10**15
    assert channel.number_of_tokens == 100
    assert channel.merchant_withdraw_after_blocks == 1000
    assert channel.payer_withdraw_after_blocks == 2000
