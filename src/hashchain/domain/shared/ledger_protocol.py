"""Protocol interfaces for the ledger collaborators.

The channel services only talk to the ledger through these protocols. The
web3-backed implementations live in ``infrastructure.ledger``; tests supply
in-memory fakes with call tracking.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from ...application.channel.dtos import (
        AllChannelsDTO,
        ChannelEventRecord,
        CreateChannelParams,
        ReclaimChannelParams,
        RedeemChannelParams,
        TransactionReceiptDTO,
    )
    from ..channel.entities import Channel


class PendingTransactionProtocol(Protocol):
    """A broadcast transaction that has not necessarily been mined yet."""

    @property
    def hash(self) -> str: ...

    async def wait(self, timeout: Optional[float] = None) -> "TransactionReceiptDTO":
        """Suspend until the transaction is mined and return its receipt."""
        ...


class ChannelLedgerProtocol(Protocol):
    """The HashchainProtocol contract entry points.

    Write methods submit a transaction and return once it is broadcast. They
    raise whatever the transport raises; decoding is the caller's job.
    """

    @property
    def sender(self) -> Optional[str]:
        """Address transactions are sent from, or None for a read-only binding."""
        ...

    @property
    def address(self) -> str:
        """Checksummed contract address; the spender for token allowances."""
        ...

    @property
    def abi(self) -> list[dict[str, Any]]: ...

    async def create_channel(
        self, params: "CreateChannelParams", overrides: dict[str, Any]
    ) -> PendingTransactionProtocol: ...

    async def redeem_channel(
        self, params: "RedeemChannelParams", overrides: dict[str, Any]
    ) -> PendingTransactionProtocol: ...

    async def reclaim_channel(
        self, params: "ReclaimChannelParams", overrides: dict[str, Any]
    ) -> PendingTransactionProtocol: ...

    async def get_channel(
        self, payer: str, merchant: str, token: str
    ) -> Optional["Channel"]: ...


class TokenLedgerProtocol(Protocol):
    """The ERC-20 calls needed to fund token-denominated channels."""

    async def allowance(self, token_address: str, owner: str, spender: str) -> int: ...

    async def approve(
        self, token_address: str, spender: str, amount: int
    ) -> PendingTransactionProtocol: ...


class ChannelEventQueryProtocol(Protocol):
    """Read-only historical event lookups (indexer); observability only."""

    async def fetch_channels_created(self, payer: str) -> list["ChannelEventRecord"]: ...

    async def fetch_channels_redeemed(
        self, merchant: str
    ) -> list["ChannelEventRecord"]: ...

    async def fetch_channels_reclaimed(
        self, merchant: str
    ) -> list["ChannelEventRecord"]: ...

    async def fetch_all_channels(self) -> "AllChannelsDTO": ...
