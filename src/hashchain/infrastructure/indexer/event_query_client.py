"""GraphQL client for the channel-event indexer (subgraph).

Used for history and dashboards only; lifecycle decisions always read the
ledger itself.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type
from types import TracebackType

import httpx

from ...application.channel.dtos import (
    AllChannelsDTO,
    ChannelEventRecord,
    ChannelSummaryRecord,
)
from ...domain.errors import IndexerQueryError
from ..http.http_client import AsyncHttpClient

logger = logging.getLogger(__name__)

EVENT_FIELDS = """
            block_number
            merchant
            payer
            timestamp_
            transactionHash_
"""

CHANNEL_CREATEDS_QUERY = f"""
query ChannelCreateds($payer: Bytes!) {{
    channelCreateds(where: {{ payer: $payer }}) {{{EVENT_FIELDS}    }}
}}
"""

CHANNEL_REDEEMEDS_QUERY = f"""
query ChannelRedeemeds($merchant: Bytes!) {{
    channelRedeemeds(where: {{ merchant: $merchant }}) {{{EVENT_FIELDS}    }}
}}
"""

CHANNEL_RECLAIMEDS_QUERY = f"""
query ChannelReclaimeds($merchant: Bytes!) {{
    channelReclaimeds(where: {{ merchant: $merchant }}) {{{EVENT_FIELDS}    }}
}}
"""

ALL_CHANNELS_QUERY = """
query AllChannels {
    channelCreateds { id merchant payer amount }
    channelRedeemeds { id }
    channelRefundeds { id }
    channelReclaimeds { id }
}
"""


class ChannelEventQueryClient:
    """Asynchronous client for the indexer's GraphQL endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = AsyncHttpClient(base_url, timeout=timeout, transport=transport)

    async def _query(
        self, query: str, variables: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"query": query}
        if variables:
            body["variables"] = variables
        resp = await self._http.post("", json=body)
        payload = resp.json()
        if payload.get("errors"):
            messages = "; ".join(
                str(err.get("message", err)) for err in payload["errors"]
            )
            logger.error("Indexer query failed: %s", messages)
            raise IndexerQueryError(f"GraphQL Error: {messages}")
        return payload.get("data") or {}

    async def _events(
        self, query: str, field: str, variables: dict[str, Any]
    ) -> list[ChannelEventRecord]:
        data = await self._query(query, variables)
        return [ChannelEventRecord.model_validate(row) for row in data.get(field, [])]

    async def fetch_channels_created(self, payer: str) -> list[ChannelEventRecord]:
        return await self._events(
            CHANNEL_CREATEDS_QUERY, "channelCreateds", {"payer": payer.lower()}
        )

    async def fetch_channels_redeemed(
        self, merchant: str
    ) -> list[ChannelEventRecord]:
        return await self._events(
            CHANNEL_REDEEMEDS_QUERY, "channelRedeemeds", {"merchant": merchant.lower()}
        )

    async def fetch_channels_reclaimed(
        self, merchant: str
    ) -> list[ChannelEventRecord]:
        return await self._events(
            CHANNEL_RECLAIMEDS_QUERY,
            "channelReclaimeds",
            {"merchant": merchant.lower()},
        )

    async def fetch_all_channels(self) -> AllChannelsDTO:
        data = await self._query(ALL_CHANNELS_QUERY)
        return AllChannelsDTO(
            created=[
                ChannelSummaryRecord.model_validate(row)
                for row in data.get("channelCreateds", [])
            ],
            redeemed_ids=[row["id"] for row in data.get("channelRedeemeds", [])],
            refunded_ids=[row["id"] for row in data.get("channelRefundeds", [])],
            reclaimed_ids=[row["id"] for row in data.get("channelReclaimeds", [])],
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ChannelEventQueryClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
