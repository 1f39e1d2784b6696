"""Parameter records and results for channel operations."""

from __future__ import annotations

from typing import Any, Optional

from eth_utils import is_address, to_checksum_address
from hexbytes import HexBytes
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ...domain.channel.entities import (
    DEFAULT_MERCHANT_WITHDRAW_AFTER_BLOCKS,
    DEFAULT_PAYER_WITHDRAW_AFTER_BLOCKS,
    ZERO_ADDRESS,
    is_native_token,
)


def _checksum(value: str) -> str:
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return to_checksum_address(value)


def _bytes32(value: Any) -> bytes:
    try:
        raw = bytes(HexBytes(value))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid bytes32 value: {e}") from e
    if len(raw) != 32:
        raise ValueError(f"Expected 32 bytes, got {len(raw)}")
    return raw


class CreateChannelParams(BaseModel):
    """Terms submitted when a payer opens a channel."""

    model_config = ConfigDict(frozen=True)

    merchant: str
    token: str = ZERO_ADDRESS
    trust_anchor: bytes
    amount: int = Field(..., gt=0)
    number_of_tokens: int = Field(..., gt=0)
    merchant_withdraw_after_blocks: int = Field(
        DEFAULT_MERCHANT_WITHDRAW_AFTER_BLOCKS, ge=0
    )
    payer_withdraw_after_blocks: int = Field(DEFAULT_PAYER_WITHDRAW_AFTER_BLOCKS, ge=0)
    overrides: dict[str, Any] = Field(default_factory=dict)

    @field_validator("merchant", "token")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _checksum(v)

    @field_validator("trust_anchor", mode="before")
    @classmethod
    def validate_trust_anchor(cls, v: Any) -> bytes:
        return _bytes32(v)

    @property
    def is_native(self) -> bool:
        return is_native_token(self.token)

    def contract_args(self) -> tuple[Any, ...]:
        return (
            self.merchant,
            self.token,
            self.trust_anchor,
            self.amount,
            self.number_of_tokens,
            self.merchant_withdraw_after_blocks,
            self.payer_withdraw_after_blocks,
        )


class RedeemChannelParams(BaseModel):
    """A merchant's claim: the disclosed digest and how many tokens it covers."""

    model_config = ConfigDict(frozen=True)

    payer: str
    token: str = ZERO_ADDRESS
    final_hash_value: bytes
    number_of_tokens_used: int = Field(..., ge=0)

    @field_validator("payer", "token")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _checksum(v)

    @field_validator("final_hash_value", mode="before")
    @classmethod
    def validate_final_hash_value(cls, v: Any) -> bytes:
        return _bytes32(v)

    def contract_args(self) -> tuple[Any, ...]:
        return (
            self.payer,
            self.token,
            self.final_hash_value,
            self.number_of_tokens_used,
        )


class ReclaimChannelParams(BaseModel):
    """Payer-initiated recovery of an unredeemed deposit."""

    model_config = ConfigDict(frozen=True)

    merchant: str
    token: str = ZERO_ADDRESS

    @field_validator("merchant", "token")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _checksum(v)

    def contract_args(self) -> tuple[Any, ...]:
        return (self.merchant, self.token)


class TransactionReceiptDTO(BaseModel):
    """Confirmed transaction summary."""

    transaction_hash: str
    block_number: int
    status: int = 1
    logs: list[Any] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class ChannelEventLog(BaseModel):
    """A channel event decoded from a transaction receipt."""

    name: str
    args: dict[str, Any]
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None

    @field_serializer("args")
    def serialize_args(self, value: dict[str, Any]) -> dict[str, Any]:
        return {
            k: "0x" + v.hex() if isinstance(v, (bytes, bytearray)) else v
            for k, v in value.items()
        }


class ChannelEventRecord(BaseModel):
    """Historical channel event as served by the indexer."""

    model_config = ConfigDict(populate_by_name=True)

    block_number: int
    merchant: str
    payer: str
    timestamp: int = Field(..., alias="timestamp_")
    transaction_hash: str = Field(..., alias="transactionHash_")

    @field_validator("block_number", "timestamp", mode="before")
    @classmethod
    def coerce_int(cls, v: Any) -> int:
        return int(v)


class ChannelSummaryRecord(BaseModel):
    """Row of the indexer's ``channelCreateds`` listing."""

    id: str
    merchant: str
    payer: str
    amount: int

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> int:
        return int(v)


class AllChannelsDTO(BaseModel):
    """Every channel event known to the indexer, grouped by kind."""

    created: list[ChannelSummaryRecord] = Field(default_factory=list)
    redeemed_ids: list[str] = Field(default_factory=list)
    refunded_ids: list[str] = Field(default_factory=list)
    reclaimed_ids: list[str] = Field(default_factory=list)
