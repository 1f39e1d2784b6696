"""Channel domain entities as observed on the ledger."""

from __future__ import annotations

from enum import Enum
from typing import Final, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

ZERO_ADDRESS: Final[str] = "0x0000000000000000000000000000000000000000"
DEFAULT_MERCHANT_WITHDRAW_AFTER_BLOCKS: Final[int] = 1000
DEFAULT_PAYER_WITHDRAW_AFTER_BLOCKS: Final[int] = 2000


def is_native_token(token: str) -> bool:
    """The zero address stands for the chain's native currency."""
    return int(token, 16) == 0


class ChannelState(str, Enum):
    """Lifecycle enforced by the ledger: CREATED -> REDEEMED | RECLAIMED."""

    CREATED = "created"
    REDEEMED = "redeemed"
    RECLAIMED = "reclaimed"

    @property
    def is_terminal(self) -> bool:
        return self is not ChannelState.CREATED

    def can_transition_to(self, target: "ChannelState") -> bool:
        return self is ChannelState.CREATED and target.is_terminal


class Channel(BaseModel):
    """An open channel keyed by (payer, merchant, token)."""

    model_config = ConfigDict(frozen=True)

    payer: str
    merchant: str
    token: str = ZERO_ADDRESS
    trust_anchor: bytes
    amount: int = Field(..., ge=0)
    number_of_tokens: int = Field(..., ge=0)
    merchant_withdraw_after_blocks: int = DEFAULT_MERCHANT_WITHDRAW_AFTER_BLOCKS
    payer_withdraw_after_blocks: int = DEFAULT_PAYER_WITHDRAW_AFTER_BLOCKS
    number_of_tokens_used: int = 0
    final_hash_value: Optional[bytes] = None

    @property
    def is_native(self) -> bool:
        return is_native_token(self.token)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.payer.lower(), self.merchant.lower(), self.token.lower())

    @field_serializer("trust_anchor")
    def serialize_trust_anchor(self, value: bytes) -> str:
        return "0x" + value.hex()

    @field_serializer("final_hash_value")
    def serialize_final_hash_value(self, value: Optional[bytes]) -> Optional[str]:
        return "0x" + value.hex() if value is not None else None


class ContractErrorInfo(BaseModel):
    """A revert payload matched against the contract's custom errors."""

    model_config = ConfigDict(frozen=True)

    selector: bytes
    error_name: Optional[str] = None

    @field_serializer("selector")
    def serialize_selector(self, value: bytes) -> str:
        return "0x" + value.hex()
