from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urlparse

from eth_account import Account
from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, computed_field, field_validator

from ..domain.channel.entities import (
    DEFAULT_MERCHANT_WITHDRAW_AFTER_BLOCKS,
    DEFAULT_PAYER_WITHDRAW_AFTER_BLOCKS,
)


def _validate_http_url(name: str, v: str) -> str:
    if not v:
        raise ValueError(f"{name} cannot be empty")
    parsed = urlparse(v)
    if parsed.scheme not in {"http", "https"}:
        raise ValueError(f"{name} must start with http:// or https://")
    if not parsed.netloc:
        raise ValueError(f"{name} must include a host")
    return v


class Settings(BaseModel):
    rpc_url: str
    contract_address: str
    private_key: Optional[str] = None
    indexer_url: Optional[str] = None
    merchant_withdraw_after_blocks: int = DEFAULT_MERCHANT_WITHDRAW_AFTER_BLOCKS
    payer_withdraw_after_blocks: int = DEFAULT_PAYER_WITHDRAW_AFTER_BLOCKS
    log_level: str = "INFO"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def sender_address(self) -> Optional[str]:
        """Address derived from the private key, if one is configured."""
        if not self.private_key:
            return None
        return Account.from_key(self.private_key).address

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        return _validate_http_url("RPC URL", v)

    @field_validator("indexer_url")
    @classmethod
    def validate_indexer_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_http_url("Indexer URL", v)

    @field_validator("contract_address")
    @classmethod
    def validate_contract_address(cls, v: str) -> str:
        if not is_address(v):
            raise ValueError("Contract address must be a 20-byte hex address")
        return to_checksum_address(v)

    @field_validator("private_key")
    @classmethod
    def validate_private_key(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        try:
            Account.from_key(v)
        except Exception as e:
            raise ValueError(f"Invalid private key: {e}") from e
        return v

    @field_validator("merchant_withdraw_after_blocks", "payer_withdraw_after_blocks")
    @classmethod
    def validate_withdraw_blocks(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Withdraw-after block counts must be >= 0")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    rpc_url = os.environ.get("HASHCHAIN_RPC_URL")
    contract_address = os.environ.get("HASHCHAIN_CONTRACT_ADDRESS")
    if not (rpc_url and contract_address):
        raise ValueError("HASHCHAIN_RPC_URL and HASHCHAIN_CONTRACT_ADDRESS are required")
    return Settings(
        rpc_url=rpc_url,
        contract_address=contract_address,
        private_key=os.environ.get("HASHCHAIN_PRIVATE_KEY") or None,
        indexer_url=os.environ.get("HASHCHAIN_INDEXER_URL") or None,
        merchant_withdraw_after_blocks=int(
            os.environ.get(
                "HASHCHAIN_MERCHANT_WITHDRAW_AFTER_BLOCKS",
                str(DEFAULT_MERCHANT_WITHDRAW_AFTER_BLOCKS),
            )
        ),
        payer_withdraw_after_blocks=int(
            os.environ.get(
                "HASHCHAIN_PAYER_WITHDRAW_AFTER_BLOCKS",
                str(DEFAULT_PAYER_WITHDRAW_AFTER_BLOCKS),
            )
        ),
        log_level=os.environ.get("HASHCHAIN_LOG_LEVEL", "INFO"),
    )
