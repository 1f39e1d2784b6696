from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

from prometheus_client import Counter, Histogram

from ....domain.channel.entities import ZERO_ADDRESS, Channel
from ....domain.errors import ContractError, HashchainError
from ....domain.shared import (
    ChannelLedgerProtocol,
    PendingTransactionProtocol,
    TokenLedgerProtocol,
)
from ....infrastructure.contract.abis import erc20_abi
from ....infrastructure.contract.error_decoder import decode_contract_error
from ..dtos import CreateChannelParams, ReclaimChannelParams, RedeemChannelParams
from .allowance import AllowanceService
from .channel_validators import (
    validate_disclosed_token,
    validate_number_of_tokens,
    validate_signer,
    validate_tokens_used,
    validate_withdraw_windows,
)

logger = logging.getLogger(__name__)

SUBMIT_DURATION_BUCKETS = (
    [float(x) for x in (50, 100, 250, 500, 1000, 2500, 5000, 10000)] + [float("inf")]
)

channel_operations_total = Counter(
    "hashchain_channel_operations_total",
    "Channel transactions submitted to the ledger",
    ["operation", "status"],
)

channel_submit_duration_milliseconds = Histogram(
    "hashchain_channel_submit_duration_milliseconds",
    "Wall time until a channel transaction is broadcast (ms)",
    ["operation", "status"],
    buckets=SUBMIT_DURATION_BUCKETS,
)


@dataclass(frozen=True)
class ChannelClientConfig:
    """Connection handles for one client session.

    Built once and shared read-only by every operation. `abi` defaults to the
    ledger binding's own ABI and is what ledger failures are decoded against.
    """

    ledger: ChannelLedgerProtocol
    token_ledger: Optional[TokenLedgerProtocol] = None
    abi: Optional[Sequence[Mapping[str, Any]]] = None


class HashchainChannelService:
    """Creates, redeems and reclaims hash-chain channels on the ledger.

    Every write is a single attempt. A failure is decoded once against the
    contract ABI and re-raised as `ContractError` carrying the error name.
    """

    def __init__(self, config: ChannelClientConfig):
        self.config = config
        self.ledger = config.ledger
        self.abi: list[Mapping[str, Any]] = list(
            config.abi if config.abi is not None else config.ledger.abi
        )
        self.allowance = (
            AllowanceService(config.token_ledger)
            if config.token_ledger is not None
            else None
        )

    def _contract_error(
        self,
        operation: str,
        error: Exception,
        abi: Sequence[Mapping[str, Any]],
    ) -> ContractError:
        decoded = decode_contract_error(error, abi)
        contract_error = ContractError(
            decoded.error_name if decoded else None,
            decoded.selector if decoded else None,
        )
        logger.warning("%s failed: %s", operation, contract_error)
        return contract_error

    async def _submit(
        self,
        operation: str,
        call: Callable[[], Awaitable[PendingTransactionProtocol]],
    ) -> PendingTransactionProtocol:
        start_time = time.perf_counter()
        status = "error"
        try:
            tx = await call()
            status = "ok"
        except HashchainError:
            raise
        except Exception as e:
            raise self._contract_error(operation, e, self.abi) from e
        finally:
            elapsed_ms = (time.perf_counter() - start_time) * 1000.0
            channel_operations_total.labels(operation=operation, status=status).inc()
            channel_submit_duration_milliseconds.labels(
                operation=operation, status=status
            ).observe(elapsed_ms)
        logger.info("%s submitted: %s", operation, tx.hash)
        return tx

    async def create_channel(
        self,
        params: CreateChannelParams,
        *,
        ensure_allowance: bool = True,
    ) -> PendingTransactionProtocol:
        """Open a channel committing to `params.trust_anchor`.

        For the native currency the deposit travels as the transaction value.
        For an ERC-20 token the contract pulls `amount` through an allowance,
        which is raised first when `ensure_allowance` is set.

        Raises:
            SignerRequiredError: If the ledger binding has no sender.
            ValueError: On parameters the contract would reject.
            ApprovalFailedError: If the allowance approval reverted.
            ContractError: If the ledger rejects the call.
        """
        sender = validate_signer(self.ledger.sender)
        validate_number_of_tokens(params.number_of_tokens)
        validate_withdraw_windows(
            params.merchant_withdraw_after_blocks, params.payer_withdraw_after_blocks
        )

        overrides = dict(params.overrides)
        if params.is_native:
            overrides["value"] = params.amount
        else:
            if overrides.get("value"):
                raise ValueError(
                    "Native value cannot be attached to a token-denominated channel"
                )
            overrides.pop("value", None)
            if ensure_allowance:
                await self._ensure_allowance(sender, params)

        return await self._submit(
            "createChannel",
            lambda: self.ledger.create_channel(params, overrides),
        )

    async def _ensure_allowance(self, sender: str, params: CreateChannelParams) -> None:
        if self.allowance is None:
            raise ValueError("A token ledger is required for token-denominated channels")
        try:
            await self.allowance.ensure_allowance(
                sender, params.token, self.ledger.address, params.amount
            )
        except HashchainError:
            raise
        except Exception as e:
            raise self._contract_error("approve", e, [*self.abi, *erc20_abi()]) from e

    async def redeem_channel(
        self,
        params: RedeemChannelParams,
        *,
        trust_anchor: Optional[bytes] = None,
    ) -> PendingTransactionProtocol:
        """Claim payment with the digest disclosed after `number_of_tokens_used` tokens.

        When `trust_anchor` is given the disclosure is verified locally first,
        so a bad claim fails without spending a transaction.

        Raises:
            SignerRequiredError: If the ledger binding has no sender.
            TokenVerificationError: If the local pre-check fails.
            ContractError: If the ledger rejects the call.
        """
        validate_signer(self.ledger.sender)
        validate_tokens_used(params.number_of_tokens_used)
        if trust_anchor is not None:
            validate_disclosed_token(
                trust_anchor, params.final_hash_value, params.number_of_tokens_used
            )
        return await self._submit(
            "redeemChannel",
            lambda: self.ledger.redeem_channel(params, {}),
        )

    async def reclaim_channel(
        self, params: ReclaimChannelParams
    ) -> PendingTransactionProtocol:
        """Recover an unredeemed deposit once the payer's window has passed."""
        validate_signer(self.ledger.sender)
        return await self._submit(
            "reclaimChannel",
            lambda: self.ledger.reclaim_channel(params, {}),
        )

    async def get_channel(
        self, payer: str, merchant: str, token: str = ZERO_ADDRESS
    ) -> Optional[Channel]:
        try:
            return await self.ledger.get_channel(payer, merchant, token)
        except Exception as e:
            raise self._contract_error("channelsMapping", e, self.abi) from e
