from __future__ import annotations

import logging
from typing import Optional

from eth_utils import to_checksum_address

from ....domain.channel.entities import is_native_token
from ....domain.errors import ApprovalFailedError
from ....domain.shared import PendingTransactionProtocol, TokenLedgerProtocol

logger = logging.getLogger(__name__)


class AllowanceService:
    """Reads and raises ERC-20 allowances ahead of token-denominated channels."""

    def __init__(self, token_ledger: TokenLedgerProtocol):
        self.token_ledger = token_ledger

    @staticmethod
    def _check_token(token_address: str) -> str:
        if is_native_token(token_address):
            raise ValueError("Native currency has no allowance")
        return to_checksum_address(token_address)

    async def current_allowance(
        self, owner: str, token_address: str, spender: str
    ) -> int:
        token_address = self._check_token(token_address)
        return await self.token_ledger.allowance(
            token_address, to_checksum_address(owner), to_checksum_address(spender)
        )

    async def approve(
        self, token_address: str, spender: str, amount: int
    ) -> PendingTransactionProtocol:
        if amount < 0:
            raise ValueError("amount must be >= 0")
        token_address = self._check_token(token_address)
        tx = await self.token_ledger.approve(
            token_address, to_checksum_address(spender), amount
        )
        logger.info(
            "Submitted approval of %d on %s for %s: %s",
            amount,
            token_address,
            spender,
            tx.hash,
        )
        return tx

    async def ensure_allowance(
        self, owner: str, token_address: str, spender: str, amount: int
    ) -> Optional[PendingTransactionProtocol]:
        """Approve `amount` only when the current allowance is insufficient.

        Waits for the approval to be mined so a following transfer sees it.
        Returns the approval transaction, or None when none was needed.

        Raises:
            ApprovalFailedError: If the approval was mined with a failed status.
        """
        allowance = await self.current_allowance(owner, token_address, spender)
        if allowance >= amount:
            logger.info(
                "Sufficient allowance already approved (%d >= %d)", allowance, amount
            )
            return None
        tx = await self.approve(token_address, spender, amount)
        receipt = await tx.wait()
        if not receipt.succeeded:
            logger.error(
                "Approval %s reverted in block %d", tx.hash, receipt.block_number
            )
            raise ApprovalFailedError(tx.hash)
        logger.info("Approval confirmed in block %d", receipt.block_number)
        return tx
