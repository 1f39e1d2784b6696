"""Pure validation functions for channel operations.

These functions contain business logic validation rules that can be tested
in isolation without dependencies on the ledger or infrastructure.
"""

from __future__ import annotations

from typing import Final, Optional

from ....crypto.hashchain import verify_token
from ....domain.errors import SignerRequiredError, TokenVerificationError

# numberOfTokens / numberOfTokensUsed are uint16 on-chain.
MAX_NUMBER_OF_TOKENS: Final[int] = 2**16 - 1
MAX_WITHDRAW_AFTER_BLOCKS: Final[int] = 2**64 - 1


def validate_signer(sender: Optional[str]) -> str:
    """Ensure a write operation has an authenticated sender.

    Raises:
        SignerRequiredError: If no sender is configured.
    """
    if not sender:
        raise SignerRequiredError()
    return sender


def validate_number_of_tokens(number_of_tokens: int) -> None:
    """Validate the chain length committed at creation.

    Raises:
        ValueError: If the count is not positive or exceeds the contract's bound.
    """
    if number_of_tokens <= 0:
        raise ValueError("number_of_tokens must be positive")
    if number_of_tokens > MAX_NUMBER_OF_TOKENS:
        raise ValueError(
            f"number_of_tokens exceeds contract maximum of {MAX_NUMBER_OF_TOKENS}"
        )


def validate_withdraw_windows(
    merchant_withdraw_after_blocks: int,
    payer_withdraw_after_blocks: int,
) -> None:
    """Validate both withdrawal windows fit the contract's uint64 fields.

    Raises:
        ValueError: If either window is negative or too large.
    """
    for name, value in (
        ("merchant_withdraw_after_blocks", merchant_withdraw_after_blocks),
        ("payer_withdraw_after_blocks", payer_withdraw_after_blocks),
    ):
        if value < 0 or value > MAX_WITHDRAW_AFTER_BLOCKS:
            raise ValueError(f"{name} out of range")


def validate_tokens_used(number_of_tokens_used: int) -> None:
    """Validate the redeemed token count fits the contract's uint16 field."""
    if number_of_tokens_used < 0:
        raise ValueError("number_of_tokens_used must be >= 0")
    if number_of_tokens_used > MAX_NUMBER_OF_TOKENS:
        raise ValueError(
            f"number_of_tokens_used exceeds contract maximum of {MAX_NUMBER_OF_TOKENS}"
        )


def validate_disclosed_token(
    trust_anchor: bytes,
    final_hash_value: bytes,
    number_of_tokens_used: int,
) -> None:
    """Check locally that the disclosed digest hashes to the anchor.

    The ledger hashes ``final_hash_value`` exactly ``number_of_tokens_used``
    times and compares with the stored anchor.

    Raises:
        TokenVerificationError: If the digest does not reach the anchor.
    """
    if not verify_token(trust_anchor, final_hash_value, number_of_tokens_used):
        raise TokenVerificationError(
            "Disclosed hash does not reach the trust anchor in "
            f"{number_of_tokens_used} steps"
        )
