"""Domain-specific exceptions."""

from __future__ import annotations


class HashchainError(Exception):
    """Base class for every error raised by the hashchain client."""


class SignerRequiredError(HashchainError):
    """Raised when a write operation is attempted without an authenticated sender."""

    def __init__(self, message: str = "Signer required to send transactions") -> None:
        super().__init__(message)


class InvalidLengthError(HashchainError, ValueError):
    """Raised when a hash chain length is out of bounds."""


class InvalidErrorDataError(HashchainError):
    """Raised when no usable revert payload can be extracted from a ledger error."""


class SelectorNotFoundError(HashchainError):
    """Raised when a revert selector matches none of the ABI's custom errors."""

    def __init__(self, selector: bytes) -> None:
        self.selector = selector
        super().__init__(f"Error selector 0x{selector.hex()} not found in ABI")


class TokenVerificationError(HashchainError, ValueError):
    """Raised when a disclosed digest does not hash forward to the trust anchor."""


class ContractError(HashchainError):
    """A ledger call failed; carries the decoded custom error name or ``"Unknown"``."""

    UNKNOWN = "Unknown"

    def __init__(self, name: str | None = None, selector: bytes | None = None) -> None:
        self.name = name or self.UNKNOWN
        self.selector = selector
        super().__init__(f"Contract Error: {self.name}")

    @property
    def is_unknown(self) -> bool:
        return self.name == self.UNKNOWN


class IndexerQueryError(HashchainError):
    """Raised when the historical-event indexer returns GraphQL errors."""


class ApprovalFailedError(HashchainError):
    """Raised when an ERC-20 approval was mined but reverted."""

    def __init__(self, tx_hash: str) -> None:
        self.tx_hash = tx_hash
        super().__init__(f"Approval transaction {tx_hash} reverted")
