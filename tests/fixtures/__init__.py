"""Test fixtures for in-memory implementations."""

from .in_memory_ledger import (
    ContractRevert,
    FakePendingTransaction,
    InMemoryChannelLedger,
    InMemoryLedgerState,
    InMemoryTokenLedger,
    revert,
)

__all__ = [
    "ContractRevert",
    "FakePendingTransaction",
    "InMemoryChannelLedger",
    "InMemoryLedgerState",
    "InMemoryTokenLedger",
    "revert",
]
