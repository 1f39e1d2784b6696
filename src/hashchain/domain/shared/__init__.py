"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .ledger_protocol import (
    ChannelEventQueryProtocol,
    ChannelLedgerProtocol,
    PendingTransactionProtocol,
    TokenLedgerProtocol,
)

__all__ = [
    "ChannelEventQueryProtocol",
    "ChannelLedgerProtocol",
    "PendingTransactionProtocol",
    "TokenLedgerProtocol",
]
