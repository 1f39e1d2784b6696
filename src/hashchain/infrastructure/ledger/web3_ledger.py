from __future__ import annotations

import logging
from typing import Any, Optional, Type
from types import TracebackType

from eth_account import Account
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import LogTopicError, MismatchedABI

from ...application.channel.dtos import (
    ChannelEventLog,
    CreateChannelParams,
    ReclaimChannelParams,
    RedeemChannelParams,
    TransactionReceiptDTO,
)
from ...application.channel.use_cases.channel_lifecycle import ChannelClientConfig
from ...domain.channel.entities import Channel
from ...domain.errors import SignerRequiredError
from ..contract.abis import erc20_abi, hashchain_protocol_abi

logger = logging.getLogger(__name__)

CHANNEL_EVENT_NAMES = (
    "ChannelCreated",
    "ChannelRedeemed",
    "ChannelRefunded",
    "ChannelReclaimed",
)
DEFAULT_RECEIPT_TIMEOUT = 120.0


class Web3PendingTransaction:
    """Broadcast transaction; `wait()` suspends until it is mined."""

    def __init__(self, w3: AsyncWeb3, tx_hash: bytes) -> None:
        self._w3 = w3
        self._tx_hash = HexBytes(tx_hash)

    @property
    def hash(self) -> str:
        return Web3.to_hex(self._tx_hash)

    async def wait(self, timeout: Optional[float] = None) -> TransactionReceiptDTO:
        receipt = await self._w3.eth.wait_for_transaction_receipt(
            self._tx_hash, timeout=timeout or DEFAULT_RECEIPT_TIMEOUT
        )
        return TransactionReceiptDTO(
            transaction_hash=self.hash,
            block_number=receipt["blockNumber"],
            status=receipt.get("status", 1),
            logs=[dict(log) for log in receipt["logs"]],
        )


class _Web3Sender:
    def __init__(self, w3: AsyncWeb3, account: Optional[LocalAccount]) -> None:
        self.w3 = w3
        self._account = account

    @property
    def sender(self) -> Optional[str]:
        return self._account.address if self._account is not None else None

    async def _transact(
        self, fn: Any, overrides: dict[str, Any]
    ) -> Web3PendingTransaction:
        if self._account is None:
            raise SignerRequiredError()
        tx_params: dict[str, Any] = {"from": self._account.address, **overrides}
        if "nonce" not in tx_params:
            tx_params["nonce"] = await self.w3.eth.get_transaction_count(
                self._account.address, "pending"
            )
        tx = await fn.build_transaction(tx_params)
        signed = self._account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3PendingTransaction(self.w3, tx_hash)


class Web3ChannelLedger(_Web3Sender):
    """HashchainProtocol contract binding over AsyncWeb3."""

    def __init__(
        self,
        w3: AsyncWeb3,
        contract_address: str,
        account: Optional[LocalAccount] = None,
        abi: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        super().__init__(w3, account)
        self._abi = abi if abi is not None else hashchain_protocol_abi()
        self.contract = w3.eth.contract(
            address=Web3.to_checksum_address(contract_address), abi=self._abi
        )

    @property
    def address(self) -> str:
        return self.contract.address

    @property
    def abi(self) -> list[dict[str, Any]]:
        return self._abi

    async def create_channel(
        self, params: CreateChannelParams, overrides: dict[str, Any]
    ) -> Web3PendingTransaction:
        fn = self.contract.functions.createChannel(*params.contract_args())
        return await self._transact(fn, overrides)

    async def redeem_channel(
        self, params: RedeemChannelParams, overrides: dict[str, Any]
    ) -> Web3PendingTransaction:
        fn = self.contract.functions.redeemChannel(*params.contract_args())
        return await self._transact(fn, overrides)

    async def reclaim_channel(
        self, params: ReclaimChannelParams, overrides: dict[str, Any]
    ) -> Web3PendingTransaction:
        fn = self.contract.functions.reclaimChannel(*params.contract_args())
        return await self._transact(fn, overrides)

    async def get_channel(
        self, payer: str, merchant: str, token: str
    ) -> Optional[Channel]:
        (
            trust_anchor,
            amount,
            number_of_tokens,
            merchant_withdraw_after_blocks,
            payer_withdraw_after_blocks,
        ) = await self.contract.functions.channelsMapping(
            Web3.to_checksum_address(payer),
            Web3.to_checksum_address(merchant),
            Web3.to_checksum_address(token),
        ).call()
        if amount == 0 and not any(trust_anchor):
            return None
        return Channel(
            payer=payer,
            merchant=merchant,
            token=token,
            trust_anchor=bytes(trust_anchor),
            amount=amount,
            number_of_tokens=number_of_tokens,
            merchant_withdraw_after_blocks=merchant_withdraw_after_blocks,
            payer_withdraw_after_blocks=payer_withdraw_after_blocks,
        )

    async def verify_hashchain(
        self, trust_anchor: bytes, final_hash_value: bytes, number_of_tokens_used: int
    ) -> bool:
        """Run the contract's own verifier (a free `eth_call`)."""
        return await self.contract.functions.verifyHashchain(
            trust_anchor, final_hash_value, number_of_tokens_used
        ).call()

    def parse_channel_events(
        self, receipt: TransactionReceiptDTO
    ) -> list[ChannelEventLog]:
        """Decode the channel events emitted in a receipt, skipping foreign logs."""
        events: list[ChannelEventLog] = []
        for log in receipt.logs:
            for name in CHANNEL_EVENT_NAMES:
                try:
                    parsed = getattr(self.contract.events, name).process_log(log)
                except (MismatchedABI, LogTopicError):
                    continue
                events.append(
                    ChannelEventLog(
                        name=name,
                        args=dict(parsed["args"]),
                        block_number=parsed.get("blockNumber"),
                        transaction_hash=receipt.transaction_hash,
                    )
                )
                break
        return events


class Web3TokenLedger(_Web3Sender):
    """ERC-20 allowance reads and approvals over AsyncWeb3."""

    def _token(self, token_address: str) -> Any:
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(token_address), abi=erc20_abi()
        )

    async def allowance(self, token_address: str, owner: str, spender: str) -> int:
        return await self._token(token_address).functions.allowance(owner, spender).call()

    async def approve(
        self, token_address: str, spender: str, amount: int
    ) -> Web3PendingTransaction:
        fn = self._token(token_address).functions.approve(spender, amount)
        return await self._transact(fn, {})


class Web3Session:
    """One RPC connection plus the signer and bindings built on it.

    Build one per client session and hand `config()` to the channel service.
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        private_key: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        self.w3 = AsyncWeb3(
            AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout})
        )
        self.account: Optional[LocalAccount] = (
            Account.from_key(private_key) if private_key else None
        )
        self.ledger = Web3ChannelLedger(self.w3, contract_address, self.account)
        self.token_ledger = Web3TokenLedger(self.w3, self.account)
        if self.account is None:
            logger.info("No private key configured; ledger binding is read-only")

    def config(self) -> ChannelClientConfig:
        return ChannelClientConfig(ledger=self.ledger, token_ledger=self.token_ledger)

    async def aclose(self) -> None:
        await self.w3.provider.disconnect()

    async def __aenter__(self) -> "Web3Session":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
