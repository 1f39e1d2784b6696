"""Command-line entry point for driving hash-chain channels."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from .application.channel.dtos import (
    CreateChannelParams,
    ReclaimChannelParams,
    RedeemChannelParams,
)
from .application.channel.use_cases.channel_lifecycle import HashchainChannelService
from .crypto.hashchain import HashChain, to_digest, verify_token
from .crypto.units import from_wei, to_wei
from .domain.channel.entities import ZERO_ADDRESS
from .domain.errors import HashchainError
from .domain.shared import PendingTransactionProtocol
from .envs.client_env import Settings, get_settings
from .infrastructure.indexer.event_query_client import ChannelEventQueryClient
from .infrastructure.ledger.web3_ledger import Web3Session


def _token_or_native(token: Optional[str]) -> str:
    if not token or token == "0":
        return ZERO_ADDRESS
    return token


def _amount(value: str, raw: bool) -> int:
    return int(value) if raw else to_wei(value)


async def _confirm(session: Web3Session, tx: PendingTransactionProtocol) -> None:
    print(f"Transaction sent! Hash: {tx.hash}")
    receipt = await tx.wait()
    print(f"Transaction confirmed in block: {receipt.block_number}")
    events = session.ledger.parse_channel_events(receipt)
    if not events:
        print("No channel events found in transaction logs.")
    for event in events:
        print(f"{event.name}: {event.model_dump()['args']}")


async def _run_create(settings: Settings, args: argparse.Namespace) -> None:
    chain = HashChain.create(length=args.tokens, seed=args.seed)
    amount = _amount(args.amount, args.raw_amount)
    print(f"Trust anchor: 0x{chain.trust_anchor.hex()}")
    print(f"Deposit: {from_wei(amount)} ({amount} smallest units)")
    params = CreateChannelParams(
        merchant=args.merchant,
        token=_token_or_native(args.token),
        trust_anchor=chain.trust_anchor,
        amount=amount,
        number_of_tokens=args.tokens,
        merchant_withdraw_after_blocks=(
            args.merchant_blocks
            if args.merchant_blocks is not None
            else settings.merchant_withdraw_after_blocks
        ),
        payer_withdraw_after_blocks=(
            args.payer_blocks
            if args.payer_blocks is not None
            else settings.payer_withdraw_after_blocks
        ),
    )
    async with Web3Session(
        settings.rpc_url, settings.contract_address, settings.private_key
    ) as session:
        service = HashchainChannelService(session.config())
        tx = await service.create_channel(params)
        await _confirm(session, tx)


async def _run_redeem(settings: Settings, args: argparse.Namespace) -> None:
    params = RedeemChannelParams(
        payer=args.payer,
        token=_token_or_native(args.token),
        final_hash_value=args.final_hash,
        number_of_tokens_used=args.tokens_used,
    )
    anchor = to_digest(args.anchor) if args.anchor else None
    async with Web3Session(
        settings.rpc_url, settings.contract_address, settings.private_key
    ) as session:
        service = HashchainChannelService(session.config())
        tx = await service.redeem_channel(params, trust_anchor=anchor)
        await _confirm(session, tx)


async def _run_reclaim(settings: Settings, args: argparse.Namespace) -> None:
    params = ReclaimChannelParams(
        merchant=args.merchant, token=_token_or_native(args.token)
    )
    async with Web3Session(
        settings.rpc_url, settings.contract_address, settings.private_key
    ) as session:
        service = HashchainChannelService(session.config())
        tx = await service.reclaim_channel(params)
        await _confirm(session, tx)


async def _run_history(settings: Settings, args: argparse.Namespace) -> None:
    if not settings.indexer_url:
        raise ValueError("HASHCHAIN_INDEXER_URL is required for history queries")
    async with ChannelEventQueryClient(settings.indexer_url) as indexer:
        if args.payer:
            records = await indexer.fetch_channels_created(args.payer)
            label = "ChannelCreated"
        elif args.redeemed:
            records = await indexer.fetch_channels_redeemed(args.merchant)
            label = "ChannelRedeemed"
        else:
            records = await indexer.fetch_channels_reclaimed(args.merchant)
            label = "ChannelReclaimed"
    for record in records:
        print(
            f"{label} block={record.block_number} payer={record.payer} "
            f"merchant={record.merchant} tx={record.transaction_hash}"
        )


def _run_anchor(args: argparse.Namespace) -> None:
    chain = HashChain.create(length=args.tokens, seed=args.seed)
    print(f"0x{chain.trust_anchor.hex()}")
    if args.tokens_used is not None:
        print(f"0x{chain.token_at(args.tokens_used).hex()}")


def _run_verify(args: argparse.Namespace) -> None:
    ok = verify_token(args.anchor, args.digest, args.hashes)
    print("valid" if ok else "invalid")
    if not ok:
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashchain-client", description="Hash-chain payment channel client"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Open a channel as payer")
    create.add_argument("--merchant", required=True)
    create.add_argument("--token", default=None, help="ERC-20 address; omit for native")
    create.add_argument("--amount", required=True, help="Deposit, in ether units")
    create.add_argument(
        "--raw-amount", action="store_true", help="Treat --amount as smallest units"
    )
    create.add_argument("--tokens", type=int, required=True)
    create.add_argument("--seed", required=True)
    create.add_argument("--merchant-blocks", type=int, default=None)
    create.add_argument("--payer-blocks", type=int, default=None)

    redeem = sub.add_parser("redeem", help="Redeem a channel as merchant")
    redeem.add_argument("--payer", required=True)
    redeem.add_argument("--token", default=None)
    redeem.add_argument("--final-hash", required=True)
    redeem.add_argument("--tokens-used", type=int, required=True)
    redeem.add_argument("--anchor", default=None, help="Verify locally before sending")

    reclaim = sub.add_parser("reclaim", help="Reclaim an unredeemed deposit as payer")
    reclaim.add_argument("--merchant", required=True)
    reclaim.add_argument("--token", default=None)

    history = sub.add_parser("history", help="Query the event indexer")
    who = history.add_mutually_exclusive_group(required=True)
    who.add_argument("--payer")
    who.add_argument("--merchant")
    history.add_argument(
        "--redeemed", action="store_true", help="With --merchant: redemptions"
    )

    anchor = sub.add_parser("anchor", help="Print the trust anchor for a seed")
    anchor.add_argument("--seed", required=True)
    anchor.add_argument("--tokens", type=int, required=True)
    anchor.add_argument("--tokens-used", type=int, default=None)

    verify = sub.add_parser("verify", help="Verify a disclosed digest")
    verify.add_argument("--anchor", required=True)
    verify.add_argument("--digest", required=True)
    verify.add_argument("--hashes", type=int, required=True)

    return parser


def _run(args: argparse.Namespace) -> None:
    if args.command == "anchor":
        _run_anchor(args)
        return
    if args.command == "verify":
        _run_verify(args)
        return

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    runners = {
        "create": _run_create,
        "redeem": _run_redeem,
        "reclaim": _run_reclaim,
        "history": _run_history,
    }
    asyncio.run(runners[args.command](settings, args))


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        _run(args)
    except (HashchainError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
