"""CLI entrypoint for warp-route transfer checks and execution."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Callable, Dict, List, Optional

from dotenv import load_dotenv
from eth_account import Account

from warpbridge.config import BridgeConfig, load_config
from warpbridge.core.bridge import BridgeService, TransferRequest
from warpbridge.core.units import Unit, amount_to_base_units, format_ether
from warpbridge.core.utils import get_logger

LOGGER = get_logger("warpbridge.cli")

load_dotenv()


def _private_key() -> str:
    private_key = (os.getenv("PRIVATE_KEY") or "").strip()
    if not private_key:
        raise ValueError("PRIVATE_KEY environment variable not set")
    return private_key


def _request(args: argparse.Namespace, sender: str) -> TransferRequest:
    return TransferRequest(
        token_symbol=args.token,
        origin_chain=args.origin,
        destination_chain=args.destination,
        receiver_address=args.receiver,
        amount=args.amount,
        amount_unit=Unit(args.unit),
        sender=sender,
    )


def cmd_precheck(service: BridgeService, args: argparse.Namespace) -> None:
    sender = args.sender or Account.from_key(_private_key()).address
    service.precheck_transfer(_request(args, sender))
    print(f"✅ Precheck passed: {args.amount} {args.token} {args.origin} -> {args.destination}")


def cmd_transfer(service: BridgeService, args: argparse.Namespace) -> None:
    request = _request(args, _private_key())
    if not args.skip_precheck:
        service.precheck_transfer(request)
        LOGGER.info("Precheck passed, submitting transfer")
    outcome = service.transfer(request)
    print(f"✅ Transfer sent! Transaction hash: {outcome.transaction_hash}")
    if outcome.message_id:
        print(f"Message ID: {outcome.message_id}")
    else:
        print("Message ID unavailable (check the mailbox address in the chain config)")


def cmd_domains(service: BridgeService, args: argparse.Namespace) -> None:
    domains = sorted(service.router.list_supported_domains(args.token, args.chain))
    names = {chain.chain_id: chain.name for chain in service.config.chains.values()}
    print(f"Supported domains for {args.token} on {args.chain}:")
    for domain in domains:
        print(f"  {domain} ({names.get(domain, 'unknown')})")


def cmd_router(service: BridgeService, args: argparse.Namespace) -> None:
    domain_id = service.config.get_domain_id(args.remote)
    remote = service.router.get_remote_router(args.token, args.chain, domain_id)
    print(f"{args.remote} router (domain {domain_id}) enrolled on {args.chain}: {remote or 'none'}")


def cmd_quote(service: BridgeService, args: argparse.Namespace) -> None:
    domain_id = service.config.get_domain_id(args.destination)
    fee = service.router.quote_fee(args.token, args.origin, domain_id)
    print(f"Gas payment required: {format_ether(fee)} ETH ({fee} wei)")


def cmd_allowance(service: BridgeService, args: argparse.Namespace) -> None:
    owner = args.owner or Account.from_key(_private_key()).address
    spender = service.config.get_router_address(args.token, args.chain)
    allowance = service.tokens.get_allowance(args.token, args.chain, owner, spender)
    print(f"Current allowance for {owner}: {service.tokens.format_amount(args.token, args.chain, allowance)} {args.token}")


def cmd_approve(service: BridgeService, args: argparse.Namespace) -> None:
    spender = service.config.get_router_address(args.token, args.chain)
    amount = amount_to_base_units(
        args.amount,
        Unit(args.unit),
        lambda: service.tokens.get_decimals(args.token, args.chain),
    )
    tx_hash = service.tokens.approve(args.token, args.chain, spender, amount, _private_key())
    print(f"✅ Approval successful! Transaction hash: {tx_hash}")


COMMANDS: Dict[str, Callable[[BridgeService, argparse.Namespace], None]] = {
    "precheck": cmd_precheck,
    "transfer": cmd_transfer,
    "domains": cmd_domains,
    "router": cmd_router,
    "quote": cmd_quote,
    "allowance": cmd_allowance,
    "approve": cmd_approve,
}


def _add_transfer_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("token", help="Token symbol, e.g. USDC")
    parser.add_argument("origin", help="Origin chain name")
    parser.add_argument("destination", help="Destination chain name")
    parser.add_argument("receiver", help="Receiver address on the destination chain")
    parser.add_argument("amount", help="Amount to transfer")
    _add_unit_arg(parser)


def _add_unit_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--unit",
        choices=[unit.value for unit in Unit],
        default=Unit.TOKEN.value,
        help="Amount unit: token (human-readable) or base (smallest unit)",
    )


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Warp-route cross-chain token transfers")
    parser.add_argument("--chain-config", help="Path to chain_config.json")
    parser.add_argument("--assets-config", help="Path to assets_config.json")
    sub = parser.add_subparsers(dest="command", required=True)

    precheck = sub.add_parser("precheck", help="Validate a transfer without sending anything")
    _add_transfer_args(precheck)
    precheck.add_argument("--sender", help="Sender address (defaults to the PRIVATE_KEY address)")

    transfer = sub.add_parser("transfer", help="Approve if needed and send transferRemote")
    _add_transfer_args(transfer)
    transfer.add_argument("--skip-precheck", action="store_true", help="Do not run the precheck first")

    domains = sub.add_parser("domains", help="List domains enrolled on a router")
    domains.add_argument("token")
    domains.add_argument("chain")

    router = sub.add_parser("router", help="Show the router enrolled for a remote chain")
    router.add_argument("token")
    router.add_argument("chain")
    router.add_argument("remote", help="Remote chain name")

    quote = sub.add_parser("quote", help="Quote the interchain gas payment")
    quote.add_argument("token")
    quote.add_argument("origin")
    quote.add_argument("destination")

    allowance = sub.add_parser("allowance", help="Show the allowance granted to the router")
    allowance.add_argument("token")
    allowance.add_argument("chain")
    allowance.add_argument("--owner", help="Owner address (defaults to the PRIVATE_KEY address)")

    approve = sub.add_parser("approve", help="Approve the router to spend tokens")
    approve.add_argument("token")
    approve.add_argument("chain")
    approve.add_argument("amount")
    _add_unit_arg(approve)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, *, config: Optional[BridgeConfig] = None) -> None:
    args = _parse_args(argv)

    try:
        if config is None:
            config = load_config(
                args.chain_config and os.path.expanduser(args.chain_config),
                args.assets_config and os.path.expanduser(args.assets_config),
            )
        service = BridgeService(config=config)
        COMMANDS[args.command](service, args)
    except Exception as exc:
        print(f"\n❌ Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
