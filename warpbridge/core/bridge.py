"""Transfer precheck and execution for warp-route token transfers."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from eth_account import Account
from web3 import Web3

from warpbridge.config import BridgeConfig, ConfigNotFound, load_config
from warpbridge.core.errors import (
    ConversionError,
    InsufficientNativeBalance,
    InsufficientTokenBalance,
    InvalidAmount,
    InvalidReceiver,
    InvalidSender,
    MessageIdExtractionFailed,
    MissingParameter,
    NoRouterForDestination,
    PrecheckFailed,
    SameChain,
)
from warpbridge.core.router import RouterGateway, extract_message_id
from warpbridge.core.tokens import TokenGateway
from warpbridge.core.units import Unit, amount_to_base_units, format_ether, from_base_units, parse_decimal
from warpbridge.core.utils import (
    Web3Factory,
    address_to_bytes32,
    default_web3_factory,
    get_logger,
    is_zero_router,
)

LOGGER = get_logger("warpbridge.bridge")


@dataclass(frozen=True)
class TransferRequest:
    """Caller intent for one cross-chain transfer.

    ``sender`` is either an address (enough for a precheck) or a private key
    (required to execute).
    """

    token_symbol: str
    origin_chain: str
    destination_chain: str
    receiver_address: str
    amount: str
    sender: str
    amount_unit: Unit = Unit.TOKEN

    def required_fields(self) -> Tuple[Tuple[str, Optional[str]], ...]:
        return (
            ("token_symbol", self.token_symbol),
            ("origin_chain", self.origin_chain),
            ("destination_chain", self.destination_chain),
            ("receiver_address", self.receiver_address),
            ("sender", self.sender),
            ("amount", self.amount),
        )


@dataclass(frozen=True)
class TransferOutcome:
    """Result of a confirmed transfer. ``message_id`` is empty when it could not be found."""

    transaction_hash: str
    message_id: str = ""


def validate_required(request: TransferRequest) -> None:
    for name, value in request.required_fields():
        if value is None or value == "":
            raise MissingParameter(name)


def validate_positive_amount(amount: str) -> Decimal:
    try:
        value = parse_decimal(amount)
    except ConversionError as exc:
        raise InvalidAmount("Amount must be a positive number") from exc
    if not value.is_finite() or value <= 0:
        raise InvalidAmount("Amount must be a positive number")
    return value


def validate_receiver(receiver_address: str) -> None:
    if not Web3.is_address(receiver_address) or not receiver_address.startswith("0x"):
        raise InvalidReceiver("Receiver address must be a valid Ethereum address")


def resolve_sender(sender: str) -> str:
    """Return the sender address, deriving it from a private key when needed."""
    if Web3.is_address(sender):
        return sender
    try:
        return Account.from_key(sender).address
    except Exception as exc:
        raise InvalidSender("Invalid sender address or private key") from exc


class BridgeService:
    """Precheck and execute cross-chain transfers through a TokenRouter."""

    def __init__(
        self,
        *,
        config: Optional[BridgeConfig] = None,
        tokens: Optional[TokenGateway] = None,
        router: Optional[RouterGateway] = None,
        web3_factory: Web3Factory = default_web3_factory,
    ) -> None:
        self.config = config or load_config()
        self.web3_factory = web3_factory
        self.tokens = tokens or TokenGateway(self.config, web3_factory=web3_factory)
        self.router = router or RouterGateway(self.config, web3_factory=web3_factory)

    def precheck_transfer(self, request: TransferRequest) -> bool:
        """Run every read-only check a transfer depends on.

        Returns True when all checks pass. Any failure is raised as
        ``PrecheckFailed`` carrying the original message. No transaction is
        sent.
        """
        try:
            self._run_precheck(request)
        except Exception as exc:
            raise PrecheckFailed(f"Transfer precheck failed: {exc}") from exc
        return True

    def _run_precheck(self, request: TransferRequest) -> None:
        validate_required(request)
        validate_positive_amount(request.amount)

        if request.origin_chain == request.destination_chain:
            raise SameChain("Origin and destination chains must be different")

        validate_receiver(request.receiver_address)
        sender_address = resolve_sender(request.sender)

        token = request.token_symbol
        origin = request.origin_chain
        destination_domain_id = self.config.get_domain_id(request.destination_chain)

        destination_router = self.router.get_remote_router(token, origin, destination_domain_id)
        if is_zero_router(destination_router):
            raise NoRouterForDestination(
                f"No router available for {token} on destination chain "
                f"{request.destination_chain} (domain {destination_domain_id})"
            )

        amount = amount_to_base_units(
            request.amount,
            request.amount_unit,
            lambda: self.tokens.get_decimals(token, origin),
        )
        sender_balance = self.router.balance_of(token, origin, sender_address)
        if sender_balance < amount:
            raise InsufficientTokenBalance(
                f"Insufficient balance for {token}: sender has {sender_balance} base units "
                f"but trying to transfer {amount} base units"
            )

        bridge_fee = self.router.quote_fee(token, origin, destination_domain_id)
        native_balance = self._native_balance(origin, sender_address)
        if native_balance < bridge_fee:
            raise InsufficientNativeBalance(
                f"Insufficient native balance for gas payment: sender has "
                f"{format_ether(native_balance)} ETH but needs {format_ether(bridge_fee)} ETH"
            )

        LOGGER.info(
            "Precheck passed for %s %s %s -> %s (domain %s), fee=%s wei",
            request.amount,
            token,
            origin,
            request.destination_chain,
            destination_domain_id,
            bridge_fee,
        )

    def _native_balance(self, chain: str, address: str) -> int:
        web3 = self.web3_factory(self.config.get_rpc_url(chain))
        return int(web3.eth.get_balance(Web3.to_checksum_address(address)))

    def transfer(self, request: TransferRequest) -> TransferOutcome:
        """Approve if needed, pay the quoted fee and send ``transferRemote``.

        Only the input checks are repeated here; call ``precheck_transfer``
        first to validate balances and routing.
        """
        validate_required(request)
        validate_positive_amount(request.amount)
        validate_receiver(request.receiver_address)
        private_key = request.sender
        try:
            sender_address = Account.from_key(private_key).address
        except Exception as exc:
            raise InvalidSender("Invalid sender address or private key") from exc

        token = request.token_symbol
        origin = request.origin_chain
        unit = Unit(request.amount_unit)
        decimals: Optional[int] = None
        if unit is Unit.TOKEN:
            decimals = self.tokens.get_decimals(token, origin)
        amount = amount_to_base_units(request.amount, unit, lambda: decimals)

        spender = self.config.get_router_address(token, origin)
        allowance = self.tokens.get_allowance(token, origin, sender_address, spender)
        if self._allowance_covers(allowance, request.amount, unit, decimals):
            LOGGER.info("Existing allowance %s covers %s %s, skipping approval", allowance, request.amount, token)
        else:
            LOGGER.info("Allowance %s below requested %s, approving %s base units", allowance, request.amount, amount)
            self.tokens.approve(token, origin, spender, amount, private_key)

        destination_domain_id = self.config.get_domain_id(request.destination_chain)
        fee = self.router.quote_fee(token, origin, destination_domain_id)
        recipient = address_to_bytes32(request.receiver_address)

        result = self.router.transfer_remote(
            token,
            origin,
            destination_domain_id,
            recipient,
            amount,
            fee,
            private_key,
        )
        LOGGER.info("Transfer confirmed: %s", result.transaction_hash)

        try:
            mailbox = self.config.resolve_mailbox(origin)
            message_id = extract_message_id(result.receipt, mailbox)
        except (ConfigNotFound, MessageIdExtractionFailed) as exc:
            LOGGER.warning("Failed to extract message ID: %s", exc)
            message_id = ""

        return TransferOutcome(transaction_hash=result.transaction_hash, message_id=message_id)

    @staticmethod
    def _allowance_covers(allowance: int, amount: str, unit: Unit, decimals: Optional[int]) -> bool:
        if unit is Unit.BASE:
            return Decimal(allowance) >= parse_decimal(amount)
        return parse_decimal(from_base_units(allowance, decimals)) >= parse_decimal(amount)


__all__ = [
    "BridgeService",
    "TransferOutcome",
    "TransferRequest",
    "resolve_sender",
    "validate_positive_amount",
    "validate_receiver",
    "validate_required",
]
