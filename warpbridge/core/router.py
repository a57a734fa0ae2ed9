"""Warp-route TokenRouter reads, remote transfers and message id lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Set

from eth_account import Account
from web3 import Web3
from web3.contract import Contract

from warpbridge.config import BridgeConfig
from warpbridge.contracts import TOKEN_ROUTER_ABI_FILE, cached_contract_abi
from warpbridge.core.errors import ContractCallFailed, MessageIdExtractionFailed
from warpbridge.core.transactions import send_and_wait
from warpbridge.core.utils import (
    Web3Factory,
    default_web3_factory,
    ensure_web3_connected,
    get_logger,
    to_0x_hex,
)

LOGGER = get_logger("warpbridge.router")


@dataclass(frozen=True)
class RemoteTransferReceipt:
    """Confirmed ``transferRemote`` transaction."""

    transaction_hash: str
    receipt: Mapping[str, Any]


def get_router_contract(web3: Web3, router_address: str) -> Contract:
    """Return a TokenRouter contract instance for ``router_address``."""
    ensure_web3_connected(web3)
    return web3.eth.contract(
        address=Web3.to_checksum_address(router_address),
        abi=cached_contract_abi(TOKEN_ROUTER_ABI_FILE),
    )


def domains_of(web3: Web3, router_address: str) -> Set[int]:
    """Fetch the domain ids the router has enrolled counterparts for."""
    return {int(domain) for domain in get_router_contract(web3, router_address).functions.domains().call()}


def remote_router_of(web3: Web3, router_address: str, domain_id: int) -> str:
    """Fetch the bytes32 router enrolled for ``domain_id`` as 0x hex."""
    value = get_router_contract(web3, router_address).functions.routers(domain_id).call()
    return to_0x_hex(value) if value else ""


def quote_gas_payment_of(web3: Web3, router_address: str, domain_id: int) -> int:
    """Fetch the native fee (wei) demanded for dispatching to ``domain_id``."""
    return int(get_router_contract(web3, router_address).functions.quoteGasPayment(domain_id).call())


def router_balance_of(web3: Web3, router_address: str, account: str) -> int:
    """Fetch the router-reported balance of ``account``."""
    contract = get_router_contract(web3, router_address)
    return int(contract.functions.balanceOf(Web3.to_checksum_address(account)).call())


def send_transfer_remote(
    web3: Web3,
    router_address: str,
    domain_id: int,
    recipient: bytes,
    amount: int,
    value: int,
    private_key: str,
    *,
    chain_id: int,
) -> RemoteTransferReceipt:
    """Call ``transferRemote`` with ``value`` attached and wait for the receipt."""
    ensure_web3_connected(web3, expected_chain_id=chain_id)
    account = Account.from_key(private_key)
    contract = get_router_contract(web3, router_address)
    call = contract.functions.transferRemote(domain_id, recipient, amount)
    tx_hash, receipt = send_and_wait(web3, call, account, chain_id=chain_id, value=value)
    return RemoteTransferReceipt(transaction_hash=tx_hash, receipt=receipt)


def extract_message_id(receipt: Mapping[str, Any], mailbox_address: str) -> str:
    """Return the message id dispatched by ``mailbox_address`` in ``receipt``.

    The mailbox's ``DispatchId(bytes32 indexed messageId)`` log carries
    exactly two topics: the event signature and the message id.
    """
    expected = mailbox_address.lower()
    for log in receipt.get("logs") or []:
        address = log.get("address")
        topics = log.get("topics") or []
        if address and str(address).lower() == expected and len(topics) == 2:
            return to_0x_hex(topics[1])
    raise MessageIdExtractionFailed(
        "Message ID not found in receipt. This indicates an invalid mailbox address in the configuration."
    )


class RouterGateway:
    """TokenRouter operations addressed by (token symbol, chain name)."""

    def __init__(self, config: BridgeConfig, *, web3_factory: Web3Factory = default_web3_factory) -> None:
        self.config = config
        self.web3_factory = web3_factory

    def _resolve(self, token: str, chain: str):
        rpc_url = self.config.get_rpc_url(chain)
        router_address = self.config.get_router_address(token, chain)
        return rpc_url, router_address

    def list_supported_domains(self, token: str, chain: str) -> Set[int]:
        rpc_url, router_address = self._resolve(token, chain)
        try:
            return domains_of(self.web3_factory(rpc_url), router_address)
        except Exception as exc:
            raise ContractCallFailed(f"Failed to get supported domains: {exc}") from exc

    def get_remote_router(self, token: str, chain: str, domain_id: int) -> str:
        """Return the router enrolled for ``domain_id``; all-zero means none."""
        rpc_url, router_address = self._resolve(token, chain)
        try:
            return remote_router_of(self.web3_factory(rpc_url), router_address, domain_id)
        except Exception as exc:
            raise ContractCallFailed(f"Failed to get router address: {exc}") from exc

    def quote_fee(self, token: str, origin_chain: str, destination_domain_id: int) -> int:
        rpc_url, router_address = self._resolve(token, origin_chain)
        try:
            return quote_gas_payment_of(self.web3_factory(rpc_url), router_address, destination_domain_id)
        except Exception as exc:
            raise ContractCallFailed(f"Failed to quote gas payment: {exc}") from exc

    def balance_of(self, token: str, chain: str, account: str) -> int:
        rpc_url, router_address = self._resolve(token, chain)
        try:
            return router_balance_of(self.web3_factory(rpc_url), router_address, account)
        except Exception as exc:
            raise ContractCallFailed(f"Failed to get balance: {exc}") from exc

    def transfer_remote(
        self,
        token: str,
        origin_chain: str,
        destination_domain_id: int,
        recipient: bytes,
        base_amount: int,
        native_fee: int,
        private_key: str,
    ) -> RemoteTransferReceipt:
        rpc_url, router_address = self._resolve(token, origin_chain)
        chain_id = self.config.get_domain_id(origin_chain)
        try:
            return send_transfer_remote(
                self.web3_factory(rpc_url),
                router_address,
                destination_domain_id,
                recipient,
                base_amount,
                native_fee,
                private_key,
                chain_id=chain_id,
            )
        except Exception as exc:
            raise ContractCallFailed(f"Failed to transfer tokens: {exc}") from exc


__all__ = [
    "RemoteTransferReceipt",
    "RouterGateway",
    "domains_of",
    "extract_message_id",
    "get_router_contract",
    "quote_gas_payment_of",
    "remote_router_of",
    "router_balance_of",
    "send_transfer_remote",
]
