"""Token balance, allowance and approval helpers."""

from __future__ import annotations

from eth_account import Account
from web3 import Web3
from web3.contract import Contract

from warpbridge.config import BridgeConfig
from warpbridge.contracts import ERC20_ABI_FILE, cached_contract_abi
from warpbridge.core.errors import ContractCallFailed
from warpbridge.core.transactions import send_and_wait
from warpbridge.core.units import from_base_units
from warpbridge.core.utils import Web3Factory, default_web3_factory, ensure_web3_connected, get_logger

LOGGER = get_logger("warpbridge.tokens")


def get_contract(web3: Web3, token_address: str) -> Contract:
    """Return an ERC20 contract instance for ``token_address``."""
    ensure_web3_connected(web3)
    return web3.eth.contract(address=Web3.to_checksum_address(token_address), abi=cached_contract_abi(ERC20_ABI_FILE))


def decimals_of(web3: Web3, token_address: str) -> int:
    """Fetch the ERC20 decimals."""
    return int(get_contract(web3, token_address).functions.decimals().call())


def balance_of(web3: Web3, token_address: str, owner: str) -> int:
    """Fetch the ERC20 balance."""
    contract = get_contract(web3, token_address)
    return contract.functions.balanceOf(Web3.to_checksum_address(owner)).call()


def allowance_of(web3: Web3, token_address: str, owner: str, spender: str) -> int:
    """Fetch the ERC20 allowance."""
    contract = get_contract(web3, token_address)
    return contract.functions.allowance(
        Web3.to_checksum_address(owner),
        Web3.to_checksum_address(spender),
    ).call()


def send_approve(
    web3: Web3,
    token_address: str,
    spender: str,
    amount: int,
    private_key: str,
    *,
    chain_id: int,
) -> str:
    """Approve ``spender`` for exactly ``amount`` base units and wait for the receipt."""
    ensure_web3_connected(web3, expected_chain_id=chain_id)
    account = Account.from_key(private_key)
    contract = get_contract(web3, token_address)
    call = contract.functions.approve(Web3.to_checksum_address(spender), amount)
    tx_hash, _receipt = send_and_wait(web3, call, account, chain_id=chain_id)
    return tx_hash


class TokenGateway:
    """Collateral token operations addressed by (token symbol, chain name)."""

    def __init__(self, config: BridgeConfig, *, web3_factory: Web3Factory = default_web3_factory) -> None:
        self.config = config
        self.web3_factory = web3_factory

    def _resolve(self, token: str, chain: str):
        rpc_url = self.config.get_rpc_url(chain)
        token_address = self.config.get_collateral_address(token, chain)
        return rpc_url, token_address

    def get_decimals(self, token: str, chain: str) -> int:
        rpc_url, token_address = self._resolve(token, chain)
        try:
            return decimals_of(self.web3_factory(rpc_url), token_address)
        except Exception as exc:
            raise ContractCallFailed(f"Failed to get token decimals: {exc}") from exc

    def get_allowance(self, token: str, chain: str, owner: str, spender: str) -> int:
        rpc_url, token_address = self._resolve(token, chain)
        try:
            return allowance_of(self.web3_factory(rpc_url), token_address, owner, spender)
        except Exception as exc:
            raise ContractCallFailed(f"Failed to get token allowance: {exc}") from exc

    def get_balance(self, token: str, chain: str, holder: str) -> int:
        rpc_url, token_address = self._resolve(token, chain)
        try:
            return balance_of(self.web3_factory(rpc_url), token_address, holder)
        except Exception as exc:
            raise ContractCallFailed(f"Failed to get token balance: {exc}") from exc

    def format_amount(self, token: str, chain: str, base_amount: int) -> str:
        """Render ``base_amount`` in token units using the on-chain decimals."""
        return from_base_units(base_amount, self.get_decimals(token, chain))

    def approve(self, token: str, chain: str, spender: str, base_amount: int, private_key: str) -> str:
        """Approve ``spender`` and return the confirmed transaction hash."""
        rpc_url, token_address = self._resolve(token, chain)
        chain_id = self.config.get_domain_id(chain)
        try:
            tx_hash = send_approve(
                self.web3_factory(rpc_url),
                token_address,
                spender,
                base_amount,
                private_key,
                chain_id=chain_id,
            )
        except Exception as exc:
            raise ContractCallFailed(f"Failed to approve token: {exc}") from exc
        LOGGER.info("Approved %s %s base units for %s on %s (tx %s)", base_amount, token, spender, chain, tx_hash)
        return tx_hash


__all__ = [
    "TokenGateway",
    "allowance_of",
    "balance_of",
    "decimals_of",
    "get_contract",
    "send_approve",
]
