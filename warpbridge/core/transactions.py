"""Gas estimation, signing and confirmation for contract writes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.contract.contract import ContractFunction
from web3.exceptions import ContractLogicError
from web3.types import TxReceipt

from warpbridge.core.utils import get_logger, to_0x_hex

LOGGER = get_logger("warpbridge.transactions")

GAS_BUFFER = 1.1


@dataclass(frozen=True)
class GasParameters:
    """EIP-1559 gas parameters."""

    gas: int
    gas_price: int
    max_priority_fee: int
    max_fee: int
    estimated_cost: int


def estimate_gas(web3: Web3, call: ContractFunction, sender: str, *, value: int = 0) -> GasParameters:
    """Estimate gas for ``call`` sent from ``sender``."""
    try:
        gas_estimate = call.estimate_gas({"from": sender, "value": value})
    except ContractLogicError as exc:
        raise ValueError(f"Contract would revert: {exc}") from exc

    gas_price = web3.eth.gas_price
    max_priority_fee = getattr(web3.eth, "max_priority_fee", gas_price)
    return GasParameters(
        gas=gas_estimate,
        gas_price=gas_price,
        max_priority_fee=max_priority_fee,
        max_fee=gas_price + max_priority_fee,
        estimated_cost=gas_estimate * gas_price,
    )


def build_transaction(
    web3: Web3,
    call: ContractFunction,
    sender: str,
    gas: GasParameters,
    *,
    chain_id: int,
    value: int = 0,
) -> Dict[str, Any]:
    """Build the 1559 transaction payload."""
    nonce = web3.eth.get_transaction_count(sender)
    return call.build_transaction(
        {
            "from": sender,
            "gas": int(gas.gas * GAS_BUFFER),
            "maxFeePerGas": gas.max_fee,
            "maxPriorityFeePerGas": gas.max_priority_fee,
            "nonce": nonce,
            "chainId": chain_id,
            "value": value,
        }
    )


def send_and_wait(
    web3: Web3,
    call: ContractFunction,
    account: LocalAccount,
    *,
    chain_id: int,
    value: int = 0,
) -> Tuple[str, TxReceipt]:
    """Sign and broadcast ``call``, then block until it is mined.

    Returns the transaction hash and receipt. A reverted receipt raises
    ``RuntimeError``.
    """
    gas = estimate_gas(web3, call, account.address, value=value)
    LOGGER.info(
        "Estimate gas=%s maxFee=%.2f gwei priority=%.2f gwei estimatedCost=%.6f ETH",
        gas.gas,
        gas.max_fee / 10**9,
        gas.max_priority_fee / 10**9,
        gas.estimated_cost / 10**18,
    )

    tx = build_transaction(web3, call, account.address, gas, chain_id=chain_id, value=value)
    signed = account.sign_transaction(tx)

    tx_hash = web3.eth.send_raw_transaction(signed.raw_transaction)
    tx_hex = to_0x_hex(tx_hash)
    LOGGER.info("Broadcast transaction %s, awaiting confirmation", tx_hex)

    receipt = web3.eth.wait_for_transaction_receipt(tx_hash)
    if receipt["status"] != 1:
        LOGGER.error("Transaction %s failed! status=%s", tx_hex, receipt["status"])
        raise RuntimeError(f"Transaction {tx_hex} reverted (status={receipt['status']})")

    LOGGER.info("Transaction confirmed in block %s (gasUsed=%s)", receipt["blockNumber"], receipt["gasUsed"])
    return tx_hex, receipt


__all__ = ["GasParameters", "build_transaction", "estimate_gas", "send_and_wait"]
