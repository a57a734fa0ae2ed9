"""Utility helpers shared across warpbridge core modules."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from web3 import Web3


Web3Factory = Callable[[str], Web3]


def get_logger(name: str = "warpbridge") -> logging.Logger:
    """Return a configured logger that prints to stdout."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def default_web3_factory(rpc_url: str) -> Web3:
    """Build a fresh HTTP-backed ``Web3`` for one logical operation."""
    return Web3(Web3.HTTPProvider(rpc_url))


def ensure_web3_connected(web3: Web3, *, expected_chain_id: Optional[int] = None) -> None:
    """Validate that ``web3`` is connected and optionally matches the expected chain id."""
    if not web3.is_connected():
        raise ConnectionError("Failed to connect to the configured RPC endpoint")
    if expected_chain_id is not None and web3.eth.chain_id != expected_chain_id:
        raise ValueError(f"RPC chain ID mismatch: expected {expected_chain_id}, got {web3.eth.chain_id}")


def hex_to_bytes(data: str) -> bytes:
    """Convert a hex string (with or without ``0x``) to bytes."""
    data = data[2:] if data.startswith("0x") else data
    return bytes.fromhex(data)


def to_0x_hex(value: Union[str, bytes]) -> str:
    """Render bytes (or an already-hex string) as a ``0x``-prefixed string."""
    if isinstance(value, str):
        return value if value.startswith("0x") else f"0x{value}"
    return Web3.to_hex(value)


def address_to_bytes32(address: str) -> bytes:
    """Left-pad a 20-byte address into the router's bytes32 recipient encoding."""
    return bytes(12) + hex_to_bytes(Web3.to_checksum_address(address))


def is_zero_router(value: Optional[Union[str, bytes]]) -> bool:
    """Return True for an empty or all-zero router (20- or 32-byte form)."""
    if not value:
        return True
    if isinstance(value, (bytes, bytearray)):
        return not any(value)
    body = value[2:] if value.startswith("0x") else value
    return set(body) <= {"0"}


__all__ = [
    "Web3Factory",
    "address_to_bytes32",
    "default_web3_factory",
    "ensure_web3_connected",
    "get_logger",
    "hex_to_bytes",
    "is_zero_router",
    "to_0x_hex",
]
