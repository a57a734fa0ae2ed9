"""Pytest configuration and fixtures."""

from unittest.mock import MagicMock

import pytest
from web3 import Web3

from warpbridge.config import build_config

SEPOLIA_ID = 11155111
PRUVTEST_ID = 7336

ROUTER = Web3.to_checksum_address("0xc97f971b0ddffc63e87365c2ce2f88107e79a167")
COLLATERAL = Web3.to_checksum_address("0x1c7d4b196cb0c7b01d743fbc6116a902379c7238")
REMOTE_ROUTER = Web3.to_checksum_address("0x9a4b2c4e1f8d3a6b5c7e0f1a2b3c4d5e6f708192")
MAILBOX = Web3.to_checksum_address("0xffaef09b3cd11d9b20d1a19becca54eec2884766")

RECEIVER = Web3.to_checksum_address("0x384418c216ee5e46132ca1255f3b96759ce5ffd5")
SENDER = "0x1234567890123456789012345678901234567890"
PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


def chain_table():
    return {
        "sepolia": {
            "chain_id": SEPOLIA_ID,
            "rpc_urls": ["https://sepolia.example", "https://backup.example"],
            "core_addresses": {"mailbox": MAILBOX},
        },
        "pruvtest": {
            "chain_id": PRUVTEST_ID,
            "rpc_urls": ["https://pruv.example"],
        },
    }


def asset_table():
    return {
        "USDC": {
            "sepolia": {"router_address": ROUTER, "collateral_address": COLLATERAL},
            "pruvtest": {"router_address": REMOTE_ROUTER, "collateral_address": REMOTE_ROUTER},
        }
    }


@pytest.fixture
def config():
    """Config with USDC deployed on sepolia and pruvtest."""
    return build_config(chain_table(), asset_table())


@pytest.fixture
def web3():
    """A connected web3 stand-in reporting the sepolia chain id."""
    mock = MagicMock()
    mock.is_connected.return_value = True
    mock.eth.chain_id = SEPOLIA_ID
    return mock


@pytest.fixture
def web3_factory(web3):
    """Factory returning the shared ``web3`` mock and recording RPC URLs."""
    return MagicMock(return_value=web3)
