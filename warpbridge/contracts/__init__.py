"""Contract ABIs shipped with warpbridge."""

import functools
import json
from importlib import resources
from typing import Any, Dict, List

ERC20_ABI_FILE = "erc20.json"
TOKEN_ROUTER_ABI_FILE = "token_router.json"


def load_contract_abi(filename: str) -> List[Dict[str, Any]]:
    """Load an ABI JSON file from the contracts package."""
    with resources.files(__package__).joinpath(filename).open("r", encoding="utf-8") as fh:
        return json.load(fh)


@functools.lru_cache(maxsize=None)
def cached_contract_abi(filename: str) -> List[Dict[str, Any]]:
    """Return the parsed ABI, reading each file once per process."""
    return load_contract_abi(filename)


__all__ = [
    "ERC20_ABI_FILE",
    "TOKEN_ROUTER_ABI_FILE",
    "cached_contract_abi",
    "load_contract_abi",
]
