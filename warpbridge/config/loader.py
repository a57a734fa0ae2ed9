"""Config loader for chain and warp-route asset tables."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Tuple

from web3 import Web3

DEFAULT_CHAIN_CONFIG = Path("config") / "chain_config.json"
DEFAULT_ASSETS_CONFIG = Path("config") / "assets_config.json"

CHAIN_CONFIG_ENV = "WARPBRIDGE_CHAIN_CONFIG"
ASSETS_CONFIG_ENV = "WARPBRIDGE_ASSETS_CONFIG"


class ConfigError(ValueError):
    """Raised when configuration data is invalid or missing."""


class ConfigNotFound(ConfigError):
    """Raised when a chain, asset or chain/asset pairing is not configured."""


def _require_keys(data: Mapping[str, Any], keys: Iterable[str], context: str) -> None:
    missing = [key for key in keys if key not in data]
    if missing:
        raise ConfigError(f"{context} missing required keys: {', '.join(missing)}")


def _to_checksum(value: str, *, field_name: str) -> str:
    try:
        return Web3.to_checksum_address(value)
    except Exception as exc:  # web3 raises ValueError/TypeError for malformed inputs
        raise ConfigError(f"Invalid address for {field_name}: {value}") from exc


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for a blockchain network.

    ``chain_id`` doubles as the warp-route domain id used to address
    cross-chain messages.
    """

    name: str
    chain_id: int
    rpc_urls: Tuple[Optional[str], ...] = ()
    mailbox: Optional[str] = None

    @property
    def rpc_url(self) -> Optional[str]:
        return self.rpc_urls[0] if self.rpc_urls else None


@dataclass(frozen=True)
class AssetChainConfig:
    """Router and collateral token deployed for an asset on one chain."""

    router_address: str
    collateral_address: str


@dataclass(frozen=True)
class AssetConfig:
    """Per-chain deployments of a bridged token."""

    symbol: str
    chains: Mapping[str, AssetChainConfig]


@dataclass(frozen=True)
class BridgeConfig:
    """Typed wrapper around the chain and asset tables."""

    chains: Mapping[str, ChainConfig]
    assets: Mapping[str, AssetConfig]
    raw: Mapping[str, Any] = field(repr=False, default_factory=dict)

    def chain_names(self) -> List[str]:
        return sorted(self.chains)

    def asset_symbols(self) -> List[str]:
        return sorted(self.assets)

    def resolve_chain(self, name: str) -> ChainConfig:
        """Return the chain entry, requiring a usable first RPC URL."""
        chain = self.chains.get(name)
        if chain is None:
            raise ConfigNotFound(f"Chain '{name}' not found in configuration")
        if not chain.rpc_urls:
            raise ConfigNotFound(f"No RPC URLs found for chain '{name}'")
        if not chain.rpc_urls[0]:
            raise ConfigNotFound(f"Invalid RPC URL for chain '{name}'")
        return chain

    def resolve_asset(self, symbol: str, chain: str) -> AssetChainConfig:
        """Return the router/collateral pair of ``symbol`` on ``chain``."""
        asset = self.assets.get(symbol)
        if asset is None:
            raise ConfigNotFound(f"Asset '{symbol}' not found in configuration")
        deployment = asset.chains.get(chain)
        if deployment is None:
            raise ConfigNotFound(f"Asset '{symbol}' not available on chain '{chain}'")
        return deployment

    def resolve_mailbox(self, chain: str) -> str:
        """Return the mailbox address of ``chain``."""
        chain_config = self.chains.get(chain)
        if chain_config is None:
            raise ConfigNotFound(f"Chain '{chain}' not found in configuration")
        if not chain_config.mailbox:
            raise ConfigNotFound(f"Mailbox address not found for chain '{chain}'")
        return chain_config.mailbox

    def get_rpc_url(self, chain: str) -> str:
        return self.resolve_chain(chain).rpc_urls[0]

    def get_domain_id(self, chain: str) -> int:
        chain_config = self.chains.get(chain)
        if chain_config is None:
            raise ConfigNotFound(f"Chain '{chain}' not found in configuration")
        return chain_config.chain_id

    def get_router_address(self, symbol: str, chain: str) -> str:
        return self.resolve_asset(symbol, chain).router_address

    def get_collateral_address(self, symbol: str, chain: str) -> str:
        return self.resolve_asset(symbol, chain).collateral_address

    def to_dict(self) -> Dict[str, Any]:
        """Return the original configuration mapping."""
        return dict(self.raw)


def _normalize_rpc_urls(value: Any, *, chain: str) -> Tuple[Optional[str], ...]:
    if not isinstance(value, list):
        raise ConfigError(f"chain {chain}: rpc_urls must be a list")
    return tuple(str(url) if url else None for url in value)


def _build_chain(name: str, data: Any) -> ChainConfig:
    if not isinstance(data, Mapping):
        raise ConfigError(f"chain {name} must be a mapping")
    _require_keys(data, ["chain_id", "rpc_urls"], f"chain {name}")

    try:
        chain_id = int(data["chain_id"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"chain {name}: chain_id must be an integer") from exc

    mailbox = None
    core_addresses = data.get("core_addresses") or {}
    if not isinstance(core_addresses, Mapping):
        raise ConfigError(f"chain {name}: core_addresses must be a mapping")
    if core_addresses.get("mailbox"):
        mailbox = _to_checksum(core_addresses["mailbox"], field_name=f"{name} mailbox")

    return ChainConfig(
        name=name,
        chain_id=chain_id,
        rpc_urls=_normalize_rpc_urls(data["rpc_urls"], chain=name),
        mailbox=mailbox,
    )


def _build_asset(symbol: str, data: Any, chains: Mapping[str, ChainConfig]) -> AssetConfig:
    if not isinstance(data, Mapping):
        raise ConfigError(f"asset {symbol} must be a mapping of chain deployments")

    deployments: Dict[str, AssetChainConfig] = {}
    for chain_name, entry in data.items():
        context = f"asset {symbol} on {chain_name}"
        if chain_name not in chains:
            raise ConfigError(f"{context} references an unknown chain")
        if not isinstance(entry, Mapping):
            raise ConfigError(f"{context} must be a mapping")
        _require_keys(entry, ["router_address", "collateral_address"], context)
        deployments[chain_name] = AssetChainConfig(
            router_address=_to_checksum(entry["router_address"], field_name=f"{context} router_address"),
            collateral_address=_to_checksum(
                entry["collateral_address"], field_name=f"{context} collateral_address"
            ),
        )
    return AssetConfig(symbol=symbol, chains=deployments)


def build_config(chains_data: Mapping[str, Any], assets_data: Mapping[str, Any]) -> BridgeConfig:
    """Validate parsed chain and asset tables."""
    if not isinstance(chains_data, Mapping):
        raise ConfigError("chain config must be a mapping of chain names")
    if not isinstance(assets_data, Mapping):
        raise ConfigError("assets config must be a mapping of token symbols")

    chains = {name: _build_chain(name, data) for name, data in chains_data.items()}

    seen: Dict[int, str] = {}
    for chain in chains.values():
        if chain.chain_id in seen:
            raise ConfigError(
                f"chain_id {chain.chain_id} is used by both {seen[chain.chain_id]} and {chain.name}"
            )
        seen[chain.chain_id] = chain.name

    assets = {symbol: _build_asset(symbol, data, chains) for symbol, data in assets_data.items()}

    return BridgeConfig(
        chains=chains,
        assets=assets,
        raw={"chains": chains_data, "assets": assets_data},
    )


def _load_json(path: Path) -> MutableMapping[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file contains invalid JSON: {path}") from exc


def load_config(
    chain_config_path: Optional[Path] = None,
    assets_config_path: Optional[Path] = None,
) -> BridgeConfig:
    """Load and validate the chain and asset configuration files."""
    chain_config_path = Path(chain_config_path or os.getenv(CHAIN_CONFIG_ENV) or DEFAULT_CHAIN_CONFIG)
    assets_config_path = Path(assets_config_path or os.getenv(ASSETS_CONFIG_ENV) or DEFAULT_ASSETS_CONFIG)
    return build_config(_load_json(chain_config_path), _load_json(assets_config_path))


__all__ = [
    "AssetChainConfig",
    "AssetConfig",
    "BridgeConfig",
    "ChainConfig",
    "ConfigError",
    "ConfigNotFound",
    "build_config",
    "load_config",
]
