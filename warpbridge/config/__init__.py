"""Configuration utilities for warp-route transfers."""

from .loader import (
    AssetChainConfig,
    AssetConfig,
    BridgeConfig,
    ChainConfig,
    ConfigError,
    ConfigNotFound,
    build_config,
    load_config,
)

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
