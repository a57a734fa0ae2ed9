"""Exception types raised by the transfer pipeline and contract gateways."""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for warpbridge failures."""


class MissingParameter(BridgeError, ValueError):
    """A required transfer parameter is null or empty."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is required and cannot be empty")
        self.name = name


class InvalidAmount(BridgeError, ValueError):
    """The requested amount is not a finite, strictly positive number."""


class InvalidReceiver(BridgeError, ValueError):
    """The receiver is not a 0x-prefixed 20-byte address."""


class InvalidSender(BridgeError, ValueError):
    """The sender credential is neither an address nor a usable private key."""


class SameChain(BridgeError, ValueError):
    """Origin and destination name the same chain."""


class ConversionError(BridgeError, ValueError):
    """An amount string cannot be converted to base units."""


class NoRouterForDestination(BridgeError):
    """The origin router has no counterpart enrolled for the destination domain."""


class InsufficientTokenBalance(BridgeError):
    """The sender holds fewer tokens than requested."""


class InsufficientNativeBalance(BridgeError):
    """The sender cannot pay the interchain gas quote."""


class ContractCallFailed(BridgeError):
    """An RPC read, transaction submission or confirmation failed."""


class MessageIdExtractionFailed(BridgeError):
    """No mailbox dispatch log was found in a transfer receipt."""


class PrecheckFailed(BridgeError):
    """Wraps the first failing precheck step."""


__all__ = [
    "BridgeError",
    "ContractCallFailed",
    "ConversionError",
    "InsufficientNativeBalance",
    "InsufficientTokenBalance",
    "InvalidAmount",
    "InvalidReceiver",
    "InvalidSender",
    "MessageIdExtractionFailed",
    "MissingParameter",
    "NoRouterForDestination",
    "PrecheckFailed",
    "SameChain",
]
