"""Core domain logic for warp-route transfers."""

from .bridge import BridgeService, TransferOutcome, TransferRequest
from .router import RemoteTransferReceipt, RouterGateway, extract_message_id
from .tokens import TokenGateway
from .units import Unit, from_base_units, to_base_units

__all__ = [
    "BridgeService",
    "RemoteTransferReceipt",
    "RouterGateway",
    "TokenGateway",
    "TransferOutcome",
    "TransferRequest",
    "Unit",
    "extract_message_id",
    "from_base_units",
    "to_base_units",
]
