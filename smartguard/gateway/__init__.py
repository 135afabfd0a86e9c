# Gateway package

# Makes gateway/ importable and exposes key interfaces.

from .gateway import AIGateway
from .errors import ConsultationFailure, GatewayError, GenerationFailure, LookupFailure
from .types import GeoLocation, InlineImage, ModelReply, PlaceResult
from .clients.echo_dev_client import EchoDevClient

__all__ = [
    "AIGateway",
    "ConsultationFailure",
    "EchoDevClient",
    "GatewayError",
    "GenerationFailure",
    "GeoLocation",
    "InlineImage",
    "LookupFailure",
    "ModelReply",
    "PlaceResult",
]
