"""
AI gateway errors.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for provider failures absorbed at the gateway boundary."""


class GenerationFailure(GatewayError):
    """Avatar transformation failed or returned no image."""


class LookupFailure(GatewayError):
    """Nearby-place search failed."""


class ConsultationFailure(GatewayError):
    """Consultation request failed."""
