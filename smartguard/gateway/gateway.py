# AIGateway: provider-neutral async facade over three remote operations.
# - transform_to_avatar: image-conditioned image generation
# - find_nearby_places: location-grounded search, map references only
# - get_consultation: persona-framed advice, sanitised to plain text
# Provider clients are synchronous; calls run in a worker thread with a timeout.

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from smartguard.personas import PersonaConfig, PersonaKind, load_personas
from smartguard.personas.prompts import (
    CONNECTION_FALLBACK,
    NO_ADVICE_FALLBACK,
    build_avatar_prompt,
    build_consultation_prompt,
    build_places_prompt,
    sanitize_advice,
)
from .errors import ConsultationFailure, GenerationFailure, LookupFailure
from .images import parse_image
from .types import GeoLocation, ModelReply, PlaceResult

logger = logging.getLogger(__name__)


class AIGateway:
    def __init__(
        self,
        model_client,
        personas: Optional[Dict[PersonaKind, PersonaConfig]] = None,
        timeout: float = 60.0,
        max_places: int = 5,
    ):
        self.model_client = model_client
        self.personas = personas or load_personas()
        self.timeout = timeout
        self.max_places = max_places

    @property
    def engine(self) -> str:
        return type(self.model_client).__name__

    async def _call(self, fn: Callable[..., ModelReply], *args: Any) -> ModelReply:
        return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self.timeout)

    # -------------------------
    # Avatar
    # -------------------------
    async def transform_to_avatar(self, photo: str, persona: PersonaKind) -> str:
        """Return the photo re-rendered as ``persona``; raises GenerationFailure."""
        if persona is PersonaKind.NONE:
            raise ValueError("The dashboard persona has no avatar to generate")
        config = self.personas[persona]
        try:
            image = parse_image(photo)
            reply = await self._call(self.model_client.edit_image, build_avatar_prompt(config), image)
        except Exception as e:
            logger.error("Avatar generation for %s failed: %s", persona.value, e)
            raise GenerationFailure(str(e)) from e

        if not reply.images:
            logger.error("Avatar generation for %s returned no image", persona.value)
            raise GenerationFailure("No image generated in response")
        return reply.images[0].to_data_uri()

    # -------------------------
    # Nearby places
    # -------------------------
    async def find_nearby_places(self, lat: float, lng: float, category_query: str) -> List[PlaceResult]:
        """Map-grounded places near (lat, lng), provider order, never raises."""
        if self.max_places <= 0:
            return []
        try:
            return await self._lookup(GeoLocation(latitude=lat, longitude=lng), category_query)
        except LookupFailure as e:
            logger.error("Nearby place lookup failed: %s", e)
            return []

    async def _lookup(self, location: GeoLocation, category_query: str) -> List[PlaceResult]:
        prompt = build_places_prompt(category_query, limit=self.max_places)
        try:
            reply = await self._call(self.model_client.ground_search, prompt, location)
        except Exception as e:
            raise LookupFailure(str(e)) from e
        return self._places_from_grounding(reply.grounding)

    def _places_from_grounding(self, chunks: List[Dict[str, Any]]) -> List[PlaceResult]:
        places: List[PlaceResult] = []
        for chunk in chunks or []:
            if len(places) >= self.max_places:
                break
            maps = chunk.get("maps") if isinstance(chunk, dict) else None
            if not isinstance(maps, dict):
                continue
            try:
                places.append(PlaceResult.model_validate(maps))
            except ValidationError as e:
                logger.debug("Dropping malformed map reference %r: %s", maps, e)
        return places

    # -------------------------
    # Consultation
    # -------------------------
    async def get_consultation(self, persona: PersonaKind, text: str, image: Optional[str] = None) -> str:
        """Plain-text advice for the persona; falls back to a fixed message."""
        try:
            return await self._consult(self.personas[persona], text, image)
        except ConsultationFailure as e:
            logger.error("Consultation failed: %s", e)
            return CONNECTION_FALLBACK

    async def _consult(self, config: PersonaConfig, text: str, image: Optional[str]) -> str:
        prompt = build_consultation_prompt(config, text)
        try:
            inline = parse_image(image) if image else None
            reply = await self._call(self.model_client.generate, prompt, inline)
        except Exception as e:
            raise ConsultationFailure(str(e)) from e
        return sanitize_advice(reply.text or NO_ADVICE_FALLBACK)
