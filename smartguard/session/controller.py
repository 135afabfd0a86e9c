# SessionController: drives one session through persona selection and
# consultation, delegating every remote call to the injected AIGateway.
#
# Every async completion checks what it was started for before committing:
# place and consultation results carry the selection token, avatars are
# stored under the persona that requested them.

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from smartguard.gateway import AIGateway, GenerationFailure, GeoLocation
from smartguard.personas import PersonaAction, PersonaConfig, PersonaKind, build_action
from .state import SessionError, SessionState

logger = logging.getLogger(__name__)


class SessionController:
    def __init__(
        self,
        gateway: AIGateway,
        state: Optional[SessionState] = None,
        emergency_number: str = "112",
    ):
        self.gateway = gateway
        self.state = state or SessionState()
        self.emergency_number = emergency_number

    @property
    def personas(self) -> Dict[PersonaKind, PersonaConfig]:
        return self.gateway.personas

    @property
    def active(self) -> PersonaConfig:
        return self.personas[self.state.active_persona]

    # -------------------------
    # Local mutations
    # -------------------------
    def capture_photo(self, photo: str) -> None:
        self.state.set_source_photo(photo)
        logger.info("Source photo captured")

    def update_location(self, latitude: float, longitude: float) -> bool:
        applied = self.state.set_location(GeoLocation(latitude=latitude, longitude=longitude))
        if not applied:
            logger.debug("Ignoring location fix; session already has one")
        return applied

    def attach_consultation_image(self, image: str) -> None:
        if not image:
            raise SessionError("Consultation image must not be empty")
        self.state.consultation.image = image

    def clear_consultation_image(self) -> None:
        self.state.consultation.image = None

    def action(self) -> Optional[PersonaAction]:
        loc = self.state.location.as_tuple() if self.state.location else None
        return build_action(self.active, self.emergency_number, loc)

    # -------------------------
    # Persona selection
    # -------------------------
    async def select(self, persona: PersonaKind) -> None:
        st = self.state
        if persona == st.active_persona:
            return

        st.active_persona = persona
        st.consultation.reset()
        st.selection_token += 1
        token = st.selection_token

        if persona is PersonaKind.NONE:
            st.places = []
            st.loading_places = False
            return

        jobs = []
        if st.source_photo and persona not in st.avatars and persona not in st.pending_avatars:
            st.pending_avatars.add(persona)
            jobs.append(self._generate_avatar(persona, st.source_photo))

        if st.location is not None:
            st.loading_places = True
            jobs.append(self._load_places(persona, st.location, token))
        else:
            st.loading_places = False

        if jobs:
            await asyncio.gather(*jobs)

    async def _generate_avatar(self, persona: PersonaKind, photo: str) -> None:
        try:
            image = await self.gateway.transform_to_avatar(photo, persona)
        except GenerationFailure:
            logger.warning("Showing the original photo for %s", persona.value)
            image = photo
        finally:
            self.state.pending_avatars.discard(persona)

        self.state.store_avatar(persona, image)
        if persona != self.state.active_persona:
            logger.debug("Avatar for %s finished after the persona was left", persona.value)

    async def _load_places(self, persona: PersonaKind, location: GeoLocation, token: int) -> None:
        query = self.personas[persona].category_query
        places = []
        try:
            places = await self.gateway.find_nearby_places(location.latitude, location.longitude, query)
        finally:
            if token == self.state.selection_token:
                self.state.places = places
                self.state.loading_places = False
            else:
                logger.debug("Discarding stale place results for %s", persona.value)

    # -------------------------
    # Consultation
    # -------------------------
    async def submit_consultation(self, text: str = "", image: Optional[str] = None) -> bool:
        """Run one consultation; returns False when the submission was rejected."""
        st = self.state
        image = image if image is not None else st.consultation.image
        if st.consulting:
            logger.debug("Consultation already in flight; ignoring submission")
            return False
        if not (text or "").strip() and not image:
            return False

        st.consulting = True
        st.consultation.input_text = text
        token = st.selection_token
        persona = st.active_persona
        try:
            advice = await self.gateway.get_consultation(persona, text, image)
        finally:
            st.consulting = False

        if token != st.selection_token:
            logger.debug("Discarding consultation result for %s", persona.value)
            return True
        st.consultation.result_text = advice
        return True

    def cached_personas(self) -> List[PersonaKind]:
        return [p for p in PersonaKind if p in self.state.avatars]
