# In-memory state of one user session (one browser tab).

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from smartguard.gateway.types import GeoLocation, PlaceResult
from smartguard.personas import PersonaKind


class SessionError(Exception):
    """A session mutation that the current state does not allow."""


@dataclass
class ConsultationState:
    input_text: str = ""
    image: Optional[str] = None
    result_text: Optional[str] = None

    def reset(self) -> None:
        self.input_text = ""
        self.image = None
        self.result_text = None


@dataclass
class SessionState:
    source_photo: Optional[str] = None
    avatars: Dict[PersonaKind, str] = field(default_factory=dict)
    active_persona: PersonaKind = PersonaKind.NONE
    location: Optional[GeoLocation] = None
    places: List[PlaceResult] = field(default_factory=list)
    consultation: ConsultationState = field(default_factory=ConsultationState)

    # async bookkeeping
    pending_avatars: Set[PersonaKind] = field(default_factory=set)
    loading_places: bool = False
    consulting: bool = False
    selection_token: int = 0

    def set_source_photo(self, photo: str) -> None:
        if self.source_photo is not None:
            raise SessionError("Source photo already captured for this session")
        if not photo:
            raise SessionError("Source photo must not be empty")
        self.source_photo = photo
        self.avatars[PersonaKind.NONE] = photo

    def set_location(self, location: GeoLocation) -> bool:
        """First fix wins; returns False when a location is already known."""
        if self.location is not None:
            return False
        self.location = location
        return True

    def store_avatar(self, persona: PersonaKind, image: str) -> bool:
        """Append-only: an existing entry is never replaced."""
        if persona in self.avatars:
            return False
        self.avatars[persona] = image
        return True

    @property
    def generating_avatar(self) -> bool:
        return self.active_persona in self.pending_avatars

    @property
    def display_image(self) -> Optional[str]:
        return self.avatars.get(self.active_persona) or self.source_photo
