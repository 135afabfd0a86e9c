# Footer action per persona: dial the emergency number or open a maps search.

from __future__ import annotations
from typing import Optional
from urllib.parse import quote_plus

from .types import ActionKind, PersonaAction, PersonaConfig, PersonaKind

MAPS_SEARCH_URL = "https://www.google.com/maps/search/{query}/"


def build_action(
    persona: PersonaConfig,
    emergency_number: str,
    location: Optional[tuple] = None,
) -> Optional[PersonaAction]:
    """Return the persona's footer action; the dashboard has none."""
    if persona.kind is PersonaKind.NONE:
        return None

    if persona.action is ActionKind.MAPS_SEARCH:
        href = MAPS_SEARCH_URL.format(query=quote_plus(persona.maps_query or persona.category_query))
        if location is not None:
            lat, lng = location
            href += f"@{lat},{lng},14z"
        return PersonaAction(kind=ActionKind.MAPS_SEARCH, href=href, label="FIND SUPPLIES NEARBY")

    return PersonaAction(
        kind=ActionKind.DIAL,
        href=f"tel:{emergency_number}",
        label=f"CALL EMERGENCY ({emergency_number})",
    )
