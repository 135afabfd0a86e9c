# Persona data model.
# PersonaKind is the closed set of selectable roles; PersonaConfig is the
# static record attached to each member, loaded once from personas.yaml.

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class PersonaKind(str, Enum):
    NONE = "NONE"
    DOCTOR = "DOCTOR"
    FIREFIGHTER = "FIREFIGHTER"
    LAWYER = "LAWYER"
    MECHANIC = "MECHANIC"
    ENGINEER = "ENGINEER"
    HANDYMAN = "HANDYMAN"


class ActionKind(str, Enum):
    """What the footer button does for a persona."""
    DIAL = "dial"
    MAPS_SEARCH = "maps_search"


@dataclass(frozen=True)
class PersonaConfig:
    """Static configuration of one persona."""
    kind: PersonaKind
    title: str
    role_description: str
    prompt_context: str
    category_query: str
    action: ActionKind = ActionKind.DIAL
    consultation_prompt: Optional[str] = None
    maps_query: Optional[str] = None
    color: str = ""
    icon: str = ""
    action_verbs: Tuple[str, ...] = ()
    consultation_heading: str = "Situation Report"
    input_placeholder: str = "Describe the emergency..."
    places_heading: str = "Official Units Nearby"
    empty_places_hint: str = "nearby units"


@dataclass(frozen=True)
class PersonaAction:
    kind: ActionKind
    href: str
    label: str
