# Loads the persona table from personas.yaml and checks that every
# PersonaKind has exactly one configuration.

from __future__ import annotations

import os
from functools import lru_cache
from typing import Dict, Optional

import yaml

from .types import ActionKind, PersonaConfig, PersonaKind

PERSONAS_PATH = os.path.join(os.path.dirname(__file__), "personas.yaml")

_REQUIRED = ("title", "role_description", "prompt_context", "category_query")


def _build_config(kind: PersonaKind, p: dict) -> PersonaConfig:
    missing = [k for k in _REQUIRED if k not in p]
    if missing:
        raise ValueError(f"Persona '{kind.value}' is missing {', '.join(missing)}")
    action = ActionKind(p.get("action", ActionKind.DIAL.value))
    if action is ActionKind.MAPS_SEARCH and not p.get("maps_query"):
        raise ValueError(f"Persona '{kind.value}' uses maps_search without a maps_query")

    optional = {
        k: p[k]
        for k in (
            "consultation_prompt",
            "maps_query",
            "color",
            "icon",
            "consultation_heading",
            "input_placeholder",
            "places_heading",
            "empty_places_hint",
        )
        if p.get(k) is not None
    }
    return PersonaConfig(
        kind=kind,
        title=p["title"],
        role_description=p["role_description"],
        prompt_context=" ".join(str(p["prompt_context"]).split()),
        category_query=p["category_query"] or "",
        action=action,
        action_verbs=tuple(p.get("action_verbs") or ()),
        **optional,
    )


def parse_personas(data: dict) -> Dict[PersonaKind, PersonaConfig]:
    """Validate a raw persona mapping; every enum member must be present."""
    unknown = set(data) - {k.value for k in PersonaKind}
    if unknown:
        raise ValueError(f"Unknown persona keys: {', '.join(sorted(unknown))}")
    table: Dict[PersonaKind, PersonaConfig] = {}
    for kind in PersonaKind:
        if kind.value not in data:
            raise KeyError(f"Persona '{kind.value}' not found in persona table")
        table[kind] = _build_config(kind, data[kind.value] or {})
    return table


@lru_cache(maxsize=4)
def load_personas(path: Optional[str] = None) -> Dict[PersonaKind, PersonaConfig]:
    path = path or PERSONAS_PATH
    if not os.path.exists(path):
        raise FileNotFoundError(f"personas.yaml not found at {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return parse_personas(data)
