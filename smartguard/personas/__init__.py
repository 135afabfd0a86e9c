# Persona package
# Exposes the persona enum, its static configuration and prompt helpers.

from .types import ActionKind, PersonaAction, PersonaConfig, PersonaKind
from .registry import load_personas
from .actions import build_action

__all__ = [
    "ActionKind",
    "PersonaAction",
    "PersonaConfig",
    "PersonaKind",
    "build_action",
    "load_personas",
]
