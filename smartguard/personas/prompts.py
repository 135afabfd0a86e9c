# Prompt fragments and templates for the three provider operations,
# plus the sanitiser applied to consultation output.

import re

from .types import PersonaConfig

FORMATTING_RULE = (
    "STRICT FORMATTING RULE: Do NOT use markdown characters. "
    "Do NOT use asterisks (*), hashtags (#), or bold/italic syntax. "
    "Use simple dashes (-) for lists and plain text only. "
    "Keep the tone helpful and direct."
)

GENERIC_CONSULTATION = (
    "You are an emergency response coordinator. Provide immediate safety advice."
)

NO_ADVICE_FALLBACK = "I cannot provide advice right now. Please contact emergency services."
CONNECTION_FALLBACK = "Connection error. Please use the emergency call button."


def build_avatar_prompt(persona: PersonaConfig) -> str:
    return (
        f"Transform this person into a {persona.title}. "
        f"They should be {persona.prompt_context}. "
        "The face should strongly resemble the original person. "
        "Photorealistic, high quality, 4k, cinematic lighting."
    )


def build_places_prompt(category_query: str, limit: int = 5) -> str:
    return (
        f"Find the nearest {limit} {category_query}. "
        "Return their names, estimated distance, and address. "
        "Provide the result as a list."
    )


def build_consultation_prompt(persona: PersonaConfig, user_query: str) -> str:
    template = (persona.consultation_prompt or GENERIC_CONSULTATION).strip()
    return f'User query: "{user_query}". {template} {FORMATTING_RULE}'


_BOLD = re.compile(r"\*\*|__+")
_HEADING = re.compile(r"^(\s*)#+\s*", re.MULTILINE)
_BULLET = re.compile(r"^(\s*)\*\s+", re.MULTILINE)
_UNDERSCORE_EMPHASIS = re.compile(r"(?<!\w)_(\S(?:[^_\n]*\S)?)_(?!\w)")


def sanitize_advice(text: str) -> str:
    """Strip residual markdown from model output.

    Bold markers and underscore runs go, headings lose their hashes, ``*``
    bullets become dashes, any other asterisk or hash is dropped and
    ``_word_`` emphasis is unwrapped.
    """
    text = _BOLD.sub("", text)
    text = _HEADING.sub(r"\1", text)
    text = _BULLET.sub(r"\1- ", text)
    text = text.replace("*", "").replace("#", "")
    text = _UNDERSCORE_EMPHASIS.sub(r"\1", text)
    return "\n".join(line.rstrip() for line in text.splitlines()).strip()
