# Typed records shared by the gateway and its provider clients.

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


@dataclass(frozen=True)
class InlineImage:
    """Base64 image payload as sent to / received from a provider."""
    mime_type: str
    data: str

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float

    def as_tuple(self) -> tuple:
        return (self.latitude, self.longitude)


@dataclass
class ModelReply:
    """Provider-neutral reply: generated text, image parts and grounding chunks."""
    text: str = ""
    images: List[InlineImage] = field(default_factory=list)
    grounding: List[Dict[str, Any]] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


class PlaceResult(BaseModel):
    """A map-grounded place; malformed chunks fail validation and are dropped."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str
    uri: str
    address: Optional[str] = None

    @field_validator("title", "uri")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("address")
    @classmethod
    def _blank_address_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None
