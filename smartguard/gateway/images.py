# Data-URI helpers shared by uploads and provider calls.

from __future__ import annotations

import base64
import binascii
import re

from .types import InlineImage

DEFAULT_MIME = "image/jpeg"

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<data>.*)$", re.DOTALL)


def encode_image(raw: bytes, mime_type: str = DEFAULT_MIME) -> str:
    """Encode raw bytes as a ``data:<mime>;base64,`` string."""
    return InlineImage(mime_type=mime_type or DEFAULT_MIME, data=base64.b64encode(raw).decode("ascii")).to_data_uri()


def parse_image(value: str, default_mime: str = DEFAULT_MIME) -> InlineImage:
    """Split a data URI (or bare base64 payload) into mime type and payload."""
    if not value or not value.strip():
        raise ValueError("empty image")
    m = _DATA_URI.match(value.strip())
    if m:
        return InlineImage(mime_type=m.group("mime") or default_mime, data=m.group("data"))
    if "base64," in value:
        return InlineImage(mime_type=default_mime, data=value.split("base64,", 1)[1])
    return InlineImage(mime_type=default_mime, data=value.strip())


def decode_image(image: InlineImage) -> bytes:
    try:
        return base64.b64decode(image.data, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError("image payload is not valid base64") from e
