# Offline model client for local dev without API calls.

from typing import Optional

from ..types import GeoLocation, InlineImage, ModelReply


class EchoDevClient:
    def __init__(self):
        self.model = "echo-dev"

    def edit_image(self, instruction: str, image: InlineImage) -> ModelReply:
        return ModelReply(images=[image], meta={"engine": "echo", "model": self.model})

    def ground_search(self, instruction: str, location: GeoLocation) -> ModelReply:
        text = f"[ECHO RESPONSE]\n{instruction} @ {location.latitude},{location.longitude}"
        return ModelReply(text=text, meta={"engine": "echo", "model": self.model})

    def generate(self, instruction: str, image: Optional[InlineImage] = None) -> ModelReply:
        suffix = f"\n(image: {image.mime_type})" if image else ""
        return ModelReply(text=f"[ECHO RESPONSE]\n{instruction}{suffix}", meta={"engine": "echo", "model": self.model})
