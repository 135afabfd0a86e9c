# Client for the OpenAI API.
# Same interface as GeminiClient. Chat completions carry no map grounding,
# so ground_search always yields an empty grounding list.

import os
from typing import Any, Dict, List, Optional

from openai import OpenAI

from ..images import decode_image
from ..types import GeoLocation, InlineImage, ModelReply

_EXTENSIONS = {"image/png": "png", "image/jpeg": "jpg", "image/webp": "webp"}


class OpenAIClient:
    def __init__(self, model: str = "gpt-4o-mini", image_model: str = "gpt-image-1", api_key: Optional[str] = None):
        self.model = model
        self.image_model = image_model
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._client: Optional[OpenAI] = None

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                raise RuntimeError("OPENAI_API_KEY not configured")
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def edit_image(self, instruction: str, image: InlineImage) -> ModelReply:
        name = f"photo.{_EXTENSIONS.get(image.mime_type, 'png')}"
        resp = self._get_client().images.edit(
            model=self.image_model,
            image=(name, decode_image(image), image.mime_type),
            prompt=instruction,
        )
        images = [InlineImage(mime_type="image/png", data=d.b64_json) for d in (resp.data or []) if d.b64_json]
        return ModelReply(images=images, meta={"engine": "openai", "model": self.image_model})

    def ground_search(self, instruction: str, location: GeoLocation) -> ModelReply:
        text = self._chat(f"{instruction}\nSearch around latitude {location.latitude}, longitude {location.longitude}.")
        return ModelReply(text=text, grounding=[], meta={"engine": "openai", "model": self.model})

    def generate(self, instruction: str, image: Optional[InlineImage] = None) -> ModelReply:
        return ModelReply(text=self._chat(instruction, image), meta={"engine": "openai", "model": self.model})

    def _chat(self, instruction: str, image: Optional[InlineImage] = None) -> str:
        content: List[Dict[str, Any]] = [{"type": "text", "text": instruction}]
        if image is not None:
            content.append({"type": "image_url", "image_url": {"url": image.to_data_uri()}})
        resp = self._get_client().chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
        )
        return (resp.choices[0].message.content or "").strip()
