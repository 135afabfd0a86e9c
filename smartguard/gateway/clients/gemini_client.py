# Client for the Google Gemini API (google-genai SDK).
# Exposes edit_image / ground_search / generate, each returning a ModelReply.

import base64
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from ..images import decode_image
from ..types import GeoLocation, InlineImage, ModelReply


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        image_model: str = "gemini-2.5-flash-image",
        model: str = "gemini-2.5-flash",
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.image_model = image_model
        self.model = model
        self.timeout = timeout
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        # built on first use so a missing key fails the call, not the process
        if self._client is None:
            if not self.api_key:
                raise RuntimeError("API key not configured")
            self._client = genai.Client(
                api_key=self.api_key,
                http_options={"timeout": int(self.timeout * 1000)},
            )
        return self._client

    @staticmethod
    def _image_part(image: InlineImage) -> types.Part:
        return types.Part.from_bytes(data=decode_image(image), mime_type=image.mime_type)

    def edit_image(self, instruction: str, image: InlineImage) -> ModelReply:
        resp = self._get_client().models.generate_content(
            model=self.image_model,
            contents=[instruction, self._image_part(image)],
        )
        return ModelReply(
            images=self._extract_images(resp),
            meta={"engine": "gemini", "model": self.image_model},
        )

    def ground_search(self, instruction: str, location: GeoLocation) -> ModelReply:
        resp = self._get_client().models.generate_content(
            model=self.model,
            contents=instruction,
            config=types.GenerateContentConfig(
                tools=[types.Tool(google_maps=types.GoogleMaps())],
                tool_config=types.ToolConfig(
                    retrieval_config=types.RetrievalConfig(
                        lat_lng=types.LatLng(latitude=location.latitude, longitude=location.longitude),
                    ),
                ),
            ),
        )
        return ModelReply(
            text=resp.text or "",
            grounding=self._extract_grounding(resp),
            meta={"engine": "gemini", "model": self.model},
        )

    def generate(self, instruction: str, image: Optional[InlineImage] = None) -> ModelReply:
        contents: List[Any] = [instruction]
        if image is not None:
            contents.append(self._image_part(image))
        resp = self._get_client().models.generate_content(model=self.model, contents=contents)
        return ModelReply(text=(resp.text or "").strip(), meta={"engine": "gemini", "model": self.model})

    # -------------------------
    # Response unpacking
    # -------------------------
    @staticmethod
    def _first_candidate(resp):
        candidates = getattr(resp, "candidates", None) or []
        return candidates[0] if candidates else None

    def _extract_images(self, resp) -> List[InlineImage]:
        cand = self._first_candidate(resp)
        parts = (cand.content.parts if cand and cand.content else None) or []
        images = []
        for part in parts:
            blob = part.inline_data
            if blob and blob.data:
                data = blob.data
                if isinstance(data, bytes):
                    data = base64.b64encode(data).decode("ascii")
                images.append(InlineImage(mime_type=blob.mime_type or "image/png", data=data))
        return images

    def _extract_grounding(self, resp) -> List[Dict[str, Any]]:
        cand = self._first_candidate(resp)
        meta = cand.grounding_metadata if cand else None
        chunks = (meta.grounding_chunks if meta else None) or []
        return [c.model_dump(exclude_none=True) for c in chunks]
