from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types
from pydantic import BaseModel, Field

from rasoi_revive.config import Settings

logger = logging.getLogger(__name__)


class InlineImage(BaseModel):
    mime_type: Optional[str] = None
    data: bytes


class ImageCandidate(BaseModel):
    """One candidate of an image request, reduced to what the generator inspects."""
    finish_reason: Optional[str] = None
    images: List[InlineImage] = Field(default_factory=list)


class GenerativeBackend(ABC):
    """The two calls this app makes to a generative service."""

    @abstractmethod
    def generate_structured(
        self, prompt: str, schema: Dict[str, Any], system_instruction: Optional[str] = None
    ) -> Optional[str]:
        """Return the raw JSON text of a schema-constrained response, or None if empty."""

    @abstractmethod
    def generate_image(self, prompt: str, aspect_ratio: str) -> List[ImageCandidate]: ...


class GeminiBackend(GenerativeBackend):
    """
    Google Gemini via the google-genai SDK.

    The client is created on first use so that a missing API key does not stop the
    app from starting; the first call then fails with the SDK's own error.
    """

    def __init__(self, settings: Settings):
        self._api_key = settings.gemini_api_key
        self._text_model = settings.gemini_model_recipes
        self._image_model = settings.gemini_model_image
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def generate_structured(self, prompt, schema, system_instruction=None):
        resp = self._get_client().models.generate_content(
            model=self._text_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        return resp.text

    def generate_image(self, prompt, aspect_ratio):
        resp = self._get_client().models.generate_content(
            model=self._image_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
            ),
        )
        out: List[ImageCandidate] = []
        for cand in resp.candidates or []:
            reason = cand.finish_reason
            parts = cand.content.parts if cand.content and cand.content.parts else []
            images = [
                InlineImage(mime_type=p.inline_data.mime_type, data=p.inline_data.data)
                for p in parts
                if p.inline_data is not None and p.inline_data.data
            ]
            out.append(ImageCandidate(
                finish_reason=getattr(reason, "value", reason),
                images=images,
            ))
        logger.debug("Image request returned %d candidate(s)", len(out))
        return out
