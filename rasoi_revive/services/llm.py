from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional, Sequence

from pydantic import ValidationError

from rasoi_revive.config import Settings
from rasoi_revive.core.models import RecipeBatch
from .exceptions import GenerationError, ImageGenerationError, SafetyBlockedError
from .gemini import GenerativeBackend

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_MESSAGE = "The chef didn't return a recipe. Please try again."
MALFORMED_RESPONSE_MESSAGE = "The chef had trouble writing down the recipe. Please try again."
TRANSPORT_FAILURE_MESSAGE = "The chef couldn't be reached right now. Please try again."

DEFAULT_IMAGE_MIME = "image/png"

# Finish reasons that mean the content filter withheld the image.
SAFETY_FINISH_REASONS = frozenset({
    "SAFETY",
    "IMAGE_SAFETY",
    "PROHIBITED_CONTENT",
    "IMAGE_PROHIBITED_CONTENT",
    "BLOCKLIST",
    "SPII",
})

PANTRY_STAPLES = ("spices", "oil", "salt", "onions", "ginger", "garlic", "flour", "rice", "lentils")

_STRING = {"type": "STRING"}

RECIPE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "id": _STRING,
        "recipeName": _STRING,
        "description": _STRING,
        "prepTime": _STRING,
        "cookTime": _STRING,
        "difficulty": {"type": "STRING", "enum": ["Easy", "Medium", "Hard"]},
        "ingredients": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {"item": _STRING, "amount": _STRING},
                "required": ["item", "amount"],
            },
        },
        "steps": {"type": "ARRAY", "items": _STRING},
        "servings": {"type": "INTEGER"},
        "tags": {"type": "ARRAY", "items": _STRING},
    },
    "required": [
        "id", "recipeName", "description", "prepTime", "cookTime",
        "difficulty", "ingredients", "steps", "servings", "tags",
    ],
}

RECIPE_BATCH_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {"recipes": {"type": "ARRAY", "items": RECIPE_SCHEMA}},
    "required": ["recipes"],
}


def build_recipe_prompt(leftovers: Sequence[str], cuisine: str = "Indian", count: int = 3) -> str:
    return (
        f"I have the following leftover food items: {', '.join(leftovers)}.\n"
        f"Please suggest {count} authentic and creative {cuisine} recipes that primarily use these leftovers. "
        f"You can assume standard {cuisine} pantry staples ({', '.join(PANTRY_STAPLES)}) are available "
        "and should not be treated as leftovers.\n"
        "Give every recipe a short id that is unique within this answer. "
        "Provide detailed step-by-step instructions, preparation time, cooking time, servings and tags for each recipe.\n"
        f"ONLY provide {cuisine} recipes. Respond only with JSON matching the given schema."
    )


def build_system_instruction(cuisine: str = "Indian") -> str:
    return (
        f"You are a world-class {cuisine} Chef and 'Zero Waste' cooking expert. Your specialty is creating "
        f"delicious, traditional, and modern {cuisine} dishes using leftovers while maintaining authentic flavors."
    )


def build_image_prompt(recipe_name: str, description: str, cuisine: str = "Indian", aspect_ratio: str = "4:3") -> str:
    return (
        f'A high-quality, professional food photography shot of an authentic {cuisine} dish called "{recipe_name}". '
        f"{description}. The dish should be beautifully plated on traditional {cuisine} tableware, warm lighting, "
        f"appetizing textures. Landscape {aspect_ratio} framing. "
        "Show only the food: no people, no hands, and no text, labels or watermarks."
    )


def to_data_uri(data: bytes, mime_type: Optional[str]) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_IMAGE_MIME};base64,{encoded}"


class RecipeGenerator:
    """
    Recipe and image generation on top of a GenerativeBackend.

    One attempt per call: no retries, no caching, no fallback content. Every
    failure is logged here and re-raised as GenerationError / ImageGenerationError.
    """

    def __init__(self, backend: GenerativeBackend, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self._backend = backend

    def generate_recipes(self, leftovers: Sequence[str]) -> RecipeBatch:
        # Callers guarantee a non-empty list.
        prompt = build_recipe_prompt(leftovers, self.settings.cuisine, self.settings.recipe_count)
        try:
            text = self._backend.generate_structured(
                prompt,
                RECIPE_BATCH_SCHEMA,
                system_instruction=build_system_instruction(self.settings.cuisine),
            )
        except Exception as e:
            logger.exception("Recipe request failed for %d leftover(s)", len(leftovers))
            raise GenerationError(TRANSPORT_FAILURE_MESSAGE) from e

        if not text or not text.strip():
            logger.error("Recipe request returned no content")
            raise GenerationError(EMPTY_RESPONSE_MESSAGE)

        try:
            batch = RecipeBatch.model_validate_json(text.strip())
        except ValidationError as e:
            logger.exception("Failed to parse recipe response")
            raise GenerationError(MALFORMED_RESPONSE_MESSAGE) from e

        if len(batch.recipes) != self.settings.recipe_count:
            # Advisory only; whatever came back is shown.
            logger.info("Asked for %d recipes, got %d", self.settings.recipe_count, len(batch.recipes))
        return batch

    def generate_image(self, recipe_name: str, description: str) -> str:
        """Return a data URI for a photo of the dish."""
        prompt = build_image_prompt(
            recipe_name, description, self.settings.cuisine, self.settings.image_aspect_ratio
        )
        try:
            candidates = self._backend.generate_image(prompt, self.settings.image_aspect_ratio)
        except Exception as e:
            raise ImageGenerationError(f"Image request failed for {recipe_name!r}: {e}") from e

        if not candidates:
            raise ImageGenerationError(f"No image candidates returned for {recipe_name!r}")

        first = candidates[0]
        if first.finish_reason in SAFETY_FINISH_REASONS:
            raise SafetyBlockedError(
                f"Image for {recipe_name!r} was blocked by the safety filter ({first.finish_reason})",
                finish_reason=first.finish_reason,
            )
        for image in first.images:
            if image.data:
                return to_data_uri(image.data, image.mime_type)
        raise ImageGenerationError(f"No image data in response for {recipe_name!r}")
