# rasoi_revive/core/models.py
from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    # Wire shape is camelCase (recipeName, prepTime, imageUrl); Python side is snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Recipe domain ----------

Difficulty = Literal["Easy", "Medium", "Hard"]


class Ingredient(_CamelModel):
    model_config = ConfigDict(frozen=True)

    item: str
    amount: str


class Recipe(_CamelModel):
    """One generated recipe. Replaced wholesale, never edited field by field."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    recipe_name: str
    description: str
    prep_time: str
    cook_time: str
    difficulty: Difficulty
    servings: int = Field(..., ge=1)
    ingredients: List[Ingredient]
    steps: List[str]
    tags: List[str]
    image_url: Optional[str] = None

    def with_image(self, image_url: str) -> "Recipe":
        return self.model_copy(update={"image_url": image_url})


class RecipeBatch(_CamelModel):
    """Result of one generation request, in the order the service returned it."""
    recipes: List[Recipe]

    @model_validator(mode="after")
    def _unique_ids(self) -> "RecipeBatch":
        """
        Ids are the only key used to match an image to its recipe, so they must be
        unique within a batch. Repeats get a positional suffix ("r1", "r1-2", ...).
        """
        seen: set[str] = set()
        out: List[Recipe] = []
        for r in self.recipes:
            rid = r.id
            n = 1
            while rid in seen:
                n += 1
                rid = f"{r.id}-{n}"
            seen.add(rid)
            out.append(r if rid == r.id else r.model_copy(update={"id": rid}))
        self.recipes = out
        return self


# ---------- Views ----------

class KitchenStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


class RecipeCardView(_CamelModel):
    id: str
    recipe_name: str
    description: str
    prep_time: str
    cook_time: str
    difficulty: Difficulty
    servings: int
    tags: List[str]
    image_url: Optional[str] = None
    image_pending: bool = False
    expanded: bool = False
    # Only filled in when the card is expanded
    ingredients: Optional[List[Ingredient]] = None
    steps: Optional[List[str]] = None


class KitchenState(_CamelModel):
    status: KitchenStatus = KitchenStatus.IDLE
    leftovers: List[str] = Field(default_factory=list)
    recipes: List[Recipe]
    is_loading: bool = False
    error: Optional[str] = None
    can_generate: bool = False


class LeftoverIn(BaseModel):
    item: str
