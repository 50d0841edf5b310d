# rasoi_revive/core/board.py
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from .models import Recipe


class RecipeBoard:
    """
    The recipes currently on screen, keyed by id in batch order.

    A dict keeps insertion order, so patching one recipe's image is a single
    key assignment and never moves it.
    """

    def __init__(self, recipes: Iterable[Recipe] = ()) -> None:
        self._by_id: Dict[str, Recipe] = {}
        self.replace(recipes)

    def replace(self, recipes: Iterable[Recipe]) -> None:
        self._by_id = {r.id: r for r in recipes}

    def clear(self) -> None:
        self._by_id = {}

    def attach_image(self, recipe_id: str, image_url: str) -> bool:
        """
        Set the image of one recipe. An image, once set, is kept: later calls for the
        same id are no-ops. Returns False when nothing changed (unknown id or already set).
        """
        current = self._by_id.get(recipe_id)
        if current is None or current.image_url is not None:
            return False
        self._by_id[recipe_id] = current.with_image(image_url)
        return True

    def get(self, recipe_id: str) -> Optional[Recipe]:
        return self._by_id.get(recipe_id)

    def recipes(self) -> List[Recipe]:
        return list(self._by_id.values())

    def __contains__(self, recipe_id: object) -> bool:
        return recipe_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Recipe]:
        return iter(self.recipes())
