# rasoi_revive/core/cards.py
from __future__ import annotations

from .models import Recipe, RecipeCardView

SUMMARY_TAG_LIMIT = 3


def render_card(recipe: Recipe, expanded: bool = False, is_loading: bool = False) -> RecipeCardView:
    """
    Summary view of a recipe; ingredients, steps and the full tag list are added
    only when expanded. The summary carries the first three tags.

    `image_pending` drives the placeholder: the workflow is still running and this
    recipe has no image yet. Once the workflow settles a missing image is final.
    """
    tags = list(recipe.tags) if expanded else list(recipe.tags[:SUMMARY_TAG_LIMIT])
    view = RecipeCardView(
        id=recipe.id,
        recipe_name=recipe.recipe_name,
        description=recipe.description,
        prep_time=recipe.prep_time,
        cook_time=recipe.cook_time,
        difficulty=recipe.difficulty,
        servings=recipe.servings,
        tags=tags,
        image_url=recipe.image_url,
        image_pending=is_loading and recipe.image_url is None,
        expanded=expanded,
    )
    if expanded:
        view.ingredients = list(recipe.ingredients)
        view.steps = list(recipe.steps)
    return view
