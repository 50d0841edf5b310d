from __future__ import annotations

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status

from rasoi_revive.core.models import KitchenState, RecipeCardView
from rasoi_revive.services.exceptions import GenerationInProgressError, LeftoverValidationError
from rasoi_revive.services.kitchen import KitchenSession
from .deps import get_kitchen

router = APIRouter(tags=["kitchen"])


@router.get("/api/v1/kitchen", response_model=KitchenState)
def get_state(kitchen: KitchenSession = Depends(get_kitchen)):
    return kitchen.snapshot()


@router.post("/api/v1/kitchen/generate", response_model=KitchenState, status_code=status.HTTP_202_ACCEPTED)
def generate(
    background_tasks: BackgroundTasks,
    response: Response,
    wait: bool = False,
    kitchen: KitchenSession = Depends(get_kitchen),
):
    """
    Start the recipe workflow. By default it runs after the response is sent and the
    client polls GET /api/v1/kitchen; with ?wait=true the final state is returned.
    """
    try:
        epoch, leftovers = kitchen.begin_generation()
    except LeftoverValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GenerationInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if wait:
        response.status_code = status.HTTP_200_OK
        return kitchen.run_generation(epoch, leftovers)
    background_tasks.add_task(kitchen.run_generation, epoch, leftovers)
    return kitchen.snapshot()


@router.get("/api/v1/recipes", response_model=List[RecipeCardView], response_model_exclude_none=True)
def list_cards(kitchen: KitchenSession = Depends(get_kitchen)):
    return kitchen.cards()


@router.get("/api/v1/recipes/{recipe_id}", response_model=RecipeCardView, response_model_exclude_none=True)
def get_card(recipe_id: str, kitchen: KitchenSession = Depends(get_kitchen)):
    try:
        return kitchen.card(recipe_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Recipe not found")


@router.post("/api/v1/recipes/{recipe_id}/toggle", response_model=RecipeCardView, response_model_exclude_none=True)
def toggle_card(recipe_id: str, kitchen: KitchenSession = Depends(get_kitchen)):
    try:
        return kitchen.toggle_card(recipe_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Recipe not found")
