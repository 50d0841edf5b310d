from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from rasoi_revive.core.models import KitchenState, LeftoverIn
from rasoi_revive.services.kitchen import KitchenSession
from .deps import get_kitchen

router = APIRouter(tags=["leftovers"])


@router.get("/api/v1/leftovers", response_model=List[str])
def list_leftovers(kitchen: KitchenSession = Depends(get_kitchen)):
    return kitchen.leftovers()


@router.post("/api/v1/leftovers", response_model=List[str])
def add_leftover(payload: LeftoverIn, kitchen: KitchenSession = Depends(get_kitchen)):
    # Blank input is silently ignored
    return kitchen.add_leftover(payload.item)


@router.delete("/api/v1/leftovers/{index}", response_model=List[str])
def remove_leftover(index: int, kitchen: KitchenSession = Depends(get_kitchen)):
    try:
        return kitchen.remove_leftover(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/api/v1/leftovers", response_model=KitchenState)
def clear_all(kitchen: KitchenSession = Depends(get_kitchen)):
    return kitchen.clear_all()
