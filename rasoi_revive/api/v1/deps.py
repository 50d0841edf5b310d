from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from rasoi_revive.services.kitchen import KitchenRegistry, KitchenSession


def get_registry(request: Request) -> KitchenRegistry:
    return request.app.state.kitchens


def _device_id_or_400(request: Request) -> str:
    did = request.headers.get("X-Device-Id")
    if not did:
        raise HTTPException(status_code=400, detail="Missing X-Device-Id header")
    return did


def get_kitchen(request: Request, registry: KitchenRegistry = Depends(get_registry)) -> KitchenSession:
    return registry.get(_device_id_or_400(request))
