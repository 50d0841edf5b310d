from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rasoi_revive.api.v1.kitchen import router as kitchen_router
from rasoi_revive.api.v1.leftovers import router as leftovers_router
from rasoi_revive.config import Settings
from rasoi_revive.services.gemini import GeminiBackend, GenerativeBackend
from rasoi_revive.services.kitchen import KitchenRegistry
from rasoi_revive.services.llm import RecipeGenerator
from rasoi_revive.services.metrics import MetricsLogger

logger = logging.getLogger(__name__)


def create_app(backend: Optional[GenerativeBackend] = None) -> FastAPI:
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not settings.gemini_api_key and backend is None:
        logger.warning("GEMINI_API_KEY is not set; recipe generation will fail until it is.")

    generator = RecipeGenerator(backend or GeminiBackend(settings), settings)
    metrics = MetricsLogger(settings) if settings.metrics_enabled else None

    app = FastAPI(title="Rasoi Revive API", version="1.0")
    app.state.kitchens = KitchenRegistry(generator, settings, metrics)

    # CORS (narrow it down in .env via CORS_ALLOW_ORIGINS if you want)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(leftovers_router)
    app.include_router(kitchen_router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz():
        return {"status": "ready"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("rasoi_revive.main:app", host="0.0.0.0", port=8000)
