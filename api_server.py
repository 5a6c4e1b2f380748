from __future__ import annotations  # FastAPI server exposing the HirePulse API

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from access import AccessShell
from api.routes import Runtime, router
from config.settings import settings
from evaluation_gateway import EvaluationGateway, bind_from_file
from services.sessions import SessionRegistry
from storage.migrate import migrate

logger = logging.getLogger(__name__)


def create_app(
    *,
    gateway: Optional[EvaluationGateway] = None,
    access: Optional[AccessShell] = None,
    config_path: Optional[Path] = None,
) -> FastAPI:  # Build the application with its shared runtime
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        migrate(settings.DB_PATH)
        path = config_path or Path(settings.LLM_CONFIG_PATH)
        if bind_from_file(path):
            logger.info("LLM routes bound from %s", path)
        yield

    app = FastAPI(title="HirePulse API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    shell = access or AccessShell()
    evaluator = gateway or EvaluationGateway()
    app.state.runtime = Runtime(access=shell, gateway=evaluator, sessions=SessionRegistry(shell, evaluator))
    app.include_router(router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
