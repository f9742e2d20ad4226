import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autokatalog.api import autos, graphql
from autokatalog.config import Settings, get_settings
from autokatalog.db import Base, engine
from autokatalog.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)
        if settings.create_schema:
            Base.metadata.create_all(bind=engine)
        logger.info(
            "Autokatalog started: rest_path=%s graphql_path=%s", settings.rest_path, settings.graphql_path
        )
        yield
        engine.dispose()

    app = FastAPI(title="Autokatalog", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "Location"],
    )

    app.include_router(autos.router, prefix=settings.rest_path)
    app.include_router(graphql.router, prefix=settings.graphql_path)

    @app.get("/")
    def read_root():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("autokatalog.main:app", host="0.0.0.0", port=8000, reload=True)
