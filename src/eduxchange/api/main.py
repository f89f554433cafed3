"""FastAPI application entry point for EduXchange."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from eduxchange.api.routes import auth, dashboard, files, health, pages, profile, resources
from eduxchange.api.routes.pages import LoginRequiredError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create tables on startup and release the engine on shutdown."""
    from eduxchange.data.db import dispose_engine, init_db

    init_db()
    logger.info("EduXchange started")
    yield
    dispose_engine()
    logger.info("EduXchange stopped")


app = FastAPI(
    title="EduXchange API",
    description="Share, browse and manage academic resources",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LoginRequiredError)
async def redirect_to_login(request: Request, exc: LoginRequiredError) -> RedirectResponse:
    return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)


app.include_router(health.router)
app.include_router(files.router)
app.include_router(pages.router)
app.include_router(auth.router, prefix="/api")
app.include_router(profile.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(resources.router, prefix="/api")


def main(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Start the server."""
    import uvicorn

    uvicorn.run(
        "eduxchange.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
