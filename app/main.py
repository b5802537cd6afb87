"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.security import dummy_password_hash, get_token_codec

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Build the signing key and the unknown-user dummy hash before serving.

    Both are cached for the process. Computing the dummy hash here keeps the
    first unknown-user login from paying for an extra bcrypt hash.
    """
    get_token_codec()
    dummy_password_hash()
    logger.info("Quill API started", extra={"environment": settings.APP_ENV})
    yield


app = FastAPI(
    title="Quill API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Quill API"}
