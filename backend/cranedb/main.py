# backend/cranedb/main.py
import logging
import os
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import ensure_schema
from .logging_config import configure_logging
from .apps.maintenance_schedule.router import router as maintenance_schedule_router

logger = logging.getLogger(__name__)


def _allowed_origins() -> List[str]:
    """Comma-separated CORS_ALLOWED_ORIGINS, falling back to the dashboard dev servers."""
    configured = [item.strip() for item in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")]
    configured = [item for item in configured if item]
    return configured or [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]


def _schema_auto_create() -> bool:
    return os.getenv("SCHEMA_AUTO_CREATE", "true").lower() in {"1", "true", "yes", "on"}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging()
    if _schema_auto_create():
        ensure_schema()
    logger.info("Crane maintenance API started")
    yield


app = FastAPI(title="Crane Maintenance API", version="1.0.0", lifespan=lifespan)
ALLOWED_ORIGINS = _allowed_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    # Browsers refuse credentials with a wildcard origin.
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["health"])
def read_root():
    return {"status": "ok", "message": "Crane maintenance backend is running"}


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


app.include_router(maintenance_schedule_router)
