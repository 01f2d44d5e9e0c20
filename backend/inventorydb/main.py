# backend/inventorydb/main.py
import logging
import os
from typing import List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import InventoryError, InvalidToken
from .logging_config import configure_logging

from .apps.accounts.router_public import router as auth_router
from .apps.accounts.router_admin import router as users_router
from .apps.catalog.router import router as catalog_router
from .apps.inventory.router import router as inventory_router

logger = logging.getLogger(__name__)


def _allowed_origins() -> List[str]:
    """
    Parse CORS_ALLOWED_ORIGINS from env.

    Accepts comma-separated origins. If unset, defaults to local dev ports.
    """
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if raw:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        if origins:
            return origins
    return [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
        "http://localhost:3000",
    ]


def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, InvalidToken) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
        headers=headers,
    )


configure_logging(os.getenv("LOG_LEVEL", "info"))

app = FastAPI(title="Inventory API", version="0.1.0")
cors_origins = _allowed_origins()
allow_credentials = "*" not in cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Subclasses resolve to this handler via the exception's MRO.
app.add_exception_handler(InventoryError, inventory_error_handler)


@app.get("/", tags=["health"])
def read_root():
    return {"status": "ok", "message": "Inventory API is running"}


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(catalog_router)
app.include_router(inventory_router)
