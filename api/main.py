"""FastAPI application for the Hours Reconciliation API."""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from hours_tool.config import load_settings
from hours_tool.logging_config import configure_logging

_settings = load_settings()
configure_logging(level=_settings.log_level, json_format=_settings.log_json)

app = FastAPI(
    title="Hours Reconciliation API",
    description="Technician hour reconciliation, classification and billing.",
    version="1.0.0",
)

# CORS: allow frontend origins
# Set ALLOWED_ORIGINS="*" to allow any origin
_origins_env = os.environ.get("ALLOWED_ORIGINS", "")
_origins_list = [o.strip() for o in _origins_env.split(",") if o.strip()]

_allow_all = "*" in _origins_list

if _allow_all:
    ALLOWED_ORIGINS: list[str] = ["*"]
elif _origins_list:
    ALLOWED_ORIGINS = _origins_list
else:
    ALLOWED_ORIGINS = [
        "http://localhost:8080",
        "http://localhost:3000",
        "http://127.0.0.1:8080",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=not _allow_all,  # credentials not allowed with wildcard
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

app.include_router(router)


@app.get("/")
async def root():
    return {
        "name": "Hours Reconciliation API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
