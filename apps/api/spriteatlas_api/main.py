"""FastAPI entrypoint for the sprite atlas service."""

from __future__ import annotations

import logging
import os
import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routers.atlas import router as atlas_router

from packages.spriteatlas_core.atlas.errors import AtlasError

logging.basicConfig(
    level=getattr(logging, str(os.environ.get("SPRITEATLAS_LOG_LEVEL") or "INFO").strip().upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("spriteatlas_api")

app = FastAPI(title="Sprite Atlas API", version="0.1.0")

_cors_origins = [o.strip() for o in os.environ.get("SPRITEATLAS_CORS_ORIGINS", "*").split(",")]
_cors_allow_credentials = "*" not in _cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=_cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(atlas_router)


@app.exception_handler(AtlasError)
async def _atlas_error_handler(request: Request, exc: AtlasError):
    logger.warning("[ATLAS] Request failed: %s %s -> %s", request.method, request.url.path, exc.error_code)
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.get("/healthz")
def healthz() -> dict[str, str]:
    logger.debug("[HEALTH] Health check requested")
    return {"status": "ok"}
