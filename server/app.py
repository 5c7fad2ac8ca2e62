# SPDX-License-Identifier: Apache-2.0
"""FaceScan FastAPI Application

Relays face photos to a vision LLM and serves the local landmark metrics.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .routes import router
from .core.utils import setup_logging, get_version_info
from .settings import SETTINGS, redact_secret


# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("FaceScan server starting...")
    logger.info(f"Version: {get_version_info()}")
    logger.info(f"Provider: {SETTINGS.provider}")
    if SETTINGS.openai_api_key:
        logger.info(f"OpenAI key: {redact_secret(SETTINGS.openai_api_key)}")
    if SETTINGS.anthropic_api_key:
        logger.info(f"Anthropic key: {redact_secret(SETTINGS.anthropic_api_key)}")
    if not (SETTINGS.openai_api_key or SETTINGS.anthropic_api_key):
        logger.warning("No LLM API key set; /api/analyze-face will answer 503")
    yield
    logger.info("FaceScan server shutting down...")


app = FastAPI(
    title="FaceScan",
    description="Facial metrics and vision-LLM face classification",
    version=get_version_info(),
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=SETTINGS.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=422, content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())})


# Include API routes
app.include_router(router, prefix="/api")


# Health endpoints at root level
@app.get("/healthz")
@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": get_version_info()}


@app.get("/version")
def version_info():
    """Version information endpoint."""
    return {"version": get_version_info(), "git_sha": os.getenv("GIT_SHA", "unknown")}
