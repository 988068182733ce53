"""FastAPI application setup."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from teeshot.api.exceptions import ImageNotFoundError, SessionNotFoundError, ValidationError
from teeshot.api.response import error_response
from teeshot.api.routes import content, health, images, sessions, videos
from teeshot.db.mongo import close_database
from teeshot.llm import LLMError
from teeshot.services.content_service import describe_generation_error
from teeshot.services.session_store import get_session_store

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    store = get_session_store()
    await store.start_cleanup_task()
    yield
    await store.stop_cleanup_task()
    await close_database()


app = FastAPI(
    title="Teeshot API",
    description="Golf social media content generation, parsing and spreadsheet export",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: SessionNotFoundError) -> JSONResponse:
    """Handle unknown or expired sessions."""
    return JSONResponse(
        status_code=404,
        content=error_response("SESSION_NOT_FOUND", str(exc)),
    )


@app.exception_handler(ImageNotFoundError)
async def image_not_found_handler(request: Request, exc: ImageNotFoundError) -> JSONResponse:
    """Handle missing image assets."""
    return JSONResponse(
        status_code=404,
        content=error_response("IMAGE_NOT_FOUND", str(exc)),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=error_response("VALIDATION_ERROR", exc.message),
    )


@app.exception_handler(ServerSelectionTimeoutError)
async def mongo_timeout_handler(request: Request, exc: ServerSelectionTimeoutError) -> JSONResponse:
    """Handle MongoDB connection timeout."""
    return JSONResponse(
        status_code=503,
        content=error_response("DATABASE_UNAVAILABLE", "Database is not available. Please try again later."),
    )


@app.exception_handler(ConnectionFailure)
async def mongo_connection_handler(request: Request, exc: ConnectionFailure) -> JSONResponse:
    """Handle MongoDB connection failure."""
    return JSONResponse(
        status_code=503,
        content=error_response("DATABASE_UNAVAILABLE", "Database connection failed. Please try again later."),
    )


@app.exception_handler(LLMError)
async def llm_error_handler(request: Request, exc: LLMError) -> JSONResponse:
    """Handle generation errors with a user-facing classification."""
    info = describe_generation_error(exc)
    return JSONResponse(
        status_code=info.status_code,
        content=error_response(info.code, info.message),
    )


# Register routes
app.include_router(health.router)
app.include_router(content.router)
app.include_router(sessions.router)
app.include_router(images.router)
app.include_router(videos.router)
