"""
FastAPI Application

Main FastAPI application for DBChat with:
- Lifespan management for the agent pool
- CORS middleware for frontend integration
- Global exception handlers mapping agent errors to JSON bodies
- Chat, models and health endpoints

Usage:
    uvicorn dbchat.api.main:app --reload --port 8080
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dbchat.agent.errors import AgentConstructionError, AgentPoolError
from dbchat.agent.manager import AgentManager
from dbchat.agent.session import SessionStateError
from dbchat.api.routes import chat, health, models
from dbchat.config import get_settings
from dbchat.models.agent import AgentError
from dbchat.models.api import ChatResponse

logger = logging.getLogger(__name__)

# Global state for the agent pool
app_state: dict[str, AgentManager | None] = {
    "manager": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for startup and shutdown.

    Creates the agent pool at startup and closes every pooled agent and the
    session store at shutdown.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} API server...")

    manager = AgentManager(settings.to_agent_config())
    app_state["manager"] = manager

    configured = [provider.value for provider in settings.providers]
    if configured:
        logger.info(f"Configured providers: {', '.join(configured)}")
    else:
        logger.warning("No LLM provider API key configured; chat requests will be rejected.")

    try:
        yield  # Application runs here
    finally:
        logger.info(f"Shutting down {settings.app_name} API server...")
        for result in await manager.close():
            if not result.ok:
                logger.error(f"Error during shutdown: {result.operation}: {result.error}")
        manager.session_service.close()
        app_state["manager"] = None
        logger.info(f"{settings.app_name} API server shut down complete")


# Create FastAPI app
app = FastAPI(
    title="DBChat API",
    description="Chat with an assistant that reads your PostgreSQL schema and proposes SQL",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for frontend
cors_origins_env = os.getenv("CORS_ORIGINS", "")
cors_origins = (
    [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
    if cors_origins_env
    else ["*"]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials="*" not in cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ChatResponse.failure(error).model_dump(exclude_none=True),
    )


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with the failure body."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    logger.info(f"Rejected invalid request: {details}")
    return _failure(status.HTTP_400_BAD_REQUEST, f"invalid request: {details}")


@app.exception_handler(AgentPoolError)
async def agent_pool_error_handler(request: Request, exc: AgentPoolError) -> JSONResponse:
    """Unknown models and unconfigured providers are client errors."""
    logger.warning(f"Agent pool error: {exc}")
    return _failure(status.HTTP_400_BAD_REQUEST, f"failed to process message: {exc}")


@app.exception_handler(AgentConstructionError)
async def agent_construction_error_handler(
    request: Request, exc: AgentConstructionError
) -> JSONResponse:
    """Handle agent construction failures (the next request retries)."""
    logger.error(f"Agent construction error: {exc}", extra={"model": exc.slug})
    return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, f"failed to process message: {exc}")


@app.exception_handler(AgentError)
async def agent_error_handler(request: Request, exc: AgentError) -> JSONResponse:
    """Handle agent errors with context."""
    logger.error(
        f"Agent error: {exc}",
        extra={
            "agent": exc.agent,
            "recoverable": exc.recoverable,
        },
    )
    return _failure(
        status.HTTP_500_INTERNAL_SERVER_ERROR, f"failed to process message: {exc.message}"
    )


@app.exception_handler(SessionStateError)
async def session_error_handler(request: Request, exc: SessionStateError) -> JSONResponse:
    """Handle session store errors."""
    logger.error(f"Session error: {exc}")
    return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, f"failed to process message: {exc}")


# Include routers
app.include_router(health.router, prefix="/v1", tags=["health"])
app.include_router(models.router, prefix="/v1", tags=["models"])
app.include_router(chat.router, prefix="/v1", tags=["agent"])


# Root endpoint
@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": "DBChat API",
        "version": "0.1.0",
        "description": "Schema-aware SQL assistant for PostgreSQL",
        "docs": "/docs",
    }


def get_manager() -> AgentManager:
    """Get the initialized agent pool."""
    if app_state["manager"] is None:
        raise RuntimeError("Agent manager not initialized")
    return app_state["manager"]
