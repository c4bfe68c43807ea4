"""
Havyn FastAPI Application Entry Point

Main application initialization with:
- Lifespan management (startup/shutdown)
- CORS configuration
- Error handling middleware
- Router registration
- Prometheus metrics

This is the production entry point for the Havyn backend.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from havyn import __version__
from havyn.config import get_settings
from havyn.config.logging_config import configure_logging, get_logger
from havyn.infrastructure.database import SqlUserAccountStore, UserAccountStore, get_db_manager
from havyn.infrastructure.email import EmailClient, ResendEmailClient
from havyn.infrastructure.llm import LLMProvider, OpenAIProvider
from havyn.infrastructure.metrics import metrics_router, update_system_info
from havyn.services.alerting import CrisisOrchestrator, TaskSupervisor
from havyn.api.v1.router import api_router
from havyn.api.middleware.error_handler import ErrorHandlerMiddleware

# Initialize settings and logging
settings = get_settings()
configure_logging(settings)
logger = get_logger(__name__)

# Global services (initialized during startup)
_user_store: UserAccountStore | None = None
_email_client: EmailClient | None = None
_supervisor: TaskSupervisor | None = None
_orchestrator: CrisisOrchestrator | None = None
_llm_provider: LLMProvider | None = None


def get_orchestrator() -> CrisisOrchestrator:
    """Get the global crisis orchestrator."""
    if _orchestrator is None:
        raise RuntimeError("Orchestrator not initialized")
    return _orchestrator


def get_user_store() -> UserAccountStore:
    """Get the global user-account store."""
    if _user_store is None:
        raise RuntimeError("User store not initialized")
    return _user_store


def get_supervisor() -> TaskSupervisor:
    """Get the global background task supervisor."""
    if _supervisor is None:
        raise RuntimeError("Task supervisor not initialized")
    return _supervisor


def get_llm_provider() -> LLMProvider:
    """Get the global LLM provider."""
    if _llm_provider is None:
        raise RuntimeError("LLM provider not initialized")
    return _llm_provider


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Builds every collaborator once. On shutdown, in-flight alerts get
    a grace period (long enough for one retry) before cancellation.
    """
    global _user_store, _email_client, _supervisor, _orchestrator, _llm_provider

    logger.info(
        "Starting Havyn application",
        env=settings.env,
        version=__version__,
    )
    update_system_info(settings.env, __version__)

    try:
        db = get_db_manager()
        await db.initialize()
        await db.create_schema()
        logger.info("Database connection initialized")

        _user_store = SqlUserAccountStore(db)
        _email_client = ResendEmailClient()
        if not _email_client.is_configured():
            logger.warning("Email API key missing; crisis alerts will fail to send")

        _supervisor = TaskSupervisor()
        _orchestrator = CrisisOrchestrator.build(_user_store, _email_client, _supervisor)
        logger.info("Crisis orchestrator initialized")

        _llm_provider = OpenAIProvider()
        if not _llm_provider.is_configured():
            logger.warning("LLM API key missing; chat will use fallback replies")

        yield

    finally:
        logger.info("Shutting down Havyn application")

        if _supervisor:
            await _supervisor.shutdown(timeout=settings.alert.shutdown_grace_seconds)

        if _email_client:
            await _email_client.close()

        if _llm_provider:
            await _llm_provider.close()

        db = get_db_manager()
        await db.close()

        logger.info("Havyn application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Havyn API",
        description="Conversational companion with crisis detection and emergency alerts",
        version=__version__,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(ErrorHandlerMiddleware)

    app.include_router(
        api_router,
        prefix=f"/api/{settings.api_version}",
    )
    app.include_router(metrics_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint - basic info."""
        return {
            "name": "Havyn API",
            "version": __version__,
            "status": "operational",
        }

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "havyn.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )
