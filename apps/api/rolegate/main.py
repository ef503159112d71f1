"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from rolegate.core.config import settings
from rolegate.core.auth import AbilityRegistry, AuthorizationError, UnknownRoleError
from rolegate.api.routes import router as api_router
from rolegate.api.middleware.logging import LoggingMiddleware
from rolegate.api.middleware.request_id import RequestIdMiddleware
from rolegate.utils.context import configure_logging

logger = structlog.get_logger()


async def load_abilities() -> AbilityRegistry:
    """Create tables, optionally seed, and compile every role's ability."""
    from rolegate.models.database import async_session_factory, init_db
    from rolegate.services.rbac import RBACService

    await init_db()

    async with async_session_factory() as session:
        service = RBACService(session)
        if settings.auth.seed_defaults and await service.seed_defaults():
            await session.commit()
        role_rules = await service.load_role_rules()

    return AbilityRegistry.build_all(
        role_rules,
        default_message=settings.auth.default_message,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    from rolegate.models.database import close_db

    configure_logging(settings.log_level, settings.log_format)

    app.state.abilities = await load_abilities()
    logger.info("Application started", roles=app.state.abilities.roles)

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Middleware (last added is outermost, so the request ID is set first)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Routes
    app.include_router(api_router, prefix="/api")

    # Exception handlers
    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(request: Request, exc: AuthorizationError):
        """Denials expose only the message, never which rule decided."""
        return JSONResponse(
            status_code=settings.auth.denied_status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(UnknownRoleError)
    async def unknown_role_handler(request: Request, exc: UnknownRoleError):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Unknown role"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": str(exc) if settings.debug else "An error occurred",
            },
        )

    @app.get("/health")
    async def health_check():
        """Quick health check endpoint (for load balancers)."""
        registry = getattr(app.state, "abilities", None)
        return {
            "status": "healthy" if registry is not None else "starting",
            "version": settings.app_version,
            "environment": settings.environment,
            "roles": registry.roles if registry is not None else [],
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rolegate.main:app",
        host=settings.host,
        port=settings.port,
    )
