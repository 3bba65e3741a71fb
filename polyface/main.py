import structlog
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from scalar_fastapi import get_scalar_api_reference

from polyface.config.settings import settings
from polyface.core.exceptions import PolyFaceError
from polyface.core.firebase import get_firebase_status
from polyface.core.observability import init_observability
from polyface.domains.actions.router import router as actions_router
from polyface.domains.admin.router import router as admin_router
from polyface.domains.bookings.router import router as bookings_router
from polyface.domains.classes.router import router as classes_router
from polyface.domains.documents.router import router as documents_router
from polyface.domains.packages.router import router as credits_router
from polyface.domains.payments.router import router as payments_router
from polyface.domains.schedule.router import router as schedule_router
from polyface.domains.trainers.router import router as trainers_router
from polyface.domains.users.router import router as users_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    logger.info(
        "app_starting",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        firebase_configured=settings.firebase_configured,
    )

    try:
        from polyface.config.database import init_db
        await init_db()
        logger.info("firebase_initialized", project_id=settings.FIREBASE_PROJECT_ID or None)
    except Exception as e:
        logger.error("firebase_init_failed", error=str(e), type=type(e).__name__)
        # Re-raise in production to prevent unhealthy startup
        if settings.is_production:
            raise

    yield
    # Shutdown
    logger.info("app_shutting_down", app_name=settings.APP_NAME)


async def polyface_error_handler(request: Request, exc: PolyFaceError) -> JSONResponse:
    """Render domain errors as ``{"detail", "error"}`` with their status code."""
    logger.info(
        "request_refused",
        path=request.url.path,
        error=exc.code,
        status_code=exc.status_code,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Initialize observability (GlitchTip/Sentry)
    init_observability()

    app = FastAPI(
        title=settings.APP_NAME,
        description="PolyFace Volleyball training API",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
        # Disable automatic trailing slash redirects - they lose Authorization headers
        redirect_slashes=False,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
    )

    app.add_exception_handler(PolyFaceError, polyface_error_handler)

    # Include routers
    app.include_router(users_router, prefix=f"{settings.API_V1_PREFIX}/users", tags=["Users"])
    app.include_router(trainers_router, prefix=f"{settings.API_V1_PREFIX}/trainers", tags=["Trainers"])
    app.include_router(schedule_router, prefix=f"{settings.API_V1_PREFIX}/schedule", tags=["Schedule"])
    app.include_router(credits_router, prefix=f"{settings.API_V1_PREFIX}/credits", tags=["Credits"])
    app.include_router(bookings_router, prefix=f"{settings.API_V1_PREFIX}/bookings", tags=["Bookings"])
    app.include_router(classes_router, prefix=f"{settings.API_V1_PREFIX}/classes", tags=["Classes"])
    app.include_router(payments_router, prefix=f"{settings.API_V1_PREFIX}/payments", tags=["Payments"])
    app.include_router(documents_router, prefix=f"{settings.API_V1_PREFIX}/documents", tags=["Documents"])
    app.include_router(actions_router, prefix=f"{settings.API_V1_PREFIX}/actions", tags=["Actions"])
    app.include_router(admin_router, prefix=f"{settings.API_V1_PREFIX}/admin", tags=["Admin"])

    # Health check endpoint
    @app.get("/health")
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV,
            "firebase": get_firebase_status(),
        }

    # Scalar API Reference - Modern API documentation
    @app.get("/reference", include_in_schema=False)
    async def scalar_html():
        return get_scalar_api_reference(
            openapi_url=app.openapi_url,
            title=f"{settings.APP_NAME} - API Reference",
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "polyface.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
