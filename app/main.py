"""
Main FastAPI application for the Order Reconciliation API.
"""
from fastapi import FastAPI

from app.core.config import settings
from app.core.logging import configure_logging, get_logger
from app.core.middleware import CorrelationIdMiddleware
from app.api.routes import sync

configure_logging(
    level=settings.LOG_LEVEL,
    json_output=settings.LOG_JSON,
    service=settings.APP_NAME,
)
logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
    )
    application.add_middleware(CorrelationIdMiddleware)
    application.include_router(sync.router)

    @application.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.ENVIRONMENT}

    return application


app = create_app()

logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} started ({settings.ENVIRONMENT})")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
