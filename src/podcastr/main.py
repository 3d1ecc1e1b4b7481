"""
FastAPI application entry point for Podcastr API.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Config
from .context import AppContext
from .errors import PodcastrError
from .middleware.upload_limit import UploadLimitMiddleware
from .routes import auth, files, podcasts

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)

# Set specific loggers
logging.getLogger("podcastr").setLevel(logging.INFO)
logging.getLogger("uvicorn").setLevel(logging.INFO)
logging.getLogger("uvicorn.access").setLevel(logging.INFO)

logger = logging.getLogger(__name__)

SERVICE_NAME = "Podcastr API"
VERSION = "1.0.0"


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    detail: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content = {"success": False, "message": message}
    context: Optional[AppContext] = getattr(request.app.state, "context", None)
    if detail and context is not None and context.config.is_development:
        content["error"] = detail
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PodcastrError)
    async def _podcastr_error(request: Request, exc: PodcastrError) -> JSONResponse:
        detail = None
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
            detail = str(exc.__cause__ or exc)
        return _error_response(request, exc.status_code, exc.message, detail, exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
            message = "Route not found"
        return _error_response(request, exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
            for err in exc.errors()
        )
        return _error_response(request, status.HTTP_400_BAD_REQUEST, "Invalid request", problems)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong!", str(exc)
        )


def create_app(config: Optional[Config] = None) -> FastAPI:
    """
    Build the application and its storage context.

    Args:
        config: Configuration; read from the environment when omitted

    Returns:
        Configured FastAPI app

    Raises:
        ConfigError: If required configuration (JWT_SECRET) is missing
    """
    config = config or Config()
    context = AppContext.from_config(config)

    app = FastAPI(
        title=SERVICE_NAME,
        description="REST API for publishing, browsing and streaming podcast episodes",
        version=VERSION,
    )
    app.state.context = context

    logger.info("=" * 80)
    logger.info("%s Starting", SERVICE_NAME)
    logger.info("=" * 80)
    logger.info("Configuration:")
    logger.info("  Environment: %s", config.ENVIRONMENT)
    logger.info("  Storage directory: %s", config.STORAGE_DIR)
    logger.info("  Token lifetime: %s (%s seconds)", config.JWT_EXPIRE, config.token_lifetime_seconds)
    logger.info("  Max upload size: %s bytes", config.MAX_FILE_SIZE)
    logger.info("  CORS origins: %s", ", ".join(config.cors_origins))
    logger.info("=" * 80)

    app.add_middleware(UploadLimitMiddleware, max_file_size=config.MAX_FILE_SIZE)

    origins = config.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Length", "Content-Range", "Accept-Ranges"],
    )

    _install_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(podcasts.router)
    app.include_router(files.router)

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint.

        Returns:
            Health status
        """
        return {"status": "healthy", "service": SERVICE_NAME, "version": VERSION}

    @app.get("/")
    async def root():
        """
        Root endpoint.

        Returns:
            API information
        """
        return {
            "message": "Welcome to Podcast API",
            "status": "Server is running",
            "version": VERSION,
            "docs": "/docs",
            "health": "/health",
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    return app


if __name__ == "__main__":
    import uvicorn

    settings = Config()
    uvicorn.run(
        "podcastr.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
    )
