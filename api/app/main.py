from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import logging
import traceback
from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import WordcraftException

# Import models to register them with SQLModel
from app import models  # noqa: F401

from app.api.v1 import api_router
from app.utils.assets_utils import get_assets_directory

logger = logging.getLogger(__name__)

IS_DEVELOPMENT = settings.environment.lower() in ("development", "dev", "local")

app = FastAPI(title="Wordcraft API", version="1.0.0")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors with full details for debugging."""
    body = await request.body()
    logger.error(f"Validation error on {request.method} {request.url.path}")
    logger.error(f"Validation errors: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors(), "body": body.decode('utf-8', errors='replace') if body else None},
    )


@app.exception_handler(WordcraftException)
async def wordcraft_exception_handler(request: Request, exc: WordcraftException):
    """Answer with the status code the exception class declares."""
    logger.warning(f"Application exception on {request.method} {request.url.path}: {type(exc).__name__}: {str(exc)}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions; tracebacks are only returned in development."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)

    if IS_DEVELOPMENT:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": str(exc),
                "type": type(exc).__name__,
                "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            },
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An internal server error occurred. Please try again later.",
            "type": "InternalServerError"
        },
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    init_db()


@app.get("/")
async def root():
    return {
        "message": "Wordcraft API",
        "status": "running",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        }
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


app.include_router(api_router, prefix=settings.api_v1_prefix)

# Generated audio and uploaded images are served from the assets directory
assets_dir = get_assets_directory()
assets_dir.mkdir(parents=True, exist_ok=True)
logger.info(f"Mounting static files from: {assets_dir}")
app.mount("/assets", StaticFiles(directory=str(assets_dir)), name="assets")
