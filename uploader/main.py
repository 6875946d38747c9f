"""Entry point for the upload service."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from uploader import config
from uploader.exceptions import (
    ChunkingError,
    ConfigurationError,
    InvalidPartError,
    MediaUploadException,
    NoPartsProvidedError,
    UploadError,
)
from uploader.routes.playback_routes import router as playback_router
from uploader.routes.upload_routes import router as upload_router

logger = setup_logging('uploader')

app = FastAPI(
    title="Gist Media Uploader",
    description="Chunks recordings into a secret gist and resolves stored references for playback",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Report missing configuration as soon as the service starts.
    """
    logger.info("Upload service starting up...")
    try:
        config.get_gist_token()
    except ConfigurationError as e:
        logger.error(f"{e} Uploads will be rejected until it is set.")


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Configuration error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "CONFIGURATION_ERROR"}
    )


@app.exception_handler(NoPartsProvidedError)
async def no_parts_handler(request: Request, exc: NoPartsProvidedError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"No parts provided: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "code": "NO_FILES_PROVIDED"}
    )


@app.exception_handler(InvalidPartError)
async def invalid_part_handler(request: Request, exc: InvalidPartError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid part: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "code": "INVALID_PART"}
    )


@app.exception_handler(ChunkingError)
async def chunking_error_handler(request: Request, exc: ChunkingError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Chunking error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "code": "CHUNKING_FAILED"}
    )


@app.exception_handler(UploadError)
async def upload_error_handler(request: Request, exc: UploadError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Upload error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "detail": str(exc),
            "code": "UPLOAD_FAILED",
            "stage": exc.stage,
            "chunk_index": exc.chunk_index,
            "total_chunks": exc.total_chunks,
            "container_url": exc.container_url,
        }
    )


@app.exception_handler(MediaUploadException)
async def media_upload_exception_handler(request: Request, exc: MediaUploadException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Upload pipeline exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "INTERNAL_ERROR"}
    )


app.include_router(upload_router)
app.include_router(playback_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "Gist Media Uploader API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "uploader"}


@app.get("/ready")
async def ready_check():
    """
    Readiness check endpoint.
    Verifies the gist credential is configured.
    """
    try:
        config.get_gist_token()
        credential_status = "ok"
    except ConfigurationError as e:
        credential_status = f"error: {e}"

    ready = credential_status == "ok"
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={
            "ready": ready,
            "credential": credential_status,
        }
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "uploader.main:app",
        host=config.UPLOADER_HOST,
        port=config.UPLOADER_PORT,
    )


if __name__ == "__main__":
    main()
