import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .custom import CrawlError, StoreError

logger = logging.getLogger(__name__)


async def crawl_error_handler(_request: Request, exc: CrawlError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Crawl error: %s (status=%s)", exc.message, exc.status_code)
    else:
        logger.warning("Crawl rejected: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def store_error_handler(_request: Request, exc: StoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Store error: %s (status=%s)", exc.message, exc.status_code)
    else:
        logger.info("Store rejected: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request body"
    logger.info("Request validation failed: %s", message)
    return JSONResponse(status_code=400, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": f"Internal server error: {str(exc) or type(exc).__name__}"},
    )
