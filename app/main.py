"""FastAPI application entry point."""

import traceback

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api import router as api_router
from app.core.config import get_settings
from app.core.errors import InvalidInputError, NotFoundError
from app.core.logging import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="HRFlow Engine",
    description="HR automation service: policy chatbot and invisible onboarding",
    version="0.1.0",
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors (400), not 422."""
    errors = exc.errors()
    missing = [
        str(err["loc"][-1]) for err in errors if err.get("type") == "missing" and err.get("loc")
    ]
    content = {"error": "Invalid request", "details": jsonable_encoder(errors)}
    if missing:
        content["missing"] = missing
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(status_code=400, content=exc.to_body())


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    content = {"error": str(exc) or exc.__class__.__name__}
    if not get_settings().is_production:
        content["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=500, content=content)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


app.include_router(api_router)
