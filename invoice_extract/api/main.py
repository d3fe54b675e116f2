from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..core.logging import setup_logging
from ..core.config import settings
from ..core.errors import PipelineError
from .routers import health, invoice

logger = setup_logging()
app = FastAPI(title="Invoice Extraction Service")


# Every classified pipeline failure becomes {"error": ...} with its status code.
# Implementation detail is only included outside production.
@app.exception_handler(PipelineError)
async def pipeline_exception_handler(request: Request, exc: PipelineError):
    logger.error(
        f"{exc.kind}: {exc.message}",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_detail=not settings.is_production),
    )


# Anything unclassified still answers with the same {"error": ...} body.
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error("Unhandled error: {}", exc, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Error processing invoice"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


# CORS_ORIGINS / CORS_METHODS can be set in .env as comma-separated lists
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]
allowed_methods = [method.strip() for method in settings.cors_methods.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_methods=allowed_methods,
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(invoice.router)
