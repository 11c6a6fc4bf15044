from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from selfcare_guide import config
from selfcare_guide.config import logger
from selfcare_guide.core.errors import GatewayError
from selfcare_guide.core.gemini import GENERIC_ERROR_MESSAGE
from selfcare_guide.core.security import apply_security_headers
from selfcare_guide.models import HealthResponse

from .routers import router

SERVICE_NAME = "self-care-guide-api"
SERVICE_VERSION = "1.0.0"

# Initialize FastAPI application
app = FastAPI(
    title="Self-Care Guide API",
    description="Bilingual wellness analysis and herbal compendium gateway",
    version=SERVICE_VERSION,
)

app.include_router(router)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    """Answer CORS preflight directly and stamp security headers on everything."""
    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                "Unhandled error",
                extra={"path": request.url.path},
                exc_info=True,
            )
            response = JSONResponse(
                {"error": GENERIC_ERROR_MESSAGE}, status_code=500
            )

    return apply_security_headers(
        response, request.headers.get("origin"), config.ALLOWED_ORIGINS
    )


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    logger.info(
        "Request failed",
        extra={
            "path": request.url.path,
            "status_code": exc.status_code,
            "code": exc.code,
        },
    )
    return JSONResponse(
        exc.to_body(include_details=not config.IS_PRODUCTION),
        status_code=exc.status_code,
        headers=exc.headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
    return JSONResponse(
        {"error": message},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Simple health check endpoint."""

    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
    )


logger.info("Self-Care Guide API initialized successfully")
