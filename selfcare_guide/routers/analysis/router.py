"""FastAPI router for the personalized wellness analysis endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from selfcare_guide.config import logger
from selfcare_guide.core.gemini import GeminiGateway, classify_upstream_error
from selfcare_guide.core.rate_limit import RateLimiter
from selfcare_guide.core.validation import validate_analysis_request
from selfcare_guide.models import ErrorResponse
from selfcare_guide.services.guidance_service import run_analysis

from ..dependencies import (
    enforce_rate_limit,
    get_analysis_limiter,
    get_api_key,
    get_gateway,
    require_api_key,
)
from ..utils import get_client_ip, read_json_body

router = APIRouter(prefix="/api", tags=["Analysis"])


@router.post(
    "/analysis",
    responses={
        200: {"description": "Professional or general analysis result"},
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def create_analysis(
    request: Request,
    gateway: GeminiGateway = Depends(get_gateway),
    limiter: RateLimiter = Depends(get_analysis_limiter),
    api_key: Optional[str] = Depends(get_api_key),
) -> JSONResponse:
    """Generate a professional or general wellness analysis for a profile."""

    client_ip = get_client_ip(request)
    decision = enforce_rate_limit(limiter, client_ip)

    body = await read_json_body(request)
    payload = validate_analysis_request(body)
    require_api_key(api_key)

    logger.info(
        "Analysis request accepted",
        extra={"client_ip": client_ip, "mode": payload.mode},
    )

    try:
        result = await run_analysis(gateway, payload)
    except Exception as exc:
        logger.error("Analysis API error", exc_info=True)
        raise classify_upstream_error(exc) from exc

    return JSONResponse(result, headers=decision.headers())
