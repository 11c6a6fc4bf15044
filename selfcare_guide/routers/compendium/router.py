"""FastAPI router for herb, Kampo formula and supplement lookups."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from selfcare_guide.config import logger
from selfcare_guide.core.gemini import GeminiGateway, classify_upstream_error
from selfcare_guide.core.rate_limit import RateLimiter
from selfcare_guide.core.validation import validate_compendium_request
from selfcare_guide.models import CompendiumResult, ErrorResponse
from selfcare_guide.services.guidance_service import run_compendium_lookup

from ..dependencies import (
    enforce_rate_limit,
    get_api_key,
    get_compendium_limiter,
    get_gateway,
    require_api_key,
)
from ..utils import get_client_ip, read_json_body

router = APIRouter(prefix="/api", tags=["Compendium"])


@router.post(
    "/compendium",
    responses={
        200: {"model": CompendiumResult},
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def lookup_compendium(
    request: Request,
    gateway: GeminiGateway = Depends(get_gateway),
    limiter: RateLimiter = Depends(get_compendium_limiter),
    api_key: Optional[str] = Depends(get_api_key),
) -> JSONResponse:
    """Look up reference entries for a substance or a symptom."""

    client_ip = get_client_ip(request)
    decision = enforce_rate_limit(limiter, client_ip)

    body = await read_json_body(request)
    payload = validate_compendium_request(body)
    require_api_key(api_key)

    try:
        result = await run_compendium_lookup(gateway, payload)
    except Exception as exc:
        logger.error(
            "Compendium API error",
            extra={"error_type": type(exc).__name__, "error": str(exc)},
        )
        raise classify_upstream_error(exc) from exc

    return JSONResponse(result, headers=decision.headers())
