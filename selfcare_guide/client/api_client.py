"""
Async client for the analysis and compendium endpoints.

``api_call`` is the single retry boundary: each endpoint helper awaits it and
lets failures propagate as ``APIError`` or a network exception.
"""

import asyncio
import functools
import os
import random
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from pydantic import TypeAdapter
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)

from selfcare_guide.config import logger
from selfcare_guide.core.validation import ImageInput
from selfcare_guide.models import AnalysisResult, CompendiumResult

from .error_handler import APIError, get_retry_delay, log_error, should_retry

API_BASE_URL = os.getenv("SELFCARE_API_BASE_URL", "http://localhost:8000/api")
RETRY_COUNT = 3
TIMEOUT_SECONDS = 30.0

# Listener events
ATTEMPT_STARTED = "attempt_started"
RETRY_SCHEDULED = "retry_scheduled"

RetryListener = Callable[[str, int, Optional[BaseException]], None]

_analysis_adapter = TypeAdapter(AnalysisResult)


class SelfCareApiClient:
    """
    POSTs JSON to the gateway, retrying 429/5xx and network failures with
    exponential backoff plus jitter.

    ``sleep`` and ``rng`` are injectable so tests can run without real delays.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        *,
        max_retries: int = RETRY_COUNT,
        timeout: float = TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.base_url = base_url
        self.max_retries = max_retries
        self.timeout = timeout
        self._transport = transport
        self._sleep = sleep or asyncio.sleep
        self._rng = rng
        self._listeners: List[RetryListener] = []

    def add_retry_listener(self, listener: RetryListener) -> None:
        self._listeners.append(listener)

    def remove_retry_listener(self, listener: RetryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(
        self,
        event: str,
        attempt: int,
        error: Optional[BaseException] = None,
        listener: Optional[RetryListener] = None,
    ) -> None:
        listeners = list(self._listeners)
        if listener is not None:
            listeners.append(listener)
        for notify in listeners:
            notify(event, attempt, error)

    def _wait(self, retry_state: RetryCallState) -> float:
        # attempt_number counts attempts made; backoff is indexed from 0
        attempt = retry_state.attempt_number - 1
        return get_retry_delay(attempt, rng=self._rng) / 1000

    def _before_attempt(
        self,
        retry_state: RetryCallState,
        listener: Optional[RetryListener] = None,
    ) -> None:
        self._notify(ATTEMPT_STARTED, retry_state.attempt_number - 1, None, listener)

    def _before_sleep(
        self,
        retry_state: RetryCallState,
        listener: Optional[RetryListener] = None,
    ) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"Retrying request after attempt {retry_state.attempt_number} "
            f"in {delay:.3f}s"
        )
        self._notify(RETRY_SCHEDULED, retry_state.attempt_number - 1, error, listener)

    async def api_call(
        self,
        endpoint: str,
        payload: Dict[str, Any],
        max_retries: Optional[int] = None,
        listener: Optional[RetryListener] = None,
    ) -> Any:
        """
        POST ``payload`` to ``endpoint`` and return the decoded JSON body.

        Makes at most ``max_retries + 1`` attempts. Non-retryable failures
        and the failure of the final attempt are re-raised unchanged.
        ``listener`` receives the events of this call only, after any
        listeners registered on the client.
        """
        retries = self.max_retries if max_retries is None else max_retries

        retrying = AsyncRetrying(
            stop=stop_after_attempt(retries + 1),
            wait=self._wait,
            retry=retry_if_exception(should_retry),
            sleep=self._sleep,
            before=functools.partial(self._before_attempt, listener=listener),
            before_sleep=functools.partial(self._before_sleep, listener=listener),
            reraise=True,
        )

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            async for attempt in retrying:
                with attempt:
                    try:
                        return await self._post(client, endpoint, payload)
                    except Exception as exc:
                        log_error(
                            f"api_call:{endpoint}:attempt"
                            f"{attempt.retry_state.attempt_number}",
                            exc,
                        )
                        raise

    async def _post(
        self, client: httpx.AsyncClient, endpoint: str, payload: Dict[str, Any]
    ) -> Any:
        try:
            response = await client.post(
                endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as exc:
            raise TimeoutError(f"Network timeout calling {endpoint}: {exc}") from exc
        except httpx.TransportError as exc:
            raise ConnectionError(f"Network error calling {endpoint}: {exc}") from exc

        if not response.is_success:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"error": "Unknown error"}

            message = None
            if isinstance(error_data, dict):
                message = error_data.get("error")
            raise APIError(
                response.status_code,
                message
                or f"HTTP {response.status_code}: {response.reason_phrase}",
                error_data,
            )

        return response.json()

    async def get_compendium_info(
        self,
        query: str,
        language: str,
        listener: Optional[RetryListener] = None,
    ) -> CompendiumResult:
        try:
            result = await self.api_call(
                "/compendium",
                {"query": query.strip(), "language": language},
                listener=listener,
            )
            return CompendiumResult.model_validate(result)
        except Exception as exc:
            log_error("get_compendium_info", exc)
            raise

    async def analyze_user_data(
        self,
        mode: str,
        profile: Dict[str, Any],
        language: str,
        face_image: Optional[ImageInput] = None,
        tongue_image: Optional[ImageInput] = None,
        listener: Optional[RetryListener] = None,
    ) -> AnalysisResult:
        payload: Dict[str, Any] = {
            "mode": mode,
            "profile": profile,
            "language": language,
        }
        if face_image is not None:
            payload["faceImage"] = face_image.to_payload()
        if tongue_image is not None:
            payload["tongueImage"] = tongue_image.to_payload()

        try:
            result = await self.api_call("/analysis", payload, listener=listener)
            return _analysis_adapter.validate_python(result)
        except Exception as exc:
            log_error("analyze_user_data", exc)
            raise
