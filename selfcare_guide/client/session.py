"""
Submission state for one analysis or compendium form.

States move ``idle -> submitting -> (retrying -> submitting)* -> succeeded``
or ``-> failed``. Only one submission is tracked at a time; ``reset``
abandons tracking of whatever is in flight.
"""

import functools
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from selfcare_guide.config import logger
from selfcare_guide.core.validation import ImageInput
from selfcare_guide.models import AnalysisResult, CompendiumResult

from .api_client import (
    ATTEMPT_STARTED,
    RETRY_SCHEDULED,
    RetryListener,
    SelfCareApiClient,
)
from .error_handler import format_error_message
from .i18n import compendium_translations

T = TypeVar("T")


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubmissionTracker:
    """Holds the result, localized error and info message of the last submission."""

    def __init__(self, client: SelfCareApiClient, language: str = "ja") -> None:
        self.client = client
        self.language = language
        self.state = SubmissionState.IDLE
        self.result: Optional[Any] = None
        self.error: Optional[str] = None
        self.info_message: Optional[str] = None
        self.attempts = 0
        self._generation = 0
        self._active: Optional[int] = None

    @property
    def is_loading(self) -> bool:
        return self.state in (SubmissionState.SUBMITTING, SubmissionState.RETRYING)

    def _on_client_event(
        self,
        generation: int,
        event: str,
        attempt: int,
        error: Optional[BaseException],
    ) -> None:
        if generation != self._active:
            return
        if event == ATTEMPT_STARTED:
            self.attempts = attempt + 1
            self.state = SubmissionState.SUBMITTING
        elif event == RETRY_SCHEDULED:
            self.state = SubmissionState.RETRYING

    async def _run(
        self, call: Callable[[RetryListener], Awaitable[T]]
    ) -> Optional[T]:
        if self.is_loading:
            logger.info("Submission ignored: a request is already in flight")
            return None

        self._generation += 1
        generation = self._generation
        self._active = generation
        self.state = SubmissionState.SUBMITTING
        self.result = None
        self.error = None
        self.info_message = None
        self.attempts = 0

        listener = functools.partial(self._on_client_event, generation)
        try:
            value = await call(listener)
        except Exception as exc:
            if generation == self._generation:
                self.error = format_error_message(exc, self.language)
                self.state = SubmissionState.FAILED
            return None
        finally:
            if self._active == generation:
                self._active = None

        if generation != self._generation:
            return None
        self.result = value
        self.state = SubmissionState.SUCCEEDED
        return value

    async def search_compendium(self, query: str) -> Optional[CompendiumResult]:
        if not query.strip():
            return None

        result = await self._run(
            lambda listener: self.client.get_compendium_info(
                query, self.language, listener=listener
            )
        )
        if result is not None and result.is_empty():
            self.info_message = compendium_translations(self.language)["noResults"]
        return result

    async def submit_analysis(
        self,
        mode: str,
        profile: Dict[str, Any],
        face_image: Optional[ImageInput] = None,
        tongue_image: Optional[ImageInput] = None,
    ) -> Optional[AnalysisResult]:
        return await self._run(
            lambda listener: self.client.analyze_user_data(
                mode,
                profile,
                self.language,
                face_image,
                tongue_image,
                listener=listener,
            )
        )

    def reset(self) -> None:
        """Return to idle and stop tracking any in-flight submission."""
        self._generation += 1
        self._active = None
        self.state = SubmissionState.IDLE
        self.result = None
        self.error = None
        self.info_message = None
        self.attempts = 0

    def clear_error(self) -> None:
        self.error = None
        if self.state == SubmissionState.FAILED:
            self.state = SubmissionState.IDLE
