"""Client-side request flow for the Self-Care Guide gateway."""

from .api_client import SelfCareApiClient
from .error_handler import (
    APIError,
    format_error_message,
    get_retry_delay,
    should_retry,
)
from .session import SubmissionState, SubmissionTracker

__all__ = [
    "SelfCareApiClient",
    "APIError",
    "format_error_message",
    "get_retry_delay",
    "should_retry",
    "SubmissionState",
    "SubmissionTracker",
]
