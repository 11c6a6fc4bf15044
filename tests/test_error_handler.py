"""
Tests for retry classification, backoff and localized error formatting.
"""
import httpx
import pytest

from selfcare_guide.client.error_handler import (
    APIError,
    format_error_message,
    get_error_details,
    get_retry_delay,
    should_retry,
)
from selfcare_guide.client.i18n import ERROR_TRANSLATIONS

EN = ERROR_TRANSLATIONS["en"]
JA = ERROR_TRANSLATIONS["ja"]


def api_error_text(message, translations=EN):
    return translations["apiError"].replace("{message}", message)


class TestShouldRetry:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504, 599])
    def test_retryable_statuses(self, status):
        assert should_retry(APIError(status, "x"))

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_client_errors_are_permanent(self, status):
        assert not should_retry(APIError(status, "x"))

    @pytest.mark.parametrize(
        "error",
        [
            ConnectionError("refused"),
            TimeoutError(),
            httpx.ConnectError("refused"),
            Exception("Network request failed"),
            Exception("ECONNREFUSED 127.0.0.1:8000"),
            Exception("TypeError: fetch failed"),
            Exception("Connection reset by peer"),
            Exception("socket Timeout"),
        ],
    )
    def test_network_failures_are_retryable(self, error):
        assert should_retry(error)

    @pytest.mark.parametrize(
        "error", [ValueError("bad data"), KeyError("x"), "network", None, 500]
    )
    def test_other_values_are_not_retryable(self, error):
        assert not should_retry(error)


class TestGetRetryDelay:
    @pytest.mark.parametrize(
        "attempt, expected", [(0, 1000), (1, 2000), (2, 4000), (3, 8000)]
    )
    def test_bounds(self, attempt, expected):
        low = get_retry_delay(attempt, rng=lambda: 0.0)
        high = get_retry_delay(attempt, rng=lambda: 0.999999)

        assert low == expected // 2
        assert expected // 2 <= high < expected

    def test_capped_at_max_delay(self):
        assert get_retry_delay(10, rng=lambda: 0.999999) < 30000
        assert get_retry_delay(10, rng=lambda: 0.0) == 15000

    def test_custom_base_and_cap(self):
        assert get_retry_delay(3, base_delay=100, max_delay=500, rng=lambda: 0.0) == 250

    def test_default_jitter_stays_in_range(self):
        for _ in range(50):
            assert 500 <= get_retry_delay(0) < 1000


class TestFormatErrorMessage:
    @pytest.mark.parametrize(
        "status, key",
        [
            (400, "badRequest"),
            (401, "unauthorized"),
            (403, "forbidden"),
            (404, "notFound"),
            (429, "tooManyRequests"),
            (500, "serviceUnavailable"),
            (502, "serviceUnavailable"),
            (503, "serviceUnavailable"),
            (504, "serviceUnavailable"),
        ],
    )
    @pytest.mark.parametrize("language", ["ja", "en"])
    def test_status_messages(self, status, key, language):
        translations = ERROR_TRANSLATIONS[language]
        message = format_error_message(APIError(status, "server text"), language)
        assert message == api_error_text(translations[key], translations)

    def test_other_status_uses_server_message(self):
        message = format_error_message(APIError(418, "I'm a teapot"), "en")
        assert message == api_error_text("I'm a teapot")

    def test_other_status_without_message(self):
        message = format_error_message(APIError(418, ""), "en")
        assert message == api_error_text(EN["genericError"])

    @pytest.mark.parametrize(
        "error",
        [
            ConnectionError("refused"),
            TimeoutError("Network timeout calling /analysis"),
            Exception("fetch failed"),
            Exception("Connection lost"),
        ],
    )
    def test_network_errors(self, error):
        assert format_error_message(error, "en") == EN["networkError"]
        assert format_error_message(error, "ja") == JA["networkError"]

    def test_embedded_api_error_json(self):
        error = Exception(
            'AI API Error: {"error": {"code": 400, "message": "Image too large"}}'
        )
        assert format_error_message(error, "en") == api_error_text("Image too large")

    def test_embedded_api_error_that_is_not_json(self):
        error = Exception("AI API Error: <html>")
        assert format_error_message(error, "en") == api_error_text("AI API Error: <html>")

    def test_plain_exception_message(self):
        assert format_error_message(ValueError("bad data"), "en") == api_error_text(
            "bad data"
        )

    def test_exception_without_message(self):
        assert format_error_message(RuntimeError(), "en") == api_error_text(
            "RuntimeError"
        )

    def test_dict_errors(self):
        assert format_error_message({"message": "m"}, "en") == api_error_text("m")
        assert format_error_message({"error": "e"}, "en") == api_error_text("e")

    def test_object_with_message_attribute(self):
        class Failure:
            message = "object failure"

        assert format_error_message(Failure(), "en") == api_error_text("object failure")

    @pytest.mark.parametrize("error", [None, "a string", 42, True])
    def test_primitives_are_unexpected(self, error):
        assert format_error_message(error, "en") == EN["unexpected"]
        assert format_error_message(error, "ja") == JA["unexpected"]

    def test_never_raises(self):
        class Exploding:
            def __str__(self):
                raise RuntimeError("cannot render")

        assert format_error_message(Exploding(), "en") == EN["unexpected"]

    def test_unknown_language_falls_back_to_english(self):
        assert format_error_message(None, "fr") == EN["unexpected"]

    def test_is_stable(self):
        error = APIError(503, "down")
        assert format_error_message(error, "ja") == format_error_message(error, "ja")


class TestApiErrorAndDetails:
    def test_fields_are_read_only(self):
        error = APIError(429, "slow down", {"error": "slow down"})

        assert error.status == 429
        assert error.message == "slow down"
        assert error.details == {"error": "slow down"}
        with pytest.raises(AttributeError):
            error.status = 500

    def test_details(self):
        assert get_error_details(APIError(500, "boom", {"a": 1})) == {
            "type": "APIError",
            "status": 500,
            "message": "boom",
            "details": {"a": 1},
        }
        assert get_error_details(KeyError("k")) == {"type": "KeyError", "message": "'k'"}
        assert get_error_details(3) == {"type": "Unknown", "value": "3"}
