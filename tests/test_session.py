"""
Tests for the submission state tracker.
"""
import asyncio

import httpx

from selfcare_guide.client import SelfCareApiClient, SubmissionState, SubmissionTracker
from selfcare_guide.client.i18n import COMPENDIUM_TRANSLATIONS, ERROR_TRANSLATIONS

from conftest import COMPENDIUM_RESULT, GENERAL_RESULT


def make_tracker(handler, language="en", **kwargs):
    async def no_sleep(seconds):
        return None

    client = SelfCareApiClient(
        "http://testserver/api",
        transport=httpx.MockTransport(handler),
        sleep=no_sleep,
        rng=lambda: 0.0,
        **kwargs,
    )
    return SubmissionTracker(client, language=language)


class TestSubmissionTracker:
    def test_starts_idle(self):
        tracker = make_tracker(lambda request: httpx.Response(200, json={}))
        assert tracker.state == SubmissionState.IDLE
        assert not tracker.is_loading

    def test_successful_compendium_search(self):
        tracker = make_tracker(lambda request: httpx.Response(200, json=COMPENDIUM_RESULT))

        result = asyncio.run(tracker.search_compendium("ginger"))

        assert tracker.state == SubmissionState.SUCCEEDED
        assert tracker.result is result
        assert tracker.error is None
        assert tracker.info_message is None
        assert tracker.attempts == 1

    def test_empty_compendium_sets_info_message(self):
        empty = {
            "integrativeViewpoint": "Nothing specific.",
            "kampoEntries": [],
            "westernHerbEntries": [],
            "supplementEntries": [],
        }
        tracker = make_tracker(lambda request: httpx.Response(200, json=empty), "ja")

        asyncio.run(tracker.search_compendium("xyz"))

        assert tracker.state == SubmissionState.SUCCEEDED
        assert tracker.info_message == COMPENDIUM_TRANSLATIONS["ja"]["noResults"]

    def test_blank_query_is_ignored(self):
        requests = []
        tracker = make_tracker(lambda request: requests.append(request))

        assert asyncio.run(tracker.search_compendium("   ")) is None
        assert tracker.state == SubmissionState.IDLE
        assert requests == []

    def test_retrying_state_is_observed(self):
        responses = [
            httpx.Response(503, json={"error": "busy"}),
            httpx.Response(200, json=GENERAL_RESULT),
        ]
        tracker = make_tracker(lambda request: responses.pop(0))
        states = []
        tracker.client.add_retry_listener(lambda *args: states.append(tracker.state))

        asyncio.run(tracker.submit_analysis("general", {}))

        assert SubmissionState.RETRYING in states
        assert tracker.state == SubmissionState.SUCCEEDED
        assert tracker.attempts == 2

    def test_failure_sets_localized_error(self):
        tracker = make_tracker(
            lambda request: httpx.Response(400, json={"error": "Mode must be"}),
            language="ja",
        )

        assert asyncio.run(tracker.submit_analysis("expert", {})) is None

        assert tracker.state == SubmissionState.FAILED
        assert tracker.result is None
        assert tracker.error == ERROR_TRANSLATIONS["ja"]["apiError"].replace(
            "{message}", ERROR_TRANSLATIONS["ja"]["badRequest"]
        )

    def test_network_failure_message(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        tracker = make_tracker(handler, max_retries=0)

        asyncio.run(tracker.search_compendium("ginger"))

        assert tracker.state == SubmissionState.FAILED
        assert tracker.error == ERROR_TRANSLATIONS["en"]["networkError"]

    def test_clear_error_returns_to_idle(self):
        tracker = make_tracker(
            lambda request: httpx.Response(400, json={"error": "bad"})
        )
        asyncio.run(tracker.search_compendium("ginger"))

        tracker.clear_error()

        assert tracker.error is None
        assert tracker.state == SubmissionState.IDLE

    def test_new_submission_clears_previous_error(self):
        responses = [
            httpx.Response(400, json={"error": "bad"}),
            httpx.Response(200, json=COMPENDIUM_RESULT),
        ]
        tracker = make_tracker(lambda request: responses.pop(0))

        asyncio.run(tracker.search_compendium("ginger"))
        assert tracker.state == SubmissionState.FAILED

        asyncio.run(tracker.search_compendium("ginger"))
        assert tracker.state == SubmissionState.SUCCEEDED
        assert tracker.error is None

    def test_second_submission_while_loading_is_ignored(self):
        async def scenario():
            release = asyncio.Event()
            calls = []

            async def handler(request):
                calls.append(request)
                await release.wait()
                return httpx.Response(200, json=COMPENDIUM_RESULT)

            tracker = make_tracker(handler)
            first = asyncio.create_task(tracker.search_compendium("ginger"))
            await asyncio.sleep(0.01)

            assert tracker.is_loading
            assert await tracker.search_compendium("valerian") is None

            release.set()
            await first
            return tracker, calls

        tracker, calls = asyncio.run(scenario())

        assert len(calls) == 1
        assert tracker.state == SubmissionState.SUCCEEDED

    def test_reset_abandons_in_flight_submission(self):
        async def scenario():
            release = asyncio.Event()

            async def handler(request):
                await release.wait()
                return httpx.Response(200, json=COMPENDIUM_RESULT)

            tracker = make_tracker(handler)
            pending = asyncio.create_task(tracker.search_compendium("ginger"))
            await asyncio.sleep(0.01)

            tracker.reset()
            release.set()
            await pending
            return tracker

        tracker = asyncio.run(scenario())

        assert tracker.state == SubmissionState.IDLE
        assert tracker.result is None
        assert tracker.attempts == 0

    def test_abandoned_retries_do_not_touch_next_submission(self):
        async def scenario():
            resume_first = asyncio.Event()
            release_second = asyncio.Event()
            first_responses = [
                httpx.Response(500, json={"error": "busy"}),
                httpx.Response(200, json=COMPENDIUM_RESULT),
            ]

            async def handler(request):
                if b"valerian" in request.content:
                    await release_second.wait()
                    return httpx.Response(200, json=COMPENDIUM_RESULT)
                return first_responses.pop(0)

            async def sleep(seconds):
                await resume_first.wait()

            client = SelfCareApiClient(
                "http://testserver/api",
                transport=httpx.MockTransport(handler),
                sleep=sleep,
                rng=lambda: 0.0,
            )
            tracker = SubmissionTracker(client, language="en")

            first = asyncio.create_task(tracker.search_compendium("ginger"))
            await asyncio.sleep(0.01)
            assert tracker.state == SubmissionState.RETRYING

            tracker.reset()
            second = asyncio.create_task(tracker.search_compendium("valerian"))
            await asyncio.sleep(0.01)
            assert (tracker.state, tracker.attempts) == (SubmissionState.SUBMITTING, 1)

            resume_first.set()
            assert await first is None
            during = (tracker.state, tracker.attempts, tracker.result)

            release_second.set()
            await second
            return tracker, during

        tracker, during = asyncio.run(scenario())

        assert during == (SubmissionState.SUBMITTING, 1, None)
        assert tracker.state == SubmissionState.SUCCEEDED
        assert tracker.attempts == 1
        assert tracker.result.westernHerbEntries[0].name == "Ginger"
