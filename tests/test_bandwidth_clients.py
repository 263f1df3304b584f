from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from bridge.errors import VendorApiError
from bridge.state import ParticipantRecord
from integrations.bandwidth_http import BandwidthHttpClient
from integrations.voice_client import CreateCallRequest, VoiceClient
from integrations.webrtc_client import WebRtcClient


class RecordingTransport:
    """Collects requests and replays queued responses."""

    def __init__(self, *responses) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def _http(recorder: RecordingTransport, base_url: str = "https://webrtc.test/v1") -> BandwidthHttpClient:
    return BandwidthHttpClient(
        base_url,
        username="user",
        password="pass",
        retry_attempts=3,
        retry_max_wait=0,
        transport=recorder.transport(),
    )


def test_create_participant_sends_audio_only_permissions():
    recorder = RecordingTransport(
        httpx.Response(200, json={"participant": {"id": "p-1", "tag": "t"}, "token": "jwt-1"}),
    )
    client = WebRtcClient(_http(recorder), "acct")

    participant = asyncio.run(client.create_participant("hello-world-browser"))

    assert participant == ParticipantRecord(id="p-1", token="jwt-1")
    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/v1/accounts/acct/participants"
    assert request.headers["authorization"].startswith("Basic ")
    assert json.loads(request.content) == {
        "tag": "hello-world-browser",
        "publishPermissions": ["AUDIO"],
        "deviceApiVersion": "V3",
    }


def test_create_participant_without_token_is_vendor_error():
    recorder = RecordingTransport(httpx.Response(200, json={"participant": {"id": "p-1"}}))
    client = WebRtcClient(_http(recorder), "acct")

    with pytest.raises(VendorApiError, match="No token"):
        asyncio.run(client.create_participant("tag"))


def test_create_session_requires_id():
    recorder = RecordingTransport(httpx.Response(200, json={"tag": "hello-world"}))
    client = WebRtcClient(_http(recorder), "acct")

    with pytest.raises(VendorApiError, match="No session ID"):
        asyncio.run(client.create_session("hello-world"))


def test_get_session_not_found_fails_fast():
    recorder = RecordingTransport(httpx.Response(404, json={"error": "not found"}))
    client = WebRtcClient(_http(recorder), "acct")

    with pytest.raises(VendorApiError) as excinfo:
        asyncio.run(client.get_session("s-1"))

    assert excinfo.value.not_found
    assert not excinfo.value.transient
    assert len(recorder.requests) == 1


def test_get_session_retries_transient_failures():
    recorder = RecordingTransport(
        httpx.Response(503),
        httpx.ConnectError("connection refused"),
        httpx.Response(200, json={"id": "s-1", "tag": "hello-world"}),
    )
    client = WebRtcClient(_http(recorder), "acct")

    assert asyncio.run(client.get_session("s-1")) == "s-1"
    assert len(recorder.requests) == 3


def test_rate_limited_get_is_retried():
    recorder = RecordingTransport(
        httpx.Response(429, json={"error": "too many requests"}),
        httpx.Response(200, json={"id": "s-1"}),
    )
    client = WebRtcClient(_http(recorder), "acct")

    assert asyncio.run(client.get_session("s-1")) == "s-1"
    assert len(recorder.requests) == 2


def test_unauthorized_get_fails_fast():
    recorder = RecordingTransport(httpx.Response(401), httpx.Response(200, json={"id": "s-1"}))
    client = WebRtcClient(_http(recorder), "acct")

    with pytest.raises(VendorApiError) as excinfo:
        asyncio.run(client.get_session("s-1"))

    assert excinfo.value.vendor_status == 401
    assert not excinfo.value.transient
    assert not excinfo.value.not_found
    assert len(recorder.requests) == 1


def test_transient_failures_exhaust_retries():
    recorder = RecordingTransport(httpx.Response(500), httpx.Response(502), httpx.Response(503))
    client = WebRtcClient(_http(recorder), "acct")

    with pytest.raises(VendorApiError) as excinfo:
        asyncio.run(client.delete_participant("p-1"))

    assert excinfo.value.transient
    assert excinfo.value.vendor_status == 503
    assert len(recorder.requests) == 3


def test_non_idempotent_request_is_not_retried():
    recorder = RecordingTransport(httpx.Response(503), httpx.Response(200, json={"id": "s-2"}))
    client = WebRtcClient(_http(recorder), "acct")

    with pytest.raises(VendorApiError):
        asyncio.run(client.create_session("hello-world"))
    assert len(recorder.requests) == 1


def test_add_participant_to_session_puts_subscription():
    recorder = RecordingTransport(httpx.Response(204))
    client = WebRtcClient(_http(recorder), "acct")

    asyncio.run(client.add_participant_to_session("s-1", "p-1"))

    request = recorder.requests[0]
    assert request.method == "PUT"
    assert request.url.path == "/v1/accounts/acct/sessions/s-1/participants/p-1"
    assert json.loads(request.content) == {"sessionId": "s-1"}


def test_create_call_posts_callback_urls():
    recorder = RecordingTransport(httpx.Response(201, json={"callId": "c-123", "state": "initiated"}))
    client = VoiceClient(_http(recorder, "https://voice.test/api/v2"), "acct")

    call_id = asyncio.run(
        client.create_call(
            CreateCallRequest(
                from_number="+19195550100",
                to_number="+19195550199",
                answer_url="https://example.com/callAnswered",
                disconnect_url="https://example.com/callStatus",
                application_id="app-1",
            )
        )
    )

    assert call_id == "c-123"
    request = recorder.requests[0]
    assert request.url.path == "/api/v2/accounts/acct/calls"
    assert json.loads(request.content) == {
        "from": "+19195550100",
        "to": "+19195550199",
        "answerUrl": "https://example.com/callAnswered",
        "disconnectUrl": "https://example.com/callStatus",
        "applicationId": "app-1",
    }


def test_clients_from_settings_use_configured_urls():
    from config.settings import Settings

    settings = Settings(
        bw_account_id="acct",
        bw_username="user",
        bw_password="pass",
        webrtc_api_url="https://webrtc.test/v1/",
        vendor_retry_max_wait=0,
    )
    recorder = RecordingTransport(httpx.Response(200, json={"id": "s-9"}))
    client = WebRtcClient.from_settings(settings, transport=recorder.transport())

    assert asyncio.run(client.create_session("hello-world")) == "s-9"
    assert str(recorder.requests[0].url) == "https://webrtc.test/v1/accounts/acct/sessions"
