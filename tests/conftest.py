from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

# Must be set before config.settings is first imported.
os.environ.setdefault("BW_ACCOUNT_ID", "9900000")
os.environ.setdefault("BW_USERNAME", "api-user")
os.environ.setdefault("BW_PASSWORD", "api-password")
os.environ.setdefault("BASE_CALLBACK_URL", "https://example.com")

from bridge.call_bridge import CallBridge  # noqa: E402
from bridge.errors import VendorApiError  # noqa: E402
from bridge.state import ParticipantRecord  # noqa: E402


class FakeWebRtc:
    """In-memory stand-in for the WebRTC API that records every request."""

    def __init__(self) -> None:
        self.live_sessions: set[str] = set()
        self.created_sessions: list[str] = []
        self.session_lookups: list[str] = []
        self.participants: dict[str, str] = {}
        self.added: list[tuple[str, str]] = []
        self.deleted: list[str] = []
        self.lookup_error: VendorApiError | None = None
        self.delete_error: VendorApiError | None = None

    async def create_session(self, tag: str) -> str:
        # Yield so concurrent callers can interleave here.
        await asyncio.sleep(0)
        session_id = f"session-{len(self.created_sessions) + 1}"
        self.created_sessions.append(session_id)
        self.live_sessions.add(session_id)
        return session_id

    async def get_session(self, session_id: str) -> str:
        self.session_lookups.append(session_id)
        if self.lookup_error is not None:
            raise self.lookup_error
        if session_id not in self.live_sessions:
            raise VendorApiError("session not found", vendor_status=404)
        return session_id

    async def create_participant(self, tag: str) -> ParticipantRecord:
        number = len(self.participants) + 1
        participant = ParticipantRecord(id=f"participant-{number}", token=f"token-{number}")
        self.participants[participant.id] = tag
        return participant

    async def add_participant_to_session(self, session_id: str, participant_id: str) -> None:
        self.added.append((session_id, participant_id))

    async def delete_participant(self, participant_id: str) -> None:
        self.deleted.append(participant_id)
        if self.delete_error is not None:
            raise self.delete_error


class FakeVoice:
    def __init__(self) -> None:
        self.requests = []
        self.error: VendorApiError | None = None

    async def create_call(self, request) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return f"c-0000-{len(self.requests)}"


@pytest.fixture()
def webrtc() -> FakeWebRtc:
    return FakeWebRtc()


@pytest.fixture()
def voice() -> FakeVoice:
    return FakeVoice()


@pytest.fixture()
def bridge(webrtc: FakeWebRtc, voice: FakeVoice) -> CallBridge:
    return CallBridge(
        webrtc,
        voice,
        voice_application_number="+19195550100",
        outbound_number="+19195550199",
        voice_application_id="voice-app-1",
        callback_base_url="https://example.com/",
    )


@pytest.fixture(scope="session")
def app():
    import importlib

    main = importlib.import_module("main")
    return main.app


@pytest.fixture()
def client(app, bridge):
    # Override the bridge dependency so tests never reach Bandwidth.
    import api.dependencies as deps

    app.dependency_overrides[deps.get_bridge] = lambda: bridge

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
