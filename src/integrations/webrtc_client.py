"""Client for the Bandwidth WebRTC sessions and participants API."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from bridge.errors import VendorApiError
from bridge.state import ParticipantRecord
from config.settings import Settings
from integrations.bandwidth_http import BandwidthHttpClient

LOGGER = logging.getLogger(__name__)


class WebRtcClient:
    """Minimal wrapper around the five WebRTC endpoints the bridge needs."""

    def __init__(self, http: BandwidthHttpClient, account_id: str) -> None:
        self._http = http
        self._prefix = f"/accounts/{account_id}"

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> WebRtcClient:
        http = BandwidthHttpClient(
            settings.webrtc_api_url,
            username=settings.bw_username or "",
            password=settings.bw_password or "",
            timeout=settings.vendor_http_timeout,
            retry_attempts=settings.vendor_retry_attempts,
            retry_max_wait=settings.vendor_retry_max_wait,
            transport=transport,
        )
        return cls(http, settings.bw_account_id or "")

    async def create_session(self, tag: str) -> str:
        data = await self._http.request("POST", f"{self._prefix}/sessions", json={"tag": tag})
        session_id = (data or {}).get("id")
        if not session_id:
            raise VendorApiError("No session ID in create session response")
        return session_id

    async def get_session(self, session_id: str) -> str:
        data = await self._http.request("GET", f"{self._prefix}/sessions/{session_id}", idempotent=True)
        existing_id = (data or {}).get("id")
        if not existing_id:
            raise VendorApiError("No session ID in get session response")
        return existing_id

    async def create_participant(
        self,
        tag: str,
        *,
        publish_permissions: Sequence[str] = ("AUDIO",),
        device_api_version: str = "V3",
    ) -> ParticipantRecord:
        body = {
            "tag": tag,
            "publishPermissions": list(publish_permissions),
            "deviceApiVersion": device_api_version,
        }
        data = await self._http.request("POST", f"{self._prefix}/participants", json=body) or {}

        token = data.get("token")
        if not token:
            raise VendorApiError("No token in create participant response")
        participant_id = (data.get("participant") or {}).get("id")
        if not participant_id:
            raise VendorApiError("No participant ID in create participant response")

        LOGGER.info("Created new participant %s", participant_id)
        return ParticipantRecord(id=participant_id, token=token)

    async def add_participant_to_session(self, session_id: str, participant_id: str) -> None:
        await self._http.request(
            "PUT",
            f"{self._prefix}/sessions/{session_id}/participants/{participant_id}",
            json={"sessionId": session_id},
            idempotent=True,
        )

    async def delete_participant(self, participant_id: str) -> None:
        await self._http.request("DELETE", f"{self._prefix}/participants/{participant_id}", idempotent=True)
