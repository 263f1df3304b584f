"""Client for creating calls with the Bandwidth Voice API."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from bridge.errors import VendorApiError
from config.settings import Settings
from integrations.bandwidth_http import BandwidthHttpClient


@dataclass(frozen=True)
class CreateCallRequest:
    from_number: str
    to_number: str
    answer_url: str
    disconnect_url: str
    application_id: str

    def to_payload(self) -> dict[str, str]:
        return {
            "from": self.from_number,
            "to": self.to_number,
            "answerUrl": self.answer_url,
            "disconnectUrl": self.disconnect_url,
            "applicationId": self.application_id,
        }


class VoiceClient:
    def __init__(self, http: BandwidthHttpClient, account_id: str) -> None:
        self._http = http
        self._prefix = f"/accounts/{account_id}"

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> VoiceClient:
        http = BandwidthHttpClient(
            settings.voice_api_url,
            username=settings.bw_username or "",
            password=settings.bw_password or "",
            timeout=settings.vendor_http_timeout,
            retry_attempts=settings.vendor_retry_attempts,
            retry_max_wait=settings.vendor_retry_max_wait,
            transport=transport,
        )
        return cls(http, settings.bw_account_id or "")

    async def create_call(self, request: CreateCallRequest) -> str:
        """Originate a call and return its call id."""

        data = await self._http.request("POST", f"{self._prefix}/calls", json=request.to_payload())
        call_id = (data or {}).get("callId")
        if not call_id:
            raise VendorApiError("No call ID in create call response")
        return call_id
