"""API-facing Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ConnectionInfoResponse(BaseModel):
    token: str
    voiceApplicationPhoneNumber: str | None = None
    outboundPhoneNumber: str | None = None


class VoiceCallback(BaseModel):
    """Fields of a Voice API call callback read by /incomingCall and /callAnswered."""

    call_id: str | None = Field(default=None, alias="callId")
    from_number: str | None = Field(default=None, alias="from")
    to_number: str | None = Field(default=None, alias="to")
