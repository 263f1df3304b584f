"""Orchestrates WebRTC sessions, participants and phone calls."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from bridge.errors import (
    MissingCallIdError,
    OutboundNumberNotConfiguredError,
    UnknownCallError,
    VendorApiError,
)
from bridge.state import CallRegistry, ParticipantRecord, SessionCache
from integrations.bxml import DEFAULT_SIP_URI, bxml_response, speak_sentence_verb, transfer_bxml, transfer_verb
from integrations.voice_client import CreateCallRequest

if TYPE_CHECKING:  # pragma: no cover
    from config.settings import Settings

LOGGER = logging.getLogger(__name__)

SESSION_TAG = "hello-world"
BROWSER_TAG = "hello-world-browser"
PHONE_TAG = "hello-world-phone"
ANSWERED_PROMPT = "Thank you. Connecting you to your conference now."


class WebRtcApi(Protocol):
    async def create_session(self, tag: str) -> str: ...

    async def get_session(self, session_id: str) -> str: ...

    async def create_participant(self, tag: str) -> ParticipantRecord: ...

    async def add_participant_to_session(self, session_id: str, participant_id: str) -> None: ...

    async def delete_participant(self, participant_id: str) -> None: ...


class VoiceApi(Protocol):
    async def create_call(self, request: CreateCallRequest) -> str: ...


class CallBridge:
    """Holds the bridge state and runs every request's vendor call sequence.

    One instance lives on `app.state` for the process lifetime; handlers get
    it through a dependency so tests can build isolated instances.
    """

    def __init__(
        self,
        webrtc: WebRtcApi,
        voice: VoiceApi,
        *,
        voice_application_number: str | None,
        outbound_number: str | None,
        voice_application_id: str | None,
        callback_base_url: str | None,
        sip_uri: str = DEFAULT_SIP_URI,
        registry: CallRegistry | None = None,
        session: SessionCache | None = None,
    ) -> None:
        self.webrtc = webrtc
        self.voice = voice
        self.voice_application_number = voice_application_number
        self.outbound_number = outbound_number
        self.voice_application_id = voice_application_id
        self.callback_base_url = (callback_base_url or "").rstrip("/")
        self.sip_uri = sip_uri
        self.registry = registry or CallRegistry()
        self.session = session or SessionCache()

    @classmethod
    def from_settings(cls, settings: Settings, webrtc: WebRtcApi, voice: VoiceApi) -> CallBridge:
        return cls(
            webrtc,
            voice,
            voice_application_number=settings.bw_number,
            outbound_number=settings.user_number,
            voice_application_id=settings.bw_voice_application_id,
            callback_base_url=settings.base_callback_url,
            sip_uri=settings.webrtc_sip_uri,
        )

    @property
    def session_id(self) -> str | None:
        return self.session.session_id

    async def get_session_id(self) -> str:
        """Return the cached session id if the platform still knows it, else a new one."""

        async with self.session.lock:
            cached = self.session.session_id
            if cached:
                try:
                    existing = await self.webrtc.get_session(cached)
                except VendorApiError as exc:
                    if exc.not_found:
                        LOGGER.info("session %s is invalid, creating a new session", cached)
                    else:
                        LOGGER.warning(
                            "session %s lookup failed (%s), creating a new session", cached, exc.detail
                        )
                else:
                    LOGGER.info("using session %s", existing)
                    return existing

            session_id = await self.webrtc.create_session(SESSION_TAG)
            self.session.session_id = session_id
            LOGGER.info("created new session %s", session_id)
            return session_id

    async def create_participant(self, tag: str) -> ParticipantRecord:
        """Create an audio-only participant and add it to the current session.

        Nothing is rolled back if adding to the session fails; the participant
        stays on the platform until it expires.
        """

        participant = await self.webrtc.create_participant(tag)
        session_id = await self.get_session_id()
        await self.webrtc.add_participant_to_session(session_id, participant.id)
        return participant

    async def delete_participant(self, participant_id: str) -> None:
        LOGGER.info("deleting participant %s", participant_id)
        await self.webrtc.delete_participant(participant_id)

    async def connection_info(self) -> dict[str, Any]:
        participant = await self.create_participant(BROWSER_TAG)
        return {
            "token": participant.token,
            "voiceApplicationPhoneNumber": self.voice_application_number,
            "outboundPhoneNumber": self.outbound_number,
        }

    async def call_phone(self) -> str | None:
        """Dial the configured outbound number; return the call id, or None if the call was not created."""

        if not self.outbound_number:
            LOGGER.info("no outbound phone number has been set")
            raise OutboundNumberNotConfiguredError()

        participant = await self.create_participant(PHONE_TAG)
        request = CreateCallRequest(
            from_number=self.voice_application_number or "",
            to_number=self.outbound_number,
            answer_url=f"{self.callback_base_url}/callAnswered",
            disconnect_url=f"{self.callback_base_url}/callStatus",
            application_id=self.voice_application_id or "",
        )
        try:
            call_id = await self.voice.create_call(request)
        except VendorApiError as exc:
            LOGGER.error("error calling %s: %s", self.outbound_number, exc.detail)
            return None

        await self.registry.register(call_id, participant)
        LOGGER.info("initiated call %s to %s...", call_id, self.outbound_number)
        return call_id

    async def handle_incoming_call(self, call_id: str | None, from_number: str | None = None) -> str:
        if not call_id:
            LOGGER.info("incoming call from %s has no call id", from_number)
            raise MissingCallIdError()
        LOGGER.info("received incoming call %s from %s", call_id, from_number)
        participant = await self.create_participant(PHONE_TAG)
        replaced = await self.registry.register(call_id, participant)
        if replaced is not None:
            LOGGER.warning(
                "call %s was already registered; participant %s is no longer tracked", call_id, replaced.id
            )

        bxml = transfer_bxml(participant.token, call_id, self.sip_uri)
        LOGGER.info(
            "transferring call %s to session %s as participant %s", call_id, self.session_id, participant.id
        )
        return bxml

    async def handle_call_answered(self, call_id: str | None, to_number: str | None = None) -> str:
        if not call_id:
            LOGGER.info("answered callback to %s has no call id", to_number)
            raise MissingCallIdError()
        LOGGER.info("received answered callback for call %s to %s", call_id, to_number)
        participant = await self.registry.get(call_id)
        if participant is None:
            LOGGER.info("no participant found for %s!", call_id)
            raise UnknownCallError(f"No participant found for call {call_id}")

        bxml = bxml_response(
            speak_sentence_verb(ANSWERED_PROMPT),
            transfer_verb(participant.token, call_id, self.sip_uri),
        )
        LOGGER.info(
            "transferring call %s to session %s as participant %s", call_id, self.session_id, participant.id
        )
        return bxml

    async def handle_call_status(self, event: dict[str, Any]) -> None:
        """Clean up after a disconnect; every other status event is only logged."""

        if event.get("eventType") != "disconnect":
            LOGGER.info("received unexpected status update %s", event)
            return

        call_id = event.get("callId")
        LOGGER.info("received disconnect event for call %s", call_id)
        participant = await self.registry.pop(call_id) if call_id else None
        if participant is None:
            LOGGER.info("no participant associated with event %s", event)
            return

        try:
            await self.delete_participant(participant.id)
        except VendorApiError as exc:
            LOGGER.error("failed to delete participant %s: %s", participant.id, exc.detail)
