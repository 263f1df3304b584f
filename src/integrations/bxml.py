"""Bandwidth call-control markup (BXML) builders."""

from __future__ import annotations

from xml.sax.saxutils import escape, quoteattr

DEFAULT_SIP_URI = "sip:sipx.webrtc.bandwidth.com:5060"
XML_HEADER = '<?xml version="1.0" encoding="UTF-8" ?>'


def _call_id_to_hex(call_id: str) -> str:
    # Voice call ids look like "c-<uuid>"; the SIP UUI header carries the bare hex.
    if call_id.startswith("c-"):
        call_id = call_id[2:]
    return call_id.replace("-", "")


def transfer_verb(device_token: str, call_id: str, sip_uri: str = DEFAULT_SIP_URI) -> str:
    """Return a <Transfer> verb that moves the call into a WebRTC session."""

    uui = f"{_call_id_to_hex(call_id)};encoding=hex,{device_token};encoding=jwt"
    return f"<Transfer><SipUri uui={quoteattr(uui)}>{escape(sip_uri)}</SipUri></Transfer>"


def speak_sentence_verb(text: str, *, voice: str = "julie") -> str:
    return f"<SpeakSentence voice={quoteattr(voice)}>{escape(text)}</SpeakSentence>"


def bxml_response(*verbs: str) -> str:
    return XML_HEADER + "<Response>" + "".join(verbs) + "</Response>"


def transfer_bxml(device_token: str, call_id: str, sip_uri: str = DEFAULT_SIP_URI) -> str:
    """Return a complete BXML document transferring the call into a WebRTC session."""

    return bxml_response(transfer_verb(device_token, call_id, sip_uri))
