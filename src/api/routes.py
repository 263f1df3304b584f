"""Browser API and Voice API webhooks."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from api.dependencies import get_bridge
from api.schemas import ConnectionInfoResponse, VoiceCallback
from bridge.call_bridge import CallBridge

router = APIRouter()


def _bxml_response(xml: str) -> Response:
    # The Voice API expects application/xml
    return Response(content=xml, media_type="application/xml")


@router.get("/connectionInfo", response_model=ConnectionInfoResponse)
async def connection_info(bridge: CallBridge = Depends(get_bridge)) -> ConnectionInfoResponse:
    """The browser hits this endpoint to get a participant token."""

    return ConnectionInfoResponse(**await bridge.connection_info())


@router.get("/callPhone", status_code=204)
async def call_phone(bridge: CallBridge = Depends(get_bridge)) -> Response:
    """The browser hits this endpoint to dial the outbound phone number."""

    await bridge.call_phone()
    return Response(status_code=204)


@router.post("/incomingCall")
async def incoming_call(payload: VoiceCallback, bridge: CallBridge = Depends(get_bridge)) -> Response:
    bxml = await bridge.handle_incoming_call(payload.call_id, payload.from_number)
    return _bxml_response(bxml)


@router.post("/callAnswered")
async def call_answered(payload: VoiceCallback, bridge: CallBridge = Depends(get_bridge)) -> Response:
    bxml = await bridge.handle_call_answered(payload.call_id, payload.to_number)
    return _bxml_response(bxml)


@router.post("/callStatus")
async def call_status(
    request: Request,
    background_tasks: BackgroundTasks,
    bridge: CallBridge = Depends(get_bridge),
) -> Response:
    try:
        body = await request.json()
    except ValueError:
        body = None
    event = body if isinstance(body, dict) else {}

    # Acknowledge first; cleanup runs after the response is sent.
    background_tasks.add_task(bridge.handle_call_status, event)
    return Response(status_code=200)
