"""Entry point for the WebRTC phone bridge service."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.frontend import router as frontend_router
from api.routes import router as api_router
from bridge.call_bridge import CallBridge
from bridge.errors import BridgeError, ConfigurationError
from config.settings import get_settings
from integrations.voice_client import VoiceClient
from integrations.webrtc_client import WebRtcClient

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    settings.require_credentials()
    app.state.bridge = CallBridge.from_settings(
        settings,
        WebRtcClient.from_settings(settings),
        VoiceClient.from_settings(settings),
    )
    LOGGER.info("WebRTC Hello World listening on port %s!", settings.port)
    yield


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="WebRTC Hello World",
    description="Bridges a browser WebRTC participant and phone calls into one session.",
    lifespan=lifespan,
)


@app.exception_handler(BridgeError)
async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    if exc.status_code >= 500:
        LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.include_router(api_router)
# Must come last: it answers every GET not matched above.
app.include_router(frontend_router)


if __name__ == "__main__":
    import uvicorn

    try:
        settings.require_credentials()
    except ConfigurationError as exc:
        LOGGER.error("ERROR! %s", exc.detail)
        sys.exit(1)
    uvicorn.run(app, host=settings.host, port=settings.port)
