"""Shared FastAPI dependencies.

Separated to avoid circular imports between route modules.
"""

from __future__ import annotations

from fastapi import Request

from bridge.call_bridge import CallBridge
from config.settings import Settings, get_settings


def get_bridge(request: Request) -> CallBridge:
    return request.app.state.bridge


def get_app_settings() -> Settings:
    return get_settings()
