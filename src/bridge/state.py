"""In-process bridge state: call registry and cached session id.

This is a single-process store. For multi-worker deployments, replace with
Redis or another shared store.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ParticipantRecord:
    id: str
    token: str


class CallRegistry:
    """Maps voice call ids to the WebRTC participant that call joins as."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._calls: dict[str, ParticipantRecord] = {}

    async def register(self, call_id: str, participant: ParticipantRecord) -> ParticipantRecord | None:
        """Store the participant for a call, returning any entry it replaced."""

        async with self._lock:
            previous = self._calls.get(call_id)
            self._calls[call_id] = participant
            return previous

    async def get(self, call_id: str) -> ParticipantRecord | None:
        async with self._lock:
            return self._calls.get(call_id)

    async def pop(self, call_id: str) -> ParticipantRecord | None:
        async with self._lock:
            return self._calls.pop(call_id, None)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._calls

    def __len__(self) -> int:
        return len(self._calls)


class SessionCache:
    """Holds the one WebRTC session id shared by every participant.

    `lock` must be held while checking and replacing the id so concurrent
    provisioning never creates two sessions.
    """

    def __init__(self, session_id: str | None = None) -> None:
        self.lock = asyncio.Lock()
        self.session_id = session_id
