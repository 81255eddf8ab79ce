"""
In-memory registry of counting sessions.

Each session owns one CounterSession. Requests for the same session are serialized with a
per-session lock since the counter itself does no locking. Sessions idle for longer than
the TTL are evicted the next time a session is created. Nothing is persisted.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List
from uuid import uuid4

from fastapi import HTTPException

from api.schemas import (
    CounterSettings,
    FramePayload,
    ReplayRequest,
    ReplayResponse,
    SessionResponse,
    UpdateResponse,
)
from pushcount.session import CounterSession, SessionSnapshot, replay

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = int(os.getenv("PUSHCOUNT_MAX_SESSIONS", "64"))
DEFAULT_SESSION_TTL = float(os.getenv("PUSHCOUNT_SESSION_TTL", "600"))


@dataclass
class _Entry:
    session: CounterSession
    last_used: float
    lock: threading.Lock = field(default_factory=threading.Lock)


def _session_response(session_id: str, snap: SessionSnapshot) -> SessionResponse:
    width, height = snap.image_size
    return SessionResponse(
        session_id=session_id,
        rep_count=snap.rep_count,
        instruction=snap.instruction,
        phase=snap.phase.value,
        frames_processed=snap.frames_processed,
        image_width=width,
        image_height=height,
    )


class SessionRegistry:
    def __init__(
        self,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        ttl_seconds: float = DEFAULT_SESSION_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _evict_idle(self) -> None:
        # Caller holds self._lock.
        cutoff = self._clock() - self.ttl_seconds
        for session_id in [sid for sid, e in self._entries.items() if e.last_used < cutoff]:
            del self._entries[session_id]
            logger.info("evicted idle session %s", session_id)

    def create(self, settings: CounterSettings) -> SessionResponse:
        with self._lock:
            self._evict_idle()
            if len(self._entries) >= self.max_sessions:
                raise HTTPException(status_code=429, detail="Too many active sessions.")
            session_id = uuid4().hex
            entry = _Entry(CounterSession(settings.to_config()), last_used=self._clock())
            self._entries[session_id] = entry
        logger.info("created session %s", session_id)
        return _session_response(session_id, entry.session.snapshot())

    def _get(self, session_id: str) -> _Entry:
        entry = self._entries.get(session_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return entry

    def get(self, session_id: str) -> SessionResponse:
        entry = self._get(session_id)
        with entry.lock:
            entry.last_used = self._clock()
            return _session_response(session_id, entry.session.snapshot())

    def push_frame(self, session_id: str, payload: FramePayload) -> SessionResponse:
        entry = self._get(session_id)
        frame = payload.to_frame()
        with entry.lock:
            entry.last_used = self._clock()
            snap = entry.session.process(frame)
        return _session_response(session_id, snap)

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._entries.pop(session_id, None) is None:
                raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        logger.info("deleted session %s", session_id)


def replay_frames(request: ReplayRequest) -> ReplayResponse:
    """Run a whole batch of frames through a fresh counter."""
    states = replay((f.to_frame() for f in request.frames), request.settings.to_config())
    updates: List[UpdateResponse] = [
        UpdateResponse(
            rep_count=s.rep_count,
            instruction=s.last_instruction.value,
            phase=s.phase.value,
        )
        for s in states
    ]
    return ReplayResponse(rep_count=states[-1].rep_count if states else 0, updates=updates)
