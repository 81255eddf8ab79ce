from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request, Response

from api.schemas import (
    CounterSettings,
    FramePayload,
    ReplayRequest,
    ReplayResponse,
    SessionCreateRequest,
    SessionResponse,
)
from api.services.sessions import SessionRegistry, replay_frames

router = APIRouter(tags=["sessions"])


def _registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


@router.post("/sessions", response_model=SessionResponse, status_code=201)
def create_session(request: Request, body: Optional[SessionCreateRequest] = None) -> SessionResponse:
    """Start a counting session with count 0 in the UP phase."""
    settings = body.settings if body is not None else CounterSettings()
    return _registry(request).create(settings)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(request: Request, session_id: str) -> SessionResponse:
    return _registry(request).get(session_id)


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(request: Request, session_id: str) -> Response:
    _registry(request).delete(session_id)
    return Response(status_code=204)


@router.post("/sessions/{session_id}/frames", response_model=SessionResponse)
def push_frame(request: Request, session_id: str, payload: FramePayload) -> SessionResponse:
    """
    Feed one frame to the session's counter. Frames must arrive in temporal order; the
    response carries the updated rep count and the instruction to show.
    """
    return _registry(request).push_frame(session_id, payload)


@router.post("/replay", response_model=ReplayResponse)
def replay_recording(request: ReplayRequest) -> ReplayResponse:
    """Count reps over a full list of frames without creating a session."""
    return replay_frames(request)
