"""
mixer-identity: local status API.

Exposes the adopted-session slot and a snapshot of the default endpoint's
sessions while ``mixer-identity run --status`` (or ``--port N``) is active. Everything that
touches audio handles is executed on the owning thread via the dispatcher.
"""

import os
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import asdict
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException

from .__version__ import __version__
from .constants import STATUS_REQUEST_TIMEOUT
from .schemas import ServerInfoResponse, SessionInfoResponse, TrackerStatusResponse

app = FastAPI(
    title="mixer-identity",
    version=__version__,
    description="Inspect which audio session is presented under the host's name.",
)

_feed = None
_dispatcher = None


def bind(feed, dispatcher) -> None:
    """Attach the running discovery feed (and its owning-thread dispatcher)."""
    global _feed, _dispatcher
    _feed = feed
    _dispatcher = dispatcher


def unbind() -> None:
    bind(None, None)


def _on_owning_thread(fn):
    """Run ``fn`` on the owning thread and wait for its result."""
    if _dispatcher is None or _feed is None:
        raise HTTPException(status_code=503, detail="Session tracking is not running.")
    future: Future = Future()

    def task():
        try:
            future.set_result(fn())
        except Exception as e:
            future.set_exception(e)

    if not _dispatcher.invoke(task):
        raise HTTPException(status_code=503, detail="Session tracking is shutting down.")
    try:
        return future.result(timeout=STATUS_REQUEST_TIMEOUT)
    except FutureTimeout as e:
        raise HTTPException(status_code=504, detail="Owning thread did not respond.") from e


@app.get("/api/session", response_model=TrackerStatusResponse)
def api_session():
    """State of the adopted-session slot."""
    if _feed is None:
        return TrackerStatusResponse()
    status = _on_owning_thread(_feed.attributor.tracker.status)
    adopted_at = None
    if status.adopted_at is not None:
        adopted_at = datetime.fromtimestamp(status.adopted_at, UTC).isoformat()
    return TrackerStatusResponse(
        state=status.state.value,
        process_id=status.process_id,
        display_name=status.display_name,
        icon_path=status.icon_path,
        adopted_at=adopted_at,
    )


@app.get("/api/sessions", response_model=list[SessionInfoResponse])
def api_sessions():
    """Every session on the default render endpoint with its ownership verdict."""

    def snapshot():
        endpoint = _feed.endpoint
        if endpoint is None:
            return None
        infos = []
        for session in endpoint.sessions():
            try:
                infos.append(asdict(_feed.attributor.describe(session)))
            finally:
                session.release()
        return infos

    try:
        infos = _on_owning_thread(snapshot)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Audio provider unavailable: {e}") from e
    if infos is None:
        raise HTTPException(status_code=503, detail="No audio endpoint is connected.")
    return infos


@app.get("/api/server-info", response_model=ServerInfoResponse)
def server_info():
    """Return the host PID and version."""
    return {"pid": os.getpid(), "version": __version__, "bound": _feed is not None}
