"""
Pydantic response models for the status API.

These define the JSON shapes for all API endpoints and give us
automatic OpenAPI schema generation + Swagger UI.
"""

from __future__ import annotations

from pydantic import BaseModel

# ── Adopted session (/api/session) ───────────────────────────────────────────


class TrackerStatusResponse(BaseModel):
    """The lifecycle tracker's slot as returned by GET /api/session."""

    state: str = "idle"
    process_id: int = 0
    display_name: str = ""
    icon_path: str = ""
    adopted_at: str | None = None


# ── Endpoint sessions (/api/sessions) ────────────────────────────────────────


class SessionInfoResponse(BaseModel):
    """One audio session on the default render endpoint."""

    process_id: int
    process_name: str = ""
    display_name: str = ""
    icon_path: str = ""
    state: str = "inactive"
    is_system_sounds: bool = False
    owned: bool = False


# ── Generic ─────────────────────────────────────────────────────────────────


class ServerInfoResponse(BaseModel):
    pid: int
    version: str
    bound: bool = False
