"""Typed data models for mixer-identity."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import (
    AUDIO_SESSION_STATE_ACTIVE,
    AUDIO_SESSION_STATE_EXPIRED,
    AUDIO_SESSION_STATE_INACTIVE,
    DEFAULT_DISPLAY_NAME,
    DEFAULT_ICON_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    MAX_ANCESTRY_DEPTH,
    RELEASE_DELAY,
)


class MixerIdentityError(Exception):
    """Raised when the audio provider or configuration cannot be used."""


class SessionState(Enum):
    """Lifecycle state of an OS audio session."""

    INACTIVE = AUDIO_SESSION_STATE_INACTIVE
    ACTIVE = AUDIO_SESSION_STATE_ACTIVE
    EXPIRED = AUDIO_SESSION_STATE_EXPIRED

    @classmethod
    def from_os(cls, value: int) -> SessionState:
        try:
            return cls(value)
        except ValueError:
            return cls.INACTIVE


class EventKind(Enum):
    """Notification kinds delivered by a session's lifecycle listener."""

    VOLUME_CHANGED = "volume_changed"
    DISPLAY_NAME_CHANGED = "display_name_changed"
    CHANNEL_VOLUME_CHANGED = "channel_volume_changed"
    GROUPING_PARAM_CHANGED = "grouping_param_changed"
    ICON_PATH_CHANGED = "icon_path_changed"
    STATE_CHANGED = "state_changed"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class SessionEvent:
    """One notification from an audio session.

    Only the fields relevant to ``kind`` are populated: ``state`` for
    STATE_CHANGED, ``reason`` for DISCONNECTED, ``value`` for everything else.
    """

    kind: EventKind
    state: SessionState | None = None
    reason: str = ""
    value: Any = None

    @property
    def ends_session(self) -> bool:
        """True when the session is gone and must be released."""
        if self.kind is EventKind.DISCONNECTED:
            return True
        return self.kind is EventKind.STATE_CHANGED and self.state is SessionState.EXPIRED


class TrackerState(Enum):
    """States of the single adopted-session slot."""

    IDLE = "idle"
    ADOPTED = "adopted"
    RELEASE_PENDING = "release_pending"


@dataclass(eq=False)
class AdoptedSession:
    """The session currently renamed and subscribed to by this process."""

    session: Any
    process_id: int
    adopted_at: float = field(default_factory=time.time)


@dataclass
class AppIdentity:
    """Name and icon applied to an adopted session."""

    display_name: str = DEFAULT_DISPLAY_NAME
    icon_path: str = DEFAULT_ICON_PATH


@dataclass
class SessionInfo:
    """Diagnostic snapshot of one audio session on the default endpoint."""

    process_id: int
    process_name: str = ""
    display_name: str = ""
    icon_path: str = ""
    state: str = "inactive"
    is_system_sounds: bool = False
    owned: bool = False


@dataclass
class TrackerStatus:
    """Snapshot of the lifecycle tracker's slot."""

    state: TrackerState = TrackerState.IDLE
    process_id: int = 0
    display_name: str = ""
    icon_path: str = ""
    adopted_at: float | None = None


@dataclass
class Config:
    """Effective configuration after merging the config file and CLI flags."""

    display_name: str = DEFAULT_DISPLAY_NAME
    icon_path: str = DEFAULT_ICON_PATH
    release_delay: float = RELEASE_DELAY
    max_ancestry_depth: int = MAX_ANCESTRY_DEPTH
    log_level: str = DEFAULT_LOG_LEVEL
    port: int = DEFAULT_PORT

    @property
    def identity(self) -> AppIdentity:
        return AppIdentity(display_name=self.display_name, icon_path=self.icon_path)
