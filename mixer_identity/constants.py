"""
Centralised constants for mixer-identity.

All magic numbers, delays, file-system paths and OS enum values live here
so they are easy to find, tune, and test.
"""

from __future__ import annotations

import os
import sys

# ── Identity shown in the volume mixer ───────────────────────────────────────

DEFAULT_DISPLAY_NAME = "My Player"
"""Label written to the adopted session's display name."""

DEFAULT_ICON_PATH = os.path.abspath(sys.executable)
"""Icon location written to the adopted session (the running executable)."""

# ── Process tree traversal ───────────────────────────────────────────────────

ROOT_PID = 0
"""Sentinel pid meaning "no parent" / root of the process tree."""

MAX_ANCESTRY_DEPTH = 4096
"""Hard bound on parent hops when classifying a session's owner."""

MAX_DIAGNOSTICS_CHAIN = 32
"""Max depth for the ancestry chain printed by ``mixer-identity tree``."""

# ── Session lifecycle ────────────────────────────────────────────────────────

RELEASE_DELAY = 0.1
"""Seconds between an expiry/disconnect notification and the actual release."""

DISPATCHER_IDLE_WAIT = 0.5
"""Max seconds the owning thread sleeps when no task is due (keeps Ctrl+C responsive)."""

CHILD_POLL_INTERVAL = 0.5
"""How often the host checks whether the spawned child process has exited."""

CHILD_TERMINATE_TIMEOUT = 5
"""Seconds to wait for the child to exit after terminate() before kill()."""

# AudioSessionState values from audiosessiontypes.h
AUDIO_SESSION_STATE_INACTIVE = 0
AUDIO_SESSION_STATE_ACTIVE = 1
AUDIO_SESSION_STATE_EXPIRED = 2

# IAudioSessionControl2::IsSystemSoundsSession returns S_OK for the shared session
S_OK = 0

# comtypes reads ``sys.coinit_flags`` when first imported; 0 is COINIT_MULTITHREADED
COINIT_MULTITHREADED = 0

# AudioSessionDisconnectReason names, indexed by value
DISCONNECT_REASONS: dict[int, str] = {
    0: "device removed",
    1: "server shutdown",
    2: "format changed",
    3: "session logoff",
    4: "session disconnected",
    5: "exclusive mode override",
}

# ── Network (optional status API) ────────────────────────────────────────────

DEFAULT_PORT = 5112
"""Default HTTP port for the status API when enabled."""

LOCALHOST = "127.0.0.1"
"""Bind address: the status API is local-only."""

STATUS_REQUEST_TIMEOUT = 5
"""Seconds a status request waits for the owning thread to answer."""

# ── File-system paths ─────────────────────────────────────────────────────────

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".mixer-identity")
CONFIG_PATH = os.path.join(CONFIG_DIR, "config.json")

DEFAULT_LOG_LEVEL = "WARNING"
