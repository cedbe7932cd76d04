"""Decide whether an audio session belongs to this process tree and adopt it."""

import logging
import os
from collections.abc import Callable

from .constants import MAX_ANCESTRY_DEPTH
from .models import AppIdentity, SessionInfo
from .process_tree import (
    ParentLookup,
    belongs_to_host,
    parent_of,
    process_exists,
    process_name,
)
from .tracker import SessionLifecycleTracker

logger = logging.getLogger(__name__)

NotifyUser = Callable[[str], None]


class SessionAttributor:
    """Renames and subscribes to sessions owned by the host's process tree.

    ``consider`` is called once per session by the discovery feed, always on
    the owning thread. It never raises: unexpected provider errors are
    logged, reported through ``notify_user`` and the session is skipped.
    """

    def __init__(
        self,
        tracker: SessionLifecycleTracker,
        identity: AppIdentity,
        notify_user: NotifyUser,
        host_pid: int | None = None,
        parent_lookup: ParentLookup = parent_of,
        pid_exists: Callable[[int], bool] = process_exists,
        max_depth: int = MAX_ANCESTRY_DEPTH,
    ):
        self.tracker = tracker
        self.identity = identity
        self.notify_user = notify_user
        self.host_pid = os.getpid() if host_pid is None else host_pid
        self._parent_lookup = parent_lookup
        self._pid_exists = pid_exists
        self._max_depth = max_depth

    def is_owned(self, pid: int) -> bool:
        """True if ``pid`` is the host or one of its descendants."""
        return belongs_to_host(pid, self.host_pid, self._parent_lookup, self._max_depth)

    def describe(self, session) -> SessionInfo:
        """Snapshot ``session`` with its ownership verdict, without adopting it."""
        pid = session.process_id
        system = session.is_system_sounds
        return SessionInfo(
            process_id=pid,
            process_name=process_name(pid) if pid else "",
            display_name=session.display_name or "",
            icon_path=session.icon_path or "",
            state=session.state.name.lower(),
            is_system_sounds=system,
            owned=not system and self._pid_exists(pid) and self.is_owned(pid),
        )

    def consider(self, session) -> bool:
        """Adopt ``session`` if it belongs to us. Returns True on adoption."""
        try:
            # The shared system-sounds session must never be renamed
            if session.is_system_sounds:
                return False

            pid = session.process_id
            if not self._pid_exists(pid):
                logger.debug("No process record for audio session PID %s; skipping", pid)
                return False

            if not self.is_owned(pid):
                logger.debug("Audio session of PID %d is not in our process tree", pid)
                return False

            session.display_name = self.identity.display_name
            # Not reflected in an already-open volume mixer until it is reopened
            session.icon_path = self.identity.icon_path
            self.tracker.adopt(session, pid)
            return True
        except Exception as e:
            logger.exception("Failed to attribute audio session")
            self.notify_user(f"Could not change the volume mixer entry: {e}")
            return False
