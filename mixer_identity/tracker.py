"""
Lifecycle tracking for the one audio session we have adopted.

The slot moves IDLE -> ADOPTED -> RELEASE_PENDING -> IDLE. Expiry and
disconnect notifications are delivered inside the session's own callback,
where unregistering is forbidden, so the release is posted back to the
owning thread with a short delay instead of being done inline.
"""

import logging

from .constants import RELEASE_DELAY
from .dispatcher import Dispatcher
from .models import AdoptedSession, EventKind, SessionEvent, TrackerState, TrackerStatus

logger = logging.getLogger(__name__)


class SessionLifecycleTracker:
    """Holds at most one adopted session and releases it exactly once."""

    def __init__(self, dispatcher: Dispatcher, release_delay: float = RELEASE_DELAY):
        self._dispatcher = dispatcher
        self._release_delay = release_delay
        self._current: AdoptedSession | None = None
        self._state = TrackerState.IDLE

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def current(self) -> AdoptedSession | None:
        return self._current

    def adopt(self, session, process_id: int) -> AdoptedSession:
        """Subscribe to ``session`` and make it the adopted session.

        A previously held session is released to completion first, whether
        it was still adopted or waiting on a deferred release.
        """
        if self._current is not None:
            logger.info(
                "Replacing adopted session of PID %d with PID %d",
                self._current.process_id,
                process_id,
            )
            self._release(self._current)

        record = AdoptedSession(session=session, process_id=process_id)
        session.register_listener(lambda event: self.notify(record, event))
        self._current = record
        self._state = TrackerState.ADOPTED
        logger.info("Adopted audio session of PID %d", process_id)
        return record

    def notify(self, record: AdoptedSession, event: SessionEvent) -> None:
        """Listener entry point; may be called on any thread."""
        self._dispatcher.invoke(lambda: self.handle_event(record, event))

    def handle_event(self, record: AdoptedSession, event: SessionEvent) -> None:
        """React to one session notification. Runs on the owning thread."""
        if record is not self._current:
            logger.debug("Ignoring %s for a session that is no longer tracked", event.kind.value)
            return

        if event.ends_session:
            logger.info(
                "Adopted session of PID %d ended (%s%s)",
                record.process_id,
                event.kind.value,
                f": {event.reason}" if event.reason else "",
            )
            self.request_release()
        elif event.kind is EventKind.STATE_CHANGED:
            logger.debug("Session state changed to %s", event.state)
        elif event.kind is EventKind.ICON_PATH_CHANGED:
            logger.debug("OnIconPathChanged: %s", event.value)
        else:
            logger.debug("Session event %s: %r", event.kind.value, event.value)

    def request_release(self) -> None:
        """Schedule release of the adopted session on a later dispatcher turn."""
        if self._state is not TrackerState.ADOPTED:
            return
        record = self._current
        self._state = TrackerState.RELEASE_PENDING
        self._dispatcher.invoke_later(self._release_delay, lambda: self._complete_release(record))

    def _complete_release(self, record: AdoptedSession) -> None:
        if record is not self._current:
            logger.debug("Deferred release skipped; session already released")
            return
        self._release(record)

    def shutdown(self) -> None:
        """Release the adopted session immediately (not from inside a callback)."""
        if self._current is not None:
            self._release(self._current)

    def status(self) -> TrackerStatus:
        record = self._current
        if record is None:
            return TrackerStatus(state=self._state)
        try:
            display_name = record.session.display_name
            icon_path = record.session.icon_path
        except Exception as e:
            logger.debug("Could not read adopted session properties: %s", e)
            display_name = icon_path = ""
        return TrackerStatus(
            state=self._state,
            process_id=record.process_id,
            display_name=display_name,
            icon_path=icon_path,
            adopted_at=record.adopted_at,
        )

    def _release(self, record: AdoptedSession) -> None:
        # Clear the slot first so late notifications for this record are ignored
        self._current = None
        self._state = TrackerState.IDLE
        try:
            record.session.unregister_listener()
        except Exception as e:
            logger.warning("Could not unregister from session of PID %d: %s", record.process_id, e)
        try:
            record.session.release()
        except Exception as e:
            logger.warning("Could not release session of PID %d: %s", record.process_id, e)
        logger.info("Released audio session of PID %d", record.process_id)
