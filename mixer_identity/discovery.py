"""Feed existing and newly created audio sessions into the attributor."""

import logging

from .attributor import SessionAttributor
from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class SessionDiscoveryFeed:
    """Bridges the endpoint's enumerate/created capabilities to ``consider``.

    ``start`` and ``shutdown`` are the host window's become-visible and
    close hooks and must run on the owning thread.
    """

    def __init__(self, endpoint_factory, attributor: SessionAttributor, dispatcher: Dispatcher):
        self._endpoint_factory = endpoint_factory
        self.attributor = attributor
        self._dispatcher = dispatcher
        self.endpoint = None
        self._subscribed = False
        self._closed = False

    def start(self) -> None:
        """Consider every existing session, then listen for new ones."""
        if self._closed or self.endpoint is not None:
            return
        try:
            self.endpoint = self._endpoint_factory()
            sessions = self.endpoint.sessions()
            logger.debug("Enumerated %d existing audio session(s)", len(sessions))
            for session in sessions:
                self.attributor.consider(session)

            # Likely there is no session for us yet; it appears once we play sound
            self.endpoint.subscribe_created(self._on_session_created)
            self._subscribed = True
        except Exception as e:
            logger.exception("Audio session discovery failed")
            self.attributor.notify_user(f"Could not connect to the audio device: {e}")

    def _on_session_created(self, session) -> None:
        # Called on an audio-engine thread
        self._dispatcher.invoke(lambda: self._consider_created(session))

    def _consider_created(self, session) -> None:
        if self._closed:
            logger.debug("Ignoring session created after shutdown")
            return
        self.attributor.consider(session)

    def shutdown(self) -> None:
        """Unsubscribe, release the adopted session and the endpoint, once."""
        if self._closed:
            return
        self._closed = True
        endpoint, self.endpoint = self.endpoint, None
        try:
            if endpoint is not None and self._subscribed:
                self._subscribed = False
                endpoint.unsubscribe_created()
        except Exception as e:
            logger.warning("Could not unsubscribe from session notifications: %s", e)
        self.attributor.tracker.shutdown()
        if endpoint is not None:
            try:
                endpoint.release()
            except Exception as e:
                logger.warning("Could not release audio endpoint: %s", e)
