"""
Host shell: spawn the audio-producing child and run session tracking.

Plays the role of the application window. ``feed.start`` is the
become-visible hook and ``feed.shutdown`` the close hook; both are posted
to the dispatcher, whose loop runs on the calling (main) thread.
"""

import logging
import subprocess
import sys
import threading

from .attributor import SessionAttributor
from .constants import CHILD_POLL_INTERVAL, CHILD_TERMINATE_TIMEOUT, LOCALHOST
from .discovery import SessionDiscoveryFeed
from .dispatcher import Dispatcher
from .models import Config
from .notifier import notify_user
from .tracker import SessionLifecycleTracker

logger = logging.getLogger(__name__)


def _default_endpoint_factory():
    from .audio import AudioEndpoint

    return AudioEndpoint()


class HostSession:
    """Wires the engine together for one run of a child command."""

    def __init__(self, command: list[str], config: Config, endpoint_factory=None, notify=None):
        self.command = command
        self.config = config
        self.dispatcher = Dispatcher()
        self.tracker = SessionLifecycleTracker(self.dispatcher, config.release_delay)
        self.attributor = SessionAttributor(
            self.tracker,
            config.identity,
            notify or notify_user,
            max_depth=config.max_ancestry_depth,
        )
        self.feed = SessionDiscoveryFeed(
            endpoint_factory or _default_endpoint_factory, self.attributor, self.dispatcher
        )
        self.child: subprocess.Popen | None = None
        self._closing = threading.Event()

    def close(self) -> None:
        """Post the close hook and stop the dispatcher after it has run. Thread-safe."""
        if self._closing.is_set():
            return
        self._closing.set()
        self.dispatcher.invoke(self.feed.shutdown)
        self.dispatcher.stop()

    def _watch_child(self) -> None:
        while not self._closing.wait(CHILD_POLL_INTERVAL):
            if self.child is not None and self.child.poll() is not None:
                logger.info("Child exited with code %s", self.child.returncode)
                self.close()
                return

    def _serve_status(self, port: int) -> None:
        import uvicorn

        from . import status_api

        status_api.bind(self.feed, self.dispatcher)
        uvicorn.run(status_api.app, host=LOCALHOST, port=port, log_level="warning")

    def run(self, port: int | None = None) -> int:
        """Run until the child exits or the user interrupts. Returns the child's exit code."""
        kwargs: dict = {}
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
        self.child = subprocess.Popen(self.command, **kwargs)  # pylint: disable=consider-using-with
        logger.info("Started %s (PID %d)", self.command[0], self.child.pid)

        self.dispatcher.invoke(self.feed.start)
        threading.Thread(target=self._watch_child, name="child-watcher", daemon=True).start()
        if port:
            threading.Thread(
                target=self._serve_status, args=(port,), name="status-api", daemon=True
            ).start()

        try:
            self.dispatcher.run()
        except KeyboardInterrupt:
            logger.info("Interrupted; shutting down")
            self.close()
            self.dispatcher.run()
        finally:
            self._stop_child()
        return self.child.returncode if self.child.returncode is not None else 0

    def _stop_child(self) -> None:
        if self.child is None or self.child.poll() is not None:
            return
        self.child.terminate()
        try:
            self.child.wait(timeout=CHILD_TERMINATE_TIMEOUT)
        except subprocess.TimeoutExpired:
            self.child.kill()
            self.child.wait()
