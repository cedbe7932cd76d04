"""Shared pytest fixtures and fakes for the test suite."""

import itertools

import pytest

from mixer_identity.attributor import SessionAttributor
from mixer_identity.discovery import SessionDiscoveryFeed
from mixer_identity.models import AppIdentity, SessionState
from mixer_identity.tracker import SessionLifecycleTracker

HOST_PID = 10

# pid -> parent pid. 200 -> 20 -> 10 (host) -> 0; 50 and 300 are unrelated.
PROCESS_TABLE = {
    10: 0,
    20: 10,
    200: 20,
    201: 200,
    50: 4,
    4: 0,
    300: 0,
}

IDENTITY = AppIdentity(display_name="My Player", icon_path=r"C:\MyPlayer\player.exe")


class FakeSession:
    """In-memory stand-in for an OS audio session handle."""

    def __init__(self, process_id, system=False, display_name="", icon_path=""):
        self.process_id = process_id
        self.is_system_sounds = system
        self.display_name = display_name
        self.icon_path = icon_path
        self.state = SessionState.ACTIVE
        self.listener = None
        self.last_listener = None
        self.register_calls = 0
        self.unregister_calls = 0
        self.release_calls = 0

    def register_listener(self, callback):
        self.listener = callback
        self.last_listener = callback
        self.register_calls += 1

    def unregister_listener(self):
        self.listener = None
        self.unregister_calls += 1

    def release(self):
        self.release_calls += 1

    def fire(self, event):
        """Deliver ``event`` the way the OS would, even after unregistering."""
        self.last_listener(event)


class FakeEndpoint:
    """In-memory stand-in for the default render endpoint's session manager."""

    def __init__(self, sessions=()):
        self._sessions = list(sessions)
        self.created_callback = None
        self.subscribe_calls = 0
        self.unsubscribe_calls = 0
        self.release_calls = 0

    def sessions(self):
        return list(self._sessions)

    def subscribe_created(self, callback):
        self.created_callback = callback
        self.subscribe_calls += 1

    def unsubscribe_created(self):
        self.created_callback = None
        self.unsubscribe_calls += 1

    def release(self):
        self.release_calls += 1

    def create(self, session):
        """Simulate the OS announcing a new session."""
        self._sessions.append(session)
        if self.created_callback is not None:
            self.created_callback(session)


class ManualDispatcher:
    """Deterministic dispatcher: tasks run only when the test pumps them."""

    def __init__(self):
        self.now = 0.0
        self.tasks = []
        self.stopped = False
        self._seq = itertools.count()

    def invoke(self, fn):
        return self.invoke_later(0.0, fn)

    def invoke_later(self, delay, fn):
        if self.stopped:
            return False
        self.tasks.append((self.now + delay, next(self._seq), fn))
        return True

    def stop(self):
        self.stopped = True

    def run_pending(self):
        """Run every task that is due, including ones queued while running."""
        while True:
            due = sorted(t for t in self.tasks if t[0] <= self.now)
            if not due:
                return
            task = due[0]
            self.tasks.remove(task)
            task[2]()

    def advance(self, seconds):
        self.now += seconds
        self.run_pending()

    @property
    def delayed(self):
        return [t for t in self.tasks if t[0] > self.now]


class ImmediateDispatcher:
    """Runs every invoked task inline; for API tests only."""

    def invoke(self, fn):
        fn()
        return True


@pytest.fixture
def dispatcher():
    return ManualDispatcher()


@pytest.fixture
def tracker(dispatcher):
    return SessionLifecycleTracker(dispatcher, release_delay=0.1)


@pytest.fixture
def notify():
    calls = []
    return calls


@pytest.fixture
def attributor(tracker, notify):
    return SessionAttributor(
        tracker,
        IDENTITY,
        notify.append,
        host_pid=HOST_PID,
        parent_lookup=PROCESS_TABLE.get,
        pid_exists=lambda pid: pid in PROCESS_TABLE,
    )


@pytest.fixture
def make_feed(attributor, dispatcher):
    """Fixture returning a helper that builds a feed over a FakeEndpoint."""

    def _make(sessions=()):
        endpoint = FakeEndpoint(sessions)
        feed = SessionDiscoveryFeed(lambda: endpoint, attributor, dispatcher)
        return feed, endpoint

    return _make
