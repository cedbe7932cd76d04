"""
Windows Core Audio adapter built on pycaw/comtypes.

Wraps the default render endpoint's IAudioSessionManager2 and each
IAudioSessionControl2 behind the small duck-typed interface the core uses.
Windows only: import this module lazily from host code.

Session notifications are only delivered to multithreaded-apartment
clients, and the owning thread does not pump window messages, so COM must
be initialized as MTA. comtypes picks the apartment when it is first
imported, which is why the flag is set before pycaw is loaded.
"""

import logging
import sys

from .constants import COINIT_MULTITHREADED, DISCONNECT_REASONS, S_OK
from .models import EventKind, MixerIdentityError, SessionEvent, SessionState

logger = logging.getLogger(__name__)

if "comtypes" in sys.modules and getattr(sys, "coinit_flags", None) != COINIT_MULTITHREADED:
    logger.warning("comtypes was imported before mixer_identity.audio; session notifications may not arrive")
sys.coinit_flags = COINIT_MULTITHREADED

# pylint: disable=wrong-import-position
from pycaw.callbacks import AudioSessionEvents, AudioSessionNotification  # noqa: E402
from pycaw.pycaw import AudioUtilities, IAudioSessionControl2  # noqa: E402
from pycaw.utils import AudioSession  # noqa: E402


class SessionEventSink(AudioSessionEvents):
    """IAudioSessionEvents implementation that forwards one SessionEvent per call."""

    def __init__(self, callback):
        super().__init__()
        self._callback = callback

    def _emit(self, event: SessionEvent) -> None:
        try:
            self._callback(event)
        except Exception:
            # Raising back into the audio engine would abort its dispatch
            logger.exception("Session event handler failed for %s", event.kind.value)

    def OnSimpleVolumeChanged(self, NewVolume, NewMute, EventContext):
        self._emit(SessionEvent(EventKind.VOLUME_CHANGED, value=(NewVolume, bool(NewMute))))

    def OnDisplayNameChanged(self, NewDisplayName, EventContext):
        self._emit(SessionEvent(EventKind.DISPLAY_NAME_CHANGED, value=NewDisplayName))

    def OnChannelVolumeChanged(
        self, ChannelCount, NewChannelVolumeArray, ChangedChannel, EventContext
    ):
        self._emit(SessionEvent(EventKind.CHANNEL_VOLUME_CHANGED, value=(ChannelCount, ChangedChannel)))

    def OnGroupingParamChanged(self, NewGroupingParam, EventContext):
        self._emit(SessionEvent(EventKind.GROUPING_PARAM_CHANGED))

    def OnIconPathChanged(self, NewIconPath, EventContext):
        self._emit(SessionEvent(EventKind.ICON_PATH_CHANGED, value=NewIconPath))

    def OnStateChanged(self, NewState):
        self._emit(SessionEvent(EventKind.STATE_CHANGED, state=SessionState.from_os(NewState)))

    def OnSessionDisconnected(self, DisconnectReason):
        reason = DISCONNECT_REASONS.get(DisconnectReason, f"reason {DisconnectReason}")
        self._emit(SessionEvent(EventKind.DISCONNECTED, reason=reason))


class SessionCreatedSink(AudioSessionNotification):
    """IAudioSessionNotification implementation wrapping each new session."""

    def __init__(self, callback):
        super().__init__()
        self._callback = callback

    def OnSessionCreated(self, NewSession):
        try:
            ctl = NewSession.QueryInterface(IAudioSessionControl2)
            self._callback(AudioSessionHandle(ctl))
        except Exception:
            logger.exception("Could not wrap newly created audio session")


class AudioSessionHandle:
    """One IAudioSessionControl2, exposed through the core's session interface."""

    def __init__(self, ctl):
        self._ctl = ctl
        self._session = AudioSession(ctl)
        self._sink = None

    @property
    def process_id(self) -> int:
        return self._session.ProcessId

    @property
    def display_name(self) -> str:
        return self._session.DisplayName

    @display_name.setter
    def display_name(self, value: str) -> None:
        self._session.DisplayName = value

    @property
    def icon_path(self) -> str:
        return self._session.IconPath

    @icon_path.setter
    def icon_path(self, value: str) -> None:
        self._session.IconPath = value

    @property
    def is_system_sounds(self) -> bool:
        return self._ctl.IsSystemSoundsSession() == S_OK

    @property
    def state(self) -> SessionState:
        return SessionState.from_os(self._session.State)

    def register_listener(self, callback) -> None:
        self._sink = SessionEventSink(callback)
        self._session.register_notification(self._sink)

    def unregister_listener(self) -> None:
        if self._sink is None:
            return
        self._session.unregister_notification()
        self._sink = None

    def release(self) -> None:
        self._session = None
        self._ctl = None


class AudioEndpoint:
    """Session manager of the default render endpoint."""

    def __init__(self):
        self._manager = AudioUtilities.GetAudioSessionManager()
        if self._manager is None:
            raise MixerIdentityError("No default audio render endpoint is available")
        self._created_sink = None

    def sessions(self) -> list[AudioSessionHandle]:
        """Every session currently known to the endpoint, in enumeration order."""
        enumerator = self._manager.GetSessionEnumerator()
        handles = []
        for i in range(enumerator.GetCount()):
            ctl = enumerator.GetSession(i)
            if ctl is None:
                continue
            handles.append(AudioSessionHandle(ctl.QueryInterface(IAudioSessionControl2)))
        return handles

    def subscribe_created(self, callback) -> None:
        self._created_sink = SessionCreatedSink(callback)
        self._manager.RegisterSessionNotification(self._created_sink)

    def unsubscribe_created(self) -> None:
        sink, self._created_sink = self._created_sink, None
        if sink is not None:
            self._manager.UnregisterSessionNotification(sink)

    def release(self) -> None:
        self._manager = None
