"""User-facing error surface for non-fatal failures."""

import logging
import sys
import threading

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "mixer-identity"


def _show_message_box(message: str, title: str) -> None:
    import win32api
    import win32con

    win32api.MessageBox(0, message, title, win32con.MB_OK | win32con.MB_ICONWARNING)


def notify_user(message: str, title: str = DEFAULT_TITLE) -> None:
    """Report a failure to the user without blocking the caller.

    On Windows a message box is shown from a short-lived thread (the caller
    may be the owning thread or an audio callback). Elsewhere the message is
    only logged.
    """
    logger.warning("%s", message)
    if sys.platform != "win32":
        return
    threading.Thread(
        target=_show_message_box, args=(message, title), name="notify-user", daemon=True
    ).start()
