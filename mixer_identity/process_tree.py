"""
Process-tree queries used to decide which audio sessions belong to us.

The embedded browser runs as a subprocess of the host, and may itself
spawn the audio process, so ownership is decided by walking the parent
chain of a session's owner until it reaches the host pid or the root.
"""

import logging
from collections.abc import Callable

import psutil

from .constants import MAX_ANCESTRY_DEPTH, MAX_DIAGNOSTICS_CHAIN, ROOT_PID

logger = logging.getLogger(__name__)

ParentLookup = Callable[[int], int | None]


def parent_of(pid: int) -> int | None:
    """Return the parent pid of ``pid``, or None if it cannot be determined.

    Never raises: a vanished process, denied access, or any other query
    failure all collapse to None. Nothing is cached since the process table
    changes continuously.
    """
    if pid is None or pid <= ROOT_PID:
        return None
    try:
        return psutil.Process(pid).ppid()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return None
    except Exception as e:
        logger.debug("Parent lookup failed for PID %d: %s", pid, e)
        return None


def process_exists(pid: int) -> bool:
    """True if the OS has a process record for ``pid``."""
    if pid is None or pid <= ROOT_PID:
        return False
    try:
        return psutil.pid_exists(pid)
    except Exception as e:
        logger.debug("pid_exists failed for PID %d: %s", pid, e)
        return False


def process_name(pid: int) -> str:
    """Executable name of ``pid``, or an empty string if unavailable."""
    try:
        return psutil.Process(pid).name()
    except (psutil.Error, ValueError):
        return ""


def belongs_to_host(
    session_pid: int,
    host_pid: int,
    parent_lookup: ParentLookup = parent_of,
    max_depth: int = MAX_ANCESTRY_DEPTH,
) -> bool:
    """Walk up from ``session_pid`` and report whether ``host_pid`` is reached.

    Zero hops count: a session owned by the host itself belongs to it.
    The walk stops with False at the root sentinel, at an unresolvable
    pid, on a cycle, or after ``max_depth`` hops.
    """
    current = session_pid
    visited: set[int] = set()
    for _ in range(max_depth + 1):
        if current == host_pid:
            return True
        if current is None or current == ROOT_PID or current in visited:
            return False
        visited.add(current)
        current = parent_lookup(current)
    logger.warning(
        "Ancestry walk from PID %d exceeded %d hops; treating as not owned",
        session_pid,
        max_depth,
    )
    return False


def ancestry_chain(
    pid: int, parent_lookup: ParentLookup = parent_of, max_depth: int = MAX_DIAGNOSTICS_CHAIN
) -> list[int]:
    """List of pids from ``pid`` up to (excluding) the root, for diagnostics."""
    chain: list[int] = []
    current: int | None = pid
    while current is not None and current != ROOT_PID and len(chain) < max_depth:
        if current in chain:
            break
        chain.append(current)
        current = parent_lookup(current)
    return chain
