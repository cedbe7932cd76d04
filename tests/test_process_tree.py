"""Tests for process_tree.py: parent lookup and ownership classification."""

from unittest.mock import MagicMock, patch

import psutil
import pytest

from mixer_identity.process_tree import (
    ancestry_chain,
    belongs_to_host,
    parent_of,
    process_exists,
    process_name,
)

from .conftest import HOST_PID, PROCESS_TABLE

# ---------------------------------------------------------------------------
# parent_of
# ---------------------------------------------------------------------------


class TestParentOf:
    def test_returns_parent_pid(self):
        proc = MagicMock()
        proc.ppid.return_value = 42
        with patch("mixer_identity.process_tree.psutil.Process", return_value=proc) as mock_cls:
            assert parent_of(100) == 42
        mock_cls.assert_called_once_with(100)

    @pytest.mark.parametrize(
        "error",
        [psutil.NoSuchProcess(100), psutil.AccessDenied(100), psutil.ZombieProcess(100)],
    )
    def test_psutil_errors_return_none(self, error):
        with patch("mixer_identity.process_tree.psutil.Process", side_effect=error):
            assert parent_of(100) is None

    def test_unexpected_error_returns_none(self):
        with patch("mixer_identity.process_tree.psutil.Process", side_effect=OSError("boom")):
            assert parent_of(100) is None

    def test_root_and_negative_pids_return_none(self):
        with patch("mixer_identity.process_tree.psutil.Process") as mock_cls:
            assert parent_of(0) is None
            assert parent_of(-5) is None
        mock_cls.assert_not_called()

    def test_not_cached(self):
        proc = MagicMock()
        proc.ppid.side_effect = [42, 43]
        with patch("mixer_identity.process_tree.psutil.Process", return_value=proc):
            assert parent_of(100) == 42
            assert parent_of(100) == 43

    def test_current_process_has_a_parent(self):
        import os

        assert parent_of(os.getpid()) == os.getppid()


# ---------------------------------------------------------------------------
# process_exists / process_name
# ---------------------------------------------------------------------------


class TestProcessExists:
    def test_zero_is_never_a_process_record(self):
        assert process_exists(0) is False

    def test_delegates_to_psutil(self):
        with patch("mixer_identity.process_tree.psutil.pid_exists", return_value=True) as m:
            assert process_exists(1234) is True
        m.assert_called_once_with(1234)

    def test_error_is_false(self):
        with patch("mixer_identity.process_tree.psutil.pid_exists", side_effect=OSError):
            assert process_exists(1234) is False


class TestProcessName:
    def test_returns_name(self):
        proc = MagicMock()
        proc.name.return_value = "msedgewebview2.exe"
        with patch("mixer_identity.process_tree.psutil.Process", return_value=proc):
            assert process_name(77) == "msedgewebview2.exe"

    def test_missing_process_returns_empty(self):
        with patch(
            "mixer_identity.process_tree.psutil.Process", side_effect=psutil.NoSuchProcess(77)
        ):
            assert process_name(77) == ""


# ---------------------------------------------------------------------------
# belongs_to_host
# ---------------------------------------------------------------------------


class TestBelongsToHost:
    def test_zero_hops(self):
        lookup = MagicMock()
        assert belongs_to_host(HOST_PID, HOST_PID, lookup) is True
        lookup.assert_not_called()

    def test_direct_child(self):
        assert belongs_to_host(20, HOST_PID, PROCESS_TABLE.get) is True

    def test_grandchild(self):
        assert belongs_to_host(200, HOST_PID, PROCESS_TABLE.get) is True

    def test_great_grandchild(self):
        assert belongs_to_host(201, HOST_PID, PROCESS_TABLE.get) is True

    def test_unrelated_chain_reaches_root(self):
        assert belongs_to_host(50, HOST_PID, PROCESS_TABLE.get) is False

    def test_parent_is_root(self):
        assert belongs_to_host(300, HOST_PID, PROCESS_TABLE.get) is False

    def test_unresolvable_pid(self):
        assert belongs_to_host(999, HOST_PID, PROCESS_TABLE.get) is False

    def test_root_session_pid(self):
        assert belongs_to_host(0, HOST_PID, PROCESS_TABLE.get) is False

    def test_chain_broken_midway(self):
        table = {500: 501}  # 501 vanished
        assert belongs_to_host(500, HOST_PID, table.get) is False

    def test_host_ancestors_are_not_members(self):
        # The host's own parent is not in the host's tree
        table = {10: 5, 5: 0}
        assert belongs_to_host(5, 10, table.get) is False

    def test_cycle_terminates(self):
        table = {1: 2, 2: 3, 3: 1}
        assert belongs_to_host(1, HOST_PID, table.get) is False

    def test_long_chain_within_bound(self):
        table = {pid: pid - 1 for pid in range(HOST_PID + 1, HOST_PID + 501)}
        assert belongs_to_host(HOST_PID + 500, HOST_PID, table.get, max_depth=500) is True

    def test_depth_bound_stops_walk(self):
        table = {pid: pid - 1 for pid in range(HOST_PID + 1, HOST_PID + 501)}
        assert belongs_to_host(HOST_PID + 500, HOST_PID, table.get, max_depth=499) is False

    @pytest.mark.parametrize("hops", [1, 2, 5, 40])
    def test_any_chain_reaching_host(self, hops):
        table = {}
        pid = 1000
        chain = [pid + i for i in range(hops)]
        for child, parent in zip(chain, chain[1:] + [HOST_PID]):
            table[child] = parent
        table[HOST_PID] = 0
        assert belongs_to_host(chain[0], HOST_PID, table.get) is True


# ---------------------------------------------------------------------------
# ancestry_chain
# ---------------------------------------------------------------------------


class TestAncestryChain:
    def test_walks_to_root(self):
        assert ancestry_chain(201, PROCESS_TABLE.get) == [201, 200, 20, 10]

    def test_unknown_pid(self):
        assert ancestry_chain(999, PROCESS_TABLE.get) == [999]

    def test_root(self):
        assert ancestry_chain(0, PROCESS_TABLE.get) == []

    def test_cycle_stops(self):
        table = {1: 2, 2: 1}
        assert ancestry_chain(1, table.get) == [1, 2]

    def test_max_depth(self):
        assert ancestry_chain(201, PROCESS_TABLE.get, max_depth=2) == [201, 200]
