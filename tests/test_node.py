import signal
import subprocess
from unittest import mock

import psutil

from junction_bridge import node
from junction_bridge.node import RunningSession, kill_named_processes, terminate_process
from junction_bridge.proposal import ProposalFields
from junction_bridge.session import SessionState, SessionStore, advance

from conftest import FakeProcess


class StubbornProcess(FakeProcess):
    def wait(self, timeout=None):
        if timeout is not None and not self.killed:
            raise subprocess.TimeoutExpired(self.args, timeout)
        self.returncode = -9
        return -9


def test_terminate_process_graceful():
    process = FakeProcess(["junctiond", "start"])
    assert terminate_process(process, grace=0.1) == 0
    assert process.terminated
    assert not process.killed


def test_terminate_process_forces_kill_after_grace():
    process = StubbornProcess(["junctiond", "start"])
    assert terminate_process(process, grace=0.1) == -9
    assert process.terminated
    assert process.killed


def test_terminate_process_skips_exited():
    process = FakeProcess(["junctiond", "start"])
    process.returncode = 0
    terminate_process(process)
    assert not process.terminated


def test_kill_named_processes(monkeypatch):
    match = mock.Mock(info={"pid": 11, "name": "junctiond"})
    other = mock.Mock(info={"pid": 12, "name": "bash"})
    gone = mock.Mock(info={"pid": 13, "name": "junctiond"})
    gone.kill.side_effect = psutil.NoSuchProcess(13)
    monkeypatch.setattr(node.psutil, "process_iter", lambda attrs: [match, other, gone])

    assert kill_named_processes("junctiond") == [11]
    match.kill.assert_called_once()
    other.kill.assert_not_called()


def test_interrupt_stops_node_clears_state_and_exits(tmp_path, monkeypatch):
    store = SessionStore(tmp_path / "testing_state.json")
    store.save(advance(SessionState(), ProposalFields(), "QmCid"))
    monkeypatch.setattr(node, "kill_named_processes", lambda name: [])
    exits = []
    running = RunningSession(store, "./build/junctiond", grace=0.1, exit_func=exits.append)
    process = running.attach(FakeProcess(["junctiond", "start"]))

    running.handle_interrupt(signal.SIGINT, None)

    assert process.terminated
    assert not store.exists()
    assert exits == [130]


def test_install_and_uninstall_restore_previous_handler(tmp_path):
    previous = signal.getsignal(signal.SIGINT)
    running = RunningSession(SessionStore(tmp_path / "state.json"), "junctiond")
    with running:
        assert signal.getsignal(signal.SIGINT) == running.handle_interrupt
    assert signal.getsignal(signal.SIGINT) == previous
