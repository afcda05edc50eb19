"""Tests for the resource allocator.

One unit moves per request or release.  An exhausted resource parks
the requester in its FIFO queue; a release with waiters hands the unit
straight to the head waiter.
"""

import pytest

from py_prm.commands import Create, Request, Timeout
from py_prm.config import ManagerConfig
from py_prm.errors import ErrorKind, ManagerError
from py_prm.manager import Manager
from py_prm.process import ProcessState

LOW = 1
HIGH = 2


def _contended() -> Manager:
    """A holds R1 and is running; B is blocked waiting for R1.

    Steps: A is created and takes R1, B is created as A's equal, A times
    out so B runs, then B asks for R1 and blocks, giving A the CPU back.
    """
    manager = Manager()
    manager.execute(Create(name="A", priority=LOW))
    manager.execute(Request(resource="R1"))
    manager.execute(Create(name="B", priority=LOW))
    manager.execute(Timeout())
    manager.execute(Request(resource="R1"))
    return manager


class TestRequest:
    """Verify unit grants and blocking."""

    def test_free_unit_is_granted(self) -> None:
        """With a unit available the requester takes it and keeps running."""
        manager = Manager()
        root = manager.running
        assert manager.allocator.request(root, manager.resource("R1"))
        assert manager.resource("R1").remaining == 0
        assert root.resources == [manager.resource("R1").rid]
        assert root.state is ProcessState.RUNNING

    def test_exhausted_resource_blocks(self) -> None:
        """Without a unit the requester joins the wait queue."""
        manager = _contended()
        b = manager.process("B")
        r1 = manager.resource("R1")
        assert b.state is ProcessState.BLOCKED
        assert b.blocked_on == r1.rid
        assert r1.waiters == [b.pid]
        assert manager.blocked == [b]
        assert manager.running.name == "A"

    def test_io_device_is_off_limits(self) -> None:
        """The I/O device is only reachable through rio/ioc."""
        manager = Manager()
        with pytest.raises(ManagerError) as exc_info:
            manager.allocator.request(manager.running, manager.resource("IO"))
        assert exc_info.value.kind is ErrorKind.FORBIDDEN

    def test_last_ready_process_cannot_block(self) -> None:
        """Blocking the only candidate would leave nothing to run."""
        manager = Manager()
        root = manager.running
        r1 = manager.resource("R1")
        manager.allocator.request(root, r1)
        with pytest.raises(ManagerError) as exc_info:
            manager.allocator.request(root, r1)
        assert exc_info.value.kind is ErrorKind.NO_READY_PROCESS
        assert root.state is ProcessState.RUNNING
        assert r1.waiters == []


class TestRelease:
    """Verify returns and hand-offs."""

    def test_release_without_waiters_frees_unit(self) -> None:
        """The unit goes back to the pool."""
        manager = Manager()
        root = manager.running
        r1 = manager.resource("R1")
        manager.allocator.request(root, r1)
        assert manager.allocator.release(root, r1) is None
        assert r1.remaining == 1
        assert root.resources == []

    def test_release_hands_unit_to_head_waiter(self) -> None:
        """The head waiter wakes up already holding the unit."""
        manager = _contended()
        a = manager.process("A")
        b = manager.process("B")
        r1 = manager.resource("R1")
        assert manager.allocator.release(a, r1) is b
        assert r1.remaining == 0
        assert b.state is ProcessState.READY
        assert b.blocked_on is None
        assert b.holds(r1.rid)
        assert not a.holds(r1.rid)
        assert manager.blocked == []

    def test_waiters_served_in_arrival_order(self) -> None:
        """The first to block is the first to be served."""
        manager = _contended()
        manager.execute(Create(name="C", priority=LOW))
        manager.execute(Timeout())
        # C runs now; it queues behind B.
        manager.execute(Request(resource="R1"))
        r1 = manager.resource("R1")
        b, c = manager.process("B"), manager.process("C")
        assert r1.waiters == [b.pid, c.pid]
        manager.allocator.release(manager.process("A"), r1)
        assert b.holds(r1.rid)
        assert r1.waiters == [c.pid]

    def test_release_unheld_rejected(self) -> None:
        """Releasing something not held changes nothing."""
        manager = Manager()
        r1 = manager.resource("R1")
        with pytest.raises(ManagerError) as exc_info:
            manager.allocator.release(manager.running, r1)
        assert exc_info.value.kind is ErrorKind.NOT_HELD
        assert r1.remaining == 1

    def test_release_removes_single_unit(self) -> None:
        """Holding two units of one resource, a release returns only one."""
        manager = Manager(config=ManagerConfig(resources=(("R1", 2),)))
        root = manager.running
        r1 = manager.resource("R1")
        manager.allocator.request(root, r1)
        manager.allocator.request(root, r1)
        manager.allocator.release(root, r1)
        assert root.units_held(r1.rid) == 1
        assert r1.remaining == 1


class TestCancelWait:
    """Verify unlinking a waiter."""

    def test_cancel_wait_removes_from_queue(self) -> None:
        """The waiter leaves the queue; nothing else changes."""
        manager = _contended()
        b = manager.process("B")
        manager.allocator.cancel_wait(b)
        assert manager.resource("R1").waiters == []

    def test_cancel_wait_ignores_ready_process(self) -> None:
        """A process that is not blocked has nothing to cancel."""
        manager = Manager()
        manager.allocator.cancel_wait(manager.running)
        assert all(r.waiters == [] for r in manager.resources())
