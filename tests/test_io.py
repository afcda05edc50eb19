"""Tests for the I/O subsystem.

Requesting I/O always blocks; only a completion event wakes the oldest
waiter.
"""

import pytest

from py_prm.commands import Create, IOCompletion, Request, RequestIO, Timeout
from py_prm.errors import ErrorKind, ManagerError
from py_prm.manager import Manager
from py_prm.process import ProcessState

LOW = 1
HIGH = 2


def _with_io_waiter() -> Manager:
    """A is blocked on I/O; Init is running."""
    manager = Manager()
    manager.execute(Create(name="A", priority=LOW))
    manager.execute(RequestIO())
    return manager


class TestRequestIO:
    """Verify that I/O requests block."""

    def test_request_blocks_current(self) -> None:
        """The requester is parked on the device."""
        manager = _with_io_waiter()
        a = manager.process("A")
        assert a.state is ProcessState.BLOCKED
        assert a.blocked_on == manager.resource("IO").rid
        assert manager.io.waiters == [a.pid]
        assert manager.running.name == "Init"

    def test_request_blocks_in_fifo_order(self) -> None:
        """Waiters line up in the order they asked."""
        manager = Manager()
        manager.execute(Create(name="A", priority=LOW))
        manager.execute(Create(name="B", priority=LOW))
        manager.execute(RequestIO())
        manager.execute(RequestIO())
        a, b = manager.process("A"), manager.process("B")
        assert manager.io.waiters == [a.pid, b.pid]

    def test_root_alone_cannot_wait(self) -> None:
        """The last candidate for the CPU may not block on I/O."""
        manager = Manager()
        with pytest.raises(ManagerError) as exc_info:
            manager.io.request_io(manager.running)
        assert exc_info.value.kind is ErrorKind.NO_READY_PROCESS
        assert manager.io.waiters == []

    def test_generic_request_refused(self) -> None:
        """``req IO`` is not a way onto the device."""
        manager = Manager()
        manager.execute(Create(name="A", priority=LOW))
        result = manager.execute(Request(resource="IO"))
        assert result.error is ErrorKind.FORBIDDEN
        assert manager.running.name == "A"


class TestIOCompletion:
    """Verify completion events."""

    def test_completion_wakes_head(self) -> None:
        """The oldest waiter becomes ready and, being more important, runs."""
        manager = _with_io_waiter()
        woken = manager.io.io_completion()
        assert woken.name == "A"
        assert woken.state is ProcessState.READY
        assert woken.blocked_on is None
        assert manager.io.waiters == []

    def test_completion_without_waiters(self) -> None:
        """Nobody waiting is NO_WAITERS."""
        with pytest.raises(ManagerError) as exc_info:
            Manager().io.io_completion()
        assert exc_info.value.kind is ErrorKind.NO_WAITERS

    def test_completion_reschedules(self) -> None:
        """Through the manager, the woken process gets the CPU back."""
        manager = _with_io_waiter()
        assert manager.execute(IOCompletion()).running == "A"

    def test_woken_process_rejoins_tail(self) -> None:
        """A woken equal-priority process does not jump the queue."""
        manager = Manager()
        manager.execute(Create(name="A", priority=LOW))
        manager.execute(Create(name="B", priority=LOW))
        manager.execute(RequestIO())
        # B runs now; A completes and queues behind B.
        result = manager.execute(IOCompletion())
        assert result.running == "B"
        manager.execute(Timeout())
        assert manager.running.name == "A"

    def test_io_units_never_appear(self) -> None:
        """Completions move no units."""
        manager = _with_io_waiter()
        manager.execute(IOCompletion())
        assert manager.resource("IO").remaining == 0
        assert manager.process("A").resources == []

    def test_high_priority_waiter_preempts_on_completion(self) -> None:
        """Completion can hand the CPU to a more important process."""
        manager = Manager()
        manager.execute(Create(name="A", priority=LOW))
        manager.execute(Create(name="B", priority=HIGH))
        manager.execute(RequestIO())
        assert manager.running.name == "A"
        assert manager.execute(IOCompletion()).running == "B"
