"""Resource allocator — grants, reclaims and hands off resource units.

Every request and release moves exactly one unit.  A request either
takes a free unit or parks the caller at the tail of the resource's
wait queue.  A release either returns the unit to the pool or, when
somebody is waiting, hands it straight to the head waiter, which
wakes up already holding it.  ``remaining`` never bounces up and down
on a hand-off; the unit simply changes owner.

The allocator validates before it mutates.  A call that raises leaves
the resource, the process and the scheduler exactly as they were.

The I/O device is a resource too, but it is off limits here: its only
way in is ``request_io`` and its only way out is an I/O completion.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_prm.errors import ErrorKind, ManagerError
from py_prm.logging import LogLevel
from py_prm.process.pcb import ProcessState

if TYPE_CHECKING:
    from py_prm.logging import Logger
    from py_prm.process.pcb import Process
    from py_prm.process.scheduler import Scheduler
    from py_prm.resources.rcb import Resource
    from py_prm.store import EntityStore

_SOURCE = "allocator"


class ResourceAllocator:
    """Unit bookkeeping and FIFO wait queues for the registered resources."""

    def __init__(self, *, store: EntityStore, scheduler: Scheduler, logger: Logger) -> None:
        """Create an allocator over the store's resource table.

        Args:
            store: Owner of the process and resource tables.
            scheduler: Owner of the ready and blocked populations.
            logger: Audit log shared with the rest of the manager.

        """
        self._store = store
        self._scheduler = scheduler
        self._logger = logger

    def _require_ordinary(self, resource: Resource) -> None:
        if resource.rid == self._store.io.rid:
            msg = f"'{resource.name}' is the I/O device; use rio/ioc"
            raise ManagerError(ErrorKind.FORBIDDEN, msg)

    def request(self, process: Process, resource: Resource) -> bool:
        """Take one unit of *resource* for *process*, or block it.

        Args:
            process: The requesting (running) process.
            resource: The resource to take a unit from.

        Returns:
            True if a unit was granted, False if the process blocked.

        Raises:
            ManagerError: FORBIDDEN for the I/O device; NO_READY_PROCESS
                if blocking would leave nobody to run.

        """
        self._require_ordinary(resource)
        if resource.remaining < 1 and self._scheduler.would_idle(process):
            msg = f"{process.name} would block on {resource.name} with no other process ready"
            raise ManagerError(ErrorKind.NO_READY_PROCESS, msg)

        if resource.take():
            process.grant(resource.rid)
            self._logger.log(
                LogLevel.DEBUG,
                f"{process.name} took {resource.name} ({resource.remaining} left)",
                source=_SOURCE,
                pid=process.pid,
            )
            return True

        self._scheduler.block(process, resource.rid)
        resource.enqueue(process.pid)
        self._logger.log(
            LogLevel.INFO,
            f"{process.name} waits for {resource.name} "
            f"(queue position {resource.wait_queue_size})",
            source=_SOURCE,
            pid=process.pid,
        )
        return False

    def release(self, process: Process, resource: Resource) -> Process | None:
        """Give back one unit of *resource* held by *process*.

        Args:
            process: The releasing process.
            resource: The resource to return a unit of.

        Returns:
            The waiter that received the unit, or None if it went back
            to the pool.

        Raises:
            ManagerError: FORBIDDEN for the I/O device; NOT_HELD if
                *process* holds no unit of *resource*.

        """
        self._require_ordinary(resource)
        if not process.holds(resource.rid):
            msg = f"{process.name} does not hold {resource.name}"
            raise ManagerError(ErrorKind.NOT_HELD, msg)
        process.surrender(resource.rid)
        return self._hand_off(process, resource)

    def release_all(self, process: Process) -> None:
        """Release every unit *process* holds, waking waiters as units free up."""
        for rid in process.resources:
            process.surrender(rid)
            self._hand_off(process, self._store.resource(rid))

    def cancel_wait(self, process: Process) -> None:
        """Unlink a BLOCKED process from the wait queue it sits in."""
        if process.state is not ProcessState.BLOCKED or process.blocked_on is None:
            return
        resource = self._store.resource(process.blocked_on)
        resource.remove_waiter(process.pid)
        self._logger.log(
            LogLevel.DEBUG,
            f"{process.name} left the {resource.name} queue",
            source=_SOURCE,
            pid=process.pid,
        )

    def _hand_off(self, releaser: Process, resource: Resource) -> Process | None:
        """Pass a freed unit to the head waiter, or back to the pool."""
        pid = resource.dequeue()
        if pid is None:
            resource.give_back()
            self._logger.log(
                LogLevel.DEBUG,
                f"{releaser.name} returned {resource.name} ({resource.remaining} left)",
                source=_SOURCE,
                pid=releaser.pid,
            )
            return None

        waiter = self._store.process(pid)
        self._scheduler.wake(waiter)
        waiter.grant(resource.rid)
        self._logger.log(
            LogLevel.INFO,
            f"{resource.name} handed from {releaser.name} to {waiter.name}",
            source=_SOURCE,
            pid=waiter.pid,
        )
        return waiter
