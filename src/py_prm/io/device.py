"""The shared I/O device.

The device is an ordinary resource in the entity store (same id space,
same FIFO wait queue) that never has a free unit.  Asking for I/O
therefore always blocks, and the only thing that wakes a waiter is an
explicit completion event.  Completions serve waiters strictly in the
order they asked.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_prm.errors import ErrorKind, ManagerError
from py_prm.logging import LogLevel

if TYPE_CHECKING:
    from py_prm.logging import Logger
    from py_prm.process.pcb import Process
    from py_prm.process.scheduler import Scheduler
    from py_prm.store import EntityStore

_SOURCE = "io"


class IOSubsystem:
    """Request and completion operations on the I/O device."""

    def __init__(self, *, store: EntityStore, scheduler: Scheduler, logger: Logger) -> None:
        """Create the subsystem over the store's I/O resource."""
        self._store = store
        self._scheduler = scheduler
        self._logger = logger

    @property
    def waiters(self) -> list[int]:
        """Return PIDs waiting for I/O, in FIFO order."""
        return self._store.io.waiters

    def request_io(self, process: Process) -> None:
        """Block *process* until an I/O completion wakes it.

        Raises:
            ManagerError: NO_READY_PROCESS if *process* is the only one
                that could run.

        """
        if self._scheduler.would_idle(process):
            msg = f"{process.name} would wait for I/O with no other process ready"
            raise ManagerError(ErrorKind.NO_READY_PROCESS, msg)
        device = self._store.io
        self._scheduler.block(process, device.rid)
        device.enqueue(process.pid)
        self._logger.log(
            LogLevel.INFO,
            f"{process.name} waits for I/O (queue position {device.wait_queue_size})",
            source=_SOURCE,
            pid=process.pid,
        )

    def io_completion(self) -> Process:
        """Finish the oldest outstanding I/O request.

        Returns:
            The process that was woken.

        Raises:
            ManagerError: NO_WAITERS if nobody is waiting for I/O.

        """
        pid = self._store.io.dequeue()
        if pid is None:
            msg = "no process is waiting for I/O"
            raise ManagerError(ErrorKind.NO_WAITERS, msg)
        process = self._store.process(pid)
        self._scheduler.wake(process)
        self._logger.log(
            LogLevel.INFO, f"I/O completed for {process.name}", source=_SOURCE, pid=process.pid
        )
        return process
