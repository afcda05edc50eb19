"""Priority scheduler — decides which READY process gets the CPU next.

The scheduler owns the two process populations and the running slot:

- the **ready population**, an ordered sequence of pids.  The running
  process keeps its place in it, so a process that is merely demoted
  by a reschedule does not lose its turn to an equal-priority newcomer;
- the **blocked population**, processes parked in some wait queue;
- the **running slot**, the one process holding the CPU.

Selection is delegated to a ``SchedulingPolicy``.  ``PriorityPolicy``
scans the ready population front to back and keeps the first process
with the strictly greatest priority, so ties go to whoever entered the
ready population earliest.  There is no randomness: the same population
always yields the same choice.

``timeout`` is the only way a process moves to the back of the line
without blocking, giving round-robin within a priority band.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from py_prm.errors import SchedulerError
from py_prm.logging import Logger, LogLevel
from py_prm.process.pcb import Process, ProcessState

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

_SOURCE = "scheduler"


class SchedulingPolicy(Protocol):
    """Interface a selection algorithm must satisfy."""

    def select(self, candidates: Sequence[Process]) -> Process | None:
        """Return the process to run next, or None if there are no candidates."""
        ...  # pragma: no cover


class PriorityPolicy:
    """Highest priority wins; ties go to the earliest in queue order.

    Starvation risk: a priority-1 process never runs while a priority-2
    process is ready.  That is the textbook behaviour being modelled.
    """

    def select(self, candidates: Sequence[Process]) -> Process | None:
        """Return the first process with the strictly greatest priority."""
        best: Process | None = None
        for process in candidates:
            if best is None or process.priority > best.priority:
                best = process
        return best


class Scheduler:
    """Ready/blocked populations, the running slot and the selection step."""

    def __init__(
        self,
        *,
        lookup: Callable[[int], Process],
        logger: Logger,
        policy: SchedulingPolicy | None = None,
    ) -> None:
        """Create an empty scheduler.

        Args:
            lookup: Resolves a pid to its live PCB (the entity store).
            logger: Audit log shared with the rest of the manager.
            policy: Selection algorithm (default ``PriorityPolicy``).

        """
        self._lookup = lookup
        self._logger = logger
        self._policy: SchedulingPolicy = policy if policy is not None else PriorityPolicy()
        self._queue: list[int] = []
        self._blocked: list[int] = []
        self._running: int | None = None

    @property
    def policy(self) -> SchedulingPolicy:
        """Return the active selection policy."""
        return self._policy

    @property
    def running(self) -> Process | None:
        """Return the process in the running slot, if any."""
        return self._lookup(self._running) if self._running is not None else None

    @property
    def ready(self) -> list[Process]:
        """Return READY processes in queue order (the running one excluded)."""
        return [self._lookup(pid) for pid in self._queue if pid != self._running]

    @property
    def blocked(self) -> list[Process]:
        """Return BLOCKED processes in the order they blocked."""
        return [self._lookup(pid) for pid in self._blocked]

    @property
    def queue(self) -> list[int]:
        """Return the ready population, running process included, in order."""
        return list(self._queue)

    def reset(self, root: Process) -> None:
        """Forget everything and install *root* as the running process."""
        self._queue = [root.pid]
        self._blocked = []
        self._running = root.pid

    def admit(self, process: Process) -> None:
        """Append a READY process to the tail of the ready population."""
        self._queue.append(process.pid)

    def block(self, process: Process, rid: int) -> None:
        """Move *process* from the ready population to the blocked one."""
        process.block(rid)
        self._queue.remove(process.pid)
        self._blocked.append(process.pid)
        if self._running == process.pid:
            self._running = None
        self._logger.log(LogLevel.DEBUG, f"{process.name} blocked", source=_SOURCE, pid=process.pid)

    def wake(self, process: Process) -> None:
        """Move *process* from the blocked population to the ready tail."""
        process.wake()
        self._blocked.remove(process.pid)
        self._queue.append(process.pid)
        self._logger.log(LogLevel.DEBUG, f"{process.name} ready", source=_SOURCE, pid=process.pid)

    def discard(self, process: Process) -> None:
        """Drop a process that is being destroyed from every population."""
        if process.pid in self._queue:
            self._queue.remove(process.pid)
        if process.pid in self._blocked:
            self._blocked.remove(process.pid)
        if self._running == process.pid:
            self._running = None

    def would_idle(self, process: Process) -> bool:
        """Return whether blocking *process* would leave nobody to run."""
        return self._queue == [process.pid]

    def reschedule(self) -> Process:
        """Pick the next running process.

        A still-RUNNING process is demoted to READY in place, then the
        policy chooses among the whole ready population.

        Returns:
            The process now in the running slot.

        Raises:
            SchedulerError: If the ready population is empty.

        """
        previous = self._running
        current = self.running
        if current is not None and current.state is ProcessState.RUNNING:
            current.preempt()

        chosen = self._policy.select([self._lookup(pid) for pid in self._queue])
        if chosen is None:
            msg = "Ready population is empty; no process can run"
            raise SchedulerError(msg)
        chosen.dispatch()
        self._running = chosen.pid
        if chosen.pid != previous:
            self._logger.log(
                LogLevel.DEBUG,
                f"switch to {chosen.name} (priority {chosen.priority})",
                source=_SOURCE,
                pid=chosen.pid,
            )
        return chosen

    def timeout(self) -> Process:
        """Send the running process to the back of the line, then reschedule.

        Returns:
            The process now in the running slot.

        """
        current = self.running
        if current is not None:
            self._queue.remove(current.pid)
            self._queue.append(current.pid)
            if current.state is ProcessState.RUNNING:
                current.preempt()
            self._logger.log(
                LogLevel.DEBUG, f"{current.name} timed out", source=_SOURCE, pid=current.pid
            )
        return self.reschedule()
