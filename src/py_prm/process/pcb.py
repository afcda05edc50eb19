"""Process Control Block (PCB).

The PCB is everything the manager knows about one simulated process:
its id, name, priority, state, its place in the creation tree, the
resource units it holds and, while blocked, the resource it waits on.

Processes follow a strict state machine.  Each transition method
(dispatch, preempt, block, wake, destroy) enforces that the process is
in the correct source state before moving it.

State machine::

    READY ⇄ RUNNING
      ↑       ↓
      └── BLOCKED

    any live state → DESTROYED (tombstone)

Tree links are plain integer ids into the entity store, never object
references, so a PCB owns nothing but its own fields.
"""

from __future__ import annotations

from enum import StrEnum


class ProcessState(StrEnum):
    """Lifecycle states of a simulated process.

    - READY: eligible for the CPU, sitting in the ready population.
    - RUNNING: the single process currently holding the CPU.
    - BLOCKED: waiting in one resource's wait queue.
    - DESTROYED: torn down; kept only so stale references are detectable.
    """

    READY = "ready"
    RUNNING = "running"
    BLOCKED = "blocked"
    DESTROYED = "destroyed"


class Process:
    """A simulated process (the Process Control Block)."""

    def __init__(
        self,
        *,
        pid: int,
        name: str,
        priority: int,
        parent_pid: int | None = None,
    ) -> None:
        """Create a new process in the READY state.

        Args:
            pid: Identifier assigned by the entity store.
            name: Unique name the user refers to the process by.
            priority: Scheduling priority (higher = more important).
            parent_pid: PID of the creating process, None for the root.

        """
        self._pid = pid
        self._name = name
        self._priority = priority
        self._parent_pid = parent_pid
        self._state = ProcessState.READY
        self._children: list[int] = []
        # One entry per unit held; a resource may appear more than once.
        self._resources: list[int] = []
        self._blocked_on: int | None = None

    @property
    def pid(self) -> int:
        """Return the unique process identifier."""
        return self._pid

    @property
    def name(self) -> str:
        """Return the process name."""
        return self._name

    @property
    def priority(self) -> int:
        """Return the scheduling priority."""
        return self._priority

    @property
    def state(self) -> ProcessState:
        """Return the current process state."""
        return self._state

    @property
    def parent_pid(self) -> int | None:
        """Return the parent's PID, or None for the root."""
        return self._parent_pid

    @property
    def children(self) -> list[int]:
        """Return child PIDs in creation order."""
        return list(self._children)

    @property
    def resources(self) -> list[int]:
        """Return the RIDs held, one entry per unit."""
        return list(self._resources)

    @property
    def blocked_on(self) -> int | None:
        """Return the RID whose wait queue holds this process, if blocked."""
        return self._blocked_on

    @property
    def is_destroyed(self) -> bool:
        """Return whether this PCB is a tombstone."""
        return self._state is ProcessState.DESTROYED

    def holds(self, rid: int) -> bool:
        """Return whether at least one unit of *rid* is held."""
        return rid in self._resources

    def units_held(self, rid: int) -> int:
        """Return how many units of *rid* are held."""
        return self._resources.count(rid)

    # -- Tree and holdings bookkeeping ----------------------------------------

    def add_child(self, pid: int) -> None:
        """Record a newly created child."""
        self._children.append(pid)

    def remove_child(self, pid: int) -> None:
        """Forget a destroyed child."""
        self._children.remove(pid)

    def grant(self, rid: int) -> None:
        """Record one more unit of *rid*."""
        self._resources.append(rid)

    def surrender(self, rid: int) -> None:
        """Drop a single unit of *rid*.

        Raises:
            ValueError: If no unit of *rid* is held.

        """
        if rid not in self._resources:
            msg = f"Process {self._pid} holds no unit of resource {rid}"
            raise ValueError(msg)
        self._resources.remove(rid)

    # -- State transitions ----------------------------------------------------

    def _transition(self, action: str, expected: ProcessState, target: ProcessState) -> None:
        """Enforce a state transition.

        Args:
            action: Name of the transition (for error messages).
            expected: The state the process must be in.
            target: The state to move to.

        Raises:
            RuntimeError: If the process is not in the expected state.

        """
        if self._state is not expected:
            msg = f"Cannot {action}: process {self._pid} is {self._state}, expected {expected}"
            raise RuntimeError(msg)
        self._state = target

    def dispatch(self) -> None:
        """Transition READY → RUNNING. Give the process the CPU."""
        self._transition("dispatch", ProcessState.READY, ProcessState.RUNNING)

    def preempt(self) -> None:
        """Transition RUNNING → READY. Hand the CPU back to the scheduler."""
        self._transition("preempt", ProcessState.RUNNING, ProcessState.READY)

    def block(self, rid: int) -> None:
        """Move a READY or RUNNING process to BLOCKED on resource *rid*.

        Raises:
            RuntimeError: If the process is already blocked or destroyed.

        """
        if self._state not in {ProcessState.READY, ProcessState.RUNNING}:
            msg = f"Cannot block: process {self._pid} is {self._state}"
            raise RuntimeError(msg)
        self._state = ProcessState.BLOCKED
        self._blocked_on = rid

    def wake(self) -> None:
        """Transition BLOCKED → READY. The awaited unit or event arrived."""
        self._transition("wake", ProcessState.BLOCKED, ProcessState.READY)
        self._blocked_on = None

    def destroy(self) -> None:
        """Turn the PCB into a tombstone.

        Holdings and wait-queue membership must already have been
        cleared by the tree manager.

        Raises:
            RuntimeError: If the process is already destroyed or still
                holds resources.

        """
        if self._state is ProcessState.DESTROYED:
            msg = f"Cannot destroy: process {self._pid} is already destroyed"
            raise RuntimeError(msg)
        if self._resources:
            msg = f"Cannot destroy: process {self._pid} still holds {self._resources}"
            raise RuntimeError(msg)
        self._state = ProcessState.DESTROYED
        self._blocked_on = None

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return (
            f"Process(pid={self._pid}, name={self._name!r}, "
            f"priority={self._priority}, state={self._state})"
        )
