"""Resource Control Block (RCB).

A resource is a counting pool of identical units with a FIFO wait
queue, in effect a counting semaphore whose holders are processes.
With one unit it behaves like a mutex.

The RCB only keeps the books.  Deciding who gets a unit, and moving
processes between the ready and blocked populations, is the
allocator's job.
"""

from collections import deque


class Resource:
    """A countable resource with a FIFO wait queue."""

    def __init__(self, *, rid: int, name: str, units: int) -> None:
        """Create a resource with all of its units available.

        Args:
            rid: Identifier assigned by the entity store.
            name: Unique name the user refers to the resource by.
            units: Initial (and total) number of units.

        Raises:
            ValueError: If units is negative.

        """
        if units < 0:
            msg = f"Resource units must be non-negative, got {units}"
            raise ValueError(msg)
        self._rid = rid
        self._name = name
        self._initial = units
        self._remaining = units
        self._wait_queue: deque[int] = deque()

    @property
    def rid(self) -> int:
        """Return the unique resource identifier."""
        return self._rid

    @property
    def name(self) -> str:
        """Return the resource name."""
        return self._name

    @property
    def initial(self) -> int:
        """Return the number of units the resource was created with."""
        return self._initial

    @property
    def remaining(self) -> int:
        """Return the number of free units."""
        return self._remaining

    @property
    def waiters(self) -> list[int]:
        """Return PIDs waiting for a unit (in FIFO order)."""
        return list(self._wait_queue)

    @property
    def wait_queue_size(self) -> int:
        """Return the number of processes waiting."""
        return len(self._wait_queue)

    def take(self) -> bool:
        """Take one free unit.

        Returns:
            True if a unit was taken, False if none were free.

        """
        if self._remaining < 1:
            return False
        self._remaining -= 1
        return True

    def give_back(self) -> None:
        """Return one unit to the free pool."""
        self._remaining += 1

    def enqueue(self, pid: int) -> None:
        """Append a waiter to the tail of the queue."""
        self._wait_queue.append(pid)

    def dequeue(self) -> int | None:
        """Pop the head waiter, or return None if nobody waits."""
        if not self._wait_queue:
            return None
        return self._wait_queue.popleft()

    def remove_waiter(self, pid: int) -> None:
        """Unlink a waiter from any position in the queue.

        Raises:
            ValueError: If *pid* is not waiting on this resource.

        """
        try:
            self._wait_queue.remove(pid)
        except ValueError:
            msg = f"Process {pid} is not waiting on resource '{self._name}'"
            raise ValueError(msg) from None

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        return (
            f"Resource(rid={self._rid}, name={self._name!r}, "
            f"remaining={self._remaining}, waiters={list(self._wait_queue)})"
        )
