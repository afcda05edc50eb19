"""Process tree manager — creation and recursive destruction.

Every process except the root is created by the process that was
running at the time, which becomes its parent.  Destroying a process
destroys its whole subtree, children first:

1. destroy every child, depth-first, in creation order;
2. unlink the process from the wait queue it is blocked in, if any;
3. release everything it holds, handing units to waiters;
4. drop it from the ready and blocked populations and the name table,
   leaving a DESTROYED tombstone.

The traversal uses an explicit stack of pids instead of recursion, so
a very deep tree cannot exhaust Python's call stack.  Unlinking comes
before releasing so that a process blocked on a resource it already
holds can never be handed its own unit on the way out.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_prm.errors import ErrorKind, ManagerError
from py_prm.logging import LogLevel

if TYPE_CHECKING:
    from collections.abc import Collection

    from py_prm.logging import Logger
    from py_prm.process.pcb import Process
    from py_prm.process.scheduler import Scheduler
    from py_prm.resources.allocator import ResourceAllocator
    from py_prm.store import EntityStore

_SOURCE = "tree"


class ProcessTreeManager:
    """Create children of the running process and tear down subtrees."""

    def __init__(
        self,
        *,
        store: EntityStore,
        scheduler: Scheduler,
        allocator: ResourceAllocator,
        logger: Logger,
        priorities: Collection[int],
    ) -> None:
        """Create a tree manager.

        Args:
            store: Owner of the process table.
            scheduler: Owner of the ready and blocked populations.
            allocator: Used to reclaim resources from destroyed processes.
            logger: Audit log shared with the rest of the manager.
            priorities: Priorities a user-created process may have.

        """
        self._store = store
        self._scheduler = scheduler
        self._allocator = allocator
        self._logger = logger
        self._priorities = frozenset(priorities)

    def create(self, name: str, priority: int, current: Process) -> Process:
        """Create a READY child of *current* and append it to the ready population.

        Raises:
            ManagerError: INVALID_PRIORITY for a priority outside the
                allowed set, DUPLICATE_NAME if *name* is taken.

        """
        if priority not in self._priorities:
            msg = f"priority {priority} is not one of {sorted(self._priorities)}"
            raise ManagerError(ErrorKind.INVALID_PRIORITY, msg)
        process = self._store.create_process(name, priority, current.pid)
        self._scheduler.admit(process)
        return process

    def subtree(self, process: Process) -> list[int]:
        """Return the pids of *process* and its descendants, children first.

        The order is a post-order walk visiting siblings in creation
        order, which is the order ``destroy`` tears them down in.
        """
        preorder: list[int] = []
        stack = [process.pid]
        while stack:
            pid = stack.pop()
            preorder.append(pid)
            stack.extend(self._store.process(pid).children)
        preorder.reverse()
        return preorder

    def destroy(self, name: str) -> list[str]:
        """Destroy the named process and everything below it.

        Returns:
            Names of the destroyed processes, in teardown order.

        Raises:
            ManagerError: NOT_FOUND for an unknown name, FORBIDDEN for
                the root process.

        """
        target = self._store.lookup_process(name)
        if target.pid == self._store.root.pid:
            msg = f"cannot destroy the root process '{name}'"
            raise ManagerError(ErrorKind.FORBIDDEN, msg)

        destroyed: list[str] = []
        for pid in self.subtree(target):
            process = self._store.process(pid)
            self._teardown(process)
            destroyed.append(process.name)

        self._logger.log(
            LogLevel.INFO,
            f"destroyed {name} and {len(destroyed) - 1} descendant(s)",
            source=_SOURCE,
            pid=target.pid,
        )
        return destroyed

    def _teardown(self, process: Process) -> None:
        self._allocator.cancel_wait(process)
        self._allocator.release_all(process)
        self._scheduler.discard(process)
        process.destroy()
        self._store.remove_process(process.pid)
        self._logger.log(
            LogLevel.DEBUG, f"tore down {process.name}", source=_SOURCE, pid=process.pid
        )
