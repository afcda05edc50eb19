"""Entity store — the process table and the resource table.

The store owns every PCB and RCB.  Everything else refers to them by
integer id, so the creation tree is just ids pointing into the process
table.  Names are a second index on top: users talk about ``P1`` and
``R2``, the rest of the manager talks about pids and rids.

Identifiers come from per-store counters that ``reset`` rewinds, and two
simulations never share a counter.
"""

from __future__ import annotations

from itertools import count

from py_prm.config import ManagerConfig
from py_prm.errors import ErrorKind, ManagerError
from py_prm.logging import Logger, LogLevel
from py_prm.process.pcb import Process
from py_prm.resources.rcb import Resource

_SOURCE = "store"


class EntityStore:
    """Process and resource tables with name lookup."""

    def __init__(self, *, config: ManagerConfig, logger: Logger) -> None:
        """Create an empty store; call ``reset`` to seed it.

        Args:
            config: Resource set, root process and I/O device settings.
            logger: Audit log shared with the rest of the manager.

        """
        self._config = config
        self._logger = logger
        self._pids = count()
        self._rids = count(start=1)
        self._processes: dict[int, Process] = {}
        self._process_names: dict[str, int] = {}
        self._resources: dict[int, Resource] = {}
        self._resource_names: dict[str, int] = {}
        self._root_pid: int | None = None
        self._io_rid: int | None = None

    @property
    def root(self) -> Process:
        """Return the root process."""
        if self._root_pid is None:
            msg = "Entity store has not been reset"
            raise RuntimeError(msg)
        return self._processes[self._root_pid]

    @property
    def io(self) -> Resource:
        """Return the I/O device resource."""
        if self._io_rid is None:
            msg = "Entity store has not been reset"
            raise RuntimeError(msg)
        return self._resources[self._io_rid]

    def reset(self) -> Process:
        """Wipe both tables and seed the initial universe.

        Registers the configured resources, then the I/O device, then
        the root process in the RUNNING state.

        Returns:
            The new root process.

        """
        self._pids = count()
        self._rids = count(start=1)
        self._processes.clear()
        self._process_names.clear()
        self._resources.clear()
        self._resource_names.clear()

        for name, units in self._config.resources:
            self._register_resource(name, units)
        self._io_rid = self._register_resource(self._config.io_name, 0).rid

        root = self.create_process(self._config.root_name, self._config.root_priority, None)
        root.dispatch()
        self._root_pid = root.pid
        return root

    def _register_resource(self, name: str, units: int) -> Resource:
        resource = Resource(rid=next(self._rids), name=name, units=units)
        self._resources[resource.rid] = resource
        self._resource_names[name] = resource.rid
        self._logger.log(
            LogLevel.DEBUG,
            f"registered resource {name} (rid={resource.rid}, units={units})",
            source=_SOURCE,
        )
        return resource

    # -- Processes ------------------------------------------------------------

    def has_process(self, name: str) -> bool:
        """Return whether a live process is registered under *name*."""
        return name in self._process_names

    def create_process(self, name: str, priority: int, parent_pid: int | None) -> Process:
        """Construct and register a READY process.

        The new process is appended to its parent's child list.

        Args:
            name: Unique process name.
            priority: Scheduling priority.
            parent_pid: Creating process, or None for the root.

        Returns:
            The new process.

        Raises:
            ManagerError: DUPLICATE_NAME if *name* is taken, NOT_FOUND
                if the parent is not a live process.

        """
        if name in self._process_names:
            msg = f"process '{name}' already exists"
            raise ManagerError(ErrorKind.DUPLICATE_NAME, msg)
        parent = self.process(parent_pid) if parent_pid is not None else None
        process = Process(pid=next(self._pids), name=name, priority=priority, parent_pid=parent_pid)
        self._processes[process.pid] = process
        self._process_names[name] = process.pid
        if parent is not None:
            parent.add_child(process.pid)
        self._logger.log(
            LogLevel.INFO,
            f"created {name} (pid={process.pid}, priority={priority}, parent={parent_pid})",
            source=_SOURCE,
            pid=process.pid,
        )
        return process

    def process(self, pid: int) -> Process:
        """Return the live process with the given pid.

        Raises:
            ManagerError: NOT_FOUND for unknown or destroyed pids.

        """
        process = self._processes.get(pid)
        if process is None or process.is_destroyed:
            msg = f"no process with pid {pid}"
            raise ManagerError(ErrorKind.NOT_FOUND, msg)
        return process

    def lookup_process(self, name: str) -> Process:
        """Return the live process registered under *name*.

        Raises:
            ManagerError: NOT_FOUND if the name is unregistered.

        """
        pid = self._process_names.get(name)
        if pid is None:
            msg = f"process '{name}' does not exist"
            raise ManagerError(ErrorKind.NOT_FOUND, msg)
        return self._processes[pid]

    def processes(self) -> list[Process]:
        """Return live processes in pid order."""
        return [self._processes[pid] for pid in sorted(self._process_names.values())]

    def remove_process(self, pid: int) -> None:
        """Unregister a torn-down process and unlink it from its parent.

        The PCB must already be a tombstone.

        Raises:
            RuntimeError: If the process has not been destroyed first.

        """
        process = self._processes[pid]
        if not process.is_destroyed:
            msg = f"Cannot remove live process {pid}"
            raise RuntimeError(msg)
        del self._process_names[process.name]
        del self._processes[pid]
        if process.parent_pid is not None and process.parent_pid in self._processes:
            parent = self._processes[process.parent_pid]
            if pid in parent.children:
                parent.remove_child(pid)

    # -- Resources ------------------------------------------------------------

    def resource(self, rid: int) -> Resource:
        """Return the resource with the given rid.

        Raises:
            ManagerError: NOT_FOUND for unknown rids.

        """
        resource = self._resources.get(rid)
        if resource is None:
            msg = f"no resource with rid {rid}"
            raise ManagerError(ErrorKind.NOT_FOUND, msg)
        return resource

    def lookup_resource(self, name: str) -> Resource:
        """Return the resource registered under *name*.

        Raises:
            ManagerError: NOT_FOUND if the name is unregistered.

        """
        rid = self._resource_names.get(name)
        if rid is None:
            msg = f"resource '{name}' does not exist"
            raise ManagerError(ErrorKind.NOT_FOUND, msg)
        return self._resources[rid]

    def resources(self) -> list[Resource]:
        """Return every resource, the I/O device included, in rid order."""
        return [self._resources[rid] for rid in sorted(self._resources)]
