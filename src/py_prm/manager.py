"""The manager — one self-contained process and resource simulation.

The manager owns one instance of every component and is the only entry
point callers need:

    store ─┬─ scheduler ─┬─ allocator ── tree
           │             └─ io
           └─ logger (shared by all)

``execute`` takes a parsed command, lets the matching component
validate and mutate, reselects the running process, and returns a
``CommandResult``.  Components signal failure by raising
``ManagerError``; the manager turns that into a result value so
callers branch on ``result.error`` rather than catching exceptions.
Because every component validates before it mutates, a failed command
leaves the simulation exactly as it was.

Commands are serialized with a lock, so one manager may be shared by
concurrent callers such as the web API's request threads.

There are no module-level globals: each ``Manager`` is an independent
simulation with its own id counters.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from py_prm.commands import (
    Create,
    Destroy,
    Init,
    IOCompletion,
    ManagerCommand,
    Release,
    Request,
    RequestIO,
    Timeout,
)
from py_prm.config import ManagerConfig
from py_prm.errors import ErrorKind, ManagerError
from py_prm.io.device import IOSubsystem
from py_prm.logging import Logger, LogLevel
from py_prm.process.pcb import Process, ProcessState
from py_prm.process.scheduler import Scheduler
from py_prm.process.tree import ProcessTreeManager
from py_prm.resources.allocator import ResourceAllocator
from py_prm.resources.rcb import Resource
from py_prm.store import EntityStore

_SOURCE = "manager"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command.

    Exactly one of ``running`` and ``error`` is set.

    Attributes:
        running: Name of the process running after a successful command.
        error: Why the command was rejected.
        message: Human-readable detail for a rejection.

    """

    running: str | None = None
    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        """Return whether the command succeeded."""
        return self.error is None

    @classmethod
    def success(cls, running: Process) -> CommandResult:
        """Build the result of a successful command."""
        return cls(running=running.name)

    @classmethod
    def failure(cls, error: ManagerError) -> CommandResult:
        """Build the result of a rejected command."""
        return cls(error=error.kind, message=error.message)


class Manager:
    """Process tree, resources and scheduler behind one entry point."""

    def __init__(self, *, config: ManagerConfig | None = None) -> None:
        """Create a manager and seed the initial simulation.

        Args:
            config: Resource set, root process and priorities
                (defaults to ``ManagerConfig()``).

        """
        self._config = config if config is not None else ManagerConfig()
        self._lock = threading.Lock()
        self._logger = Logger(min_level=self._config.log_level)
        self._store = EntityStore(config=self._config, logger=self._logger)
        self._scheduler = Scheduler(lookup=self._store.process, logger=self._logger)
        self._allocator = ResourceAllocator(
            store=self._store, scheduler=self._scheduler, logger=self._logger
        )
        self._tree = ProcessTreeManager(
            store=self._store,
            scheduler=self._scheduler,
            allocator=self._allocator,
            logger=self._logger,
            priorities=self._config.priorities,
        )
        self._io = IOSubsystem(store=self._store, scheduler=self._scheduler, logger=self._logger)
        self._commands_run = 0
        self._reset()

    # -- Subsystem access -----------------------------------------------------

    @property
    def config(self) -> ManagerConfig:
        """Return the configuration the manager was built with."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the audit log."""
        return self._logger

    @property
    def store(self) -> EntityStore:
        """Return the entity store."""
        return self._store

    @property
    def scheduler(self) -> Scheduler:
        """Return the scheduler."""
        return self._scheduler

    @property
    def allocator(self) -> ResourceAllocator:
        """Return the resource allocator."""
        return self._allocator

    @property
    def tree(self) -> ProcessTreeManager:
        """Return the process tree manager."""
        return self._tree

    @property
    def io(self) -> IOSubsystem:
        """Return the I/O subsystem."""
        return self._io

    @property
    def commands_run(self) -> int:
        """Return how many commands have been executed since the last reset."""
        return self._commands_run

    # -- Entry point ----------------------------------------------------------

    def execute(self, command: ManagerCommand) -> CommandResult:
        """Run one command to completion.

        Args:
            command: A parsed command variant.

        Returns:
            The running process after the command, or the rejection.

        Raises:
            SchedulerError: If the scheduler ends up with nothing to run,
                which indicates a bug rather than bad input.

        """
        with self._lock:
            if isinstance(command, Init):
                return CommandResult.success(self._reset())
            self._commands_run += 1
            try:
                running = self._dispatch(command)
            except ManagerError as e:
                self._logger.log(
                    LogLevel.WARNING, f"{command!r} rejected: {e.message}", source=_SOURCE
                )
                return CommandResult.failure(e)
            self._logger.log(
                LogLevel.INFO, f"{command!r} -> {running.name} running", source=_SOURCE
            )
            return CommandResult.success(running)

    def _dispatch(self, command: ManagerCommand) -> Process:
        current = self._current()
        match command:
            case Create(name=name, priority=priority):
                self._tree.create(name, priority, current)
            case Destroy(name=name):
                self._tree.destroy(name)
            case Request(resource=name):
                self._allocator.request(current, self._store.lookup_resource(name))
            case Release(resource=name):
                self._allocator.release(current, self._store.lookup_resource(name))
            case Timeout():
                return self._scheduler.timeout()
            case RequestIO():
                self._io.request_io(current)
            case IOCompletion():
                self._io.io_completion()
            case _:
                msg = f"Unhandled command {command!r}"
                raise TypeError(msg)
        return self._scheduler.reschedule()

    def reset(self) -> Process:
        """Wipe the simulation and seed a fresh one.

        Returns:
            The new root process, which is running.

        """
        with self._lock:
            return self._reset()

    def _reset(self) -> Process:
        self._logger.clear()
        self._commands_run = 0
        root = self._store.reset()
        self._scheduler.reset(root)
        self._logger.log(
            LogLevel.INFO,
            f"initialized: {root.name} running, "
            f"{len(self._config.resources)} resource(s) plus {self._config.io_name}",
            source=_SOURCE,
            pid=root.pid,
        )
        return root

    def _current(self) -> Process:
        running = self._scheduler.running
        if running is None:
            msg = "No process is running"
            raise RuntimeError(msg)
        return running

    # -- Read-only queries ----------------------------------------------------

    @property
    def running(self) -> Process:
        """Return the running process."""
        return self._current()

    @property
    def ready(self) -> list[Process]:
        """Return READY processes in queue order."""
        return self._scheduler.ready

    @property
    def blocked(self) -> list[Process]:
        """Return BLOCKED processes in the order they blocked."""
        return self._scheduler.blocked

    def process(self, name: str) -> Process:
        """Return the live process called *name*.

        Raises:
            ManagerError: NOT_FOUND for an unknown name.

        """
        return self._store.lookup_process(name)

    def resource(self, name: str) -> Resource:
        """Return the resource called *name* (the I/O device included).

        Raises:
            ManagerError: NOT_FOUND for an unknown name.

        """
        return self._store.lookup_resource(name)

    def processes(self) -> list[Process]:
        """Return live processes in pid order."""
        return self._store.processes()

    def resources(self) -> list[Resource]:
        """Return every resource in rid order."""
        return self._store.resources()

    def snapshot(self) -> dict[str, Any]:
        """Return the whole simulation state as JSON-friendly data."""
        with self._lock:
            name_of = {p.pid: p.name for p in self._store.processes()}
            return {
                "running": self._current().name,
                "ready": [p.name for p in self._scheduler.ready],
                "blocked": [p.name for p in self._scheduler.blocked],
                "processes": [
                    {
                        "pid": p.pid,
                        "name": p.name,
                        "priority": p.priority,
                        "state": str(p.state),
                        "parent": name_of.get(p.parent_pid) if p.parent_pid is not None else None,
                        "children": [name_of[c] for c in p.children],
                        "resources": [self._store.resource(r).name for r in p.resources],
                        "blocked_on": (
                            self._store.resource(p.blocked_on).name
                            if p.blocked_on is not None
                            else None
                        ),
                    }
                    for p in self._store.processes()
                ],
                "resources": [
                    {
                        "rid": r.rid,
                        "name": r.name,
                        "remaining": r.remaining,
                        "waiting": [name_of[pid] for pid in r.waiters],
                    }
                    for r in self._store.resources()
                ],
            }

    def check_invariants(self) -> list[str]:
        """Audit the simulation and describe every broken invariant.

        Checks that exactly one process runs, that each process's state
        matches the population it sits in, that blocked processes sit in
        the wait queue they claim, that no resource is overdrawn, and
        that ``remaining + held`` equals each resource's initial units.

        Returns:
            One message per violation; empty when everything is consistent.

        """
        with self._lock:
            problems: list[str] = []
            running = self._scheduler.running
            queue = set(self._scheduler.queue)
            blocked = {p.pid for p in self._scheduler.blocked}

            for process in self._store.processes():
                placements = [
                    process.state is ProcessState.RUNNING and running is process,
                    process.state is ProcessState.READY and process.pid in queue,
                    process.state is ProcessState.BLOCKED and process.pid in blocked,
                ]
                if placements.count(True) != 1:
                    problems.append(f"{process.name} is {process.state} but misplaced")
                if process.state is ProcessState.BLOCKED:
                    rid = process.blocked_on
                    if rid is None or process.pid not in self._store.resource(rid).waiters:
                        problems.append(f"{process.name} is blocked outside any wait queue")

            if running is None or running.state is not ProcessState.RUNNING:
                problems.append("no process is running")
            if queue & blocked:
                problems.append("a process is both ready and blocked")

            held: dict[int, int] = {}
            for process in self._store.processes():
                for rid in process.resources:
                    held[rid] = held.get(rid, 0) + 1
            for resource in self._store.resources():
                if resource.remaining < 0:
                    problems.append(f"{resource.name} has negative units")
                if resource.remaining + held.get(resource.rid, 0) != resource.initial:
                    problems.append(f"{resource.name} units are not conserved")
            return problems
