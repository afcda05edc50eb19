"""Manager configuration.

The defaults reproduce the classic course setup: four single-unit
resources ``R1``..``R4``, a root process ``Init`` at priority 0, user
priorities 1 and 2, and a zero-unit ``IO`` device.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from py_prm.logging import LogLevel

DEFAULT_RESOURCES: tuple[tuple[str, int], ...] = (
    ("R1", 1),
    ("R2", 1),
    ("R3", 1),
    ("R4", 1),
)
DEFAULT_ROOT_NAME = "Init"
DEFAULT_ROOT_PRIORITY = 0
DEFAULT_IO_NAME = "IO"
DEFAULT_PRIORITIES: frozenset[int] = frozenset({1, 2})


@dataclass(frozen=True)
class ManagerConfig:
    """Everything ``init`` needs to seed a fresh simulation.

    Attributes:
        resources: ``(name, units)`` pairs registered at every reset.
        root_name: Name of the root process.
        root_priority: Priority of the root process.
        io_name: Name of the I/O device resource.
        priorities: Priorities a user-created process may have.
        log_level: Minimum level recorded by the audit log.

    """

    resources: tuple[tuple[str, int], ...] = DEFAULT_RESOURCES
    root_name: str = DEFAULT_ROOT_NAME
    root_priority: int = DEFAULT_ROOT_PRIORITY
    io_name: str = DEFAULT_IO_NAME
    priorities: frozenset[int] = field(default=DEFAULT_PRIORITIES)
    log_level: LogLevel = LogLevel.DEBUG

    def __post_init__(self) -> None:
        """Reject configurations that would break the manager's invariants.

        Raises:
            ValueError: On negative units, duplicate resource names, a
                resource named like the I/O device, no user priorities,
                or a root priority that could outrank a user process.

        """
        names = [name for name, _units in self.resources]
        if len(set(names)) != len(names):
            msg = f"Duplicate resource names in {names}"
            raise ValueError(msg)
        if self.io_name in names:
            msg = f"Resource name {self.io_name!r} is reserved for the I/O device"
            raise ValueError(msg)
        for name, units in self.resources:
            if units < 0:
                msg = f"Resource {name!r} must have non-negative units, got {units}"
                raise ValueError(msg)
        if not self.priorities:
            msg = "At least one user priority is required"
            raise ValueError(msg)
        if self.root_priority >= min(self.priorities):
            msg = (
                f"Root priority ({self.root_priority}) must be below every "
                f"user priority ({sorted(self.priorities)})"
            )
            raise ValueError(msg)
