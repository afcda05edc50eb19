"""py-prm — a textbook process and resource manager simulator.

Re-exports the main entry points so callers can write::

    from py_prm import Manager, Shell, parse_command
"""

from py_prm.commands import parse_command
from py_prm.config import ManagerConfig
from py_prm.errors import CommandError, ErrorKind, ManagerError, SchedulerError
from py_prm.manager import CommandResult, Manager
from py_prm.shell import Shell

__all__ = [
    "CommandError",
    "CommandResult",
    "ErrorKind",
    "Manager",
    "ManagerConfig",
    "ManagerError",
    "SchedulerError",
    "Shell",
    "parse_command",
]
