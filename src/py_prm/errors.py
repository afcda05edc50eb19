"""Error taxonomy for the process and resource manager.

Components raise ``ManagerError`` carrying an ``ErrorKind``.  The
manager catches it at its single entry point and turns it into a
``CommandResult`` value, so callers branch on the kind instead of
parsing message text.

Every ``ManagerError`` is recoverable: components validate before they
mutate, so a rejected command leaves the simulation untouched.

``SchedulerError`` is different: it means the scheduler found nobody
to run, which normal input can never cause.  It is a bug, not a user
mistake, and it propagates.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """The closed set of reasons a command can be rejected."""

    INVALID_ARGUMENTS = "invalid_arguments"
    INVALID_PRIORITY = "invalid_priority"
    NOT_FOUND = "not_found"
    NO_WAITERS = "no_waiters"
    INVALID_COMMAND = "invalid_command"
    DUPLICATE_NAME = "duplicate_name"
    FORBIDDEN = "forbidden"
    NOT_HELD = "not_held"
    NO_READY_PROCESS = "no_ready_process"


class ManagerError(Exception):
    """Raised when a command cannot be carried out."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        """Create an error of the given kind.

        Args:
            kind: Which taxonomy bucket this failure belongs to.
            message: Human-readable detail.

        """
        super().__init__(message)
        self.kind = kind

    @property
    def message(self) -> str:
        """Return the human-readable detail."""
        return str(self)


class CommandError(ManagerError):
    """Raised when a command line cannot be parsed."""


class SchedulerError(RuntimeError):
    """Raise when the ready population is empty at selection time."""
