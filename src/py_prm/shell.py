"""The shell — command interpreter for the process and resource manager.

The shell reads a command line, hands manager commands to
``Manager.execute`` and renders the result as text:

- a successful command renders ``"<name> is running"``;
- a rejected one renders ``"error"`` (plus the reason in verbose mode);
- a blank line renders as a blank line;
- ``quit`` returns ``Shell.EXIT_SENTINEL`` for the REPL to act on.

Besides the manager commands the shell offers read-only inspection
commands (``ps``, ``pstree``, ``rs``, ``log`` and ``help``) which
never change the simulation.

Design choices:
    - **Returns strings, not prints.**  This keeps the shell fully
      testable; the REPL decides how to display output.
    - **Inspection commands via a dict.**  Manager commands go through
      the parser's closed variant set; everything else is a lookup.
"""

from collections.abc import Callable
from typing import TypeAlias

from py_prm.commands import Blank, Quit, parse_command
from py_prm.errors import CommandError, ErrorKind
from py_prm.logging import LogLevel
from py_prm.manager import CommandResult, Manager

# Type alias for an inspection handler: takes a list of args, returns output.
_Handler: TypeAlias = Callable[[list[str]], str]

RUNNING_TEMPLATE = "{} is running"
QUIT_MESSAGE = "process terminated"
ERROR_MESSAGE = "error"


class Shell:
    """Command interpreter bound to one manager."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(self, *, manager: Manager, verbose: bool = False) -> None:
        """Create a shell attached to a manager.

        Args:
            manager: The simulation to drive.
            verbose: Append the rejection reason to ``error`` lines.

        """
        self._manager = manager
        self._verbose = verbose
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "ps": self._cmd_ps,
            "pstree": self._cmd_pstree,
            "rs": self._cmd_rs,
            "log": self._cmd_log,
        }

    @property
    def manager(self) -> Manager:
        """Return the manager this shell drives."""
        return self._manager

    def execute(self, line: str) -> str:
        """Parse and execute one command line.

        Args:
            line: The raw command line (e.g. ``"cr P1 1"``).

        Returns:
            The rendered output, or ``EXIT_SENTINEL`` for ``quit``.

        """
        words = line.split()
        if words and words[0].lower() in self._commands:
            return self._commands[words[0].lower()](words[1:])

        try:
            command = parse_command(line)
        except CommandError as e:
            return self._render_error(e.kind, e.message)

        match command:
            case Quit():
                return self.EXIT_SENTINEL
            case Blank():
                return ""
            case _:
                return self.render(self._manager.execute(command))

    def render(self, result: CommandResult) -> str:
        """Render a command result as a single line."""
        if result.error is not None:
            return self._render_error(result.error, result.message)
        return RUNNING_TEMPLATE.format(result.running)

    def render_running(self) -> str:
        """Render the currently running process, as printed at start-up."""
        return RUNNING_TEMPLATE.format(self._manager.running.name)

    def _render_error(self, kind: ErrorKind, message: str) -> str:
        if self._verbose:
            return f"{ERROR_MESSAGE}: {kind}: {message}"
        return ERROR_MESSAGE

    # -- Inspection commands --------------------------------------------------

    def _cmd_help(self, _args: list[str]) -> str:
        """List available commands."""
        return (
            "Manager commands: cr <name> <priority>, de <name>, req <resource>, "
            "rel <resource>, to, rio, ioc, init, quit\n"
            "Inspection commands: " + ", ".join(sorted(self._commands))
        )

    def _cmd_ps(self, _args: list[str]) -> str:
        """Show the process table."""
        state = self._manager.snapshot()
        lines = ["PID    PRI  STATE     NAME       HOLDS"]
        lines.extend(
            f"{p['pid']:<6} {p['priority']:<4} {p['state']:<9} {p['name']:<10} "
            f"{' '.join(p['resources']) or '-'}"
            for p in state["processes"]
        )
        return "\n".join(lines)

    def _cmd_pstree(self, _args: list[str]) -> str:
        """Show the process tree (parent-child hierarchy)."""
        procs = {p["name"]: p for p in self._manager.snapshot()["processes"]}
        lines: list[str] = []

        # Stack entries are (name, prefix, is_last, is_root).
        roots = [name for name, p in procs.items() if p["parent"] is None]
        stack = [(root, "", True, True) for root in reversed(roots)]
        while stack:
            name, prefix, is_last, is_root = stack.pop()
            proc = procs[name]
            connector = "" if is_root else ("└── " if is_last else "├── ")
            lines.append(f"{prefix}{connector}{name} ({proc['state']}, priority {proc['priority']})")
            kids: list[str] = proc["children"]
            extension = "" if is_root else ("    " if is_last else "│   ")
            for i in reversed(range(len(kids))):
                stack.append((kids[i], prefix + extension, i == len(kids) - 1, False))
        return "\n".join(lines)

    def _cmd_rs(self, _args: list[str]) -> str:
        """Show resources, free units and wait queues."""
        lines = ["RID  RESOURCE   FREE  WAITING"]
        lines.extend(
            f"{r['rid']:<4} {r['name']:<10} {r['remaining']:<5} {' '.join(r['waiting']) or '-'}"
            for r in self._manager.snapshot()["resources"]
        )
        return "\n".join(lines)

    def _cmd_log(self, args: list[str]) -> str:
        """Show audit log entries, optionally at or above a level."""
        min_level: LogLevel | None = None
        if args:
            try:
                min_level = LogLevel[args[0].upper()]
            except KeyError:
                return f"Usage: log [{'|'.join(level.name.lower() for level in LogLevel)}]"
        entries = self._manager.logger.filter(min_level=min_level)
        return "\n".join(str(e) for e in entries) if entries else "No log entries."
