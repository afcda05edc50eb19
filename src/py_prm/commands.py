"""Command variants and the command-line parser.

A command line is one keyword followed by whitespace-separated
arguments.  Keywords are case-insensitive; names are not.  The parser
turns each line into exactly one member of a closed set of frozen
dataclasses, so everything past this module matches on types instead
of comparing strings.

======  ====================  ===============================
Keyword Arguments             Variant
======  ====================  ===============================
cr      name priority         ``Create``
de      name                  ``Destroy``
req     resource              ``Request``
rel     resource              ``Release``
to      -                     ``Timeout``
rio     -                     ``RequestIO``
ioc     -                     ``IOCompletion``
init    -                     ``Init``
quit    -                     ``Quit``
(blank) -                     ``Blank``
======  ====================  ===============================

``Quit`` and ``Blank`` only mean something to the shell; the manager's
entry point accepts ``ManagerCommand``, which leaves them out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

from py_prm.errors import CommandError, ErrorKind


class CommandType(StrEnum):
    """Keywords understood by the command parser."""

    CREATE = "cr"
    DESTROY = "de"
    REQUEST = "req"
    RELEASE = "rel"
    TIMEOUT = "to"
    REQUEST_IO = "rio"
    IO_COMPLETION = "ioc"
    INIT = "init"
    QUIT = "quit"
    BLANK = ""


@dataclass(frozen=True)
class Create:
    """Create a child of the running process."""

    name: str
    priority: int


@dataclass(frozen=True)
class Destroy:
    """Destroy a process and its subtree."""

    name: str


@dataclass(frozen=True)
class Request:
    """Request one unit of a resource for the running process."""

    resource: str


@dataclass(frozen=True)
class Release:
    """Release one unit of a resource held by the running process."""

    resource: str


@dataclass(frozen=True)
class Timeout:
    """Send the running process to the back of the ready population."""


@dataclass(frozen=True)
class RequestIO:
    """Block the running process on the I/O device."""


@dataclass(frozen=True)
class IOCompletion:
    """Wake the oldest I/O waiter."""


@dataclass(frozen=True)
class Init:
    """Wipe the simulation and seed a fresh one."""


@dataclass(frozen=True)
class Quit:
    """End the session."""


@dataclass(frozen=True)
class Blank:
    """An empty line."""


ManagerCommand: TypeAlias = Create | Destroy | Request | Release | Timeout | RequestIO | IOCompletion | Init
Command: TypeAlias = ManagerCommand | Quit | Blank

_ARITY: dict[CommandType, int] = {
    CommandType.CREATE: 2,
    CommandType.DESTROY: 1,
    CommandType.REQUEST: 1,
    CommandType.RELEASE: 1,
    CommandType.TIMEOUT: 0,
    CommandType.REQUEST_IO: 0,
    CommandType.IO_COMPLETION: 0,
    CommandType.INIT: 0,
    CommandType.QUIT: 0,
}


def command_type(keyword: str) -> CommandType:
    """Map a keyword to its ``CommandType``, ignoring case.

    Raises:
        CommandError: INVALID_COMMAND for an unknown keyword.

    """
    try:
        return CommandType(keyword.lower())
    except ValueError:
        msg = f"unknown command '{keyword}'"
        raise CommandError(ErrorKind.INVALID_COMMAND, msg) from None


def parse_command(line: str) -> Command:
    """Parse one command line.

    Args:
        line: Raw text, e.g. ``"cr P1 1"``.

    Returns:
        The matching command variant.

    Raises:
        CommandError: INVALID_COMMAND for an unknown keyword,
            INVALID_ARGUMENTS for a wrong argument count or a
            non-numeric priority.

    """
    words = line.split()
    if not words:
        return Blank()

    kind = command_type(words[0])
    args = words[1:]
    expected = _ARITY[kind]
    if len(args) != expected:
        msg = f"'{kind}' takes {expected} argument(s), got {len(args)}"
        raise CommandError(ErrorKind.INVALID_ARGUMENTS, msg)

    match kind:
        case CommandType.CREATE:
            try:
                priority = int(args[1])
            except ValueError:
                msg = f"priority must be an integer, got '{args[1]}'"
                raise CommandError(ErrorKind.INVALID_ARGUMENTS, msg) from None
            return Create(name=args[0], priority=priority)
        case CommandType.DESTROY:
            return Destroy(name=args[0])
        case CommandType.REQUEST:
            return Request(resource=args[0])
        case CommandType.RELEASE:
            return Release(resource=args[0])
        case CommandType.TIMEOUT:
            return Timeout()
        case CommandType.REQUEST_IO:
            return RequestIO()
        case CommandType.IO_COMPLETION:
            return IOCompletion()
        case CommandType.INIT:
            return Init()
        case CommandType.QUIT:
            return Quit()
        case CommandType.BLANK:
            return Blank()
