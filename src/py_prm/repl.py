"""Interactive REPL (Read-Eval-Print Loop) and batch runner.

This is the only module that touches the terminal.  It creates a
manager and a shell, then either:

- runs the classic loop (read a line, ``shell.execute()`` it, print
  the result) until ``quit`` or end of input; or
- runs a command file in one go with ``run_script``, producing one
  output line per input line.  A rejected command prints only
  ``error``; it is not followed by the name of the running process.

``run_script`` is pure and testable; ``run`` and ``main`` are the I/O
entrypoints.
"""

import argparse
import sys
from collections.abc import Iterable
from pathlib import Path

from py_prm.manager import Manager
from py_prm.shell import QUIT_MESSAGE, Shell


def run_script(lines: Iterable[str], *, shell: Shell | None = None) -> list[str]:
    """Execute command lines in order and collect their output.

    Execution stops at ``quit``, whose output is the quit message.

    Args:
        lines: Command lines (trailing newlines are ignored).
        shell: Shell to run them in; a fresh one by default.

    Returns:
        One output string per executed line.

    """
    shell = shell if shell is not None else Shell(manager=Manager())
    results: list[str] = []
    for line in lines:
        output = shell.execute(line.rstrip("\n"))
        if output == Shell.EXIT_SENTINEL:
            results.append(QUIT_MESSAGE)
            break
        results.append(output)
    return results


def run(*, verbose: bool = False) -> None:
    """Run the interactive REPL on standard input.

    Handles ``quit``, Ctrl+D and Ctrl+C gracefully.
    """
    manager = Manager()
    shell = Shell(manager=manager, verbose=verbose)
    prompt = "> " if sys.stdin.isatty() else ""

    print(shell.render_running())  # noqa: T201
    try:
        while True:
            try:
                line = input(prompt)
            except EOFError:
                break
            output = shell.execute(line)
            if output == Shell.EXIT_SENTINEL:
                print(QUIT_MESSAGE)  # noqa: T201
                break
            print(output)  # noqa: T201
    except KeyboardInterrupt:
        print("\nInterrupted.")  # noqa: T201


def main(argv: list[str] | None = None) -> None:
    """Console entry point: ``py-prm [--verbose] [SCRIPT]``."""
    parser = argparse.ArgumentParser(prog="py-prm", description=__doc__.splitlines()[0])
    parser.add_argument("script", nargs="?", type=Path, help="command file to run in batch")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="explain why commands are rejected"
    )
    args = parser.parse_args(argv)

    if args.script is None:
        run(verbose=args.verbose)
        return

    shell = Shell(manager=Manager(), verbose=args.verbose)
    lines = args.script.read_text(encoding="utf-8").splitlines()
    print(shell.render_running())  # noqa: T201
    for output in run_script(lines, shell=shell):
        print(output)  # noqa: T201
