"""Tests for the shell.

The shell parses a command line, runs manager commands, and renders
``"<name> is running"``, ``"error"``, a blank line, or the exit
sentinel.  Inspection commands render tables without changing state.
"""

from py_prm.manager import Manager
from py_prm.shell import ERROR_MESSAGE, Shell

HIGH = 2
CHAIN_DEPTH = 1500


def _shell(*, verbose: bool = False) -> Shell:
    """Create a shell over a fresh manager."""
    return Shell(manager=Manager(), verbose=verbose)


class TestManagerCommands:
    """Verify rendering of manager commands."""

    def test_init_reports_root(self) -> None:
        """``init`` resets and reports Init as running."""
        shell = _shell()
        shell.execute("cr P1 1")
        assert shell.execute("init") == "Init is running"
        assert [p.name for p in shell.manager.processes()] == ["Init"]

    def test_create_reports_new_runner(self) -> None:
        """A more important child takes over."""
        shell = _shell()
        assert shell.execute("cr P1 1") == "P1 is running"
        assert shell.execute("cr P2 2") == "P2 is running"

    def test_keywords_ignore_case(self) -> None:
        """``CR`` works like ``cr``."""
        assert _shell().execute("CR P1 1") == "P1 is running"

    def test_course_test_sequence(self) -> None:
        """A typical graded input produces the expected lines."""
        shell = _shell()
        lines = ["cr A 1", "cr B 1", "cr C 1", "req R1", "to", "req R1", "to", "rel R1"]
        outputs = [shell.execute(line) for line in lines]
        assert outputs == [
            "A is running",
            "A is running",
            "A is running",
            "A is running",
            "B is running",
            "C is running",
            "A is running",
            "A is running",
        ]


class TestErrors:
    """Verify rendering of failures."""

    def test_unknown_command(self) -> None:
        """Unrecognized keywords render ``error``."""
        assert _shell().execute("fork") == ERROR_MESSAGE

    def test_missing_arguments(self) -> None:
        """A short command renders ``error``."""
        assert _shell().execute("cr P1") == ERROR_MESSAGE

    def test_invalid_priority(self) -> None:
        """Priorities outside {1, 2} render ``error``."""
        assert _shell().execute("cr P1 3") == ERROR_MESSAGE

    def test_verbose_explains(self) -> None:
        """Verbose mode names the error kind and reason."""
        output = _shell(verbose=True).execute("de ghost")
        assert output.startswith("error: not_found:")
        assert "ghost" in output

    def test_error_then_success(self) -> None:
        """The session keeps going after an error."""
        shell = _shell()
        shell.execute("rel R1")
        assert shell.execute("cr P1 1") == "P1 is running"


class TestSessionControl:
    """Verify blank lines and quit."""

    def test_blank_line(self) -> None:
        """A blank line is echoed blank."""
        assert _shell().execute("   ") == ""

    def test_quit_returns_sentinel(self) -> None:
        """``quit`` asks the REPL to stop."""
        assert _shell().execute("quit") == Shell.EXIT_SENTINEL

    def test_render_running(self) -> None:
        """The start-up banner names the root."""
        assert _shell().render_running() == "Init is running"


class TestInspection:
    """Verify read-only commands."""

    def test_help_lists_commands(self) -> None:
        """Help mentions manager and inspection commands."""
        output = _shell().execute("help")
        assert "cr <name> <priority>" in output
        assert "pstree" in output

    def test_ps_lists_processes(self) -> None:
        """The process table shows every live process."""
        shell = _shell()
        shell.execute("cr P1 1")
        shell.execute("req R2")
        output = shell.execute("ps")
        assert "Init" in output
        assert "P1" in output
        assert "R2" in output

    def test_pstree_shows_hierarchy(self) -> None:
        """Children are drawn under their parents."""
        shell = _shell()
        shell.execute("cr P1 1")
        shell.execute("cr P2 2")
        assert shell.execute("pstree").splitlines() == [
            "Init (ready, priority 0)",
            "└── P1 (ready, priority 1)",
            "    └── P2 (running, priority 2)",
        ]

    def test_pstree_siblings(self) -> None:
        """Earlier siblings get a branch, the last one gets a corner."""
        shell = _shell()
        shell.execute("cr A 1")
        shell.execute("cr B 1")
        shell.execute("cr C 2")
        assert shell.execute("pstree").splitlines() == [
            "Init (ready, priority 0)",
            "└── A (ready, priority 1)",
            "    ├── B (ready, priority 1)",
            "    └── C (running, priority 2)",
        ]

    def test_pstree_handles_deep_chains(self) -> None:
        """A chain deeper than the recursion limit still renders."""
        shell = _shell()
        shell.execute(f"cr P0 {HIGH}")
        for i in range(1, CHAIN_DEPTH):
            shell.execute(f"cr P{i} {HIGH}")
            shell.execute("rio")
        lines = shell.execute("pstree").splitlines()
        assert len(lines) == CHAIN_DEPTH + 1
        assert lines[1].startswith("└── P0 ")
        assert lines[-1].strip().startswith(f"└── P{CHAIN_DEPTH - 1} (running")

    def test_rs_shows_wait_queues(self) -> None:
        """The resource table shows free units and waiters."""
        shell = _shell()
        shell.execute("cr A 1")
        shell.execute("rio")
        output = shell.execute("rs")
        io_line = next(line for line in output.splitlines() if " IO " in line)
        assert io_line.split() == ["5", "IO", "0", "A"]

    def test_inspection_does_not_mutate(self) -> None:
        """Looking around leaves the snapshot alone."""
        shell = _shell()
        shell.execute("cr P1 1")
        before = shell.manager.snapshot()
        for line in ("ps", "pstree", "rs", "log", "help"):
            shell.execute(line)
        assert shell.manager.snapshot() == before
