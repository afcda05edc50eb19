"""I/O subsystem — the shared I/O device.

Re-exports public symbols so callers can write::

    from py_prm.io import IOSubsystem
"""

from py_prm.io.device import IOSubsystem

__all__ = ["IOSubsystem"]
