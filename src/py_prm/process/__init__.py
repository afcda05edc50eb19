"""Process subsystem — PCB, scheduling, and the creation tree.

Re-exports public symbols so callers can write::

    from py_prm.process import Process, Scheduler, ProcessTreeManager
"""

from py_prm.process.pcb import Process, ProcessState
from py_prm.process.scheduler import PriorityPolicy, Scheduler, SchedulingPolicy
from py_prm.process.tree import ProcessTreeManager

__all__ = [
    "PriorityPolicy",
    "Process",
    "ProcessState",
    "ProcessTreeManager",
    "Scheduler",
    "SchedulingPolicy",
]
