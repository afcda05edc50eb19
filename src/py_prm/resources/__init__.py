"""Resource subsystem — resource control blocks and the allocator.

Re-exports public symbols so callers can write::

    from py_prm.resources import Resource, ResourceAllocator
"""

from py_prm.resources.allocator import ResourceAllocator
from py_prm.resources.rcb import Resource

__all__ = ["Resource", "ResourceAllocator"]
