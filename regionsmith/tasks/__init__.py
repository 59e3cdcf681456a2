"""Layer 3: Tasks - User intent translation.

Tasks translate user intent into object creation and primitive calls. Tasks
must not do file I/O or plotting.
"""

from regionsmith.tasks.spatialjointask import SpatialJoinTask

__all__ = ["SpatialJoinTask"]
