"""
Projection module.

Maps resolved types onto generation targets through a single
(kind, target) table.
"""

from __future__ import annotations

from .projector import EnumConversion, Projection, TypeProjector
from .table import PROJECTION_TABLE, ProjectionCell, Target

__all__ = [
    "EnumConversion",
    "Projection",
    "TypeProjector",
    "PROJECTION_TABLE",
    "ProjectionCell",
    "Target",
]
