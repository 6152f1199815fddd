"""Core board types.

Import entities and events from their modules directly; this package
only re-exports the point type so the geometry kernel can depend on it
without pulling in the entity layer.
"""

from playboard.core.point import Point

__all__ = ["Point"]
