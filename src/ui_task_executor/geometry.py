"""Bounding-box helpers used when matching elements on a screenshot."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rect:
    left: float
    top: float
    width: float
    height: float


def overlapped(container: Rect, target: Rect) -> bool:
    """Return True if the two boxes share any area.

    Boxes that only touch along an edge do not overlap.
    """

    return (
        container.left < target.left + target.width
        and container.left + container.width > target.left
        and container.top < target.top + target.height
        and container.top + container.height > target.top
    )
