from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


def _half(value: int) -> int:
    # C-style integer division, rounds toward zero
    return int(value / 2)


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle in image pixels; (x, y) is the top-left corner.
    """

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        if self.width <= 0 or self.height <= 0:
            return 0
        return self.width * self.height

    def as_xyxy(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.x + self.width, self.y + self.height

    def intersection(self, other: "Rect") -> "Rect":
        x1 = max(self.x, other.x)
        y1 = max(self.y, other.y)
        x2 = min(self.x + self.width, other.x + other.width)
        y2 = min(self.y + self.height, other.y + other.height)
        if x2 <= x1 or y2 <= y1:
            return Rect(0, 0, 0, 0)
        return Rect(x1, y1, x2 - x1, y2 - y1)


@dataclass(frozen=True)
class Candidate:
    """
    A prediction row that passed the confidence threshold, in image pixels.
    """

    center_x: int
    center_y: int
    width: int
    height: int
    class_id: int
    confidence: float

    @property
    def rect(self) -> Rect:
        return Rect(
            x=self.center_x - _half(self.width),
            y=self.center_y - _half(self.height),
            width=self.width,
            height=self.height,
        )


@dataclass(frozen=True)
class BoundingBox:
    """
    Final detection record. `box_id` is the zero-based position of the box in
    the list returned by one detection call.
    """

    roi: Rect
    class_id: int
    confidence: float
    box_id: int
