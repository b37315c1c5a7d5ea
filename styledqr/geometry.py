"""Integer/float rectangle helpers used by clipping and blend layout."""

import math
from dataclasses import dataclass


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties towards +infinity."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class Rect:
    """Integer rectangle; right/bottom are exclusive."""

    left: int
    top: int
    right: int
    bottom: int

    @classmethod
    def from_size(cls, width: int, height: int) -> "Rect":
        return cls(0, 0, width, height)

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def box(self) -> tuple[int, int, int, int]:
        """PIL-style ``(left, upper, right, lower)`` box."""
        return self.left, self.top, self.right, self.bottom

    def is_square(self) -> bool:
        return self.width == self.height


@dataclass(frozen=True)
class RectF:
    """Float rectangle."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


def round_rect(rect: RectF) -> Rect:
    """Round every edge of *rect* independently."""
    return Rect(
        round_half_up(rect.left),
        round_half_up(rect.top),
        round_half_up(rect.right),
        round_half_up(rect.bottom),
    )


def scale_rect(rect: Rect | RectF, ratio: float) -> RectF:
    """Scale all coordinates of *rect* about the origin."""
    return RectF(rect.left * ratio, rect.top * ratio, rect.right * ratio, rect.bottom * ratio)


def scale_bounding_rect_by_clipping_rect(
    image_size: tuple[int, int],
    size: int,
    clipping_rect: Rect | None,
) -> tuple[Rect, Rect]:
    """Lay out a rendered panel of *size* px inside a larger background.

    Returns ``(full_bounding_rect, placement_rect)``: the rect the whole
    background should be scaled to, and where the panel lands within it.
    Scaling only happens when the clip region is square and larger than
    *size*; otherwise the background keeps its size and the clip rect is
    returned unchanged. ``None`` means the whole image.
    """
    width, height = image_size
    if clipping_rect is None:
        clipping_rect = Rect.from_size(width, height)
    if not clipping_rect.is_square() or clipping_rect.width <= size:
        return Rect.from_size(width, height), clipping_rect

    ratio = size / float(clipping_rect.width)
    full = round_rect(RectF(0.0, 0.0, width * ratio, height * ratio))
    placement = round_rect(scale_rect(clipping_rect, ratio))
    return full, placement
