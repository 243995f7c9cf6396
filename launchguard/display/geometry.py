from typing import NamedTuple, Optional, Tuple


class Rect(NamedTuple):
    """A screen rectangle. Membership is half-open: [left, left+width) x [top, top+height)."""
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def union(self, other: "Rect") -> "Rect":
        left = min(self.left, other.left)
        top = min(self.top, other.top)
        return Rect(left, top, max(self.right, other.right) - left, max(self.bottom, other.bottom) - top)

    def clamp(self, width: int, height: int) -> "Rect":
        """Returns the part of the rectangle that lies inside a width x height screen."""
        left = min(max(self.left, 0), width)
        top = min(max(self.top, 0), height)
        right = min(max(self.right, left), width)
        bottom = min(max(self.bottom, top), height)
        return Rect(left, top, right - left, bottom - top)


# A position where None on an axis means "center on that axis".
Position = Tuple[Optional[int], Optional[int]]
CENTER: Position = (None, None)


def corner_regions(display_width: int, display_height: int, corner_size: int) -> Tuple[Rect, Rect]:
    """
    Returns the bottom-left and bottom-right quit regions.

    :param display_width: Width of the display in pixels.
    :param display_height: Height of the display in pixels.
    :param corner_size: Edge length of each square region.
    :return tuple: (bottom_left, bottom_right)
    """
    top = display_height - corner_size
    bottom_left = Rect(0, top, corner_size, corner_size)
    bottom_right = Rect(display_width - corner_size, top, corner_size, corner_size)
    return bottom_left, bottom_right
