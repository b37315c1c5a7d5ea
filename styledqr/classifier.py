"""Module classifier: assign every cell of a raw QR matrix a semantic tag.

Tags drive the rasterizer: structural patterns are always drawn solid,
protector cells get a translucent white pad so finder/alignment/timing
patterns stay scannable over background art, and data/empty cells are
drawn in the user-selected shape.
"""

from collections import Counter
from enum import IntEnum
from typing import Sequence

from PIL import Image, ImageDraw

from styledqr.errors import ConfigurationError
from styledqr.logging import audit, get_logger, trace

log = get_logger("classifier")


class ModuleTag(IntEnum):
    EMPTY = 0
    DATA = 1
    POSITION = 2
    ALIGNMENT = 3
    TIMING = 4
    PROTECTOR = 5


ClassifiedMatrix = list[list[ModuleTag]]


def is_alignment(x: int, y: int, centers: Sequence[int]) -> bool:
    """True if (x, y) falls inside a 5x5 alignment footprint.

    Only centers on row/column 6 or on the last center line count, so
    interior alignment patterns are left to the data layer. Centers that
    would overlap a finder pattern are skipped.
    """
    if not centers:
        return False
    edge = centers[-1]
    for cy in centers:
        for cx in centers:
            if cx != 6 and cy != 6 and cx != edge and cy != edge:
                continue
            if (cx == 6 and cy == 6) or (cx == 6 and cy == edge) or (cy == 6 and cx == edge):
                continue
            if cx - 2 <= x <= cx + 2 and cy - 2 <= y <= cy + 2:
                return True
    return False


def is_position(x: int, y: int, size: int, inner: bool) -> bool:
    """True if (x, y) is inside a finder box.

    The inner box is the 7x7 finder itself; the outer box is one module
    wider towards the symbol interior. The boundaries differ (``<`` vs
    ``<=``) and must stay that way.
    """
    if inner:
        return x < 7 and (y < 7 or y >= size - 7) or x >= size - 7 and y < 7
    return x <= 7 and (y <= 7 or y >= size - 8) or x >= size - 8 and y <= 7


def is_timing(x: int, y: int, size: int) -> bool:
    return y == 6 and 8 <= x < size - 8 or x == 6 and 8 <= y < size - 8


def classify_cell(x: int, y: int, bit: bool, size: int, centers: Sequence[int]) -> ModuleTag:
    """Tag a single cell. Rules are tried in order; the first structural hit wins."""
    structural = None
    if is_alignment(x, y, centers):
        structural = ModuleTag.ALIGNMENT
    elif is_position(x, y, size, inner=True):
        structural = ModuleTag.POSITION
    elif is_timing(x, y, size):
        structural = ModuleTag.TIMING

    if structural is not None:
        return structural if bit else ModuleTag.PROTECTOR
    if not bit and is_position(x, y, size, inner=False):
        return ModuleTag.PROTECTOR
    return ModuleTag.DATA if bit else ModuleTag.EMPTY


def _check_square(matrix: Sequence[Sequence[bool]]) -> int:
    size = len(matrix)
    if size == 0 or any(len(row) != size for row in matrix):
        raise ConfigurationError("Symbol matrix must be a non-empty square grid.")
    return size


@trace
def classify(matrix: Sequence[Sequence[bool]], alignment_centers: Sequence[int]) -> ClassifiedMatrix:
    """Classify a raw module matrix (``matrix[row][col]``, truthy = dark).

    Returns a new matrix of the same shape; the input is not modified.
    """
    size = _check_square(matrix)
    centers = list(alignment_centers)
    classified = [
        [classify_cell(col, row, bool(matrix[row][col]), size, centers) for col in range(size)]
        for row in range(size)
    ]
    counts = count_tags(classified)
    audit("symbol.classified", logger=log,
          size=f"{size}x{size}",
          **{tag.name.lower(): counts[tag] for tag in ModuleTag})
    return classified


def count_tags(classified: ClassifiedMatrix) -> Counter:
    """Histogram of tags; every ModuleTag is present, possibly with zero."""
    counts = Counter({tag: 0 for tag in ModuleTag})
    for row in classified:
        counts.update(row)
    return counts


# Debug palette: (dark-ish, light-ish) per tag
TAG_COLORS = {
    ModuleTag.EMPTY: (255, 255, 255),
    ModuleTag.DATA: (0, 0, 0),
    ModuleTag.POSITION: (220, 50, 50),
    ModuleTag.ALIGNMENT: (50, 50, 220),
    ModuleTag.TIMING: (50, 180, 50),
    ModuleTag.PROTECTOR: (220, 200, 50),
}


@trace
def render_tag_map(classified: ClassifiedMatrix, scale: int = 20, output_path: str | None = None) -> Image.Image:
    """Render a color-coded map of module tags.

    Colors:
        - Red: Position (finder) patterns
        - Blue: Alignment patterns
        - Green: Timing patterns
        - Yellow: Protector padding
        - Black/White: Data / empty modules
    """
    size = len(classified)
    img = Image.new("RGB", (size * scale, size * scale), (255, 255, 255))
    draw = ImageDraw.Draw(img)

    for r, row in enumerate(classified):
        for c, tag in enumerate(row):
            x0, y0 = c * scale, r * scale
            x1, y1 = x0 + scale - 1, y0 + scale - 1
            draw.rectangle([x0, y0, x1, y1], fill=TAG_COLORS[tag])
            # Grid lines
            draw.rectangle([x0, y0, x1, y1], outline=(230, 230, 230))

    if output_path:
        img.save(output_path)
        audit("tagmap.saved", logger=log, path=output_path, size=f"{size}x{size}")
    return img
