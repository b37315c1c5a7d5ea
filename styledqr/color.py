"""Dominant colour extraction for auto-coloured modules over background art."""

import colorsys

import numpy as np
from PIL import Image

from styledqr.logging import audit, get_logger, trace
from styledqr.options import BLACK, Color

log = get_logger("color")

SAMPLE_GRID = 8
NEAR_WHITE = 200
MIN_VALUE = 0.7


@trace
def dominant_color(image: Image.Image) -> Color:
    """Average colour of the non-bright parts of *image*, never darker than V=0.7.

    The image is sampled on an 8x8 grid; samples with any channel above 200
    are ignored. Returns opaque black when no sample qualifies.
    """
    sample = image.convert("RGB").resize((SAMPLE_GRID, SAMPLE_GRID), Image.BILINEAR)
    pixels = np.asarray(sample, dtype=np.int64).reshape(-1, 3)
    kept = pixels[~(pixels > NEAR_WHITE).any(axis=1)]

    if len(kept) == 0:
        audit("color.dominant", logger=log, samples=0, color=BLACK)
        return BLACK

    # Integer average per channel
    r, g, b = (int(v) for v in np.clip(kept.sum(axis=0) // len(kept), 0, 255))
    h, s, v = colorsys.rgb_to_hsv(r / 255.0, g / 255.0, b / 255.0)
    v = max(v, MIN_VALUE)
    rgb = colorsys.hsv_to_rgb(h, s, v)
    color = tuple(int(round(ch * 255)) for ch in rgb) + (255,)

    audit("color.dominant", logger=log, samples=len(kept), average=(r, g, b), color=color)
    return color
