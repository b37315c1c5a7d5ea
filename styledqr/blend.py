"""Blend-mode finalizer: rounded panel clipping and compositing onto the full background."""

from PIL import Image, ImageChops, ImageDraw

from styledqr.geometry import Rect, scale_bounding_rect_by_clipping_rect
from styledqr.logging import audit, get_logger, trace
from styledqr.options import Color

log = get_logger("blend")


def rounded_mask(size: tuple[int, int], radius: float) -> Image.Image:
    """Mode 'L' mask: 255 inside a rounded rect covering *size*, 0 outside."""
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle(
        [0, 0, size[0] - 1, size[1] - 1], radius=max(0, radius), fill=255,
    )
    return mask


def clip_rounded(image: Image.Image, radius: float) -> Image.Image:
    """Return an RGBA copy of *image* with everything outside a rounded rect transparent."""
    clipped = image.convert("RGBA")
    alpha = ImageChops.multiply(clipped.getchannel("A"), rounded_mask(clipped.size, radius))
    clipped.putalpha(alpha)
    return clipped


@trace
def blend(
    fallback: Image.Image,
    panel: Image.Image,
    size: int,
    clipping_rect: Rect | None = None,
    background_color: Color = (255, 255, 255, 255),
) -> Image.Image:
    """Composite a rendered QR *panel* onto a scaled copy of *fallback*.

    The fallback is scaled so the clip region measures *size* px, and the
    panel is drawn into the clip region's scaled position.
    """
    full_rect, placement = scale_bounding_rect_by_clipping_rect(fallback.size, size, clipping_rect)

    scaled = fallback.convert("RGBA")
    if scaled.size != full_rect.size:
        scaled = scaled.resize(full_rect.size, Image.LANCZOS)
    result = Image.new("RGBA", full_rect.size, background_color)
    result.alpha_composite(scaled)

    layer = panel.convert("RGBA")
    if layer.size != placement.size:
        layer = layer.resize(placement.size, Image.LANCZOS)
    # alpha_composite rejects negative offsets, so paste through a full-size layer
    overlay = Image.new("RGBA", full_rect.size, (0, 0, 0, 0))
    overlay.paste(layer, (placement.left, placement.top))
    result.alpha_composite(overlay)

    audit("blend.composited", logger=log,
          background=f"{fallback.size[0]}x{fallback.size[1]}",
          full=f"{full_rect.width}x{full_rect.height}",
          placement=placement.box)
    return result
