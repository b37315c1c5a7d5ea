"""Styled rasterizer and render entry points.

Pipeline per frame:
    content -> encode_symbol -> classify -> draw on an unscaled canvas
    -> scale to the requested size -> (blend mode) rounded clip

``render`` dispatches on the background mode; ``render_async`` and
``submit_render`` run the same thing on a worker thread.
"""

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from PIL import Image, ImageDraw

from styledqr.animation import GifPipeline
from styledqr.blend import blend, clip_rounded
from styledqr.classifier import ClassifiedMatrix, ModuleTag, classify
from styledqr.color import dominant_color
from styledqr.encoder import encode_symbol
from styledqr.errors import AnimationError
from styledqr.geometry import Rect, round_half_up
from styledqr.logging import audit, get_logger, trace
from styledqr.options import (
    WHITE,
    BlendBackground,
    Color,
    GifBackground,
    RenderOption,
    StillBackground,
)

log = get_logger("renderer")

PROTECTOR_COLOR: Color = (255, 255, 255, 120)
STRUCTURAL_TAGS = (ModuleTag.POSITION, ModuleTag.ALIGNMENT, ModuleTag.TIMING)


class OutputType(Enum):
    STILL = "Still"
    BLEND = "Blend"
    GIF = "GIF"


@dataclass
class RenderResult:
    """Outcome of one render call.

    For GIF output ``image`` is the first rendered frame (a preview) and
    ``output_file`` is where the animation was written.
    """

    image: Image.Image
    output_file: Path | None
    output_type: OutputType


# ---------------------------------------------------------------------------
# Frame rasterizer
# ---------------------------------------------------------------------------

def _draw_modules(
    draw: ImageDraw.ImageDraw,
    classified: ClassifiedMatrix,
    border: int,
    module_px: int,
    light: Color,
    dark: Color,
    rounded: bool,
    pattern_scale: float,
) -> None:
    radius = pattern_scale * module_px / 2
    for row, cells in enumerate(classified):
        y = border + row * module_px
        for col, tag in enumerate(cells):
            x = border + col * module_px
            if tag in STRUCTURAL_TAGS:
                fill = dark
            elif tag == ModuleTag.PROTECTOR:
                fill = PROTECTOR_COLOR
            else:
                fill = dark if tag == ModuleTag.DATA else light
                if rounded:
                    cx = x + module_px / 2
                    cy = y + module_px / 2
                    draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=fill)
                    continue
            draw.rectangle([x, y, x + module_px - 1, y + module_px - 1], fill=fill)


def _draw_background_frame(canvas: Image.Image, frame: Image.Image, rect: Rect, alpha: float) -> None:
    layer = frame.convert("RGBA").resize(rect.size, Image.LANCZOS)
    opacity = layer.getchannel("A").point(lambda a: round_half_up(a * alpha))
    layer.putalpha(opacity)
    canvas.paste(layer, (rect.left, rect.top), layer)


def _prepare_logo(options: RenderOption, inner_px: int, border_color: Color) -> Image.Image | None:
    """Scale, stroke and round-clip the logo; None if it would be empty."""
    logo = options.logo
    source = logo.image
    if logo.clipping_rect is not None:
        source = source.crop(logo.clipping_rect.box)

    logo_px = int(inner_px * logo.scale)
    if logo_px <= 0:
        return None
    scaled = source.convert("RGBA").resize((logo_px, logo_px), Image.LANCZOS)
    if logo.border_width > 0:
        # Stroke is centred on the logo edge, so only its inner half shows
        ImageDraw.Draw(scaled).rounded_rectangle(
            [0, 0, logo_px - 1, logo_px - 1],
            radius=logo.border_radius,
            outline=border_color,
            width=max(1, logo.border_width // 2),
        )
    return clip_rounded(scaled, logo.border_radius)


@trace
def render_frame(options: RenderOption, background_frame: Image.Image | None = None) -> Image.Image:
    """Render one styled QR image of exactly ``options.size`` px square.

    Args:
        options:          Validated (or validatable) render options.
        background_frame: Image to draw behind the modules. For still and
                          blend backgrounds the background's own image is
                          used when this is None; auto colouring only
                          applies to an explicitly passed frame.

    Returns:
        RGBA image. In blend mode the corners outside the rounded panel are
        transparent.
    """
    options.validate()
    symbol = encode_symbol(options.content, options.ecl)
    classified = classify(symbol.modules, symbol.alignment_centers)

    background = options.background
    frame = background_frame
    if frame is None and isinstance(background, (StillBackground, BlendBackground)):
        frame = background.image

    # Integer module size so module edges land on whole pixels
    border = options.border_width
    count = symbol.size
    module_px = max(1, round_half_up(options.inner_size / count))
    inner_px = module_px * count
    full_px = inner_px + 2 * border

    if options.clear_border:
        bg_rect = Rect(border, border, full_px - border, full_px - border)
    else:
        bg_rect = Rect.from_size(full_px, full_px)

    light, dark = options.color.light, options.color.dark
    if options.color.auto and background_frame is not None:
        light, dark = WHITE, dominant_color(background_frame)

    canvas = Image.new("RGB", (full_px, full_px), WHITE[:3])
    draw = ImageDraw.Draw(canvas, "RGBA")
    draw.rectangle([bg_rect.left, bg_rect.top, bg_rect.right - 1, bg_rect.bottom - 1],
                   fill=options.color.background)

    if frame is not None and background is not None:
        _draw_background_frame(canvas, frame, bg_rect, background.alpha)

    _draw_modules(draw, classified, border, module_px, light, dark,
                  options.rounded_patterns, options.pattern_scale)

    if options.has_logo:
        logo = _prepare_logo(options, inner_px, light)
        if logo is not None:
            offset = ((full_px - logo.width) // 2, (full_px - logo.height) // 2)
            canvas.paste(logo, offset, logo)

    result = canvas
    if canvas.size != (options.size, options.size):
        result = canvas.resize((options.size, options.size), Image.LANCZOS)
    result = result.convert("RGBA")

    if isinstance(background, BlendBackground):
        result = clip_rounded(result, background.border_radius)

    audit("render.frame", logger=log,
          version=symbol.version, modules=count, module_px=module_px,
          unscaled=f"{full_px}x{full_px}", size=f"{options.size}x{options.size}",
          rounded=options.rounded_patterns, logo=options.has_logo,
          background=type(background).__name__ if background else None)
    return result


# ---------------------------------------------------------------------------
# Render entry points
# ---------------------------------------------------------------------------

def _clip_background(image: Image.Image, clipping_rect: Rect | None) -> Image.Image:
    if clipping_rect is None:
        return image
    return image.crop(clipping_rect.box)


def _render_gif(options: RenderOption) -> RenderResult:
    background: GifBackground = options.background
    preview = None
    with GifPipeline(background.input_file, background.output_file, background.clipping_rect) as pipeline:
        for frame in pipeline:
            rendered = render_frame(options, frame)
            pipeline.push_rendered(rendered)
            if preview is None:
                preview = rendered.copy()
        if preview is None:
            raise AnimationError("Frame pipeline failed to render frames", "source has no frames")
        output = pipeline.finish()
        frames = pipeline.frame_count
    audit("render.done", logger=log, output_type=OutputType.GIF.value, frames=frames, output=str(output))
    return RenderResult(preview, output, OutputType.GIF)


@trace
def render(options: RenderOption) -> RenderResult:
    """Render according to the background mode.

    Raises:
        ConfigurationError: invalid options (raised before anything is drawn).
        EncodingError:      the content could not be encoded.
        AnimationError:     GIF decoding/encoding failed.
    """
    options.validate()
    background = options.background

    if isinstance(background, GifBackground):
        return _render_gif(options)

    if isinstance(background, BlendBackground):
        panel = render_frame(options, _clip_background(background.image, background.clipping_rect))
        image = blend(background.image, panel, options.size,
                      background.clipping_rect, options.color.background)
        result = RenderResult(image, None, OutputType.BLEND)
    elif isinstance(background, StillBackground):
        image = render_frame(options, _clip_background(background.image, background.clipping_rect))
        result = RenderResult(image, None, OutputType.STILL)
    else:
        result = RenderResult(render_frame(options), None, OutputType.STILL)

    audit("render.done", logger=log,
          output_type=result.output_type.value,
          size=f"{result.image.size[0]}x{result.image.size[1]}")
    return result


def render_async(
    options: RenderOption,
    on_result: Callable[[RenderResult], None] | None = None,
    on_error: Callable[[Exception], None] | None = None,
) -> threading.Thread:
    """Run ``render`` on a background thread; exactly one callback fires."""

    def _worker():
        try:
            result = render(options)
        except Exception as e:
            if on_error is not None:
                on_error(e)
            else:
                log.error("Background render failed: %s", e, exc_info=True)
            return
        if on_result is not None:
            on_result(result)

    thread = threading.Thread(target=_worker, name="styledqr-render", daemon=True)
    thread.start()
    return thread


def submit_render(options: RenderOption, executor: Executor | None = None) -> Future:
    """Submit ``render`` to *executor* (a one-shot worker if omitted)."""
    if executor is not None:
        return executor.submit(render, options)
    own = ThreadPoolExecutor(max_workers=1, thread_name_prefix="styledqr-render")
    try:
        return own.submit(render, options)
    finally:
        own.shutdown(wait=False)
