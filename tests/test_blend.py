"""Tests for blend-mode rendering and the blend finalizer."""

import pytest
from PIL import Image

from styledqr.blend import blend, clip_rounded, rounded_mask
from styledqr.errors import ConfigurationError
from styledqr.geometry import Rect
from styledqr.options import BlendBackground, RenderOption
from styledqr.renderer import OutputType, render, render_frame

GREEN = (10, 120, 60)


def _photo(size=(1000, 1000)):
    return Image.new("RGB", size, GREEN)


def test_rounded_mask_corners():
    mask = rounded_mask((100, 100), 20)
    assert mask.getpixel((0, 0)) == 0
    assert mask.getpixel((50, 50)) == 255
    assert mask.getpixel((50, 0)) == 255


def test_clip_rounded_keeps_existing_transparency():
    img = Image.new("RGBA", (50, 50), (255, 0, 0, 100))
    clipped = clip_rounded(img, 10)
    assert clipped.getpixel((0, 0))[3] == 0
    assert clipped.getpixel((25, 25)) == (255, 0, 0, 100)


def test_blend_whole_image_square():
    panel = Image.new("RGBA", (200, 200), (255, 0, 0, 255))
    result = blend(_photo((400, 400)), panel, 200)
    assert result.size == (200, 200)
    assert result.getpixel((100, 100)) == (255, 0, 0, 255)


def test_blend_uses_background_colour_under_transparent_fallback():
    fallback = Image.new("RGBA", (300, 300), (0, 0, 0, 0))
    panel = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    result = blend(fallback, panel, 300, None, (0, 0, 255, 255))
    assert result.getpixel((5, 5)) == (0, 0, 255, 255)


def test_blend_mode_render_places_panel_in_scaled_clip():
    options = RenderOption(
        content="HELLO", size=200, border_width=8,
        background=BlendBackground(image=_photo(), clipping_rect=Rect(200, 200, 600, 600)),
    )
    result = render(options)

    assert result.output_type is OutputType.BLEND
    assert result.output_file is None
    # Background scaled by 200 / 400
    assert result.image.size == (500, 500)
    assert result.image.getpixel((20, 20)) == (*GREEN, 255)
    # Panel lands at (100, 100)-(300, 300); its corners are rounded away
    assert result.image.getpixel((100, 100)) == (*GREEN, 255)
    # Its cleared border is white
    assert result.image.getpixel((104, 200)) == (255, 255, 255, 255)


def test_blend_mode_with_non_square_clip_keeps_background_size():
    options = RenderOption(
        content="HELLO", size=200, border_width=8,
        background=BlendBackground(image=_photo(), clipping_rect=Rect(0, 0, 400, 300)),
    )
    result = render(options)
    assert result.image.size == (1000, 1000)
    assert result.image.getpixel((700, 700)) == (*GREEN, 255)
    assert result.image.getpixel((200, 4))[:3] == (255, 255, 255)


def test_blend_frame_is_rounded_panel():
    options = RenderOption(
        content="HELLO", size=256, border_width=8,
        background=BlendBackground(image=_photo(), border_radius=30),
    )
    panel = render_frame(options)
    assert panel.size == (256, 256)
    assert panel.getpixel((0, 0))[3] == 0
    assert panel.getpixel((128, 128))[3] == 255


def test_blend_mode_rejects_clip_hanging_off_the_image():
    options = RenderOption(
        content="HELLO", size=192, border_width=8,
        background=BlendBackground(image=_photo((300, 300)), clipping_rect=Rect(-50, -50, 350, 350)),
    )
    with pytest.raises(ConfigurationError, match="does not fit"):
        render(options)
