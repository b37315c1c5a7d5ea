"""Tests for the GIF frame pipeline and the animated render driver."""

import pytest
from PIL import Image

from styledqr.animation import GifPipeline
from styledqr.errors import AnimationError, ConfigurationError
from styledqr.geometry import Rect
from styledqr.options import GifBackground, RenderOption
from styledqr.renderer import OutputType, render

BASE = RenderOption(content="HELLO", size=128, border_width=4)


def test_pipeline_yields_clipped_frames(animated_gif, tmp_path):
    with GifPipeline(animated_gif, tmp_path / "out.gif", Rect(10, 10, 60, 60)) as pipeline:
        frames = list(pipeline)
    assert len(frames) == 3
    assert all(f.size == (50, 50) and f.mode == "RGBA" for f in frames)
    r, g, b, _ = frames[1].getpixel((5, 5))
    assert abs(r - 30) <= 3 and abs(g - 200) <= 3 and abs(b - 30) <= 3


def test_pipeline_rejects_non_image(tmp_path):
    bogus = tmp_path / "bogus.gif"
    bogus.write_bytes(b"definitely not a gif")
    with pytest.raises(AnimationError):
        GifPipeline(bogus, tmp_path / "out.gif").open()


@pytest.mark.parametrize("clip", [Rect(60, 60, 200, 200), Rect(-10, 0, 50, 50)])
def test_pipeline_rejects_clip_outside_source(animated_gif, tmp_path, clip):
    pipeline = GifPipeline(animated_gif, tmp_path / "out.gif", clip)
    with pytest.raises(AnimationError, match="does not fit"):
        pipeline.open()


def test_gif_render_with_clip_outside_source(animated_gif, tmp_path):
    out = tmp_path / "qr.gif"
    options = BASE.replace(background=GifBackground(
        input_file=animated_gif, output_file=out, clipping_rect=Rect(0, 0, 121, 60),
    ))
    with pytest.raises(AnimationError):
        render(options)
    assert not out.exists()


def test_pipeline_finish_without_frames(animated_gif, tmp_path):
    out = tmp_path / "out.gif"
    with GifPipeline(animated_gif, out) as pipeline:
        with pytest.raises(AnimationError):
            pipeline.finish()
    assert not out.exists()


def test_gif_render(animated_gif, tmp_path):
    out = tmp_path / "qr.gif"
    options = BASE.replace(background=GifBackground(input_file=animated_gif, output_file=out))
    result = render(options)

    assert result.output_type is OutputType.GIF
    assert result.output_file == out
    assert result.image.size == (128, 128)
    with Image.open(out) as written:
        assert written.n_frames == 3
        assert written.size == (128, 128)
        assert written.info["duration"] == 80


def test_gif_render_requires_output_file(animated_gif):
    options = BASE.replace(background=GifBackground(input_file=animated_gif))
    with pytest.raises(ConfigurationError):
        render(options)


def test_gif_write_failure_is_aggregated(animated_gif, tmp_path):
    out = tmp_path / "missing-dir" / "qr.gif"
    options = BASE.replace(background=GifBackground(input_file=animated_gif, output_file=out))
    with pytest.raises(AnimationError):
        render(options)
    assert not out.exists()


def test_render_failure_mid_stream_stops_pipeline(animated_gif, tmp_path, monkeypatch):
    from styledqr import renderer

    calls = []
    real = renderer.render_frame

    def flaky(options, frame=None):
        calls.append(frame)
        if len(calls) == 2:
            raise AnimationError("Frame pipeline failed to render frames", "boom")
        return real(options, frame)

    monkeypatch.setattr(renderer, "render_frame", flaky)
    out = tmp_path / "qr.gif"
    options = BASE.replace(background=GifBackground(input_file=animated_gif, output_file=out))
    with pytest.raises(AnimationError, match="boom"):
        render(options)
    assert len(calls) == 2
    assert not out.exists()
