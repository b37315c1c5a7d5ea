"""Animated-background frame pipeline: decode GIF frames, collect rendered frames, write the GIF."""

from pathlib import Path

from PIL import Image, ImageSequence

from styledqr.errors import AnimationError
from styledqr.geometry import Rect
from styledqr.logging import audit, get_logger, trace

log = get_logger("animation")

DEFAULT_FRAME_DURATION_MS = 100


class GifPipeline:
    """Sequential frame source and sink for one animated render.

    Frames must be consumed in order and each rendered frame pushed before
    the next one is decoded::

        with GifPipeline(src, dst, clip) as pipeline:
            for frame in pipeline:
                pipeline.push_rendered(render(frame))
            pipeline.finish()
    """

    def __init__(self, input_file: str | Path, output_file: str | Path, clipping_rect: Rect | None = None):
        self.input_file = input_file
        self.output_file = output_file
        self.clipping_rect = clipping_rect
        self._source: Image.Image | None = None
        self._durations: list[int] = []
        self._rendered: list[Image.Image] = []

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc):
        self.close()

    @trace
    def open(self) -> None:
        try:
            self._source = Image.open(self.input_file)
            self._source.load()
        except (OSError, ValueError) as e:
            self.close()
            raise AnimationError("Frame pipeline failed to init", str(e)) from e
        self._check_clip()
        audit("gif.opened", logger=log,
              source=str(self.input_file),
              frames=getattr(self._source, "n_frames", 1),
              size=f"{self._source.size[0]}x{self._source.size[1]}")

    def _check_clip(self) -> None:
        clip = self.clipping_rect
        if clip is None:
            return
        width, height = self._source.size
        if clip.width <= 0 or clip.height <= 0 or clip.left < 0 or clip.top < 0 \
                or clip.right > width or clip.bottom > height:
            self.close()
            raise AnimationError(
                "Frame pipeline failed to init",
                f"clipping rect {clip} does not fit inside the {width}x{height} source",
            )

    def __iter__(self):
        if self._source is None:
            raise AnimationError("Frame pipeline used before open()")
        try:
            for frame in ImageSequence.Iterator(self._source):
                self._durations.append(int(frame.info.get("duration", DEFAULT_FRAME_DURATION_MS)))
                decoded = frame.convert("RGBA")
                if self.clipping_rect is not None:
                    decoded = decoded.crop(self.clipping_rect.box)
                yield decoded
        except (OSError, ValueError) as e:
            raise AnimationError("Frame pipeline failed to decode frames", str(e)) from e

    def push_rendered(self, frame: Image.Image) -> None:
        self._rendered.append(frame.convert("RGB"))

    @property
    def frame_count(self) -> int:
        return len(self._rendered)

    @trace
    def finish(self) -> Path:
        """Write every pushed frame to the output file as a looping GIF."""
        if not self._rendered:
            raise AnimationError("Frame pipeline failed to do post render works", "no frames were rendered")
        first, *rest = self._rendered
        durations = self._durations[: len(self._rendered)]
        try:
            first.save(
                self.output_file,
                format="GIF",
                save_all=True,
                append_images=rest,
                duration=durations,
                loop=0,
            )
        except (OSError, ValueError) as e:
            Path(self.output_file).unlink(missing_ok=True)
            raise AnimationError("Frame pipeline failed to do post render works", str(e)) from e
        audit("gif.finished", logger=log, output=str(self.output_file), frames=len(self._rendered))
        return Path(self.output_file)

    def close(self) -> None:
        if self._source is not None:
            self._source.close()
            self._source = None
        self._rendered.clear()
