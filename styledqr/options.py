"""Render configuration: colors, logo, background modes and the top-level RenderOption."""

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from styledqr.errors import ConfigurationError
from styledqr.geometry import Rect

Color = tuple[int, int, int, int]

WHITE: Color = (255, 255, 255, 255)
BLACK: Color = (0, 0, 0, 255)

ECC_LEVELS = ("L", "M", "Q", "H")


def parse_hex_color(s: str) -> Color:
    """Parse ``RRGGBB`` or ``RRGGBBAA`` (with or without '#') to an RGBA tuple."""
    s = s.strip().lstrip("#")
    if len(s) not in (6, 8):
        raise ConfigurationError(f"Invalid hex colour: {s!r}")
    try:
        channels = [int(s[i : i + 2], 16) for i in range(0, len(s), 2)]
    except ValueError as e:
        raise ConfigurationError(f"Invalid hex colour: {s!r}") from e
    if len(channels) == 3:
        channels.append(255)
    return tuple(channels)


def to_rgba(color: tuple[int, ...]) -> Color:
    """Accept RGB or RGBA tuples; RGB gets full opacity."""
    if len(color) == 3:
        return (*color, 255)
    return tuple(color)


def _check_clip(rect: Rect | None, image: Image.Image | None = None, what: str = "Clipping rect") -> None:
    if rect is None:
        return
    if rect.width <= 0 or rect.height <= 0:
        raise ConfigurationError(f"{what} must have a positive size, got {rect}")
    if image is None:
        return
    width, height = image.size
    if rect.left < 0 or rect.top < 0 or rect.right > width or rect.bottom > height:
        raise ConfigurationError(f"{what} {rect} does not fit inside the {width}x{height} image")


@dataclass(frozen=True)
class ColorOption:
    """Module and background colours.

    ``auto`` replaces light/dark with white and the background's dominant
    colour whenever a background frame is drawn.
    """

    light: Color = WHITE
    dark: Color = BLACK
    background: Color = WHITE
    auto: bool = False


@dataclass(frozen=True)
class LogoOption:
    image: Image.Image | None = None
    scale: float = 0.2
    border_width: int = 10
    border_radius: int = 8
    clipping_rect: Rect | None = None


@dataclass(frozen=True)
class Background:
    """Base for background modes. ``alpha`` is the opacity of the drawn image."""

    image: Image.Image | None = None
    clipping_rect: Rect | None = None
    alpha: float = 0.6


@dataclass(frozen=True)
class StillBackground(Background):
    pass


@dataclass(frozen=True)
class BlendBackground(Background):
    """Render a rounded QR panel and composite it back onto the full image."""

    border_radius: int = 10


@dataclass(frozen=True)
class GifBackground(Background):
    """Animated background: every decoded frame is rendered and re-encoded."""

    input_file: str | Path | None = None
    output_file: str | Path | None = None


@dataclass(frozen=True)
class RenderOption:
    content: str = ""
    size: int = 800
    border_width: int = 20
    ecl: str = "M"
    pattern_scale: float = 0.4
    rounded_patterns: bool = False
    clear_border: bool = True
    color: ColorOption = field(default_factory=ColorOption)
    logo: LogoOption | None = None
    background: Background | None = None

    @property
    def inner_size(self) -> int:
        return self.size - 2 * self.border_width

    @property
    def has_logo(self) -> bool:
        return self.logo is not None and self.logo.image is not None

    def replace(self, **changes) -> "RenderOption":
        return dataclasses.replace(self, **changes)

    def validate(self) -> None:
        """Raise ConfigurationError for anything that would make rendering fail.

        Runs before the content is encoded, so nothing is drawn for an
        invalid configuration.
        """
        if not self.content:
            raise ConfigurationError("Content is empty.")
        if self.size < 0 or self.border_width < 0 or self.inner_size <= 0:
            raise ConfigurationError(
                f"Invalid size or border width (size={self.size}, border_width={self.border_width})."
            )
        if str(self.ecl).upper() not in ECC_LEVELS:
            raise ConfigurationError(f"Unknown error correction level: {self.ecl!r}")
        if self.pattern_scale <= 0 or self.pattern_scale > 1:
            raise ConfigurationError(f"Illegal pattern scale: {self.pattern_scale}")

        if self.has_logo:
            logo = self.logo
            if (
                logo.scale <= 0 or logo.scale > 0.5
                or logo.border_width < 0 or logo.border_width * 2 >= self.size
                or logo.border_radius < 0
            ):
                raise ConfigurationError("Invalid logo settings.")

        if self.has_logo:
            _check_clip(self.logo.clipping_rect, self.logo.image, "Logo clipping rect")

        bg = self.background
        if bg is None:
            return
        _check_clip(bg.clipping_rect, bg.image, "Background clipping rect")
        if not 0 <= bg.alpha <= 1:
            raise ConfigurationError(f"Background alpha must be within [0, 1], got {bg.alpha}")
        if isinstance(bg, GifBackground):
            if bg.input_file is None:
                raise ConfigurationError("Input file is required under GIF background mode.")
            if bg.output_file is None:
                raise ConfigurationError("Output file has not yet been set. It is required under GIF background mode.")
        elif bg.image is None:
            raise ConfigurationError("Background image is missing.")
        if isinstance(bg, BlendBackground) and bg.border_radius < 0:
            raise ConfigurationError("Invalid blend border radius.")
