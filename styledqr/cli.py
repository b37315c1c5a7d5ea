"""styledqr CLI: render styled QR codes from the command line."""

import argparse
import sys
from pathlib import Path

from PIL import Image

from styledqr.errors import ConfigurationError, RenderError
from styledqr.geometry import Rect
from styledqr.logging import audit, get_logger, setup_logging
from styledqr.options import (
    BlendBackground,
    ColorOption,
    GifBackground,
    LogoOption,
    RenderOption,
    StillBackground,
    parse_hex_color,
)

log = get_logger("cli")


def _parse_rect(s: str) -> Rect:
    """Parse 'left,top,right,bottom' into a Rect."""
    try:
        left, top, right, bottom = (int(v) for v in s.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected left,top,right,bottom, got {s!r}") from None
    return Rect(left, top, right, bottom)


def _open_image(path: str, what: str) -> Image.Image:
    try:
        image = Image.open(path)
        image.load()
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read {what} image {path!r}: {e}") from e
    return image


def _build_background(args, output: Path):
    if not args.background:
        if args.mode != "still":
            raise ConfigurationError(f"--mode {args.mode} requires --background")
        return None
    clip = args.clip
    if args.mode == "gif":
        return GifBackground(
            input_file=args.background,
            output_file=output,
            clipping_rect=clip,
            alpha=args.alpha,
        )
    image = _open_image(args.background, "background")
    if args.mode == "blend":
        return BlendBackground(image=image, clipping_rect=clip, alpha=args.alpha,
                               border_radius=args.blend_radius)
    return StillBackground(image=image, clipping_rect=clip, alpha=args.alpha)


def build_options(args) -> RenderOption:
    """Translate parsed arguments into a RenderOption."""
    output = Path(args.output)
    color = ColorOption(
        light=parse_hex_color(args.light),
        dark=parse_hex_color(args.dark),
        background=parse_hex_color(args.background_color),
        auto=args.auto_color,
    )
    logo = None
    if args.logo:
        logo = LogoOption(
            image=_open_image(args.logo, "logo"),
            scale=args.logo_scale,
            border_width=args.logo_border,
            border_radius=args.logo_radius,
        )
    return RenderOption(
        content=args.content,
        size=args.size,
        border_width=args.border,
        ecl=args.ecc,
        pattern_scale=args.pattern_scale,
        rounded_patterns=args.rounded,
        clear_border=not args.no_clear_border,
        color=color,
        logo=logo,
        background=_build_background(args, output),
    )


def cmd_render(args):
    """Render a styled QR code."""
    from styledqr.renderer import OutputType, render

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)

    result = render(build_options(args))
    if result.output_type is OutputType.GIF:
        print(f"Rendered GIF: {result.output_file} (preview {result.image.size[0]}x{result.image.size[1]})")
        return
    result.image.save(output)
    print(f"Rendered {result.output_type.value}: {output} ({result.image.size[0]}x{result.image.size[1]})")


def cmd_tags(args):
    """Save a color-coded module tag map."""
    from styledqr.classifier import ModuleTag, classify, count_tags, render_tag_map
    from styledqr.encoder import encode_symbol

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)

    symbol = encode_symbol(args.content, args.ecc)
    classified = classify(symbol.modules, symbol.alignment_centers)
    render_tag_map(classified, output_path=str(output))
    counts = count_tags(classified)

    print(f"QR Version {symbol.version} ({symbol.size}x{symbol.size} = {symbol.size ** 2} modules)")
    print(f"  Position:  {counts[ModuleTag.POSITION]:4d} modules (red)")
    print(f"  Alignment: {counts[ModuleTag.ALIGNMENT]:4d} modules (blue)")
    print(f"  Timing:    {counts[ModuleTag.TIMING]:4d} modules (green)")
    print(f"  Protector: {counts[ModuleTag.PROTECTOR]:4d} modules (yellow)")
    print(f"  Data:      {counts[ModuleTag.DATA]:4d} modules (black)")
    print(f"  Empty:     {counts[ModuleTag.EMPTY]:4d} modules (white)")
    print(f"Saved to: {output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="styledqr", description="Styled QR code renderer")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- render ---
    p_render = subparsers.add_parser("render", help="Render a styled QR code")
    p_render.add_argument("content", help="Text or URL to encode")
    p_render.add_argument("-o", "--output", default="output/qr.png", help="Output file path")
    p_render.add_argument("-s", "--size", type=int, default=800, help="Output size in pixels")
    p_render.add_argument("-b", "--border", type=int, default=20, help="Border width in pixels")
    p_render.add_argument("-e", "--ecc", default="M", choices=["L", "M", "Q", "H"], help="Error correction level")
    p_render.add_argument("--pattern-scale", type=float, default=0.4, help="Dot size for rounded data modules (0-1]")
    p_render.add_argument("--rounded", action="store_true", help="Draw data modules as dots")
    p_render.add_argument("--no-clear-border", action="store_true", help="Fill the border with the background too")
    p_render.add_argument("--light", default="FFFFFF", help="Light module colour (hex)")
    p_render.add_argument("--dark", default="000000", help="Dark module colour (hex)")
    p_render.add_argument("--background-color", default="FFFFFF", help="Background fill colour (hex)")
    p_render.add_argument("--auto-color", action="store_true", help="Derive module colours from the background image")
    p_render.add_argument("--logo", default=None, help="Path to logo image")
    p_render.add_argument("--logo-scale", type=float, default=0.2, help="Logo size relative to the symbol (0-0.5]")
    p_render.add_argument("--logo-border", type=int, default=10, help="Logo border width in pixels")
    p_render.add_argument("--logo-radius", type=int, default=8, help="Logo corner radius in pixels")
    p_render.add_argument("--background", default=None, help="Path to background image (GIF for --mode gif)")
    p_render.add_argument("--mode", default="still", choices=["still", "blend", "gif"], help="Background mode")
    p_render.add_argument("--alpha", type=float, default=0.6, help="Background opacity [0-1]")
    p_render.add_argument("--clip", type=_parse_rect, default=None, help="Background clip rect: left,top,right,bottom")
    p_render.add_argument("--blend-radius", type=int, default=10, help="Panel corner radius in blend mode")

    # --- tags ---
    p_tags = subparsers.add_parser("tags", help="Save a color-coded module tag map")
    p_tags.add_argument("content", help="Text or URL to encode")
    p_tags.add_argument("-o", "--output", default="output/tags.png", help="Output file path")
    p_tags.add_argument("-e", "--ecc", default="M", choices=["L", "M", "Q", "H"])

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging before any command runs
    level = "DEBUG" if args.verbose else "INFO"
    setup_logging(level=level, log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "render": cmd_render,
        "tags": cmd_tags,
    }
    try:
        commands[args.command](args)
    except RenderError as e:
        log.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    audit("cli.done", logger=log, command=args.command)


if __name__ == "__main__":
    main()
