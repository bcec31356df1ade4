from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import RenderConfig, load_render_config
from .geometry import Size
from .host import ExpressionHost
from .raster.surface import RasterSurface
from .samples import SAMPLES, build_sample


LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="eqcanvas")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a sample expression to PNG.")
    render.add_argument("sample", choices=sorted(SAMPLES))
    render.add_argument("--out", type=Path, default=None, help="Output PNG path. Default: <sample>.png")
    render.add_argument("--config", type=Path, default=None, help="Render config TOML ([render] table).")
    render.add_argument("--width", type=int, default=None, help="Viewport width override.")
    render.add_argument("--height", type=int, default=None, help="Viewport height override.")

    sub.add_parser("list", help="List sample expression names.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "list":
        for name in SAMPLES:
            print(name)
        return 0

    config = load_render_config(args.config) if args.config is not None else RenderConfig()
    width = args.width if args.width is not None else config.viewport_width
    height = args.height if args.height is not None else config.viewport_height
    if width <= 0 or height <= 0:
        parser.error("--width/--height must be > 0")

    metrics = config.font_metrics()
    surface = RasterSurface(width, height, background=config.background, metrics=metrics)
    host = ExpressionHost(Size(float(width), float(height)), build_sample(args.sample, metrics))
    host.render(surface)
    out = surface.save_png(args.out or Path(f"{args.sample}.png"))
    LOGGER.info("wrote %s (%dx%d)", out, width, height)
    print(out)
    return 0
