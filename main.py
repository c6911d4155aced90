# main.py
"""
Main entry point for spinglobe.

    python main.py                       # window with the rotating globe
    python main.py --headless --max-frames 120
    python main.py --frames 60 --out globe_frames
    python main.py --svg globe.svg --rotation 45
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from spinglobe.core.assets import AssetSource, FileAssetSource, HttpAssetSource
from spinglobe.core.errors import GlobeError
from spinglobe.core.topology import decode
from spinglobe.utils import settings
from spinglobe.utils.logging_setup import configure_logging
from spinglobe.utils.settings import GlobeConfig

log = logging.getLogger("spinglobe.main")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a rotating orthographic globe from TopoJSON.")
    parser.add_argument("--size", type=float, default=settings.GLOBE_SIZE, help="Viewport edge length in pixels.")
    parser.add_argument("--speed", type=float, default=settings.GLOBE_ROTATION_SPEED, help="Rotation in degrees per frame.")
    parser.add_argument("--asset", default=settings.TOPO_JSON_PATH, help="Path (or URL path) of the TopoJSON asset.")
    parser.add_argument("--collection", default=settings.COLLECTION_KEY, help="Object name inside the topology.")
    parser.add_argument("--base-url", default=None, help="Fetch the asset over HTTP relative to this URL.")
    parser.add_argument("--headless", action="store_true", help="Use SDL dummy drivers (no actual window).")
    parser.add_argument("--max-frames", type=int, default=None, help="Stop the window loop after N frames.")
    parser.add_argument("--frames", type=int, default=None, metavar="N", help="Export N PNG frames of one turn and exit.")
    parser.add_argument("--out", default=settings.GLOBE_FRAMES_DIR, help="Directory for --frames output.")
    parser.add_argument("--svg", default=None, metavar="FILE", help="Write one SVG snapshot and exit.")
    parser.add_argument("--rotation", type=float, default=0.0, help="Rotation used for --svg.")
    parser.add_argument("--log-file", action="store_true", help="Also log to logs/spinglobe-*.log.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def _source(args: argparse.Namespace) -> AssetSource:
    if args.base_url:
        return HttpAssetSource(args.base_url)
    return FileAssetSource()


def _export(args: argparse.Namespace, config: GlobeConfig, source: AssetSource) -> int:
    from spinglobe.rendering.globe_frames import build_frame, render_globe_frames, write_svg

    asset = source.fetch(config.asset_path).result()
    geometry = decode(asset, config.collection_key)

    if args.svg:
        write_svg(build_frame(geometry, args.rotation, config.size), args.svg, config.size)
    if args.frames:
        for progress in render_globe_frames(geometry, args.out, frames=args.frames, size_px=int(config.size)):
            log.debug("Export progress %.0f%%", progress * 100)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO, log_to_file=args.log_file)

    try:
        config = GlobeConfig(
            size=args.size,
            rotation_speed=args.speed,
            asset_path=args.asset,
            collection_key=args.collection,
        )
    except ValueError as e:
        log.error("Invalid configuration: %s", e)
        return 2

    source = _source(args)
    try:
        if args.svg or args.frames:
            return _export(args, config, source)

        from spinglobe.app import GlobeApp, configure_environment

        configure_environment(True if args.headless else None)
        return GlobeApp(config, source).run(max_frames=args.max_frames)
    except GlobeError as e:
        log.error("spinglobe failed: %s", e)
        return 1
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 3
    finally:
        close = getattr(source, "close", None)
        if callable(close):
            close()


if __name__ == "__main__":
    sys.exit(main())
