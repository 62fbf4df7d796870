import os
import sys
import logging
import argparse
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..models.operation_result import OperationResult
from ..services.image_editor_service import ImageEditor

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-editor",
        description="Open an image, apply filters and adjustments, save the result.",
    )
    parser.add_argument("input", help="Image to open (jpg, png, bmp)")
    parser.add_argument("-o", "--output", help="Where to save the edited image")
    parser.add_argument("--filter", dest="filters", action="append", default=[],
                        metavar="NAME", help="grayscale, blur, sharpen, invert or mirror (repeatable)")
    parser.add_argument("--brightness", type=float, help="Brightness factor, 1.0 = unchanged")
    parser.add_argument("--saturation", type=float, help="Saturation factor, 1.0 = unchanged")
    parser.add_argument("--scale", type=float, help="Resize factor, 1.0 = unchanged")
    parser.add_argument("--offsets", type=int, nargs=3, metavar=("R", "G", "B"),
                        help="Per-channel offsets in [-255, 255]")
    parser.add_argument("--overlay", help="Second image blended on top")
    parser.add_argument("--opacity", type=float, help="Overlay opacity in [0, 1]")
    parser.add_argument("--palette", type=int, metavar="N", help="Print an N-color palette")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _configure_logging(verbose: bool) -> None:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def run(args: argparse.Namespace, editor: ImageEditor = None) -> int:
    editor = editor or ImageEditor()
    results: List[OperationResult] = []

    opened = editor.open(args.input)
    if not opened.ok:
        return 1

    for name in args.filters:
        results.append(editor.apply_filter(name))
    if args.brightness is not None:
        results.append(editor.set_brightness(args.brightness))
    if args.saturation is not None:
        results.append(editor.set_saturation(args.saturation))
    if args.offsets is not None:
        results.append(editor.set_channel_offsets(*args.offsets))
    if args.overlay:
        results.append(editor.add_overlay(args.overlay, args.opacity))
    if args.scale is not None:
        results.append(editor.set_scale(args.scale))

    if args.palette:
        palette_result = editor.extract_palette(args.palette)
        results.append(palette_result)
        if palette_result.ok:
            for hex_color, share in zip(palette_result.value.to_hex(), palette_result.value.shares):
                print(f"{hex_color}  {share:6.1%}")

    if args.output:
        results.append(editor.save(args.output))

    failed = [r for r in results if not r.ok]
    if failed:
        logger.error(f"{len(failed)} operation(s) failed")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose or os.getenv("LOG_LEVEL", "").upper() == "DEBUG")
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
