"""Pix3l command-line editor.

Applies adjustments, filters and transforms to one image through the
undo history and writes the result.
"""

import os
import sys

os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")

import argparse
import json
import logging
import math
import time
from typing import Dict, List, Optional, Tuple

from pix3l.application.editor import ImageEditor
from pix3l.commands.factory import FilterType, FlipDirection
from pix3l.core.errors import ImageIOError
from pix3l.features.adjustments.models import AdjustmentParameters
from pix3l.features.enhance.plots import save_histogram_plot
from pix3l.features.suggestions.logic import parse_enhancement_response
from pix3l.kernel.system.config import APP_CONFIG
from pix3l.kernel.system.logging import setup_logging

FILTER_CHOICES = tuple(f.value for f in FilterType)
FLIP_CHOICES = tuple(d.value for d in FlipDirection)
ADJUSTMENT_KEYS = (
    "brightness",
    "contrast",
    "saturation",
    "hue",
    "gamma",
    "temperature",
    "exposure",
    "shadows",
    "highlights",
)


def parse_adjustment(text: str) -> Tuple[str, float]:
    """'brightness=20' -> ('brightness', 20.0)"""
    key, sep, value = text.partition("=")
    key = key.strip().lower()
    if not sep or key not in ADJUSTMENT_KEYS:
        raise argparse.ArgumentTypeError(
            f"expected KEY=VALUE with KEY one of {', '.join(ADJUSTMENT_KEYS)}"
        )
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not math.isfinite(number):
        raise argparse.ArgumentTypeError(f"not a finite number: {value!r}")
    return key, number


def parse_size(text: str) -> Tuple[int, int]:
    """'800x600' -> (800, 600)"""
    try:
        w, h = text.lower().split("x")
        return int(w), int(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}")


def parse_rect(text: str) -> Tuple[int, int, int, int]:
    """'10,20,300,200' -> (10, 20, 300, 200)"""
    try:
        x, y, w, h = (int(v) for v in text.split(","))
        return x, y, w, h
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected X,Y,WIDTH,HEIGHT, got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pix3l",
        description="Pix3l -- raster image editor",
        epilog="Example: pix3l photo.jpg --auto-enhance --filter sharpen -o out.jpg",
    )

    parser.add_argument("input", metavar="FILE", help="Image to edit")

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        metavar="FILE",
        help="Where to write the result (format from extension). Omit for a dry run",
    )

    parser.add_argument(
        "--adjust",
        action="append",
        type=parse_adjustment,
        default=[],
        metavar="KEY=VALUE",
        help="Tonal adjustment, repeatable (e.g. brightness=20, gamma=1.2)",
    )

    parser.add_argument(
        "--settings",
        default=None,
        metavar="JSON_FILE",
        help="JSON preset file, or a preset name from the user presets folder; --adjust overrides it",
    )

    parser.add_argument(
        "--auto-enhance",
        action="store_true",
        default=False,
        help="Analyse the image and apply suggested corrections first",
    )

    parser.add_argument(
        "--suggestions",
        default=None,
        metavar="JSON_FILE",
        help="Apply enhancement suggestions from a JSON response file",
    )

    parser.add_argument(
        "--filter",
        action="append",
        choices=FILTER_CHOICES,
        default=[],
        dest="filters",
        help="Filter to apply, repeatable, in the given order",
    )

    parser.add_argument("--blur", type=int, default=None, metavar="RADIUS", help="Box blur radius (1-10)")

    parser.add_argument(
        "--rotate", type=int, default=None, metavar="DEG", help="Rotate clockwise by degrees"
    )

    parser.add_argument("--flip", choices=FLIP_CHOICES, default=None, help="Flip horizontally (h) or vertically (v)")

    parser.add_argument("--resize", type=parse_size, default=None, metavar="WxH", help="Resize to exact size")

    parser.add_argument("--crop", type=parse_rect, default=None, metavar="X,Y,W,H", help="Crop rectangle")

    parser.add_argument(
        "--quality",
        type=int,
        default=None,
        metavar="1-100",
        help=f"JPEG quality (default: {APP_CONFIG.jpeg_quality})",
    )

    parser.add_argument(
        "--histogram",
        default=None,
        metavar="PNG",
        help="Save a histogram plot of the result",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Debug logging",
    )

    return parser


def resolve_settings_path(name: str, presets_dir: str) -> str:
    """
    A path that exists is used as given; otherwise the name is looked up
    in the presets directory, with or without the .json suffix.
    """
    if os.path.exists(name):
        return name
    for candidate in (name, f"{name}.json"):
        path = os.path.join(presets_dir, candidate)
        if os.path.exists(path):
            return path
    return name


def build_parameters(
    settings_path: Optional[str], overrides: List[Tuple[str, float]]
) -> AdjustmentParameters:
    """Preset file first, then KEY=VALUE overrides on top."""
    values: Dict[str, float] = {}
    if settings_path:
        with open(settings_path, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise TypeError("settings file must contain a JSON object")
        values.update(AdjustmentParameters.from_dict(data).to_dict())
    for key, value in overrides:
        values[key] = value
    return AdjustmentParameters.from_dict(values)


def run_edits(editor: ImageEditor, args: argparse.Namespace) -> None:
    if args.auto_enhance:
        editor.auto_enhance()

    settings = (
        resolve_settings_path(args.settings, editor.config.presets_dir)
        if args.settings
        else None
    )
    params = build_parameters(settings, args.adjust)
    editor.apply_adjustments(params)

    if args.suggestions:
        with open(args.suggestions, "r") as f:
            analysis = parse_enhancement_response(f.read())
        if analysis is None:
            raise ValueError(f"no usable suggestions in {args.suggestions}")
        editor.apply_suggestions(analysis.suggestions)

    for name in args.filters:
        editor.apply_filter(FilterType(name))
    if args.blur is not None:
        editor.blur(args.blur)
    if args.rotate is not None:
        editor.rotate(args.rotate)
    if args.flip is not None:
        editor.flip(FlipDirection(args.flip))
    if args.resize is not None:
        editor.resize(*args.resize)
    if args.crop is not None:
        editor.crop(args.crop)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on failure."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else APP_CONFIG.log_level)
    editor = ImageEditor(APP_CONFIG)
    t_start = time.monotonic()

    try:
        editor.open(args.input)
    except ImageIOError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        run_edits(editor, args)
    except (OSError, ValueError, TypeError, OverflowError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for i, label in enumerate(editor.history(), 1):
        print(f"  {i}. {label}")

    raster = editor.raster
    if args.histogram and raster is not None:
        save_histogram_plot(raster.pixels, args.histogram)

    if args.output:
        try:
            editor.save(args.output, args.quality)
        except ImageIOError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(
            f"Saved {args.output} ({editor.document.width}x{editor.document.height}) "
            f"in {time.monotonic() - t_start:.1f}s",
            file=sys.stderr,
        )
    return 0


def cli_entry() -> None:
    """Console script entry point."""
    sys.exit(main())
