#!/usr/bin/env python3
"""
SVG ViewBox Fitter

Recomputes the bounding box of every <path> in an SVG file, including the
transforms inherited from its ancestors, and rewrites the root viewBox,
width and height attributes to fit that content.
"""

import argparse
import math
import sys
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Optional, Tuple

from svg_bounding_box import calculate_document_bbox
from svg_document import (
    find_path_elements,
    find_svg_root,
    load_svg_document,
    write_svg_document,
)

DEFAULT_PADDING = 0.0
DEFAULT_PRECISION = 4

WIDE_CONTEXT = Context(prec=1000)

VALUE_OPTIONS = ('--padding', '-p', '--precision')
ATTACHED_VALUE_PREFIXES = ('--padding=', '--precision=')
FLAG_OPTIONS = ('--dry-run', '-h', '--help')


@dataclass(frozen=True)
class FitConfig:
    padding: float = DEFAULT_PADDING
    precision: int = DEFAULT_PRECISION
    dry_run: bool = False
    targets: Tuple[str, ...] = ()


def padding_value(value: str) -> float:
    try:
        padding = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Missing numeric value after --padding: {value!r}")
    if math.isnan(padding):
        raise argparse.ArgumentTypeError("Missing numeric value after --padding")
    return padding


def precision_value(value: str) -> int:
    try:
        precision = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Missing numeric value after --precision: {value!r}")
    if precision < 0:
        raise argparse.ArgumentTypeError(f"--precision must be >= 0, got {precision}")
    return precision


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='fit-svg-viewbox',
        description='Fit the viewBox, width and height of SVG files to the bounds of their paths.',
        allow_abbrev=False,
    )
    parser.add_argument(
        '--padding',
        '-p',
        type=padding_value,
        default=DEFAULT_PADDING,
        metavar='VALUE',
        help='Add padding (in SVG units) around detected bounds (default: 0)'
    )
    parser.add_argument(
        '--precision',
        type=precision_value,
        default=DEFAULT_PRECISION,
        metavar='INT',
        help='Decimal places to keep when writing numbers (default: 4)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print the computed viewBox without modifying files'
    )
    parser.add_argument(
        'targets',
        nargs='*',
        metavar='svg',
        help='SVG files to update in place'
    )
    return parser


def collect_targets(argv) -> Tuple[str, ...]:
    """Return the non-option tokens of argv in the order they were given.

    Unrecognised option-like tokens such as -x count as targets.
    """
    targets = []
    tokens = iter(argv)
    for token in tokens:
        if token == '--':
            targets.extend(tokens)
            break
        if token in VALUE_OPTIONS:
            next(tokens, None)
        elif token in FLAG_OPTIONS or token.startswith(ATTACHED_VALUE_PREFIXES):
            continue
        elif token.startswith('-p') and not token.startswith('--'):
            # -p2
            continue
        else:
            targets.append(token)
    return tuple(targets)


def parse_arguments(argv) -> FitConfig:
    """Turn a raw argument list into a FitConfig.

    Exits through argparse on usage errors. Unrecognised tokens are kept
    as targets.
    """
    parser = build_parser()
    if not argv:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args, _ = parser.parse_known_args(argv)
    targets = collect_targets(argv)
    if not targets:
        parser.error('No SVG files provided')

    return FitConfig(
        padding=args.padding,
        precision=args.precision,
        dry_run=args.dry_run,
        targets=targets,
    )


def format_number(value: float, precision: int) -> str:
    """Round to precision decimals and drop trailing zeros (10.50 -> 10.5).

    Ties round away from zero, using the exact binary value of the float.
    The rounded value is written in its shortest round-trip form, so high
    precisions do not expose binary noise (0.1 stays 0.1).
    """
    if not math.isfinite(value):
        return str(value)
    quantum = Decimal(1).scaleb(-precision)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=WIDE_CONTEXT)
    text = f"{Decimal(repr(float(rounded))):f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text == '-0':
        text = '0'
    return text


def apply_viewbox(svg_root, bbox, config: FitConfig) -> str:
    """Pad bbox and write viewBox, width and height onto svg_root."""
    min_x, min_y, max_x, max_y = bbox
    min_x -= config.padding
    min_y -= config.padding
    max_x += config.padding
    max_y += config.padding

    # Negative padding may produce a negative extent; it is written as is.
    width = max_x - min_x
    height = max_y - min_y

    view_box = ' '.join(format_number(v, config.precision) for v in (min_x, min_y, width, height))
    svg_root.set('viewBox', view_box)
    svg_root.set('width', format_number(width, config.precision))
    svg_root.set('height', format_number(height, config.precision))
    return view_box


def fit_svg_file(target: str, config: FitConfig) -> Optional[str]:
    """Fit a single SVG file.

    Returns the written viewBox, or None when the file was skipped.
    """
    document = load_svg_document(target)

    svg_root = find_svg_root(document)
    if svg_root is None:
        print(f"Skipping {target}: <svg> root not found", file=sys.stderr)
        return None

    bbox = calculate_document_bbox(find_path_elements(document), target)
    if bbox is None:
        print(f"Skipping {target}: no <path> elements with calculable bounds", file=sys.stderr)
        return None

    view_box = apply_viewbox(svg_root, bbox, config)
    if not config.dry_run:
        write_svg_document(document, target)

    mode = 'dry-run' if config.dry_run else 'updated'
    print(f"[{mode}] {target} → viewBox {view_box}")
    return view_box


def main(argv=None):
    """Main function to run the script."""
    if argv is None:
        argv = sys.argv[1:]
    config = parse_arguments(argv)

    for target in config.targets:
        fit_svg_file(target, config)

    return 0


if __name__ == "__main__":
    sys.exit(main())
