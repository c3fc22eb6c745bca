"""huescope — Dominant hue analysis for raster images.

Usage: huescope <technique> <image> [options]

Techniques are auto-discovered from huescope/techniques/.
Each technique module's docstring is its documentation.
Run `huescope help <technique>` for full module docs.

Settings / .env loading:
  Command-line flags win, then OS environment variables (HUESCOPE_BINS,
  HUESCOPE_SIGMA, HUESCOPE_MAX_PEAKS, HUESCOPE_MAX_SIZE, HUESCOPE_DELTA_E),
  then a .env file found by walking up from the current directory, stopping
  at the nearest .git boundary. Use --env-file to point at a .env explicitly.
"""

import argparse
import importlib
import logging
import os
import sys

from huescope import registry
from huescope.core.config import ConfigError, Settings, load_settings
from huescope.core.image import load_image_sample
from huescope.core.report import format_json, format_text
from huescope.core.types import HistogramError, Report

logger = logging.getLogger('huescope')


def _load_technique_module(name: str) -> object:
    """Load the raw module for a technique (for docstring access)."""
    return importlib.import_module(f'huescope.techniques.{name}')


def _short_help(name: str, fallback: str) -> str:
    doc = (_load_technique_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else fallback


def _build_parser() -> argparse.ArgumentParser:
    techniques = registry.all_techniques()

    epilog = (
        'Examples:\n'
        '  huescope peaks photo.jpg\n'
        '  huescope peaks photo.jpg --max-peaks 3 --json\n'
        '  huescope histogram photo.jpg --bins 72 --sigma 1.5\n'
        '  huescope all photo.jpg --max-size 512\n'
        '  huescope help peaks\n'
        '\n'
        'Env vars (set in .env or environment):\n'
        '  HUESCOPE_BINS, HUESCOPE_SIGMA, HUESCOPE_MAX_PEAKS,\n'
        '  HUESCOPE_MAX_SIZE, HUESCOPE_DELTA_E\n'
    )
    parser = argparse.ArgumentParser(
        prog='huescope',
        description='Dominant hue analysis for raster images.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    # Global --env-file option before subcommand
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    sub = parser.add_subparsers(dest='technique', help='Technique to run')

    # Auto-register each technique as a subcommand using module docstring
    for name, tech in sorted(techniques.items()):
        p = sub.add_parser(name, help=_short_help(name, tech.help))
        p.add_argument('image', help='Path to image (any format Pillow can read)')
        p.add_argument('-b', '--bins', type=int, default=None, help='Hue bins around the circle (default: 360)')
        p.add_argument('-s', '--sigma', type=float, default=None, help='Gaussian smoothing width in bins (default: 3)')
        p.add_argument('-m', '--max-peaks', type=int, default=None, help='Cap on clusters (default: 5)')
        p.add_argument(
            '--max-size',
            type=int,
            default=None,
            metavar='PX',
            help='Downsample so the longest side is at most PX (default: 256)',
        )
        p.add_argument(
            '-d',
            '--delta-e',
            type=float,
            default=None,
            metavar='T',
            help='CIEDE2000 distance under which clusters fuse (default: 10)',
        )
        p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')
        p.add_argument('-v', '--verbose', action='store_true', help='Log analysis stages to stderr')

    # `help` subcommand — prints full module docstring for a technique
    help_parser = sub.add_parser('help', help='Print full docs for a technique')
    help_parser.add_argument('command', nargs='?', help='Technique name')

    return parser


def _print_help(command: str | None) -> None:
    """Print full module docstring for a technique."""
    techniques = registry.all_techniques()

    if command is None:
        print('Available techniques:\n')
        for name, tech in sorted(techniques.items()):
            print(f'  {name:<14} {_short_help(name, tech.help)}')
        print('\nRun: huescope help <technique> for full docs.')
        return

    if command not in techniques:
        print(f'Unknown technique: {command}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(techniques))}', file=sys.stderr)
        sys.exit(1)

    doc = (_load_technique_module(command).__doc__ or '').strip()
    if not doc:
        print(f'(No module docs for {command!r})')
        return
    print(doc)


def _configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(name)s: %(levelname)s: %(message)s'))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def _resolve_settings(args: argparse.Namespace) -> Settings:
    settings, env_path = load_settings(env_file=args.env_file)
    if env_path:
        print(f'huescope: loaded {env_path}', file=sys.stderr)
    return settings.override(
        bins=args.bins,
        sigma=args.sigma,
        max_peaks=args.max_peaks,
        max_size=args.max_size,
        delta_e=args.delta_e,
    )


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.technique:
        parser.print_help()
        sys.exit(1)

    if args.technique == 'help':
        _print_help(getattr(args, 'command', None))
        return

    _configure_logging(args.verbose)

    try:
        args.settings = _resolve_settings(args)
    except ConfigError as e:
        print(f'huescope: error: {e}', file=sys.stderr)
        sys.exit(1)

    if not os.path.isfile(args.image):
        print(f'huescope: error: image not found: {args.image}', file=sys.stderr)
        sys.exit(1)

    try:
        sample = load_image_sample(args.image, max_size=args.settings.max_size)
    except OSError as e:
        print(f'huescope: error: cannot read image {args.image}: {e}', file=sys.stderr)
        sys.exit(1)
    logger.debug(
        'sampled %s at %dx%d from %dx%d',
        args.image,
        sample.width,
        sample.height,
        sample.original_width,
        sample.original_height,
    )

    report = Report.for_sample(sample, args.settings.as_dict())

    tech = registry.get(args.technique)
    try:
        tech.execute(sample, report, args)
    except HistogramError as e:
        print(f'huescope: error: {e}', file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(format_json(report))
    else:
        print(format_text(report))


if __name__ == '__main__':
    main()
