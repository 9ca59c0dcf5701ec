"""Command line entry point: read a dimension export and cluster it per identifier."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .errors import GrezziError, InvalidTolerance
from .ingest.csv_reader import parse_column_list
from .pipeline.orchestrator import run
from .sink.writer import OUTPUT_FORMATS
from .tools.config_loader import RunConfig, get_config

logger = logging.getLogger("grezzi")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grezzi",
        description="Read raw-piece dimensions and group them into tolerance clusters",
    )
    parser.add_argument("input", type=Path, help="Input CSV file")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Output file (stdout when omitted)")
    parser.add_argument("-i", "--identifiers-columns", type=str, default=None,
                        help="Comma-separated list of identifier columns (1-based index)")
    parser.add_argument("-w", "--width-column", type=int, default=None,
                        help="Column containing the width")
    parser.add_argument("-l", "--length-column", type=int, default=None,
                        help="Column containing the length")
    parser.add_argument("--offset-min", type=float, default=None, help="Tolerance lower offset")
    parser.add_argument("--offset-max", type=float, default=None, help="Tolerance upper offset")
    parser.add_argument("-d", "--delimiter", type=str, default=None, help="Field separator")
    parser.add_argument("-f", "--format", choices=OUTPUT_FORMATS, default=None, dest="output_format")
    parser.add_argument("-p", "--plot", action="store_true", default=None,
                        help="Create an image representing the distributions")
    parser.add_argument("--plot-path", type=Path, default=None)
    parser.add_argument("--workers", type=_positive_int, default=None, help="Worker threads for group clustering")
    parser.add_argument("--profile", type=str, default=None,
                        help="Config profile name or YAML path (default: $GREZZI_PROFILE or 'default')")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="count", default=0)
    verbosity.add_argument("-q", "--quiet", action="store_true")
    return parser


def _configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_config(args: argparse.Namespace) -> RunConfig:
    """Profile values overridden by whatever was given on the command line."""
    config = get_config(args.profile)
    return config.override(
        input_path=args.input,
        output_path=args.output,
        identifier_columns=(
            parse_column_list(args.identifiers_columns) if args.identifiers_columns else None
        ),
        width_column=args.width_column,
        height_column=args.length_column,
        tolerance_min=args.offset_min,
        tolerance_max=args.offset_max,
        delimiter=args.delimiter,
        output_format=args.output_format,
        plot=args.plot,
        plot_path=args.plot_path,
        max_workers=args.workers,
    )


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as e:
        parser.error(str(e))

    try:
        result = run(config)
    except InvalidTolerance as e:
        logger.error("Invalid tolerance: %s", e)
        return 2
    except GrezziError as e:
        logger.error("%s", e)
        return 1

    if result.output_path is not None:
        print(f"Clusters: {result.output_path}", file=sys.stderr)
    if result.plot_path is not None:
        print(f"Plot: {result.plot_path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
