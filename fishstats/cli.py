"""Command-line entry point for Jolly-Seber estimates and ALK plots."""

from __future__ import annotations

import argparse
import logging
import os
import sys

import matplotlib.pyplot as plt
import pandas as pd

from .alk import age_length_key
from .markrecap import cap_hist_sum, mr_open
from .markrecap.mr_open import DEFAULT_CONF_LEVEL, METHODS
from .output import save_mr_open_to_csv
from .plotting import ALK_PLOT_TYPES, PALETTES, alk_plot
from .plotting.style import sanitize_filename

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "output"


def _configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _run_mr_open(args: argparse.Namespace) -> int:
    df = pd.read_csv(args.csv)
    logger.info("Read %d capture histories from %s", len(df), args.csv)
    summary = cap_hist_sum(df, cols2ignore=args.cols2ignore or None)
    result = mr_open(
        summary,
        method=args.method,
        conf_level=args.conf_level,
        phi_full=args.phi_full,
    )
    with pd.option_context("display.width", 120):
        print(result.summary(verbose=True).to_string())
        print()
        print(f"{result.conf_level:.0%} confidence intervals ({result.method}):")
        print(result.confint().to_string())
    save_mr_open_to_csv(result, args.output_dir)
    return 0


def _run_alk_plot(args: argparse.Namespace) -> int:
    df = pd.read_csv(args.csv)
    for col in (args.length_col, args.age_col):
        if col not in df.columns:
            raise KeyError(f"Column {col!r} not found in {args.csv}.")
    key = age_length_key(df[args.length_col], df[args.age_col], width=args.width)
    logger.info("Built age-length key with %d lengths and %d ages", *key.shape)
    stem = sanitize_filename(f"alk_{args.type}_{os.path.splitext(os.path.basename(args.csv))[0]}")
    savepath = os.path.join(args.output_dir, f"{stem}.png")
    ax = alk_plot(key, type=args.type, pal=args.pal, savepath=savepath)
    plt.close(ax.figure)
    return 0


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build command-line parser for module execution."""
    parser = argparse.ArgumentParser(
        prog="fishstats",
        description="Fisheries statistics: Jolly-Seber estimates and age-length key plots.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    mr = sub.add_parser("mr-open", help="Jolly-Seber estimates from capture histories.")
    mr.add_argument("csv", help="CSV with one row per fish and one 0/1 column per event.")
    mr.add_argument(
        "--cols2ignore",
        nargs="*",
        default=None,
        help="Columns that are not capture events (e.g. a fish id).",
    )
    mr.add_argument(
        "--type",
        dest="method",
        choices=METHODS,
        default="jolly",
        help="Confidence-interval method (default: jolly).",
    )
    mr.add_argument(
        "--conf-level",
        type=float,
        default=DEFAULT_CONF_LEVEL,
        help=f"Confidence level (default: {DEFAULT_CONF_LEVEL}).",
    )
    mr.add_argument(
        "--no-phi-full",
        dest="phi_full",
        action="store_false",
        help="Exclude individual survival variability from the phi SE.",
    )
    mr.add_argument(
        "--output-dir",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR}).",
    )
    mr.set_defaults(func=_run_mr_open)

    alk = sub.add_parser("alk-plot", help="Plot an age-length key built from aged fish.")
    alk.add_argument("csv", help="CSV with one row per aged fish.")
    alk.add_argument("--length-col", required=True, help="Length column name.")
    alk.add_argument("--age-col", required=True, help="Age column name.")
    alk.add_argument("--width", type=float, required=True, help="Length-interval width.")
    alk.add_argument("--type", choices=ALK_PLOT_TYPES, default="barplot")
    alk.add_argument("--pal", choices=PALETTES, default="default")
    alk.add_argument(
        "--output-dir",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR}).",
    )
    alk.set_defaults(func=_run_alk_plot)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint; returns 0 on success and 1 on invalid input."""
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging()
    try:
        return args.func(args)
    except (ValueError, KeyError, OSError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
