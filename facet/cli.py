"""Command-line entry point for the faceting solvers.

    facet evaluate [--config PATH] [state/target options] [--precision N] [-v]
        Probability of reaching the target for each first move.
    facet path [--config PATH] [state/target options] [-v]
        Most probable sequence of rolls from the start state to the target.

Command-line options override values from the config file.
"""

from __future__ import annotations

import argparse
import logging
import sys

from facet.analysis.report import print_path, print_probabilities
from facet.config import FacetConfig, load_config
from facet.engine.chance import SCALE
from facet.engine.exact import checked_pow
from facet.solvers.path_search import find_best_path


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="JSON config file (see facet/config.py)")
    parser.add_argument("--chance", type=int, help="current chance level: 25, 35, 45, 55, 65 or 75")
    parser.add_argument("--lines", type=int, nargs=3, metavar="N", help="successes so far per line")
    parser.add_argument("--rolls", type=int, nargs=3, metavar="N", help="rolls used so far per line")
    parser.add_argument(
        "--target-lines",
        type=int,
        nargs=3,
        metavar="N",
        help="minimum successes on lines 0 and 1, maximum on line 2",
    )
    parser.add_argument("--target-rolls", type=int, nargs=3, metavar="N", help="roll budget per line")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="facet",
        description="Optimal-play probabilities for ability-stone faceting.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    evaluate = commands.add_parser("evaluate", help="probability of success for each first move")
    _add_common_options(evaluate)
    evaluate.add_argument("--precision", type=int, help="decimal digits in the output")

    path = commands.add_parser("path", help="most probable path to the target")
    _add_common_options(path)
    return parser


def _resolve_config(args: argparse.Namespace) -> FacetConfig:
    config = load_config(args.config) if args.config else FacetConfig()
    return config.merged(
        chance=args.chance,
        lines=args.lines,
        rolls=args.rolls,
        target_lines=args.target_lines,
        target_rolls=args.target_rolls,
        precision=getattr(args, "precision", None),
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        config = _resolve_config(args)
        stone = config.stone()
        target = config.target()
        target.validate(stone)
        checked_pow(SCALE, target.total_rolls)
    except (OSError, ValueError, OverflowError) as exc:
        parser.error(str(exc))

    if args.command == "evaluate":
        print_probabilities(stone, target, config.precision)
        return 0

    path = find_best_path(stone, target)
    print_path(path)
    return 0 if path is not None else 1


if __name__ == "__main__":
    sys.exit(main())
