"""Command-line entry point for rotalabs-matrix.

Loads a condition configuration, evaluates it against the environment-derived
context and writes the resulting matrix. Inside GitHub Actions the inputs
default to the action's ``INPUT_*`` variables and the matrix is appended to
``$GITHUB_OUTPUT``.
"""

import argparse
import logging
import os
import sys
from typing import List, Mapping, Optional

from rotalabs_matrix import __version__
from rotalabs_matrix.core.config import DEFAULT_MAX_DEPTH, load_conditions
from rotalabs_matrix.core.context import build_context
from rotalabs_matrix.evaluation.evaluator import ConditionEvaluator
from rotalabs_matrix.matrix import format_output, generate_matrix

logger = logging.getLogger(__name__)


def build_parser(environ: Mapping[str, str]) -> argparse.ArgumentParser:
    """Build the CLI parser, taking defaults from ``environ``."""
    parser = argparse.ArgumentParser(
        prog="rotalabs-matrix",
        description="Evaluate condition rules against the environment and emit a job matrix.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-f",
        "--conditions-file",
        default=environ.get("INPUT_CONDITIONS-FILE") or None,
        help="Path to a JSON or YAML conditions file",
    )
    parser.add_argument(
        "-j",
        "--conditions-json",
        default=environ.get("INPUT_CONDITIONS-JSON") or None,
        help="Inline JSON conditions",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum condition group nesting (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=environ.get("GITHUB_OUTPUT") or None,
        help="File to append 'matrix=<json>' to (prints JSON to stdout if omitted)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=environ.get("RUNNER_DEBUG") == "1",
        help="Enable debug logging",
    )
    return parser


def write_output(path: Optional[str], name: str, value: str) -> None:
    if path is None:
        print(value)
        return

    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")


def run(
    conditions_file: Optional[str],
    conditions_json: Optional[str],
    environ: Mapping[str, str],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict:
    """Load conditions, evaluate them and build the matrix."""
    conditions = load_conditions(conditions_file, conditions_json, max_depth=max_depth)
    logger.debug("Loaded conditions", extra={"rules": conditions.names})

    context = build_context(environ)

    result = ConditionEvaluator(context, max_depth=max_depth).evaluate(conditions)
    logger.debug(
        "Evaluation result",
        extra={"matched": result.matched, "matched_conditions": result.matched_conditions},
    )

    outputs_list = [result.outputs] if result.matched else []
    return generate_matrix(outputs_list)


def main(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    """CLI entrypoint."""
    if environ is None:
        environ = os.environ

    args = build_parser(environ).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    try:
        matrix = run(args.conditions_file, args.conditions_json, environ, max_depth=args.max_depth)
        write_output(args.output, "matrix", format_output(matrix))
    except (ValueError, OSError) as e:
        logger.error(f"Action failed: {e}")
        logger.debug("Failure details", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
