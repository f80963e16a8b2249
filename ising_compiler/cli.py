"""Command-line entry point compiling graph files into Ising models."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence, TextIO

from .ising import IsingModel
from .problems import ProblemKind
from .runner import BatchConfig, BatchRunner, CompilerConfig, InstanceResult, create_encoder
from .sequence import sequence_from_model, serialize

logger = logging.getLogger("ising_compiler")

EPILOG = """\
Example: python -m ising_compiler -i graph1.json -i graph2.json --h -1.0 --j 2.0

Expected JSON format for an input file:
  {"vertices": 4, "edges": [[0,1], [1,2], [2,3], [3,0]]}
Weighted and coloured variants add "weights" (array or {"i,j": w}) and "colors".
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ising-compiler",
        description=(
            "Compile graphs into Ising models for analog neutral-atom quantum "
            "computers."
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-i",
        "--input",
        dest="inputs",
        metavar="PATH",
        type=Path,
        action="append",
        default=[],
        help="JSON graph file (can be given several times).",
    )
    parser.add_argument(
        "--problem",
        choices=[kind.value for kind in ProblemKind],
        default=ProblemKind.MIS.value,
        help="Problem family to encode.",
    )
    parser.add_argument(
        "--h",
        type=float,
        default=-1.0,
        help="External field for MIS (typically negative).",
    )
    parser.add_argument(
        "--j",
        type=float,
        default=2.0,
        help="Interaction strength for MIS (must be positive).",
    )
    parser.add_argument(
        "--colors",
        type=int,
        default=None,
        help="Colour count for colouring; overrides the value in the input file.",
    )
    parser.add_argument("--onehot-penalty", type=float, default=2.0)
    parser.add_argument("--adjacency-penalty", type=float, default=2.0)
    parser.add_argument(
        "--coloring-field",
        type=float,
        default=-1.0,
        help="Field on every colouring spin (must be negative).",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json", "pulser"),
        default="text",
        help="Output as a readable summary, coefficient JSON or a pulse sequence.",
    )
    parser.add_argument(
        "--json",
        dest="format",
        action="store_const",
        const="json",
        help="Shorthand for --format json.",
    )
    parser.add_argument(
        "--no-progress",
        dest="progress",
        action="store_false",
        help="Disable the progress bar.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
    )
    return parser


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.inputs:
        parser.error("at least one input file must be specified")
    if args.j <= 0:
        parser.error(f"--j must be positive, got {args.j}")
    if args.onehot_penalty <= 0 or args.adjacency_penalty <= 0:
        parser.error("colouring penalties must be positive")
    if args.coloring_field >= 0:
        parser.error(f"--coloring-field must be negative, got {args.coloring_field}")
    if args.colors is not None and args.colors <= 0:
        parser.error(f"--colors must be positive, got {args.colors}")
    return args


def format_model(model: IsingModel, output_format: str) -> str:
    if output_format == "json":
        return model.to_json()
    if output_format == "pulser":
        return serialize(sequence_from_model(model)).decode("utf-8")
    return model.summary()


def _report(result: InstanceResult, output_format: str, stream: TextIO) -> None:
    if not result.ok:
        return
    assert result.model is not None
    stream.write(f"Result for {result.instance_id}:\n")
    stream.write(format_model(result.model, output_format) + "\n")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.problem == ProblemKind.MIS.value and args.h >= 0:
        logger.warning("h is typically negative for MIS problems (got %s)", args.h)

    config = CompilerConfig(
        problem=args.problem,
        h=args.h,
        j=args.j,
        colors=args.colors,
        onehot_penalty=args.onehot_penalty,
        adjacency_penalty=args.adjacency_penalty,
        coloring_field=args.coloring_field,
    )
    runner = BatchRunner(create_encoder(config), BatchConfig(progress=args.progress))

    inputs = list(dict.fromkeys(args.inputs))
    result = runner.run(
        inputs, on_result=lambda item: _report(item, args.format, sys.stdout)
    )

    for failure in result.failed:
        sys.stderr.write(f"Error processing {failure.instance_id}: {failure.error}\n")
    sys.stdout.write("Compilation completed.\n")
    return 0


__all__ = ["main", "format_model"]
