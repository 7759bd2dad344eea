"""
Command-line driver.

    plworld table "p ∧ ¬q" [--json] [--max-vars N]
    plworld world days.txt
    plworld eval "Sunny → ¬Rainy" --world days.txt [--day Monday]
"""

import argparse
import sys

from .canonical import canonical_json
from .pl_parser import FormulaParseError, parse_formula
from .runtime import LogicRuntime
from .truth_table import TruthTableTooLargeError, check_table_size, format_truth_table, truth_table_records
from .world import WorldError
from .world_parser import load_world, serialize_world


def _cmd_table(args) -> int:
    expr = parse_formula(args.formula)
    check_table_size(expr, args.max_vars)
    if args.json:
        print(canonical_json({"formula": str(expr), "rows": truth_table_records(expr)}))
    else:
        sys.stdout.write(format_truth_table(expr))
    return 0


def _cmd_world(args) -> int:
    sys.stdout.write(serialize_world(load_world(args.file)))
    return 0


def _cmd_eval(args) -> int:
    runtime = LogicRuntime(load_world(args.world))
    if args.day is not None:
        results = {args.day: runtime.evaluate(args.formula, day=args.day)}
    else:
        results = runtime.evaluate_each_day(args.formula)

    status = 0
    for day, result in results.items():
        if result.ok:
            print(f"{day}: {'T' if result.value else 'F'}")
        else:
            print(f"{day}: {result.code}: {result.error}", file=sys.stderr)
            status = 1
    return status


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="plworld", description="Propositional formulas and weather worlds")
    sub = parser.add_subparsers(dest="command", required=True)

    table = sub.add_parser("table", help="Print the truth table of a formula")
    table.add_argument("formula")
    table.add_argument("--json", action="store_true", help="Emit canonical JSON instead of a text table")
    table.add_argument("--max-vars", type=int, default=None, help="Refuse formulas with more free variables")
    table.set_defaults(func=_cmd_table)

    world = sub.add_parser("world", help="Parse a world file and print its canonical form")
    world.add_argument("file")
    world.set_defaults(func=_cmd_world)

    ev = sub.add_parser("eval", help="Evaluate a formula against the days of a world")
    ev.add_argument("formula")
    ev.add_argument("--world", required=True, help="World file")
    ev.add_argument("--day", default=None, help="Only this day (default: every day)")
    ev.set_defaults(func=_cmd_eval)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (FormulaParseError, TruthTableTooLargeError, WorldError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
