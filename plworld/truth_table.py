"""
truth_table.py

Brute-force truth tables for propositional formulas.

Variables are ordered by name. The first variable is the most significant
"bit" and False sorts before True, so row 0 is the all-false assignment and
the last row is the all-true assignment.
"""

from typing import Any, Dict, List, Optional, Tuple
import os

from .pl_expression import Expression, variables_in

# Callers that enumerate user-supplied formulas should reject anything with
# more free variables than this. Override with PLWORLD_MAX_TABLE_VARS.
_FALLBACK_MAX_TABLE_VARIABLES = 16


def _max_table_variables_from_env() -> int:
    raw = os.getenv("PLWORLD_MAX_TABLE_VARS")
    if raw is None:
        return _FALLBACK_MAX_TABLE_VARIABLES
    try:
        return int(raw)
    except ValueError:
        return _FALLBACK_MAX_TABLE_VARIABLES


DEFAULT_MAX_TABLE_VARIABLES = _max_table_variables_from_env()

Row = Tuple[Tuple[bool, ...], bool]


class TruthTableTooLargeError(ValueError):
    """
    Raised when a formula has too many free variables to enumerate.

    The table has 2^n rows; this is a usage policy enforced by callers,
    not by truth_table_for() itself.
    """


def _next_assignment(assignment: List[bool]) -> bool:
    """
    Advance to the next assignment in place.
    Returns False once every slot is already True.
    """
    for index in range(len(assignment) - 1, -1, -1):
        if not assignment[index]:
            assignment[index] = True
            for later in range(index + 1, len(assignment)):
                assignment[later] = False
            return True
    return False


def truth_table_for(expr: Expression) -> List[Row]:
    """
    Evaluate expr under every assignment of its free variables.

    Returns a list of (assignment, value) pairs where assignment lines up
    with variables_in(expr).
    """
    variables = variables_in(expr)
    current = [False] * len(variables)

    rows: List[Row] = []
    while True:
        context = dict(zip(variables, current))
        rows.append((tuple(current), expr.evaluate(context)))
        if not _next_assignment(current):
            break
    return rows


def check_table_size(expr: Expression, limit: Optional[int] = None) -> List[str]:
    """
    Reject formulas whose truth table would exceed 2^limit rows.
    Returns the variable list so callers don't have to walk the tree twice.
    """
    if limit is None:
        limit = DEFAULT_MAX_TABLE_VARIABLES
    variables = variables_in(expr)
    if len(variables) > limit:
        raise TruthTableTooLargeError(
            f"Formula has {len(variables)} variables; truth tables are limited to {limit}."
        )
    return variables


def truth_table_records(expr: Expression) -> List[Dict[str, Any]]:
    """Truth table as JSON-friendly records, one per row."""
    variables = variables_in(expr)
    return [
        {"assignment": dict(zip(variables, assignment)), "value": value}
        for assignment, value in truth_table_for(expr)
    ]


def _cell(value: bool) -> str:
    return "T" if value else "F"


def format_truth_table(expr: Expression) -> str:
    """
    Render a plain-text table, e.g.

        p | q | (p ∧ q)
        F | F | F
        F | T | F
        ...
    """
    variables = variables_in(expr)
    header = variables + [str(expr)]
    widths = [len(h) for h in header]

    lines = [" | ".join(header)]
    for assignment, value in truth_table_for(expr):
        cells = [_cell(v) for v in assignment] + [_cell(value)]
        lines.append(" | ".join(c.ljust(w) for c, w in zip(cells, widths)).rstrip())
    return "\n".join(lines) + "\n"
