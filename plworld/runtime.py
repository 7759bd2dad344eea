"""
runtime.py

plworld Runtime
---------------

Single entrypoint tying the pieces together:

    - pl_parser     (formula text -> Expression)
    - world         (grounding a day's weather as a PL Context)
    - pl_expression (evaluation)
    - truth_table   (enumeration, with a size guard)

evaluate() never raises on bad input: parse failures, formulas nested past
MAX_DEPTH, unbound variables and unknown days come back as error-domain
RuntimeResults with a code.
Internal errors (RuntimeError) are not caught.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Union
import sys

from .pl_expression import Expression, UnboundVariableError, expression_depth
from .pl_parser import FormulaParseError, FormulaTooDeepError, parse_formula
from .truth_table import Row, check_table_size, truth_table_for
from .world import World, WorldReferenceError, pl_context_for

FormulaInput = Union[str, Expression]


# -------------------------------------------------------------------------
# Runtime Result Object
# -------------------------------------------------------------------------

@dataclass
class RuntimeResult:
    """
    Public result returned by LogicRuntime.evaluate(...)

        - domain: truth | error
        - value: the boolean for truth results, None for errors
        - code: machine-readable error code (ERR_*) or None
        - error: human-readable message or None
        - formula: rendering of the evaluated formula, when it parsed
        - day: the day the formula was grounded against, if any
    """
    domain: str
    value: Optional[bool]
    error: Optional[str] = None
    code: Optional[str] = None
    formula: Optional[str] = None
    day: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.domain == "truth"


# -------------------------------------------------------------------------
# Runtime Core
# -------------------------------------------------------------------------

class LogicRuntime:
    """
    Evaluates propositional formulas, optionally against the days of a World.

    The world is only read, never modified; parse_world() hands back frozen
    worlds, so one runtime can be reused for any number of evaluations.
    """

    def __init__(self, world: Optional[World] = None, *, max_table_variables: Optional[int] = None, debug: bool = False):
        self.world = world
        self.max_table_variables = max_table_variables
        self.debug = debug
        if self.debug:
            sys.stderr.write(f"[LogicRuntime] Initialized (world={world!r})\n")

    # -------------------------------------------------------------------------
    # MAX RECURSION DEPTH (Safety)
    # -------------------------------------------------------------------------
    MAX_DEPTH = 100

    def _check_depth(self, expr: Expression):
        depth = expression_depth(expr)
        if depth > self.MAX_DEPTH:
            raise FormulaTooDeepError(f"Recursion depth exceeded: {depth} > {self.MAX_DEPTH}")

    def parse(self, formula: FormulaInput) -> Expression:
        if isinstance(formula, Expression):
            return formula
        return parse_formula(formula)

    def _error(self, code: str, msg: str, formula: Optional[str] = None, day: Optional[str] = None) -> RuntimeResult:
        """Return error-domain result."""
        if self.debug:
            sys.stderr.write(f"[LogicRuntime] {code}: {msg}\n")
        return RuntimeResult(domain="error", value=None, error=msg, code=code, formula=formula, day=day)

    def evaluate(
        self,
        formula: FormulaInput,
        *,
        context: Optional[Mapping[str, bool]] = None,
        day: Optional[str] = None,
    ) -> RuntimeResult:
        """
        Evaluate one formula.

        The Context is `context` if given, otherwise the weather of `day`
        in this runtime's world, otherwise empty.
        """
        try:
            expr = self.parse(formula)
            self._check_depth(expr)
        except FormulaTooDeepError as e:
            return self._error("ERR_RECURSION_LIMIT", str(e), day=day)
        except FormulaParseError as e:
            return self._error("ERR_PARSE_FAILED", str(e), day=day)
        rendered = str(expr)

        if context is None and day is not None:
            if self.world is None:
                return self._error("ERR_NO_WORLD", "A day was given but the runtime has no world.", rendered, day)
            try:
                context = pl_context_for(self.world.entity(day))
            except WorldReferenceError as e:
                return self._error("ERR_UNKNOWN_DAY", str(e), rendered, day)
        if context is None:
            context = {}

        try:
            value = expr.evaluate(context)
        except UnboundVariableError as e:
            return self._error("ERR_UNBOUND_VARIABLE", str(e), rendered, day)

        return RuntimeResult(domain="truth", value=value, formula=rendered, day=day)

    def evaluate_each_day(self, formula: FormulaInput) -> Dict[str, RuntimeResult]:
        """Evaluate a formula against every day of the world, keyed by day name in sorted order."""
        if self.world is None:
            raise ValueError("evaluate_each_day() needs a runtime with a world.")
        expr = self.parse(formula)
        return {name: self.evaluate(expr, day=name) for name in sorted(self.world.entities)}

    def truth_table(self, formula: FormulaInput) -> List[Row]:
        """
        Full truth table for a formula.

        Raises FormulaParseError for bad text or nesting past MAX_DEPTH, and
        TruthTableTooLargeError when the formula has more free variables than
        this runtime allows.
        """
        expr = self.parse(formula)
        self._check_depth(expr)
        check_table_size(expr, self.max_table_variables)
        return truth_table_for(expr)
