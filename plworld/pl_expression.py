"""
pl_expression.py

Propositional Logic Expression Model
------------------------------------

Formulas are immutable trees built from a closed set of node types:

    ⊤  ⊥  p  ¬x  (a ∧ b)  (a ∨ b)  (a → b)  (a ↔ b)  ⋈(a, b, c)

Each node can:
    - render itself in symbolic notation (str(expr))
    - evaluate itself under a Context (name -> bool)
    - accept an ExpressionVisitor (double dispatch on the node type)

ExpressionTreeWalker builds on the visitor to give a pre-order traversal with
per-node-type hooks; variables_in() uses it to collect free variables.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import List, Mapping, Set
import os

# ==========================================
# DEBUGGING INSTRUMENTATION
# ==========================================
# Enable with: PLWORLD_DEBUG=1
_DEBUG_ENABLED = os.getenv("PLWORLD_DEBUG", "0") == "1"


def _debug_print(*args, **kwargs):
    """Print only if debug is enabled."""
    if _DEBUG_ENABLED:
        print(*args, **kwargs)


Context = Mapping[str, bool]


class UnboundVariableError(KeyError):
    """Raised when a formula mentions a variable the Context does not bind."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"Variable not bound in context: {self.name}"


# Rows indexed by 4*¬first + 2*¬second + 1*¬third.
_BOWTIE_TABLE = (
    False,
    False,
    True,
    True,
    True,
    False,
    False,
    False,
)


# -------------------------------------------------------------------------
# Expression nodes
# -------------------------------------------------------------------------

class Expression:
    """Base class of every formula node."""

    __slots__ = ()

    def evaluate(self, context: Context) -> bool:
        raise NotImplementedError

    def accept(self, visitor: "ExpressionVisitor"):
        return visitor.visit(self)


@dataclass(frozen=True)
class TrueExpression(Expression):

    def __str__(self):
        return "⊤"

    def evaluate(self, context: Context) -> bool:
        return True

    def accept(self, visitor):
        return visitor.visit_true(self)


@dataclass(frozen=True)
class FalseExpression(Expression):

    def __str__(self):
        return "⊥"

    def evaluate(self, context: Context) -> bool:
        return False

    def accept(self, visitor):
        return visitor.visit_false(self)


@dataclass(frozen=True)
class VariableExpression(Expression):
    name: str

    def __str__(self):
        return self.name

    def evaluate(self, context: Context) -> bool:
        try:
            return context[self.name]
        except KeyError:
            raise UnboundVariableError(self.name) from None

    def accept(self, visitor):
        return visitor.visit_variable(self)


@dataclass(frozen=True)
class NotExpression(Expression):
    operand: Expression

    def __str__(self):
        return f"¬{self.operand}"

    def evaluate(self, context: Context) -> bool:
        return not self.operand.evaluate(context)

    def accept(self, visitor):
        return visitor.visit_not(self)


@dataclass(frozen=True)
class AndExpression(Expression):
    left: Expression
    right: Expression

    def __str__(self):
        return f"({self.left} ∧ {self.right})"

    def evaluate(self, context: Context) -> bool:
        return self.left.evaluate(context) and self.right.evaluate(context)

    def accept(self, visitor):
        return visitor.visit_and(self)


@dataclass(frozen=True)
class OrExpression(Expression):
    left: Expression
    right: Expression

    def __str__(self):
        return f"({self.left} ∨ {self.right})"

    def evaluate(self, context: Context) -> bool:
        return self.left.evaluate(context) or self.right.evaluate(context)

    def accept(self, visitor):
        return visitor.visit_or(self)


@dataclass(frozen=True)
class ImpliesExpression(Expression):
    left: Expression
    right: Expression

    def __str__(self):
        return f"({self.left} → {self.right})"

    def evaluate(self, context: Context) -> bool:
        return not self.left.evaluate(context) or self.right.evaluate(context)

    def accept(self, visitor):
        return visitor.visit_implies(self)


@dataclass(frozen=True)
class IffExpression(Expression):
    left: Expression
    right: Expression

    def __str__(self):
        return f"({self.left} ↔ {self.right})"

    def evaluate(self, context: Context) -> bool:
        return self.left.evaluate(context) == self.right.evaluate(context)

    def accept(self, visitor):
        return visitor.visit_iff(self)


@dataclass(frozen=True)
class BowtieExpression(Expression):
    """
    Ternary connective defined only by its truth table.

    The operands are negated before indexing, so the all-true row is row 0:

        a b c | ⋈        a b c | ⋈
        T T T | F        F T T | T
        T T F | F        F T F | F
        T F T | T        F F T | F
        T F F | T        F F F | F
    """
    first: Expression
    second: Expression
    third: Expression

    def __str__(self):
        return f"⋈({self.first}, {self.second}, {self.third})"

    def evaluate(self, context: Context) -> bool:
        index = (4 * (not self.first.evaluate(context)) +
                 2 * (not self.second.evaluate(context)) +
                 1 * (not self.third.evaluate(context)))

        if not 0 <= index < len(_BOWTIE_TABLE):
            raise RuntimeError(f"Internal error: Bowtie row {index} is outside the truth table.")

        return _BOWTIE_TABLE[index]

    def accept(self, visitor):
        return visitor.visit_bowtie(self)


TRUE = TrueExpression()
FALSE = FalseExpression()


# -------------------------------------------------------------------------
# Builders
# -------------------------------------------------------------------------

def var(name: str) -> VariableExpression:
    return VariableExpression(name)


def not_(operand: Expression) -> NotExpression:
    return NotExpression(operand)


def and_(left: Expression, right: Expression) -> AndExpression:
    return AndExpression(left, right)


def or_(left: Expression, right: Expression) -> OrExpression:
    return OrExpression(left, right)


def implies(left: Expression, right: Expression) -> ImpliesExpression:
    return ImpliesExpression(left, right)


def iff(left: Expression, right: Expression) -> IffExpression:
    return IffExpression(left, right)


def bowtie(first: Expression, second: Expression, third: Expression) -> BowtieExpression:
    return BowtieExpression(first, second, third)


# -------------------------------------------------------------------------
# Visitors
# -------------------------------------------------------------------------

class ExpressionVisitor:
    """
    Double-dispatch target for Expression.accept().

    Subclasses override the visit_* methods for the node types they support.
    Anything left unhandled falls through to visit(), which treats the node
    as an unknown type.
    """

    def visit(self, expr: Expression):
        raise RuntimeError("Unknown expression type.")

    def visit_true(self, expr: TrueExpression):
        return self.visit(expr)

    def visit_false(self, expr: FalseExpression):
        return self.visit(expr)

    def visit_variable(self, expr: VariableExpression):
        return self.visit(expr)

    def visit_not(self, expr: NotExpression):
        return self.visit(expr)

    def visit_and(self, expr: AndExpression):
        return self.visit(expr)

    def visit_or(self, expr: OrExpression):
        return self.visit(expr)

    def visit_implies(self, expr: ImpliesExpression):
        return self.visit(expr)

    def visit_iff(self, expr: IffExpression):
        return self.visit(expr)

    def visit_bowtie(self, expr: BowtieExpression):
        return self.visit(expr)


class ExpressionTreeWalker(ExpressionVisitor):
    """
    Pre-order traversal over a formula.

    handle_*() is called on each node before its children are visited.
    Children are visited left to right (Bowtie: first, second, third).
    Override only the hooks you need; the rest are no-ops.
    """

    # --- Hooks ---

    def handle_true(self, expr: TrueExpression):
        pass

    def handle_false(self, expr: FalseExpression):
        pass

    def handle_variable(self, expr: VariableExpression):
        pass

    def handle_not(self, expr: NotExpression):
        pass

    def handle_and(self, expr: AndExpression):
        pass

    def handle_or(self, expr: OrExpression):
        pass

    def handle_implies(self, expr: ImpliesExpression):
        pass

    def handle_iff(self, expr: IffExpression):
        pass

    def handle_bowtie(self, expr: BowtieExpression):
        pass

    # --- Traversal ---

    def visit_true(self, expr):
        self.handle_true(expr)

    def visit_false(self, expr):
        self.handle_false(expr)

    def visit_variable(self, expr):
        self.handle_variable(expr)

    def visit_not(self, expr):
        self.handle_not(expr)
        expr.operand.accept(self)

    def visit_and(self, expr):
        self.handle_and(expr)
        expr.left.accept(self)
        expr.right.accept(self)

    def visit_or(self, expr):
        self.handle_or(expr)
        expr.left.accept(self)
        expr.right.accept(self)

    def visit_implies(self, expr):
        self.handle_implies(expr)
        expr.left.accept(self)
        expr.right.accept(self)

    def visit_iff(self, expr):
        self.handle_iff(expr)
        expr.left.accept(self)
        expr.right.accept(self)

    def visit_bowtie(self, expr):
        self.handle_bowtie(expr)
        expr.first.accept(self)
        expr.second.accept(self)
        expr.third.accept(self)


class _VariableCollector(ExpressionTreeWalker):
    def __init__(self):
        self.names: Set[str] = set()

    def handle_variable(self, expr):
        self.names.add(expr.name)


def variables_in(expr: Expression) -> List[str]:
    """Return the free variables of a formula, sorted by name."""
    walker = _VariableCollector()
    expr.accept(walker)
    _debug_print(f"DEBUG variables_in({expr}) -> {sorted(walker.names)}")
    return sorted(walker.names)


def expression_depth(expr: Expression) -> int:
    """
    Number of nodes on the longest root-to-leaf path.

    Iterative, so it is safe on trees too deep for the recursive methods.
    """
    deepest = 0
    stack = [(expr, 1)]
    while stack:
        node, depth = stack.pop()
        deepest = max(deepest, depth)
        for field in fields(node):
            child = getattr(node, field.name)
            if isinstance(child, Expression):
                stack.append((child, depth + 1))
    return deepest
