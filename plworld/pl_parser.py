"""
pl_parser.py

PEG grammar and tree builder for propositional formulas.

Accepted notation (symbolic and ASCII forms are interchangeable):

    ⊤ true      ⊥ false      ¬ ~ !      ∧ &      ∨ |
    → ->        ↔ <->        ⋈(a, b, c) bowtie(a, b, c)

Precedence, tightest first: ¬, ∧, ∨, →, ↔.
∧, ∨ and ↔ associate to the left; → associates to the right.

Everything str(expr) prints parses back to an equal tree.
"""

import os
import threading
from collections import OrderedDict

from arpeggio import ParserPython, PTNodeVisitor, visit_parse_tree, ZeroOrMore, Optional, EOF, NoMatch
from arpeggio import RegExMatch as _

from .canonical import canonicalize_formula
from .pl_expression import (
    Expression,
    TRUE,
    FALSE,
    VariableExpression,
    NotExpression,
    AndExpression,
    OrExpression,
    ImpliesExpression,
    IffExpression,
    BowtieExpression,
)

# ==========================================
# DEBUGGING INSTRUMENTATION
# ==========================================
_DEBUG_ENABLED = os.getenv("PLWORLD_DEBUG", "0") == "1"


def _debug_print(*args, **kwargs):
    """Print only if debug is enabled."""
    if _DEBUG_ENABLED:
        print(*args, **kwargs)


class FormulaParseError(ValueError):
    """Raised when formula text does not match the grammar."""

    def __init__(self, message, text=None, column=None):
        super().__init__(message)
        self.text = text
        self.column = column


class FormulaTooDeepError(FormulaParseError):
    """Raised when a formula nests deeper than the parser can recurse."""


# ==========================================
# 1. GRAMMAR
# ==========================================

def variable():
    # Identifiers, minus the word forms of constants and connectives.
    return _(r'(?!(true|false|bowtie)\b)[A-Za-z_][A-Za-z0-9_]*')


def true_const():
    return _(r'⊤|true\b')


def false_const():
    return _(r'⊥|false\b')


def not_op():
    return _(r'¬|~|!')


def and_op():
    return _(r'∧|&')


def or_op():
    return _(r'∨|\|')


def implies_op():
    return _(r'→|->')


def iff_op():
    return _(r'↔|<->')


def bowtie():
    return _(r'⋈|bowtie\b'), "(", formula, ",", formula, ",", formula, ")"


def parenthesized():
    return "(", formula, ")"


def atom():
    # bowtie and the constants go before variable so keywords never become names.
    return [bowtie, true_const, false_const, variable, parenthesized]


def negation():
    return not_op, unary


def unary():
    return [negation, atom]


def conjunction():
    return unary, ZeroOrMore(and_op, unary)


def disjunction():
    return conjunction, ZeroOrMore(or_op, conjunction)


def implication():
    return disjunction, Optional(implies_op, implication)


def formula():
    # Biconditional level. Arpeggio inlines a rule that only returns another
    # rule, so the ↔ sequence lives here directly.
    return implication, ZeroOrMore(iff_op, implication)


def pl_input():
    return formula, EOF


# ==========================================
# 2. TREE BUILDER
# ==========================================

def _expressions(children):
    """
    Pull the Expression results out of a visitor's children.

    Operator tokens and punctuation come back as strings (or not at all);
    nested sequences may come back as lists, so flatten first.
    """
    found = []
    for child in children:
        if isinstance(child, Expression):
            found.append(child)
        elif isinstance(child, (list, tuple)):
            found.extend(_expressions(child))
    return found


def _fold_left(children, node_type):
    operands = _expressions(children)
    result = operands[0]
    for rhs in operands[1:]:
        result = node_type(result, rhs)
    return result


class FormulaBuilder(PTNodeVisitor):
    """Turns an arpeggio parse tree into an Expression tree."""

    def visit_variable(self, node, children):
        return VariableExpression(node.value)

    def visit_true_const(self, node, children):
        return TRUE

    def visit_false_const(self, node, children):
        return FALSE

    def visit_bowtie(self, node, children):
        operands = _expressions(children)
        if len(operands) != 3:
            raise RuntimeError(f"Internal error: bowtie built with {len(operands)} operands.")
        return BowtieExpression(*operands)

    def visit_parenthesized(self, node, children):
        return _expressions(children)[0]

    def visit_atom(self, node, children):
        return _expressions(children)[0]

    def visit_negation(self, node, children):
        return NotExpression(_expressions(children)[-1])

    def visit_unary(self, node, children):
        return _expressions(children)[0]

    def visit_conjunction(self, node, children):
        return _fold_left(children, AndExpression)

    def visit_disjunction(self, node, children):
        return _fold_left(children, OrExpression)

    def visit_implication(self, node, children):
        operands = _expressions(children)
        if len(operands) == 1:
            return operands[0]
        return ImpliesExpression(operands[0], operands[1])

    def visit_formula(self, node, children):
        return _fold_left(children, IffExpression)

    def visit_pl_input(self, node, children):
        return _expressions(children)[0]


# ==========================================
# 3. PARSER + CACHE
# ==========================================
# Trees are immutable, so cached results are shared without copying.

FORMULA_CACHE_MAX_SIZE = 256

_FORMULA_CACHE = OrderedDict()
_FORMULA_CACHE_LOCK = threading.Lock()
_PARSER_LOCK = threading.Lock()
_GLOBAL_PARSER = None


def _get_or_create_parser():
    """Get global parser instance, creating it if needed."""
    global _GLOBAL_PARSER
    with _PARSER_LOCK:
        if _GLOBAL_PARSER is None:
            _GLOBAL_PARSER = ParserPython(pl_input, ignore_case=False, reduce_tree=False)
    return _GLOBAL_PARSER


def clear_formula_cache():
    with _FORMULA_CACHE_LOCK:
        _FORMULA_CACHE.clear()


def parse_formula(text: str) -> Expression:
    """
    Parse formula text into an Expression.

    Raises FormulaParseError if the text is not a well-formed formula, and
    FormulaTooDeepError (a FormulaParseError) if it nests too deeply to parse.
    """
    global _GLOBAL_PARSER
    canonical = canonicalize_formula(text)

    with _FORMULA_CACHE_LOCK:
        if canonical in _FORMULA_CACHE:
            _FORMULA_CACHE.move_to_end(canonical)
            return _FORMULA_CACHE[canonical]

    parser = _get_or_create_parser()
    try:
        # Arpeggio parser state is not shareable between threads.
        with _PARSER_LOCK:
            try:
                tree = parser.parse(canonical)
            except RecursionError:
                # Start the next parse from a fresh parser.
                _GLOBAL_PARSER = None
                raise
        expr = visit_parse_tree(tree, FormulaBuilder())
    except NoMatch as e:
        raise FormulaParseError(f"Could not parse formula [{canonical}]: {e}", text=canonical, column=getattr(e, "col", None)) from None
    except RecursionError:
        raise FormulaTooDeepError("Formula nested too deeply to parse.", text=canonical) from None

    _debug_print(f"DEBUG parse_formula({canonical!r}) -> {expr}")

    with _FORMULA_CACHE_LOCK:
        if len(_FORMULA_CACHE) >= FORMULA_CACHE_MAX_SIZE:
            _FORMULA_CACHE.popitem(last=False)
        _FORMULA_CACHE[canonical] = expr
    return expr
