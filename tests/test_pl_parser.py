"""
test_pl_parser.py

Grammar coverage for parse_formula(): notation, precedence, associativity,
round trips through str(), and rejection of malformed input.
"""

import unittest

import pytest

from plworld.pl_expression import TRUE, FALSE, and_, bowtie, iff, implies, not_, or_, var
from plworld.pl_parser import FormulaParseError, FormulaTooDeepError, clear_formula_cache, parse_formula

p, q, r, s = var("p"), var("q"), var("r"), var("s")


class TestNotation(unittest.TestCase):

    def test_symbolic_and_ascii_forms_agree(self):
        pairs = [
            ("⊤", "true"),
            ("⊥", "false"),
            ("¬p", "~p"),
            ("¬p", "!p"),
            ("p ∧ q", "p & q"),
            ("p ∨ q", "p | q"),
            ("p → q", "p -> q"),
            ("p ↔ q", "p <-> q"),
            ("⋈(p, q, r)", "bowtie(p, q, r)"),
        ]
        for symbolic, ascii_form in pairs:
            with self.subTest(symbolic=symbolic):
                self.assertEqual(parse_formula(symbolic), parse_formula(ascii_form))

    def test_constants(self):
        self.assertEqual(parse_formula("true"), TRUE)
        self.assertEqual(parse_formula("⊥"), FALSE)

    def test_identifiers(self):
        self.assertEqual(parse_formula("Sunny"), var("Sunny"))
        self.assertEqual(parse_formula("x_1"), var("x_1"))
        # Keywords only count as whole words.
        self.assertEqual(parse_formula("trueish"), var("trueish"))
        self.assertEqual(parse_formula("false_alarm"), var("false_alarm"))

    def test_whitespace_is_insignificant(self):
        self.assertEqual(parse_formula("  p\t&\n q "), and_(p, q))
        self.assertEqual(parse_formula("p&q"), and_(p, q))


class TestPrecedence(unittest.TestCase):

    def test_not_binds_tightest(self):
        self.assertEqual(parse_formula("¬p ∧ q"), and_(not_(p), q))
        self.assertEqual(parse_formula("~~p"), not_(not_(p)))

    def test_and_over_or(self):
        self.assertEqual(parse_formula("p | q & r"), or_(p, and_(q, r)))
        self.assertEqual(parse_formula("p & q | r"), or_(and_(p, q), r))

    def test_or_over_implies(self):
        self.assertEqual(parse_formula("p | q -> r"), implies(or_(p, q), r))

    def test_implies_over_iff(self):
        self.assertEqual(parse_formula("p <-> q -> r"), iff(p, implies(q, r)))

    def test_parentheses_override(self):
        self.assertEqual(parse_formula("(p | q) & r"), and_(or_(p, q), r))
        self.assertEqual(parse_formula("¬(p ∧ q)"), not_(and_(p, q)))


class TestAssociativity(unittest.TestCase):

    def test_and_or_left(self):
        self.assertEqual(parse_formula("p & q & r"), and_(and_(p, q), r))
        self.assertEqual(parse_formula("p | q | r"), or_(or_(p, q), r))

    def test_implies_right(self):
        self.assertEqual(parse_formula("p -> q -> r"), implies(p, implies(q, r)))

    def test_iff_left(self):
        self.assertEqual(parse_formula("p <-> q <-> r"), iff(iff(p, q), r))


class TestBowtie(unittest.TestCase):

    def test_operands_are_full_formulas(self):
        self.assertEqual(
            parse_formula("bowtie(p, q & r, true)"),
            bowtie(p, and_(q, r), TRUE),
        )

    def test_nested(self):
        self.assertEqual(
            parse_formula("⋈(⋈(p, q, r), s, ¬p)"),
            bowtie(bowtie(p, q, r), s, not_(p)),
        )


ROUND_TRIP = [
    TRUE,
    not_(FALSE),
    and_(p, or_(q, not_(r))),
    implies(implies(p, q), r),
    iff(p, iff(q, r)),
    bowtie(implies(p, q), iff(r, s), not_(not_(TRUE))),
    or_(bowtie(p, q, r), and_(s, FALSE)),
]


@pytest.mark.parametrize("expr", ROUND_TRIP, ids=str)
def test_rendering_parses_back(expr):
    assert parse_formula(str(expr)) == expr


@pytest.mark.parametrize("text", [
    "",
    "p &",
    "(p",
    "p)",
    "p q",
    "& p",
    "bowtie(p, q)",
    "⋈(p, q, r, s)",
    "bowtie",
    "p => q",
    "1p",
])
def test_malformed_formulas_are_rejected(text):
    with pytest.raises(FormulaParseError):
        parse_formula(text)


def test_parse_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_formula("p ∧")


def test_cache_returns_equal_trees():
    clear_formula_cache()
    first = parse_formula("p & q")
    second = parse_formula("p   &   q")
    assert first is second
    clear_formula_cache()
    assert parse_formula("p & q") == first


@pytest.mark.parametrize("text", [
    "(" * 1000 + "p" + ")" * 1000,
    "~" * 1000 + "p",
])
def test_deep_nesting_is_a_parse_error(text):
    with pytest.raises(FormulaTooDeepError):
        parse_formula(text)
    # The parser is still usable afterwards.
    assert parse_formula("(p & q) -> r") == implies(and_(p, q), r)


def test_deep_nesting_error_is_a_formula_parse_error():
    with pytest.raises(FormulaParseError, match="nested too deeply"):
        parse_formula("(" * 1000 + "p" + ")" * 1000)
