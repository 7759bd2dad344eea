"""
test_pl_expression.py

Evaluation semantics, rendering and traversal for PL expressions.
"""

import itertools
import unittest

import pytest

from plworld.pl_expression import (
    TRUE,
    FALSE,
    Expression,
    ExpressionTreeWalker,
    ExpressionVisitor,
    UnboundVariableError,
    and_,
    bowtie,
    iff,
    implies,
    not_,
    or_,
    expression_depth,
    var,
    variables_in,
)

p, q, r = var("p"), var("q"), var("r")

# Every assignment to p, q, r.
ALL_CONTEXTS = [
    dict(zip("pqr", values))
    for values in itertools.product([False, True], repeat=3)
]


class TestEvaluation(unittest.TestCase):

    def test_constants(self):
        self.assertTrue(TRUE.evaluate({}))
        self.assertFalse(FALSE.evaluate({}))

    def test_connectives_match_python_semantics(self):
        for ctx in ALL_CONTEXTS:
            a, b = ctx["p"], ctx["q"]
            self.assertEqual(not_(p).evaluate(ctx), not a)
            self.assertEqual(and_(p, q).evaluate(ctx), a and b)
            self.assertEqual(or_(p, q).evaluate(ctx), a or b)
            self.assertEqual(implies(p, q).evaluate(ctx), (not a) or b)
            self.assertEqual(iff(p, q).evaluate(ctx), a == b)

    def test_double_negation(self):
        formula = implies(and_(p, q), r)
        for ctx in ALL_CONTEXTS:
            self.assertEqual(not_(not_(formula)).evaluate(ctx), formula.evaluate(ctx))

    def test_implies_is_not_a_or_b(self):
        for ctx in ALL_CONTEXTS:
            self.assertEqual(implies(p, q).evaluate(ctx), or_(not_(p), q).evaluate(ctx))

    def test_iff_is_two_implications(self):
        for ctx in ALL_CONTEXTS:
            self.assertEqual(
                iff(p, q).evaluate(ctx),
                and_(implies(p, q), implies(q, p)).evaluate(ctx),
            )

    def test_unbound_variable_is_an_error(self):
        with self.assertRaises(UnboundVariableError) as cm:
            and_(p, q).evaluate({"p": True})
        self.assertEqual(cm.exception.name, "q")
        self.assertIn("q", str(cm.exception))

    def test_unbound_variable_is_a_key_error(self):
        with self.assertRaises(KeyError):
            p.evaluate({})

    def test_short_circuit_does_not_hide_missing_variables_when_reached(self):
        # q is never looked up when p is False.
        self.assertFalse(and_(p, q).evaluate({"p": False}))
        with self.assertRaises(UnboundVariableError):
            and_(p, q).evaluate({"p": True})


class TestBowtie(unittest.TestCase):

    EXPECTED = {
        # (a, b, c): value; rows ordered by 4*¬a + 2*¬b + ¬c
        (True, True, True): False,
        (True, True, False): False,
        (True, False, True): True,
        (True, False, False): True,
        (False, True, True): True,
        (False, True, False): False,
        (False, False, True): False,
        (False, False, False): False,
    }

    def test_full_table(self):
        for (a, b, c), expected in self.EXPECTED.items():
            with self.subTest(a=a, b=b, c=c):
                ctx = {"p": a, "q": b, "r": c}
                self.assertEqual(bowtie(p, q, r).evaluate(ctx), expected)

    def test_constant_operands(self):
        # index = 4*0 + 2*1 + 1*0 = 2
        self.assertTrue(bowtie(TRUE, FALSE, TRUE).evaluate({}))
        self.assertFalse(bowtie(TRUE, TRUE, TRUE).evaluate({}))


class TestRendering(unittest.TestCase):

    def test_symbols(self):
        self.assertEqual(str(TRUE), "⊤")
        self.assertEqual(str(FALSE), "⊥")
        self.assertEqual(str(not_(p)), "¬p")
        self.assertEqual(str(and_(p, q)), "(p ∧ q)")
        self.assertEqual(str(or_(p, q)), "(p ∨ q)")
        self.assertEqual(str(implies(p, q)), "(p → q)")
        self.assertEqual(str(iff(p, q)), "(p ↔ q)")
        self.assertEqual(str(bowtie(p, q, r)), "⋈(p, q, r)")

    def test_nested(self):
        formula = iff(not_(and_(p, q)), or_(not_(p), not_(q)))
        self.assertEqual(str(formula), "(¬(p ∧ q) ↔ (¬p ∨ ¬q))")


class TestStructure(unittest.TestCase):

    def test_nodes_are_immutable(self):
        node = and_(p, q)
        with self.assertRaises(AttributeError):
            node.left = r

    def test_structural_equality(self):
        self.assertEqual(and_(var("p"), var("q")), and_(p, q))
        self.assertNotEqual(and_(p, q), and_(q, p))
        self.assertNotEqual(and_(p, q), or_(p, q))
        self.assertEqual(hash(not_(p)), hash(not_(var("p"))))

    def test_shared_subtrees(self):
        shared = and_(p, q)
        formula = or_(shared, not_(shared))
        for ctx in ALL_CONTEXTS:
            self.assertTrue(formula.evaluate(ctx))


class _RecordingWalker(ExpressionTreeWalker):
    def __init__(self):
        self.seen = []

    def handle_true(self, expr):
        self.seen.append("⊤")

    def handle_variable(self, expr):
        self.seen.append(expr.name)

    def handle_not(self, expr):
        self.seen.append("not")

    def handle_and(self, expr):
        self.seen.append("and")

    def handle_implies(self, expr):
        self.seen.append("implies")

    def handle_bowtie(self, expr):
        self.seen.append("bowtie")


class _Unknown(Expression):
    pass


def test_walker_visits_in_preorder():
    formula = implies(and_(p, not_(q)), bowtie(r, TRUE, var("s")))
    walker = _RecordingWalker()
    formula.accept(walker)
    assert walker.seen == ["implies", "and", "p", "not", "q", "bowtie", "r", "⊤", "s"]


def test_walker_recurses_through_unhandled_nodes():
    # _RecordingWalker has no hook for Or or Iff; their children are still reached.
    walker = _RecordingWalker()
    iff(or_(p, q), r).accept(walker)
    assert walker.seen == ["p", "q", "r"]


def test_unknown_node_type_is_a_hard_failure():
    with pytest.raises(RuntimeError, match="Unknown expression type"):
        _Unknown().accept(ExpressionVisitor())
    with pytest.raises(RuntimeError):
        and_(p, _Unknown()).accept(ExpressionTreeWalker())


def test_base_visitor_rejects_every_variant():
    with pytest.raises(RuntimeError):
        and_(p, q).accept(ExpressionVisitor())


def test_variables_in_is_sorted_and_deduplicated():
    formula = and_(var("z"), or_(var("a"), implies(var("z"), bowtie(var("m"), var("a"), TRUE))))
    assert variables_in(formula) == ["a", "m", "z"]


def test_variables_in_constant_formula():
    assert variables_in(iff(TRUE, not_(FALSE))) == []


def test_expression_depth():
    assert expression_depth(p) == 1
    assert expression_depth(not_(p)) == 2
    assert expression_depth(and_(p, implies(q, not_(r)))) == 4
    assert expression_depth(bowtie(TRUE, FALSE, or_(p, q))) == 3


def test_expression_depth_handles_very_deep_trees():
    formula = p
    for _ in range(5000):
        formula = not_(formula)
    assert expression_depth(formula) == 5001
