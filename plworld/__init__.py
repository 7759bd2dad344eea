"""
plworld - Propositional formulas grounded in worlds of days.

Public API:
- parse_formula: formula text -> Expression
- truth_table_for / variables_in: enumeration and free variables
- parse_world / serialize_world: the world text format
- LogicRuntime: parse + ground + evaluate with result objects
"""

from .pl_expression import Expression, UnboundVariableError, variables_in
from .pl_parser import FormulaParseError, FormulaTooDeepError, parse_formula
from .truth_table import truth_table_for
from .world import World, Entity, entity_build_context, pl_context_for
from .world_parser import parse_world, serialize_world
from .runtime import LogicRuntime

# Derive version from package metadata
try:
    from importlib.metadata import version
    __version__ = version("plworld")
except Exception:
    __version__ = "0.1.0"

__all__ = [
    "Expression",
    "UnboundVariableError",
    "variables_in",
    "FormulaParseError",
    "FormulaTooDeepError",
    "parse_formula",
    "truth_table_for",
    "World",
    "Entity",
    "entity_build_context",
    "pl_context_for",
    "parse_world",
    "serialize_world",
    "LogicRuntime",
]
