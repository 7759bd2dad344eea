"""
world_parser.py

Text format for worlds
----------------------

One statement per line:

    Day(Monday)                 # declare a day (redeclaring is harmless)
    Sunny(Monday)               # Sunny / Rainy / Cloudy set a weather flag
    IsNextDay(Monday, Tuesday)  # Tuesday is a next day of Monday

Everything after '#' is a comment. Blank lines are skipped. Days must be
declared before any other statement mentions them.

The parser is pedantic: the first malformed line aborts the whole parse.
serialize_world() writes the canonical form, which parses back to a world
that serializes to the same bytes.
"""

import os
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Union

from .world import (
    Attribute,
    World,
    WorldReferenceError,
    WorldSyntaxError,
)

# ==========================================
# DEBUGGING INSTRUMENTATION
# ==========================================
_DEBUG_ENABLED = os.getenv("PLWORLD_DEBUG", "0") == "1"


def _debug_print(*args, **kwargs):
    """Print only if debug is enabled."""
    if _DEBUG_ENABLED:
        print(*args, **kwargs)


@dataclass
class ParsedLine:
    type: str
    args: List[str]


def _parse_line(line: str) -> ParsedLine:
    """
    Split `Predicate(arg, arg, ...)` into its name and trimmed arguments.
    `line` has already been stripped of comments and surrounding whitespace.
    """
    open_index = line.find("(")
    if open_index == -1:
        raise WorldSyntaxError("Couldn't find an open parenthesis in input line.")
    predicate = line[:open_index].strip()

    # The first close parenthesis has to be the last character.
    close_index = line.find(")", open_index)
    if close_index == -1:
        raise WorldSyntaxError("Couldn't find a close parenthesis in input line.")
    if close_index != len(line) - 1:
        raise WorldSyntaxError("Extra tokens found after close parenthesis.")

    args = [arg.strip() for arg in line[open_index + 1:close_index].split(",")]
    if any(not arg for arg in args):
        raise WorldSyntaxError("Empty argument found in parameter list.")

    return ParsedLine(predicate, args)


# -------------------------------------------------------------------------
# Statement handlers
# -------------------------------------------------------------------------

def _declare_entity(world: World, parsed: ParsedLine):
    if len(parsed.args) != 1:
        raise WorldSyntaxError("The Day() predicate requires exactly one argument.")
    world.declare(parsed.args[0])


def _attribute_setter(attribute: Attribute) -> Callable[[World, ParsedLine], None]:
    def update_entity(world: World, parsed: ParsedLine):
        if len(parsed.args) != 1:
            raise WorldSyntaxError(f"The {parsed.type} predicate requires exactly one argument.")
        world.set_attribute(parsed.args[0], attribute)
    return update_entity


def _process_future(world: World, parsed: ParsedLine):
    if len(parsed.args) != 2:
        raise WorldSyntaxError("The IsNextDay predicate requires exactly two arguments.")
    world.link(parsed.args[0], parsed.args[1])


_STATEMENTS: Dict[str, Callable[[World, ParsedLine], None]] = {
    "Day": _declare_entity,
    Attribute.SUNNY.value: _attribute_setter(Attribute.SUNNY),
    Attribute.RAINY.value: _attribute_setter(Attribute.RAINY),
    Attribute.CLOUDY.value: _attribute_setter(Attribute.CLOUDY),
    "IsNextDay": _process_future,
}


# -------------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------------

def parse_world(source: Union[str, Iterable[str]]) -> World:
    """
    Build a World from its text form.

    `source` is either the whole text or an iterable of lines (an open file
    works). Returns a frozen World. Raises WorldSyntaxError or
    WorldReferenceError naming the first bad line.
    """
    if isinstance(source, str):
        source = source.splitlines()

    world = World()
    for line_number, raw in enumerate(source, start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue

        try:
            parsed = _parse_line(line)
            handler = _STATEMENTS.get(parsed.type)
            if handler is None:
                raise WorldSyntaxError("Unknown statement type.")
            handler(world, parsed)
        except (WorldSyntaxError, WorldReferenceError) as e:
            raise type(e)(e.message, line_number=line_number, line=line) from None

        _debug_print(f"DEBUG parse_world line {line_number}: {parsed.type}{tuple(parsed.args)}")

    return world.freeze()


def serialize_world(world: World) -> str:
    """
    Canonical text form: sorted Day lines, then sorted weather lines, then
    sorted IsNextDay lines. Insertion order never affects the output.
    """
    entities = sorted(f"Day({entity.name})" for entity in world)

    properties = []
    for entity in world:
        for attribute in (Attribute.CLOUDY, Attribute.RAINY, Attribute.SUNNY):
            if entity.has(attribute):
                properties.append(f"{attribute.value}({entity.name})")
    properties.sort()

    links = sorted(f"IsNextDay({today.name}, {tomorrow.name})" for today, tomorrow in world.edges())

    return "".join(line + "\n" for line in entities + properties + links)


def load_world(path: str) -> World:
    with open(path, "r", encoding="utf-8") as f:
        return parse_world(f)


def dump_world(world: World, path: str):
    with open(path, "w", encoding="utf-8") as f:
        f.write(serialize_world(world))
