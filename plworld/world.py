"""
world.py

Worlds of days
--------------

A World is a set of days (Entity). Each day carries three independent
weather flags and a set of "futures": the days that are its next day.

Worlds are built once (usually by world_parser.parse_world) and then frozen.
Evaluation code only reads them:

    - pl_context_for(day)        grounds PL variables Sunny/Rainy/Cloudy
    - entity_build_context(day)  predicate table for first-order grounding
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping, Optional, Sequence, Set, Tuple


# -------------------------------------------------------------------------
# Exceptions
# -------------------------------------------------------------------------


class WorldError(Exception):
    """
    Base class for world construction errors.

    line_number/line are filled in when the error comes from parsing text.
    """

    def __init__(self, message: str, line_number: Optional[int] = None, line: Optional[str] = None):
        self.message = message
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {message} [{line}]"
        super().__init__(message)


class WorldSyntaxError(WorldError):
    """Raised when a world statement is malformed."""


class WorldReferenceError(WorldError):
    """Raised when a statement names a day that has not been declared."""


class WorldFrozenError(WorldError):
    """Raised when a frozen world is modified."""


# -------------------------------------------------------------------------
# Entities
# -------------------------------------------------------------------------


class Attribute(Enum):
    """Weather flags. The value is the predicate name used in world files."""
    SUNNY = "Sunny"
    RAINY = "Rainy"
    CLOUDY = "Cloudy"


_ATTRIBUTE_FIELDS = {
    Attribute.SUNNY: "is_sunny",
    Attribute.RAINY: "is_rainy",
    Attribute.CLOUDY: "is_cloudy",
}


@dataclass(eq=False)
class Entity:
    name: str
    is_sunny: bool = False
    is_rainy: bool = False
    is_cloudy: bool = False
    # Cycles are allowed, so keep futures out of repr.
    futures: Set["Entity"] = field(default_factory=set, repr=False)

    def has(self, attribute: Attribute) -> bool:
        return getattr(self, _ATTRIBUTE_FIELDS[attribute])


def sunny(e: Entity) -> bool:
    return e.is_sunny


def rainy(e: Entity) -> bool:
    return e.is_rainy


def cloudy(e: Entity) -> bool:
    return e.is_cloudy


def is_next_day(today: Entity, later: Entity) -> bool:
    return later in today.futures


# -------------------------------------------------------------------------
# World
# -------------------------------------------------------------------------


class World:
    """Owns every Entity in it, keyed by name."""

    def __init__(self):
        self._by_name: Dict[str, Entity] = {}
        self._frozen = False

    @property
    def entities(self) -> Mapping[str, Entity]:
        return MappingProxyType(self._by_name)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self):
        return len(self._by_name)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._by_name.values())

    def __contains__(self, item) -> bool:
        # Accepts a day name or an Entity; iteration yields Entities.
        if isinstance(item, Entity):
            return self._by_name.get(item.name) is item
        return item in self._by_name

    def __repr__(self):
        return f"World({sorted(self._by_name)})"

    def _check_mutable(self):
        if self._frozen:
            raise WorldFrozenError("World is frozen and can no longer be modified.")

    def freeze(self) -> "World":
        self._frozen = True
        return self

    def declare(self, name: str) -> Entity:
        """Create the day if it does not exist yet. Redeclaring is a no-op."""
        self._check_mutable()
        if name not in self._by_name:
            self._by_name[name] = Entity(name)
        return self._by_name[name]

    def entity(self, name: str) -> Entity:
        try:
            return self._by_name[name]
        except KeyError:
            raise WorldReferenceError(f"Entity doesn't exist (yet?): {name}") from None

    def set_attribute(self, name: str, attribute: Attribute):
        self._check_mutable()
        setattr(self.entity(name), _ATTRIBUTE_FIELDS[attribute], True)

    def link(self, today: str, tomorrow: str):
        """Record that `tomorrow` is a next day of `today`."""
        self._check_mutable()
        self.entity(today).futures.add(self.entity(tomorrow))

    def edges(self) -> Iterator[Tuple[Entity, Entity]]:
        for today in self._by_name.values():
            for tomorrow in today.futures:
                yield today, tomorrow


# -------------------------------------------------------------------------
# Grounding
# -------------------------------------------------------------------------

PredicateFn = Callable[[Sequence[Entity]], bool]


@dataclass
class BuildContext:
    """
    Symbol table handed to a first-order grounding component.

    constants:  name -> Entity
    predicates: name -> (arity, fn(list of exactly `arity` entities) -> bool)
    functions:  name -> (arity, fn(list of entities) -> Entity)
    """
    constants: Dict[str, Entity]
    predicates: Dict[str, Tuple[int, PredicateFn]]
    functions: Dict[str, Tuple[int, Callable[[Sequence[Entity]], Entity]]] = field(default_factory=dict)


def entity_build_context(today: Entity) -> BuildContext:
    return BuildContext(
        constants={"Today": today},
        predicates={
            "Sunny": (1, lambda e: sunny(e[0])),
            "Rainy": (1, lambda e: rainy(e[0])),
            "Cloudy": (1, lambda e: cloudy(e[0])),
            "IsNextDay": (2, lambda e: is_next_day(e[0], e[1])),
        },
        functions={},
    )


def pl_context_for(day: Entity) -> Dict[str, bool]:
    """PL Context binding Sunny, Rainy and Cloudy to the day's weather."""
    return {attribute.value: day.has(attribute) for attribute in Attribute}
