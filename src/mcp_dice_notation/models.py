from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar, assert_never


ALLOWED_DIE_SIDES: frozenset[int] = frozenset({4, 6, 8, 10, 12, 20, 100})
DEFAULT_DIE_SIDES = 6
PERCENTILE_SIDES = 100

R = TypeVar("R")


class Selection(enum.Enum):
    KEEP_HIGHEST = "kh"
    KEEP_LOWEST = "kl"
    DROP_HIGHEST = "dh"
    DROP_LOWEST = "dl"
    ADVANTAGE = "adv"
    DISADVANTAGE = "dis"

    @property
    def takes_count(self) -> bool:
        return self not in (Selection.ADVANTAGE, Selection.DISADVANTAGE)

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class _NodeBase:
    def accept(self, visitor: Visitor[R]) -> R:
        return accept(self, visitor)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Literal(_NodeBase):
    value: int


@dataclass(frozen=True)
class Roll(_NodeBase):
    count: Node
    sides: Node
    select: Select | None = None


@dataclass(frozen=True)
class Select(_NodeBase):
    selection: Selection
    count: Node | None = None
    next: Select | None = None


@dataclass(frozen=True)
class Negate(_NodeBase):
    operand: Node


@dataclass(frozen=True)
class Add(_NodeBase):
    left: Node
    right: Node


@dataclass(frozen=True)
class Subtract(_NodeBase):
    left: Node
    right: Node


@dataclass(frozen=True)
class Multiply(_NodeBase):
    left: Node
    right: Node


@dataclass(frozen=True)
class Divide(_NodeBase):
    left: Node
    right: Node


Node: TypeAlias = Literal | Roll | Select | Negate | Add | Subtract | Multiply | Divide
BinaryNode: TypeAlias = Add | Subtract | Multiply | Divide


class Visitor(ABC, Generic[R]):
    """Traversal interface for everything that consumes a syntax tree.

    Implementations visit children themselves, in the fixed order: left then
    right; count, sides, select for rolls; count, next for selections.
    """

    @abstractmethod
    def visit_literal(self, node: Literal) -> R: ...

    @abstractmethod
    def visit_roll(self, node: Roll) -> R: ...

    @abstractmethod
    def visit_select(self, node: Select) -> R: ...

    @abstractmethod
    def visit_negate(self, node: Negate) -> R: ...

    @abstractmethod
    def visit_add(self, node: Add) -> R: ...

    @abstractmethod
    def visit_subtract(self, node: Subtract) -> R: ...

    @abstractmethod
    def visit_multiply(self, node: Multiply) -> R: ...

    @abstractmethod
    def visit_divide(self, node: Divide) -> R: ...


def accept(node: Node, visitor: Visitor[R]) -> R:
    match node:
        case Literal():
            return visitor.visit_literal(node)
        case Roll():
            return visitor.visit_roll(node)
        case Select():
            return visitor.visit_select(node)
        case Negate():
            return visitor.visit_negate(node)
        case Add():
            return visitor.visit_add(node)
        case Subtract():
            return visitor.visit_subtract(node)
        case Multiply():
            return visitor.visit_multiply(node)
        case Divide():
            return visitor.visit_divide(node)
        case _:
            assert_never(node)


def children(node: Node) -> list[Node]:
    """Direct children in traversal order."""

    match node:
        case Literal():
            return []
        case Roll():
            kids: list[Node] = [node.count, node.sides]
            if node.select is not None:
                kids.append(node.select)
            return kids
        case Select():
            return [n for n in (node.count, node.next) if n is not None]
        case Negate():
            return [node.operand]
        case Add() | Subtract() | Multiply() | Divide():
            return [node.left, node.right]
        case _:
            assert_never(node)


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in pre-order."""

    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def depth(node: Node) -> int:
    deepest = 0
    stack = [(node, 1)]
    while stack:
        current, level = stack.pop()
        deepest = max(deepest, level)
        stack.extend((child, level + 1) for child in children(current))
    return deepest


@dataclass
class DieRoll:
    """One die thrown during evaluation. ``keep`` is flipped by selections."""

    sides: int
    result: int
    keep: bool = True

    def __str__(self) -> str:
        text = f"[d{self.sides}:{self.result}]"
        return text if self.keep else f"~~{text}~~"


@dataclass(frozen=True)
class ParsedRollRequest:
    input: str
    root: Node
    normalized_expression: str
