"""Stack-machine evaluation of dice syntax trees.

The evaluator keeps three pieces of state while walking a tree:

- ``results``: intermediate integers; each node pushes exactly one.
- ``rolls``: every die thrown, in the order it was thrown.
- a stack of dice pools, each a ``range`` of indices into ``rolls``, that
  selection nodes read from and narrow.
"""

from __future__ import annotations

import enum
import logging
import secrets
from dataclasses import dataclass
from typing import Protocol

from .config import MAX_DEPTH_LIMIT
from .errors import (
    DiceError,
    DivideByZeroError,
    InvalidRollError,
    InvalidSelectionError,
    NestingTooDeepError,
    StackUnderflowError,
    TooManyDiceError,
)
from .models import (
    ALLOWED_DIE_SIDES,
    Add,
    DieRoll,
    Divide,
    Literal,
    Multiply,
    Negate,
    Node,
    Roll,
    Select,
    Selection,
    Subtract,
    Visitor,
    accept,
    depth,
)
from .parser import parse


logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


class Evaluation(enum.Enum):
    """How each die's face value is chosen."""

    RANDOM = "random"
    MIN = "min"
    MID = "mid"
    MAX = "max"

    @classmethod
    def from_name(cls, name: str) -> Evaluation:
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(e.value for e in cls)
            raise DiceError(
                f"Unknown evaluation mode {name!r}. Use one of: {choices}.",
                code="INVALID_EVALUATION",
            ) from None


_HIGH = {
    Selection.KEEP_HIGHEST: True,
    Selection.DROP_HIGHEST: True,
    Selection.KEEP_LOWEST: False,
    Selection.DROP_LOWEST: False,
}

_KEEP = {
    Selection.KEEP_HIGHEST: True,
    Selection.KEEP_LOWEST: True,
    Selection.DROP_HIGHEST: False,
    Selection.DROP_LOWEST: False,
}


def _truncating_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


class Evaluator(Visitor[None]):
    def __init__(
        self,
        evaluation: Evaluation = Evaluation.RANDOM,
        rng: RandomSource | None = None,
        max_dice: int | None = None,
    ) -> None:
        self.evaluation = evaluation
        self.rng: RandomSource = rng if rng is not None else secrets.SystemRandom()
        self.max_dice = max_dice

        self.rolls: list[DieRoll] = []
        self.results: list[int] = []
        self._pools: list[range] = []
        # Ranges whose kept dice count towards the innermost roll being evaluated.
        self._owned: list[list[range]] = []

    def eval(self, root: Node) -> int:
        self.rolls.clear()
        self.results.clear()
        self._pools.clear()
        self._owned.clear()

        accept(root, self)

        if len(self.results) != 1:
            raise StackUnderflowError()
        total = self.results.pop()
        logger.debug("evaluated to %d with %d dice (%s)", total, len(self.rolls), self.evaluation.value)
        return total

    # Helpers

    def _pop(self) -> int:
        if not self.results:
            raise StackUnderflowError()
        return self.results.pop()

    def _value_of(self, node: Node) -> int:
        accept(node, self)
        return self._pop()

    def _face(self, sides: int) -> int:
        if self.evaluation is Evaluation.RANDOM:
            return self.rng.randint(1, sides)
        if self.evaluation is Evaluation.MIN:
            return 1
        if self.evaluation is Evaluation.MID:
            return sides // 2
        return sides

    def _reserve(self, count: int) -> None:
        if self.max_dice is not None and len(self.rolls) + count > self.max_dice:
            raise TooManyDiceError(len(self.rolls) + count, self.max_dice)

    def _throw(self, sides_per_die: list[int]) -> range:
        start = len(self.rolls)
        for sides in sides_per_die:
            self.rolls.append(DieRoll(sides=sides, result=self._face(sides)))
        return range(start, len(self.rolls))

    def _sort(self, pool: range, descending: bool) -> None:
        self.rolls[pool.start : pool.stop] = sorted(
            self.rolls[pool.start : pool.stop],
            key=lambda roll: roll.result,
            reverse=descending,
        )

    def _select_next(self, node: Select, pool: range) -> None:
        if node.next is None:
            return
        self._pools.append(pool)
        try:
            accept(node.next, self)
        finally:
            self._pools.pop()

    # Visitor

    def visit_literal(self, node: Literal) -> None:
        self.results.append(node.value)

    def visit_roll(self, node: Roll) -> None:
        count = self._value_of(node.count)
        sides = self._value_of(node.sides)

        if count < 0 or sides not in ALLOWED_DIE_SIDES:
            raise InvalidRollError(count, sides)

        self._reserve(count)
        pool = self._throw([sides] * count)
        owned = [pool]

        if node.select is not None:
            self._pools.append(pool)
            self._owned.append(owned)
            try:
                accept(node.select, self)
            finally:
                self._owned.pop()
                self._pools.pop()

        total = 0
        for span in owned:
            self._sort(span, descending=True)
            total += sum(roll.result for roll in self.rolls[span.start : span.stop] if roll.keep)

        self.results.append(total)

    def visit_select(self, node: Select) -> None:
        if not self._pools:
            raise StackUnderflowError()
        pool = self._pools[-1]

        if not node.selection.takes_count:
            self._reroll(node, pool)
            return

        high = _HIGH[node.selection]
        keep = _KEEP[node.selection]

        count = 1 if node.count is None else self._value_of(node.count)
        if count < 0 or count > len(pool):
            raise InvalidSelectionError(count, len(pool))

        self._sort(pool, descending=high)

        for i, index in enumerate(pool):
            self.rolls[index].keep = keep if i < count else not keep

        kept = pool[:count] if keep else pool[count:]
        self._select_next(node, kept)

    def _reroll(self, node: Select, old: range) -> None:
        self._reserve(len(old))
        new = self._throw([self.rolls[i].sides for i in old])
        if self._owned:
            self._owned[-1].append(new)

        total_old = sum(self.rolls[i].result for i in old)
        total_new = sum(self.rolls[i].result for i in new)

        # Ties keep the original pool for advantage and the reroll for
        # disadvantage.
        take_new = (total_new > total_old) == (node.selection is Selection.ADVANTAGE)
        kept, dropped = (new, old) if take_new else (old, new)

        for i in dropped:
            self.rolls[i].keep = False

        self._select_next(node, kept)

    def visit_negate(self, node: Negate) -> None:
        self.results.append(-self._value_of(node.operand))

    def visit_add(self, node: Add) -> None:
        left = self._value_of(node.left)
        right = self._value_of(node.right)
        self.results.append(left + right)

    def visit_subtract(self, node: Subtract) -> None:
        left = self._value_of(node.left)
        right = self._value_of(node.right)
        self.results.append(left - right)

    def visit_multiply(self, node: Multiply) -> None:
        left = self._value_of(node.left)
        right = self._value_of(node.right)
        self.results.append(left * right)

    def visit_divide(self, node: Divide) -> None:
        left = self._value_of(node.left)
        right = self._value_of(node.right)
        if right == 0:
            raise DivideByZeroError()
        self.results.append(_truncating_div(left, right))


@dataclass(frozen=True)
class RollOutcome:
    total: int
    rolls: list[DieRoll]


def evaluate(
    expression: str | Node,
    evaluation: Evaluation = Evaluation.RANDOM,
    rng: RandomSource | None = None,
    max_dice: int | None = None,
) -> RollOutcome:
    """Parse (if needed) and evaluate an expression in one call.

    Trees deeper than ``MAX_DEPTH_LIMIT`` raise NestingTooDeepError.
    """

    if isinstance(expression, str):
        expression = parse(expression)
    if depth(expression) > MAX_DEPTH_LIMIT:
        raise NestingTooDeepError(MAX_DEPTH_LIMIT)

    evaluator = Evaluator(evaluation, rng=rng, max_dice=max_dice)
    total = evaluator.eval(expression)
    return RollOutcome(total=total, rolls=list(evaluator.rolls))
