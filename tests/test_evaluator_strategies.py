import random

import pytest

from mcp_dice_notation.errors import DiceError
from mcp_dice_notation.evaluator import Evaluation, Evaluator, evaluate
from mcp_dice_notation.models import ALLOWED_DIE_SIDES
from mcp_dice_notation.parser import parse


SIDES = sorted(ALLOWED_DIE_SIDES)


@pytest.mark.parametrize("n", [0, 1, 7, 42, 1000, 2147483647])
def test_integer_literal_evaluates_to_itself(n):
    for evaluation in Evaluation:
        assert evaluate(str(n), evaluation).total == n


@pytest.mark.parametrize("sides", SIDES)
@pytest.mark.parametrize("count", [0, 1, 3, 10])
def test_deterministic_strategies(count, sides):
    text = f"{count}d{sides}"
    assert evaluate(text, Evaluation.MIN).total == count
    assert evaluate(text, Evaluation.MID).total == count * (sides // 2)
    assert evaluate(text, Evaluation.MAX).total == count * sides


@pytest.mark.parametrize("sides", SIDES)
def test_random_strategy_stays_in_range(sides):
    rng = random.Random(1234)
    evaluator = Evaluator(Evaluation.RANDOM, rng=rng)
    for _ in range(50):
        total = evaluator.eval(parse(f"5d{sides}"))
        assert 5 <= total <= 5 * sides
        assert len(evaluator.rolls) == 5
        assert all(1 <= roll.result <= sides and roll.sides == sides for roll in evaluator.rolls)


def test_random_strategy_uses_system_random_by_default():
    total = Evaluator().eval(parse("3d6"))
    assert 3 <= total <= 18


def test_default_sides_and_percentile():
    assert evaluate("d", Evaluation.MAX).total == 6
    assert evaluate("3d%", Evaluation.MID).total == 150


def test_rolls_are_recorded_fresh_each_eval():
    evaluator = Evaluator(Evaluation.MAX)
    evaluator.eval(parse("3d6"))
    assert len(evaluator.rolls) == 3
    evaluator.eval(parse("1d20"))
    assert [(r.sides, r.result, r.keep) for r in evaluator.rolls] == [(20, 20, True)]


def test_each_roll_sums_its_own_pool():
    outcome = evaluate("2d6 + 1d4", Evaluation.MAX)
    assert outcome.total == 16
    assert [r.sides for r in outcome.rolls] == [6, 6, 4]


@pytest.mark.parametrize(
    ("name", "evaluation"),
    [("random", Evaluation.RANDOM), ("MIN", Evaluation.MIN), (" mid ", Evaluation.MID), ("Max", Evaluation.MAX)],
)
def test_evaluation_from_name(name, evaluation):
    assert Evaluation.from_name(name) is evaluation


def test_evaluation_from_unknown_name():
    with pytest.raises(DiceError) as exc:
        Evaluation.from_name("average")
    assert exc.value.code == "INVALID_EVALUATION"
