from __future__ import annotations

import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any

from .config import Settings, load_settings
from .evaluator import Evaluation, Evaluator, RandomSource
from .parser import parse_request


logger = logging.getLogger(__name__)


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _resolve_evaluation(mode: str | Evaluation) -> Evaluation:
    if isinstance(mode, Evaluation):
        return mode
    return Evaluation.from_name(mode)


def roll_from_text(
    text: str,
    mode: str | Evaluation = Evaluation.RANDOM,
    rng: RandomSource | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Parse, validate, then roll. Raises DiceError for invalid input."""

    settings = settings or load_settings()
    evaluation = _resolve_evaluation(mode)
    parsed = parse_request(text, max_length=settings.max_input_length, max_depth=settings.max_depth)

    if rng is None and evaluation is Evaluation.RANDOM:
        rng = secrets.SystemRandom()

    evaluator = Evaluator(evaluation, rng=rng, max_dice=settings.max_dice)
    total = evaluator.eval(parsed.root)

    rolls = [
        {"sides": roll.sides, "result": roll.result, "kept": roll.keep}
        for roll in evaluator.rolls
    ]

    shown = " ".join(str(roll) for roll in evaluator.rolls)
    if shown:
        explanation = f"{parsed.normalized_expression}: {shown} => {total}"
    else:
        explanation = f"{parsed.normalized_expression} => {total}"

    record: dict[str, Any] = {
        "request_id": uuid.uuid4().hex,
        "timestamp": _now_utc_iso(),
        "input": text,
        "normalized_expression": parsed.normalized_expression,
        "evaluation": evaluation.value,
        "rolls": rolls,
        "total": total,
        "explanation": explanation,
    }
    if evaluation is Evaluation.RANDOM:
        record["rng"] = {
            "source": type(rng).__name__,
            "nonce": str(uuid.uuid4()),
        }

    logger.debug("request %s: %s", record["request_id"], explanation)
    return record


def roll_range(text: str, settings: Settings | None = None) -> dict[str, Any]:
    """Worst, average and best case totals for an expression."""

    settings = settings or load_settings()
    parsed = parse_request(text, max_length=settings.max_input_length, max_depth=settings.max_depth)

    totals = {
        evaluation.value: Evaluator(evaluation, max_dice=settings.max_dice).eval(parsed.root)
        for evaluation in (Evaluation.MIN, Evaluation.MID, Evaluation.MAX)
    }

    return {
        "input": text,
        "normalized_expression": parsed.normalized_expression,
        **totals,
    }
