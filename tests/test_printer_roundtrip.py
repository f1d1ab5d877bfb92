import pytest

from mcp_dice_notation.models import Literal, Roll, Select, Selection, Subtract
from mcp_dice_notation.parser import parse
from mcp_dice_notation.printer import to_notation


EXPRESSIONS = [
    "1",
    "d",
    "d20",
    "3d%",
    "4d6kh3 + 2",
    "4d6 kh dl",
    "4d6 adv kh3",
    "2d20 dis adv",
    "8d6kh5d2",
    "1 - (2 - 3)",
    "1 - 2 - 3",
    "(1 + 2) * 3",
    "2 * (3 * 4)",
    "2 / (6 / 3)",
    "-(1 + 2)",
    "--3",
    "2 * -d6",
    "[1d4 + 1] × 3 ÷ 2",
    "-(2 * 3)",
]


@pytest.mark.parametrize("text", EXPRESSIONS)
def test_printed_form_parses_to_same_tree(text):
    tree = parse(text)
    assert parse(to_notation(tree)) == tree


@pytest.mark.parametrize("text", EXPRESSIONS)
def test_printing_is_idempotent(text):
    once = to_notation(parse(text))
    assert to_notation(parse(once)) == once


@pytest.mark.parametrize(
    ("text", "printed"),
    [
        ("1-(2-3)", "1 - (2 - 3)"),
        ("(1-2)-3", "1 - 2 - 3"),
        ("(2*3)+1", "2 * 3 + 1"),
        ("2*(3+1)", "2 * (3 + 1)"),
        ("-(1+2)", "-(1 + 2)"),
        ("d20adv", "1d20adv"),
        ("4d6kh dl", "4d6kh dl"),
        ("4d6k2d1", "4d6kh2dl1"),
        ("2×3", "2 * 3"),
    ],
)
def test_canonical_form(text, printed):
    assert to_notation(parse(text)) == printed


def test_non_literal_operands_are_bracketed():
    tree = Roll(count=Subtract(Literal(3), Literal(1)), sides=Literal(6), select=Select(Selection.KEEP_LOWEST, Literal(1)))
    assert to_notation(tree) == "(3 - 1)d6kl1"
