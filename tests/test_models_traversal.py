import pytest

from mcp_dice_notation.models import (
    Add,
    DieRoll,
    Divide,
    Literal,
    Multiply,
    Negate,
    Roll,
    Select,
    Selection,
    Subtract,
    Visitor,
    depth,
    walk,
)
from mcp_dice_notation.parser import parse


class OrderRecorder(Visitor[None]):
    """Records node kinds in the documented child order."""

    def __init__(self):
        self.seen = []

    def visit_literal(self, node):
        self.seen.append(node.value)

    def visit_roll(self, node):
        self.seen.append("roll")
        node.count.accept(self)
        node.sides.accept(self)
        if node.select is not None:
            node.select.accept(self)

    def visit_select(self, node):
        self.seen.append(node.selection.value)
        if node.count is not None:
            node.count.accept(self)
        if node.next is not None:
            node.next.accept(self)

    def visit_negate(self, node):
        self.seen.append("neg")
        node.operand.accept(self)

    def _binary(self, name, node):
        self.seen.append(name)
        node.left.accept(self)
        node.right.accept(self)

    def visit_add(self, node):
        self._binary("add", node)

    def visit_subtract(self, node):
        self._binary("sub", node)

    def visit_multiply(self, node):
        self._binary("mul", node)

    def visit_divide(self, node):
        self._binary("div", node)


def test_visitor_order():
    recorder = OrderRecorder()
    parse("-(4d6kh3dl1 - 2) * 3 / 1 + 5").accept(recorder)
    assert recorder.seen == [
        "add", "div", "mul", "neg", "sub", "roll", 4, 6, "kh", 3, "dl", 1, 2, 3, 1, 5,
    ]


def test_walk_matches_visitor_order():
    tree = parse("-(4d6kh3dl1 - 2) * 3 / 1 + 5")
    recorder = OrderRecorder()
    tree.accept(recorder)
    kinds = {
        Add: "add", Subtract: "sub", Multiply: "mul", Divide: "div",
        Negate: "neg", Roll: "roll",
    }
    walked = []
    for node in walk(tree):
        if isinstance(node, Literal):
            walked.append(node.value)
        elif isinstance(node, Select):
            walked.append(node.selection.value)
        else:
            walked.append(kinds[type(node)])
    assert walked == recorder.seen


def test_visitor_errors_propagate():
    class Failing(OrderRecorder):
        def visit_literal(self, node):
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        parse("1 + 2").accept(Failing())


def test_depth():
    assert depth(Literal(1)) == 1
    assert depth(parse("1 + 2")) == 2
    assert depth(parse("4d6kh3dl1")) == 4


def test_nodes_are_immutable_and_structural():
    node = Roll(Literal(1), Literal(6), Select(Selection.ADVANTAGE))
    assert node == parse("d6adv")
    with pytest.raises(AttributeError):
        node.count = Literal(2)


def test_visitor_must_implement_every_variant():
    class Partial(Visitor[None]):
        def visit_literal(self, node):
            pass

    with pytest.raises(TypeError):
        Partial()


@pytest.mark.parametrize(
    ("selection", "label", "takes_count"),
    [
        (Selection.KEEP_HIGHEST, "Keep Highest", True),
        (Selection.DROP_LOWEST, "Drop Lowest", True),
        (Selection.DISADVANTAGE, "Disadvantage", False),
    ],
)
def test_selection_metadata(selection, label, takes_count):
    assert selection.label == label
    assert selection.takes_count is takes_count


def test_die_roll_str():
    assert str(DieRoll(sides=6, result=4)) == "[d6:4]"
    assert str(DieRoll(sides=20, result=1, keep=False)) == "~~[d20:1]~~"
