from __future__ import annotations

from .models import (
    Add,
    Divide,
    Literal,
    Multiply,
    Negate,
    Node,
    Roll,
    Select,
    Subtract,
    Visitor,
    accept,
)


_SUM = 1
_TERM = 2
_FACTOR = 3


def _precedence(node: Node) -> int:
    if isinstance(node, (Add, Subtract)):
        return _SUM
    if isinstance(node, (Multiply, Divide)):
        return _TERM
    return _FACTOR


class PrettyPrinter(Visitor[str]):
    """Render a syntax tree back into canonical notation.

    Parentheses are emitted only where precedence or left-associativity
    requires them, so the output parses back into the same tree.
    """

    def _wrap(self, node: Node, level: int) -> str:
        text = accept(node, self)
        if _precedence(node) < level:
            return f"({text})"
        return text

    def _operand(self, node: Node) -> str:
        # Roll counts, sides and selection counts must be a single integer to
        # be re-parsed; anything else is bracketed for readability only.
        if isinstance(node, Literal) and node.value >= 0:
            return str(node.value)
        return f"({accept(node, self)})"

    def visit_literal(self, node: Literal) -> str:
        return str(node.value)

    def visit_roll(self, node: Roll) -> str:
        text = f"{self._operand(node.count)}d{self._operand(node.sides)}"
        if node.select is not None:
            text += accept(node.select, self)
        return text

    def visit_select(self, node: Select) -> str:
        text = node.selection.value
        if node.count is not None:
            text += self._operand(node.count)
        if node.next is not None:
            if node.count is None:
                text += " "
            text += accept(node.next, self)
        return text

    def visit_negate(self, node: Negate) -> str:
        return f"-{self._wrap(node.operand, _FACTOR)}"

    def visit_add(self, node: Add) -> str:
        return f"{self._wrap(node.left, _SUM)} + {self._wrap(node.right, _TERM)}"

    def visit_subtract(self, node: Subtract) -> str:
        return f"{self._wrap(node.left, _SUM)} - {self._wrap(node.right, _TERM)}"

    def visit_multiply(self, node: Multiply) -> str:
        return f"{self._wrap(node.left, _TERM)} * {self._wrap(node.right, _FACTOR)}"

    def visit_divide(self, node: Divide) -> str:
        return f"{self._wrap(node.left, _TERM)} / {self._wrap(node.right, _FACTOR)}"


def to_notation(node: Node) -> str:
    return accept(node, PrettyPrinter())
