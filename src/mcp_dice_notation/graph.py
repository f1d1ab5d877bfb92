from __future__ import annotations

from typing import Literal as LiteralType, TypeAlias

from .errors import DiceError, StackUnderflowError
from .models import (
    Add,
    BinaryNode,
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


Dialect: TypeAlias = LiteralType["dot", "mermaid"]
DIALECTS: tuple[str, ...] = ("dot", "mermaid")


class GraphWriter(Visitor[None]):
    """Render a syntax tree as a Graphviz DOT or Mermaid graph.

    Node ids are assigned in visiting order (``node0001``, ``node0002``, ...).
    Each visit leaves the id of the node it wrote on ``id_stack`` for its parent
    to link to. A parent writes its edges once all of its children are written.
    """

    def __init__(self, dialect: Dialect = "dot") -> None:
        if dialect not in DIALECTS:
            raise DiceError(
                f"Unknown graph dialect {dialect!r}. Use 'dot' or 'mermaid'.",
                code="INVALID_DIALECT",
            )
        self.dialect = dialect
        self.lines: list[str] = []
        self.next_id = 1
        self.id_stack: list[str] = []

    def write(self, root: Node) -> str:
        if self.dialect == "dot":
            self.lines += [
                "graph {",
                "    graph [rankdir=TB]",
                "    node [shape=rect]",
                "    edge [fontsize=10]",
            ]
        else:
            self.lines.append("graph TB")

        accept(root, self)

        if self.dialect == "dot":
            self.lines.append("}")
        return "\n".join(self.lines) + "\n"

    def _node(self, label: str) -> str:
        node_id = f"node{self.next_id:04x}"
        self.next_id += 1
        if self.dialect == "dot":
            self.lines.append(f'    {node_id} [label="{label}"]')
        else:
            self.lines.append(f'    {node_id}("{label}")')
        return node_id

    def _edge(self, parent: str, child: str, label: str) -> None:
        if self.dialect == "dot":
            self.lines.append(f'    {parent} -- {child} [label="{label}"]')
        else:
            self.lines.append(f"    {parent} --{label}--- {child}")

    def _id_of(self, node: Node) -> str:
        accept(node, self)
        if not self.id_stack:
            raise StackUnderflowError()
        return self.id_stack.pop()

    def _binary(self, node_id: str, node: BinaryNode) -> None:
        left_id = self._id_of(node.left)
        right_id = self._id_of(node.right)
        self._edge(node_id, left_id, "left")
        self._edge(node_id, right_id, "right")
        self.id_stack.append(node_id)

    def visit_literal(self, node: Literal) -> None:
        self.id_stack.append(self._node(str(node.value)))

    def visit_roll(self, node: Roll) -> None:
        node_id = self._node("Roll")
        count_id = self._id_of(node.count)
        sides_id = self._id_of(node.sides)
        self._edge(node_id, count_id, "count")
        self._edge(node_id, sides_id, "sides")
        if node.select is not None:
            self._edge(node_id, self._id_of(node.select), "select")
        self.id_stack.append(node_id)

    def visit_select(self, node: Select) -> None:
        node_id = self._node(node.selection.label)
        if node.count is not None:
            self._edge(node_id, self._id_of(node.count), "count")
        if node.next is not None:
            self._edge(node_id, self._id_of(node.next), "next")
        self.id_stack.append(node_id)

    def visit_negate(self, node: Negate) -> None:
        node_id = self._node("-")
        self._edge(node_id, self._id_of(node.operand), "right")
        self.id_stack.append(node_id)

    def visit_add(self, node: Add) -> None:
        self._binary(self._node("Add"), node)

    def visit_subtract(self, node: Subtract) -> None:
        self._binary(self._node("Subtract"), node)

    def visit_multiply(self, node: Multiply) -> None:
        self._binary(self._node("Multiply"), node)

    def visit_divide(self, node: Divide) -> None:
        self._binary(self._node("Divide"), node)


def render_graph(root: Node, dialect: str = "dot") -> str:
    return GraphWriter(dialect.strip().lower()).write(root)  # type: ignore[arg-type]
