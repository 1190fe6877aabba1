"""Histogram tree: one level of packages at a time, expanded on demand."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Tree
from textual.widgets.tree import TreeNode

from ...core.aggregation import AggregationNode
from ...render import Table


def _label(name: str, count: int, nbytes: int) -> Text:
    return Text.assemble(name, (f"  {count:,} objects, {nbytes:,} bytes", "dim"))


class HistoTree(Tree[AggregationNode]):
    """Tree view of a rendered histogram table.

    The root shows the table's rows; a row's own children are rendered
    from its aggregation node the first time it is expanded.
    """

    def __init__(self, table: Table, sort_by: str = "label", **kwargs) -> None:
        root = table.node
        total = _label(table.tab or "", root.count, root.byte_size) if root else (table.tab or "")
        super().__init__(total, data=root, **kwargs)
        self.sort_by = sort_by
        self._table = table

    def on_mount(self) -> None:
        self._add_rows(self.root, self._table)
        self.root.expand()

    def _add_rows(self, parent: TreeNode[AggregationNode], table: Table) -> None:
        node = table.node
        for name, count, nbytes in table.triples():
            child = node.children[name] if node is not None else None
            parent.add(
                _label(name, count, nbytes),
                data=child,
                allow_expand=child is not None and not child.is_leaf,
            )

    def on_tree_node_expanded(self, event: Tree.NodeExpanded[AggregationNode]) -> None:
        tree_node = event.node
        if tree_node.children or tree_node.data is None:
            return
        self._add_rows(tree_node, tree_node.data.render(sort_by=self.sort_by))
