"""AggregationNode: package/class tree with roll-up totals.

Each sample is added by walking its dotted class name one segment at a
time, creating nodes as needed and adding the sample's totals to every node
on the way, the starting node included. The roll-up therefore falls out of
the walk; there is no separate aggregation pass.

A node that is both a class and the package prefix of another class (``a.B``
and ``a.B.Inner``) mixes its own totals with the rolled-up ones. ``own_count``
and ``own_byte_size`` keep the part that terminated exactly at the node.
"""

from __future__ import annotations

from collections.abc import Iterator

from ..render import Table, rowtd, rowth
from ..types import SORT_ORDERS, ClassDef

DELIMITER = "."
HEADER = ("Class", "Count", "Bytes")


class AggregationNode:
    """One segment of a dotted class name, or the empty-path root."""

    __slots__ = (
        "label", "path", "is_root", "count", "byte_size",
        "own_count", "own_byte_size", "children",
    )

    def __init__(
        self,
        label: str = "",
        is_root: bool = False,
        path: tuple[str, ...] = (),
    ) -> None:
        self.label = label
        self.path = path
        self.is_root = is_root
        self.count = 0
        self.byte_size = 0
        self.own_count = 0
        self.own_byte_size = 0
        self.children: dict[str, AggregationNode] = {}

    def __repr__(self) -> str:
        name = DELIMITER.join(self.path) or "<root>"
        return f"AggregationNode({name!r}, count={self.count}, byte_size={self.byte_size})"

    def add(self, class_def: ClassDef, count: int, byte_size: int) -> None:
        """Add one sample below this node. O(depth of ``class_def.name``)."""
        node = self
        node.count += count
        node.byte_size += byte_size
        for segment in class_def.name.split(DELIMITER):
            if not segment:
                continue
            child = node.children.get(segment)
            if child is None:
                child = AggregationNode(segment, path=node.path + (segment,))
                node.children[segment] = child
            node = child
            node.count += count
            node.byte_size += byte_size
        node.own_count += count
        node.own_byte_size += byte_size

    def sorted_children(self, sort_by: str = "label") -> list[AggregationNode]:
        if sort_by not in SORT_ORDERS:
            raise ValueError(f"sort_by must be one of {SORT_ORDERS}, got {sort_by!r}")
        nodes = sorted(self.children.values(), key=lambda n: n.label)
        if sort_by == "count":
            nodes.sort(key=lambda n: n.count, reverse=True)
        elif sort_by == "bytes":
            nodes.sort(key=lambda n: n.byte_size, reverse=True)
        return nodes

    def render(self, sort_by: str = "label", tab_title: str = "Histogram") -> Table:
        """One row per immediate child; deeper levels are left to the sink.

        Does not touch tree state, so repeated calls give the same rows.
        """
        table = Table(
            header=rowth(*HEADER),
            tab=tab_title if self.is_root else None,
            node=self,
        )
        for child in self.sorted_children(sort_by):
            table.append(rowtd(child.label, child.count, child.byte_size))
        return table

    def find(self, path: tuple[str, ...] | list[str]) -> AggregationNode:
        """Return the descendant at *path*. Raises ``KeyError`` if absent."""
        node = self
        for segment in path:
            node = node.children[segment]
        return node

    def walk(self, sort_by: str = "label") -> Iterator[AggregationNode]:
        """Yield this node and every descendant, depth-first in render order."""
        yield self
        for child in self.sorted_children(sort_by):
            yield from child.walk(sort_by)

    @property
    def is_leaf(self) -> bool:
        return not self.children
