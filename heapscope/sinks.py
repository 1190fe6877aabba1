"""Presentation sinks: where rendered tables and notices end up."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TextIO

from .render import Table
from .types import Notice


@dataclass
class MemorySink:
    """Keeps every tab and notice in order. Used headless and in tests."""

    tabs: list[tuple[str, Table]] = field(default_factory=list)
    notices: list[Notice] = field(default_factory=list)

    def add_tab(self, name: str, content: Table) -> None:
        self.tabs.append((name, content))

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    @property
    def tables(self) -> list[Table]:
        return [t for _, t in self.tabs]


class ConsoleSink:
    """Prints tables as fixed-width columns and notices to stderr.

    With ``expand_depth`` > 0 each row is followed by its own children,
    indented, down to that many extra levels.
    """

    def __init__(
        self,
        out: TextIO | None = None,
        err: TextIO | None = None,
        expand_depth: int = 0,
        sort_by: str = "label",
        label_width: int = 40,
    ) -> None:
        self._out = out or sys.stdout
        self._err = err or sys.stderr
        self.expand_depth = expand_depth
        self.sort_by = sort_by
        self.label_width = label_width

    def add_tab(self, name: str, content: Table) -> None:
        out = self._out
        node = content.node
        print(f"== {name} ==", file=out)
        if node is not None:
            print(f"Total:   {node.count:,} objects, {node.byte_size:,} bytes", file=out)
        label, count, nbytes = content.header.cells
        print(f"{label:<{self.label_width}} {count:>12} {nbytes:>16}", file=out)
        print("-" * (self.label_width + 30), file=out)
        if not content.rows:
            print("(empty)", file=out)
        for row in content.rows:
            self._print_row(row.cells, 0)
            if node is not None and self.expand_depth > 0:
                self._print_children(node.children[row.cells[0]], 1)
        print(file=out)

    def _print_children(self, node, level: int) -> None:
        if level > self.expand_depth:
            return
        for child in node.sorted_children(self.sort_by):
            self._print_row((child.label, child.count, child.byte_size), level)
            self._print_children(child, level + 1)

    def _print_row(self, cells: tuple, level: int) -> None:
        label, count, nbytes = cells
        text = ("  " * level + str(label))[: self.label_width]
        print(f"{text:<{self.label_width}} {count:>12,} {nbytes:>16,}", file=self._out)

    def notify(self, notice: Notice) -> None:
        prefix = "FATAL" if notice.fatal else notice.kind.value
        print(f"[{prefix}] {notice.message}", file=self._err)
