"""Table primitives shared by the aggregation tree and the sinks."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .core.aggregation import AggregationNode

_id_serial = itertools.count(1)


def uid() -> str:
    """Process-wide unique token: ``id1``, ``id2``, ... Never reset."""
    return f"id{next(_id_serial)}"


@dataclass(frozen=True)
class Row:
    cells: tuple
    header: bool = False

    def __len__(self) -> int:
        return len(self.cells)


def rowth(*cells: Any) -> Row:
    """Build one header row."""
    return Row(cells=tuple(cells), header=True)


def rowtd(*cells: Any) -> Row:
    """Build one data row."""
    return Row(cells=tuple(cells))


@dataclass
class Table:
    """A fixed-width table. ``node`` is the aggregation node it was rendered from.

    ``tab`` is set only on tables rendered from a root node; it names the
    tab the table should be shown in.
    """

    header: Row
    rows: list[Row] = field(default_factory=list)
    id: str = field(default_factory=uid)
    tab: str | None = None
    node: AggregationNode | None = None

    @property
    def width(self) -> int:
        return len(self.header)

    def append(self, row: Row) -> None:
        if len(row) != self.width:
            raise ValueError(
                f"Row has {len(row)} cells, table {self.id} expects {self.width}"
            )
        self.rows.append(row)

    def triples(self) -> list[tuple]:
        """Data rows as plain tuples, in display order."""
        return [row.cells for row in self.rows]
