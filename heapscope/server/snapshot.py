"""Heap snapshots served by the fixture server."""

from __future__ import annotations

import gc
import json
import sys
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..types import ClassDef, Sample


@dataclass
class Snapshot:
    """Class definitions plus one histogram over them."""
    classes: list[ClassDef] = field(default_factory=list)
    histo: list[Sample] = field(default_factory=list)

    def class_defs_payload(self) -> list[dict]:
        return [{"id": c.id, "name": c.name} for c in self.classes]

    def histo_payload(self) -> list[dict]:
        return [
            {"id": s.class_id, "count": s.count, "nbytes": s.byte_size}
            for s in self.histo
        ]

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Snapshot:
        return cls(
            classes=[ClassDef.from_payload(c) for c in raw.get("classes", [])],
            histo=[Sample.from_payload(s) for s in raw.get("histo", [])],
        )


def load_snapshot(path: str | Path) -> Snapshot:
    """Load a snapshot from a YAML or JSON file."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Snapshot file not found: {path}")
    text = path.read_text()
    if path.suffix == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text) or {}
    return Snapshot.from_dict(raw)


def capture_snapshot(objects: Iterable[Any] | None = None) -> Snapshot:
    """Histogram of live objects by ``module.QualName`` of their type.

    Defaults to everything the garbage collector tracks in this process.
    Byte sizes are shallow (``sys.getsizeof``).
    """
    if objects is None:
        objects = gc.get_objects()
    ids: dict[str, int] = {}
    totals: dict[int, list[int]] = {}
    for obj in objects:
        cls = type(obj)
        name = f"{cls.__module__}.{cls.__qualname__}"
        class_id = ids.get(name)
        if class_id is None:
            class_id = ids[name] = len(ids) + 1
            totals[class_id] = [0, 0]
        entry = totals[class_id]
        entry[0] += 1
        entry[1] += sys.getsizeof(obj, 0)

    return Snapshot(
        classes=[ClassDef(id=i, name=n) for n, i in ids.items()],
        histo=[Sample(class_id=i, count=c, byte_size=b) for i, (c, b) in totals.items()],
    )
