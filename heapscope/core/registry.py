"""ClassRegistry: id -> class definition table fed by ClassDefs responses."""

from __future__ import annotations

import logging

from ..types import ClassDef, UnknownClassError

logger = logging.getLogger(__name__)


class ClassRegistry:
    """Session-scoped class table.

    Entries are only ever added (last write wins on a repeated id) until
    ``clear()`` resets the session. Lookups of unknown ids raise
    ``UnknownClassError``, which is a ``LookupError``.
    """

    def __init__(self) -> None:
        self._defs: dict[int, ClassDef] = {}

    def register(self, class_def: ClassDef) -> None:
        previous = self._defs.get(class_def.id)
        if previous is not None and previous.name != class_def.name:
            logger.debug(
                "Class id %d redefined: %s -> %s",
                class_def.id, previous.name, class_def.name,
            )
        self._defs[class_def.id] = class_def

    def get(self, class_id: int) -> ClassDef:
        try:
            return self._defs[class_id]
        except KeyError:
            raise UnknownClassError(class_id) from None

    def clear(self) -> None:
        self._defs.clear()

    def __contains__(self, class_id: object) -> bool:
        return class_id in self._defs

    def __len__(self) -> int:
        return len(self._defs)
