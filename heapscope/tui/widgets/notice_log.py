"""Notice log: server errors and client failures, newest last."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import RichLog

from ...types import Notice, NoticeKind

_COLORS = {
    NoticeKind.SERVER_ERROR: "yellow",
    NoticeKind.PROTOCOL_ERROR: "magenta",
    NoticeKind.INVARIANT_ERROR: "red",
    NoticeKind.TRANSPORT_ERROR: "red",
}


class NoticeLog(RichLog):
    DEFAULT_CSS = """
    NoticeLog {
        height: 6;
        border-top: solid $primary;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(wrap=True, **kwargs)
        self.notices: list[Notice] = []

    def add_notice(self, notice: Notice) -> None:
        self.notices.append(notice)
        color = _COLORS.get(notice.kind, "white")
        prefix = "FATAL " if notice.fatal else ""
        self.write(Text.assemble((f"{prefix}{notice.kind.value}", color), " ", notice.message))
