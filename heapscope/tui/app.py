"""HeapApp: Textual application wiring a HeapClient to tabs of histogram trees."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Input, TabbedContent, TabPane

from ..client import HeapClient
from ..config import load_config
from ..render import Table
from ..types import HeapscopeConfig, Notice, Transport
from .widgets.histo_tree import HistoTree
from .widgets.notice_log import NoticeLog


class TuiSink:
    """Presentation sink that forwards tables and notices into a HeapApp."""

    def __init__(self, app: HeapApp) -> None:
        self._app = app

    def add_tab(self, name: str, content: Table) -> None:
        self._app.call_later(self._app.add_histogram, name, content)

    def notify(self, notice: Notice) -> None:
        self._app.notice_log.add_notice(notice)


class HeapApp(App):
    """Interactive histogram browser: one tab per Histo response."""

    TITLE = "heapscope"

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+r", "reload", "Reload", priority=True),
    ]

    def __init__(
        self,
        config: HeapscopeConfig | None = None,
        transport: Transport | None = None,
        initial_query: str | None = None,
    ) -> None:
        super().__init__()
        self.config = config or load_config()
        self._transport = transport
        self._initial_query = initial_query
        self.client: HeapClient | None = None
        self.histogram_count = 0

    def compose(self) -> ComposeResult:
        yield Input(placeholder=self.config.init_query, id="query-input")
        yield TabbedContent(id="tabs")
        yield NoticeLog(id="notice-log")
        yield Footer()

    @property
    def notice_log(self) -> NoticeLog:
        return self.query_one("#notice-log", NoticeLog)

    def on_mount(self) -> None:
        self.client = HeapClient(self.config, sink=TuiSink(self), transport=self._transport)
        self.client.init(self._initial_query)
        self.query_one("#query-input", Input).focus()

    async def on_unmount(self) -> None:
        if self.client is not None:
            await self.client.aclose()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        query = event.value.strip()
        if not query or self.client is None:
            return
        self.client.query(query)
        event.input.value = ""

    def action_reload(self) -> None:
        if self.client is not None:
            self.client.init(self._initial_query)

    async def add_histogram(self, name: str, table: Table) -> None:
        self.histogram_count += 1
        title = f"{name} {self.histogram_count}"
        tree = HistoTree(table, sort_by=self.config.render.sort_by)
        tabs = self.query_one("#tabs", TabbedContent)
        await tabs.add_pane(TabPane(title, tree, id=f"tab-{table.id}"))
        tabs.active = f"tab-{table.id}"
