"""Textual link browser for tripcards."""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager, AsyncExitStack
from typing import Any, Callable, Mapping, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import DataTable, Footer, Static

from adapters.card_formatting import build_rows, clip
from core.collection import LinkCollection
from core.display_names import DisplayNameDirectory
from core.models import LinkRecord
from core.pipeline import LinkPipeline

from .constants import ACCENT
from .modals import CandidatePickerScreen
from .state import BrowserState, PreviewChoice

LOGGER = logging.getLogger(__name__)

PipelineOpener = Callable[..., AbstractAsyncContextManager[LinkPipeline]]


class LinkBrowserApp(App):
    """Lists enriched links and lets the user override a preview."""

    BINDINGS = [
        ("r", "refresh", "Refresh"),
        ("c", "pick_preview", "Pick preview"),
        ("q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        background: #0f1a21;
        color: #e8eef5;
    }

    #header {
        height: 5;
        padding: 1 4;
        border-bottom: solid #2a3a46;
    }

    #header-right {
        text-align: right;
    }

    .subtle {
        color: #c6d2dd;
    }

    #links-table {
        height: 1fr;
    }

    #detail {
        height: 4;
        padding: 0 2;
        border-top: solid #2a3a46;
        color: #c6d2dd;
    }

    .modal-dialog {
        width: 90;
        height: auto;
        padding: 1 2;
        border: thick #2a3a46;
        background: #16232c;
    }

    .modal-title {
        text-style: bold;
    }

    .modal-row, .modal-actions {
        height: 3;
    }

    .modal-row Input {
        width: 1fr;
    }

    #candidate-list {
        height: 8;
    }

    .modal-error {
        color: #f5a524;
    }

    CandidatePickerScreen {
        align: center middle;
    }
    """

    def __init__(
        self,
        open_pipeline: PipelineOpener,
        display_names: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._open_pipeline = open_pipeline
        self._names = DisplayNameDirectory(display_names)
        self._exit_stack = AsyncExitStack()
        self._pipeline: Optional[LinkPipeline] = None
        self._collection = LinkCollection()
        self.state = BrowserState()

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal():
                with Vertical():
                    yield Static(self._title_text(), id="title")
                    yield Static("link previews", classes="subtle")
                with Vertical(id="header-right"):
                    yield Static("", id="header-status")
        yield DataTable(id="links-table", cursor_type="row")
        yield Static("", id="detail")
        yield Footer()

    async def on_mount(self) -> None:
        table = self.query_one("#links-table", DataTable)
        table.add_column("posted", key="posted", width=16)
        table.add_column("sender", key="sender", width=16)
        table.add_column("kind", key="kind", width=8)
        table.add_column("preview", key="preview", width=28)
        table.add_column("url", key="url", width=56)
        table.zebra_stripes = True

        try:
            self._pipeline = await self._exit_stack.enter_async_context(
                self._open_pipeline(interactive=False)
            )
        except Exception as exc:
            LOGGER.exception("Failed to start the link pipeline")
            self.state.error = str(exc)
            self._refresh_header()
            return
        self.action_refresh()

    async def on_unmount(self) -> None:
        await self._exit_stack.aclose()

    def action_refresh(self) -> None:
        if self._pipeline is None or self.state.loading:
            return
        self.run_worker(self._refresh(), group="refresh")

    async def _refresh(self) -> None:
        self.state.loading = True
        self.state.error = None
        self._refresh_header()
        try:
            collection = await self._pipeline.refresh()
        except Exception as exc:
            LOGGER.exception("Refresh failed")
            self.state.error = f"refresh failed: {exc}"
        else:
            self._collection = collection
            self._names.discover(collection)
            self.state.status = f"{len(collection)} links"
            self._reload_table()
        finally:
            self.state.loading = False
            self._refresh_header()

    def _reload_table(self) -> None:
        table = self.query_one("#links-table", DataTable)
        table.clear()
        for row in build_rows(self._collection, self._names):
            table.add_row(
                row.posted_at,
                clip(row.sender, 16),
                row.kind,
                clip(row.preview, 28),
                clip(row.url, 56),
                key=row.record_id,
            )

    def _selected_record(self) -> Optional[LinkRecord]:
        table = self.query_one("#links-table", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        if row_key.value is None:
            return None
        return self._collection.find(row_key.value)

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        record = self._collection.find(event.row_key.value) if event.row_key.value else None
        detail = self.query_one("#detail", Static)
        if record is None:
            detail.update("")
            return
        lines = [record.url]
        if record.preview_image_url:
            lines.append(f"preview: {record.preview_image_url}")
        if record.preview_image_source:
            lines.append(f"label: {record.preview_image_source}")
        detail.update("\n".join(lines))

    def action_pick_preview(self) -> None:
        record = self._selected_record()
        if record is None or self._pipeline is None:
            return
        self.push_screen(CandidatePickerScreen(record, self._pipeline.candidates), self._apply_choice)

    def _apply_choice(self, choice: Optional[PreviewChoice]) -> None:
        if choice is None:
            return
        LinkPipeline.apply_override(self._collection, choice.record_id, choice.image_url, choice.label)
        self._reload_table()

    def _refresh_header(self) -> None:
        status = self.query_one("#header-status", Static)
        if self.state.error:
            status.update(Text(self.state.error, style="bold red"))
        elif self.state.loading:
            status.update("loading...")
        else:
            status.update(self.state.status)

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("TRIP", ACCENT),
            ("CARDS > Links", "bold"),
        )
