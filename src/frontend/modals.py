"""Modal dialogs for the link browser."""

from __future__ import annotations

from typing import Awaitable, Callable, List, Optional

from textual import on
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, OptionList, Static

from core.models import LinkRecord

from .constants import MANUAL_LABEL
from .state import PreviewChoice

CandidateLoader = Callable[[LinkRecord, Optional[str]], Awaitable[List[str]]]


class CandidatePickerScreen(ModalScreen[Optional[PreviewChoice]]):
    """Pick a preview image from the page's candidates or enter one by hand."""

    BINDINGS = [("escape", "cancel", "Close")]

    def __init__(self, record: LinkRecord, load_candidates: CandidateLoader) -> None:
        super().__init__()
        self._record = record
        self._load_candidates = load_candidates
        self._candidates: List[str] = []

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Choose preview", classes="modal-title"),
            Static(self._record.url, classes="modal-body"),
            Horizontal(
                Input(
                    value=self._record.preview_image_source or "",
                    placeholder="Search term",
                    id="candidate-query",
                ),
                Button("Search", id="candidate-search"),
                classes="modal-row",
            ),
            OptionList(id="candidate-list"),
            Static("", id="candidate-status", classes="modal-error"),
            Horizontal(
                Input(placeholder="https://... (empty clears the preview)", id="manual-url"),
                Button("Use URL", id="manual-apply", variant="success"),
                classes="modal-row",
            ),
            Horizontal(
                Button("Cancel", id="candidate-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog modal-dialog--form",
        )

    def on_mount(self) -> None:
        self._search()

    def _query(self) -> str:
        return self.query_one("#candidate-query", Input).value.strip()

    def _search(self) -> None:
        self.query_one("#candidate-status", Static).update("loading candidates...")
        self.run_worker(self._fill_candidates(self._query() or None), exclusive=True)

    async def _fill_candidates(self, query: Optional[str]) -> None:
        self._candidates = await self._load_candidates(self._record, query)
        options = self.query_one("#candidate-list", OptionList)
        options.clear_options()
        options.add_options(self._candidates)
        status = f"{len(self._candidates)} candidates" if self._candidates else "no candidates found"
        self.query_one("#candidate-status", Static).update(status)

    @on(Button.Pressed, "#candidate-search")
    @on(Input.Submitted, "#candidate-query")
    def _on_search(self) -> None:
        self._search()

    @on(OptionList.OptionSelected, "#candidate-list")
    def _on_candidate_selected(self, event: OptionList.OptionSelected) -> None:
        image_url = self._candidates[event.option_index]
        self.dismiss(PreviewChoice(self._record.id, image_url, self._query() or None))

    @on(Button.Pressed, "#manual-apply")
    def _on_manual(self) -> None:
        image_url = self.query_one("#manual-url", Input).value.strip()
        if not image_url:
            self.dismiss(PreviewChoice(self._record.id, None, None))
            return
        self.dismiss(PreviewChoice(self._record.id, image_url, MANUAL_LABEL))

    @on(Button.Pressed, "#candidate-cancel")
    def _on_cancel(self) -> None:
        self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)
