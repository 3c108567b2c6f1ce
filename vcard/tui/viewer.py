"""vcard TUI Viewer - Main Textual app with 3-panel layout."""

from __future__ import annotations

import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header, Input

from vcard.card import Card
from vcard.errors import ParseError
from vcard.reader import VCardReader
from vcard.tui.widgets import CardList, PropertyPanel, SummaryPanel, card_title


class VCardViewerApp(App):
    """TUI viewer for vCard files. 3-panel layout with keyboard navigation."""

    TITLE = "vCard Viewer"
    CSS = """
    Screen {
        layout: vertical;
    }
    #main-area {
        height: 1fr;
    }
    #search-bar {
        dock: bottom;
        display: none;
        height: 3;
        padding: 0 1;
    }
    #search-bar.visible {
        display: block;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("slash", "toggle_search", "Search", show=True),
        Binding("escape", "close_search", "Close search", show=False),
        Binding("j", "next_card", "Next", show=True),
        Binding("k", "prev_card", "Prev", show=True),
    ]

    def __init__(self, cards: list[Card], file_name: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self._cards = cards
        self._file_name = file_name
        self._all_titles = [(i, card_title(card, i)) for i, card in enumerate(cards)]

    def compose(self) -> ComposeResult:
        if self._file_name:
            self.title = f"vCard Viewer - {self._file_name}"

        yield Header()

        with Horizontal(id="main-area"):
            yield SummaryPanel(self._file_name or "-", self._cards, id="summary")
            yield CardList(self._all_titles, id="cards")
            yield PropertyPanel(id="properties")

        yield Input(placeholder="Search cards... (Escape to close)", id="search-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Auto-select first card on mount."""
        if self._cards:
            self._show(0)
            self.query_one("#cards", CardList).focus()

    def _show(self, index: int) -> None:
        self.query_one("#properties", PropertyPanel).show_card(index, self._cards[index])

    def on_card_list_card_selected(self, event: CardList.CardSelected) -> None:
        self._show(event.card_index)

    def action_next_card(self) -> None:
        self.query_one("#cards", CardList).action_cursor_down()

    def action_prev_card(self) -> None:
        self.query_one("#cards", CardList).action_cursor_up()

    async def action_toggle_search(self) -> None:
        """Show/hide the search bar."""
        search = self.query_one("#search-bar", Input)
        search.toggle_class("visible")
        if search.has_class("visible"):
            search.focus()
        else:
            await self.action_close_search()

    async def action_close_search(self) -> None:
        search = self.query_one("#search-bar", Input)
        search.remove_class("visible")
        search.value = ""
        await self._update_card_list(self._all_titles)
        self.query_one("#cards", CardList).focus()

    async def on_input_changed(self, event: Input.Changed) -> None:
        """Filter cards on any value as the user types."""
        if event.input.id != "search-bar":
            return
        query = event.value.lower().strip()
        if not query:
            await self._update_card_list(self._all_titles)
            return
        await self._update_card_list([
            (i, title) for i, title in self._all_titles
            if any(query in value.lower() for _, prop in self._cards[i] for value in prop.values)
        ])

    async def _update_card_list(self, titles: list[tuple[int, str]]) -> None:
        old = self.query_one("#cards", CardList)
        await old.remove()
        await self.query_one("#main-area", Horizontal).mount(
            CardList(titles, id="cards"), before="#properties"
        )
        if titles:
            self._show(titles[0][0])


def run_viewer(path: str | Path) -> None:
    """Launch the vCard TUI viewer."""
    path = Path(path)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        cards = VCardReader.read(path)
    except ParseError as e:
        print(f"Error: {path}: {e}", file=sys.stderr)
        sys.exit(1)

    app = VCardViewerApp(cards, file_name=path.name)
    app.run()
