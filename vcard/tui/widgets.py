"""vcard TUI Widgets - Custom panels for the vCard viewer."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Label, ListItem, ListView, Static

from vcard.card import Card


def card_title(card: Card, index: int) -> str:
    """Display name for a card: the first non-empty naming property, else its position."""
    for name in ("FN", "N", "ORG", "EMAIL"):
        value = card.value(name)
        if value and value.strip(" ;"):
            return value.replace("\\;", ";").strip(" ;")
    return f"card {index + 1}"


class SummaryPanel(Static):
    """Sidebar panel showing file-level information."""

    DEFAULT_CSS = """
    SummaryPanel {
        width: 28;
        border: solid $accent;
        padding: 1;
    }
    SummaryPanel .summary-title {
        text-style: bold;
        margin-bottom: 1;
    }
    SummaryPanel .summary-key {
        color: $text-muted;
    }
    """

    def __init__(self, file_name: str, cards: list[Card], **kwargs) -> None:
        super().__init__(**kwargs)
        self._file_name = file_name
        self._cards = cards

    def compose(self) -> ComposeResult:
        yield Label(Text(self._file_name), classes="summary-title")
        yield Label("cards:", classes="summary-key")
        yield Label(f"  {len(self._cards)}")
        versions = sorted({card.value("VERSION") or "?" for card in self._cards})
        yield Label("versions:", classes="summary-key")
        yield Label(Text(f"  {', '.join(versions) if versions else '-'}"))
        yield Label("properties:", classes="summary-key")
        yield Label(f"  {sum(len(card) for card in self._cards)}")


class CardList(ListView):
    """List of cards in the file. Supports keyboard navigation."""

    DEFAULT_CSS = """
    CardList {
        width: 32;
        border: solid $accent;
    }
    CardList > ListItem {
        padding: 0 1;
    }
    CardList > ListItem.--highlight {
        background: $accent;
    }
    """

    class CardSelected(Message):
        """Fired when a card is selected."""

        def __init__(self, card_index: int) -> None:
            self.card_index = card_index
            super().__init__()

    def __init__(self, titles: list[tuple[int, str]], **kwargs) -> None:
        # (index into the full card list, title)
        self._titles = titles
        super().__init__(**kwargs)

    def compose(self) -> ComposeResult:
        for _, title in self._titles:
            yield ListItem(Label(Text(title)))

    def _post_selected(self) -> None:
        idx = self.index or 0
        if 0 <= idx < len(self._titles):
            self.post_message(self.CardSelected(self._titles[idx][0]))

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        self._post_selected()

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        self._post_selected()


class PropertyPanel(Static):
    """Shows every property of the selected card as an unfolded line."""

    DEFAULT_CSS = """
    PropertyPanel {
        border: solid $accent;
        padding: 1;
        overflow: auto;
    }
    PropertyPanel .property-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }
    """

    current_card = reactive(-1)

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._title_widget: Label | None = None
        self._body_widget: Static | None = None

    def compose(self) -> ComposeResult:
        self._title_widget = Label("Select a card", classes="property-title")
        self._body_widget = Static("")
        yield self._title_widget
        yield self._body_widget

    def show_card(self, index: int, card: Card) -> None:
        self.current_card = index
        if self._title_widget:
            self._title_widget.update(Text(f"--- {card_title(card, index)} ---"))
        if self._body_widget:
            lines = card.unfolded_string().splitlines()
            # Drop the BEGIN/END markers
            self._body_widget.update(Text("\n".join(lines[1:-1])))
        self.scroll_home()
