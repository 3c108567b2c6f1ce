"""
TUI Tests - Drive the viewer headless through textual's test pilot.
"""

import asyncio

from textual.widgets import ListItem

from vcard.card import Card, Property
from vcard.tui.viewer import VCardViewerApp
from vcard.tui.widgets import CardList, PropertyPanel, card_title


def _cards() -> list[Card]:
    cards = []
    for fn, org in [("Forrest Gump", "Bubba Gump Shrimp Co."), ("Jenny Curran", ""), ("", "Acme")]:
        card = Card()
        card.add("VERSION", Property(["3.0"]))
        if fn:
            card.add("FN", Property([fn]))
        if org:
            card.add("ORG", Property([org]))
        cards.append(card)
    return cards


class TestCardTitle:

    def test_prefers_fn(self):
        assert card_title(_cards()[0], 0) == "Forrest Gump"

    def test_falls_back_to_org(self):
        assert card_title(_cards()[2], 2) == "Acme"

    def test_structured_name(self):
        card = Card()
        card.add("N", Property(["Gump\\;Forrest;;;"]))
        assert card_title(card, 0) == "Gump;Forrest"

    def test_falls_back_to_position(self):
        assert card_title(Card(), 4) == "card 5"


class TestViewer:

    def test_lists_every_card(self):
        async def run():
            app = VCardViewerApp(_cards(), file_name="contacts.vcf")
            async with app.run_test() as pilot:
                await pilot.pause()
                card_list = app.query_one("#cards", CardList)
                assert len(card_list.query(ListItem)) == 3
                panel = app.query_one("#properties", PropertyPanel)
                assert panel.current_card == 0

        asyncio.run(run())

    def test_navigation(self):
        async def run():
            app = VCardViewerApp(_cards())
            async with app.run_test() as pilot:
                await pilot.pause()
                await pilot.press("j")
                await pilot.pause()
                assert app.query_one("#properties", PropertyPanel).current_card == 1
                await pilot.press("k")
                await pilot.pause()
                assert app.query_one("#properties", PropertyPanel).current_card == 0

        asyncio.run(run())

    def test_search_filters_cards(self):
        async def run():
            app = VCardViewerApp(_cards())
            async with app.run_test() as pilot:
                await pilot.pause()
                await pilot.press("slash")
                for ch in "jenny":
                    await pilot.press(ch)
                await pilot.pause()
                assert len(app.query_one("#cards", CardList).query(ListItem)) == 1
                assert app.query_one("#properties", PropertyPanel).current_card == 1

                await app.action_close_search()
                await pilot.pause()
                assert len(app.query_one("#cards", CardList).query(ListItem)) == 3

        asyncio.run(run())

    def test_empty_file(self):
        async def run():
            app = VCardViewerApp([])
            async with app.run_test() as pilot:
                await pilot.pause()
                assert len(app.query_one("#cards", CardList).query(ListItem)) == 0

        asyncio.run(run())
