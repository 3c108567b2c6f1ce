"""
vCard Converters - Convert cards to and from JSON.

Layout:
    [                                   <- one entry per card
      [                                 <- one entry per property, in card order
        {"name": "TEL", "group": "", "params": {"TYPE": ["WORK"]}, "values": ["555"]}
      ]
    ]
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from vcard.card import Card, Property


def to_json(cards: Iterable[Card], indent: int = 2) -> str:
    """Convert cards to a JSON string."""
    data: list[list[dict[str, Any]]] = []
    for card in cards:
        data.append([
            {
                "name": name,
                "group": prop.group,
                "params": prop.params,
                "values": prop.values,
            }
            for name, prop in card
        ])
    return json.dumps(data, indent=indent, ensure_ascii=False)


def _string_list(value: Any, what: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Invalid vCard JSON: {what} must be an array of strings")
    return value


def from_json(json_str: str) -> list[Card]:
    """Create cards from a JSON string.

    Validates the structure so that malformed input fails here rather than
    producing cards the writer cannot express.
    """
    data = json.loads(json_str)
    if not isinstance(data, list):
        raise ValueError("Invalid vCard JSON: expected an array of cards at top level")

    cards: list[Card] = []
    for entry in data:
        if not isinstance(entry, list):
            raise ValueError("Invalid vCard JSON: each card must be an array of properties")
        card = Card()
        for item in entry:
            if not isinstance(item, dict):
                raise ValueError("Invalid vCard JSON: each property must be an object")
            name = item.get("name")
            if not isinstance(name, str):
                raise ValueError("Invalid vCard JSON: property 'name' must be a string")
            group = item.get("group", "")
            if not isinstance(group, str):
                raise ValueError("Invalid vCard JSON: property 'group' must be a string")
            params = item.get("params", {})
            if not isinstance(params, dict):
                raise ValueError("Invalid vCard JSON: property 'params' must be an object")
            values = _string_list(item.get("values", [""]), "property 'values'")
            prop = Property(
                values,
                group=group,
                params={k: _string_list(v, f"parameter {k!r}") for k, v in params.items()},
            )
            card.add(name, prop)
        cards.append(card)
    return cards
