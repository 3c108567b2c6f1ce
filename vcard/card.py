"""
vCard Card - In-memory representation of a single vCard.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from vcard.spec import BEGIN, END, DEFAULT_FOLD_WIDTH, is_name, is_param_value


def _check_name(name: str, what: str) -> str:
    if not is_name(name):
        raise ValueError(
            f"Invalid {what}: {name!r}. "
            f"Only letters, digits and hyphens allowed."
        )
    return name.upper()


@dataclass
class Property:
    """One occurrence of a property: its group, parameters and values.

    The property name is not stored here; it is the key the occurrence is
    filed under in a Card.
    """
    values: list[str] = field(default_factory=lambda: [""])
    group: str = ""
    params: dict[str, list[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("A property needs at least one value (it may be empty)")
        self.values = list(self.values)
        if self.group:
            self.group = _check_name(self.group, "group")
        params = self.params
        self.params = {}
        for key, vals in params.items():
            self.set_param(key, *vals)

    def set_group(self, group: str) -> None:
        """Set the group. An empty string removes it."""
        self.group = _check_name(group, "group") if group else ""

    def param(self, name: str) -> list[str]:
        """Values of a parameter (case-insensitive), or [] if absent."""
        return self.params.get(name.upper(), [])

    def set_param(self, name: str, *values: str) -> None:
        name = _check_name(name, "parameter name")
        for v in values:
            if not is_param_value(v):
                raise ValueError(
                    f"Invalid value for parameter {name}: {v!r}. "
                    f"Double quotes and control characters are not allowed."
                )
        self.params[name] = list(values)

    def remove_param(self, name: str) -> None:
        self.params.pop(name.upper(), None)

    def set_values(self, *values: str) -> None:
        if not values:
            raise ValueError("A property needs at least one value (it may be empty)")
        self.values = list(values)

    @property
    def value(self) -> str:
        """Shortcut to the first value."""
        return self.values[0]


@dataclass
class Card:
    """
    In-memory representation of a vCard.

    Maps upper-cased property names to the occurrences of that property, in
    the order they were added.

    Usage:
        card = Card()
        card.add("VERSION", Property(["3.0"]))
        card.add("fn", Property(["Forrest Gump"]))
        card.add("tel", Property(["(111) 555-1212"], params={"type": ["WORK", "VOICE"]}))
        print(card)
    """

    properties: dict[str, list[Property]] = field(default_factory=dict)

    # Markers are written by the serializer, never stored
    _RESERVED_NAMES = frozenset({BEGIN, END})

    def __post_init__(self) -> None:
        properties = self.properties
        self.properties = {}
        for name, props in properties.items():
            for prop in props:
                self.add(name, prop)

    def add(self, name: str, prop: Property) -> Property:
        """Add an occurrence of a property. Returns it for chaining."""
        name = _check_name(name, "property name")
        if name in self._RESERVED_NAMES:
            raise ValueError(f"Reserved property name: {name!r}")
        self.properties.setdefault(name, []).append(prop)
        return prop

    def get(self, name: str) -> list[Property]:
        """All occurrences of a property (case-insensitive), in input order."""
        return list(self.properties.get(name.upper(), []))

    def value(self, name: str) -> str | None:
        """First value of the first occurrence, or None if the property is absent."""
        props = self.properties.get(name.upper())
        if props:
            return props[0].values[0]
        return None

    def remove(self, name: str) -> list[Property]:
        """Remove every occurrence of a property. Returns what was removed."""
        return self.properties.pop(name.upper(), [])

    @property
    def names(self) -> list[str]:
        return list(self.properties.keys())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.upper() in self.properties

    def __iter__(self) -> Iterator[tuple[str, Property]]:
        for name, props in self.properties.items():
            for prop in props:
                yield name, prop

    def __len__(self) -> int:
        return sum(len(props) for props in self.properties.values())

    def to_string(self, width: int = DEFAULT_FOLD_WIDTH) -> str:
        """Serialize this card to folded vCard text."""
        from vcard.writer import VCardWriter
        return VCardWriter.serialize(self, width=width)

    def unfolded_string(self) -> str:
        """Serialize without folding, using plain "\\n" line endings."""
        from vcard.writer import VCardWriter
        return VCardWriter.serialize_unfolded(self)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Card(names={self.names}, occurrences={len(self)})"
