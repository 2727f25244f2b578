# anonychat/domain/common/templates.py
from __future__ import annotations

from dataclasses import dataclass, field
from string import Formatter
from typing import FrozenSet


@dataclass(frozen=True)
class Template:
    """
    Reply text with a closed set of named fields.

    The placeholders are checked against `fields` when the template is built,
    and `render` refuses missing or unknown keys, so a typo in a reply shows
    up at import time instead of in a user's chat.
    """
    text: str
    fields: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        found = {name for _, name, _, _ in Formatter().parse(self.text) if name is not None}
        if "" in found:
            raise ValueError(f"positional placeholder in template: {self.text!r}")
        if found != set(self.fields):
            raise ValueError(f"template fields {sorted(self.fields)} do not match placeholders {sorted(found)}")

    def render(self, **values: object) -> str:
        keys = set(values)
        missing = self.fields - keys
        if missing:
            raise KeyError(f"missing template fields: {sorted(missing)}")
        unknown = keys - self.fields
        if unknown:
            raise KeyError(f"unknown template fields: {sorted(unknown)}")
        return self.text.format(**values)


def T(text: str, *fields: str) -> Template:
    return Template(text=text, fields=frozenset(fields))
