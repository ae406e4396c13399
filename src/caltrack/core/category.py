"""Event categories and matching."""

import re
from dataclasses import dataclass, field

UNCATEGORIZED = ""


@dataclass(frozen=True)
class Category:
    """A named category recognized by an ordered set of patterns."""

    name: str
    patterns: tuple[re.Pattern, ...] = field(default_factory=tuple)

    def recognizes(self, text: str) -> bool:
        """True if any pattern matches the text."""
        return any(pattern.search(text) for pattern in self.patterns)


def match_category(text: str, categories: list[Category]) -> Category | None:
    """Return the first category recognizing the text, or None."""
    for category in categories:
        if category.recognizes(text):
            return category
    return None
