"""Read-only vocabulary bank with randomized selection."""

from __future__ import annotations

import json
import random
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence

from vocab_drill.core import config as core_config

from .errors import BankLoadError, EmptyCategory, InsufficientPool
from .models import VocabularyItem

__all__ = [
    "STARTER_BANK",
    "QuestionBank",
    "load_bank",
    "load_starter_bank",
]

STARTER_BANK = "starter_bank.toml"
_BANK_SUFFIXES = (".toml", ".json")


class QuestionBank:
    """Categorized vocabulary items supplied by a loader.

    The bank trusts its loader that items are unique within a category and
    never mutates them. ``rng`` can be injected for deterministic tests.
    """

    def __init__(
        self,
        categories: Mapping[str, Sequence[VocabularyItem]],
        *,
        display_names: Optional[Mapping[str, str]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._items = MappingProxyType(
            {name: tuple(items) for name, items in categories.items()}
        )
        self._display = dict(display_names or {})
        self._rng = rng or random.Random()

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        rng: Optional[random.Random] = None,
    ) -> "QuestionBank":
        """Build a bank from parsed TOML/JSON data.

        Accepts either ``{"categories": {...}}`` or the category table on its
        own. Each category is a list of item tables or a table with optional
        ``display`` and an ``items`` list.
        """

        table = data.get("categories", data)
        if not isinstance(table, Mapping):
            raise BankLoadError("'categories' must be a table of categories.")
        categories: dict[str, tuple[VocabularyItem, ...]] = {}
        display: dict[str, str] = {}
        for name, section in table.items():
            category = str(name).strip()
            if not category:
                raise BankLoadError("Category names must be non-empty.")
            if isinstance(section, Mapping):
                label = section.get("display")
                if label is not None:
                    display[category] = str(label)
                raw_items = section.get("items", [])
            else:
                raw_items = section
            categories[category] = tuple(_iter_items(category, raw_items))
        return cls(categories, display_names=display, rng=rng)

    def categories(self) -> tuple[str, ...]:
        return tuple(self._items)

    def display_name(self, category: str) -> str:
        return self._display.get(category, category.replace("_", " ").title())

    def items_for(self, category: str) -> tuple[VocabularyItem, ...]:
        return self._items.get(category, ())

    def size(self, category: str) -> int:
        return len(self.items_for(category))

    def select_questions(
        self, category: str, count: int
    ) -> list[VocabularyItem]:
        """Return ``min(count, size)`` distinct items in uniform random order.

        Asking for more items than the category holds returns the whole
        category, never padded.
        """

        if count < 1:
            raise ValueError("count must be at least 1.")
        items = self.items_for(category)
        if not items:
            raise EmptyCategory(category)
        shuffled = list(items)
        self._rng.shuffle(shuffled)
        return shuffled[:count]

    def request_distractors(
        self,
        correct_item: VocabularyItem,
        pool: Iterable[VocabularyItem],
        n: int,
    ) -> list[VocabularyItem]:
        """Return ``correct_item`` plus ``n - 1`` other items, shuffled.

        Items are deduplicated by identity, not by reading.
        """

        if n < 1:
            raise ValueError("n must be at least 1.")
        others = [
            item
            for item in dict.fromkeys(pool)
            if item is not correct_item
        ]
        available = len(others) + 1
        if available < n:
            raise InsufficientPool(n, available)
        options = [correct_item, *self._rng.sample(others, n - 1)]
        self._rng.shuffle(options)
        return options


def load_bank(
    path: Path, *, rng: Optional[random.Random] = None
) -> QuestionBank:
    """Load a bank from a ``.toml`` or ``.json`` file."""

    suffix = path.suffix.lower()
    if suffix not in _BANK_SUFFIXES:
        raise BankLoadError(
            f"Unsupported bank format '{path.suffix}'. "
            f"Expected one of: {', '.join(_BANK_SUFFIXES)}."
        )
    if suffix == ".toml":
        try:
            data = core_config.load_toml(path)
        except core_config.TomlConfigError as exc:
            raise BankLoadError(str(exc)) from exc
    else:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise BankLoadError(f"File not found: {path}") from exc
        except json.JSONDecodeError as exc:
            raise BankLoadError(
                f"Failed to parse JSON in {path}: {exc}"
            ) from exc
    if not isinstance(data, Mapping):
        raise BankLoadError(f"Bank file {path} must contain a table.")
    return QuestionBank.from_mapping(data, rng=rng)


def load_starter_bank(*, rng: Optional[random.Random] = None) -> QuestionBank:
    """Load the bank packaged with vocab-drill."""

    resource = resources.files("vocab_drill.quiz").joinpath(STARTER_BANK)
    with resources.as_file(resource) as path:
        return load_bank(path, rng=rng)


def _iter_items(
    category: str, raw_items: object
) -> Iterable[VocabularyItem]:
    if not isinstance(raw_items, Sequence) or isinstance(
        raw_items, (str, bytes)
    ):
        raise BankLoadError(f"Category '{category}' items must be a list.")
    for position, raw in enumerate(raw_items):
        if not isinstance(raw, Mapping):
            raise BankLoadError(
                f"Item {position} in '{category}' must be a table."
            )
        fields = {}
        for key in ("word", "reading", "meaning"):
            value = raw.get(key)
            if not isinstance(value, str) or not value.strip():
                raise BankLoadError(
                    f"Item {position} in '{category}' needs a non-empty "
                    f"'{key}'."
                )
            fields[key] = value.strip()
        romaji = raw.get("romaji")
        if romaji is not None and not isinstance(romaji, str):
            raise BankLoadError(
                f"Item {position} in '{category}' has a non-string 'romaji'."
            )
        yield VocabularyItem(
            category=category,
            romaji=romaji.strip() if romaji else None,
            **fields,
        )
