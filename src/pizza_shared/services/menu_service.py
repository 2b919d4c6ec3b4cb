"""
Menu catalog.

The menu is immutable for the lifetime of the process: it is read once from
a JSON document at startup and shared by every request.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..serializers import money

logger = logging.getLogger(__name__)


class MenuItemSchema(BaseModel):
    id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=120)
    image: str = ""
    price: Decimal = Field(..., ge=0)
    description: str = ""


@dataclass(frozen=True)
class MenuItem:
    id: int
    title: str
    image: str
    price: Decimal
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "image": self.image,
            "price": money(self.price),
            "description": self.description,
        }


class MenuLoadError(RuntimeError):
    """Raised when the menu document is missing or malformed."""


class Menu:
    """Read-only collection of menu items, in document order."""

    def __init__(self, items: list[MenuItem]):
        by_id: dict[int, MenuItem] = {}
        for item in items:
            if item.id in by_id:
                raise MenuLoadError(f"Duplicate menu id {item.id}")
            by_id[item.id] = item
        self._items = tuple(items)
        self._by_id = by_id

    @classmethod
    def load(cls, path: str | Path) -> Menu:
        """Load and validate the menu document at ``path``."""
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise MenuLoadError(f"Unable to read menu from {path}: {exc}")
        return cls.from_list(raw)

    @classmethod
    def from_list(cls, raw: Any) -> Menu:
        try:
            parsed = TypeAdapter(list[MenuItemSchema]).validate_python(raw)
        except ValidationError as exc:
            raise MenuLoadError(f"Invalid menu document: {exc}")
        menu = cls([MenuItem(**entry.model_dump()) for entry in parsed])
        logger.info(f"Loaded menu with {len(menu)} items")
        return menu

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def get(self, menu_id: int) -> MenuItem | None:
        return self._by_id.get(menu_id)


def list_menu(menu: Menu) -> list[dict[str, Any]]:
    return [item.to_dict() for item in menu]
