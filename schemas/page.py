"""
One page of items returned by the remote source
"""

from typing import Any, List, Optional
from pydantic import BaseModel, Field

# The provider contract is not pinned down; both envelope spellings are seen.
ITEM_KEYS = ("items", "data")
TOTAL_PAGES_KEYS = ("total_pages", "totalPages")


class PageFormatError(ValueError):
    """The response body is not a page envelope."""


class Page(BaseModel):
    """Transient page: raw items plus an optional total page count hint."""

    items: List[Any] = Field(default_factory=list)
    total_pages: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not self.items

    @classmethod
    def from_payload(cls, data: Any) -> "Page":
        """
        Read a decoded JSON body.

        Items come from the first non-null of "items"/"data"; total pages
        from "total_pages"/"totalPages". An unusable total hint is dropped.

        Raises:
            PageFormatError: If the body is not an object or items is not a list
        """
        if not isinstance(data, dict):
            raise PageFormatError(f"expected a JSON object, got {type(data).__name__}")

        items = _first_present(data, ITEM_KEYS)
        if items is None:
            items = []
        if not isinstance(items, list):
            raise PageFormatError(f"items must be a list, got {type(items).__name__}")

        return cls(items=items, total_pages=_parse_total(_first_present(data, TOTAL_PAGES_KEYS)))


def _first_present(data: dict, keys) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _parse_total(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        total = int(value)
    except (TypeError, ValueError):
        return None
    return total if total >= 0 else None
