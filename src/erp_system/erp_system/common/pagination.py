from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, Optional, Sequence, Tuple, TypeVar

from ..core.constants import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT
from ..core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PageParams:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    def __post_init__(self):
        if not isinstance(self.page, int) or isinstance(self.page, bool) or self.page < 1:
            raise ValidationError("page must be an integer >= 1")
        if not isinstance(self.limit, int) or isinstance(self.limit, bool) or not 1 <= self.limit <= MAX_LIMIT:
            raise ValidationError(f"limit must be an integer between 1 and {MAX_LIMIT}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "PageParams":
        return cls(
            page=_parse_int(args.get("page"), "page", DEFAULT_PAGE),
            limit=_parse_int(args.get("limit"), "limit", DEFAULT_LIMIT),
        )


def _parse_int(raw: Optional[Any], name: str, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    total: int
    params: PageParams = field(default_factory=PageParams)

    @property
    def page(self) -> int:
        return self.params.page

    @property
    def limit(self) -> int:
        return self.params.limit

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def meta(self) -> dict:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "pages": self.pages,
            "hasNext": self.has_next,
            "hasPrevious": self.has_previous,
        }


def paginate(items: Sequence[T], params: PageParams) -> Tuple[List[T], int]:
    """Slice an in-memory sequence; returns (page_items, total)."""
    total = len(items)
    return list(items[params.offset : params.offset + params.limit]), total
