from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_dto(value)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(v) for v in value]
    return value


def to_dto(entity: Any, *, exclude: Iterable[str] = (), extra: dict | None = None) -> dict:
    """Project a dataclass entity to a camelCase, JSON-safe dict."""
    skip = set(exclude)
    out = {
        camel(f.name): to_jsonable(getattr(entity, f.name))
        for f in dataclasses.fields(entity)
        if f.name not in skip
    }
    for key, value in (extra or {}).items():
        out[camel(key)] = to_jsonable(value)
    return out
