from __future__ import annotations

from typing import Callable, Type, TypeVar

from flask import jsonify, request
from pydantic import BaseModel

from ..common.datetime_utils import parse_iso_date
from ..common.pagination import Page, PageParams
from ..common.serialization import to_dto

M = TypeVar("M", bound=BaseModel)


def parse_body(schema: Type[M]) -> M:
    """Validate the JSON body; pydantic errors are turned into 400 responses."""
    return schema.model_validate(request.get_json(silent=True) or {})


def page_params() -> PageParams:
    return PageParams.from_args(request.args)


def query_date(name: str):
    raw = request.args.get(name)
    return parse_iso_date(raw) if raw else None


def query_bool(name: str, default: bool = False) -> bool:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def paged(page: Page, mapper: Callable = to_dto):
    return jsonify({"data": [mapper(item) for item in page.items], "meta": page.meta()})


def ok(entity, mapper: Callable = to_dto, status: int = 200):
    return jsonify(mapper(entity)), status


def listed(items, mapper: Callable = to_dto):
    return jsonify({"data": [mapper(item) for item in items]})
