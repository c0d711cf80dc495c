from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from enum import Enum

import pytest

from erp_system.common.datetime_utils import add_months, as_naive_utc, parse_iso_date, parse_iso_datetime
from erp_system.common.serialization import to_dto
from erp_system.common.validators import parse_enum, require_between, require_email, require_non_empty
from erp_system.core.exceptions import ValidationError
from erp_system.tenants.model import Tenant


class Color(str, Enum):
    RED = "RED"
    BLUE = "BLUE"


def test_require_non_empty_strips():
    assert require_non_empty("  abc ", "Name") == "abc"
    with pytest.raises(ValidationError, match="Name is required"):
        require_non_empty("   ", "Name")


def test_require_email_lowercases():
    assert require_email("John@Example.COM") == "john@example.com"
    with pytest.raises(ValidationError):
        require_email("not-an-email")


def test_require_between_bounds_are_inclusive():
    assert require_between(1, "Day", 1, 31) == 1
    assert require_between(31, "Day", 1, 31) == 31
    with pytest.raises(ValidationError):
        require_between(32, "Day", 1, 31)


def test_parse_enum_accepts_lowercase_and_members():
    assert parse_enum(Color, "red", "Color") is Color.RED
    assert parse_enum(Color, Color.BLUE, "Color") is Color.BLUE
    with pytest.raises(ValidationError, match="allowed: RED, BLUE"):
        parse_enum(Color, "green", "Color")


def test_parse_iso_helpers():
    assert parse_iso_date("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValidationError):
        parse_iso_date("29/02/2024")
    assert parse_iso_datetime("2024-01-01T12:00:00Z") == datetime(2024, 1, 1, 12, 0)


def test_as_naive_utc_converts_offsets():
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-3)))
    assert as_naive_utc(aware) == datetime(2024, 1, 1, 15, 0)


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
    assert add_months(date(2024, 1, 10), 1, day=31) == date(2024, 2, 29)


def test_to_dto_uses_camel_case_and_json_values():
    tenant = Tenant(id="t1", name="Acme", slug="acme", created_at=datetime(2024, 1, 1))
    dto = to_dto(tenant, exclude=("settings",), extra={"user_count": 3})
    assert dto["createdAt"] == "2024-01-01T00:00:00"
    assert dto["status"] == "ACTIVE"
    assert dto["userCount"] == 3
    assert "settings" not in dto
