from __future__ import annotations

import pytest

from erp_system.core.exceptions import ValidationError
from erp_system.rbac.permission_code import ROOT, PermissionCode


def test_parts_and_defaults():
    code = PermissionCode("hr.employees.read")
    assert (code.module, code.resource, code.action, code.scope) == ("hr", "employees", "read", None)

    short = PermissionCode("hr")
    assert short.resource == ROOT
    assert short.action == ROOT


@pytest.mark.parametrize("value", ["", "HR.employees", "a.b.c.d.e", "hr..read", "hr.emp loyees"])
def test_invalid_codes_are_rejected(value):
    assert not PermissionCode.is_valid(value)
    with pytest.raises(ValidationError):
        PermissionCode(value)


@pytest.mark.parametrize(
    "granted, requested, expected",
    [
        ("hr.employees.read", "hr.employees.read", True),
        ("hr.*.read", "hr.employees.read", True),
        ("*.*.*", "stock.items.delete", True),
        ("hr.employees.*", "hr.payroll.read", False),
        ("hr.employees", "hr.employees.read", False),
    ],
)
def test_wildcard_matching(granted, requested, expected):
    assert PermissionCode(granted).matches(requested) is expected


def test_from_parts_skips_missing_parts():
    assert PermissionCode.from_parts("sales", "orders").value == "sales.orders"
    assert PermissionCode.from_parts("sales", "orders", "create").is_wildcard is False
