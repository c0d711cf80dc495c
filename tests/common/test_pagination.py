from __future__ import annotations

import pytest

from erp_system.common.pagination import Page, PageParams, paginate
from erp_system.core.exceptions import ValidationError


def test_page_params_defaults_and_offset():
    params = PageParams.from_args({})
    assert (params.page, params.limit) == (1, 20)

    params = PageParams.from_args({"page": "3", "limit": "10"})
    assert params.offset == 20


@pytest.mark.parametrize("args", [{"page": "0"}, {"limit": "101"}, {"limit": "0"}, {"page": "abc"}])
def test_page_params_rejects_out_of_range_values(args):
    with pytest.raises(ValidationError):
        PageParams.from_args(args)


@pytest.mark.parametrize("kwargs", [{"page": True}, {"limit": True}, {"page": 1.0}])
def test_page_params_require_real_integers(kwargs):
    with pytest.raises(ValidationError):
        PageParams(**kwargs)


def test_page_meta_reports_navigation():
    page = Page(items=[1, 2], total=5, params=PageParams(page=2, limit=2))
    assert page.meta() == {
        "total": 5,
        "page": 2,
        "limit": 2,
        "pages": 3,
        "hasNext": True,
        "hasPrevious": True,
    }


def test_empty_page_has_no_pages():
    page = Page(items=[], total=0, params=PageParams())
    assert page.pages == 0
    assert page.has_next is False
    assert page.has_previous is False


def test_paginate_slices_sequence():
    items, total = paginate(list(range(25)), PageParams(page=3, limit=10))
    assert items == [20, 21, 22, 23, 24]
    assert total == 25
