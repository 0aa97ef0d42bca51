import pytest

from datatables_query.exceptions import MethodNotImplementedError
from datatables_query.pagination import (
    OffsetPaginator,
    PagePaginator,
    PageWindow,
    apply_pagination,
    resolve_paginator,
)
from datatables_query.request import GridRequest

pytestmark = pytest.mark.unit


def _window(start, length):
    return PageWindow.from_request(
        GridRequest.from_params({"start": start, "length": length}), 10
    )


@pytest.mark.parametrize(
    "start,length,page,offset",
    [
        (0, 10, 1, 0),
        (9, 10, 1, 0),
        (10, 10, 2, 10),
        (15, 10, 2, 10),
        (25, 10, 3, 20),
        (7, 5, 2, 5),
    ],
)
def test_offset_is_rounded_down_to_a_page(start, length, page, offset):
    window = _window(start, length)
    assert window.page == page
    assert window.offset == offset


def test_missing_length_uses_default_page_length():
    window = PageWindow.from_request(GridRequest.from_params({"start": "30"}), 10)
    assert window.per_page == 10
    assert window.offset == 30


def test_offset_paginator_slices():
    rows = list(range(25))
    assert OffsetPaginator().paginate(rows, _window(15, 10)) == list(range(10, 20))


def test_apply_pagination_skips_no_limit_requests():
    rows = list(range(25))
    request = GridRequest.from_params({"start": "10", "length": "-1"})
    assert apply_pagination(rows, request, OffsetPaginator(), 10) is rows


def test_apply_pagination_uses_window():
    rows = list(range(25))
    request = GridRequest.from_params({"start": "20", "length": "10"})
    assert apply_pagination(rows, request, OffsetPaginator(), 10) == [
        20, 21, 22, 23, 24
    ]


@pytest.mark.parametrize(
    "value,expected",
    [
        ("offset", OffsetPaginator),
        ("PAGE", PagePaginator),
        (PagePaginator, PagePaginator),
        (OffsetPaginator(), OffsetPaginator),
    ],
)
def test_resolve_paginator(value, expected):
    assert isinstance(resolve_paginator(value), expected)


@pytest.mark.parametrize("value", ["", None, "kaminari", object()])
def test_resolve_paginator_rejects_missing_strategies(value):
    with pytest.raises(MethodNotImplementedError) as exc_info:
        resolve_paginator(value)
    assert exc_info.value.hook == "paginator"
    assert isinstance(exc_info.value, NotImplementedError)
