"""
Pagination for datatables.

The grid sends a row offset (``start``) and a page size (``length``). The
window is derived through a page number, so ``start`` is rounded down to a
multiple of the page size: ``start=15, length=10`` reads rows 10-19.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from django.core.paginator import EmptyPage, Paginator
from django.db.models import QuerySet

from .exceptions import MethodNotImplementedError
from .request import GridRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageWindow:
    per_page: int
    page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @classmethod
    def from_request(cls, request: GridRequest, default_per_page: int) -> "PageWindow":
        per_page = request.per_page(default_per_page)
        return cls(per_page=per_page, page=request.start // per_page + 1)


class OffsetPaginator:
    """Slice the queryset: ``OFFSET offset LIMIT per_page``."""

    name = "offset"

    def paginate(self, queryset: QuerySet, window: PageWindow) -> QuerySet:
        return queryset[window.offset : window.offset + window.per_page]


class PagePaginator:
    """
    Use Django's ``Paginator``. Costs an extra count query per page.

    Unordered querysets are ordered by primary key so pages are stable.
    """

    name = "page"

    def paginate(self, queryset: QuerySet, window: PageWindow) -> Any:
        if isinstance(queryset, QuerySet) and not queryset.ordered:
            queryset = queryset.order_by("pk")
        paginator = Paginator(queryset, window.per_page)
        try:
            return paginator.page(window.page).object_list
        except EmptyPage:
            return queryset.none()


PAGINATORS = {
    OffsetPaginator.name: OffsetPaginator,
    PagePaginator.name: PagePaginator,
}


def resolve_paginator(value: Any) -> Any:
    """Return a paginator instance from a name, a class or an instance."""
    if not value:
        raise MethodNotImplementedError(
            "Please configure a pagination strategy.", hook="paginator"
        )
    if isinstance(value, str):
        try:
            return PAGINATORS[value.strip().lower()]()
        except KeyError:
            raise MethodNotImplementedError(
                f"Unknown pagination strategy '{value}'. "
                f"Expected one of: {', '.join(sorted(PAGINATORS))}.",
                hook="paginator",
            ) from None
    if isinstance(value, type):
        value = value()
    if not callable(getattr(value, "paginate", None)):
        raise MethodNotImplementedError(
            f"{value!r} does not implement paginate().", hook="paginator"
        )
    return value


def apply_pagination(
    queryset: QuerySet,
    request: GridRequest,
    paginator: Any,
    default_per_page: int,
) -> Any:
    if not request.paginate:
        return queryset
    window = PageWindow.from_request(request, default_per_page)
    logger.debug(
        "Paginating page %s (offset %s, limit %s)",
        window.page,
        window.offset,
        window.per_page,
    )
    return paginator.paginate(queryset, window)
