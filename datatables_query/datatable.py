"""
Datatable translation engine.

A ``Datatable`` turns one grid request into the payload a data-grid widget
expects::

    {"draw": 1, "recordsTotal": 25, "recordsFiltered": 3, "data": [...]}

Two hooks must be bound, either by subclassing or through the constructor:

* the raw record source (``get_raw_records`` / ``raw_records=``), returning
  the unfiltered queryset,
* the row serializer (``data`` / ``row_serializer=``).

Caller arguments such as the current user go in ``options``. They are stored
on ``self.options`` before any hook runs, so ``get_raw_records`` can scope the
queryset with them.

Example::

    class CustomerDatatable(Datatable):
        sortable_columns = ["name", "email", "country.name"]
        searchable_columns = ["name", "email", ["country", "region.name"]]

        def get_raw_records(self):
            return Customer.objects.filter(owner=self.options["user"])

        def data(self, records):
            return [{"name": c.name, "email": c.email} for c in records]

    CustomerDatatable(options={"user": request.user}).translate(request.GET)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Type

from django.db import models
from django.db.models import QuerySet

from .columns import ColumnRegistry
from .conditions import typecast_for
from .config import DatatablesSettings
from .exceptions import MethodNotImplementedError
from .pagination import apply_pagination, resolve_paginator
from .request import GridRequest
from .search import filter_records
from .sorting import apply_sort

logger = logging.getLogger(__name__)


class Datatable:
    """Translate grid requests against a Django queryset."""

    model: Optional[Type[models.Model]] = None
    sortable_columns: Sequence[Any] = ()
    searchable_columns: Sequence[Any] = ()
    db_adapter: Optional[str] = None
    paginator: Any = None

    def __init__(
        self,
        *,
        options: Optional[Mapping[str, Any]] = None,
        raw_records: Optional[Callable[[], QuerySet]] = None,
        row_serializer: Optional[Callable[[Any], Any]] = None,
        model: Optional[Type[models.Model]] = None,
        sortable_columns: Optional[Sequence[Any]] = None,
        searchable_columns: Optional[Sequence[Any]] = None,
        db_adapter: Optional[str] = None,
        paginator: Any = None,
        settings: Optional[DatatablesSettings] = None,
    ):
        self.options = dict(options or {})
        self._raw_records = raw_records
        self._row_serializer = row_serializer
        self._check_hooks()

        overrides = {
            "db_adapter": db_adapter or self.db_adapter,
            "paginator": paginator or self.paginator,
        }
        if settings is None:
            self.settings = DatatablesSettings.from_django(**overrides)
        else:
            self.settings = settings.with_overrides(**overrides)
        self.typecast = typecast_for(self.settings.db_adapter)
        self.paginator = resolve_paginator(self.settings.paginator)

        model = model or self.model or self.get_raw_records().model
        self.registry = ColumnRegistry(
            model,
            sortable_columns=(
                self.sortable_columns if sortable_columns is None else sortable_columns
            ),
            searchable_columns=(
                self.searchable_columns
                if searchable_columns is None
                else searchable_columns
            ),
        )
        logger.debug(
            "Datatable %s ready for %s (%s sortable, %s searchable)",
            type(self).__name__,
            model._meta.label,
            len(self.registry.sortable_columns()),
            len(self.registry.searchable_columns()),
        )

    def _check_hooks(self) -> None:
        cls = type(self)
        if self._raw_records is None and cls.get_raw_records is Datatable.get_raw_records:
            raise MethodNotImplementedError(hook="get_raw_records")
        if self._row_serializer is None and cls.data is Datatable.data:
            raise MethodNotImplementedError(hook="data")

    # Hooks

    def get_raw_records(self) -> QuerySet:
        if self._raw_records is None:
            raise MethodNotImplementedError(hook="get_raw_records")
        return self._raw_records()

    def data(self, records: Iterable[Any]) -> list[Any]:
        if self._row_serializer is None:
            raise MethodNotImplementedError(hook="data")
        return [self._row_serializer(record) for record in records]

    # Pipeline

    def sort_records(self, records: QuerySet, request: GridRequest) -> QuerySet:
        return apply_sort(records, self.registry, request.order)

    def filter_records(self, records: QuerySet, request: GridRequest) -> QuerySet:
        if not request.has_search:
            return records
        return filter_records(
            records, self.registry.searchable_columns(), request, self.typecast
        )

    def paginate_records(self, records: QuerySet, request: GridRequest) -> Any:
        return apply_pagination(
            records, request, self.paginator, self.settings.default_page_length
        )

    def fetch_records(self, raw_records: QuerySet, request: GridRequest) -> Any:
        records = self.registry.declare_joins(raw_records)
        if request.order:
            records = self.sort_records(records, request)
        records = self.filter_records(records, request)
        return self.paginate_records(records, request)

    def translate(self, params: Any) -> dict[str, Any]:
        request = GridRequest.from_params(params)
        raw_records = self.get_raw_records()

        records_total = raw_records.count()
        records_filtered = self.filter_records(
            self.registry.declare_joins(raw_records), request
        ).count()
        data = list(self.data(self.fetch_records(raw_records, request)))

        logger.debug(
            "Datatable %s draw=%s total=%s filtered=%s rows=%s",
            type(self).__name__,
            request.draw,
            records_total,
            records_filtered,
            len(data),
        )
        return {
            "draw": request.draw,
            "recordsTotal": records_total,
            "recordsFiltered": records_filtered,
            "data": data,
        }

    def as_json(self, params: Any) -> dict[str, Any]:
        return self.translate(params)
