"""
Free-text and per-column search for datatables.

Free-text search splits the global search value into words. A row matches
when every word is found in at least one searchable column. Per-column
search matches each column against its own value and requires all of them.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from django.db.models import Q, QuerySet

from .columns import ResolvedColumn
from .conditions import search_condition
from .request import GridRequest
from .utils import combine_q, is_blank

logger = logging.getLogger(__name__)


def build_conditions_for(
    columns: Sequence[ResolvedColumn], query: str, typecast: str
) -> Optional[Q]:
    """AND over the words of ``query`` of the OR over ``columns``."""
    criteria = [
        combine_q([search_condition(column, word, typecast) for column in columns], op="or")
        for word in query.split()
    ]
    return combine_q(criteria, op="and")


def aggregate_query(
    columns: Sequence[ResolvedColumn], request: GridRequest, typecast: str
) -> Optional[Q]:
    """AND of each searchable column matched against its own search value."""
    conditions = []
    for index, column in enumerate(columns):
        value = request.column_search_value(index)
        if is_blank(value):
            continue
        conditions.append(search_condition(column, value, typecast))
    return combine_q(conditions, op="and")


def simple_search(
    queryset: QuerySet,
    columns: Sequence[ResolvedColumn],
    request: GridRequest,
    typecast: str,
) -> QuerySet:
    if not request.has_search or is_blank(request.search_value):
        return queryset
    conditions = build_conditions_for(columns, request.search_value, typecast)
    if conditions is None:
        return queryset
    logger.debug("Applying free-text search %r", request.search_value)
    return queryset.filter(conditions)


def composite_search(
    queryset: QuerySet,
    columns: Sequence[ResolvedColumn],
    request: GridRequest,
    typecast: str,
) -> QuerySet:
    conditions = aggregate_query(columns, request, typecast)
    if conditions is None:
        return queryset
    logger.debug(
        "Applying column search on %s", sorted(request.column_search_values)
    )
    return queryset.filter(conditions)


def filter_records(
    queryset: QuerySet,
    columns: Sequence[ResolvedColumn],
    request: GridRequest,
    typecast: str,
) -> QuerySet:
    queryset = simple_search(queryset, columns, request, typecast)
    return composite_search(queryset, columns, request, typecast)
