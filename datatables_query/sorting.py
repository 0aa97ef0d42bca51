"""
Ordering for datatables.
"""

from __future__ import annotations

import logging
from typing import Sequence

from django.db.models import F, QuerySet
from django.db.models.expressions import OrderBy

from .columns import ColumnRegistry, ResolvedColumn
from .request import OrderDirective

logger = logging.getLogger(__name__)


def sort_clause(column: ResolvedColumn, directive: OrderDirective) -> OrderBy:
    """Descending only for an exact ``"desc"``; anything else sorts ascending."""
    expression = F(column.lookup)
    return expression.desc() if directive.descending else expression.asc()


def apply_sort(
    queryset: QuerySet,
    registry: ColumnRegistry,
    directives: Sequence[OrderDirective],
) -> QuerySet:
    """Order by every directive, the first one being the primary key."""
    if not directives:
        return queryset

    clauses = []
    for directive in directives:
        column = registry.sortable_column(directive.column_index)
        logger.debug(
            "Ordering by %s %s",
            column.lookup,
            "DESC" if directive.descending else "ASC",
        )
        clauses.append(sort_clause(column, directive))
    return queryset.order_by(*clauses)
