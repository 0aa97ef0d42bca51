"""
Search predicates for datatable columns.

Every searchable column is cast to the database's text type before a
case-insensitive substring match, so numeric and date columns can be
searched with the same free-text term as character columns.
"""

from __future__ import annotations

from typing import Any

from django.core.exceptions import ImproperlyConfigured
from django.db import models
from django.db.models import F, Func, Q
from django.db.models.lookups import IContains

from .columns import ResolvedColumn

TYPECASTS: dict[str, str] = {
    "postgresql": "VARCHAR",
    "postgres": "VARCHAR",
    "postgis": "VARCHAR",
    "pg": "VARCHAR",
    "mysql": "CHAR",
    "mysql2": "CHAR",
    "sqlite": "TEXT",
    "sqlite3": "TEXT",
}


def typecast_for(db_adapter: Any) -> str:
    """Return the text type a column is cast to for ``db_adapter``."""
    key = str(db_adapter or "").strip().lower()
    try:
        return TYPECASTS[key]
    except KeyError:
        raise ImproperlyConfigured(
            f"Unsupported db_adapter '{db_adapter}'. "
            f"Expected one of: {', '.join(sorted(TYPECASTS))}."
        ) from None


class TextCast(Func):
    """``CAST(<expression> AS <db_type>)`` with an explicit SQL type name."""

    function = "CAST"
    template = "%(function)s(%(expressions)s AS %(db_type)s)"

    def __init__(self, expression: Any, db_type: str, **extra: Any):
        super().__init__(
            expression, output_field=models.TextField(), db_type=db_type, **extra
        )


def search_condition(column: ResolvedColumn, value: str, typecast: str) -> Q:
    """Match ``value`` anywhere in ``column`` cast to ``typecast``, ignoring case."""
    return Q(IContains(TextCast(F(column.lookup), typecast), value))
