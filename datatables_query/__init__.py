"""
django-datatables-query: translate data-grid requests into Django querysets.
"""

from .columns import ColumnRef, ColumnRegistry, ResolvedColumn, resolve_column
from .conditions import TextCast, search_condition
from .config import DatatablesSettings
from .datatable import Datatable
from .exceptions import (
    ColumnResolutionError,
    DatatableError,
    MethodNotImplementedError,
)
from .pagination import OffsetPaginator, PagePaginator, PageWindow
from .request import GridRequest, OrderDirective, parse_nested_params

__version__ = "0.1.0"

__all__ = [
    "ColumnRef",
    "ColumnRegistry",
    "ColumnResolutionError",
    "Datatable",
    "DatatableError",
    "DatatablesSettings",
    "GridRequest",
    "MethodNotImplementedError",
    "OffsetPaginator",
    "OrderDirective",
    "PagePaginator",
    "PageWindow",
    "ResolvedColumn",
    "TextCast",
    "parse_nested_params",
    "resolve_column",
    "search_condition",
]
