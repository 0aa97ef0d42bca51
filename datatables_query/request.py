"""
Grid request parsing.

Data-grid widgets send their state either as flat bracket-notation query
parameters (``order[0][column]=0&search[value]=ann``) or as a nested JSON
body. Both are normalized into an immutable ``GridRequest``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from .defaults import LIBRARY_DEFAULTS, NO_LIMIT
from .utils import coerce_int, is_blank

_KEY_PART = re.compile(r"\[([^\]]*)\]")


def parse_nested_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """
    Expand bracket-notation keys into nested dictionaries.

    ``{"order[0][dir]": "asc"}`` becomes ``{"order": {"0": {"dir": "asc"}}}``.
    Keys without brackets are copied as they are, so already nested payloads
    pass through unchanged. Works with ``QueryDict`` (last value wins).
    """

    nested: dict[str, Any] = {}
    for key, value in params.items():
        key = str(key)
        head, bracket, rest = key.partition("[")
        if not bracket:
            nested[key] = value
            continue

        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            value = value[-1] if value else ""

        parts = [head] + _KEY_PART.findall(bracket + rest)
        current = nested
        for part in parts[:-1]:
            child = current.get(part)
            if not isinstance(child, dict):
                child = {}
                current[part] = child
            current = child
        current[parts[-1]] = value
    return nested


def _present(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (Mapping, list, tuple)):
        return bool(value)
    return True


def _iter_entries(value: Any) -> Iterator[tuple[Any, Any]]:
    """Yield ``(key, item)`` pairs from an index-keyed mapping or a list."""
    if isinstance(value, Mapping):
        yield from value.items()
    elif isinstance(value, (list, tuple)):
        yield from enumerate(value)


@dataclass(frozen=True)
class OrderDirective:
    """One sort instruction: grid column index plus direction."""

    column_index: int
    direction: str = ""

    @property
    def descending(self) -> bool:
        return self.direction == "desc"

    @classmethod
    def from_params(cls, item: Any) -> "OrderDirective":
        if not isinstance(item, Mapping):
            item = {}
        direction = item.get("dir")
        return cls(
            column_index=coerce_int(item.get("column")),
            direction="" if direction is None else str(direction),
        )


@dataclass(frozen=True)
class GridRequest:
    """Parameters of one grid page request."""

    draw: int = 0
    start: int = 0
    length: Any = None
    order: tuple[OrderDirective, ...] = ()
    has_search: bool = False
    search_value: Optional[str] = None
    column_search_values: Mapping[int, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def paginate(self) -> bool:
        """False when ``length`` carries the "no limit" sentinel."""
        if self.length is None:
            return True
        return str(self.length).strip() != NO_LIMIT

    def per_page(self, default: int = LIBRARY_DEFAULTS["default_page_length"]) -> int:
        value = coerce_int(self.length, default=default)
        return value if value > 0 else default

    def column_search_value(self, index: int) -> Optional[str]:
        return self.column_search_values.get(index)

    @classmethod
    def from_params(cls, params: Any) -> "GridRequest":
        if isinstance(params, GridRequest):
            return params

        data = parse_nested_params(params or {})

        search = data.get("search")
        if isinstance(search, Mapping):
            search_value = search.get("value")
        else:
            search_value = search
        if search_value is not None and not isinstance(search_value, str):
            search_value = str(search_value)

        order = tuple(
            OrderDirective.from_params(item)
            for _, item in _iter_entries(data.get("order"))
        )

        column_values: dict[int, str] = {}
        for key, column in _iter_entries(data.get("columns")):
            index = coerce_int(key, default=-1)
            if index < 0 or not isinstance(column, Mapping):
                continue
            column_search = column.get("search")
            if not isinstance(column_search, Mapping):
                continue
            value = column_search.get("value")
            if is_blank(value):
                continue
            column_values[index] = str(value)

        return cls(
            draw=coerce_int(data.get("draw")),
            start=max(coerce_int(data.get("start")), 0),
            length=data.get("length"),
            order=order,
            has_search=_present(search),
            search_value=search_value,
            column_search_values=MappingProxyType(column_values),
        )
