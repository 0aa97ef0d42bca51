"""
Column registry for datatables.

Sortable and searchable column declarations are resolved against the root
model once, when the registry is built. A declaration is one of:

* a bare field lookup on the root model: ``"name"`` or ``"customer__name"``
* a dotted ``"table.column"`` reference: the table is the root model or a
  model one relation away from it
* a join path: ``["customer", "country.name"]``. Tables are walked from the
  root model in list order and the last element carries the column.

Join paths are declared on the queryset as a ``FilteredRelation`` under a
synthetic alias built from the canonically sorted table names, so the same
set of tables always maps to the same join.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Type

import inflect
from django.apps import apps
from django.core.exceptions import FieldDoesNotExist
from django.db import models
from django.db.models import FilteredRelation, QuerySet
from django.db.models.constants import LOOKUP_SEP

from .exceptions import ColumnResolutionError

logger = logging.getLogger(__name__)

_inflect = inflect.engine()
_NON_WORD = re.compile(r"\W+")


def singularize(word: str) -> str:
    if not word:
        return word
    return _inflect.singular_noun(word) or word


def _is_plural(word: str) -> bool:
    singular = _inflect.singular_noun(word)
    return bool(singular) and _inflect.plural_noun(singular) == word


def pluralize(word: str) -> str:
    """Plural form of ``word``; words that are already plural are kept."""
    if not word or _is_plural(word):
        return word
    return _inflect.plural_noun(word)


def _normalize(name: str) -> str:
    return re.sub(r"[\W_]+", "", name).lower()


def synthetic_alias(tables: Sequence[str]) -> str:
    """
    Build the join alias for a set of tables.

    Names are pluralized before they are sorted, so ``["customer", "country"]``,
    ``["country", "customer"]`` and ``["countries", "customers"]`` all give
    ``"countries_customers"``.
    """
    return "_".join(
        sorted(_NON_WORD.sub("_", pluralize(table.strip().lower())) for table in tables)
    )


@dataclass(frozen=True)
class ColumnRef:
    """A parsed, not yet resolved, column declaration."""

    column: str
    table: Optional[str] = None
    join_tables: tuple[str, ...] = ()

    @property
    def is_join_path(self) -> bool:
        return bool(self.join_tables)

    @classmethod
    def parse(cls, raw: Any) -> "ColumnRef":
        if isinstance(raw, ColumnRef):
            return raw

        if isinstance(raw, str):
            table, dot, column = raw.strip().rpartition(".")
            if not dot:
                return cls(column=column)
            if not table or not column:
                raise ColumnResolutionError(
                    f"Invalid column reference '{raw}'.", reference=raw
                )
            return cls(column=column, table=table)

        if isinstance(raw, (list, tuple)) and raw:
            parts = [str(part).strip() for part in raw]
            dotted = [part for part in parts if "." in part]
            if len(dotted) != 1 or "." not in parts[-1]:
                raise ColumnResolutionError(
                    "A join path needs exactly one 'table.column' element, "
                    f"placed last: {list(raw)!r}.",
                    reference=raw,
                )
            table, _, column = parts[-1].rpartition(".")
            if not table or not column or not all(parts[:-1]):
                raise ColumnResolutionError(
                    f"Invalid join path {list(raw)!r}.", reference=raw
                )
            return cls(
                column=column,
                table=table,
                join_tables=tuple(parts[:-1]) + (table,),
            )

        raise ColumnResolutionError(
            f"Unsupported column reference {raw!r}.", reference=raw
        )


@dataclass(frozen=True)
class ResolvedColumn:
    """A column declaration bound to a concrete model field."""

    ref: ColumnRef
    model: Type[models.Model]
    field: models.Field
    lookup: str
    table_alias: Optional[str] = None
    relation_path: Optional[str] = None


def _model_label(model: Type[models.Model]) -> str:
    return model._meta.label


def resolve_model(table: str, root_model: Type[models.Model]) -> Type[models.Model]:
    """
    Map a table name to a model.

    An exact ``db_table`` match wins. Otherwise the name, stripped of non-word
    characters, is compared to the singular and plural names of each model,
    and only then is its singular form compared to ``_meta.model_name``.
    """
    name = table.strip()
    all_models = apps.get_models()

    candidates = [m for m in all_models if m._meta.db_table == name]
    if not candidates:
        normalized = _normalize(name)
        candidates = [
            m
            for m in all_models
            if normalized
            in (
                m._meta.model_name,
                _normalize(str(m._meta.verbose_name_plural)),
                pluralize(m._meta.model_name),
            )
        ]
    if not candidates:
        model_name = _normalize(singularize(name))
        candidates = [m for m in all_models if m._meta.model_name == model_name]

    if len(candidates) > 1:
        same_app = [
            m for m in candidates if m._meta.app_label == root_model._meta.app_label
        ]
        if same_app:
            candidates = same_app

    if len(candidates) != 1:
        reason = "is ambiguous" if candidates else "does not match any model"
        raise ColumnResolutionError(
            f"Table '{table}' {reason}.",
            model_name=_model_label(root_model),
            reference=table,
        )
    return candidates[0]


def _relation_to(
    model: Type[models.Model], target: Type[models.Model], reference: Any
) -> str:
    """Return the lookup name of the single relation from ``model`` to ``target``."""
    names = [
        field.name
        for field in model._meta.get_fields()
        if field.is_relation and field.related_model is target
    ]
    if len(names) != 1:
        reason = "several relations" if names else "no relation"
        raise ColumnResolutionError(
            f"{_model_label(model)} has {reason} to {_model_label(target)}.",
            model_name=_model_label(model),
            reference=reference,
        )
    return names[0]


def _get_field(
    model: Type[models.Model], column: str, reference: Any
) -> models.Field:
    try:
        field = model._meta.get_field(column)
    except FieldDoesNotExist as exc:
        raise ColumnResolutionError(
            f"Column '{column}' does not exist on {_model_label(model)}.",
            model_name=_model_label(model),
            reference=reference,
        ) from exc
    if field.is_relation and not field.concrete:
        raise ColumnResolutionError(
            f"Column '{column}' on {_model_label(model)} is not a concrete column.",
            model_name=_model_label(model),
            reference=reference,
        )
    return field


def _get_field_from_path(
    model: Type[models.Model], lookup: str, reference: Any
) -> tuple[Type[models.Model], models.Field]:
    current_model = model
    parts = lookup.split(LOOKUP_SEP)
    for part in parts[:-1]:
        try:
            field = current_model._meta.get_field(part)
        except FieldDoesNotExist as exc:
            raise ColumnResolutionError(
                f"Relation '{part}' does not exist on {_model_label(current_model)}.",
                model_name=_model_label(model),
                reference=reference,
            ) from exc
        if not field.is_relation or field.related_model is None:
            raise ColumnResolutionError(
                f"'{part}' on {_model_label(current_model)} is not a relation.",
                model_name=_model_label(model),
                reference=reference,
            )
        current_model = field.related_model
    return current_model, _get_field(current_model, parts[-1], reference)


def resolve_column(model: Type[models.Model], raw: Any) -> ResolvedColumn:
    """Resolve one column declaration against ``model``."""
    ref = ColumnRef.parse(raw)

    if ref.is_join_path:
        current = model
        relations: list[str] = []
        path_models: list[Type[models.Model]] = []
        for position, table in enumerate(ref.join_tables):
            target = resolve_model(table, model)
            path_models.append(target)
            if position == 0 and target is model:
                continue
            relations.append(_relation_to(current, target, raw))
            current = target
        field = _get_field(current, ref.column, raw)
        if not relations:
            return ResolvedColumn(ref=ref, model=model, field=field, lookup=field.name)

        alias = synthetic_alias([m._meta.model_name for m in path_models])
        resolved = ResolvedColumn(
            ref=ref,
            model=current,
            field=field,
            lookup=f"{alias}{LOOKUP_SEP}{field.name}",
            table_alias=alias,
            relation_path=LOOKUP_SEP.join(relations),
        )
    elif ref.table:
        target = resolve_model(ref.table, model)
        field = _get_field(target, ref.column, raw)
        if target is model:
            lookup = field.name
        else:
            lookup = f"{_relation_to(model, target, raw)}{LOOKUP_SEP}{field.name}"
        resolved = ResolvedColumn(ref=ref, model=target, field=field, lookup=lookup)
    else:
        owner, field = _get_field_from_path(model, ref.column, raw)
        resolved = ResolvedColumn(ref=ref, model=owner, field=field, lookup=ref.column)

    logger.debug(
        "Resolved column %r on %s to lookup '%s'",
        raw,
        _model_label(model),
        resolved.lookup,
    )
    return resolved


class ColumnRegistry:
    """
    Sortable and searchable columns of one datatable, resolved up front.

    ``sortable_columns`` is positional: entry *i* belongs to grid column *i*
    and ``None`` marks a column that cannot be sorted.
    """

    def __init__(
        self,
        model: Type[models.Model],
        sortable_columns: Optional[Sequence[Any]] = None,
        searchable_columns: Optional[Sequence[Any]] = None,
    ):
        self.model = model
        self._sortable = tuple(
            None if raw is None else resolve_column(model, raw)
            for raw in (sortable_columns or ())
        )
        self._searchable = tuple(
            resolve_column(model, raw) for raw in (searchable_columns or ())
        )
        self._joins = self._collect_joins()

    def sortable_columns(self) -> tuple[Optional[ResolvedColumn], ...]:
        return self._sortable

    def searchable_columns(self) -> tuple[ResolvedColumn, ...]:
        return self._searchable

    def sortable_column(self, index: int) -> ResolvedColumn:
        column = self._sortable[index] if 0 <= index < len(self._sortable) else None
        if column is None:
            raise ColumnResolutionError(
                f"Grid column {index} is not sortable.",
                model_name=_model_label(self.model),
                reference=index,
            )
        return column

    @property
    def joins(self) -> dict[str, str]:
        """Synthetic alias to relation path."""
        return dict(self._joins)

    def declare_joins(self, queryset: QuerySet) -> QuerySet:
        if not self._joins:
            return queryset
        return queryset.alias(
            **{alias: FilteredRelation(path) for alias, path in self._joins.items()}
        )

    def _collect_joins(self) -> dict[str, str]:
        joins: dict[str, str] = {}
        field_names = {
            name
            for field in self.model._meta.get_fields()
            for name in (field.name, getattr(field, "attname", None))
            if name
        }
        for column in self._sortable + self._searchable:
            if column is None or not column.table_alias:
                continue
            alias, path = column.table_alias, column.relation_path
            if alias in field_names:
                raise ColumnResolutionError(
                    f"Join alias '{alias}' conflicts with a field on "
                    f"{_model_label(self.model)}.",
                    model_name=_model_label(self.model),
                    reference=column.ref,
                )
            if joins.setdefault(alias, path) != path:
                raise ColumnResolutionError(
                    f"Join alias '{alias}' is used for both '{joins[alias]}' "
                    f"and '{path}'.",
                    model_name=_model_label(self.model),
                    reference=column.ref,
                )
        return joins
