import pytest
from django.core.exceptions import ImproperlyConfigured
from django.db.models import Q

from datatables_query.columns import ColumnRegistry, resolve_column
from datatables_query.conditions import search_condition, typecast_for
from datatables_query.request import GridRequest
from datatables_query.search import aggregate_query, build_conditions_for
from tests.models import Customer, Invoice

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "adapter,typecast",
    [
        ("postgresql", "VARCHAR"),
        ("pg", "VARCHAR"),
        ("mysql2", "CHAR"),
        ("MySQL", "CHAR"),
        ("sqlite3", "TEXT"),
        ("sqlite", "TEXT"),
    ],
)
def test_typecast_per_adapter(adapter, typecast):
    assert typecast_for(adapter) == typecast


@pytest.mark.parametrize("adapter", ["oracle", "", None])
def test_unknown_adapter_is_a_configuration_error(adapter):
    with pytest.raises(ImproperlyConfigured):
        typecast_for(adapter)


def _sql(queryset):
    return str(queryset.query)


def test_search_condition_casts_column():
    condition = search_condition(resolve_column(Customer, "age"), "4", "TEXT")
    sql = _sql(Customer.objects.filter(condition))
    assert 'CAST("tests_customer"."age" AS TEXT) LIKE' in sql
    assert "%4%" in sql


def test_search_condition_uses_configured_type():
    condition = search_condition(resolve_column(Customer, "name"), "ann", "VARCHAR")
    assert 'CAST("tests_customer"."name" AS VARCHAR)' in _sql(
        Customer.objects.filter(condition)
    )


def test_search_condition_on_related_column_joins():
    condition = search_condition(resolve_column(Customer, "country.name"), "fr", "TEXT")
    sql = _sql(Customer.objects.filter(condition))
    assert 'JOIN "tests_country"' in sql
    assert 'CAST("tests_country"."name" AS TEXT)' in sql


def test_search_condition_on_join_path_uses_alias():
    registry = ColumnRegistry(
        Invoice, searchable_columns=[["customer", "country.name"]]
    )
    (column,) = registry.searchable_columns()
    queryset = registry.declare_joins(Invoice.objects.all()).filter(
        search_condition(column, "spain", "TEXT")
    )
    sql = _sql(queryset)
    assert "countries_customers" in sql
    assert 'CAST(countries_customers."name" AS TEXT)' in sql


def test_multi_word_search_is_and_of_ors():
    columns = [resolve_column(Customer, "name"), resolve_column(Customer, "email")]
    conditions = build_conditions_for(columns, "ann  jo", "TEXT")

    assert conditions.connector == Q.AND
    assert len(conditions.children) == 2
    for child in conditions.children:
        assert child.connector == Q.OR
        assert len(child.children) == 2


@pytest.mark.parametrize("query", ["", "   "])
def test_blank_query_builds_nothing(query):
    columns = [resolve_column(Customer, "name")]
    assert build_conditions_for(columns, query, "TEXT") is None


def test_no_searchable_columns_builds_nothing():
    assert build_conditions_for([], "ann", "TEXT") is None


def test_aggregate_query_only_uses_filled_columns():
    columns = [resolve_column(Customer, "name"), resolve_column(Customer, "email")]
    request = GridRequest.from_params(
        {"columns": {"0": {"search": {"value": ""}}, "1": {"search": {"value": "org"}}}}
    )
    conditions = aggregate_query(columns, request, "TEXT")
    sql = _sql(Customer.objects.filter(conditions))
    assert 'CAST("tests_customer"."email" AS TEXT)' in sql
    assert 'CAST("tests_customer"."name" AS TEXT)' not in sql


def test_aggregate_query_without_values_is_none():
    columns = [resolve_column(Customer, "name")]
    assert aggregate_query(columns, GridRequest(), "TEXT") is None
