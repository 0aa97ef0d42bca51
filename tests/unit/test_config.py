import pytest

from datatables_query.config import DatatablesSettings
from datatables_query.defaults import LIBRARY_DEFAULTS

pytestmark = pytest.mark.unit


def test_library_defaults(settings):
    del settings.DATATABLES_QUERY
    config = DatatablesSettings.from_django()
    assert config.db_adapter == LIBRARY_DEFAULTS["db_adapter"] == "postgresql"
    assert config.paginator == "offset"
    assert config.default_page_length == 10


def test_django_settings_override_defaults(settings):
    settings.DATATABLES_QUERY = {"db_adapter": "mysql2", "default_page_length": 25}
    config = DatatablesSettings.from_django()
    assert config.db_adapter == "mysql2"
    assert config.default_page_length == 25


def test_explicit_overrides_win(settings):
    settings.DATATABLES_QUERY = {"db_adapter": "mysql2", "unknown": True}
    config = DatatablesSettings.from_django(db_adapter="pg", paginator=None)
    assert config.db_adapter == "pg"
    assert config.paginator == "offset"


def test_with_overrides_keeps_unset_values():
    config = DatatablesSettings(db_adapter="sqlite", default_page_length=25)
    assert config.with_overrides(db_adapter=None, paginator=None) is config

    updated = config.with_overrides(db_adapter="mysql", paginator="page")
    assert updated.db_adapter == "mysql"
    assert updated.paginator == "page"
    assert updated.default_page_length == 25
    assert config.db_adapter == "sqlite"
