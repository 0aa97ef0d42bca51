"""
Default configuration for django-datatables-query.

Every setting the library consumes is listed here. Projects override them
through the ``DATATABLES_QUERY`` Django setting.
"""

from __future__ import annotations

from typing import Any

LIBRARY_NAME = "django-datatables-query"
SETTINGS_NAME = "DATATABLES_QUERY"

# Page length sentinel meaning "return every row".
NO_LIMIT = "-1"

LIBRARY_DEFAULTS: dict[str, Any] = {
    "db_adapter": "postgresql",
    "paginator": "offset",
    "default_page_length": 10,
}
