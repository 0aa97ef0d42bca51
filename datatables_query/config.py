"""
DatatablesSettings implementation.

Settings are resolved in the following order:
1. Explicit overrides passed by the caller
2. Django settings (``DATATABLES_QUERY``)
3. Library defaults (``LIBRARY_DEFAULTS``)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from django.conf import settings as django_settings

from .defaults import LIBRARY_DEFAULTS, SETTINGS_NAME


def _merge_settings_dicts(*dicts: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Merge settings dictionaries with later ones taking precedence."""
    result: dict[str, Any] = {}
    for d in dicts:
        if d:
            result.update({k: v for k, v in d.items() if v is not None})
    return result


def _get_django_settings() -> dict[str, Any]:
    value = getattr(django_settings, SETTINGS_NAME, None)
    return dict(value) if isinstance(value, dict) else {}


@dataclass(frozen=True)
class DatatablesSettings:
    """Settings consumed by the translation engine."""

    db_adapter: str = LIBRARY_DEFAULTS["db_adapter"]
    paginator: Any = LIBRARY_DEFAULTS["paginator"]
    default_page_length: int = LIBRARY_DEFAULTS["default_page_length"]

    @classmethod
    def from_django(cls, **overrides: Any) -> "DatatablesSettings":
        merged = _merge_settings_dicts(
            LIBRARY_DEFAULTS, _get_django_settings(), overrides
        )
        valid_fields = set(cls.__dataclass_fields__.keys())
        return cls(**{k: v for k, v in merged.items() if k in valid_fields})

    def with_overrides(self, **overrides: Any) -> "DatatablesSettings":
        """Return a copy with the non-``None`` overrides applied."""
        changes = _merge_settings_dicts(overrides)
        if not changes:
            return self
        return replace(self, **changes)
