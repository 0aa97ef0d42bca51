"""
Exceptions raised while translating grid requests.
"""

from typing import Any, Optional


class DatatableError(Exception):
    """Base exception for datatable translation errors."""

    def __init__(self, message: str, model_name: Optional[str] = None):
        self.model_name = model_name
        super().__init__(message)


class MethodNotImplementedError(DatatableError, NotImplementedError):
    """Raised when a required integration hook was never bound."""

    def __init__(
        self,
        message: str = "Please implement this method in your class.",
        model_name: Optional[str] = None,
        hook: Optional[str] = None,
    ):
        self.hook = hook
        super().__init__(message, model_name)


class ColumnResolutionError(DatatableError):
    """Raised when a column reference cannot be mapped to a model field."""

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        reference: Optional[Any] = None,
    ):
        self.reference = reference
        super().__init__(message, model_name)
