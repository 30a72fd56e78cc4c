"""Exceptions raised at the edges of the form engine.

The pure core reports problems as data (None, error messages). These
exceptions belong to the layers that read files or address fields by code.
"""

from typing import Optional


class FormEngineError(Exception):
    """Base class for form engine errors."""


class TemplateLoadError(FormEngineError):
    """A template or draft file is missing or malformed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{message}: {path}" if path else message)


class UnknownFieldError(FormEngineError, KeyError):
    """A session operation named a field code the template does not define."""

    def __init__(self, field_code: str):
        self.field_code = field_code
        super().__init__(f"Unknown field code '{field_code}'")

    def __str__(self) -> str:
        return self.args[0]
