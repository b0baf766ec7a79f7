"""Declarative route schema.

Defines immutable Pydantic models that describe routes, their
expectations, exported variables and file uploads.
"""

from .routes import (
    DEFAULT_FORM_NAME,
    DEFAULT_STATUS_CODE,
    Expectation,
    FileUpload,
    RouteList,
    RouteSpec,
    VariableSpec,
)

__all__ = (
    'DEFAULT_FORM_NAME',
    'DEFAULT_STATUS_CODE',
    'Expectation',
    'FileUpload',
    'RouteList',
    'RouteSpec',
    'VariableSpec',
)
