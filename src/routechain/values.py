"""Core value types and runtime type tags.

This module defines the value types exchanged between route
definitions, HTTP responses and the variable context, together with
the explicit type-tag classifier used by body and property checks.
"""

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any, Final

#: Scalars represent atomic JSON-compatible values.
type Scalar = str | int | float | bool

#: A value is anything that can appear in a decoded response body
#: or be stored into the variable context.
type Value = Scalar | Sequence[Value] | Mapping[str, Value] | None

#: Any Python object received from a transport or user-defined code.
type RuntimeValue = Any

MAPPINGS = (dict,)
SCALARS = (str, bytes, int, float, bool)
SEQUENCES = (list, tuple)


class _Missing:
    """Marker for values absent from a body or a context."""

    _instance: '_Missing | None' = None

    def __new__(cls) -> '_Missing':
        """Return the single marker instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        """The marker is always falsy."""
        return False

    def __repr__(self) -> str:
        """String represenatation."""
        return '<missing>'


#: Singleton used to distinguish an absent value from an explicit `None`.
MISSING: Final = _Missing()


def type_tag(value: RuntimeValue) -> str:
    """Classify a runtime value into a lower-case type tag.

    The classifier is explicit and enumerated so that body and property
    checks do not depend on Python class names:

    - `undefined` for the missing marker;
    - `null` for `None`;
    - `boolean`, `number`, `string`;
    - `array` for lists and tuples, `object` for mappings;
    - `buffer` for bytes and `date` for dates and datetimes.

    Any other object is tagged with its lower-cased class name.

    Args:
        value: Value to classify.

    Returns:
        The type tag of the value.
    """
    if value is MISSING:
        return 'undefined'

    if value is None:
        return 'null'

    # bool is a subclass of int and must be tested first
    if isinstance(value, bool):
        return 'boolean'

    if isinstance(value, (int, float)):
        return 'number'

    if isinstance(value, str):
        return 'string'

    if isinstance(value, (bytes, bytearray)):
        return 'buffer'

    if isinstance(value, SEQUENCES):
        return 'array'

    if isinstance(value, (Mapping, *MAPPINGS)):
        return 'object'

    if isinstance(value, (date, datetime)):
        return 'date'

    return type(value).__name__.lower()


def same_value(actual: RuntimeValue, expected: RuntimeValue) -> bool:
    """Compare two values strictly.

    Unlike `==`, booleans never equal numbers (`True` is not `1`), and
    containers are compared recursively with the same rule.

    Args:
        actual: Value produced at runtime.
        expected: Expected literal value.

    Returns:
        True if both values have the same type tag and are equal.
    """
    if type_tag(actual) != type_tag(expected):
        return False

    if isinstance(expected, MAPPINGS):
        return (
            actual.keys() == expected.keys()
            and all(same_value(actual[key], item) for key, item in expected.items())
        )

    if isinstance(expected, SEQUENCES):
        return (
            len(actual) == len(expected)
            and all(same_value(*pair) for pair in zip(actual, expected, strict=True))
        )

    return bool(actual == expected)
