"""Placeholder substitution for route URLs and headers.

Placeholders use the `${name}` syntax. A placeholder is replaced by the
string form of the context value stored under `name`. Placeholders that
reference an unknown name are removed: the resolver is a pass-through
and never fails on a missing variable.
"""

from json import dumps
from typing import TYPE_CHECKING

from routechain.names import PLACEHOLDER_PATTERN
from routechain.values import MAPPINGS, SEQUENCES

if TYPE_CHECKING:
    from collections.abc import Mapping
    from re import Match

if TYPE_CHECKING:
    from routechain.values import RuntimeValue, Value


def stringify(value: 'RuntimeValue') -> str:
    """Render a context value the way it appears inside a URL or header.

    Args:
        value: Context value.

    Returns:
        Strings unchanged, `true`/`false` for booleans, `null` for `None`,
        integral floats without a fraction and compact JSON for
        containers; `str()` for anything else.
    """
    if isinstance(value, str):
        return value

    if value is None or isinstance(value, bool):
        return dumps(value)

    if isinstance(value, float) and value.is_integer():
        return str(int(value))

    if isinstance(value, (*MAPPINGS, *SEQUENCES)):
        return dumps(value, ensure_ascii=False, separators=(',', ':'), default=str)

    return str(value)


def resolve_template(template: str, context: 'Mapping[str, Value]') -> str:
    """Substitute every `${name}` placeholder of a string.

    Args:
        template: String possibly containing placeholders.
        context: Current run context.

    Returns:
        The resolved string. Unknown placeholders are removed.
    """
    if '${' not in template:
        return template

    def replace(match: 'Match[str]') -> str:
        name = match.group('name')
        if name not in context:
            return ''
        return stringify(context[name])

    return PLACEHOLDER_PATTERN.sub(replace, template)


def resolve_headers(headers: 'Mapping[str, RuntimeValue] | None',
                    context: 'Mapping[str, Value]') -> dict[str, 'RuntimeValue'] | None:
    """Resolve placeholders in every string header value.

    The input mapping is not modified; non-string values are copied
    as they are.

    Args:
        headers: Route headers, if any.
        context: Current run context.

    Returns:
        A new header mapping, or `None` when the route has no headers.
    """
    if headers is None:
        return None

    return {
        key: resolve_template(value, context) if isinstance(value, str) else value
        for key, value in headers.items()
    }
