"""Route list loading and validation.

Route lists are plain sequences of mappings. They may be built in
Python or loaded from YAML or JSON route files; both paths go through
the same validation and report malformed routes as `ConfigError`.
"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from yaml import safe_load
from yaml.error import MarkedYAMLError, YAMLError

from routechain.errors import ConfigError, ErrorContext
from routechain.schema import RouteSpec

if TYPE_CHECKING:
    from io import TextIOBase

#: Key holding the route list when a route file is a mapping.
ROUTES_KEY = 'routes'


def parse_routes(routes: Any, *,  # noqa: ANN401
                 filename: str | None = None) -> tuple[RouteSpec, ...]:
    """Validate a route list.

    Args:
        routes: Sequence of route models or raw mappings.
        filename: Name of the route file, used in error messages.

    Returns:
        A tuple of validated routes.

    Raises:
        ConfigError: If the list or any route is malformed.
    """
    if routes is None:
        raise ConfigError('Routes cannot be undefined', context=ErrorContext(filename=filename))

    if isinstance(routes, (str, bytes, Mapping)) or not isinstance(routes, Sequence):
        raise ConfigError('Routes should be a list', context=ErrorContext(filename=filename))

    parsed = []
    for step_num, route in enumerate(routes):
        if isinstance(route, RouteSpec):
            parsed.append(route)
            continue

        try:
            parsed.append(RouteSpec.model_validate(route))
        except ValidationError as base:
            raise ConfigError.from_pydantic_error(
                base,
                data=route,
                filename=filename,
                step_num=step_num,
            ) from base

    return tuple(parsed)


def load_routes(content: 'TextIOBase | str', *,
                filename: str | None = None) -> tuple[RouteSpec, ...]:
    """Parse a YAML or JSON route document.

    The document is either a list of routes or a mapping holding the
    list under the `routes` key.

    Args:
        content: Document content as a string or file-like object.
        filename: Name of the route file, used in error messages.

    Returns:
        A tuple of validated routes.

    Raises:
        ConfigError: If the document can not be parsed or is malformed.
    """
    try:
        document = safe_load(content)

    except MarkedYAMLError as base:
        raise ConfigError.from_yaml_error(base, filename=filename) from base

    except YAMLError as base:
        raise ConfigError('Invalid YAML', context=ErrorContext(filename=filename)) from base

    if isinstance(document, Mapping) and ROUTES_KEY in document:
        document = document[ROUTES_KEY]

    return parse_routes(document, filename=filename)


def load_routes_file(path: str | Path) -> tuple[RouteSpec, ...]:
    """Read and validate a route file.

    Args:
        path: Path of a YAML or JSON route file.

    Returns:
        A tuple of validated routes.

    Raises:
        ConfigError: If the file can not be read, parsed or validated.
    """
    path = Path(path)

    try:
        with path.open('rt', encoding='utf-8') as content:
            return load_routes(content, filename=f'{path}')

    except OSError as base:
        raise ConfigError(f'Can not read route file {path}: {base.strerror or base}') from base
