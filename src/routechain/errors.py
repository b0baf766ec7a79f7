"""Core exception hierarchy.

Configuration errors are raised before any route runs: malformed route
lists, unreadable route files and invalid runner arguments. Route
failures (response mismatches, transport and upload errors) halt a run
and are reported in its result.

Every error can render the position of the failing route and a YAML
dump of the route together with the run context at the time of the
failure.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import safe_dump

from routechain.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Self

if TYPE_CHECKING:
    from pydantic import ValidationError
    from yaml.error import MarkedYAMLError

LOCATION_INDENT = ' ' * 4
SNIPPET_INDENT = ' ' * 8

#: Placeholder for values without a YAML representation.
UNPRINTABLE = '<runtime object>'


class ErrorContext(TypedDict, total=False):
    """Where and in which state a route error occurred.

    Every key is optional; only the present ones are rendered.
    """

    #: Route file name.
    filename: str | None

    #: Zero-based line of the route file.
    line_num: int | None
    #: Zero-based column of the route file.
    column_num: int | None

    #: Zero-based position of the route in the route list.
    step_num: int | None
    #: Route title.
    title: str | None

    #: Run context at the time of the failure.
    context: dict[str, Any] | None
    #: Failing route, or the failing part of it.
    element: Any


def _printable(value: Any) -> Any:  # noqa: ANN401
    """Replace values YAML can not dump, recursively."""
    if isinstance(value, MAPPINGS):
        return {key: _printable(item) for key, item in value.items()}

    if isinstance(value, SEQUENCES):
        return [_printable(item) for item in value]

    if value is None or isinstance(value, SCALARS):
        return value

    return UNPRINTABLE


def _yaml_lines(value: Any) -> list[str]:  # noqa: ANN401
    """Dump a value as YAML lines, without blank lines."""
    text = safe_dump(_printable(value), indent=2, sort_keys=False, allow_unicode=True)
    return [line for line in text.splitlines() if line.strip()]


class ErrorFormatter:
    """Rendering of route errors for humans.

    A rendered error is its message followed by the location lines and,
    when the failing route is known, a YAML snippet:

        Invalid response statusCode. Should be 200 but returned code 404
            on step 1 "Get user"
                 ...
                context:
                  userId: 7
                 ---
                title: Get user
                url: users/${userId}
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Render a message with its error context.

        Args:
            message: Human-readable error message.
            context: Location and state of the failure, if known.

        Returns:
            The message followed by location and snippet lines.
        """
        if not context:
            return message

        lines = [
            message,
            *cls.location_lines(context),
            *cls.snippet_lines(context),
        ]

        return linesep.join(lines)

    @staticmethod
    def location_lines(context: ErrorContext, indent: str = LOCATION_INDENT) -> list[str]:
        """Render the file position and the route position.

        Line and column numbers are shown one-based.
        """
        lines = []

        if filename := context.get('filename'):
            position = [f'in "{filename}"']
            if (line_num := context.get('line_num')) is not None:
                position.append(f'line {line_num + 1}')
                if (column_num := context.get('column_num')) is not None:
                    position.append(f'column {column_num + 1}')
            lines.append(indent + ', '.join(position))

        if (step_num := context.get('step_num')) is not None:
            title = context.get('title')
            lines.append(f'{indent}on step {step_num}' + (f' "{title}"' if title else ''))

        return lines

    @staticmethod
    def snippet_lines(context: ErrorContext, indent: str = SNIPPET_INDENT) -> list[str]:
        """Render the run context and the failing route as YAML.

        Returns no lines when the context holds no route.
        """
        element = context.get('element')
        if not element:
            return []

        lines = [f'{indent} ...']

        if values := context.get('context'):
            lines.extend(indent + line for line in _yaml_lines({'context': dict(values)}))
            lines.append(f'{indent} ---')

        lines.extend(indent + line for line in _yaml_lines(element))

        return lines


class RouteError(Exception, ErrorFormatter):
    """Base exception for all routechain errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 status_code: int | None = None,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            status_code: HTTP status code of the response, if one was received.
            context: Location and state of the failure.
        """
        self.message = message
        self.status_code = status_code
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String represenatation."""
        return self.format(self.message, self.context)

    def with_context(self, context: ErrorContext) -> 'Self':
        """Attach route location and data to the error.

        Args:
            context: Error context of the failing route.

        Returns:
            The same error instance.
        """
        self.context = ErrorContext({**(self.context or {}), **context})
        return self


class ConfigError(RouteError):
    """Error raised for a malformed route list or runner arguments.

    Configuration errors are raised when the runner is constructed,
    before any route runs, and are never caught by the runner.
    """

    @classmethod
    def from_yaml_error(cls, error: 'MarkedYAMLError', *,
                        filename: str | None = None) -> 'Self':
        """Create a configuration error from a route file syntax error.

        Args:
            error: Exception raised by the YAML parser.
            filename: Route file name, used when the parser has none.

        Returns:
            ConfigError pointing at the position of the syntax error.
        """
        context = ErrorContext(filename=filename)

        mark = error.problem_mark
        if mark is not None:
            # string and stream inputs are named like `<unicode string>`
            if mark.name and not mark.name.startswith('<'):
                context['filename'] = mark.name
            context['line_num'] = mark.line
            context['column_num'] = mark.column

        message = f'Invalid YAML: {error.problem}' if error.problem else 'Invalid YAML'

        return cls(message, context=context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            filename: str | None = None,
                            step_num: int | None = None) -> 'Self':
        """Create a configuration error from an invalid route.

        Only the first validation error is reported. Its message is
        suffixed with the dotted field location, and the snippet is
        narrowed to the failing field.

        Args:
            error: ValidationError raised while validating the route.
            data: Raw route data.
            filename: Route file name, if any.
            step_num: Position of the route in the route list.

        Returns:
            ConfigError describing the failing field.
        """
        context = ErrorContext(filename=filename, step_num=step_num, element=data)

        if not isinstance(data, dict) or not data:
            return cls('Invalid route definition', context=context)

        if isinstance(title := data.get('title'), str):
            context['title'] = title

        details = error.errors(include_url=False, include_input=False)
        if not details or not (message := details[0]['msg'].strip()):
            return cls('Invalid route definition', context=context)

        location = details[0]['loc']
        if location:
            message += f' ({".".join(map(str, location))})'

        context['element'] = cls._failing_element(data, location)

        return cls(message, context=context)

    @staticmethod
    def _failing_element(data: dict[str, Any], location: 'Sequence[int | str]') -> Any:  # noqa: ANN401
        """Narrow route data to the deepest existing part of an error location.

        Args:
            data: Raw route data.
            location: Pydantic error location.

        Returns:
            A single-key mapping (or single-item list) holding the
            failing value, or the whole route if the location does
            not exist in the data.
        """
        parent: Any = None
        key: int | str | None = None
        node: Any = data

        for part in location:
            if isinstance(node, dict) and part in node:
                parent, key, node = node, part, node[part]
            elif isinstance(node, list) and isinstance(part, int) and 0 <= part < len(node):
                parent, key, node = node, part, node[part]
            else:
                break

        if isinstance(parent, dict):
            return {key: node}

        if isinstance(parent, list):
            return [node]

        return data


class StepFailure(RouteError):
    """Error raised when a response does not match route expectations.

    Covers status code, body type, property and header checks, and
    variable extraction mismatches.
    """


class TransportError(RouteError):
    """Error raised when a request can not be completed.

    Carries the HTTP status code when the failure happened after a
    response was received.
    """


class UploadError(RouteError):
    """Error raised when a file can not be staged for upload."""
