"""Body path resolution.

This module provides the resolver used to address nested fields of a
decoded response body with dot and bracket notation, for example
`user.id`, `items[0].name` or `headers['x-total']`.
"""

from re import compile as regexp
from typing import TYPE_CHECKING

from routechain.values import MISSING

if TYPE_CHECKING:
    from routechain.values import RuntimeValue

#: Tokenizer for path segments: plain names, numeric brackets, quoted brackets.
_SEGMENT_PATTERN = regexp(
    r'''[^.[\]]+|\[(?:(?P<index>\d+)|(?P<quote>["'])(?P<key>.*?)(?P=quote))\]''',
)


class BodyPath:
    """Resolver for dot and bracket path access.

    A path is split into segments once, at construction time. Each
    segment addresses either a mapping key or a sequence index.

    Resolution distinguishes an absent value from an explicit `null`:
    `has()` is true as soon as every segment exists, even when the
    final value is `None`. Missing keys, out-of-range indexes and type
    mismatches never raise.
    """

    def __init__(self, path: str) -> None:
        """Initialize the resolver with a path.

        Args:
            path: Dot/bracket path. An empty path addresses nothing.
        """
        self.path = path
        self.segments = self.split(path)

    def __repr__(self) -> str:
        """String represenatation."""
        return f'{type(self).__name__}({self.path!r})'

    @staticmethod
    def split(path: str) -> tuple[str | int, ...]:
        """Split a path into key and index segments.

        Args:
            path: Dot/bracket path.

        Returns:
            A tuple of string keys and integer indexes.
        """
        segments: list[str | int] = []

        for match in _SEGMENT_PATTERN.finditer(path.strip()):
            if (index := match.group('index')) is not None:
                segments.append(int(index))
            elif match.group('quote'):
                segments.append(match.group('key'))
            else:
                segments.append(match.group(0))

        return tuple(segments)

    def get(self, value: 'RuntimeValue', default: 'RuntimeValue' = MISSING) -> 'RuntimeValue':
        """Resolve the path against a value.

        Args:
            value: Root value (usually a decoded response body).
            default: Value returned when the path does not resolve.

        Returns:
            The resolved value, or `default` if any segment is absent.
        """
        if not self.segments:
            return default

        current = value
        for segment in self.segments:
            current = self._step(current, segment)
            if current is MISSING:
                return default

        return current

    def has(self, value: 'RuntimeValue') -> bool:
        """Check whether the path resolves against a value."""
        return self.get(value) is not MISSING

    @staticmethod
    def _step(value: 'RuntimeValue', segment: str | int) -> 'RuntimeValue':
        """Apply a single segment to a value.

        Args:
            value: Current container.
            segment: Mapping key or sequence index.

        Returns:
            The nested value, or the missing marker.
        """
        if isinstance(value, dict):
            key = str(segment)
            return value[key] if key in value else MISSING

        if isinstance(value, (list, tuple)):
            if isinstance(segment, str):
                if not segment.isdecimal():
                    return MISSING
                segment = int(segment)
            if 0 <= segment < len(value):
                return value[segment]

        return MISSING
