"""Request assembly for routes.

This module turns a route definition and the current run context into a
transport-neutral request descriptor: resolved URL and headers, payloads
passed through verbatim, and an optional staged file upload.
"""

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from mimetypes import guess_type
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO

from routechain.errors import ConfigError, UploadError
from routechain.models import DEFAULT_BASE_PATH
from routechain.templates import resolve_headers, resolve_template

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

if TYPE_CHECKING:
    from routechain.schema import RouteSpec
    from routechain.values import Value

DEFAULT_CONTENT_TYPE = 'application/octet-stream'

#: Multipart file entry: file name, readable stream and content type.
type FileEntry = tuple[str, BinaryIO, str]


@dataclass(frozen=True)
class RequestDescriptor:
    """Transport-neutral description of one HTTP request."""

    method: str
    url: str
    headers: dict[str, Any] | None = None
    qs: dict[str, Any] | None = None
    body: Any = None
    form_data: dict[str, Any] | None = None
    files: dict[str, FileEntry] = field(default_factory=dict)

    def dump(self) -> dict[str, Any]:
        """Return a printable mapping of the request.

        File streams are replaced by their file name and content type.
        """
        return {
            'method': self.method,
            'url': self.url,
            'headers': self.headers,
            'qs': self.qs,
            'body': self.body,
            'formData': self.form_data,
            'files': {
                name: {'filename': filename, 'contentType': content_type}
                for name, (filename, _, content_type) in self.files.items()
            },
        }


class FileSource:
    """File access used to stage uploads.

    Kept behind a small class so callers can substitute the file system
    access, for example in tests.
    """

    def open_for_read(self, path: str) -> BinaryIO:
        """Open a file for binary reading."""
        return Path(path).open('rb')

    def base_name(self, path: str) -> str:
        """Return the final component of a path."""
        return Path(path).name

    def mime_type(self, base_name: str) -> str:
        """Guess a content type from a file name extension."""
        content_type, _ = guess_type(base_name)
        return content_type or DEFAULT_CONTENT_TYPE


def build_url(base_url: str, base_path: str, url: str, model: str | None = None) -> str:
    """Join the request URL of a route.

    Args:
        base_url: Server root URL; a trailing slash is ignored.
        base_path: Path segment shared by all routes.
        url: Resolved route URL.
        model: Optional model segment.

    Returns:
        `base_url/base_path[/model]/url`.
    """
    parts = [base_url.rstrip('/'), base_path]
    if model is not None:
        parts.append(model)
    parts.append(url)

    return '/'.join(parts)


class RequestBuilder:
    """Builder of request descriptors for a fixed server location."""

    def __init__(self, base_url: str, base_path: str = DEFAULT_BASE_PATH, *,
                 files: FileSource | None = None) -> None:
        """Initialize the builder.

        Args:
            base_url: Server root URL.
            base_path: Path segment shared by all routes.
            files: File access used for uploads.

        Raises:
            ConfigError: If the base URL is empty or not a string.
        """
        if not isinstance(base_url, str) or not base_url.strip():
            raise ConfigError('Base URL must be a non-empty string')

        if not isinstance(base_path, str):
            raise ConfigError('Base path must be a string')

        self.base_url = base_url
        self.base_path = base_path
        self.files = files or FileSource()

    def build(self, route: 'RouteSpec', context: 'Mapping[str, Value]',
              files: dict[str, FileEntry] | None = None) -> RequestDescriptor:
        """Build the request descriptor of a route.

        Args:
            route: Route definition.
            context: Current run context used for placeholders.
            files: Already opened upload entries, if any.

        Returns:
            A request descriptor. The route itself is left untouched.
        """
        form_data = route.form_data
        if files:
            name = next(iter(files.values()))[0]
            form_data = {'name': name}

        return RequestDescriptor(
            method=route.method,
            url=build_url(
                self.base_url,
                self.base_path,
                resolve_template(route.url, context),
                route.model,
            ),
            headers=resolve_headers(route.headers, context),
            qs=route.qs,
            body=route.body,
            form_data=form_data,
            files=files or {},
        )

    @contextmanager
    def stage(self, route: 'RouteSpec',
              context: 'Mapping[str, Value]') -> 'Iterator[RequestDescriptor]':
        """Build a request descriptor with its upload stream opened.

        The upload stream, if any, is closed when the block exits,
        whether the request succeeded or not.

        Args:
            route: Route definition.
            context: Current run context used for placeholders.

        Yields:
            The request descriptor.

        Raises:
            UploadError: If the upload file can not be opened.
        """
        with ExitStack() as stack:
            files: dict[str, FileEntry] = {}

            if route.file is not None and route.file.path is not None:
                path = route.file.path
                try:
                    stream = stack.enter_context(self.files.open_for_read(path))
                except OSError as base:
                    raise UploadError(f'Can not open file {path!r} for upload: {base.strerror or base}') from base

                name = self.files.base_name(path)
                files[route.file.form_name] = (name, stream, self.files.mime_type(name))

            yield self.build(route, context, files)
