"""HTTP transport for route requests.

The runner only depends on the `Transport` protocol: a callable that
sends a request descriptor and returns the status code, the decoded
body and the response headers. `HttpxTransport` is the default
implementation built on a synchronous `httpx.Client`.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from routechain.errors import TransportError
from routechain.templates import stringify
from routechain.values import MISSING

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Self

if TYPE_CHECKING:
    from routechain.request import RequestDescriptor
    from routechain.values import RuntimeValue

logger = logging.getLogger('routechain.transport')


@dataclass(frozen=True)
class Response:
    """Settled HTTP response as seen by the validators.

    Header names are lower-cased. The body is the decoded JSON value
    when the payload is valid JSON, the text otherwise, and the missing
    marker when the response has no payload.
    """

    status_code: int
    body: 'RuntimeValue' = MISSING
    headers: dict[str, str] = field(default_factory=dict)
    elapsed: float | None = None


class Transport(Protocol):
    """Capability sending a request descriptor over HTTP."""

    def send(self, request: 'RequestDescriptor') -> Response:
        """Send a request and wait for the complete response.

        Raises:
            TransportError: If the request can not be completed.
        """
        ...  # pragma: no cover


def decode_body(response: httpx.Response) -> 'RuntimeValue':
    """Decode a response payload.

    Args:
        response: Received httpx response.

    Returns:
        The JSON value, the text, or the missing marker for an empty payload.
    """
    if not response.content:
        return MISSING

    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxTransport:
    """Synchronous HTTP transport based on `httpx`.

    JSON bodies are sent as JSON, query mappings as URL parameters and
    form data or files as a multipart payload. Non-2xx responses are
    returned to the validators unless `raise_for_status` is set, in which
    case they fail the route with a `TransportError` carrying the code.
    """

    def __init__(self, client: httpx.Client | None = None, *,
                 timeout: float | None = None,
                 verify_ssl: bool = True,
                 follow_redirects: bool = True,
                 raise_for_status: bool = False) -> None:
        """Initialize the transport.

        Args:
            client: Preconfigured client. The transport does not close
                clients it did not create.
            timeout: Request timeout in seconds, `None` to wait forever.
            verify_ssl: Whether TLS certificates are verified.
            follow_redirects: Whether redirects are followed.
            raise_for_status: Whether non-2xx responses are errors.
        """
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            verify=verify_ssl,
            follow_redirects=follow_redirects,
        )
        self.raise_for_status = raise_for_status

    def __enter__(self) -> 'Self':
        """Enter the transport context."""
        return self

    def __exit__(self, exc_type: type[BaseException] | None,
                 exc_value: BaseException | None,
                 traceback: 'TracebackType | None') -> None:
        """Close the transport on context exit."""
        self.close()

    def close(self) -> None:
        """Close the underlying client if the transport created it."""
        if self._owns_client and not self.client.is_closed:
            self.client.close()

    @staticmethod
    def build_kwargs(request: 'RequestDescriptor') -> dict[str, Any]:
        """Translate a request descriptor into `httpx` keyword arguments.

        Args:
            request: Request descriptor.

        Returns:
            Keyword arguments for `httpx.Client.request`.
        """
        kwargs: dict[str, Any] = {
            'method': request.method,
            'url': request.url,
        }

        if request.headers:
            kwargs['headers'] = {
                key: stringify(value)
                for key, value in request.headers.items()
                if value is not None
            }

        if request.qs:
            kwargs['params'] = request.qs

        if request.files:
            kwargs['data'] = {
                key: stringify(value)
                for key, value in (request.form_data or {}).items()
            }
            kwargs['files'] = request.files
        elif request.form_data is not None:
            # httpx url-encodes `data` alone, fields go as file-less parts
            kwargs['files'] = {
                key: (None, stringify(value))
                for key, value in request.form_data.items()
            }
        elif request.body is not None:
            kwargs['json'] = request.body

        return kwargs

    def send(self, request: 'RequestDescriptor') -> Response:
        """Send a request and decode the response.

        Args:
            request: Request descriptor.

        Returns:
            The settled response.

        Raises:
            TransportError: On network failures, or on non-2xx responses
                when `raise_for_status` is enabled.
        """
        logger.debug('%s %s', request.method, request.url)

        start_time = time.perf_counter()
        try:
            response = self.client.request(**self.build_kwargs(request))
        except httpx.TimeoutException as base:
            raise TransportError(f'Timeout: {base}') from base
        except httpx.HTTPError as base:
            raise TransportError(f'Request error: {base}') from base

        elapsed = time.perf_counter() - start_time
        logger.debug('%s %s -> %s in %.3fs', request.method, request.url, response.status_code, elapsed)

        if self.raise_for_status and not response.is_success:
            raise TransportError(
                f'{response.status_code} - {response.text}',
                status_code=response.status_code,
            )

        return Response(
            status_code=response.status_code,
            body=decode_body(response),
            headers={key.lower(): value for key, value in response.headers.items()},
            elapsed=elapsed,
        )
