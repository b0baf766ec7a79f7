"""Tests configurations and fixtures."""

import os
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from routechain.transport import Response

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

if TYPE_CHECKING:
    from routechain.request import RequestDescriptor


class RecordingTransport:
    """Transport replaying queued responses and recording requests.

    Queued items are either `Response` objects or exceptions to raise.
    Requests are recorded as dumped mappings, since upload streams are
    closed once the route has been sent.
    """

    def __init__(self, *responses: Response | Exception) -> None:
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def __enter__(self) -> 'RecordingTransport':
        return self

    def __exit__(self, exc_type: type[BaseException] | None,
                 exc_value: BaseException | None,
                 traceback: 'TracebackType | None') -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    @property
    def urls(self) -> list[str]:
        """URLs of recorded requests, in sending order."""
        return [request['url'] for request in self.requests]

    def send(self, request: 'RequestDescriptor') -> Response:
        self.requests.append(request.dump())

        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response

        return response


@pytest.fixture(autouse=True)
def clean_environment(mocker: 'MockerFixture') -> None:
    """Hide `ROUTECHAIN_*` variables of the host environment."""
    environment = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith('ROUTECHAIN_')
    }
    mocker.patch.dict(os.environ, environment, clear=True)


@pytest.fixture
def transport() -> 'Callable[..., RecordingTransport]':
    """Provide a factory of recording transports.

    Returns:
        A callable accepting queued responses (or exceptions) and
        returning a `RecordingTransport` replaying them in order.
    """
    def factory(*responses: Response | Exception) -> RecordingTransport:
        return RecordingTransport(*responses)

    return factory


@pytest.fixture
def mock_client() -> 'Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]':
    """Provide a factory of `httpx` clients backed by a request handler.

    The handler receives every outgoing `httpx.Request` and returns the
    `httpx.Response` to deliver, or raises an `httpx` error to simulate
    network failures.
    """
    def factory(handler: 'Callable[[httpx.Request], httpx.Response]') -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    return factory
