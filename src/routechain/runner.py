"""Sequential execution of route lists.

The runner drives an ordered list of routes through placeholder
resolution, request building, transport, response validation and
variable extraction. Routes run strictly one after another; the first
failing route halts the run and later routes are never sent.

Values extracted from a response are merged into the run context only
after the whole route has passed, so a route can read values written by
earlier routes but never its own.
"""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from json import dumps
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from routechain.checks import validate_response
from routechain.errors import ConfigError, ErrorContext, RouteError, StepFailure
from routechain.extract import extract_variables
from routechain.loader import parse_routes
from routechain.models import DEFAULT_BASE_PATH, RunnerSettings
from routechain.request import RequestBuilder
from routechain.schema import RouteSpec  # noqa: TC001
from routechain.transport import HttpxTransport

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Self

if TYPE_CHECKING:
    from routechain.request import FileSource
    from routechain.transport import Response, Transport
    from routechain.values import Value

logger = logging.getLogger('routechain.runner')

SEPARATOR = '-' * 48


class StepState(StrEnum):
    """Lifecycle state of a route within a run."""

    PENDING = 'pending'
    SKIPPED = 'skipped'
    RUNNING = 'running'
    PASSED = 'passed'
    FAILED = 'failed'


@dataclass
class StepResult:
    """Outcome of a single route."""

    index: int
    title: str
    state: StepState = StepState.PENDING
    duration: float | None = None
    error: RouteError | None = None

    @property
    def done(self) -> bool:
        """Whether the route completed without failing."""
        return self.state in (StepState.SKIPPED, StepState.PASSED)


@dataclass(frozen=True)
class RunResult:
    """Terminal outcome of a run.

    A run succeeds iff every route was skipped or passed. On failure,
    `error` holds the error of the first failing route.
    """

    steps: tuple[StepResult, ...]
    context: dict[str, 'Value'] = field(default_factory=dict)
    error: RouteError | None = None

    @property
    def success(self) -> bool:
        """Whether every route was skipped or passed."""
        return self.error is None and all(step.done for step in self.steps)

    @property
    def failed_step(self) -> StepResult | None:
        """The route that halted the run, if any."""
        for step in self.steps:
            if step.state is StepState.FAILED:
                return step
        return None

    @property
    def exit_code(self) -> int:
        """Process exit status for hosts: 0 on success, 1 on failure."""
        return 0 if self.success else 1

    @property
    def summary(self) -> dict[str, int]:
        """Number of routes per state."""
        counts = dict.fromkeys(StepState, 0)
        for step in self.steps:
            counts[step.state] += 1
        return {state.value: count for state, count in counts.items()}


class RouteRunner:
    """Fail-fast sequential runner of a route list.

    The runner is single-use: `run()` reports the outcome exactly once
    and the run context lives as long as the runner.
    """

    def __init__(self, routes: Any,  # noqa: ANN401
                 base_url: str | None = None,
                 base_path: str | None = None, *,
                 transport: 'Transport | None' = None,
                 context: Mapping[str, 'Value'] | None = None,
                 settings: RunnerSettings | None = None,
                 files: 'FileSource | None' = None) -> None:
        """Initialize the runner.

        Args:
            routes: Ordered route list (models or raw mappings).
            base_url: Server root URL. Defaults to the settings value.
            base_path: Path segment shared by all routes. Defaults to
                the settings value (`api`).
            transport: HTTP transport. Defaults to an `HttpxTransport`
                configured from the settings and closed with the runner.
            context: Initial run context.
            settings: Runner settings. Resolved from the environment
                when omitted.
            files: File access used for uploads.

        Raises:
            ConfigError: If the route list or arguments are malformed.
        """
        self.routes = parse_routes(routes)

        if settings is None:
            try:
                settings = RunnerSettings()
            except ValidationError as base:
                raise ConfigError(f'Invalid runner settings: {base}') from base
        self.settings = settings

        if base_url is None and settings.base_url is not None:
            base_url = str(settings.base_url)
        if base_url is None:
            raise ConfigError('Base URL cannot be undefined')

        if base_path is None:
            base_path = settings.base_path or DEFAULT_BASE_PATH

        self.builder = RequestBuilder(base_url, base_path, files=files)

        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpxTransport(
            timeout=settings.timeout,
            verify_ssl=settings.verify_ssl,
            follow_redirects=settings.follow_redirects,
        )

        self.context: dict[str, Value] = dict(context or {})
        self.result: RunResult | None = None

    def __enter__(self) -> 'Self':
        """Enter the runner context."""
        return self

    def __exit__(self, exc_type: type[BaseException] | None,
                 exc_value: BaseException | None,
                 traceback: 'TracebackType | None') -> None:
        """Release the transport on context exit."""
        self.close()

    def close(self) -> None:
        """Close the default transport, if the runner created it."""
        if self._owns_transport and isinstance(self.transport, HttpxTransport):
            self.transport.close()

    def run(self) -> RunResult:
        """Run every route in order and stop at the first failure.

        Returns:
            The terminal outcome of the run.

        Raises:
            ConfigError: If the runner has already run.
        """
        if self.result is not None:
            raise ConfigError('Route list has already been run')

        steps = tuple(
            StepResult(index=index, title=route.title)
            for index, route in enumerate(self.routes)
        )

        for step, route in zip(steps, self.routes, strict=True):
            logger.info(SEPARATOR)
            logger.info('Run test [%d] - %s', step.index, route.title)

            if route.skip:
                step.state = StepState.SKIPPED
                logger.info('Test skipped...')
                continue

            step.state = StepState.RUNNING
            start_time = time.perf_counter()

            try:
                assignments = self.run_callable(route)

            except RouteError as error:
                step.duration = time.perf_counter() - start_time
                step.state = StepState.FAILED
                step.error = self.fail(error, route, step.index)
                return self.finish(steps, step.error)

            self.context.update(assignments)

            step.duration = time.perf_counter() - start_time
            step.state = StepState.PASSED
            logger.info('%s: %.3fs', route.title, step.duration)

        logger.info('All tests successfully passed!')

        return self.finish(steps)

    def run_callable(self, route: RouteSpec) -> dict[str, 'Value']:
        """Run a route with unified error handling.

        Args:
            route: Route to run.

        Returns:
            Variable assignments to merge into the run context.

        Raises:
            RouteError: Raised by the route, or wrapping any unexpected
                exception as a `StepFailure`.
        """
        try:
            return self.run_step(route)

        except RouteError:
            raise

        except Exception as base:
            raise StepFailure(f'{base!r}') from base

    def run_step(self, route: RouteSpec) -> dict[str, 'Value']:
        """Send a route request and validate its response.

        Args:
            route: Route to run.

        Returns:
            Variable assignments to merge into the run context.

        Raises:
            RouteError: If the request can not be sent or the response
                does not match the route expectations.
        """
        with self.builder.stage(route, self.context) as request:
            if route.debug:
                logger.info('[DEBUG ON]')
                logger.info('--> Request options :\n%s', self._dump(request.dump()))
            else:
                logger.debug('--> Request options :\n%s', self._dump(request.dump()))

            response = self.transport.send(request)

        self._log_response(route, response)

        validate_response(response, route.expect)

        return extract_variables(route.variables, response.body)

    def fail(self, error: RouteError, route: RouteSpec, step_num: int) -> RouteError:
        """Attach route location to an error and log it.

        Args:
            error: Error raised by the route.
            route: Failing route.
            step_num: Position of the route.

        Returns:
            The same error, with its context filled.
        """
        error.with_context(ErrorContext(
            step_num=step_num,
            title=route.title,
            context=dict(self.context),
            element=route.model_dump(
                mode='json',
                exclude_defaults=True,
            ),
        ))

        logger.error('statusCode: %s', error.status_code or 'unknown code')
        logger.error('message: %s', error.message)

        return error

    def finish(self, steps: tuple[StepResult, ...],
               error: RouteError | None = None) -> RunResult:
        """Record the terminal outcome of the run."""
        self.result = RunResult(
            steps=steps,
            context=dict(self.context),
            error=error,
        )
        return self.result

    def _log_response(self, route: RouteSpec, response: 'Response') -> None:
        """Dump a response body and headers."""
        level = logging.INFO if route.debug else logging.DEBUG
        if not logger.isEnabledFor(level):
            return

        logger.log(level, '--> Body :\n%s', self._dump(response.body))
        logger.log(level, '--> Headers :\n%s', self._dump(response.headers))

    @staticmethod
    def _dump(value: Any) -> str:  # noqa: ANN401
        """Render a value as indented JSON for logs."""
        return dumps(value, ensure_ascii=False, indent=2, default=repr)


def run_routes(routes: Any,  # noqa: ANN401
               base_url: str | None = None,
               base_path: str | None = None, **kwargs: Any) -> RunResult:  # noqa: ANN401
    """Run a route list with a short-lived runner.

    Args:
        routes: Ordered route list (models or raw mappings).
        base_url: Server root URL.
        base_path: Path segment shared by all routes.
        **kwargs: Keyword `RouteRunner` arguments.

    Returns:
        The terminal outcome of the run.

    Raises:
        ConfigError: If the route list or arguments are malformed.
    """
    with RouteRunner(routes, base_url, base_path, **kwargs) as runner:
        return runner.run()
