"""Command-line host for routechain.

The `run` command loads a route file, runs it against a server that is
already listening and exits with status 0 when every route passed and
1 when a route failed. The `schema` command prints the JSON Schema of
route files.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from click import BadParameter, ClickException, Context, argument, echo, group, option, pass_context, style
from click import Path as PathParam
from pydantic import ValidationError

from routechain.errors import ConfigError
from routechain.jsonschema import SchemaGenerator
from routechain.loader import load_routes_file
from routechain.models import RunnerSettings
from routechain.runner import RouteRunner
from routechain.transport import HttpxTransport

if TYPE_CHECKING:
    from routechain.runner import RunResult

LOG_FORMAT = '%(message)s'

RoutesFilepath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)

OutputFilepath = PathParam(
    dir_okay=False,
    writable=True,
    path_type=Path,
)


def _parse_variables(values: tuple[str, ...]) -> dict[str, str]:
    """Parse `NAME=VALUE` pairs into an initial run context.

    Args:
        values: Raw option values.

    Returns:
        Mapping of variable names to string values.

    Raises:
        BadParameter: If a pair has no `=` or an empty name.
    """
    variables = {}
    for item in values:
        name, separator, value = item.partition('=')
        if not separator or not name:
            raise BadParameter(f'{item!r} is not a NAME=VALUE pair', param_hint='--var')
        variables[name] = value

    return variables


def _configure_logging(verbose: int, quiet: bool) -> None:
    """Configure the root logger for console output."""
    level = logging.INFO
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=LOG_FORMAT)

    # transport internals stay quiet unless asked for twice
    if verbose < 2:  # noqa: PLR2004
        logging.getLogger('httpx').setLevel(logging.WARNING)
        logging.getLogger('httpcore').setLevel(logging.WARNING)


def _report(result: 'RunResult') -> None:
    """Print the run summary."""
    if result.success:
        echo('\n\n' + style('All tests successfully passed!', fg='green', bold=True))
        return

    error = result.error
    status_code = (error.status_code if error else None) or 'unknown code'
    message = error.message if error else 'unknown error'

    echo(f'\nstatusCode: {style(str(status_code), fg="yellow", bold=True)}', err=True)
    echo(f'message: {message}', err=True)
    if error and error.context:
        for line in (*error.location_lines(error.context), *error.snippet_lines(error.context)):
            echo(line, err=True)


@group(help='Declarative HTTP API route runner.')
def cli() -> None:
    """Root CLI group for routechain tools."""
    return None


@cli.command(
    name='schema',
    help='Print the route file JSON Schema to standard output or write it to a file.',
)
@option(
    '-o', '--output',
    type=OutputFilepath,
    help='Write the schema to this file instead of standard output.',
)
def print_schema(output: Path | None) -> None:
    """Generate and print the JSON Schema."""
    schema = SchemaGenerator.make_schema()
    if output is None:
        echo(schema)
        return

    output.write_text(schema + '\n', encoding='utf-8')
    echo(f'Schema written to {output}')


@cli.command(
    name='run',
    help=(
        'Run the routes of a YAML or JSON route file in order against a '
        'running server. Stops at the first failing route.'
    ),
)
@option(
    '-u', '--base-url',
    help='Root URL of the server under test [env: ROUTECHAIN_BASE_URL].',
)
@option(
    '-p', '--base-path',
    help='Path segment inserted before every route URL [default: api].',
)
@option(
    '-t', '--timeout',
    type=float,
    help='Request timeout in seconds. Requests wait forever by default.',
)
@option(
    '--var', 'variables',
    multiple=True,
    metavar='NAME=VALUE',
    help='Initial context variable. May be repeated.',
)
@option(
    '--raise-for-status',
    is_flag=True,
    default=False,
    help='Fail a route as soon as the server answers with a non-2xx status.',
)
@option('-v', '--verbose', count=True, help='Log requests and responses.')
@option('-q', '--quiet', is_flag=True, default=False, help='Only log failures.')
@argument('routes', type=RoutesFilepath)
@pass_context
def run_routes(ctx: Context, routes: Path, base_url: str | None, base_path: str | None,  # noqa: PLR0913
               timeout: float | None, variables: tuple[str, ...],
               raise_for_status: bool, verbose: int, quiet: bool) -> None:
    """Run a route file and exit with the run status."""
    _configure_logging(verbose, quiet)

    overrides = {
        key: value
        for key, value in (
            ('base_url', base_url),
            ('base_path', base_path),
            ('timeout', timeout),
        )
        if value is not None
    }

    try:
        settings = RunnerSettings(**overrides)
    except ValidationError as base:
        raise ClickException(f'Invalid settings: {base}') from base

    try:
        route_list = load_routes_file(routes)
        transport = HttpxTransport(
            timeout=settings.timeout,
            verify_ssl=settings.verify_ssl,
            follow_redirects=settings.follow_redirects,
            raise_for_status=raise_for_status,
        )
        with transport, RouteRunner(
            route_list,
            settings=settings,
            transport=transport,
            context=_parse_variables(variables),
        ) as runner:
            result = runner.run()

    except ConfigError as base:
        raise ClickException(f'{base}') from base

    _report(result)
    ctx.exit(result.exit_code)


if __name__ == '__main__':
    cli()
