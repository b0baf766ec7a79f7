"""Declarative HTTP API route runner.

The `routechain` package runs ordered lists of declarative HTTP routes
against a server that is already listening, validates every response
and threads values extracted from one response into later requests.

Key features:
- routes written in Python or YAML/JSON route files, validated upfront;
- `${name}` placeholders in URLs and headers resolved from the run context;
- status code, body type, property type and header checks;
- fail-fast sequential execution with a structured run result.
"""

from routechain.errors import ConfigError, RouteError, StepFailure, TransportError, UploadError
from routechain.loader import load_routes, load_routes_file
from routechain.runner import RouteRunner, RunResult, StepResult, StepState, run_routes
from routechain.schema import RouteSpec

__all__ = (
    'ConfigError',
    'RouteError',
    'RouteRunner',
    'RouteSpec',
    'RunResult',
    'StepFailure',
    'StepResult',
    'StepState',
    'TransportError',
    'UploadError',
    'load_routes',
    'load_routes_file',
    'run_routes',
)
