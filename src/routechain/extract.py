"""Variable extraction from response bodies.

Reads the body paths declared by a route, checks expected literals and
returns the assignments to merge into the run context. The context
itself is never touched here: the runner applies the assignments once
the whole route has passed.
"""

import logging
from typing import TYPE_CHECKING

from routechain.errors import StepFailure
from routechain.lookups import BodyPath
from routechain.values import MISSING, same_value

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from routechain.schema import VariableSpec
    from routechain.values import RuntimeValue, Value

logger = logging.getLogger('routechain.extract')


def extract_variables(variables: 'Mapping[str, VariableSpec]',
                      body: 'RuntimeValue') -> dict[str, 'Value']:
    """Extract declared variables from a response body.

    Variables are processed in declaration order. A resolved value is
    registered under `name` (or the body path itself) unless `register`
    is false, and must strictly equal `value` when one is declared. An
    unresolved path fails only when the variable is `required`.

    Args:
        variables: Mapping of body paths to variable declarations.
        body: Decoded response body.

    Returns:
        The assignments to apply to the run context.

    Raises:
        StepFailure: If a required variable is missing or a value
            differs from the expected literal.
    """
    assignments: dict[str, Value] = {}

    for path, options in variables.items():
        value = BodyPath(path).get(body)

        if value is MISSING:
            if options.required:
                raise StepFailure(
                    f'Variable {path} is missing from the response body. '
                    f'Cannot be applied to the test context!',
                )
            continue

        if options.register:
            name = options.name or path
            assignments[name] = value
            logger.info('Assign new variable %s with value %r into the context!', name, value)

        if options.expects_value and not same_value(value, options.value):
            raise StepFailure(
                f'Variable {path} value should be {options.value!r} '
                f'but was detected as {value!r}',
            )

    return assignments
