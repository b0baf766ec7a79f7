"""Response validation.

Checks a settled response against the expectations of a route, in a
fixed order: status code, body type, body properties, then headers.
The first mismatch raises `StepFailure`; nothing is collected past it.
"""

import logging
from typing import TYPE_CHECKING

from routechain.errors import StepFailure
from routechain.lookups import BodyPath
from routechain.templates import stringify
from routechain.values import MISSING, type_tag

if TYPE_CHECKING:
    from collections.abc import Mapping

if TYPE_CHECKING:
    from routechain.schema import Expectation
    from routechain.transport import Response
    from routechain.values import RuntimeValue

logger = logging.getLogger('routechain.checks')

#: Property type accepting any value, provided the path exists.
ANY_TYPE = 'any'


def check_status(response: 'Response', expected: int) -> None:
    """Check the response status code.

    Raises:
        StepFailure: If the status code differs from the expected one.
    """
    if response.status_code != expected:
        raise StepFailure(
            f'Invalid response statusCode. Should be {expected} '
            f'but returned code {response.status_code}',
            status_code=response.status_code,
        )

    logger.info('    statusCode = %s', expected)


def check_body_type(body: 'RuntimeValue', expected: str) -> str:
    """Check the type tag of the response body.

    Args:
        body: Decoded response body.
        expected: Expected type tag, case-insensitive.

    Returns:
        The type tag of the body.

    Raises:
        StepFailure: If the tags differ.
    """
    actual = type_tag(body)
    expected = expected.lower()

    if actual != expected:
        raise StepFailure(
            f'Invalid type for the returned response body. '
            f'Should be {expected} but detected as {actual}',
        )

    logger.info('    bodyType = %s', expected)

    return actual


def check_properties(body: 'RuntimeValue', properties: 'Mapping[str, str]') -> None:
    """Check the type tags of body properties.

    Args:
        body: Decoded response body.
        properties: Mapping of body paths to expected type tags.

    Raises:
        StepFailure: If a path is missing or its type tag differs.
    """
    logger.info('    -> Body properties =')

    for key, expected in properties.items():
        value = BodyPath(key).get(body)
        if value is MISSING:
            raise StepFailure(f'Missing body response key {key}')

        expected = expected.lower()
        if expected != ANY_TYPE:
            actual = type_tag(value)
            if actual != expected:
                raise StepFailure(
                    f'Property {key} should be {expected} '
                    f'but the returned property was {actual}',
                )

        logger.info('        Key: %s = %s', key, expected)


def check_headers(headers: 'Mapping[str, str]', expected: 'Mapping[str, str | int | float]') -> None:
    """Check response header values by substring.

    Args:
        headers: Response headers with lower-cased names.
        expected: Mapping of header names to expected substrings. Numbers
            are matched by their string form.

    Raises:
        StepFailure: If a header is absent or does not contain its substring.
    """
    logger.info('    -> Header properties :')

    lowered = {key.lower(): value for key, value in headers.items()}

    for key, value in expected.items():
        name = key.lower()
        substring = stringify(value)
        if name not in lowered:
            raise StepFailure(f'Key {name} is not present in the response headers!')

        actual = lowered[name]
        if substring not in actual:
            raise StepFailure(
                f'Invalid headers value for the key {name}. '
                f'Should be (or contains) {substring} but was {actual}',
            )

        logger.info('        Key: %s = %s', name, substring)


def validate_response(response: 'Response', expect: 'Expectation') -> None:
    """Validate a response against route expectations.

    Properties are only checked when a body type is expected and the
    body resolved to an object.

    Args:
        response: Settled response.
        expect: Route expectations.

    Raises:
        StepFailure: On the first failing check.
    """
    check_status(response, expect.status_code)

    if expect.body_type is not None:
        body_type = check_body_type(response.body, expect.body_type)
        if body_type == 'object' and expect.properties is not None:
            check_properties(response.body, expect.properties)

    if expect.headers is not None:
        check_headers(response.headers, expect.headers)
