"""Tests for response validation."""

from typing import Any

import pytest

from routechain.checks import check_body_type, check_headers, check_properties, check_status, validate_response
from routechain.errors import StepFailure
from routechain.schema import Expectation
from routechain.transport import Response
from routechain.values import MISSING


def test_check_status() -> None:
    """Report both codes of a status mismatch."""
    check_status(Response(status_code=200), 200)

    with pytest.raises(StepFailure) as error:
        check_status(Response(status_code=404), 200)

    assert error.value.message == (
        'Invalid response statusCode. Should be 200 but returned code 404'
    )
    assert error.value.status_code == 404


@pytest.mark.parametrize('body, expected', (
    pytest.param({'id': 1}, 'object', id='object'),
    pytest.param({'id': 1}, 'Object', id='case insensitive'),
    pytest.param([], 'array', id='array'),
    pytest.param('text', 'string', id='string'),
    pytest.param(None, 'null', id='null'),
    pytest.param(MISSING, 'undefined', id='empty body'),
))
def test_check_body_type(body: Any, expected: str) -> None:
    """Accept bodies of the expected type."""
    assert check_body_type(body, expected) == expected.lower()


def test_check_body_type_mismatch() -> None:
    """Report the expected and detected body types."""
    with pytest.raises(StepFailure, match=r'^Invalid type for the returned response body\. '
                                          r'Should be object but detected as array$'):
        check_body_type([{'id': 1}], 'object')


@pytest.mark.parametrize('properties', (
    pytest.param({'user.id': 'number'}, id='nested number'),
    pytest.param({'user.name': 'String'}, id='case insensitive'),
    pytest.param({'user.tags': 'array', 'user': 'object'}, id='containers'),
    pytest.param({'user.deleted': 'null'}, id='null value'),
    pytest.param({'user.deleted': 'any'}, id='any with null value'),
    pytest.param({'user.tags[0]': 'any'}, id='any indexed'),
))
def test_check_properties(properties: dict[str, str]) -> None:
    """Accept properties of the expected types."""
    body = {'user': {'id': 1, 'name': 'Bob', 'tags': ['a'], 'deleted': None}}

    check_properties(body, properties)


@pytest.mark.parametrize('properties, message', (
    pytest.param(
        {'user.id': 'string'},
        'Property user.id should be string but the returned property was number',
        id='type mismatch',
    ),
    pytest.param(
        {'user.email': 'any'},
        'Missing body response key user.email',
        id='missing key',
    ),
    pytest.param(
        {'user.id': 'number', 'user.active': 'boolean'},
        'Property user.active should be boolean but the returned property was number',
        id='bool is not number',
    ),
))
def test_check_properties_mismatch(properties: dict[str, str], message: str) -> None:
    """Report the first failing property."""
    body = {'user': {'id': 1, 'active': 1}}

    with pytest.raises(StepFailure) as error:
        check_properties(body, properties)

    assert error.value.message == message


def test_check_headers() -> None:
    """Match header values by substring, ignoring name case."""
    headers = {'content-type': 'application/json; charset=utf-8', 'x-total': '10'}

    check_headers(headers, {'Content-Type': 'application/json', 'X-TOTAL': '1'})


@pytest.mark.parametrize('expected, message', (
    pytest.param(
        {'X-Request-Id': 'abc'},
        'Key x-request-id is not present in the response headers!',
        id='missing header',
    ),
    pytest.param(
        {'Content-Type': 'text/html'},
        'Invalid headers value for the key content-type. '
        'Should be (or contains) text/html but was application/json',
        id='value mismatch',
    ),
))
def test_check_headers_mismatch(expected: dict[str, str], message: str) -> None:
    """Report missing headers and unexpected values."""
    with pytest.raises(StepFailure) as error:
        check_headers({'content-type': 'application/json'}, expected)

    assert error.value.message == message


def test_validate_status_first() -> None:
    """Check the status code before anything else."""
    response = Response(status_code=500, body=[], headers={})
    expect = Expectation.model_validate({
        'bodyType': 'object',
        'headers': {'x-missing': 'value'},
    })

    with pytest.raises(StepFailure, match=r'^Invalid response statusCode'):
        validate_response(response, expect)


def test_validate_properties_need_body_type() -> None:
    """Skip property checks unless an object body is expected."""
    response = Response(status_code=200, body={'id': 'text'})

    validate_response(response, Expectation.model_validate({
        'properties': {'id': 'number', 'missing': 'any'},
    }))


def test_validate_properties_on_object() -> None:
    """Check properties once the body resolved to an object."""
    response = Response(status_code=201, body={'id': 'text'})
    expect = Expectation.model_validate({
        'statusCode': 201,
        'bodyType': 'object',
        'properties': {'id': 'number'},
    })

    with pytest.raises(StepFailure, match=r'^Property id should be number'):
        validate_response(response, expect)


def test_validate_headers() -> None:
    """Check headers after the body."""
    response = Response(status_code=200, body=[1], headers={'content-type': 'application/json'})
    expect = Expectation.model_validate({
        'bodyType': 'array',
        'headers': {'content-type': 'json'},
    })

    validate_response(response, expect)


def test_check_numeric_headers() -> None:
    """Match numeric header expectations by their string form."""
    headers = {'x-total-count': '5', 'x-ratio': '0.5'}

    check_headers(headers, {'X-Total-Count': 5, 'x-ratio': 0.5})

    with pytest.raises(StepFailure, match=r'Should be \(or contains\) 6 but was 5$'):
        check_headers(headers, {'x-total-count': 6})


def test_numeric_header_expectation() -> None:
    """Accept numbers as expected header values in route files."""
    expect = Expectation.model_validate({'headers': {'x-total-count': 5}})
    response = Response(status_code=200, headers={'x-total-count': '5'})

    assert expect.headers == {'x-total-count': 5}
    validate_response(response, expect)
