"""Tests for route list loading."""

from typing import TYPE_CHECKING, Any

import pytest

from routechain.errors import ConfigError
from routechain.loader import load_routes, load_routes_file, parse_routes
from routechain.schema import RouteSpec

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem

TEST_ROUTES = """
- title: Create user
  method: post
  url: users
  body:
    name: Bob
  expect:
    statusCode: 201
    bodyType: object
    properties:
      id: number
  variables:
    id:
      name: userId
      required: true

- title: Upload avatar
  method: POST
  url: users/${userId}/avatar
  file:
    path: ./avatar.png
    formName: avatar
  skip: true
"""


def test_load_routes() -> None:
    """Parse a YAML route list with camelCase fields."""
    first, second = load_routes(TEST_ROUTES)

    assert first.title == 'Create user'
    assert first.method == 'POST'
    assert first.body == {'name': 'Bob'}
    assert first.expect.status_code == 201
    assert first.expect.body_type == 'object'
    assert first.expect.properties == {'id': 'number'}
    assert first.variables['id'].name == 'userId'
    assert first.variables['id'].required

    assert second.url == 'users/${userId}/avatar'
    assert second.file is not None
    assert second.file.form_name == 'avatar'
    assert second.uploads_file
    assert second.skip


def test_load_routes_mapping() -> None:
    """Read the route list from the `routes` key."""
    routes = load_routes('{"routes": [{"title": "List users", "url": "users"}]}')

    assert [route.title for route in routes] == ['List users']


def test_load_empty_route_list() -> None:
    """Accept an empty route list."""
    assert load_routes('[]') == ()


def test_load_invalid_yaml() -> None:
    """Report the position of YAML syntax errors."""
    with pytest.raises(ConfigError, match=r'^Invalid YAML') as error:
        load_routes('- title: a\n  url: [users\n', filename='routes.yaml')

    assert error.value.context is not None
    assert error.value.context['filename'] == 'routes.yaml'
    assert error.value.context['line_num'] is not None


def test_load_invalid_route() -> None:
    """Report the position and title of malformed routes."""
    content = '- title: First\n  url: a\n- title: Second\n'

    with pytest.raises(ConfigError) as error:
        load_routes(content, filename='routes.yaml')

    assert error.value.message == 'Field required (url)'
    assert error.value.context is not None
    assert error.value.context['step_num'] == 1
    assert error.value.context['title'] == 'Second'
    assert 'on step 1 "Second"' in str(error.value)


@pytest.mark.parametrize('routes, message', (
    pytest.param(None, r'^Routes cannot be undefined', id='undefined'),
    pytest.param({'title': 'a', 'url': 'b'}, r'^Routes should be a list', id='mapping'),
    pytest.param('routes', r'^Routes should be a list', id='string'),
    pytest.param(42, r'^Routes should be a list', id='number'),
    pytest.param([42], r'^Invalid route definition', id='scalar route'),
    pytest.param([{'title': 'a'}], r'^Field required', id='missing url'),
    pytest.param([{'url': 'a'}], r'^Field required', id='missing title'),
    pytest.param([{'title': 'a', 'url': 'b', 'expects': {}}], r'^Extra inputs are not permitted', id='unknown field'),
    pytest.param([{'title': 'a', 'url': 'b', 'method': 'GET /'}], r'^String should match pattern', id='bad method'),
    pytest.param(
        [{'title': 'a', 'url': 'b', 'variables': {'id': {'name': 'bad name'}}}],
        r'^String should match pattern',
        id='bad variable name',
    ),
))
def test_parse_invalid_routes(routes: Any, message: str) -> None:
    """Reject malformed route lists before running anything."""
    with pytest.raises(ConfigError, match=message):
        parse_routes(routes)


def test_parse_route_models() -> None:
    """Accept already validated routes."""
    route = RouteSpec(title='List users', url='users')

    assert parse_routes([route, {'title': 'Get user', 'url': 'users/1'}])[0] is route


def test_load_routes_file(fs: 'FakeFilesystem') -> None:
    """Read routes from a file."""
    fs.create_file('/project/routes.yaml', contents=TEST_ROUTES)

    routes = load_routes_file('/project/routes.yaml')

    assert len(routes) == 2


@pytest.mark.usefixtures('fs')
def test_load_missing_routes_file() -> None:
    """Report unreadable route files as configuration errors."""
    with pytest.raises(ConfigError, match=r'^Can not read route file'):
        load_routes_file('/project/missing.yaml')


def test_load_invalid_routes_file(fs: 'FakeFilesystem') -> None:
    """Report the file name of malformed route files."""
    fs.create_file('/project/routes.yaml', contents='- title: a\n')

    with pytest.raises(ConfigError) as error:
        load_routes_file('/project/routes.yaml')

    assert error.value.context is not None
    assert error.value.context['filename'] == '/project/routes.yaml'


def test_invalid_route_element() -> None:
    """Narrow the reported route data to the failing field."""
    route = {'title': 'Login', 'url': 'login', 'variables': {'id': {'name': 'bad name'}}}

    with pytest.raises(ConfigError) as error:
        parse_routes([route], filename='routes.yaml')

    assert error.value.message.endswith('(variables.id.name)')
    assert error.value.context is not None
    assert error.value.context['element'] == {'name': 'bad name'}
    assert error.value.context['title'] == 'Login'
    assert error.value.context['step_num'] == 0
