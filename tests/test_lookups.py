"""Tests for body path resolution."""

from typing import Any

import pytest

from routechain.lookups import BodyPath
from routechain.values import MISSING


@pytest.mark.parametrize('path, expected', (
    pytest.param('id', ('id',), id='single key'),
    pytest.param('user.id', ('user', 'id'), id='dotted'),
    pytest.param('items[0].name', ('items', 0, 'name'), id='index'),
    pytest.param('items.0.name', ('items', '0', 'name'), id='dotted index'),
    pytest.param("headers['x-total']", ('headers', 'x-total'), id='single quoted key'),
    pytest.param('data["a.b"]', ('data', 'a.b'), id='double quoted key with dot'),
    pytest.param('', (), id='empty'),
))
def test_split_path(path: str, expected: tuple) -> None:
    """Split dot and bracket paths into segments."""
    assert BodyPath.split(path) == expected


@pytest.mark.parametrize('path, body, expected', (
    pytest.param('id', {'id': 42}, 42, id='top level'),
    pytest.param('user.id', {'user': {'id': 42}}, 42, id='nested mapping'),
    pytest.param('items[1].id', {'items': [{'id': 1}, {'id': 2}]}, 2, id='bracket index'),
    pytest.param('items.1.id', {'items': [{'id': 1}, {'id': 2}]}, 2, id='dotted index'),
    pytest.param('[0]', {'0': 'zero'}, 'zero', id='numeric mapping key'),
    pytest.param('[1]', ['a', 'b'], 'b', id='array body'),
    pytest.param('user.name', {'user': {'name': None}}, None, id='explicit null'),
))
def test_get_path(path: str, body: Any, expected: Any) -> None:
    """Resolve paths against decoded bodies."""
    resolver = BodyPath(path)

    assert resolver.get(body) == expected
    assert resolver.has(body)


@pytest.mark.parametrize('path, body', (
    pytest.param('id', {}, id='absent key'),
    pytest.param('user.id', {'user': 42}, id='scalar container'),
    pytest.param('items[5]', {'items': [1, 2]}, id='out of range'),
    pytest.param('items.first', {'items': [1, 2]}, id='non numeric index'),
    pytest.param('length', 'text', id='string body'),
    pytest.param('id', MISSING, id='missing body'),
    pytest.param('', {'': 1}, id='empty path'),
))
def test_unresolved_path(path: str, body: Any) -> None:
    """Return the missing marker instead of raising."""
    resolver = BodyPath(path)

    assert resolver.get(body) is MISSING
    assert not resolver.has(body)


def test_unresolved_path_default() -> None:
    """Return a custom default for unresolved paths."""
    assert BodyPath('user.id').get({}, None) is None
