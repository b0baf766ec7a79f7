"""JSON Schema of route files.

The schema documents the camelCase spelling of route files and can be
wired into editors to validate and complete them.
"""

from functools import cache
from json import dumps
from typing import TYPE_CHECKING

from pydantic.json_schema import GenerateJsonSchema

from routechain.schema import RouteList

if TYPE_CHECKING:
    from pydantic.json_schema import JsonSchemaValue
    from pydantic_core import core_schema as core

SCHEMA_TITLE = 'routechain'
SCHEMA_DESCRIPTION = 'JSON Schema for routechain route files'

#: Route list shown as an example in the schema.
EXAMPLE_ROUTES = [
    {
        'title': 'Create user',
        'method': 'POST',
        'url': 'users',
        'body': {'name': 'Bob'},
        'expect': {
            'statusCode': 201,
            'bodyType': 'object',
            'properties': {'id': 'number'},
        },
        'variables': {'id': {'name': 'userId', 'required': True}},
    },
    {
        'title': 'Get user',
        'url': 'users/${userId}',
        'expect': {'headers': {'content-type': 'application/json'}},
    },
]


class SchemaGenerator(GenerateJsonSchema):
    """JSON Schema generator for route files.

    Route files are read with validation aliases, so the schema is
    generated in validation mode. Fields typed as arbitrary runtime
    values are documented as unconstrained.
    """

    @classmethod
    @cache
    def make_schema(cls, indent: int | str | None = 4) -> str:
        """Generate the JSON Schema of a route list.

        Args:
            indent: Indentation level used for JSON formatting.

        Returns:
            Serialized JSON Schema string.
        """
        schema = {
            **RouteList.model_json_schema(
                schema_generator=cls,
                mode='validation',
            ),
            'title': SCHEMA_TITLE,
            'description': SCHEMA_DESCRIPTION,
            'examples': [EXAMPLE_ROUTES],
            '$schema': cls.schema_dialect,
        }

        return dumps(schema, ensure_ascii=False, sort_keys=True, indent=indent)

    def any_schema(self, schema: 'core.AnySchema') -> 'JsonSchemaValue':  # noqa: ARG002
        """Document arbitrary values, such as header and query values."""
        return {'description': 'Any JSON value'}
