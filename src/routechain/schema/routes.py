"""Route definitions.

A route is one declarative HTTP test step: how to build the request,
what the response must look like, and which response values are
exported into the run context for later routes.

Field names follow the camelCase spelling of route files (`statusCode`,
`bodyType`, `formData`); snake_case spellings are accepted as well.
"""

from typing import Any

from pydantic import AliasChoices, Field, RootModel, field_validator

from routechain.models import SchemaModel
from routechain.names import Method, Variable  # noqa: TC001
from routechain.values import Value  # noqa: TC001

DEFAULT_FORM_NAME = 'file'
DEFAULT_STATUS_CODE = 200


class FileUpload(SchemaModel):
    """File attached to a route as a multipart upload."""

    path: str | None = Field(
        default=None,
        title='File path',
        description=(
            'Path of the file to upload. The file is opened when the route '
            'runs; a missing file fails the route, not the route list.'
        ),
    )

    form_name: str = Field(
        default=DEFAULT_FORM_NAME,
        validation_alias=AliasChoices('formName', 'form_name'),
        title='Form field name',
        description='Name of the multipart field carrying the file content.',
    )


class Expectation(SchemaModel):
    """Expected shape of a route response."""

    status_code: int = Field(
        default=DEFAULT_STATUS_CODE,
        validation_alias=AliasChoices('statusCode', 'status_code'),
        title='Expected status code',
    )

    body_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices('bodyType', 'body_type'),
        title='Expected body type',
        description=(
            'Type tag of the decoded body (`object`, `array`, `string`, '
            '`number`, `boolean`, `null`). Compared case-insensitively.'
        ),
    )

    properties: dict[str, str] | None = Field(
        default=None,
        title='Expected body properties',
        description=(
            'Mapping of body paths to expected type tags. Only checked when '
            'the body type is expected and resolved to `object`. The `any` '
            'type only requires the path to exist.'
        ),
    )

    headers: dict[str, str | int | float] | None = Field(
        default=None,
        title='Expected headers',
        description=(
            'Mapping of header names to substrings that the response header '
            'values must contain. Names are compared case-insensitively.'
        ),
    )


class VariableSpec(SchemaModel):
    """Declaration of a value exported from a response body."""

    name: Variable | None = Field(
        default=None,
        title='Variable name',
        description='Context name of the value. Defaults to the body path itself.',
    )

    register: bool = Field(
        default=True,
        title='Register in context',
        description='Whether the value is stored in the run context.',
    )

    required: bool = Field(
        default=False,
        title='Required',
        description='Whether a missing body path fails the route.',
    )

    value: Value = Field(
        default=None,
        title='Expected value',
        description=(
            'Literal the extracted value must be strictly equal to. '
            'An explicit `null` expects a null value.'
        ),
    )

    @property
    def expects_value(self) -> bool:
        """Whether an expected literal was declared, including `null`."""
        return 'value' in self.model_fields_set


class RouteSpec(SchemaModel):
    """One declarative HTTP test step."""

    title: str = Field(
        title='Title',
        description='Human-readable label used in logs and failure reports.',
    )

    method: Method = Field(
        default='GET',
        title='HTTP method',
    )

    model: str | None = Field(
        default=None,
        title='Model segment',
        description='Optional path segment inserted between the base path and the URL.',
    )

    url: str = Field(
        title='URL',
        description='Route URL relative to the base path. May contain `${name}` placeholders.',
    )

    headers: dict[str, Any] | None = Field(
        default=None,
        title='Request headers',
        description='Request headers; string values may contain `${name}` placeholders.',
    )

    qs: dict[str, Any] | None = Field(
        default=None,
        title='Query string parameters',
    )

    body: Value = Field(
        default=None,
        title='JSON body',
    )

    form_data: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices('formData', 'form_data'),
        title='Form data',
    )

    file: FileUpload | None = Field(
        default=None,
        title='File upload',
    )

    expect: Expectation = Field(
        default_factory=Expectation,
        title='Response expectations',
    )

    variables: dict[str, VariableSpec] = Field(
        default_factory=dict,
        title='Exported variables',
        description=(
            'Mapping of body paths to variable declarations. Values are '
            'exported in declaration order once the response is validated.'
        ),
    )

    skip: bool = Field(
        default=False,
        title='Skip',
        description='Bypass the route entirely.',
    )

    debug: bool = Field(
        default=False,
        title='Debug',
        description='Log the full request and response of the route.',
    )

    @field_validator('method')
    @classmethod
    def normalize_method(cls, value: str) -> str:
        """Normalise the HTTP method to upper case."""
        return value.upper()

    @property
    def uploads_file(self) -> bool:
        """Whether the route stages a file upload."""
        return self.file is not None and self.file.path is not None


class RouteList(RootModel[list[RouteSpec]]):
    """Ordered list of routes forming a run."""
