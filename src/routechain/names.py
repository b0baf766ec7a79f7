"""Name patterns used by route definitions.

This module defines the placeholder syntax recognised in URLs and
header values, and the validation rules for HTTP methods and
variable names declared by routes.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated

from pydantic import Field

#: Characters allowed in a placeholder identifier.
_IDENTIFIER_PATTERN = r'[a-zA-Z0-9._-]+'

#: Compiled pattern for `${identifier}` placeholders.
PLACEHOLDER_PATTERN = regexp(
    rf'\$\{{(?P<name>{_IDENTIFIER_PATTERN})\}}',
    flags=ASCII,
)


Method = Annotated[
    str, Field(
        pattern=r'^[A-Za-z]+$',
        title='HTTP method',
        description=(
            'HTTP method used to issue the request. '
            'The value is case-insensitive and normalised to upper case.'
        ),
        examples=[
            'GET',
            'post',
        ],
    ),
]

Variable = Annotated[
    str, Field(
        pattern=rf'^{_IDENTIFIER_PATTERN}$',
        title='Variable identifier',
        description=(
            'Name under which a value is stored in the run context and '
            'referenced by `${name}` placeholders in later routes. '
            'Names may contain ASCII letters, digits, dots, underscores '
            'and dashes.'
        ),
        examples=[
            'userId',
            'auth.token',
        ],
    ),
]
