"""Base Pydantic models and runtime settings.

This module defines the foundational model classes used by route
definitions and the settings model resolving runner configuration
from the environment.
"""

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, PositiveFloat
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_PATH = 'api'


class SchemaModel(BaseModel):
    """Base immutable model for all route elements.

    Design principles enforced by this model:
        - Immutability: route definitions cannot be modified after
          creation, so resolving templates always produces new values
          instead of rewriting caller-owned configuration.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos in route files.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
        populate_by_name=True,
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runner settings.

    Unknown environment variables are ignored so that the surrounding
    environment may contain unrelated values.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )


class RunnerSettings(SettingsModel):
    """Runner configuration resolved from `ROUTECHAIN_*` variables.

    Values passed explicitly (for example, from command-line options)
    take precedence over the environment.
    """

    model_config = SettingsConfigDict(
        env_prefix='ROUTECHAIN_',
        frozen=True,
        extra='ignore',
    )

    base_url: AnyHttpUrl | None = Field(
        default=None,
        title='Base URL',
        description='Root URL of the server under test, for example `http://localhost:3000`.',
    )

    base_path: str = Field(
        default=DEFAULT_BASE_PATH,
        title='Base path',
        description='Path segment inserted between the base URL and every route URL.',
    )

    timeout: PositiveFloat | None = Field(
        default=None,
        title='Request timeout',
        description=(
            'Timeout in seconds applied to every request. '
            'When unset, a request that never completes stalls the run.'
        ),
    )

    verify_ssl: bool = Field(
        default=True,
        title='Verify TLS certificates',
    )

    follow_redirects: bool = Field(
        default=True,
        title='Follow redirects',
    )
