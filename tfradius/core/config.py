"""Conversion settings shared by the CLI and the orchestrator."""

import logging
import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tfradius.models.radius import API_VERSION

logger = logging.getLogger(__name__)

ENV_MAX_TYPE_DEPTH = "TFRADIUS_MAX_TYPE_DEPTH"
ENV_GIT_TIMEOUT = "TFRADIUS_GIT_TIMEOUT"
ENV_GIT_TOKEN = "TFRADIUS_GIT_TOKEN"


class ConversionSettings(BaseModel):
    """Caller-controlled knobs for one conversion."""

    namespace_override: str | None = Field(
        None, description="Namespace used verbatim instead of inferring one."
    )
    resource_type_override: str | None = Field(
        None, description="Resource type name used verbatim instead of inferring one."
    )
    max_type_depth: int = Field(
        64, ge=1, description="Deepest type nesting the mapper will follow."
    )
    api_version: str = Field(API_VERSION, description="API version literal.")
    git_timeout_s: float = Field(
        300, gt=0, description="Timeout in seconds for cloning a module source."
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("namespace_override", "resource_type_override")
    @classmethod
    def _blank_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def from_env(cls, **overrides: Any) -> "ConversionSettings":
        """
        Build settings from the environment, then apply explicit overrides.

        Overrides whose value is None are ignored so unset CLI flags do not
        mask environment values.
        """
        values: dict[str, Any] = {}
        if depth := os.environ.get(ENV_MAX_TYPE_DEPTH):
            values["max_type_depth"] = depth
        if timeout := os.environ.get(ENV_GIT_TIMEOUT):
            values["git_timeout_s"] = timeout

        values.update({k: v for k, v in overrides.items() if v is not None})
        logger.debug(f"Conversion settings: {values}")
        return cls(**values)


def git_token() -> str | None:
    """Git access token from the environment; never logged."""
    return os.environ.get(ENV_GIT_TOKEN) or None
