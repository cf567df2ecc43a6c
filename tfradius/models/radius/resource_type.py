from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .schema_property import PropertyType, SchemaProperty

API_VERSION = "2025-01-01-preview"

APPLICATION_PROPERTY = "application"
ENVIRONMENT_PROPERTY = "environment"
INJECTED_PROPERTIES: tuple[str, ...] = (APPLICATION_PROPERTY, ENVIRONMENT_PROPERTY)

INJECTED_DESCRIPTIONS: dict[str, str] = {
    APPLICATION_PROPERTY: "The resource ID of the application.",
    ENVIRONMENT_PROPERTY: "The resource ID of the environment.",
}


class ResourceTypeDefinition(BaseModel):
    """
    A Radius resource type generated from one Terraform module.

    The root schema always declares the platform properties `application`
    and `environment`, and both are always required.
    """

    namespace: str = Field(..., description="Dot-delimited namespace, e.g. AWS.Network.")
    resource_type_name: str = Field(..., description="camelCase resource type name.")
    api_version: str = Field(
        default=API_VERSION, description="Fixed API version literal."
    )
    schema_def: SchemaProperty = Field(
        ..., description="Root object schema of the resource type."
    )
    required: list[str] = Field(
        default_factory=lambda: list(INJECTED_PROPERTIES),
        description="Required root property names, in order.",
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("namespace", "resource_type_name", "api_version")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @model_validator(mode="after")
    def _check_platform_properties(self) -> "ResourceTypeDefinition":
        if self.schema_def.type != PropertyType.OBJECT:
            raise ValueError("The root schema must be an object")

        properties = self.schema_def.properties or {}
        for name in INJECTED_PROPERTIES:
            prop = properties.get(name)
            if prop is None or prop.type != PropertyType.STRING:
                raise ValueError(f"Root schema must declare '{name}' as a string")
            if name not in self.required:
                raise ValueError(f"'{name}' must be required")

        unknown = [name for name in self.required if name not in properties]
        if unknown:
            raise ValueError(f"Required names not declared as properties: {unknown}")
        if len(set(self.required)) != len(self.required):
            raise ValueError("Required names must be unique")
        return self

    @property
    def properties(self) -> dict[str, SchemaProperty]:
        return dict(self.schema_def.properties or {})

    def to_document(self) -> dict[str, Any]:
        """Render the definition as the nested document Radius expects."""
        schema = self.schema_def.to_dict()
        schema["required"] = list(self.required)

        return {
            "namespace": self.namespace,
            "types": {
                self.resource_type_name: {
                    "apiVersions": {
                        self.api_version: {
                            "schema": schema,
                        }
                    }
                }
            },
        }
