from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PropertyType(str, Enum):
    """Type tags allowed in a resource-type schema."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ANY = "any"


class SchemaProperty(BaseModel):
    """
    One node of a JSON-Schema-shaped property tree.

    `any` is an internal tag: it is rendered without a `type` keyword so the
    value stays unconstrained in the published schema.
    """

    type: PropertyType = Field(..., description="Type tag of the property.")
    description: str | None = Field(
        default=None, description="Human-readable description of the property."
    )
    properties: dict[str, "SchemaProperty"] | None = Field(
        default=None,
        description="Fixed attributes, in declaration order (objects only).",
    )
    items: "SchemaProperty | None" = Field(
        default=None, description="Element schema (arrays only)."
    )
    additional_properties: "SchemaProperty | None" = Field(
        default=None,
        description="Value schema for open maps (objects only).",
    )
    required: list[str] | None = Field(
        default=None,
        description="Locally-required attribute names (objects only).",
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_shape(self) -> "SchemaProperty":
        is_object = self.type == PropertyType.OBJECT
        if not is_object and (
            self.properties is not None
            or self.additional_properties is not None
            or self.required is not None
        ):
            raise ValueError(
                "'properties', 'additional_properties' and 'required' are only "
                "valid on object properties"
            )
        if self.items is not None and self.type != PropertyType.ARRAY:
            raise ValueError("'items' is only valid on array properties")
        if self.required:
            declared = set(self.properties or {})
            missing = [name for name in self.required if name not in declared]
            if missing:
                raise ValueError(f"Required names not declared as properties: {missing}")
        return self

    def with_description(self, description: str | None) -> "SchemaProperty":
        """Return a copy of this property with a new description."""
        return self.model_copy(update={"description": description})

    def to_dict(self) -> dict[str, Any]:
        """
        Render the property in schema key order.

        Keys come out as: type, description, properties, additionalProperties,
        items, required. Absent keys are skipped.
        """
        result: dict[str, Any] = {}
        if self.type != PropertyType.ANY:
            result["type"] = self.type.value
        if self.description:
            result["description"] = self.description
        if self.properties is not None:
            result["properties"] = {
                name: prop.to_dict() for name, prop in self.properties.items()
            }
        if self.additional_properties is not None:
            result["additionalProperties"] = self.additional_properties.to_dict()
        if self.items is not None:
            result["items"] = self.items.to_dict()
        if self.required:
            result["required"] = list(self.required)
        return result


SchemaProperty.model_rebuild()
