"""Radius resource-type models and YAML serialization."""

from .builder import ResourceTypeBuilder, ResourceTypeWriter, create_resource_type
from .resource_type import (
    API_VERSION,
    APPLICATION_PROPERTY,
    ENVIRONMENT_PROPERTY,
    INJECTED_DESCRIPTIONS,
    INJECTED_PROPERTIES,
    ResourceTypeDefinition,
)
from .schema_property import PropertyType, SchemaProperty

__all__ = [
    "API_VERSION",
    "APPLICATION_PROPERTY",
    "ENVIRONMENT_PROPERTY",
    "INJECTED_DESCRIPTIONS",
    "INJECTED_PROPERTIES",
    "PropertyType",
    "ResourceTypeBuilder",
    "ResourceTypeDefinition",
    "ResourceTypeWriter",
    "SchemaProperty",
    "create_resource_type",
]
