"""Unit tests for schema properties and resource type definitions."""

import pytest
from pydantic import ValidationError

from tfradius.models.radius import (
    API_VERSION,
    INJECTED_DESCRIPTIONS,
    PropertyType,
    ResourceTypeDefinition,
    SchemaProperty,
)

STRING = SchemaProperty(type=PropertyType.STRING)


def _root(**extra: SchemaProperty) -> SchemaProperty:
    properties = {
        name: SchemaProperty(type=PropertyType.STRING, description=desc)
        for name, desc in INJECTED_DESCRIPTIONS.items()
    }
    properties.update(extra)
    return SchemaProperty(type=PropertyType.OBJECT, properties=properties)


class TestSchemaProperty:
    """Shape validation and rendering."""

    def test_to_dict_key_order(self):
        prop = SchemaProperty(
            type=PropertyType.OBJECT,
            description="Settings",
            properties={"name": STRING},
            additional_properties=STRING,
            required=["name"],
        )
        assert list(prop.to_dict()) == [
            "type",
            "description",
            "properties",
            "additionalProperties",
            "required",
        ]

    def test_any_has_no_type_key(self):
        prop = SchemaProperty(type=PropertyType.ANY, description="Anything")
        assert prop.to_dict() == {"description": "Anything"}

    def test_array_items(self):
        prop = SchemaProperty(type=PropertyType.ARRAY, items=STRING)
        assert prop.to_dict() == {"type": "array", "items": {"type": "string"}}

    def test_empty_required_is_omitted(self):
        prop = SchemaProperty(type=PropertyType.OBJECT, properties={}, required=[])
        assert prop.to_dict() == {"type": "object", "properties": {}}

    def test_items_only_on_arrays(self):
        with pytest.raises(ValidationError):
            SchemaProperty(type=PropertyType.STRING, items=STRING)

    def test_properties_only_on_objects(self):
        with pytest.raises(ValidationError):
            SchemaProperty(type=PropertyType.ARRAY, properties={"a": STRING})

    def test_required_must_be_declared(self):
        with pytest.raises(ValidationError):
            SchemaProperty(
                type=PropertyType.OBJECT, properties={"a": STRING}, required=["b"]
            )

    def test_with_description_returns_copy(self):
        described = STRING.with_description("Name")
        assert described.description == "Name"
        assert STRING.description is None


class TestResourceTypeDefinition:
    """Platform invariants and document shape."""

    def test_document_shape(self):
        definition = ResourceTypeDefinition(
            namespace="AWS.Network",
            resource_type_name="awsVpc",
            schema_def=_root(cidr=STRING),
            required=["application", "environment"],
        )
        doc = definition.to_document()

        assert doc["namespace"] == "AWS.Network"
        schema = doc["types"]["awsVpc"]["apiVersions"][API_VERSION]["schema"]
        assert schema["type"] == "object"
        assert list(schema["properties"]) == ["application", "environment", "cidr"]
        assert schema["required"] == ["application", "environment"]
        assert list(schema) == ["type", "properties", "required"]

    def test_properties_accessor(self):
        definition = ResourceTypeDefinition(
            namespace="A.B", resource_type_name="c", schema_def=_root()
        )
        assert set(definition.properties) == {"application", "environment"}
        assert definition.required == ["application", "environment"]

    def test_missing_platform_property(self):
        root = SchemaProperty(
            type=PropertyType.OBJECT, properties={"application": STRING}
        )
        with pytest.raises(ValidationError, match="environment"):
            ResourceTypeDefinition(
                namespace="A.B", resource_type_name="c", schema_def=root
            )

    def test_platform_property_must_be_string(self):
        root = _root(
            application=SchemaProperty(type=PropertyType.NUMBER),
        )
        with pytest.raises(ValidationError):
            ResourceTypeDefinition(
                namespace="A.B", resource_type_name="c", schema_def=root
            )

    def test_platform_property_must_be_required(self):
        with pytest.raises(ValidationError):
            ResourceTypeDefinition(
                namespace="A.B",
                resource_type_name="c",
                schema_def=_root(),
                required=["application"],
            )

    def test_unknown_required_name(self):
        with pytest.raises(ValidationError):
            ResourceTypeDefinition(
                namespace="A.B",
                resource_type_name="c",
                schema_def=_root(),
                required=["application", "environment", "ghost"],
            )

    def test_duplicate_required_name(self):
        with pytest.raises(ValidationError):
            ResourceTypeDefinition(
                namespace="A.B",
                resource_type_name="c",
                schema_def=_root(),
                required=["application", "environment", "application"],
            )

    def test_root_must_be_object(self):
        with pytest.raises(ValidationError):
            ResourceTypeDefinition(
                namespace="A.B", resource_type_name="c", schema_def=STRING
            )

    def test_blank_namespace(self):
        with pytest.raises(ValidationError):
            ResourceTypeDefinition(
                namespace=" ", resource_type_name="c", schema_def=_root()
            )
