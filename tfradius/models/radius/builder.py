import os
from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from .resource_type import API_VERSION, ResourceTypeDefinition
from .schema_property import PropertyType, SchemaProperty


class ResourceTypeBuilder:
    """Fluent builder for creating ResourceTypeDefinition objects"""

    def __init__(self, namespace: str, resource_type_name: str):
        self.namespace = namespace
        self.resource_type_name = resource_type_name
        self._api_version = API_VERSION
        self._properties: dict[str, SchemaProperty] = {}
        self._required: list[str] = []

    def with_api_version(self, api_version: str) -> "ResourceTypeBuilder":
        """Overrides the API version literal"""
        self._api_version = api_version
        return self

    def with_property(self, name: str, prop: SchemaProperty) -> "ResourceTypeBuilder":
        """Adds a root property, keeping insertion order"""
        if name in self._properties:
            raise ValueError(f"Property '{name}' is already declared")
        self._properties[name] = prop
        return self

    def with_properties(
        self, properties: dict[str, SchemaProperty]
    ) -> "ResourceTypeBuilder":
        """Adds multiple root properties"""
        for name, prop in properties.items():
            self.with_property(name, prop)
        return self

    def with_required(self, *names: str) -> "ResourceTypeBuilder":
        """Marks root properties as required, skipping duplicates"""
        for name in names:
            if name not in self._required:
                self._required.append(name)
        return self

    def has_property(self, name: str) -> bool:
        return name in self._properties

    def build(self) -> ResourceTypeDefinition:
        """Builds the final ResourceTypeDefinition object"""
        root = SchemaProperty(
            type=PropertyType.OBJECT, properties=dict(self._properties)
        )
        return ResourceTypeDefinition(
            namespace=self.namespace,
            resource_type_name=self.resource_type_name,
            api_version=self._api_version,
            schema_def=root,
            required=list(self._required),
        )


class ResourceTypeWriter:
    """Serializes resource type definitions to canonical YAML"""

    def __init__(self):
        self._yaml = YAML()
        self._configure_yaml()

    def _configure_yaml(self):
        """Fixed layout so equal definitions always produce equal bytes"""
        self._yaml.indent(mapping=2, sequence=4, offset=2)
        self._yaml.default_flow_style = False
        self._yaml.allow_unicode = True
        self._yaml.width = 4096

    def to_yaml(
        self, definition: ResourceTypeDefinition, output_path: str | None = None
    ) -> str:
        """
        Converts the resource type definition to YAML format

        Args:
            definition: The definition to serialize
            output_path: Optional file path to save the YAML

        Returns:
            YAML string representation
        """
        document = _to_commented(definition.to_document())

        stream = StringIO()
        self._yaml.dump(document, stream)
        yaml_content = stream.getvalue()

        if output_path:
            self.save_yaml_to_file(yaml_content, output_path)

        return yaml_content

    def save_yaml_to_file(self, yaml_content: str, file_path: str) -> None:
        """Saves YAML content to file"""
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            f.write(yaml_content)


def _to_commented(obj: Any) -> Any:
    """Convert plain containers to ruamel's ordered round-trip types"""
    if isinstance(obj, dict):
        mapping = CommentedMap()
        for key, value in obj.items():
            mapping[key] = _to_commented(value)
        return mapping
    if isinstance(obj, list | tuple):
        return CommentedSeq(_to_commented(item) for item in obj)
    return obj


def create_resource_type(namespace: str, resource_type_name: str) -> ResourceTypeBuilder:
    """Factory method to create a new resource type builder"""
    return ResourceTypeBuilder(namespace, resource_type_name)
