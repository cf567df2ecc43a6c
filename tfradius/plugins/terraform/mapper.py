import logging
from collections.abc import Sequence

from pydantic import ValidationError as PydanticValidationError

from tfradius.core.config import ConversionSettings
from tfradius.ir.models import (
    NamespaceInferenceContext,
    NamespaceInferenceResult,
    ParsedModule,
    VariableDeclaration,
)
from tfradius.models.radius import (
    INJECTED_DESCRIPTIONS,
    INJECTED_PROPERTIES,
    PropertyType,
    ResourceTypeDefinition,
    SchemaProperty,
    create_resource_type,
)

from .defaults import DefaultFormatter
from .exceptions import AssemblyError, UnsupportedTypeError
from .inference import NamespaceInferencer
from .type_mapper import TypeMapper
from .variables import RequiredFieldResolver

logger = logging.getLogger(__name__)


def compose_description(*parts: str | None) -> str | None:
    """Join the non-empty description parts with single spaces."""
    text = " ".join(p.strip() for p in parts if p and p.strip())
    return text or None


class SchemaAssembler:
    """
    Builds the final resource type from mapped variable properties.

    The platform properties `application` and `environment` are injected
    first; a source variable with either name is rejected.
    """

    def __init__(self, api_version: str | None = None):
        self._logger = logger.getChild(self.__class__.__name__)
        self._api_version = api_version

    def assemble(
        self,
        variables: Sequence[VariableDeclaration],
        names: NamespaceInferenceResult,
        properties: dict[str, SchemaProperty],
        required: Sequence[str],
        module: str | None = None,
    ) -> ResourceTypeDefinition:
        """
        Assemble a resource type definition.

        Args:
            variables: Source variables, used for ordering and collision checks
            names: Namespace and resource type name
            properties: Mapped property per variable name
            required: Required root property names
            module: Module name used in error context

        Returns:
            The validated ResourceTypeDefinition

        Raises:
            AssemblyError: If a variable collides with an injected property or
                the assembled schema is inconsistent
        """
        for var in variables:
            if var.name in INJECTED_PROPERTIES:
                raise AssemblyError(
                    f"Variable '{var.name}' collides with the platform property "
                    f"of the same name",
                    variable_name=var.name,
                    module=module,
                )

        builder = create_resource_type(names.namespace, names.resource_type_name)
        if self._api_version:
            builder.with_api_version(self._api_version)

        for name in INJECTED_PROPERTIES:
            builder.with_property(
                name,
                SchemaProperty(
                    type=PropertyType.STRING, description=INJECTED_DESCRIPTIONS[name]
                ),
            )

        for var in sorted(variables, key=lambda v: v.index):
            prop = properties.get(var.name)
            if prop is None:
                raise AssemblyError(
                    f"No mapped property for variable '{var.name}'",
                    variable_name=var.name,
                    module=module,
                )
            builder.with_property(var.name, prop)

        builder.with_required(*INJECTED_PROPERTIES, *required)

        try:
            definition = builder.build()
        except PydanticValidationError as e:
            raise AssemblyError(
                f"Assembled schema is invalid: {e}", module=module
            ) from e

        self._logger.info(
            f"Assembled {definition.namespace}/{definition.resource_type_name} "
            f"with {len(definition.properties)} properties"
        )
        return definition


class TerraformSchemaMapper:
    """
    Terraform-specific mapper.

    Converts the variables of a parsed module into a Radius resource type:
    maps each type, composes descriptions with defaults, resolves required
    names, infers the namespace and assembles the result.
    """

    def __init__(
        self,
        type_mapper: TypeMapper | None = None,
        formatter: DefaultFormatter | None = None,
        resolver: RequiredFieldResolver | None = None,
        inferencer: NamespaceInferencer | None = None,
    ) -> None:
        self._logger = logger.getChild(self.__class__.__name__)
        self._type_mapper = type_mapper
        self._formatter = formatter or DefaultFormatter()
        self._resolver = resolver or RequiredFieldResolver()
        self._inferencer = inferencer or NamespaceInferencer()
        self.last_inference: NamespaceInferenceResult | None = None

    def map(
        self, module: ParsedModule, settings: ConversionSettings | None = None
    ) -> ResourceTypeDefinition:
        """
        Convert a parsed module into a resource type definition.

        The naming outcome, including whether inference fell back to
        `Custom.Unknown`, is kept in `last_inference`.

        Raises:
            UnsupportedTypeError: If a variable type cannot be mapped
            RecursionLimitError: If a variable type nests too deeply
            AssemblyError: If a variable collides with an injected property
        """
        settings = settings or ConversionSettings()
        self.last_inference = None
        module_name = module.metadata.name
        type_mapper = self._type_mapper or TypeMapper(settings.max_type_depth)

        self._logger.info(
            f"Mapping {len(module.variables)} variables of module '{module_name}'"
        )

        properties: dict[str, SchemaProperty] = {}
        for var in module.variables:
            properties[var.name] = self._map_variable(var, type_mapper, module_name)

        required = self._resolver.resolve_required(module.variables)

        context = NamespaceInferenceContext.from_module(
            module,
            namespace_override=settings.namespace_override,
            resource_type_override=settings.resource_type_override,
        )
        names = self._inferencer.infer(context)
        self.last_inference = names

        assembler = SchemaAssembler(api_version=settings.api_version)
        definition = assembler.assemble(
            module.variables, names, properties, required, module=module_name
        )
        self._log_summary(module, required)
        return definition

    def _map_variable(
        self, var: VariableDeclaration, type_mapper: TypeMapper, module_name: str
    ) -> SchemaProperty:
        try:
            prop = type_mapper.map_type(var.type_expr)
        except UnsupportedTypeError as e:
            raise e.with_variable(var.name, module_name) from e

        description = compose_description(
            var.description, prop.description, self._formatter.default_suffix(var)
        )
        self._logger.debug(
            f"Mapped variable '{var.name}' -> {prop.type.value}"
            f"{' (sensitive)' if var.sensitive else ''}"
        )
        return prop.with_description(description)

    def _log_summary(self, module: ParsedModule, required: list[str]) -> None:
        optional = [v.name for v in module.variables if v.name not in required]
        self._logger.debug(f"Required properties: {required}")
        self._logger.debug(f"Optional properties: {optional}")
