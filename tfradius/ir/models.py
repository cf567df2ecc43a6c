from __future__ import annotations

"""
models.py – Intermediate Representation (IR)
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Immutable value objects describing a parsed Terraform module: its metadata,
its ordered variable declarations and their type expressions.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Self, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Type expressions
# ---------------------------------------------------------------------------


class PrimitiveKind(str, Enum):
    """Scalar Terraform types."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"


class _TypeNode(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class PrimitiveType(_TypeNode):
    """`string`, `number` or `bool`."""

    kind: Literal["primitive"] = "primitive"
    primitive: PrimitiveKind


class ListType(_TypeNode):
    """`list(T)`."""

    kind: Literal["list"] = "list"
    element: TypeExpression


class SetType(_TypeNode):
    """`set(T)`."""

    kind: Literal["set"] = "set"
    element: TypeExpression


class MapType(_TypeNode):
    """`map(T)`."""

    kind: Literal["map"] = "map"
    element: TypeExpression


class ObjectType(_TypeNode):
    """`object({...})` with attributes kept in declaration order."""

    kind: Literal["object"] = "object"
    fields: dict[str, TypeExpression] = Field(default_factory=dict)
    optional_fields: frozenset[str] = Field(
        default_factory=frozenset,
        description="Attributes declared with `optional(...)`.",
    )

    @model_validator(mode="after")
    def _optional_fields_exist(self) -> Self:
        unknown = self.optional_fields - set(self.fields)
        if unknown:
            raise ValueError(
                f"Optional fields not declared on the object: {sorted(unknown)}"
            )
        return self


class TupleType(_TypeNode):
    """`tuple([T1, T2, ...])`."""

    kind: Literal["tuple"] = "tuple"
    elements: tuple[TypeExpression, ...] = ()


class AnyType(_TypeNode):
    """`any`, or a variable declared without a type constraint."""

    kind: Literal["any"] = "any"


class UnresolvedType(_TypeNode):
    """A type constraint that could not be resolved statically."""

    kind: Literal["unresolved"] = "unresolved"
    raw: str = Field(..., description="The original type text, verbatim.")


TypeExpression = Annotated[
    Union[
        PrimitiveType,
        ListType,
        SetType,
        MapType,
        ObjectType,
        TupleType,
        AnyType,
        UnresolvedType,
    ],
    Field(discriminator="kind"),
]

for _model in (ListType, SetType, MapType, ObjectType, TupleType):
    _model.model_rebuild()


# Convenience singletons for the scalar cases
STRING = PrimitiveType(primitive=PrimitiveKind.STRING)
NUMBER = PrimitiveType(primitive=PrimitiveKind.NUMBER)
BOOL = PrimitiveType(primitive=PrimitiveKind.BOOL)
ANY = AnyType()


# ---------------------------------------------------------------------------
# Module content
# ---------------------------------------------------------------------------


class VariableDeclaration(BaseModel):
    """A single `variable` block of a Terraform module."""

    name: str = Field(..., description="Variable name, unique within a module.")
    type_expr: TypeExpression = Field(
        default_factory=AnyType, description="Declared type constraint."
    )
    description: str | None = Field(
        None, description="Free-text description from the variable block."
    )
    default: Any = Field(None, description="Literal default value, if any.")
    has_default: bool = Field(
        False,
        description=(
            "True when the block declares a default, including `default = null`."
        ),
    )
    sensitive: bool = False
    index: int = Field(0, ge=0, description="Declaration order within the module.")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("name")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("VariableDeclaration.name must not be empty")
        return v


class ModuleMetadata(BaseModel):
    """Where a module came from and how to call it."""

    name: str = Field(..., description="Display name of the module.")
    origin: str = Field(
        "", description="Git URL or filesystem path the module was loaded from."
    )
    path: str | None = Field(
        None, description="Local directory that was actually parsed."
    )

    model_config = ConfigDict(frozen=True, extra="forbid")


class ParsedModule(BaseModel):
    """Output of the Terraform parser: metadata plus ordered variables."""

    metadata: ModuleMetadata
    variables: tuple[VariableDeclaration, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _unique_names(self) -> Self:
        seen: set[str] = set()
        for var in self.variables:
            if var.name in seen:
                raise ValueError(f"Duplicate variable name '{var.name}'")
            seen.add(var.name)
        return self

    @property
    def variable_names(self) -> list[str]:
        return [v.name for v in self.variables]


# ---------------------------------------------------------------------------
# Namespace inference
# ---------------------------------------------------------------------------


class NamespaceInferenceContext(BaseModel):
    """Evidence and caller overrides used to name the generated resource type."""

    module_name: str = ""
    origin: str = ""
    variable_names: tuple[str, ...] = ()
    variable_descriptions: tuple[str, ...] = ()
    namespace_override: str | None = Field(
        None, description="Used verbatim when set; skips namespace inference."
    )
    resource_type_override: str | None = Field(
        None, description="Used verbatim when set; skips name inference."
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def from_module(
        cls,
        module: ParsedModule,
        namespace_override: str | None = None,
        resource_type_override: str | None = None,
    ) -> NamespaceInferenceContext:
        """Collect inference evidence from a parsed module."""
        return cls(
            module_name=module.metadata.name,
            origin=module.metadata.origin,
            variable_names=tuple(v.name for v in module.variables),
            variable_descriptions=tuple(
                v.description for v in module.variables if v.description
            ),
            namespace_override=namespace_override,
            resource_type_override=resource_type_override,
        )


class NamespaceInferenceResult(BaseModel):
    """Namespace and resource-type name, with degradation signals."""

    namespace: str
    resource_type_name: str
    degraded: bool = Field(
        False, description="True when inference fell back to Custom.Unknown."
    )
    warnings: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")
