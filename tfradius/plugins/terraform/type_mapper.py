"""Recursive mapping of Terraform type expressions to schema properties."""

import logging

from tfradius.ir.models import (
    AnyType,
    ListType,
    MapType,
    ObjectType,
    PrimitiveKind,
    PrimitiveType,
    SetType,
    TupleType,
    TypeExpression,
    UnresolvedType,
)
from tfradius.models.radius import PropertyType, SchemaProperty

from .exceptions import RecursionLimitError, UnsupportedTypeError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64

UNCONSTRAINED_NOTE = "Unconstrained value."

_PRIMITIVE_MAPPING: dict[PrimitiveKind, PropertyType] = {
    PrimitiveKind.STRING: PropertyType.STRING,
    PrimitiveKind.NUMBER: PropertyType.NUMBER,
    PrimitiveKind.BOOL: PropertyType.BOOLEAN,
}


class TypeMapper:
    """
    Converts TypeExpression trees into SchemaProperty trees.

    The mapping is total for every static Terraform type. Only unresolved
    types and nesting beyond `max_depth` raise.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.max_depth = max_depth
        self._logger = logger.getChild(self.__class__.__name__)

    def map_type(self, type_expr: TypeExpression) -> SchemaProperty:
        """
        Map a type expression to a schema property.

        Args:
            type_expr: Parsed Terraform type

        Returns:
            The equivalent schema property tree

        Raises:
            UnsupportedTypeError: If the type could not be resolved statically
            RecursionLimitError: If nesting exceeds `max_depth`
        """
        try:
            return self._map(type_expr, 0)
        except RecursionError as e:
            raise RecursionLimitError(
                f"Type nesting under the limit of {self.max_depth} levels still "
                "exhausts the interpreter stack",
                max_depth=self.max_depth,
            ) from e

    def _map(self, type_expr: TypeExpression, depth: int) -> SchemaProperty:
        if depth > self.max_depth:
            raise RecursionLimitError(
                f"Type nesting exceeds the limit of {self.max_depth} levels",
                max_depth=self.max_depth,
            )

        if isinstance(type_expr, PrimitiveType):
            return SchemaProperty(type=_PRIMITIVE_MAPPING[type_expr.primitive])

        if isinstance(type_expr, ListType | SetType):
            # Set uniqueness has no schema equivalent
            return SchemaProperty(
                type=PropertyType.ARRAY, items=self._map(type_expr.element, depth + 1)
            )

        if isinstance(type_expr, MapType):
            return SchemaProperty(
                type=PropertyType.OBJECT,
                additional_properties=self._map(type_expr.element, depth + 1),
            )

        if isinstance(type_expr, ObjectType):
            return self._map_object(type_expr, depth)

        if isinstance(type_expr, TupleType):
            return self._map_tuple(type_expr, depth)

        if isinstance(type_expr, AnyType):
            return SchemaProperty(type=PropertyType.ANY, description=UNCONSTRAINED_NOTE)

        if isinstance(type_expr, UnresolvedType):
            raise UnsupportedTypeError(
                f"Type '{type_expr.raw}' cannot be resolved statically",
                type_text=type_expr.raw,
            )

        raise UnsupportedTypeError(
            f"Unknown type expression {type_expr!r}", type_text=str(type_expr)
        )

    def _map_object(self, type_expr: ObjectType, depth: int) -> SchemaProperty:
        properties = {
            name: self._map(field, depth + 1) for name, field in type_expr.fields.items()
        }
        required = [
            name for name in type_expr.fields if name not in type_expr.optional_fields
        ]
        return SchemaProperty(
            type=PropertyType.OBJECT,
            properties=properties,
            required=required or None,
        )

    def _map_tuple(self, type_expr: TupleType, depth: int) -> SchemaProperty:
        mapped = [self._map(element, depth + 1) for element in type_expr.elements]
        if mapped and all(item == mapped[0] for item in mapped[1:]):
            items = mapped[0]
        else:
            self._logger.debug(
                "Heterogeneous or empty tuple; leaving array items unconstrained"
            )
            items = SchemaProperty(type=PropertyType.ANY)
        return SchemaProperty(type=PropertyType.ARRAY, items=items)
