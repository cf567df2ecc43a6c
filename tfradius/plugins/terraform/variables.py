"""
Terraform Variables Support System

This module turns the `variable` blocks decoded by python-hcl2 into ordered
VariableDeclaration values, and decides which of them a caller must supply.
"""

import logging
from collections.abc import Iterable
from typing import Any

from tfradius.ir.models import VariableDeclaration
from tfradius.models.radius import INJECTED_PROPERTIES

from .exceptions import UnsupportedTypeError, ValidationError, VariableExtractionError
from .type_parser import TypeExpressionParser, unwrap_interpolation

logger = logging.getLogger(__name__)


def _clean_name(name: Any) -> str:
    return str(name).strip().strip('"')


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return unwrap_interpolation(value).lower() == "true"
    return bool(value)


def _is_expression(value: Any) -> bool:
    """True when a decoded HCL value is an unevaluated expression."""
    if isinstance(value, str):
        stripped = value.strip()
        return stripped.startswith("${") and unwrap_interpolation(stripped) != stripped
    if isinstance(value, list):
        return any(_is_expression(v) for v in value)
    if isinstance(value, dict):
        return any(_is_expression(v) for v in value.values())
    return False


class VariableExtractor:
    """Extracts Terraform variables from decoded HCL and builds declarations."""

    def __init__(self, type_parser: TypeExpressionParser | None = None):
        self._logger = logger.getChild(self.__class__.__name__)
        self._type_parser = type_parser or TypeExpressionParser()

    def extract_variables(
        self,
        parsed_files: Iterable[dict[str, Any]],
        module_name: str | None = None,
        max_depth: int | None = None,
    ) -> list[VariableDeclaration]:
        """
        Extract all variables, in declaration order, from decoded `.tf` files.

        Args:
            parsed_files: python-hcl2 output for each file, in file order
            module_name: Module name used in error context
            max_depth: Type nesting cap; defaults to the type parser's own

        Returns:
            Ordered list of VariableDeclaration

        Raises:
            ValidationError: If a file payload is not a dictionary
            VariableExtractionError: If a block is malformed or a name repeats
            UnsupportedTypeError: If a default is an unevaluated expression
            RecursionLimitError: If a type constraint nests deeper than the cap
        """
        self._logger.info("Extracting Terraform variables")

        variables: list[VariableDeclaration] = []
        seen: set[str] = set()

        for parsed in parsed_files:
            if not isinstance(parsed, dict):
                raise ValidationError(
                    "parsed HCL must be a dictionary",
                    field_name="parsed_files",
                    expected_type=dict,
                )

            blocks = parsed.get("variable", [])
            if isinstance(blocks, dict):
                blocks = [blocks]

            for block in blocks:
                if not isinstance(block, dict):
                    self._logger.warning(f"Skipping invalid variable block: {block!r}")
                    continue

                for raw_name, config in block.items():
                    name = _clean_name(raw_name)
                    if name in seen:
                        raise VariableExtractionError(
                            f"Variable '{name}' is declared more than once",
                            variable_name=name,
                            extraction_phase="declaration",
                        )
                    seen.add(name)

                    declaration = self._build_declaration(
                        name, config, len(variables), module_name, max_depth
                    )
                    variables.append(declaration)
                    self._logger.debug(f"Extracted variable '{name}': {declaration}")

        self._logger.info(f"Extracted {len(variables)} variables")
        return variables

    def _build_declaration(
        self,
        name: str,
        config: Any,
        index: int,
        module_name: str | None,
        max_depth: int | None = None,
    ) -> VariableDeclaration:
        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise VariableExtractionError(
                f"Variable '{name}' must be a block",
                variable_name=name,
                extraction_phase="declaration",
            )

        has_default = "default" in config
        default = config.get("default")
        if has_default and _is_expression(default):
            raise UnsupportedTypeError(
                f"Default of variable '{name}' is an expression and cannot be "
                "evaluated statically",
                type_text=str(default),
                variable_name=name,
                module=module_name,
            )

        if config.get("type") is not None:
            try:
                type_expr = self._type_parser.parse(config["type"], max_depth)
            except UnsupportedTypeError as e:
                raise e.with_variable(name, module_name) from e
        elif has_default:
            type_expr = self._type_parser.infer_from_value(default)
        else:
            type_expr = self._type_parser.parse(None)

        description = config.get("description")
        if description is not None:
            description = str(description).strip() or None

        try:
            return VariableDeclaration(
                name=name,
                type_expr=type_expr,
                description=description,
                default=default,
                has_default=has_default,
                sensitive=_as_bool(config.get("sensitive", False)),
                index=index,
            )
        except ValueError as e:
            raise VariableExtractionError(
                f"Invalid variable '{name}': {e}",
                variable_name=name,
                extraction_phase="validation",
            ) from e


class RequiredFieldResolver:
    """Decides which root properties a caller must supply."""

    def __init__(self):
        self._logger = logger.getChild(self.__class__.__name__)

    def resolve_required(self, variables: Iterable[VariableDeclaration]) -> list[str]:
        """
        Required names: the injected platform properties, then every variable
        without a default in declaration order.
        """
        ordered = sorted(variables, key=lambda v: v.index)
        required = list(INJECTED_PROPERTIES)
        for var in ordered:
            if not var.has_default and var.name not in required:
                required.append(var.name)

        self._logger.debug(f"Required properties: {required}")
        return required
