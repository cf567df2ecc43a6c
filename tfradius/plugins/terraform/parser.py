"""Terraform parser reading variable declarations with python-hcl2."""

import json
import logging
from pathlib import Path
from typing import Any

import hcl2

from tfradius.core.common.base_parser import BaseSourceFileParser
from tfradius.core.config import ConversionSettings
from tfradius.ir.models import ModuleMetadata, ParsedModule

from .exceptions import TerraformDataError
from .variables import VariableExtractor

logger = logging.getLogger(__name__)


class TerraformParser(BaseSourceFileParser):
    """
    Terraform parser that decodes `.tf` and `.tf.json` files statically.

    Nothing is planned or applied: files are decoded with python-hcl2 (or
    json for `.tf.json`) and only `variable` blocks are kept.
    """

    def __init__(
        self,
        encoding: str = "utf-8",
        extractor: VariableExtractor | None = None,
    ):
        """
        Initialize the Terraform parser.

        Args:
            encoding: File encoding to use when reading files
            extractor: Variable extractor; a default one is created if omitted
        """
        super().__init__(encoding)
        self._logger = logger.getChild(self.__class__.__name__)
        self._extractor = extractor or VariableExtractor()

    def get_supported_extensions(self) -> list[str]:
        return [".tf", ".tf.json"]

    def _parse_content(self, content: str, file_path: Path) -> dict[str, Any]:
        if file_path.name.endswith(".tf.json"):
            parsed = json.loads(content)
        else:
            parsed = hcl2.loads(content)

        if not isinstance(parsed, dict):
            raise TerraformDataError(
                "Decoded Terraform content is not a mapping",
                file_name=str(file_path),
            )
        self._logger.debug(
            f"Decoded {file_path.name}: top-level blocks {sorted(parsed)}"
        )
        return parsed

    def _handle_parse_error(self, error: Exception, file_path: Path) -> dict[str, Any]:
        """Report decoder failures as TerraformDataError with the file name."""
        if isinstance(error, TerraformDataError):
            raise error
        self._logger.error(f"Failed to parse {file_path}: {error}")
        raise TerraformDataError(
            f"Cannot parse Terraform file: {error}", file_name=str(file_path)
        ) from error

    def build_module(
        self,
        parsed_files: list[dict[str, Any]],
        source_path: Path,
        origin: str = "",
        name: str | None = None,
        settings: ConversionSettings | None = None,
    ) -> ParsedModule:
        """
        Combine decoded files into a ParsedModule.

        Args:
            parsed_files: Decoded files in file name order
            source_path: Module directory (or single file) that was parsed
            origin: Git URL or path the module came from
            name: Display name; defaults to the directory name
            settings: Conversion settings; supplies the type nesting cap

        Returns:
            ParsedModule with variables in declaration order
        """
        module_dir = source_path if source_path.is_dir() else source_path.parent
        display_name = name or module_dir.resolve().name
        max_depth = settings.max_type_depth if settings else None
        variables = self._extractor.extract_variables(
            parsed_files, display_name, max_depth=max_depth
        )

        metadata = ModuleMetadata(
            name=display_name,
            origin=origin or str(module_dir.resolve()),
            path=str(module_dir),
        )
        self._logger.info(
            f"Module '{display_name}' declares {len(variables)} variables"
        )
        return ParsedModule(metadata=metadata, variables=tuple(variables))

    def parse_module(
        self,
        module_dir: Path,
        origin: str = "",
        name: str | None = None,
        settings: ConversionSettings | None = None,
    ) -> ParsedModule:
        """
        Parse every Terraform file directly inside `module_dir`.

        Raises:
            TerraformDataError: If the directory has no Terraform files or a
                file cannot be decoded
        """
        if not module_dir.is_dir():
            raise TerraformDataError(
                f"Module path is not a directory: {module_dir}",
                file_name=str(module_dir),
            )
        files = sorted(p for p in module_dir.iterdir() if self.can_parse(p))
        if not files:
            raise TerraformDataError(
                f"No Terraform files found in directory: {module_dir}",
                file_name=str(module_dir),
            )
        parsed = [self.parse(f) for f in files]
        return self.build_module(
            parsed, module_dir, origin=origin, name=name, settings=settings
        )
