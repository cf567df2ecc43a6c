from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from tfradius.core.config import ConversionSettings
    from tfradius.ir.models import ParsedModule
    from tfradius.models.radius import ResourceTypeDefinition


class SourceFileParser(Protocol):
    """Defines the contract for parsing a source IaC file."""

    def get_supported_extensions(self) -> list[str]:
        """
        Returns the list of file extensions supported
        (e.g., [".tf", ".tf.json"]).
        """

        ...

    def can_parse(self, file_path: Path) -> bool:
        """
        Checks whether this parser can handle the given file.

        Args:
            file_path: Path to file to check

        Returns:
            True if the parser can handle this path, False otherwise
        """
        ...

    def parse(self, file_path: Path) -> dict[str, Any]:
        """Parses a single file into a structured Python dictionary."""
        ...


class ModuleParser(SourceFileParser, Protocol):
    """A parser that can also assemble a whole module from its files."""

    def build_module(
        self,
        parsed_files: list[dict[str, Any]],
        source_path: Path,
        origin: str = "",
        name: str | None = None,
        settings: "ConversionSettings | None" = None,
    ) -> "ParsedModule":
        """Combine per-file parse results into one ParsedModule."""
        ...


class SchemaMapper(Protocol):
    """Defines the contract for turning a parsed module into a resource type."""

    def map(
        self, module: "ParsedModule", settings: "ConversionSettings | None" = None
    ) -> "ResourceTypeDefinition":
        """
        Convert the module's variables into a resource type definition.

        Raises on unsupported types or name collisions; never returns a
        partial definition.
        """
        ...


class Orchestrator(Protocol):
    """Defines the contract for a full source-to-schema conversion."""

    def translate(
        self,
        source_path: Path,
        output_file: Path | None = None,
        settings: "ConversionSettings | None" = None,
    ) -> "ResourceTypeDefinition":
        """Parse, map and serialize one module."""
        ...
