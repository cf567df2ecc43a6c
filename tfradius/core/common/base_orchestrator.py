"""Base implementation for orchestrators."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from tfradius.core.config import ConversionSettings
from tfradius.models.radius import ResourceTypeDefinition, ResourceTypeWriter

from ..protocols import ModuleParser, Orchestrator, SchemaMapper

logger = logging.getLogger(__name__)


class BaseOrchestrator(Orchestrator, ABC):
    """
    Abstract base class for orchestrators.

    Drives one conversion: file discovery, parsing, mapping, serialization
    and output, while the technology-specific parser and mapper stay
    abstract.

    Subclasses must implement:
    - get_parser(): Return the technology-specific parser
    - get_mapper(): Return the technology-specific mapper

    Subclasses can optionally override:
    - find_source_files(): Custom file discovery logic
    - create_writer(): Custom serializer
    - save_output(): Custom output handling
    """

    def __init__(self):
        self._logger = logger.getChild(self.__class__.__name__)
        self.last_output: str | None = None

    @abstractmethod
    def get_parser(self) -> ModuleParser:
        """Get the parser for this technology."""
        pass

    @abstractmethod
    def get_mapper(self) -> SchemaMapper:
        """Get the mapper for this technology."""
        pass

    def translate(
        self,
        source_path: Path,
        output_file: Path | None = None,
        settings: ConversionSettings | None = None,
        origin: str = "",
        name: str | None = None,
    ) -> ResourceTypeDefinition:
        """
        Orchestrates the entire conversion.

        1. Find and parse source files
        2. Map the module to a resource type definition
        3. Serialize it and save it when an output file is given

        Nothing is written unless every step succeeds. The serialized text
        is kept in `last_output`.

        Args:
            source_path: Module directory (or a single source file)
            output_file: Where to save the YAML, or None to only return it
            settings: Conversion settings
            origin: Where the module came from, used for naming
            name: Display name of the module

        Returns:
            The assembled ResourceTypeDefinition
        """
        settings = settings or ConversionSettings()
        self._logger.info(f"Starting conversion: {source_path}")

        try:
            source_files = self.find_source_files(source_path)
            if not source_files:
                raise ValueError(f"No supported source files found in {source_path}")
            self._logger.info(f"Found {len(source_files)} source files")

            parser = self.get_parser()
            parsed_files = []
            for source_file in source_files:
                self._logger.debug(f"Processing file: {source_file}")
                parsed_files.append(parser.parse(source_file))

            module = parser.build_module(
                parsed_files, source_path, origin=origin, name=name, settings=settings
            )
            definition = self.get_mapper().map(module, settings)

            content = self.create_writer().to_yaml(definition)
            self.last_output = content
            if output_file is not None:
                self.save_output(content, output_file)
                self._logger.info(f"Conversion completed successfully: {output_file}")
            else:
                self._logger.info("Conversion completed successfully")

            return definition

        except Exception as e:
            self._logger.error(f"Conversion failed: {e}")
            raise

    def find_source_files(self, source_path: Path) -> list[Path]:
        """
        Find the supported source files of a module, in name order.

        Only the top-level directory is scanned; nested modules are separate
        modules.

        Raises:
            ValueError: If source_path doesn't exist
        """
        if not source_path.exists():
            raise ValueError(f"Source path does not exist: {source_path}")

        parser = self.get_parser()
        if source_path.is_file():
            candidates = [source_path]
        else:
            candidates = sorted(p for p in source_path.iterdir() if p.is_file())

        return [f for f in candidates if parser.can_parse(f)]

    def create_writer(self) -> ResourceTypeWriter:
        return ResourceTypeWriter()

    def save_output(self, content: str, output_file: Path) -> None:
        """Write the serialized document, creating parent directories."""
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(content, encoding="utf-8")
        self._logger.debug(f"Resource type saved to: {output_file}")

    def get_orchestrator_info(self) -> dict:
        """Describe the parser and mapper wired into this orchestrator."""
        parser = self.get_parser()
        mapper = self.get_mapper()

        return {
            "class_name": self.__class__.__name__,
            "module": self.__class__.__module__,
            "parser": {
                "class_name": parser.__class__.__name__,
                "supported_extensions": parser.get_supported_extensions(),
            },
            "mapper": {"class_name": mapper.__class__.__name__},
        }
