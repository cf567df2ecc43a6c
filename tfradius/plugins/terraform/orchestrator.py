import logging
from pathlib import Path

from tfradius.core.common.base_orchestrator import BaseOrchestrator
from tfradius.core.config import ConversionSettings, git_token
from tfradius.core.protocols import ModuleParser, SchemaMapper
from tfradius.ir.models import NamespaceInferenceResult
from tfradius.models.radius import ResourceTypeDefinition

from .exceptions import TerraformDataError
from .mapper import TerraformSchemaMapper
from .parser import TerraformParser
from .source import ModuleSourceResolver

logger = logging.getLogger(__name__)


class TerraformOrchestrator(BaseOrchestrator):
    """
    Orchestrator for the Terraform plugin.

    Connects the source resolver, the TerraformParser and the
    TerraformSchemaMapper.
    """

    def __init__(
        self,
        parser: TerraformParser | None = None,
        mapper: TerraformSchemaMapper | None = None,
        resolver: ModuleSourceResolver | None = None,
    ):
        super().__init__()
        self._parser = parser or TerraformParser()
        self._mapper = mapper or TerraformSchemaMapper()
        self._resolver = resolver
        self.last_inference: NamespaceInferenceResult | None = None

    def get_parser(self) -> ModuleParser:
        """Return the Terraform parser instance."""
        return self._parser

    def get_mapper(self) -> SchemaMapper:
        """Return the Terraform schema mapper instance."""
        return self._mapper

    def find_source_files(self, source_path: Path) -> list[Path]:
        files = super().find_source_files(source_path)
        if not files:
            raise TerraformDataError(
                f"No Terraform files found in: {source_path}",
                file_name=str(source_path),
            )
        return files

    def convert(
        self,
        source: str,
        output_file: Path | None = None,
        settings: ConversionSettings | None = None,
        ref: str | None = None,
    ) -> ResourceTypeDefinition:
        """
        Convert a module given as a local path or Git URL.

        Args:
            source: Local module directory or Git URL
            output_file: Where to save the YAML, or None to only return it
            settings: Conversion settings
            ref: Git branch or tag to check out

        Returns:
            The assembled ResourceTypeDefinition; the YAML text is available
            in `last_output` and the naming outcome (with any fallback
            warnings) in `last_inference`
        """
        settings = settings or ConversionSettings()
        self.last_inference = None
        resolver = self._resolver or ModuleSourceResolver(
            timeout_s=settings.git_timeout_s, token=git_token()
        )

        with resolver.resolve(source, ref=ref) as resolved:
            self._logger.info(f"Converting module '{resolved.name}'")
            definition = self.translate(
                resolved.path,
                output_file,
                settings,
                origin=resolved.origin,
                name=resolved.name,
            )

        self.last_inference = self._mapper.last_inference
        return definition
