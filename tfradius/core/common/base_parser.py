"""Base implementation for source file parsers."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..protocols import SourceFileParser

logger = logging.getLogger(__name__)


class BaseSourceFileParser(SourceFileParser, ABC):
    """
    Abstract base class for source file parsers.

    Handles file validation, reading and error routing; subclasses supply
    the format-specific decoding.

    Subclasses must implement:
    - get_supported_extensions(): Which file name endings are accepted
    - _parse_content(): Decode the file text into a dictionary

    Subclasses can optionally override:
    - _handle_parse_error(): Translate decoder errors into domain errors
    """

    def __init__(self, encoding: str = "utf-8"):
        """
        Initialize the parser.

        Args:
            encoding: Encoding used when reading files
        """
        self.encoding = encoding
        self._logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    def get_supported_extensions(self) -> list[str]:
        """
        Returns the file name endings this parser accepts.

        Returns:
            List of endings (e.g., ['.tf', '.tf.json'])
        """
        pass

    @abstractmethod
    def _parse_content(self, content: str, file_path: Path) -> dict[str, Any]:
        """
        Decode file content into a dictionary.

        Args:
            content: Raw file text
            file_path: Path of the file, for error reporting

        Returns:
            Decoded data
        """
        pass

    def parse(self, file_path: Path) -> dict[str, Any]:
        """
        Parse a single file.

        Args:
            file_path: Path to the file to parse

        Returns:
            Decoded data as a dictionary

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the path is not a supported file
        """
        self._logger.debug(f"Parsing file: {file_path}")
        self.validate_file(file_path)

        content = self._read_file(file_path)
        try:
            return self._parse_content(content, file_path)
        except Exception as e:
            return self._handle_parse_error(e, file_path)

    def has_supported_extension(self, file_path: Path) -> bool:
        extensions = self.get_supported_extensions()
        if not extensions:
            return True
        # multi-part endings such as .tf.json do not show up in Path.suffix
        return any(file_path.name.endswith(ext) for ext in extensions)

    def validate_file(self, file_path: Path) -> None:
        """
        Check that the path is an existing file with a supported ending.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the path is not a file or the ending is unsupported
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        if not file_path.is_file():
            raise ValueError(f"Path is not a file: {file_path}")

        if not self.has_supported_extension(file_path):
            raise ValueError(
                f"Unsupported file '{file_path.name}'. "
                f"Supported extensions: {self.get_supported_extensions()}"
            )

    def _read_file(self, file_path: Path) -> str:
        try:
            return file_path.read_text(encoding=self.encoding)
        except UnicodeDecodeError:
            self._logger.error(
                f"Failed to decode file {file_path} with encoding {self.encoding}"
            )
            raise
        except OSError as e:
            self._logger.error(f"Failed to read file {file_path}: {e}")
            raise

    def _handle_parse_error(self, error: Exception, file_path: Path) -> dict[str, Any]:
        """Re-raise decoder errors after logging them; subclasses may translate."""
        self._logger.error(f"Failed to parse {file_path}: {error}")
        raise error

    def can_parse(self, file_path: Path) -> bool:
        """True when the path is an existing file with a supported ending."""
        return file_path.is_file() and self.has_supported_extension(file_path)
