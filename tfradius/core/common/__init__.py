"""Common base classes for parsers and orchestrators."""

from .base_orchestrator import BaseOrchestrator
from .base_parser import BaseSourceFileParser

__all__ = ["BaseSourceFileParser", "BaseOrchestrator"]
