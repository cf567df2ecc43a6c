"""Terraform plugin: module variables to Radius resource types."""

from .mapper import SchemaAssembler, TerraformSchemaMapper
from .orchestrator import TerraformOrchestrator
from .parser import TerraformParser

__all__ = [
    "SchemaAssembler",
    "TerraformParser",
    "TerraformSchemaMapper",
    "TerraformOrchestrator",
]
