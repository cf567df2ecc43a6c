"""
Terraform Plugin Exception Classes

Custom exceptions for better error handling and debugging in the Terraform plugin.
"""

from typing import Any


class TerraformPluginError(Exception):
    """Base exception for all Terraform plugin errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.error_code:
            base_msg = f"[{self.error_code}] {base_msg}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg = f"{base_msg} (Context: {context_str})"
        return base_msg


class TerraformDataError(TerraformPluginError):
    """Raised when Terraform files are unreadable or structurally invalid."""

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
    ) -> None:
        context = {}
        if file_name:
            context["file_name"] = file_name
        super().__init__(message, "TERRAFORM_DATA_ERROR", context)

    def get_recovery_hint(self) -> str:
        """Provide a helpful hint for fixing the data error."""
        if "file_name" in self.context:
            return (
                f"Run 'terraform validate' and fix the syntax of "
                f"'{self.context['file_name']}'"
            )
        return "Check the Terraform configuration for missing or invalid data"


class VariableExtractionError(TerraformPluginError):
    """Raised when a variable block cannot be turned into a declaration."""

    def __init__(
        self,
        message: str,
        variable_name: str | None = None,
        extraction_phase: str | None = None,
    ) -> None:
        context = {}
        if variable_name:
            context["variable_name"] = variable_name
        if extraction_phase:
            context["extraction_phase"] = extraction_phase
        super().__init__(message, "VARIABLE_EXTRACTION_ERROR", context)


class UnsupportedTypeError(TerraformPluginError):
    """Raised when a type expression cannot be mapped statically."""

    def __init__(
        self,
        message: str,
        type_text: str | None = None,
        variable_name: str | None = None,
        module: str | None = None,
    ) -> None:
        context = {}
        if variable_name:
            context["variable_name"] = variable_name
        if module:
            context["module"] = module
        if type_text:
            context["type"] = type_text
        super().__init__(message, "UNSUPPORTED_TYPE", context)
        self.type_text = type_text

    def with_variable(self, variable_name: str, module: str) -> "UnsupportedTypeError":
        """Return a copy of this error carrying variable and module context."""
        return type(self)(
            self.args[0],
            type_text=self.type_text,
            variable_name=variable_name,
            module=module,
        )


class RecursionLimitError(UnsupportedTypeError):
    """Raised when a type expression nests deeper than the configured cap."""

    def __init__(
        self,
        message: str,
        type_text: str | None = None,
        variable_name: str | None = None,
        module: str | None = None,
        max_depth: int | None = None,
    ) -> None:
        super().__init__(message, type_text, variable_name, module)
        self.error_code = "RECURSION_LIMIT"
        self.max_depth = max_depth
        if max_depth is not None:
            self.context["max_depth"] = max_depth

    def with_variable(self, variable_name: str, module: str) -> "RecursionLimitError":
        return RecursionLimitError(
            self.args[0],
            type_text=self.type_text,
            variable_name=variable_name,
            module=module,
            max_depth=self.max_depth,
        )


class AssemblyError(TerraformPluginError):
    """Raised when a source variable collides with an injected property."""

    def __init__(
        self,
        message: str,
        variable_name: str | None = None,
        module: str | None = None,
    ) -> None:
        context = {}
        if variable_name:
            context["variable_name"] = variable_name
        if module:
            context["module"] = module
        super().__init__(message, "ASSEMBLY_ERROR", context)

    def get_recovery_hint(self) -> str:
        """Provide a helpful hint for fixing the naming conflict."""
        name = self.context.get("variable_name", "the variable")
        return (
            f"Rename '{name}' in the Terraform module; 'application' and "
            "'environment' are reserved by the platform"
        )


class SourceAcquisitionError(TerraformPluginError):
    """Raised when a module source cannot be cloned or located."""

    def __init__(self, message: str, source: str | None = None) -> None:
        context = {}
        if source:
            context["source"] = source
        super().__init__(message, "SOURCE_ACQUISITION_ERROR", context)


class ValidationError(TerraformPluginError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        expected_type: type | None = None,
        actual_value: Any = None,
    ) -> None:
        context = {}
        if field_name:
            context["field_name"] = field_name
        if expected_type:
            context["expected_type"] = expected_type.__name__
        if actual_value is not None:
            context["actual_value"] = str(actual_value)
        super().__init__(message, "VALIDATION_ERROR", context)

    def get_recovery_hint(self) -> str:
        """Provide a helpful hint for fixing the validation error."""
        if "field_name" in self.context:
            return f"Check the value supplied for '{self.context['field_name']}'"
        return "Check the command line arguments"
