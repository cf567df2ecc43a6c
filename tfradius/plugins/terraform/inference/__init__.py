from .base_rule import BaseRule
from .keyword_rule import KeywordRule
from .namespace_inference import (
    FALLBACK_NAMESPACE,
    FALLBACK_RESOURCE_TYPE,
    NAMESPACE_RULES,
    NamespaceInferencer,
    infer_namespace,
    module_base_name,
    to_camel_case,
)

__all__ = [
    "BaseRule",
    "KeywordRule",
    "NAMESPACE_RULES",
    "FALLBACK_NAMESPACE",
    "FALLBACK_RESOURCE_TYPE",
    "NamespaceInferencer",
    "infer_namespace",
    "module_base_name",
    "to_camel_case",
]
