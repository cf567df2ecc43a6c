"""
Namespace and resource-type name heuristic.

* No side-effects, no exceptions: always returns a NamespaceInferenceResult.
* Priority
  1. Caller overrides, used verbatim
  2. Keyword rules over the origin path and module name
  3. Keyword rules over variable names and descriptions
  4. Provider-only rules, then ``Custom.<Category>``, then ``Custom.Unknown``
"""

from __future__ import annotations

import logging
import re

from tfradius.ir.models import NamespaceInferenceContext, NamespaceInferenceResult

from .keyword_rule import KeywordRule

__all__ = ["NAMESPACE_RULES", "NamespaceInferencer", "infer_namespace"]

logger = logging.getLogger(__name__)

FALLBACK_NAMESPACE = "Custom.Unknown"
FALLBACK_RESOURCE_TYPE = "customResource"

_AWS = ["aws", "amazon"]
_AZURE = ["azure", "azurerm", "microsoft"]
_GCP = ["gcp", "google", "gcloud"]
_K8S = ["kubernetes", "k8s", "helm"]

# Table order is the tie-break priority for equally specific matches.
NAMESPACE_RULES: list[KeywordRule] = [
    # AWS
    KeywordRule(
        _AWS,
        [
            "vpc",
            "subnet",
            "network",
            "route",
            "nat",
            "gateway",
            "transit",
            "cidr",
            "elb",
            "alb",
            "nlb",
            "loadbalancer",
            "cloudfront",
            "dns",
            "endpoint",
        ],
        "AWS.Network",
    ),
    KeywordRule(
        _AWS,
        [
            "rds",
            "aurora",
            "database",
            "db",
            "dynamodb",
            "elasticache",
            "redis",
            "memcached",
            "redshift",
            "documentdb",
            "neptune",
            "opensearch",
            "elasticsearch",
        ],
        "AWS.Data",
    ),
    KeywordRule(
        _AWS,
        ["s3", "bucket", "ebs", "efs", "fsx", "storage", "glacier", "backup"],
        "AWS.Storage",
    ),
    KeywordRule(
        _AWS,
        [
            "ec2",
            "instance",
            "autoscaling",
            "asg",
            "eks",
            "ecs",
            "lambda",
            "fargate",
            "compute",
            "batch",
            "cluster",
        ],
        "AWS.Compute",
    ),
    KeywordRule(
        _AWS,
        ["iam", "kms", "security", "secret", "acm", "waf", "role", "policy"],
        "AWS.Security",
    ),
    KeywordRule(
        _AWS,
        ["sqs", "sns", "kinesis", "msk", "eventbridge", "queue", "topic"],
        "AWS.Messaging",
    ),
    # Azure
    KeywordRule(
        _AZURE,
        ["vnet", "subnet", "network", "nsg", "loadbalancer", "gateway", "dns"],
        "Azure.Network",
    ),
    KeywordRule(
        _AZURE,
        ["sql", "cosmosdb", "cosmos", "database", "postgresql", "mysql", "redis"],
        "Azure.Data",
    ),
    KeywordRule(_AZURE, ["storage", "blob", "fileshare", "disk"], "Azure.Storage"),
    KeywordRule(
        _AZURE,
        ["vm", "virtualmachine", "aks", "appservice", "function", "compute"],
        "Azure.Compute",
    ),
    # GCP
    KeywordRule(
        _GCP,
        ["vpc", "subnet", "network", "firewall", "router", "nat", "dns"],
        "GCP.Network",
    ),
    KeywordRule(
        _GCP,
        ["cloudsql", "sql", "spanner", "bigtable", "bigquery", "firestore", "memorystore"],
        "GCP.Data",
    ),
    KeywordRule(_GCP, ["gcs", "bucket", "storage", "disk"], "GCP.Storage"),
    KeywordRule(
        _GCP,
        ["gce", "gke", "instance", "compute", "cloudrun", "function"],
        "GCP.Compute",
    ),
    # Kubernetes
    KeywordRule(
        _K8S,
        ["namespace", "deployment", "service", "ingress", "chart", "release"],
        "Kubernetes.Workloads",
    ),
    # Provider-only
    KeywordRule(_AWS, [], "AWS.Resources"),
    KeywordRule(_AZURE, [], "Azure.Resources"),
    KeywordRule(_GCP, [], "GCP.Resources"),
    KeywordRule(_K8S, [], "Kubernetes.Resources"),
]

_ORG_PREFIXES = ("terraform", "tf", "module")
_ORG_SUFFIXES = ("module", "terraform")
_WORD_RE = re.compile(r"[A-Za-z0-9]+")


def tokenize(*texts: str) -> set[str]:
    """Lower-cased alphanumeric words of all texts."""
    tokens: set[str] = set()
    for text in texts:
        if text:
            tokens.update(word.lower() for word in _WORD_RE.findall(text))
    return tokens


def module_base_name(origin: str, module_name: str = "") -> str:
    """
    Last segment of a module origin (URL or path), without ``.git``.

    Falls back to the module display name when the origin is empty.
    """
    text = origin.strip()
    if "::" in text:
        text = text.split("::", 1)[1]
    text = text.split("?", 1)[0].split("#", 1)[0]
    segments = [s for s in re.split(r"[/\\:]+", text) if s]
    base = segments[-1] if segments else ""
    if base.endswith(".git"):
        base = base[: -len(".git")]
    return base or module_name.strip()


def _strip_org_affixes(words: list[str]) -> list[str]:
    while words and words[0].lower() in _ORG_PREFIXES:
        words = words[1:]
    while words and words[-1].lower() in _ORG_SUFFIXES:
        words = words[:-1]
    return words


def _name_words(base_name: str) -> list[str]:
    words = _strip_org_affixes(_WORD_RE.findall(base_name))
    # identifiers cannot start with a digit
    while words and words[0][0].isdigit():
        head = words[0].lstrip("0123456789")
        words = ([head] if head else []) + words[1:]
    return words


def to_camel_case(base_name: str) -> str:
    words = _name_words(base_name)
    if not words:
        return ""
    return words[0].lower() + "".join(w.capitalize() for w in words[1:])


def to_pascal_case(base_name: str) -> str:
    return "".join(w.capitalize() for w in _name_words(base_name))


class NamespaceInferencer:
    """Derives a namespace and resource-type name from module evidence."""

    def __init__(self, rules: list[KeywordRule] | None = None):
        self._logger = logger.getChild(self.__class__.__name__)
        self._rules = list(NAMESPACE_RULES if rules is None else rules)

    def infer(self, context: NamespaceInferenceContext) -> NamespaceInferenceResult:
        """
        Infer the namespace and resource-type name for a module.

        Args:
            context: Module evidence and optional caller overrides

        Returns:
            The chosen names; `degraded` is set and `warnings` populated when
            nothing usable could be found.
        """
        warnings: list[str] = []
        degraded = False
        base_name = module_base_name(context.origin, context.module_name)

        if context.namespace_override:
            namespace = context.namespace_override
            self._logger.debug(f"Using namespace override '{namespace}'")
        else:
            namespace = self._infer_namespace(context, base_name)
            if namespace is None:
                namespace = FALLBACK_NAMESPACE
                degraded = True
                warnings.append(
                    f"Could not infer a namespace for module "
                    f"'{context.module_name or context.origin}'; "
                    f"using '{FALLBACK_NAMESPACE}'"
                )

        if context.resource_type_override:
            resource_type_name = context.resource_type_override
            self._logger.debug(
                f"Using resource type override '{resource_type_name}'"
            )
        else:
            resource_type_name = to_camel_case(base_name)
            if not resource_type_name:
                if degraded:
                    resource_type_name = FALLBACK_RESOURCE_TYPE
                else:
                    last_segment = namespace.rsplit(".", 1)[-1]
                    resource_type_name = f"{last_segment.lower()}Resource"
                warnings.append(
                    f"Module name '{base_name}' gives no resource type name; "
                    f"using '{resource_type_name}'"
                )

        for warning in warnings:
            self._logger.warning(warning)

        self._logger.info(
            f"Resource type resolved to {namespace}/{resource_type_name}"
        )
        return NamespaceInferenceResult(
            namespace=namespace,
            resource_type_name=resource_type_name,
            degraded=degraded,
            warnings=tuple(warnings),
        )

    def _infer_namespace(
        self, context: NamespaceInferenceContext, base_name: str
    ) -> str | None:
        primary = tokenize(context.origin, context.module_name)
        secondary = tokenize(*context.variable_names, *context.variable_descriptions)
        providers = primary | secondary

        # 1) keywords from the origin and module name
        namespace = self._best_keyword_match(providers, primary)
        if namespace is not None:
            self._logger.debug(f"namespace via origin keywords -> {namespace}")
            return namespace

        # 2) keywords from the variables
        namespace = self._best_keyword_match(providers, secondary)
        if namespace is not None:
            self._logger.debug(f"namespace via variable keywords -> {namespace}")
            return namespace

        # 3) provider alone
        for rule in self._rules:
            if rule.provider_only and rule.match(providers, ()) is not None:
                self._logger.debug(f"namespace via provider rule -> {rule.namespace}")
                return rule.namespace

        # 4) module category
        category = to_pascal_case(base_name)
        if category:
            self._logger.debug(f"namespace via module category -> Custom.{category}")
            return f"Custom.{category}"

        self._logger.debug(f"unable to infer namespace for origin={context.origin}")
        return None

    def _best_keyword_match(
        self, providers: set[str], keywords: set[str]
    ) -> str | None:
        best_namespace: str | None = None
        best_score = 0
        for rule in self._rules:
            if rule.provider_only:
                continue
            score = rule.match(providers, keywords)
            # strict comparison keeps the earlier rule on ties
            if score is not None and score > best_score:
                best_namespace, best_score = rule.namespace, score
        return best_namespace


def infer_namespace(context: NamespaceInferenceContext) -> NamespaceInferenceResult:
    """Module-level shortcut for ``NamespaceInferencer().infer``."""
    return NamespaceInferencer().infer(context)
