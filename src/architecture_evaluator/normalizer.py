"""Record Normalizer - first stage of every evaluation request.

Normalizes raw, untrusted architecture descriptions (language-model
decomposition output or API payloads) into a typed ArchitectureRecord.
Handles the messy reality of model output: vendor synonyms, stringified
booleans and numbers, negative counts and values outside the enums.
Unknown values never fail the request; they degrade to none/false/0.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .errors import MalformedInput
from .schema import (
    MAX_COUNT,
    ArchitectureRecord,
    CachingLayer,
    CdnKind,
    ComputeModel,
    DatabaseKind,
    LoadBalancerKind,
    MonitoringKind,
    OrchestrationKind,
    ScalingMode,
)


@dataclass
class NormalizationReport:
    """A normalized record plus what had to be changed to get there."""
    record: ArchitectureRecord
    coerced_fields: list[str] = field(default_factory=list)
    unknown_fields: list[str] = field(default_factory=list)
    # Raw input for each coerced field
    original_values: dict[str, Any] = field(default_factory=dict)

    @property
    def is_clean(self) -> bool:
        return not self.coerced_fields and not self.unknown_fields


class RecordNormalizer:
    """Normalizes raw dictionaries into ArchitectureRecord."""

    # Alternative field names accepted on input
    FIELD_ALIASES = {
        "compute": "compute_model",
        "instance_count": "compute_count",
        "compute_instances": "compute_count",
        "scaling": "scaling_type",
        "scaling_mode": "scaling_type",
        "database": "database_type",
        "database_kind": "database_type",
        "multi_az": "database_multi_az",
        "database_multi_zone": "database_multi_az",
        "replicas": "database_replicas",
        "cache": "caching_layer",
        "caching": "caching_layer",
        "network_isolation": "vpc",
        "tls": "ssl_tls",
        "ssl": "ssl_tls",
        "iam": "iam_configured",
        "identity_policies": "iam_configured",
        "network_access_rules": "security_groups",
        "orchestration": "container_orchestration",
        "reserved_capacity": "reserved_instances",
        "spot_capacity": "spot_instances",
        "backup": "backup_strategy",
        "users": "estimated_users",
    }

    # Enum synonyms, keyed by the squashed form (lowercase, no separators)
    COMPUTE_MAP = {
        "ec2": ComputeModel.VM,
        "vm": ComputeModel.VM,
        "vms": ComputeModel.VM,
        "virtualmachine": ComputeModel.VM,
        "instance": ComputeModel.VM,
        "ecs": ComputeModel.MANAGED_CONTAINER,
        "managedcontainer": ComputeModel.MANAGED_CONTAINER,
        "containerservice": ComputeModel.MANAGED_CONTAINER,
        "eks": ComputeModel.CONTAINER_CLUSTER,
        "kubernetes": ComputeModel.CONTAINER_CLUSTER,
        "k8s": ComputeModel.CONTAINER_CLUSTER,
        "containercluster": ComputeModel.CONTAINER_CLUSTER,
        "lambda": ComputeModel.SERVERLESS_FUNCTION,
        "serverless": ComputeModel.SERVERLESS_FUNCTION,
        "serverlessfunction": ComputeModel.SERVERLESS_FUNCTION,
        "functions": ComputeModel.SERVERLESS_FUNCTION,
        "fargate": ComputeModel.SERVERLESS_CONTAINER,
        "serverlesscontainer": ComputeModel.SERVERLESS_CONTAINER,
        "cloudrun": ComputeModel.SERVERLESS_CONTAINER,
    }

    SCALING_MAP = {
        "autoscaling": ScalingMode.AUTOMATIC,
        "auto": ScalingMode.AUTOMATIC,
        "automatic": ScalingMode.AUTOMATIC,
        "asg": ScalingMode.AUTOMATIC,
        "manual": ScalingMode.MANUAL,
    }

    DATABASE_MAP = {
        "rds": DatabaseKind.RELATIONAL_MANAGED,
        "postgres": DatabaseKind.RELATIONAL_MANAGED,
        "postgresql": DatabaseKind.RELATIONAL_MANAGED,
        "mysql": DatabaseKind.RELATIONAL_MANAGED,
        "relationalmanaged": DatabaseKind.RELATIONAL_MANAGED,
        "aurora": DatabaseKind.RELATIONAL_DISTRIBUTED,
        "relationaldistributed": DatabaseKind.RELATIONAL_DISTRIBUTED,
        "dynamodb": DatabaseKind.KEY_VALUE_MANAGED,
        "dynamo": DatabaseKind.KEY_VALUE_MANAGED,
        "keyvaluemanaged": DatabaseKind.KEY_VALUE_MANAGED,
        "redisonly": DatabaseKind.CACHE_ONLY,
        "cacheonly": DatabaseKind.CACHE_ONLY,
    }

    CACHING_MAP = {
        "elasticache": CachingLayer.MANAGED_CACHE,
        "managedcache": CachingLayer.MANAGED_CACHE,
        "redis": CachingLayer.SELF_HOSTED_CACHE,
        "memcached": CachingLayer.SELF_HOSTED_CACHE,
        "selfhostedcache": CachingLayer.SELF_HOSTED_CACHE,
    }

    LOAD_BALANCER_MAP = {
        "alb": LoadBalancerKind.APPLICATION,
        "application": LoadBalancerKind.APPLICATION,
        "elb": LoadBalancerKind.APPLICATION,
        "nlb": LoadBalancerKind.NETWORK,
        "network": LoadBalancerKind.NETWORK,
    }

    CDN_MAP = {
        "cloudfront": CdnKind.CLOUDFRONT,
        "cloudflare": CdnKind.CLOUDFLARE,
    }

    MONITORING_MAP = {
        "cloudwatch": MonitoringKind.CLOUDWATCH,
        "datadog": MonitoringKind.DATADOG,
        "prometheus": MonitoringKind.PROMETHEUS,
        "grafana": MonitoringKind.PROMETHEUS,
    }

    ORCHESTRATION_MAP = {
        "kubernetes": OrchestrationKind.KUBERNETES,
        "k8s": OrchestrationKind.KUBERNETES,
        "eks": OrchestrationKind.KUBERNETES,
        "ecs": OrchestrationKind.MANAGED_CONTAINER_SERVICE,
        "managedcontainerservice": OrchestrationKind.MANAGED_CONTAINER_SERVICE,
    }

    TRUE_STRINGS = frozenset(["true", "yes", "y", "1", "enabled", "on"])
    FALSE_STRINGS = frozenset(["false", "no", "n", "0", "disabled", "off", "none", ""])

    def __init__(self):
        self._enum_maps: dict[str, tuple[type[Enum], dict[str, Enum]]] = {
            "compute_model": (ComputeModel, self.COMPUTE_MAP),
            "scaling_type": (ScalingMode, self.SCALING_MAP),
            "database_type": (DatabaseKind, self.DATABASE_MAP),
            "caching_layer": (CachingLayer, self.CACHING_MAP),
            "load_balancer": (LoadBalancerKind, self.LOAD_BALANCER_MAP),
            "cdn": (CdnKind, self.CDN_MAP),
            "monitoring": (MonitoringKind, self.MONITORING_MAP),
            "container_orchestration": (OrchestrationKind, self.ORCHESTRATION_MAP),
        }

    def normalize(self, raw: Any) -> ArchitectureRecord:
        """Normalize a raw mapping into an ArchitectureRecord.

        Raises:
            MalformedInput: If raw is not a mapping at all.
        """
        return self.normalize_with_report(raw).record

    def normalize_with_report(self, raw: Any) -> NormalizationReport:
        """Normalize a raw mapping and report coerced and unknown fields."""
        if isinstance(raw, ArchitectureRecord):
            return NormalizationReport(record=raw)
        if not isinstance(raw, dict):
            raise MalformedInput(
                f"Architecture record must be a JSON object, got {type(raw).__name__}"
            )

        values: dict[str, Any] = {}
        coerced: list[str] = []
        unknown: list[str] = []
        originals: dict[str, Any] = {}
        model_fields = ArchitectureRecord.model_fields

        for key, value in raw.items():
            name = self._canonical_field_name(str(key))
            if name not in model_fields:
                unknown.append(str(key))
                continue
            if name in values:
                # Canonical name wins over an alias
                if key != name:
                    continue

            annotation = model_fields[name].annotation
            if name in self._enum_maps:
                normalized, ok = self._normalize_enum(name, value)
            elif annotation is bool:
                normalized, ok = self._normalize_bool(value)
            elif annotation is int:
                normalized, ok = self._normalize_count(value)
            else:
                normalized, ok = value, True

            if not ok:
                coerced.append(name)
                originals[name] = value
            values[name] = normalized

        return NormalizationReport(
            record=ArchitectureRecord(**values),
            coerced_fields=coerced,
            unknown_fields=unknown,
            original_values=originals,
        )

    def _canonical_field_name(self, key: str) -> str:
        """Map an input key onto an ArchitectureRecord field name."""
        name = key.strip().lower().replace("-", "_").replace(" ", "_")
        return self.FIELD_ALIASES.get(name, name)

    def _normalize_enum(self, name: str, value: Any) -> tuple[Enum, bool]:
        """Parse an enum field, falling back to its NONE member."""
        enum_cls, synonyms = self._enum_maps[name]
        none_member = enum_cls("none")

        if isinstance(value, enum_cls):
            return value, True
        if value is None or isinstance(value, bool) and not value:
            return none_member, True
        if not isinstance(value, str):
            return none_member, False

        text = value.strip().lower()
        if text in ("", "none", "null", "n/a", "unknown"):
            return none_member, True

        # Exact wire value first, then synonyms
        try:
            return enum_cls(text), True
        except ValueError:
            pass

        squashed = text.replace("_", "").replace("-", "").replace(" ", "")
        member = synonyms.get(squashed)
        if member is not None:
            return member, True
        return none_member, False

    def _normalize_bool(self, value: Any) -> tuple[bool, bool]:
        """Parse a boolean field, falling back to False."""
        if isinstance(value, bool):
            return value, True
        if value is None:
            return False, True
        if isinstance(value, (int, float)):
            return value > 0, True
        if isinstance(value, str):
            text = value.strip().lower()
            if text in self.TRUE_STRINGS:
                return True, True
            if text in self.FALSE_STRINGS:
                return False, True
        return False, False

    def _normalize_count(self, value: Any) -> tuple[int, bool]:
        """Parse a non-negative integer field.

        Unparseable and negative values fall back to 0; values above
        MAX_COUNT are clamped to it. Both count as coercions.
        """
        if isinstance(value, bool):
            return int(value), False
        if value is None:
            return 0, True

        # Integers are compared exactly; float() overflows on huge ones
        number: Union[int, float, None] = None
        if isinstance(value, (int, float)):
            number = value
        elif isinstance(value, str):
            text = value.strip().replace(",", "").replace("_", "")
            try:
                number = int(text)
            except ValueError:
                try:
                    number = float(text)
                except ValueError:
                    number = None

        if number is None or isinstance(number, float) and not math.isfinite(number):
            return 0, False
        if number < 0:
            return 0, False
        if number > MAX_COUNT:
            return MAX_COUNT, False
        return int(number), True


def normalize_record(raw: Any) -> ArchitectureRecord:
    """Convenience wrapper around RecordNormalizer.normalize."""
    return RecordNormalizer().normalize(raw)
