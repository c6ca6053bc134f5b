"""Shared fixtures for the architecture evaluator tests."""

from datetime import datetime, timezone

import pytest

from architecture_evaluator.config import reset_config
from architecture_evaluator.schema import (
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

FIXED_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def single_vm_payload() -> dict:
    """A single auto-scaled VM behind an ALB with a Multi-AZ relational database.

    Scores 45 scalability, 65 reliability, 40 security, 20 cost efficiency.
    """
    return {
        "compute_model": "ec2",
        "compute_count": 1,
        "scaling_type": "auto_scaling",
        "database_type": "rds",
        "database_multi_az": True,
        "database_replicas": 0,
        "caching_layer": "none",
        "load_balancer": "alb",
        "cdn": "none",
        "api_gateway": False,
        "vpc": True,
        "private_subnets": True,
        "waf": False,
        "encryption": False,
        "ssl_tls": False,
        "iam_configured": True,
        "security_groups": False,
        "monitoring": "cloudwatch",
        "ci_cd": False,
        "container_orchestration": "none",
        "reserved_instances": False,
        "spot_instances": False,
        "serverless_components": 0,
        "multi_region": False,
        "backup_strategy": True,
        "microservices": False,
        "estimated_users": 500,
    }


@pytest.fixture
def single_vm_record(single_vm_payload) -> ArchitectureRecord:
    return ArchitectureRecord(**single_vm_payload)


@pytest.fixture
def empty_record() -> ArchitectureRecord:
    return ArchitectureRecord()


@pytest.fixture
def enterprise_record() -> ArchitectureRecord:
    """Everything a mature multi-region Kubernetes deployment would have."""
    return ArchitectureRecord(
        compute_model=ComputeModel.CONTAINER_CLUSTER,
        compute_count=6,
        scaling_type=ScalingMode.AUTOMATIC,
        database_type=DatabaseKind.RELATIONAL_DISTRIBUTED,
        database_multi_az=True,
        database_replicas=2,
        caching_layer=CachingLayer.MANAGED_CACHE,
        load_balancer=LoadBalancerKind.APPLICATION,
        cdn=CdnKind.CLOUDFRONT,
        api_gateway=True,
        vpc=True,
        private_subnets=True,
        waf=True,
        encryption=True,
        ssl_tls=True,
        iam_configured=True,
        security_groups=True,
        monitoring=MonitoringKind.DATADOG,
        ci_cd=True,
        container_orchestration=OrchestrationKind.KUBERNETES,
        reserved_instances=True,
        serverless_components=2,
        multi_region=True,
        backup_strategy=True,
        microservices=True,
        estimated_users=250000,
    )


@pytest.fixture
def fixed_time() -> datetime:
    return FIXED_TIME


@pytest.fixture(autouse=True)
def _reset_global_config():
    """Keep the global configuration isolated between tests."""
    reset_config()
    yield
    reset_config()
