"""
Architecture Decomposer - Turns free-text descriptions into records.

The primary path asks a language model to extract the structured record
using a fixed prompt. An optional keyword heuristic handles offline use when
no provider can answer.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

from .app_logging import get_logger
from .errors import MalformedInput, UpstreamUnavailable
from .normalizer import RecordNormalizer
from .prompts import DECOMPOSITION_PROMPT
from .providers import ProviderChain, strip_code_fences
from .schema import ArchitectureRecord

logger = get_logger("decomposer")

HEURISTIC_PROVIDER_NAME = "Keyword heuristics"


@dataclass(frozen=True)
class DecompositionOutcome:
    """A decomposed record and the provider that produced it."""
    record: ArchitectureRecord
    provider: str


class KeywordDecomposer:
    """Extracts a record by matching technology keywords in the description.

    Much less accurate than a language model. Each field takes the value of
    the first matching pattern; anything unmentioned keeps its default.
    """

    # (field, value, keywords); first match per field wins
    ENUM_KEYWORDS: list[tuple[str, str, list[str]]] = [
        ('compute_model', 'lambda', ['lambda', 'serverless function', 'cloud function']),
        ('compute_model', 'fargate', ['fargate', 'cloud run']),
        ('compute_model', 'eks', ['eks', 'kubernetes', 'k8s', 'aks', 'gke']),
        ('compute_model', 'ecs', ['ecs', 'docker', 'container']),
        ('compute_model', 'ec2', ['ec2', 'virtual machine', 'vm', 'vms', 'instances', 'server', 'servers']),
        ('scaling_type', 'auto_scaling', ['auto scaling', 'autoscaling', 'auto-scaling', 'autoscale']),
        ('scaling_type', 'manual', ['manual scaling', 'manually scale', 'scale manually']),
        ('database_type', 'aurora', ['aurora']),
        ('database_type', 'dynamodb', ['dynamodb', 'dynamo']),
        ('database_type', 'rds', ['rds', 'postgres', 'postgresql', 'mysql', 'mariadb', 'sql server']),
        ('caching_layer', 'elasticache', ['elasticache', 'memcached']),
        ('caching_layer', 'redis', ['redis']),
        ('load_balancer', 'nlb', ['nlb', 'network load balancer']),
        ('load_balancer', 'alb', ['alb', 'application load balancer', 'load balancer', 'elb']),
        ('cdn', 'cloudflare', ['cloudflare']),
        ('cdn', 'cloudfront', ['cloudfront', 'cdn']),
        ('monitoring', 'datadog', ['datadog']),
        ('monitoring', 'prometheus', ['prometheus', 'grafana']),
        ('monitoring', 'cloudwatch', ['cloudwatch', 'monitoring', 'alarms']),
        ('container_orchestration', 'kubernetes', ['kubernetes', 'k8s', 'eks', 'aks', 'gke']),
        ('container_orchestration', 'ecs', ['ecs']),
    ]

    BOOL_KEYWORDS: dict[str, list[str]] = {
        'database_multi_az': ['multi-az', 'multi az', 'multiaz'],
        'api_gateway': ['api gateway', 'apigateway'],
        'vpc': ['vpc', 'virtual private cloud', 'private network'],
        'private_subnets': ['private subnet', 'private subnets'],
        'waf': ['waf', 'web application firewall', 'firewall'],
        'encryption': ['encryption', 'encrypted', 'kms'],
        'ssl_tls': ['ssl', 'tls', 'https'],
        'iam_configured': ['iam', 'least privilege', 'least-privilege'],
        'security_groups': ['security group', 'security groups'],
        'ci_cd': ['ci/cd', 'cicd', 'ci-cd', 'pipeline', 'github actions', 'codepipeline'],
        'reserved_instances': ['reserved instance', 'reserved instances', 'savings plan'],
        'spot_instances': ['spot instance', 'spot instances'],
        'multi_region': ['multi-region', 'multi region', 'multiple regions', 'cross-region'],
        'backup_strategy': ['backup', 'backups', 'snapshot', 'snapshots'],
        'microservices': ['microservice', 'microservices'],
    }

    SERVERLESS_KEYWORDS = ['lambda', 'serverless', 'step functions', 'sqs', 'sns', 'eventbridge']

    COUNT_PATTERNS: dict[str, re.Pattern] = {
        'compute_count': re.compile(
            r'(\d+)\s+(?:\w+\s+)?(?:instances|servers|vms|nodes|containers|tasks)\b'
        ),
        'database_replicas': re.compile(r'(\d+)\s+(?:read\s+)?replicas?\b'),
    }

    USERS_PATTERN = re.compile(r'(\d[\d,.]*)\s*(k|m|thousand|million)?\s+(?:\w+\s+)?users\b')

    def __init__(self, normalizer: Optional[RecordNormalizer] = None):
        self.normalizer = normalizer or RecordNormalizer()

    @staticmethod
    def _mentions(text: str, keyword: str) -> bool:
        return re.search(rf'(?<![\w-]){re.escape(keyword)}(?![\w-])', text) is not None

    def extract(self, description: str) -> dict[str, Any]:
        """Extract raw field values from a description."""
        text = description.lower()
        raw: dict[str, Any] = {}

        for field, value, keywords in self.ENUM_KEYWORDS:
            if field in raw:
                continue
            if any(self._mentions(text, kw) for kw in keywords):
                raw[field] = value

        for field, keywords in self.BOOL_KEYWORDS.items():
            raw[field] = any(self._mentions(text, kw) for kw in keywords)

        raw['serverless_components'] = sum(
            1 for kw in self.SERVERLESS_KEYWORDS if self._mentions(text, kw)
        )

        for field, pattern in self.COUNT_PATTERNS.items():
            match = pattern.search(text)
            if match:
                raw[field] = int(match.group(1))

        users = self._extract_users(text)
        if users:
            raw['estimated_users'] = users

        return raw

    def _extract_users(self, text: str) -> int:
        match = self.USERS_PATTERN.search(text)
        if not match:
            return 0
        try:
            number = float(match.group(1).replace(',', ''))
        except ValueError:
            return 0
        scale = {'k': 1_000, 'thousand': 1_000, 'm': 1_000_000, 'million': 1_000_000}
        return int(number * scale.get(match.group(2) or '', 1))

    def decompose(self, description: str) -> ArchitectureRecord:
        raw = self.extract(description)
        logger.debug(f"Keyword heuristics matched {sum(1 for v in raw.values() if v)} field(s)")
        return self.normalizer.normalize(raw)


class ArchitectureDecomposer:
    """Decomposes descriptions into records via the provider chain."""

    def __init__(
        self,
        chain: ProviderChain,
        normalizer: Optional[RecordNormalizer] = None,
        heuristic_fallback: bool = False,
    ):
        """
        Initialize the decomposer.

        Args:
            chain: Language-model providers in preference order
            normalizer: Record normalizer for the model's JSON reply
            heuristic_fallback: Use keyword heuristics when no provider answers
        """
        self.chain = chain
        self.normalizer = normalizer or RecordNormalizer()
        self.heuristic_fallback = heuristic_fallback
        self._keywords = KeywordDecomposer(self.normalizer)

    def decompose(self, description: str) -> DecompositionOutcome:
        """Decompose a free-text description.

        Args:
            description: Natural-language architecture description

        Returns:
            DecompositionOutcome with the normalized record and provider name

        Raises:
            UpstreamUnavailable: No provider answered and heuristics are disabled
            MalformedInput: The model's reply is not a JSON object
        """
        try:
            completion = self.chain.complete(DECOMPOSITION_PROMPT, description)
        except UpstreamUnavailable:
            if not self.heuristic_fallback:
                raise
            logger.warning("No language model available; decomposing with keyword heuristics")
            return DecompositionOutcome(
                record=self._keywords.decompose(description),
                provider=HEURISTIC_PROVIDER_NAME,
            )

        record = self.parse_reply(completion.text)
        logger.info(f"Decomposed description using {completion.provider}")
        return DecompositionOutcome(record=record, provider=completion.provider)

    def parse_reply(self, text: str) -> ArchitectureRecord:
        """Parse a model reply (optionally code-fenced JSON) into a record."""
        cleaned = strip_code_fences(text)
        if not cleaned:
            raise MalformedInput("Decomposition returned an empty response")
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise MalformedInput(f"Decomposition returned invalid JSON: {e.msg}") from e
        if not isinstance(data, dict):
            raise MalformedInput("Decomposition returned JSON that is not an object")
        return self.normalizer.normalize(data)
