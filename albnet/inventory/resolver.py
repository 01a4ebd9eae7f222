"""
albnet/inventory/resolver.py - Unified network resolver

Wires every resolver to one EC2 client and one shared TTLCache.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from albnet.aws.client import get_client
from albnet.aws.metadata import InstanceMetadataClient
from albnet.aws.pagination import paginate_all
from albnet.aws.retry import DefaultRetryPolicy, DependencyViolationRetryPolicy
from albnet.aws.tagging import ClusterTagIndex, TagIndex
from albnet.cache import TTLCache
from albnet.config import ResolverSettings
from albnet.exceptions import TransportError

from .health import NodeHealthChecker
from .security_groups import SecurityGroupResolver
from .subnets import SubnetResolver
from .types import VPC, Instance, SecurityGroup
from .vpc import MetadataClient, VPCLocator

if TYPE_CHECKING:
    from boto3 import Session

logger = logging.getLogger(__name__)


class NetworkResolver:
    """Single entry point for subnet, security group, VPC and node lookups

    Example:
        resolver = NetworkResolver.from_session(boto3.Session(), ResolverSettings.from_env())

        subnets = resolver.cluster_subnets("internet-facing")
        sgs = resolver.get_security_groups(["alb-sg"])

        # Check cache stats
        print(resolver.cache.stats)
    """

    def __init__(
        self,
        ec2: Any,
        tag_index: TagIndex,
        metadata: MetadataClient,
        settings: ResolverSettings | None = None,
        cache: TTLCache | None = None,
    ):
        """Initialize resolver

        Args:
            ec2: boto3 EC2 client
            tag_index: Cluster tag index
            metadata: Instance metadata client
            settings: Resolver settings (defaults to ResolverSettings())
            cache: Shared cache (a new one is created if not provided)
        """
        self.settings = settings or ResolverSettings()
        self._ec2 = ec2
        self._cache = cache if cache is not None else TTLCache()

        self.vpc = VPCLocator(
            ec2,
            self._cache,
            metadata,
            vpc_id_override=self.settings.vpc_id,
            ttl=self.settings.vpc_ttl,
        )
        self.subnets = SubnetResolver(
            ec2,
            self._cache,
            self.vpc,
            tag_index,
            cluster_name=self.settings.cluster_name,
            ttl=self.settings.subnet_ttl,
        )
        self.security_groups = SecurityGroupResolver(
            ec2,
            self._cache,
            self.vpc,
            delete_policy=DependencyViolationRetryPolicy(
                DefaultRetryPolicy(),
                max_attempts=self.settings.delete_max_attempts,
            ),
            ttl=self.settings.security_group_ttl,
        )
        self.health = NodeHealthChecker(ec2, self._cache, ttl=self.settings.node_health_ttl)

    @classmethod
    def from_session(
        cls,
        session: Session,
        settings: ResolverSettings | None = None,
        cache: TTLCache | None = None,
    ) -> NetworkResolver:
        """Build clients from a boto3 session"""
        settings = settings or ResolverSettings.from_env()
        logger.debug("building resolver clients (region=%s, cluster=%s)", settings.region, settings.cluster_name)
        ec2 =get_client(session, "ec2", region_name=settings.region)
        tagging = get_client(session, "resourcegroupstaggingapi", region_name=settings.region)
        return cls(
            ec2=ec2,
            tag_index=ClusterTagIndex(tagging, settings.cluster_name),
            metadata=InstanceMetadataClient(settings.imds_endpoint),
            settings=settings,
            cache=cache,
        )

    @property
    def cache(self) -> TTLCache:
        """Get the cache instance"""
        return self._cache

    # =========================================================================
    # Subnets
    # =========================================================================

    def get_subnets(self, names: Iterable[str]) -> list[str]:
        return self.subnets.get_subnets(names)

    def cluster_subnets(self, scheme: str) -> list[str]:
        return self.subnets.cluster_subnets(scheme)

    # =========================================================================
    # Security Groups
    # =========================================================================

    def get_security_groups(self, names: Iterable[str]) -> list[str]:
        return self.security_groups.get_security_groups(names)

    def get_security_group_by_id(self, group_id: str) -> SecurityGroup | None:
        return self.security_groups.get_security_group_by_id(group_id)

    def get_security_group_by_name(self, vpc_id: str, group_name: str) -> SecurityGroup | None:
        return self.security_groups.get_security_group_by_name(vpc_id, group_name)

    def delete_security_group_by_id(self, group_id: str) -> None:
        self.security_groups.delete_security_group_by_id(group_id)

    # =========================================================================
    # VPC / Instances
    # =========================================================================

    def get_vpc_id(self) -> str:
        return self.vpc.get_vpc_id()

    def get_vpc(self, vpc_id: str) -> VPC:
        return self.vpc.get_vpc(vpc_id)

    def is_node_healthy(self, instance_id: str) -> bool:
        return self.health.is_node_healthy(instance_id)

    def get_instances_by_id(self, instance_ids: Iterable[str]) -> list[Instance]:
        """Describe instances by id (uncached), flattened across reservations"""
        reservations = paginate_all(
            self._ec2,
            "describe_instances",
            "Reservations",
            InstanceIds=list(instance_ids),
        )
        return [Instance.from_api(data) for r in reservations for data in r.get("Instances", [])]

    def status(self) -> None:
        """Validate EC2 connectivity

        Raises:
            TransportError: describe_tags failed
        """
        try:
            self._ec2.describe_tags(MaxResults=6)
        except (ClientError, BotoCoreError) as e:
            raise TransportError.from_client_error("ec2", "describe_tags", e) from e
