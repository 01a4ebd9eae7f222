"""
albnet/inventory/subnets.py - Subnet resolution

Resolves subnets either by Name tag or by cluster ownership tags. Cluster
subnets are deduplicated by availability zone: load balancers cannot be
placed in two subnets of the same AZ and need at least two AZs.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from albnet.aws.pagination import filter_entry, paginate_all
from albnet.aws.tagging import TAG_NAME_CLUSTER, TagIndex, cluster_tag_key, resource_id_from_arn
from albnet.cache import CacheNamespace, TTLCache
from albnet.config import GET_SUBNETS_CACHE_TTL
from albnet.exceptions import ResourceLookupError, ValidationError

from .types import Subnet
from .vpc import VPCLocator

logger = logging.getLogger(__name__)

GET_SUBNETS_CACHE_NAME = "EC2.GetSubnets"
CLUSTER_SUBNETS_CACHE_NAME = "ClusterSubnets"

SCHEME_INTERNAL = "internal"
SCHEME_INTERNET_FACING = "internet-facing"

TAG_NAME_SUBNET_INTERNAL_ELB = "kubernetes.io/role/internal-elb"
TAG_NAME_SUBNET_PUBLIC_ELB = "kubernetes.io/role/elb"

ROLE_TAG_BY_SCHEME = {
    SCHEME_INTERNAL: TAG_NAME_SUBNET_INTERNAL_ELB,
    SCHEME_INTERNET_FACING: TAG_NAME_SUBNET_PUBLIC_ELB,
}

MIN_CLUSTER_SUBNETS = 2


def subnet_is_usable(candidate: Subnet, admitted: Iterable[Subnet]) -> bool:
    """False if an admitted subnet already covers the candidate's AZ"""
    return all(candidate.availability_zone != s.availability_zone for s in admitted)


def role_tag_for_scheme(scheme: str) -> str:
    """Subnet role tag key required for a load balancer scheme

    Raises:
        ValidationError: scheme is neither "internal" nor "internet-facing"
    """
    try:
        return ROLE_TAG_BY_SCHEME[scheme]
    except KeyError:
        raise ValidationError(
            "scheme",
            scheme,
            f"{SCHEME_INTERNAL!r} or {SCHEME_INTERNET_FACING!r}",
        ) from None


class SubnetResolver:
    """Name- and tag-based subnet lookups

    Args:
        ec2: boto3 EC2 client
        cache: Shared TTLCache
        vpc: VPC locator (scopes name lookups to our VPC)
        tag_index: Cluster tag index
        cluster_name: Cluster name (used in error messages)
    """

    def __init__(
        self,
        ec2: Any,
        cache: TTLCache,
        vpc: VPCLocator,
        tag_index: TagIndex,
        cluster_name: str = "",
        ttl: Any = GET_SUBNETS_CACHE_TTL,
    ):
        self._ec2 = ec2
        self._vpc = vpc
        self._tag_index = tag_index
        self.cluster_name = cluster_name
        self._ids_by_name: CacheNamespace[str] = cache.namespace(GET_SUBNETS_CACHE_NAME, ttl)
        self._subnets_by_id: CacheNamespace[Subnet] = cache.namespace(CLUSTER_SUBNETS_CACHE_NAME, ttl)

    def get_subnets(self, names: Iterable[str]) -> list[str]:
        """Subnet ids for Name tag values in our VPC

        Cached names are answered without a call; the rest go into one
        describe_subnets. Returned subnets without a Name tag are left out.
        """
        subnets: list[str] = []
        query_names: list[str] = []

        for name in names:
            cached = self._ids_by_name.get(name)
            if cached is not None:
                subnets.append(cached)
            else:
                query_names.append(name)

        if not query_names:
            return subnets

        logger.debug("subnet cache miss for %s", query_names)
        records = paginate_all(
            self._ec2,
            "describe_subnets",
            "Subnets",
            Filters=[
                filter_entry("tag:Name", query_names),
                filter_entry("vpc-id", [self._vpc.get_vpc_id()]),
            ],
        )

        for data in records:
            subnet = Subnet.from_api(data)
            name = subnet.name
            if name is None:
                continue
            self._ids_by_name.set(name, subnet.subnet_id)
            subnets.append(subnet.subnet_id)

        return subnets

    def cluster_subnets(self, scheme: str) -> list[str]:
        """Cluster-tagged subnets for a load balancer scheme, one per AZ

        Candidates are taken in discovery order and the first subnet seen in
        an AZ wins.

        Returns:
            Subnet ids sorted lexicographically

        Raises:
            ValidationError: Unknown scheme (before any network access)
            ResourceLookupError: Fewer than two AZ-distinct subnets resolved
        """
        role_tag = role_tag_for_scheme(scheme)

        resources = self._tag_index.get_cluster_resources()

        candidate_ids: list[str] = []
        for arn, tags in resources.subnets.items():
            if any(key == role_tag for key, _ in tags):
                subnet_id = resource_id_from_arn(arn)
                if subnet_id not in candidate_ids:
                    candidate_ids.append(subnet_id)

        known: dict[str, Subnet] = {}
        missing: list[str] = []
        for subnet_id in candidate_ids:
            cached = self._subnets_by_id.get(subnet_id)
            if cached is not None:
                known[subnet_id] = cached
            else:
                missing.append(subnet_id)

        fetched: set[str] = set()
        if missing:
            records = paginate_all(
                self._ec2,
                "describe_subnets",
                "Subnets",
                Filters=[filter_entry("subnet-id", missing)],
            )
            for data in records:
                subnet = Subnet.from_api(data)
                known[subnet.subnet_id] = subnet
                fetched.add(subnet.subnet_id)

        admitted: list[Subnet] = []
        for subnet_id in candidate_ids:
            subnet = known.get(subnet_id)
            if subnet is None or not subnet_is_usable(subnet, admitted):
                continue
            admitted.append(subnet)
            if subnet_id in fetched:
                self._subnets_by_id.set(subnet_id, subnet)

        out = sorted(s.subnet_id for s in admitted)

        if len(out) < MIN_CLUSTER_SUBNETS:
            raise self._insufficient_subnets(scheme, role_tag, out)

        logger.debug("cluster subnets for %s: %s", scheme, out)
        return out

    def _insufficient_subnets(self, scheme: str, role_tag: str, found: list[str]) -> ResourceLookupError:
        cluster_tag = cluster_tag_key(self.cluster_name) if self.cluster_name else f"{TAG_NAME_CLUSTER}/<cluster name>"
        return ResourceLookupError(
            "subnets",
            f"Retrieval of subnets failed to resolve {MIN_CLUSTER_SUBNETS} qualified subnets. "
            f"Subnets must contain the {cluster_tag} tag with a value of shared or owned "
            f"and the {role_tag} tag signifying it should be used for ALBs. "
            f"Additionally, there must be at least {MIN_CLUSTER_SUBNETS} subnets with unique "
            "availability zones as required by ALBs. Either tag subnets to meet this requirement "
            "or explicitly list the subnets to use for ALB creation. "
            f"The subnets that did resolve were {json.dumps(found)}.",
            details={
                "scheme": scheme,
                "cluster_tag": cluster_tag,
                "role_tag": role_tag,
                "subnets": found,
            },
        )
