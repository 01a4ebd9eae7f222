"""
albnet/inventory/vpc.py - VPC locator

Finds the VPC the running process belongs to. Resolution order:

1. explicit override (AWS_VPC_ID), returned with no API call
2. cached prior lookup
3. instance identity document -> describe_instances for this host
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from albnet.aws.metadata import IdentityDocument
from albnet.aws.pagination import paginate_all
from albnet.cache import CacheNamespace, TTLCache
from albnet.config import VPC_CACHE_TTL
from albnet.exceptions import InvariantViolation, ResourceLookupError

from .types import VPC

logger = logging.getLogger(__name__)

VPC_ID_CACHE_NAME = "EC2.GetVPCID"
VPC_ID_CACHE_KEY = ""
VPC_CACHE_NAME = "EC2.GetVPC"


class MetadataClient(Protocol):
    def get_instance_identity_document(self) -> IdentityDocument: ...


def validate_instance_vpc(reservations: list[dict[str, Any]]) -> str:
    """Ensure a describe_instances result names exactly which VPC we are in

    Returns:
        VpcId of the first instance of the first reservation

    Raises:
        ResourceLookupError: No reservation, no instance, or missing/empty VpcId
    """
    if len(reservations) < 1:
        raise ResourceLookupError(
            "vpc",
            "When looking up VPC ID could not identify instance. "
            f"Found {len(reservations)} reservations in AWS call. Should have found at least 1.",
            details={"reservations": len(reservations)},
        )

    instances = reservations[0].get("Instances", [])
    if len(instances) < 1:
        raise ResourceLookupError(
            "vpc",
            "When looking up VPC ID could not identify instance. "
            f"Found {len(instances)} instances in AWS call. Should have found at least 1.",
            details={"reservations": len(reservations), "instances": len(instances)},
        )

    vpc_id = instances[0].get("VpcId")
    if vpc_id is None:
        raise ResourceLookupError("vpc", "When looking up VPC ID the instance returned had no VPC.")
    if vpc_id == "":
        raise ResourceLookupError("vpc", "When looking up VPC ID the instance returned had an empty VPC.")

    return vpc_id


class VPCLocator:
    """Resolves and caches the VPC of the running process

    Args:
        ec2: boto3 EC2 client
        cache: Shared TTLCache
        metadata: Instance metadata client (identity document)
        vpc_id_override: Value of AWS_VPC_ID, if configured
    """

    def __init__(
        self,
        ec2: Any,
        cache: TTLCache,
        metadata: MetadataClient,
        vpc_id_override: str | None = None,
        ttl: Any = VPC_CACHE_TTL,
    ):
        self._ec2 = ec2
        self._metadata = metadata
        self._override = vpc_id_override or None
        self._vpc_ids: CacheNamespace[str] = cache.namespace(VPC_ID_CACHE_NAME, ttl)
        self._vpcs: CacheNamespace[VPC] = cache.namespace(VPC_CACHE_NAME, ttl)

    def get_vpc_id(self) -> str:
        """VPC id of the instance this process runs on"""
        if self._override:
            return self._override

        cached = self._vpc_ids.get(VPC_ID_CACHE_KEY)
        if cached is not None:
            return cached

        # only the VPC id is cached, never the instance id
        document = self._metadata.get_instance_identity_document()
        logger.info("looking up VPC of instance %s", document.instance_id)

        reservations = paginate_all(
            self._ec2,
            "describe_instances",
            "Reservations",
            InstanceIds=[document.instance_id],
        )
        vpc_id = validate_instance_vpc(reservations)

        self._vpc_ids.set(VPC_ID_CACHE_KEY, vpc_id)
        return vpc_id

    def get_vpc(self, vpc_id: str) -> VPC:
        """Describe one VPC by id (cached)

        Raises:
            InvariantViolation: The describe call did not return exactly one VPC
        """
        cached = self._vpcs.get(vpc_id)
        if cached is not None:
            return cached

        records = paginate_all(self._ec2, "describe_vpcs", "Vpcs", VpcIds=[vpc_id])
        if len(records) != 1:
            raise InvariantViolation("VPCs", vpc_id, expected=1, actual=len(records))

        vpc = VPC.from_api(records[0])
        self._vpcs.set(vpc_id, vpc)
        return vpc
