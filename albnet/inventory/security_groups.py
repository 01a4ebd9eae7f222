"""
albnet/inventory/security_groups.py - Security Group resolution and deletion
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from albnet.aws.pagination import filter_entry, paginate_all
from albnet.aws.retry import DefaultRetryPolicy, DependencyViolationRetryPolicy, RetryPolicy, call_with_retry
from albnet.cache import CacheNamespace, TTLCache
from albnet.config import GET_SECURITY_GROUPS_CACHE_TTL
from albnet.exceptions import TransportError, is_not_found

from .types import SecurityGroup
from .vpc import VPCLocator

logger = logging.getLogger(__name__)

GET_SECURITY_GROUPS_CACHE_NAME = "EC2.GetSecurityGroups"


class SecurityGroupResolver:
    """Security group lookups by Name tag, id or group name

    Args:
        ec2: boto3 EC2 client
        cache: Shared TTLCache
        vpc: VPC locator (scopes name lookups to our VPC)
        delete_policy: Retry policy for deletions
            (default: DependencyViolation retries over the default policy)
    """

    def __init__(
        self,
        ec2: Any,
        cache: TTLCache,
        vpc: VPCLocator,
        delete_policy: RetryPolicy | None = None,
        ttl: Any = GET_SECURITY_GROUPS_CACHE_TTL,
    ):
        self._ec2 = ec2
        self._vpc = vpc
        self.delete_policy = delete_policy or DependencyViolationRetryPolicy(DefaultRetryPolicy())
        self._ids_by_name: CacheNamespace[str] = cache.namespace(GET_SECURITY_GROUPS_CACHE_NAME, ttl)

    def get_security_groups(self, names: Iterable[str]) -> list[str]:
        """Security group ids for Name tag values in our VPC"""
        groups: list[str] = []
        query_names: list[str] = []

        for name in names:
            cached = self._ids_by_name.get(name)
            if cached is not None:
                groups.append(cached)
            else:
                query_names.append(name)

        if not query_names:
            return groups

        records = paginate_all(
            self._ec2,
            "describe_security_groups",
            "SecurityGroups",
            Filters=[
                filter_entry("tag:Name", query_names),
                filter_entry("vpc-id", [self._vpc.get_vpc_id()]),
            ],
        )

        for data in records:
            sg = SecurityGroup.from_api(data)
            name = sg.name
            if name is not None:
                self._ids_by_name.set(name, sg.group_id)
            groups.append(sg.group_id)

        return groups

    def get_security_group_by_id(self, group_id: str) -> SecurityGroup | None:
        """Uncached lookup by id, None when nothing matches"""
        try:
            records = paginate_all(
                self._ec2,
                "describe_security_groups",
                "SecurityGroups",
                GroupIds=[group_id],
            )
        except TransportError as e:
            # EC2 rejects unknown ids instead of returning an empty page
            if is_not_found(e):
                return None
            raise
        if not records:
            return None
        return SecurityGroup.from_api(records[0])

    def get_security_group_by_name(self, vpc_id: str, group_name: str) -> SecurityGroup | None:
        """Uncached lookup by group name (unique within a VPC), None when nothing matches"""
        records = paginate_all(
            self._ec2,
            "describe_security_groups",
            "SecurityGroups",
            Filters=[
                filter_entry("vpc-id", [vpc_id]),
                filter_entry("group-name", [group_name]),
            ],
        )
        if not records:
            return None
        return SecurityGroup.from_api(records[0])

    def delete_security_group_by_id(self, group_id: str) -> None:
        """Delete a security group, retrying while dependencies are still attached

        Raises:
            TransportError: Non-retryable failure or retries exhausted
        """
        logger.info("deleting security group %s", group_id)
        call_with_retry(
            lambda: self._ec2.delete_security_group(GroupId=group_id),
            self.delete_policy,
            operation="delete_security_group",
        )
