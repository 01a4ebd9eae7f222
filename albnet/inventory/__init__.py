"""
albnet/inventory - Network resource resolution

Resolves name- and tag-based references to subnets, security groups, VPCs
and instances into concrete ids, memoized in a shared TTLCache.

Classes:
    - NetworkResolver: Facade wiring every resolver to one client and cache
    - SubnetResolver / SecurityGroupResolver / VPCLocator / NodeHealthChecker

Usage:
    from albnet.cache import TTLCache
    from albnet.inventory import NetworkResolver

    resolver = NetworkResolver.from_session(session, cache=TTLCache())
    subnet_ids = resolver.cluster_subnets("internal")
"""

from .health import NodeHealthChecker
from .resolver import NetworkResolver
from .security_groups import SecurityGroupResolver
from .subnets import (
    SCHEME_INTERNAL,
    SCHEME_INTERNET_FACING,
    TAG_NAME_SUBNET_INTERNAL_ELB,
    TAG_NAME_SUBNET_PUBLIC_ELB,
    SubnetResolver,
    subnet_is_usable,
)
from .types import VPC, Instance, InstanceStatus, SecurityGroup, Subnet
from .vpc import VPCLocator

__all__ = [
    # Resolvers
    "NetworkResolver",
    "SubnetResolver",
    "SecurityGroupResolver",
    "VPCLocator",
    "NodeHealthChecker",
    "subnet_is_usable",
    # Constants
    "SCHEME_INTERNAL",
    "SCHEME_INTERNET_FACING",
    "TAG_NAME_SUBNET_INTERNAL_ELB",
    "TAG_NAME_SUBNET_PUBLIC_ELB",
    # Types
    "Subnet",
    "SecurityGroup",
    "VPC",
    "Instance",
    "InstanceStatus",
]
