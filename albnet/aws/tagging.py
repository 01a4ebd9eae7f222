"""
albnet/aws/tagging.py - Cluster tag index

Lists every resource tagged for the current cluster through the Resource
Groups Tagging API and groups them by resource kind. The subnet resolver only
reads ``ClusterResources.subnets``: resource ARN -> ordered (key, value) tags,
in the order the API returned them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from .pagination import paginate_all

logger = logging.getLogger(__name__)

TAG_NAME_CLUSTER = "kubernetes.io/cluster"

Tags = tuple[tuple[str, str], ...]


def cluster_tag_key(cluster_name: str) -> str:
    """kubernetes.io/cluster/<cluster name>"""
    return f"{TAG_NAME_CLUSTER}/{cluster_name}"


def resource_id_from_arn(arn: str) -> str:
    """Last path segment of an ARN (arn:aws:ec2:...:subnet/subnet-123 -> subnet-123)"""
    return arn.split("/")[-1]


def resource_type_from_arn(arn: str) -> str:
    """Resource type of an ARN (arn:aws:ec2:...:subnet/subnet-123 -> subnet)"""
    resource = arn.split(":", 5)[-1]
    return resource.split("/")[0]


@dataclass
class ClusterResources:
    """Cluster-tagged resources grouped by kind, each ARN -> tags"""

    subnets: dict[str, Tags] = field(default_factory=dict)
    security_groups: dict[str, Tags] = field(default_factory=dict)
    load_balancers: dict[str, Tags] = field(default_factory=dict)
    target_groups: dict[str, Tags] = field(default_factory=dict)
    other: dict[str, Tags] = field(default_factory=dict)


_KIND_BY_TYPE = {
    "subnet": "subnets",
    "security-group": "security_groups",
    "loadbalancer": "load_balancers",
    "targetgroup": "target_groups",
}


class TagIndex(Protocol):
    """Anything that can list the resources tagged for the current cluster"""

    def get_cluster_resources(self) -> ClusterResources: ...


class ClusterTagIndex:
    """Resource Groups Tagging API backed TagIndex

    Args:
        client: boto3 "resourcegroupstaggingapi" client
        cluster_name: Cluster name used in the kubernetes.io/cluster/<name> tag
    """

    def __init__(self, client: Any, cluster_name: str):
        self._client = client
        self.cluster_name = cluster_name

    def get_cluster_resources(self) -> ClusterResources:
        mappings = paginate_all(
            self._client,
            "get_resources",
            "ResourceTagMappingList",
            service="resourcegroupstaggingapi",
            TagFilters=[{"Key": cluster_tag_key(self.cluster_name)}],
        )

        resources = ClusterResources()
        for mapping in mappings:
            arn = mapping.get("ResourceARN", "")
            tags: Tags = tuple((t.get("Key", ""), t.get("Value", "")) for t in mapping.get("Tags", []))
            kind = _KIND_BY_TYPE.get(resource_type_from_arn(arn), "other")
            getattr(resources, kind)[arn] = tags

        logger.debug(
            "cluster %s: %d tagged subnets, %d other tagged resources",
            self.cluster_name,
            len(resources.subnets),
            len(mappings) - len(resources.subnets),
        )
        return resources
