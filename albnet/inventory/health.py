"""
albnet/inventory/health.py - Node readiness
"""

from __future__ import annotations

import logging
from typing import Any

from albnet.aws.pagination import paginate_all
from albnet.cache import CacheNamespace, TTLCache
from albnet.config import IS_NODE_HEALTHY_CACHE_TTL

from .types import InstanceStatus

logger = logging.getLogger(__name__)

IS_NODE_HEALTHY_CACHE_NAME = "EC2.IsNodeHealthy"


class NodeHealthChecker:
    """Cached running/not-running verdict per instance"""

    def __init__(self, ec2: Any, cache: TTLCache, ttl: Any = IS_NODE_HEALTHY_CACHE_TTL):
        self._ec2 = ec2
        self._verdicts: CacheNamespace[bool] = cache.namespace(IS_NODE_HEALTHY_CACHE_NAME, ttl)

    def is_node_healthy(self, instance_id: str) -> bool:
        """True if the instance reports the running state

        An instance missing from the status response yields False and is not
        cached, so the next call asks again.
        """
        cached = self._verdicts.get(instance_id)
        if cached is not None:
            return cached

        records = paginate_all(
            self._ec2,
            "describe_instance_status",
            "InstanceStatuses",
            InstanceIds=[instance_id],
        )

        for data in records:
            status = InstanceStatus.from_api(data)
            if status.instance_id != instance_id:
                continue
            healthy = status.is_running
            self._verdicts.set(instance_id, healthy)
            return healthy

        logger.debug("no instance status for %s", instance_id)
        return False
