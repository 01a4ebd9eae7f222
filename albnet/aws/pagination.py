"""
albnet/aws/pagination.py - Paginated describe calls

Every describe-by-id / describe-by-filter operation goes through
``paginate_all``: pages are fetched with the continuation token until none
remains. A failing page aborts the whole call; records collected from earlier
pages are dropped and a TransportError is raised instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from albnet.exceptions import TransportError

logger = logging.getLogger(__name__)


def filter_entry(name: str, values: Iterable[str]) -> dict[str, Any]:
    """Build a single EC2 filter ({"Name": ..., "Values": [...]})"""
    return {"Name": name, "Values": list(values)}


def paginate_all(
    client: Any,
    operation: str,
    result_key: str,
    service: str = "ec2",
    **params: Any,
) -> list[dict[str, Any]]:
    """Run a paginated operation to completion

    Args:
        client: boto3 client
        operation: Paginated operation name (e.g., "describe_subnets")
        result_key: Key holding the records in each page (e.g., "Subnets")
        service: Service name used in error context
        **params: Request parameters (Filters, InstanceIds, ...)

    Returns:
        All records across pages, in page order

    Raises:
        TransportError: If any page request fails
    """
    records: list[dict[str, Any]] = []

    try:
        paginator = client.get_paginator(operation)
        for page in paginator.paginate(**params):
            records.extend(page.get(result_key, []))
    except (ClientError, BotoCoreError) as e:
        logger.debug("%s failed after %d records, discarding partial result", operation, len(records))
        raise TransportError.from_client_error(service, operation, e, params=params) from e

    logger.debug("%s returned %d records", operation, len(records))
    return records
