"""
albnet/aws/metadata.py - EC2 instance metadata (self-identification)

Fetches the instance identity document of the host the process runs on,
using the IMDSv2 session-token flow. Only used by the VPC locator when no
override is configured and no cached VPC id exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from albnet.config import DEFAULT_IMDS_ENDPOINT
from albnet.exceptions import ResourceLookupError, TransportError

logger = logging.getLogger(__name__)

TOKEN_PATH = "/latest/api/token"
IDENTITY_DOCUMENT_PATH = "/latest/dynamic/instance-identity/document"
TOKEN_TTL_SECONDS = 21600
DEFAULT_TIMEOUT = 2.0


@dataclass(frozen=True)
class IdentityDocument:
    """Subset of the instance identity document"""

    instance_id: str
    region: str = ""
    availability_zone: str = ""
    account_id: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> IdentityDocument:
        instance_id = data.get("instanceId", "")
        if not instance_id:
            raise ResourceLookupError(
                "instance-identity-document",
                "Instance identity document did not contain an instanceId",
                details={"keys": sorted(data)},
            )
        return cls(
            instance_id=instance_id,
            region=data.get("region", ""),
            availability_zone=data.get("availabilityZone", ""),
            account_id=data.get("accountId", ""),
        )


class InstanceMetadataClient:
    """Minimal IMDSv2 client

    Args:
        endpoint: Metadata service base URL
        session: requests Session (injectable for tests)
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_IMDS_ENDPOINT,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.endpoint = endpoint.rstrip("/")
        self._session = session or requests.Session()
        self.timeout = timeout

    def _get_token(self) -> str:
        response = self._session.put(
            f"{self.endpoint}{TOKEN_PATH}",
            headers={"X-aws-ec2-metadata-token-ttl-seconds": str(TOKEN_TTL_SECONDS)},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.text

    def get_instance_identity_document(self) -> IdentityDocument:
        """Return the identity document of the current host

        Raises:
            TransportError: Metadata service unreachable or non-2xx response
            ResourceLookupError: Document is not valid JSON or lacks instanceId
        """
        try:
            token = self._get_token()
            response = self._session.get(
                f"{self.endpoint}{IDENTITY_DOCUMENT_PATH}",
                headers={"X-aws-ec2-metadata-token": token},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(
                service="ec2metadata",
                operation="get_instance_identity_document",
                error_code=e.__class__.__name__,
                error_message=str(e),
                cause=e,
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ResourceLookupError(
                "instance-identity-document",
                "Instance identity document is not valid JSON",
                cause=e,
            ) from e

        document = IdentityDocument.from_api(data)
        logger.debug("identity document: instance %s in %s", document.instance_id, document.region)
        return document
