"""
albnet/aws - AWS transport 계층

- get_client: retry 설정이 적용된 boto3 client 생성
- paginate_all: continuation token 기반 페이지 수집
- RetryPolicy / DependencyViolationRetryPolicy: 삭제 재시도 정책
- InstanceMetadataClient: IMDSv2 identity document 조회
- ClusterTagIndex: 클러스터 태그 리소스 조회
"""

from .client import get_client
from .metadata import IdentityDocument, InstanceMetadataClient
from .pagination import filter_entry, paginate_all
from .retry import (
    DefaultRetryPolicy,
    DependencyViolationRetryPolicy,
    RetryConfig,
    RetryPolicy,
    call_with_retry,
)
from .tagging import ClusterResources, ClusterTagIndex, TagIndex

__all__: list[str] = [
    # Client
    "get_client",
    # Pagination
    "filter_entry",
    "paginate_all",
    # Retry
    "RetryConfig",
    "RetryPolicy",
    "DefaultRetryPolicy",
    "DependencyViolationRetryPolicy",
    "call_with_retry",
    # Metadata
    "IdentityDocument",
    "InstanceMetadataClient",
    # Tagging
    "ClusterResources",
    "ClusterTagIndex",
    "TagIndex",
]
