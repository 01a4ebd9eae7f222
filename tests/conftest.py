"""
tests/conftest.py - pytest 공통 픽스처

AWS API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(paged_ec2, cache, make_client_error):
        # paged_ec2: paginator 호출을 기록하는 가짜 EC2 client
        # cache: 시계를 직접 제어할 수 있는 TTLCache
        pass
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from albnet.aws.metadata import IdentityDocument  # noqa: E402
from albnet.aws.tagging import ClusterResources  # noqa: E402
from albnet.cache import TTLCache  # noqa: E402

# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """테스트 환경 설정"""
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_VPC_ID", raising=False)
    monkeypatch.delenv("AWS_REGION", raising=False)
    monkeypatch.delenv("ALBNET_CLUSTER_NAME", raising=False)
    monkeypatch.delenv("ALBNET_IMDS_ENDPOINT", raising=False)


# =============================================================================
# 캐시 / 시계
# =============================================================================


class FakeClock:
    """수동으로 진행시키는 monotonic 시계"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """테스트용 시계"""
    return FakeClock()


@pytest.fixture
def cache(clock):
    """FakeClock을 사용하는 TTLCache"""
    return TTLCache(clock=clock)


# =============================================================================
# AWS 모킹 픽스처
# =============================================================================


@pytest.fixture
def make_client_error():
    """botocore ClientError 생성 헬퍼"""

    def _make(code: str, operation: str = "DescribeSubnets", message: str = "") -> ClientError:
        return ClientError(
            {"Error": {"Code": code, "Message": message or code}},
            operation,
        )

    return _make


class FakePaginator:
    """PagedClient에 등록된 페이지를 순서대로 반환"""

    def __init__(self, client: "PagedClient", operation: str):
        self._client = client
        self._operation = operation

    def paginate(self, **params: Any):
        self._client.calls.append((self._operation, params))
        return self._iter_pages()

    def _iter_pages(self):
        failure = self._client.failures.get(self._operation)
        pages = self._client.pages.get(self._operation, [{}])
        for index, page in enumerate(pages):
            if failure is not None and failure[0] == index:
                raise failure[1]
            yield page
        if failure is not None and failure[0] >= len(pages):
            raise failure[1]


class PagedClient:
    """paginator 호출을 기록하는 가짜 boto3 client

    Attributes:
        pages: operation -> 페이지 목록
        failures: operation -> (실패할 페이지 인덱스, 예외)
        calls: (operation, params) 호출 기록
    """

    def __init__(self):
        self.pages: Dict[str, List[Dict[str, Any]]] = {}
        self.failures: Dict[str, Tuple[int, Exception]] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.delete_security_group = MagicMock(return_value={})
        self.describe_tags = MagicMock(return_value={"Tags": []})

    def get_paginator(self, operation: str) -> FakePaginator:
        return FakePaginator(self, operation)

    def calls_for(self, operation: str) -> List[Dict[str, Any]]:
        return [params for op, params in self.calls if op == operation]


@pytest.fixture
def paged_ec2():
    """가짜 EC2 client"""
    return PagedClient()


class StaticMetadata:
    """고정 identity document를 반환하는 메타데이터 client"""

    def __init__(self, instance_id: str = "i-0123456789abcdef0"):
        self.instance_id = instance_id
        self.calls = 0

    def get_instance_identity_document(self) -> IdentityDocument:
        self.calls += 1
        return IdentityDocument(instance_id=self.instance_id, region="us-east-1")


@pytest.fixture
def metadata():
    """테스트용 메타데이터 client"""
    return StaticMetadata()


class StaticTagIndex:
    """고정 ClusterResources를 반환하는 태그 인덱스"""

    def __init__(self, subnets: Optional[Dict[str, Tuple[Tuple[str, str], ...]]] = None):
        self.resources = ClusterResources(subnets=dict(subnets or {}))
        self.calls = 0

    def get_cluster_resources(self) -> ClusterResources:
        self.calls += 1
        return self.resources


@pytest.fixture
def tag_index():
    """빈 태그 인덱스"""
    return StaticTagIndex()


def subnet_arn(subnet_id: str) -> str:
    return f"arn:aws:ec2:us-east-1:123456789012:subnet/{subnet_id}"


@pytest.fixture
def make_subnet_arn():
    """서브넷 ARN 생성 헬퍼"""
    return subnet_arn


@pytest.fixture
def make_tag_index():
    """StaticTagIndex 생성 헬퍼"""
    return StaticTagIndex
