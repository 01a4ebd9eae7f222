"""설정 모듈

리소스 해석 계층의 캐시 TTL, 재시도 한도, 환경 변수 오버라이드 설정

Usage:
    from albnet.config import ResolverSettings

    settings = ResolverSettings.from_env()

    if settings.vpc_id:
        # AWS_VPC_ID 오버라이드 사용 (API 호출 없음)
        pass
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta

# 환경 변수 이름
ENV_VPC_ID = "AWS_VPC_ID"
ENV_REGION = "AWS_REGION"
ENV_DEFAULT_REGION = "AWS_DEFAULT_REGION"
ENV_CLUSTER_NAME = "ALBNET_CLUSTER_NAME"
ENV_IMDS_ENDPOINT = "ALBNET_IMDS_ENDPOINT"

DEFAULT_IMDS_ENDPOINT = "http://169.254.169.254"

# 캐시 TTL
GET_SUBNETS_CACHE_TTL = timedelta(minutes=60)
GET_SECURITY_GROUPS_CACHE_TTL = timedelta(minutes=60)
VPC_CACHE_TTL = timedelta(minutes=60)
IS_NODE_HEALTHY_CACHE_TTL = timedelta(minutes=5)

# DependencyViolation 재시도 한도 (총 시도 횟수)
DELETE_MAX_ATTEMPTS = 20


@dataclass
class ResolverSettings:
    """리소스 해석 설정

    Attributes:
        vpc_id: VPC ID 오버라이드 (설정 시 메타데이터 조회 생략)
        region: AWS 리전 (None이면 세션 기본값)
        cluster_name: 클러스터 태그 조회용 클러스터 이름
        imds_endpoint: 인스턴스 메타데이터 서비스 주소
        subnet_ttl: 서브넷 캐시 TTL
        security_group_ttl: 보안 그룹 캐시 TTL
        vpc_ttl: VPC 캐시 TTL
        node_health_ttl: 노드 상태 캐시 TTL
        delete_max_attempts: DependencyViolation 재시도 최대 시도 횟수
    """

    vpc_id: str | None = None
    region: str | None = None
    cluster_name: str = ""
    imds_endpoint: str = DEFAULT_IMDS_ENDPOINT
    subnet_ttl: timedelta = field(default=GET_SUBNETS_CACHE_TTL)
    security_group_ttl: timedelta = field(default=GET_SECURITY_GROUPS_CACHE_TTL)
    vpc_ttl: timedelta = field(default=VPC_CACHE_TTL)
    node_health_ttl: timedelta = field(default=IS_NODE_HEALTHY_CACHE_TTL)
    delete_max_attempts: int = DELETE_MAX_ATTEMPTS

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ResolverSettings:
        """환경 변수로부터 설정 생성

        빈 문자열은 설정되지 않은 것으로 취급합니다.
        """
        env = os.environ if environ is None else environ

        return cls(
            vpc_id=env.get(ENV_VPC_ID) or None,
            region=env.get(ENV_REGION) or env.get(ENV_DEFAULT_REGION) or None,
            cluster_name=env.get(ENV_CLUSTER_NAME, ""),
            imds_endpoint=env.get(ENV_IMDS_ENDPOINT) or DEFAULT_IMDS_ENDPOINT,
        )
