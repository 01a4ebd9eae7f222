"""
albnet/aws/client.py - boto3 client 생성 헬퍼

resolver가 사용하는 EC2 / Resource Groups Tagging API client는 모두 여기서
만듭니다. botocore adaptive retry가 쓰로틀링을 먼저 흡수하고,
DependencyViolation 재시도(albnet.aws.retry)는 그 위에서 동작합니다.

Example:
    ec2 = get_client(session, "ec2", region_name="ap-northeast-2")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from botocore.config import Config

if TYPE_CHECKING:
    import boto3

RetryMode = Literal["legacy", "standard", "adaptive"]

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_MODE: RetryMode = "adaptive"
DEFAULT_CONNECT_TIMEOUT = 5  # 초
DEFAULT_READ_TIMEOUT = 30


def client_config(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_mode: RetryMode = DEFAULT_RETRY_MODE,
    base: Config | None = None,
) -> Config:
    """botocore Config 생성 (base가 있으면 그 위에 병합, base 값 우선)"""
    config = Config(
        retries={"max_attempts": max_attempts, "mode": retry_mode},
        connect_timeout=DEFAULT_CONNECT_TIMEOUT,
        read_timeout=DEFAULT_READ_TIMEOUT,
    )
    if base is not None:
        config = config.merge(base)
    return config


def get_client(
    session: boto3.Session,
    service_name: str,
    region_name: str | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_mode: RetryMode = DEFAULT_RETRY_MODE,
    **kwargs: Any,
) -> Any:
    """Retry가 적용된 boto3 client 생성

    Args:
        session: boto3 Session
        service_name: "ec2" 또는 "resourcegroupstaggingapi"
        region_name: 리전 (None이면 세션 기본값)
        **kwargs: session.client()에 그대로 전달 (config는 병합)
    """
    config = client_config(max_attempts, retry_mode, base=kwargs.pop("config", None))
    return session.client(service_name, region_name=region_name, config=config, **kwargs)
