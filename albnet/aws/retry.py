"""
albnet/aws/retry.py - 재시도 정책 및 의존성 인지 삭제

삭제 호출에만 적용되는 재시도 정책을 제공합니다. 클라우드 control plane은
detach를 비동기로 전파하므로, 다른 곳에서 분리한 직후의 삭제는 아직 해제되지
않은 의존성과 경합할 수 있습니다(DependencyViolation).

주요 구성 요소:
- RetryConfig: 재시도 설정 (지수 백오프 + 지터)
- RetryPolicy: 재시도 정책 인터페이스
- DefaultRetryPolicy: transport 기본 규칙 (쓰로틀링/일시 장애 코드만 재시도)
- DependencyViolationRetryPolicy: DependencyViolation만 가로채고 나머지는 위임하는 데코레이터
- call_with_retry: 정책에 따라 호출 실행

Example:
    policy = DependencyViolationRetryPolicy(DefaultRetryPolicy())
    call_with_retry(lambda: ec2.delete_security_group(GroupId=sg_id), policy, "delete_security_group")
"""

from __future__ import annotations

import logging
import random
import time
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from botocore.exceptions import BotoCoreError, ClientError, ReadTimeoutError
from botocore.exceptions import ConnectionError as BotocoreConnectionError

from albnet.config import DELETE_MAX_ATTEMPTS
from albnet.exceptions import (
    DEPENDENCY_VIOLATION_CODE,
    THROTTLING_CODES,
    TransportError,
    get_error_code,
    is_dependency_violation,
    is_throttling,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """재시도 설정

    Attributes:
        max_retries: 최대 재시도 횟수 (0이면 재시도 안함)
        base_delay: 기본 대기 시간 (초)
        max_delay: 최대 대기 시간 (초)
        exponential_base: 지수 백오프 밑수
        jitter: 지터 사용 여부 (대기 시간에 랜덤성 추가)
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True

    def get_delay(self, attempt: int) -> float:
        """재시도 대기 시간 계산

        Args:
            attempt: 현재 시도 횟수 (0부터 시작)

        Returns:
            대기 시간 (초)
        """
        delay = self.base_delay * (self.exponential_base**attempt)
        delay = min(delay, self.max_delay)

        if self.jitter:
            # Full jitter: [0, delay]
            delay = random.uniform(0, delay)

        return delay


# 기본 재시도 설정
DEFAULT_RETRY_CONFIG = RetryConfig()

# 일시 장애 에러 코드 (쓰로틀링 코드는 albnet.exceptions.THROTTLING_CODES)
TRANSIENT_ERROR_CODES: set[str] = {
    "ServiceUnavailable",
    "ServiceUnavailableException",
    "InternalError",
    "InternalServiceError",
    "RequestTimeout",
    "RequestTimeoutException",
}

# 재시도 가능한 AWS 에러 코드 (transport 기본 규칙)
RETRYABLE_ERROR_CODES: set[str] = THROTTLING_CODES | TRANSIENT_ERROR_CODES


def is_retryable(error: Exception) -> bool:
    """transport 기본 규칙상 재시도 가능한 에러인지 확인

    쓰로틀링/일시 장애 에러 코드이거나 botocore 연결/읽기 타임아웃 에러인
    경우 True를 반환합니다.
    """
    if isinstance(error, (BotocoreConnectionError, ReadTimeoutError)):
        return True
    return is_throttling(error) or get_error_code(error) in TRANSIENT_ERROR_CODES


class RetryPolicy(ABC):
    """재시도 정책 인터페이스

    attempt는 같은 attempt_key로 분류된 실패의 누적 횟수(1부터 시작)입니다.
    전체 시도 횟수는 call_with_retry가 max_attempts로 제한합니다.
    """

    @property
    @abstractmethod
    def max_attempts(self) -> int:
        """총 시도 횟수 상한"""

    @abstractmethod
    def should_retry(self, error: Exception, attempt: int) -> bool:
        """같은 종류의 실패가 attempt번째일 때 재시도 여부"""

    @abstractmethod
    def get_delay(self, attempt: int) -> float:
        """다음 시도 전 대기 시간 (초)"""

    def attempt_key(self, error: Exception) -> str:
        """실패 횟수를 따로 셀 분류 키"""
        return "default"


class DefaultRetryPolicy(RetryPolicy):
    """transport 기본 재시도 규칙

    쓰로틀링/일시 장애 코드만 RetryConfig 한도 내에서 재시도합니다.
    """

    def __init__(self, config: RetryConfig | None = None):
        self.config = config or DEFAULT_RETRY_CONFIG

    @property
    def max_attempts(self) -> int:
        return self.config.max_retries + 1

    def should_retry(self, error: Exception, attempt: int) -> bool:
        return attempt < self.max_attempts and is_retryable(error)

    def get_delay(self, attempt: int) -> float:
        return self.config.get_delay(attempt - 1)


class DependencyViolationRetryPolicy(RetryPolicy):
    """DependencyViolation 재시도 데코레이터

    DependencyViolation 실패는 max_attempts회까지 재시도하고, 그 외 실패는
    감싼 정책(inner)에 위임합니다. inner는 자기 분류의 실패 횟수만 받으므로
    앞선 DependencyViolation 재시도가 inner 한도를 소모하지 않습니다.
    """

    def __init__(self, inner: RetryPolicy, max_attempts: int = DELETE_MAX_ATTEMPTS):
        self.inner = inner
        self._max_attempts = max_attempts

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def attempt_key(self, error: Exception) -> str:
        if is_dependency_violation(error):
            return DEPENDENCY_VIOLATION_CODE
        return self.inner.attempt_key(error)

    def should_retry(self, error: Exception, attempt: int) -> bool:
        if is_dependency_violation(error):
            return attempt < self._max_attempts
        return self.inner.should_retry(error, attempt)

    def get_delay(self, attempt: int) -> float:
        return self.inner.get_delay(attempt)


def call_with_retry(
    fn: Callable[[], T],
    policy: RetryPolicy,
    operation: str,
    service: str = "ec2",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """정책에 따라 fn을 재시도하며 실행

    Args:
        fn: 실행할 AWS API 호출
        policy: 재시도 정책
        operation: 에러 컨텍스트용 작업 이름
        service: 에러 컨텍스트용 서비스 이름
        sleep: 대기 함수 (테스트 주입용)

    Returns:
        fn의 반환값

    Raises:
        TransportError: 재시도 불가 에러 또는 재시도 한도 소진
    """
    failures: Counter[str] = Counter()
    attempt = 0
    while True:
        attempt += 1
        try:
            return fn()
        except (ClientError, BotoCoreError) as e:
            key = policy.attempt_key(e)
            failures[key] += 1

            if attempt >= policy.max_attempts or not policy.should_retry(e, failures[key]):
                logger.debug("%s.%s 실패 (시도 %d회): %s", service, operation, attempt, get_error_code(e))
                raise TransportError.from_client_error(service, operation, e) from e

            delay = policy.get_delay(failures[key])
            logger.warning(
                "%s.%s 재시도 %d/%d (%s), %.2f초 대기",
                service,
                operation,
                attempt,
                policy.max_attempts,
                get_error_code(e),
                delay,
            )
            sleep(delay)
