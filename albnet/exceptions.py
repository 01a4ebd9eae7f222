"""
albnet/exceptions.py - 통합 예외 계층 구조

리소스 해석(resolution) 계층 전체에서 사용되는 예외 클래스들을 정의합니다.
모든 예외는 입력값(필터, 인스턴스 ID, scheme 등)을 details에 담아 전달합니다.

예외 계층 구조:
    AlbNetError (베이스)
    ├── ValidationError (입력 검증)
    ├── ResourceLookupError (메타데이터/응답 이상, AZ 다양성 부족)
    ├── TransportError (AWS API 호출 실패, 페이지 실패 포함)
    └── InvariantViolation (예상치 못한 결과 개수)

Usage:
    from albnet.exceptions import TransportError

    try:
        ec2.describe_subnets(Filters=filters)
    except ClientError as e:
        raise TransportError.from_client_error("ec2", "describe_subnets", e) from e
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class AlbNetError(Exception):
    """albnet 기본 예외 클래스

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 입력 검증
# =============================================================================


class ValidationError(AlbNetError):
    """입력 검증 오류"""

    def __init__(
        self,
        field: str,
        value: Any,
        expected: str,
        cause: Optional[Exception] = None,
    ):
        message = f"Invalid {field} [{value}]: expected {expected}"
        super().__init__(message, cause)
        self.field = field
        self.value = value
        self.expected = expected
        self.details.update(
            {
                "field": field,
                "value": str(value),
                "expected": expected,
            }
        )


# =============================================================================
# 조회 실패
# =============================================================================


class ResourceLookupError(AlbNetError):
    """리소스 조회 결과가 기대와 다른 경우

    메타데이터 문서 이상, 비정상 응답, 가용 영역 다양성 부족 등.
    """

    def __init__(
        self,
        resource: str,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, cause, details)
        self.resource = resource
        self.details["resource"] = resource


class InvariantViolation(AlbNetError):
    """결과 개수(cardinality) 불변식 위반"""

    def __init__(
        self,
        resource: str,
        identifier: str,
        expected: int,
        actual: int,
    ):
        message = f"Invalid amount of {resource} {actual} returned for {identifier} (expected {expected})"
        super().__init__(message)
        self.resource = resource
        self.identifier = identifier
        self.expected = expected
        self.actual = actual
        self.details.update(
            {
                "resource": resource,
                "identifier": identifier,
                "expected": expected,
                "actual": actual,
            }
        )


# =============================================================================
# AWS API 호출 실패
# =============================================================================


class TransportError(AlbNetError):
    """AWS API 호출 관련 예외

    boto3/botocore 예외를 래핑하여 일관된 예외 처리를 제공합니다.
    """

    def __init__(
        self,
        service: str,
        operation: str,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        cause: Optional[Exception] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        message = f"{service}.{operation}"
        if error_code:
            message = f"{message} failed ({error_code})"
        if error_message:
            message = f"{message}: {error_message}"
        if params:
            message = f"{message} [params={params}]"

        super().__init__(message, cause=cause)
        self.service = service
        self.operation = operation
        self.error_code = error_code
        self.error_message = error_message
        self.params = params or {}
        self.details.update(
            {
                "service": service,
                "operation": operation,
                "error_code": error_code,
                "params": self.params,
            }
        )

    @classmethod
    def from_client_error(
        cls,
        service: str,
        operation: str,
        client_error: Exception,
        params: Optional[Dict[str, Any]] = None,
    ) -> "TransportError":
        """botocore 예외로부터 생성

        Args:
            service: AWS 서비스 이름
            operation: API 작업 이름
            client_error: ClientError / BotoCoreError 예외
            params: 호출 파라미터 (필터 등, 에러 컨텍스트용)

        Returns:
            TransportError 인스턴스
        """
        error_code = None
        error_message = None

        response = getattr(client_error, "response", None)
        if response is not None:
            error_info = response.get("Error", {})
            error_code = error_info.get("Code")
            error_message = error_info.get("Message")
        else:
            error_code = client_error.__class__.__name__

        return cls(
            service=service,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
            cause=client_error,
            params=params,
        )


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

DEPENDENCY_VIOLATION_CODE = "DependencyViolation"

THROTTLING_CODES = {
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "RateExceeded",
}

NOT_FOUND_CODES = {
    "InvalidGroup.NotFound",
    "InvalidSubnetID.NotFound",
    "InvalidVpcID.NotFound",
    "InvalidInstanceID.NotFound",
}


def get_error_code(error: Exception) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    ClientError는 response의 Code를, TransportError는 error_code를,
    그 외에는 예외 클래스명을 반환합니다.
    """
    if isinstance(error, TransportError) and error.error_code:
        return error.error_code

    response = getattr(error, "response", None)
    if response is not None:
        code: str = response.get("Error", {}).get("Code", "Unknown")
        return code
    return error.__class__.__name__


def is_dependency_violation(error: Exception) -> bool:
    """다른 리소스가 아직 참조 중이라 삭제가 막힌 오류인지 확인"""
    return get_error_code(error) == DEPENDENCY_VIOLATION_CODE


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인"""
    return get_error_code(error) in THROTTLING_CODES


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인"""
    return get_error_code(error) in NOT_FOUND_CODES
