"""
albnet - ALB 네트워크 리소스 해석 계층

태그/이름 기반 참조를 서브넷, 보안 그룹, VPC, 인스턴스 ID로 해석하고
TTL 캐시로 EC2 API 호출을 최소화합니다.
"""

__version__ = "0.1.0"
