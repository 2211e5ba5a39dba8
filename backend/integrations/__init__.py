# Integrations - 외부 서비스 연동 모듈
from integrations.base_client import BaseAPIClient

__all__ = [
    "BaseAPIClient",
]
