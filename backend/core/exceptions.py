"""API 예외 및 JSON 에러 응답 핸들러.

모든 실패 응답은 `{"error": "..."}` 형태의 JSON 본문을 갖는다.
"""
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """HTTP 상태 코드와 메시지를 가진 요청 처리 오류.

    Args:
        status_code: 응답 HTTP 상태 코드.
        message: 클라이언트에 전달할 에러 메시지.
        details: 로그용 추가 정보.
    """

    def __init__(self, status_code: int, message: str, details: dict[str, Any] | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"[{self.status_code}] {self.message} | details={self.details}"
        return f"[{self.status_code}] {self.message}"


class ConfigError(APIError):
    """서버 환경변수 누락."""

    def __init__(self, message: str) -> None:
        super().__init__(500, message)


class UnauthorizedError(APIError):
    def __init__(self, message: str) -> None:
        super().__init__(401, message)


class ForbiddenError(APIError):
    def __init__(self, message: str = "Access denied.") -> None:
        super().__init__(403, message)


class BadRequestError(APIError):
    def __init__(self, message: str) -> None:
        super().__init__(400, message)


class UpstreamError(APIError):
    """외부 백엔드 호출 실패 (502)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(502, message, details)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request."
    return error_response(400, message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
