"""업로드 콘솔 접근 제어 의존성.

Bearer 토큰을 Supabase 인증 API 로 검증하고, 결과 이메일을 허용 목록과 대조한다.
"""
import logging
from typing import Optional

import httpx
from fastapi import Depends, Header

from core.config import Settings, get_settings
from core.exceptions import ConfigError, ForbiddenError, UnauthorizedError
from integrations.supabase import SupabaseClient, get_supabase_client

logger = logging.getLogger(__name__)


def require_upload_settings(settings: Settings = Depends(get_settings)) -> Settings:
    missing = settings.missing_upload_settings()
    if missing:
        raise ConfigError(f"Missing required env var(s): {', '.join(missing)}")
    return settings


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):] or None


async def require_system_user(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(require_upload_settings),
    client: SupabaseClient = Depends(get_supabase_client),
) -> str:
    """허용된 사용자 이메일 반환. 실패 시 401/403."""
    token = parse_bearer_token(authorization)
    if not token:
        raise UnauthorizedError("Missing access token.")

    try:
        user = await client.get_user(token)
    except httpx.HTTPError:
        raise UnauthorizedError("Invalid access token.")

    email = ((user or {}).get("email") or "").lower()
    if not email:
        raise UnauthorizedError("Unable to resolve user email.")

    allowed = settings.allowed_email_list
    if allowed and email not in allowed:
        logger.warning(f"Upload console access denied for {email}")
        raise ForbiddenError("Access denied.")

    if not allowed:
        logger.warning("SYSTEM_ALLOWED_EMAILS is empty; any signed-in user may upload")

    return email
