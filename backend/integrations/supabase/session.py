"""업로드 콘솔 로그인 세션 관리.

- OAuth 콜백 URL fragment 에서 토큰 쌍 추출
- 세션을 로컬 파일에 저장하여 재실행 후에도 재사용
- 만료된 토큰은 리프레시 토큰으로 갱신, 실패 시 세션 폐기
"""
import json
import logging
import math
import time
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlsplit

import httpx

from core.config import Settings, get_settings
from integrations.supabase.client import SupabaseClient

logger = logging.getLogger(__name__)

MISSING_CONFIG_MESSAGE = "Missing Supabase environment variables."


class SessionConfigError(RuntimeError):
    """SUPABASE_URL / SUPABASE_ANON_KEY 미설정."""


@dataclass
class Session:
    access_token: str
    refresh_token: str
    expires_at: float  # epoch seconds
    email: Optional[str] = None

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= time.time()


def parse_callback_fragment(value: str) -> Optional[Session]:
    """콜백 URL 또는 fragment(`#access_token=...`)에서 세션 생성.

    토큰 쌍 또는 유한한 숫자형 expires_in 이 없으면 None.
    """
    if not value:
        return None
    fragment = urlsplit(value).fragment if "://" in value else value
    fragment = fragment.lstrip("#")
    if not fragment:
        return None

    params = parse_qs(fragment)
    access_token = params.get("access_token", [None])[0]
    refresh_token = params.get("refresh_token", [None])[0]
    try:
        expires_in = float(params.get("expires_in", [""])[0])
    except ValueError:
        return None
    if not math.isfinite(expires_in):
        return None

    if not access_token or not refresh_token:
        return None
    return Session(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=time.time() + expires_in,
    )


class SessionManager:
    """로컬 세션 파일 기반 로그인 세션 관리자."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[SupabaseClient] = None,
        session_file: Optional[Path] = None,
    ):
        self.settings = settings or get_settings()
        self.session_file = Path(session_file or self.settings.session_file).expanduser()
        self.client = client or SupabaseClient(
            url=self.settings.supabase_url,
            api_key=self.settings.supabase_anon_key,
        )

    @property
    def is_configured(self) -> bool:
        return self.settings.has_public_credentials

    def _require_config(self) -> None:
        if not self.is_configured:
            raise SessionConfigError(MISSING_CONFIG_MESSAGE)

    def load(self) -> Optional[Session]:
        """저장된 세션 로드. 파일이 없거나 손상되었으면 None."""
        if not self.session_file.exists():
            return None
        try:
            data = json.loads(self.session_file.read_text(encoding="utf-8"))
            return Session(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                expires_at=float(data["expires_at"]),
                email=data.get("email"),
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to load session from {self.session_file}: {e}")
            return None

    def store(self, session: Optional[Session]) -> None:
        """세션 저장. None 이면 세션 파일 삭제."""
        if session is None:
            self.clear()
            return
        self.session_file.parent.mkdir(parents=True, exist_ok=True)
        self.session_file.write_text(json.dumps(asdict(session), indent=2), encoding="utf-8")
        logger.debug(f"Session saved to {self.session_file}")

    def clear(self) -> None:
        if self.session_file.exists():
            self.session_file.unlink()
            logger.info("Session cleared")

    def sign_in_url(self, redirect_to: Optional[str] = None) -> str:
        """Google 로그인 시작 URL."""
        self._require_config()
        redirect = redirect_to or f"{self.settings.site_url.rstrip('/')}/system"
        return self.client.authorize_url("google", redirect)

    def capture_callback(self, value: str) -> Optional[Session]:
        """콜백 URL 에서 세션을 추출해 저장."""
        session = parse_callback_fragment(value)
        if session is not None:
            self.store(session)
        return session

    async def refresh(self, session: Session) -> Optional[Session]:
        """리프레시 토큰으로 갱신. 실패 시 None."""
        self._require_config()
        try:
            data = await self.client.refresh_session(session.refresh_token)
            return Session(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                expires_at=time.time() + float(data["expires_in"]),
                email=session.email,
            )
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Session refresh failed: {e}")
            return None

    async def fetch_email(self, access_token: str) -> Optional[str]:
        self._require_config()
        try:
            user = await self.client.get_user(access_token)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to resolve session email: {e}")
            return None
        return (user or {}).get("email")

    async def sync(self) -> Optional[Session]:
        """저장된 세션을 유효한 상태로 맞춘 뒤 반환.

        만료 시 갱신하고, 갱신 실패 시 세션을 폐기한다.
        이메일이 없으면 사용자 조회로 채운다.
        """
        session = self.load()
        if session is None:
            return None

        if session.is_expired:
            refreshed = await self.refresh(session)
            if refreshed is None:
                self.clear()
                return None
            session = refreshed
            self.store(session)

        if not session.email:
            email = await self.fetch_email(session.access_token)
            if email:
                session = replace(session, email=email)
                self.store(session)

        return session

    async def close(self) -> None:
        await self.client.close()
