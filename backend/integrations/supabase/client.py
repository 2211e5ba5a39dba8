"""Supabase (auth / storage / REST) API 클라이언트."""
import logging
from typing import Any, Optional
from urllib.parse import quote, urlencode

import httpx

from integrations.base_client import BaseAPIClient
from core.config import get_settings

logger = logging.getLogger(__name__)


class SupabaseClient(BaseAPIClient):
    """Supabase REST 클라이언트.

    지원 기능:
    - 인증: 액세스 토큰으로 사용자 조회, 리프레시 토큰으로 세션 갱신
    - 스토리지: 객체 업로드, 공개 URL / 서명 URL 생성
    - 데이터: 테이블 행 삽입 및 조회 (PostgREST)

    api_key 는 서버에서는 service role key, 클라이언트(콘솔)에서는 anon key.
    """

    def __init__(
        self,
        url: Optional[str],
        api_key: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url=url or "", timeout=timeout, transport=transport)
        self.api_key = api_key or ""

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def get_headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    # ---- 인증 ----

    async def get_user(self, access_token: str) -> dict[str, Any]:
        """액세스 토큰 소유자 조회."""
        return await self.get(
            "/auth/v1/user",
            headers={"Authorization": f"Bearer {access_token}"},
        )

    async def refresh_session(self, refresh_token: str) -> dict[str, Any]:
        """리프레시 토큰으로 새 토큰 쌍 발급.

        Returns:
            access_token, refresh_token, expires_in 을 포함한 응답
        """
        return await self.post(
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json_data={"refresh_token": refresh_token},
        )

    def authorize_url(self, provider: str, redirect_to: str) -> str:
        """OAuth 로그인 시작 URL."""
        query = urlencode({
            "provider": provider,
            "redirect_to": redirect_to,
            "apikey": self.api_key,
        })
        return f"{self.base_url}/auth/v1/authorize?{query}"

    # ---- 스토리지 ----

    @staticmethod
    def _object_path(bucket: str, path: str) -> str:
        return f"{quote(bucket)}/{quote(path)}"

    async def upload_object(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = True,
    ) -> Any:
        return await self.post(
            f"/storage/v1/object/{self._object_path(bucket, path)}",
            content=content,
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if upsert else "false",
            },
        )

    def public_object_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self._object_path(bucket, path)}"

    def public_object_prefix(self, bucket: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{quote(bucket)}/"

    async def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        """비공개 객체의 서명 URL 생성 (절대 URL 반환)."""
        data = await self.post(
            f"/storage/v1/object/sign/{self._object_path(bucket, path)}",
            json_data={"expiresIn": expires_in},
        )
        signed = (data or {}).get("signedURL") or (data or {}).get("signedUrl")
        if not signed:
            raise ValueError(f"Signed URL missing in storage response for {bucket}/{path}")
        if signed.startswith("http"):
            return signed
        return f"{self.base_url}/storage/v1{signed}"

    # ---- 데이터 (PostgREST) ----

    async def insert_row(self, table: str, row: dict[str, Any]) -> list[dict[str, Any]]:
        """행 삽입 후 삽입된 행 목록 반환."""
        data = await self.post(
            f"/rest/v1/{table}",
            json_data=row,
            headers={"Prefer": "return=representation"},
        )
        if isinstance(data, dict):
            return [data]
        return data or []

    async def select_rows(
        self,
        table: str,
        filters: Optional[dict[str, str]] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """행 조회.

        Args:
            filters: 컬럼 → 값 (eq 조건)
            order: PostgREST order 표현식 (예: "publish_date.desc")
        """
        params: dict[str, Any] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        return await self.get(f"/rest/v1/{table}", params=params) or []


_supabase_client: Optional[SupabaseClient] = None


def get_supabase_client() -> SupabaseClient:
    """서버용 (service role) Supabase 클라이언트 싱글톤 반환."""
    global _supabase_client
    if _supabase_client is None:
        settings = get_settings()
        _supabase_client = SupabaseClient(
            url=settings.supabase_url,
            api_key=settings.supabase_service_role_key,
        )
    return _supabase_client


async def close_supabase_client() -> None:
    global _supabase_client
    if _supabase_client is not None:
        await _supabase_client.close()
        _supabase_client = None
