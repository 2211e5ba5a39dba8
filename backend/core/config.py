from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from functools import lru_cache
from pathlib import Path
from typing import Optional


class Settings(BaseSettings):
    cors_origins: str = "http://localhost:3000"
    site_url: str = "http://localhost:3000"

    # Supabase 설정 (NEXT_PUBLIC_* 는 프론트엔드와 공유하는 fallback)
    supabase_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY"),
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
    )

    # 리포트 스토리지 설정
    reports_bucket: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("REPORTS_BUCKET"),
    )
    reports_bucket_public: bool = True  # False: 비공개 버킷 → 서명 URL로 조회
    signed_url_expires_in: int = 3600  # 초
    max_report_size_mb: int = 25

    # 업로드 콘솔 접근 허용 이메일 (쉼표로 구분)
    system_allowed_emails: str = Field(
        default="",
        validation_alias=AliasChoices("SYSTEM_ALLOWED_EMAILS", "SYSTEM_GOOGLE_ALLOWLIST"),
    )

    # 업로드 콘솔 CLI 설정
    system_api_url: str = "http://localhost:8000"
    session_file: Path = Path.home() / ".haven-admin-session.json"

    class Config:
        env_file = ".env"
        extra = "allow"
        populate_by_name = True

    @property
    def allowed_email_list(self) -> list[str]:
        if not self.system_allowed_emails:
            return []
        return [
            email.strip().lower()
            for email in self.system_allowed_emails.split(",")
            if email.strip()
        ]

    @property
    def has_service_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    @property
    def has_public_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def max_report_size_bytes(self) -> int:
        return self.max_report_size_mb * 1024 * 1024

    def missing_upload_settings(self) -> list[str]:
        """업로드에 필요한 환경변수 중 누락된 항목."""
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_service_role_key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")
        if not self.reports_bucket:
            missing.append("REPORTS_BUCKET")
        return missing


@lru_cache()
def get_settings() -> Settings:
    return Settings()
