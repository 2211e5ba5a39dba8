"""업로드 콘솔 클라이언트.

로그인 세션을 동기화한 뒤 `/api/system/reports` 로 리포트를 업로드한다.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import httpx

from core.config import Settings, get_settings
from integrations.supabase import SessionManager

logger = logging.getLogger(__name__)


class ConsoleError(RuntimeError):
    """콘솔 사용자에게 보여줄 오류."""


@dataclass
class ReportDraft:
    slug: str
    company: str
    ticker: str
    sector: str
    cycle: int
    analyst: str
    publish_date: str
    summary: str
    thesis: str
    key_risks: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)

    def form_fields(self) -> dict[str, str]:
        return {
            "slug": self.slug,
            "company": self.company,
            "ticker": self.ticker,
            "sector": self.sector,
            "cycle": str(self.cycle),
            "analyst": self.analyst,
            "publish_date": self.publish_date,
            "summary": self.summary,
            "thesis": self.thesis,
            "key_risks": "\n".join(self.key_risks),
            "sources": "\n".join(self.sources),
        }


class ReportUploader:
    def __init__(
        self,
        session_manager: SessionManager,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.sessions = session_manager
        self.settings = settings or get_settings()
        self._transport = transport

    async def upload(self, draft: ReportDraft, pdf_path: Path) -> str:
        """리포트 업로드 후 PDF URL 반환."""
        if not self.sessions.is_configured:
            raise ConsoleError("Missing Supabase environment variables.")

        session = await self.sessions.sync()
        if session is None:
            raise ConsoleError("Please sign in first.")

        pdf_path = Path(pdf_path)
        if not pdf_path.is_file():
            raise ConsoleError("Please select a PDF file.")

        async with httpx.AsyncClient(
            base_url=self.settings.system_api_url.rstrip("/"),
            timeout=httpx.Timeout(120.0),
            transport=self._transport,
        ) as client:
            response = await client.post(
                "/api/system/reports",
                headers={"Authorization": f"Bearer {session.access_token}"},
                data=draft.form_fields(),
                files={"pdf": (pdf_path.name, pdf_path.read_bytes(), "application/pdf")},
            )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            raise ConsoleError(data.get("error") or "Upload failed.")

        logger.info(f"Uploaded {draft.slug} as {session.email or 'signed-in user'}")
        return data.get("pdfUrl", "")
