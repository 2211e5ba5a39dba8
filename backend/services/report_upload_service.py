import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx

from core.config import Settings
from core.exceptions import BadRequestError, UpstreamError
from integrations.supabase import SupabaseClient
from schemas import SECTORS
from services.research_service import REPORTS_TABLE

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf"}
LIST_SEPARATORS = re.compile(r"\r?\n|[|,]")


def split_list(value: Optional[str]) -> List[str]:
    """줄바꿈, `|`, `,` 로 구분된 목록 파싱 (빈 항목 제거)."""
    if not value:
        return []
    return [item.strip() for item in LIST_SEPARATORS.split(value) if item.strip()]


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


@dataclass
class ReportUploadForm:
    slug: str
    company: str
    ticker: str
    sector: str
    cycle: int
    analyst: str
    publish_date: str
    summary: str
    thesis: str
    key_risks: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    @classmethod
    def parse(
        cls,
        slug: Optional[str] = None,
        company: Optional[str] = None,
        ticker: Optional[str] = None,
        sector: Optional[str] = None,
        cycle: Optional[str] = None,
        analyst: Optional[str] = None,
        publish_date: Optional[str] = None,
        summary: Optional[str] = None,
        thesis: Optional[str] = None,
        key_risks: Optional[str] = None,
        sources: Optional[str] = None,
    ) -> "ReportUploadForm":
        """폼 필드 검증. 누락/형식 오류는 400."""
        text_fields = {
            "slug": _clean(slug),
            "company": _clean(company),
            "ticker": _clean(ticker),
            "sector": _clean(sector),
            "analyst": _clean(analyst),
            "publish_date": _clean(publish_date),
            "summary": _clean(summary),
            "thesis": _clean(thesis),
        }
        cycle_number = _parse_number(cycle)

        if not all(text_fields.values()) or cycle_number is None:
            raise BadRequestError("Missing required fields.")

        if not cycle_number.is_integer() or cycle_number < 1:
            raise BadRequestError("cycle must be a positive integer.")

        if text_fields["sector"] not in SECTORS:
            raise BadRequestError(f"Unknown sector: {text_fields['sector']}")

        try:
            date.fromisoformat(text_fields["publish_date"])
        except ValueError:
            raise BadRequestError("publish_date must be an ISO date (YYYY-MM-DD).")

        return cls(
            cycle=int(cycle_number),
            key_risks=split_list(key_risks),
            sources=split_list(sources),
            **text_fields,
        )

    def to_row(self, pdf_url: str) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "company": self.company,
            "ticker": self.ticker,
            "sector": self.sector,
            "cycle": self.cycle,
            "analyst": self.analyst,
            "publish_date": self.publish_date,
            "summary": self.summary,
            "thesis": self.thesis,
            "key_risks": self.key_risks or None,
            "sources": self.sources or None,
            "pdf_url": pdf_url,
        }


def _parse_number(value: Optional[str]) -> Optional[float]:
    try:
        number = float(_clean(value))
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


class ReportUploadService:
    """리포트 PDF 업로드 및 메타데이터 등록."""

    def __init__(self, client: SupabaseClient, settings: Settings):
        self.client = client
        self.settings = settings

    def validate_file(self, filename: Optional[str], content: bytes) -> str:
        """업로드 파일 검증 후 저장용 파일명 반환."""
        name = Path(filename or "").name
        if not name:
            raise BadRequestError("PDF file is required.")

        if Path(name).suffix.lower() not in ALLOWED_EXTENSIONS:
            raise BadRequestError("Only PDF files can be uploaded.")

        if not content:
            raise BadRequestError("PDF file is empty.")

        if len(content) > self.settings.max_report_size_bytes:
            raise BadRequestError(
                f"PDF file exceeds {self.settings.max_report_size_mb}MB."
            )
        return name

    async def publish(
        self,
        form: ReportUploadForm,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> Tuple[str, Optional[Dict[str, Any]]]:
        """스토리지 업로드 → research_reports 삽입.

        Returns:
            (공개 PDF URL, 삽입된 행)
        """
        bucket = self.settings.reports_bucket
        storage_path = f"{form.slug}/{filename}"

        try:
            await self.client.upload_object(
                bucket,
                storage_path,
                content,
                content_type=content_type or "application/pdf",
                upsert=True,
            )
        except httpx.HTTPStatusError as e:
            raise UpstreamError(e.response.text or "Upload failed.")
        except httpx.RequestError:
            raise UpstreamError("Upload failed.")

        pdf_url = self.client.public_object_url(bucket, storage_path)

        try:
            inserted = await self.client.insert_row(REPORTS_TABLE, form.to_row(pdf_url))
        except httpx.HTTPStatusError as e:
            raise UpstreamError(e.response.text or "Insert failed.")
        except httpx.RequestError:
            raise UpstreamError("Insert failed.")

        logger.info(f"Report published: {form.slug} ({bucket}/{storage_path})")
        return pdf_url, inserted[0] if inserted else None
