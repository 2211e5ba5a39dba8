import logging
from typing import List, Optional
from urllib.parse import unquote

import httpx
from pydantic import ValidationError

from core.config import Settings
from core.exceptions import APIError, ConfigError, UpstreamError
from integrations.supabase import SupabaseClient
from schemas import ALL_SECTORS, ResearchReport
from services.research_catalog import SAMPLE_REPORTS

logger = logging.getLogger(__name__)

REPORTS_TABLE = "research_reports"


class ResearchService:
    """리포트 조회 및 PDF 프록시.

    백엔드가 설정되지 않은 환경(로컬 미리보기)에서는 내장 샘플 카탈로그를 사용한다.
    """

    def __init__(self, client: SupabaseClient, settings: Settings):
        self.client = client
        self.settings = settings

    @property
    def uses_backend(self) -> bool:
        return self.settings.has_service_credentials

    async def _load_rows(self, slug: Optional[str] = None) -> List[dict]:
        if not self.uses_backend:
            rows = SAMPLE_REPORTS
            if slug is not None:
                rows = [r for r in rows if r["slug"] == slug]
            return rows

        try:
            return await self.client.select_rows(
                REPORTS_TABLE,
                filters={"slug": slug} if slug is not None else None,
                order="publish_date.desc",
                limit=1 if slug is not None else None,
            )
        except httpx.HTTPError as e:
            raise UpstreamError("Unable to load reports.", {"slug": slug, "reason": str(e)})

    @staticmethod
    def _to_report(row: dict) -> Optional[ResearchReport]:
        """행을 리포트로 변환. 필수 컬럼이 깨진 행은 로그 후 제외."""
        try:
            return ResearchReport.model_validate(row)
        except ValidationError as e:
            logger.warning(f"Skipping malformed report row {row.get('slug')!r}: {e.error_count()} error(s)")
            return None

    async def get_report(self, slug: str) -> Optional[ResearchReport]:
        rows = await self._load_rows(slug)
        if not rows:
            return None
        return self._to_report(rows[0])

    async def list_reports(
        self,
        sector: Optional[str] = None,
        search_query: Optional[str] = None,
    ) -> List[ResearchReport]:
        """섹터/검색어 필터링 후 발행일 최신순 정렬."""
        reports = [
            report for report in (self._to_report(row) for row in await self._load_rows())
            if report is not None
        ]

        if sector and sector != ALL_SECTORS:
            reports = [r for r in reports if r.sector == sector]

        if search_query:
            query = search_query.strip().lower()
            reports = [
                r for r in reports
                if query in r.company.lower()
                or query in r.ticker.lower()
                or query in r.analyst.lower()
            ]

        reports.sort(key=lambda r: r.publish_date, reverse=True)
        return reports

    async def resolve_pdf_url(self, pdf_url: str) -> str:
        """다운로드 가능한 PDF URL 반환.

        - 스토리지 경로만 저장된 경우: 리포트 버킷 기준 서명 URL
        - 비공개 버킷의 공개 URL 형식: 서명 URL 로 교체
        - 그 외 절대 URL: 그대로 사용
        """
        bucket = self.settings.reports_bucket
        path: Optional[str] = None

        if not pdf_url.startswith(("http://", "https://")):
            if not bucket:
                raise ConfigError("Missing required env var(s): REPORTS_BUCKET")
            path = pdf_url.lstrip("/")
            if path.startswith(f"{bucket}/"):
                path = path[len(bucket) + 1:]
        elif bucket and not self.settings.reports_bucket_public:
            prefix = self.client.public_object_prefix(bucket)
            if pdf_url.startswith(prefix):
                path = unquote(pdf_url[len(prefix):])

        if path is None:
            return pdf_url

        try:
            return await self.client.create_signed_url(
                bucket, path, self.settings.signed_url_expires_in
            )
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError("Unable to load report PDF.", {"path": path, "reason": str(e)})

    async def open_report_pdf(self, slug: str) -> httpx.Response:
        """리포트 PDF 스트림 열기. 호출자가 응답을 닫아야 한다."""
        # 메타데이터 형식과 무관하게 저장된 pdf_url 만 사용
        rows = await self._load_rows(slug)
        pdf_url = rows[0].get("pdf_url") if rows else None
        if not pdf_url:
            raise APIError(404, "Report PDF not found.")

        url = await self.resolve_pdf_url(pdf_url)
        try:
            return await self.client.open_stream(url)
        except httpx.HTTPError as e:
            raise UpstreamError("Unable to load report PDF.", {"slug": slug, "reason": str(e)})
