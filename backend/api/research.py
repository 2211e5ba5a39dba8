"""공개 리서치 리포트 API."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.config import Settings, get_settings
from core.exceptions import APIError
from integrations.supabase import SupabaseClient, get_supabase_client
from schemas import (
    ALL_SECTORS,
    SECTORS,
    ResearchReport,
    ResearchReportListResponse,
    SectorListResponse,
)
from services import ResearchService

router = APIRouter()


def get_research_service(
    client: SupabaseClient = Depends(get_supabase_client),
    settings: Settings = Depends(get_settings),
) -> ResearchService:
    return ResearchService(client, settings)


def _public_view(report: ResearchReport) -> ResearchReport:
    """저장소 URL 대신 사이트 프록시 경로 노출."""
    if not report.pdf_url:
        return report
    return report.model_copy(update={"pdf_url": f"/api/research/report-pdf/{report.slug}"})


@router.get("/sectors", response_model=SectorListResponse)
def list_sectors():
    return SectorListResponse(sectors=[ALL_SECTORS, *SECTORS])


@router.get("/reports", response_model=ResearchReportListResponse)
async def list_reports(
    sector: Optional[str] = Query(default=None, description="섹터 (All Sectors = 전체)"),
    q: Optional[str] = Query(default=None, description="회사명/티커/애널리스트 검색어"),
    service: ResearchService = Depends(get_research_service),
):
    reports = await service.list_reports(sector=sector, search_query=q)
    return ResearchReportListResponse(
        total=len(reports),
        items=[_public_view(r) for r in reports],
    )


@router.get("/reports/{slug}", response_model=ResearchReport)
async def get_report(
    slug: str,
    service: ResearchService = Depends(get_research_service),
):
    report = await service.get_report(slug)
    if report is None:
        raise APIError(404, "Report not found.")
    return _public_view(report)


@router.get("/report-pdf/{slug}")
async def get_report_pdf(
    slug: str,
    service: ResearchService = Depends(get_research_service),
):
    """리포트 PDF 프록시 (캐시 금지)."""
    upstream = await service.open_report_pdf(slug)
    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type=upstream.headers.get("Content-Type") or "application/pdf",
        headers={
            "Cache-Control": "no-store",
            "X-Content-Type-Options": "nosniff",
        },
        background=BackgroundTask(upstream.aclose),
    )
