"""업로드 콘솔 API (허용된 사용자 전용)."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from starlette.datastructures import UploadFile

from core.auth import require_system_user, require_upload_settings
from core.config import Settings
from core.exceptions import BadRequestError
from integrations.supabase import SupabaseClient, get_supabase_client
from schemas import ReportUploadResponse
from services import ReportUploadForm, ReportUploadService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reports", response_model=ReportUploadResponse)
async def upload_report(
    request: Request,
    email: str = Depends(require_system_user),
    settings: Settings = Depends(require_upload_settings),
    client: SupabaseClient = Depends(get_supabase_client),
    slug: Optional[str] = Form(default=None),
    company: Optional[str] = Form(default=None),
    ticker: Optional[str] = Form(default=None),
    sector: Optional[str] = Form(default=None),
    cycle: Optional[str] = Form(default=None),
    analyst: Optional[str] = Form(default=None),
    publish_date: Optional[str] = Form(default=None),
    summary: Optional[str] = Form(default=None),
    thesis: Optional[str] = Form(default=None),
    key_risks: Optional[str] = Form(default=None),
    sources: Optional[str] = Form(default=None),
):
    # 파일이 아닌 텍스트 필드로 온 pdf 도 누락으로 처리
    pdf = (await request.form()).get("pdf")
    if not isinstance(pdf, UploadFile) or not pdf.filename:
        raise BadRequestError("PDF file is required.")

    form = ReportUploadForm.parse(
        slug=slug,
        company=company,
        ticker=ticker,
        sector=sector,
        cycle=cycle,
        analyst=analyst,
        publish_date=publish_date,
        summary=summary,
        thesis=thesis,
        key_risks=key_risks,
        sources=sources,
    )

    service = ReportUploadService(client, settings)
    content = await pdf.read()
    filename = service.validate_file(pdf.filename, content)

    logger.info(f"{email} uploading report {form.slug}")
    pdf_url, report = await service.publish(form, filename, content, pdf.content_type)
    return ReportUploadResponse(pdf_url=pdf_url, report=report)
