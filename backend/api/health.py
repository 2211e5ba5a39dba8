"""API 헬스체크 엔드포인트."""
from fastapi import APIRouter, Depends

from core.config import Settings, get_settings
from integrations.supabase import SupabaseClient, get_supabase_client
from services.research_service import REPORTS_TABLE

router = APIRouter()


@router.get("/backend")
async def check_backend(
    client: SupabaseClient = Depends(get_supabase_client),
    settings: Settings = Depends(get_settings),
):
    """Supabase 연결 상태 확인."""
    if not settings.has_service_credentials:
        return {"configured": False, "connected": False, "error": "API 키 미설정"}

    try:
        # 간단한 조회로 키 유효성 확인
        await client.select_rows(REPORTS_TABLE, columns="slug", limit=1)
        return {"configured": True, "connected": True, "error": None}
    except Exception as e:
        return {"configured": True, "connected": False, "error": str(e)[:100]}
