from typing import Optional, Any
from pydantic import BaseModel


class DelegateRegistrationCreate(BaseModel):
    """대표단 등록 요청. 필수 항목 검증은 서비스에서 수행 (400 에러 메시지 통일)."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    delegation_type: Optional[str] = None
    preferred_country: Optional[str] = None
    preferred_institution: Optional[str] = None
    committee_preference: Optional[str] = None


class DelegateRegistrationResponse(BaseModel):
    id: Optional[Any] = None
