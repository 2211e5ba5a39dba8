from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field, field_validator


ALL_SECTORS = "All Sectors"

SECTORS: List[str] = [
    "Technology",
    "Healthcare",
    "Financials",
    "Consumer Discretionary",
    "Consumer Staples",
    "Industrials",
    "Energy",
    "Materials",
    "Utilities",
    "Real Estate",
    "Communication Services",
]


class ResearchReport(BaseModel):
    slug: str
    company: str
    ticker: str
    sector: str
    cycle: int
    analyst: str
    publish_date: str
    summary: str
    thesis: str
    key_risks: List[str] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)
    pdf_url: Optional[str] = None

    class Config:
        from_attributes = True

    @field_validator("key_risks", "sources", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        # DB 에는 빈 목록이 null 로 저장됨
        return value or []

    @field_validator("publish_date", mode="before")
    @classmethod
    def _date_to_str(cls, value):
        # 조회 시에는 형식 검증 없이 저장된 값을 그대로 사용 (이전 업로드 호환)
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class ResearchReportListResponse(BaseModel):
    total: int
    items: List[ResearchReport]


class SectorListResponse(BaseModel):
    sectors: List[str]


class ReportUploadResponse(BaseModel):
    pdf_url: str = Field(serialization_alias="pdfUrl")
    report: Optional[Dict[str, Any]] = None
