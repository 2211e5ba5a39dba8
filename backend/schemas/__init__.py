from .research import (
    ALL_SECTORS,
    SECTORS,
    ResearchReport,
    ResearchReportListResponse,
    SectorListResponse,
    ReportUploadResponse,
)
from .registration import (
    DelegateRegistrationCreate,
    DelegateRegistrationResponse,
)

__all__ = [
    "ALL_SECTORS",
    "SECTORS",
    "ResearchReport",
    "ResearchReportListResponse",
    "SectorListResponse",
    "ReportUploadResponse",
    "DelegateRegistrationCreate",
    "DelegateRegistrationResponse",
]
