from .research_service import ResearchService
from .report_upload_service import ReportUploadService, ReportUploadForm, split_list
from .registration_service import RegistrationService

__all__ = [
    "ResearchService",
    "ReportUploadService",
    "ReportUploadForm",
    "split_list",
    "RegistrationService",
]
