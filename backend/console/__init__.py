# 업로드 콘솔 (CLI 클라이언트)
from console.uploader import ConsoleError, ReportDraft, ReportUploader

__all__ = [
    "ConsoleError",
    "ReportDraft",
    "ReportUploader",
]
