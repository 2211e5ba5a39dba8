"""백엔드 미설정 시 사용하는 기본 리포트 카탈로그 (research_reports 행 형식)."""

SAMPLE_REPORTS = [
    {
        "slug": "sample-report-technology-cycle-1",
        "company": "Sample Company",
        "ticker": "SMPL",
        "sector": "Technology",
        "cycle": 1,
        "analyst": "Research Team",
        "publish_date": "2026-01-16",
        "summary": (
            "This is a sample report demonstrating the report format and structure "
            "for educational purposes."
        ),
        "thesis": (
            "This sample report demonstrates how research reports are structured within "
            "HAVEN Equities. It showcases the format, metadata fields, and educational "
            "framing used across all published research."
        ),
        "key_risks": [
            "This is a sample risk factor for demonstration purposes",
            "Reports would include company-specific and market risks",
            "All risks are presented for educational context only",
        ],
        "sources": [
            "Company SEC Filings",
            "Industry Reports",
            "Management Presentations",
        ],
        "pdf_url": None,
    },
]
