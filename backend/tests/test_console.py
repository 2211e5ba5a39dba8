"""업로드 콘솔 클라이언트 테스트."""
import time

import httpx
import pytest

from console import ConsoleError, ReportDraft, ReportUploader
from integrations.supabase import Session, SessionManager, SupabaseClient
from tests.conftest import ANON_KEY, PDF_BYTES, SUPABASE_URL, make_settings


def draft():
    return ReportDraft(
        slug="acme-technology-cycle-2",
        company="Acme Robotics",
        ticker="ACME",
        sector="Technology",
        cycle=2,
        analyst="Jordan Lee",
        publish_date="2026-03-02",
        summary="Acme is a robotics supplier.",
        thesis="Margins expand as automation demand grows.",
        key_risks=["Customer concentration", "FX exposure"],
        sources=["10-K"],
    )


@pytest.fixture
def pdf_path(tmp_path):
    path = tmp_path / "acme.pdf"
    path.write_bytes(PDF_BYTES)
    return path


@pytest.fixture
def manager(fake_backend, tmp_path):
    client = SupabaseClient(
        url=SUPABASE_URL,
        api_key=ANON_KEY,
        transport=httpx.MockTransport(fake_backend.handler),
    )
    return SessionManager(make_settings(), client=client, session_file=tmp_path / "session.json")


def api_transport(status_code: int, body: dict, seen: list):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json=body)
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_upload_posts_multipart_with_bearer(manager, pdf_path):
    manager.store(Session("editor-token", "r", time.time() + 600, "editor@havenequities.org"))
    seen = []
    uploader = ReportUploader(
        manager,
        settings=make_settings(),
        transport=api_transport(200, {"pdfUrl": "https://cdn/acme.pdf", "report": {}}, seen),
    )

    pdf_url = await uploader.upload(draft(), pdf_path)

    assert pdf_url == "https://cdn/acme.pdf"
    request = seen[0]
    assert request.url.path == "/api/system/reports"
    assert request.headers["Authorization"] == "Bearer editor-token"
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="pdf"; filename="acme.pdf"' in body
    assert b"Customer concentration\nFX exposure" in body


@pytest.mark.asyncio
async def test_upload_surfaces_api_error(manager, pdf_path):
    manager.store(Session("editor-token", "r", time.time() + 600, "editor@havenequities.org"))
    uploader = ReportUploader(
        manager,
        settings=make_settings(),
        transport=api_transport(403, {"error": "Access denied."}, []),
    )

    with pytest.raises(ConsoleError, match="Access denied."):
        await uploader.upload(draft(), pdf_path)


@pytest.mark.asyncio
async def test_upload_requires_sign_in(manager, pdf_path):
    uploader = ReportUploader(manager, settings=make_settings())
    with pytest.raises(ConsoleError, match="Please sign in first."):
        await uploader.upload(draft(), pdf_path)


@pytest.mark.asyncio
async def test_upload_requires_pdf_file(manager, tmp_path):
    manager.store(Session("editor-token", "r", time.time() + 600, "editor@havenequities.org"))
    uploader = ReportUploader(manager, settings=make_settings())
    with pytest.raises(ConsoleError, match="Please select a PDF file."):
        await uploader.upload(draft(), tmp_path / "missing.pdf")
