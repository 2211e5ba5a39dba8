"""pytest 설정 및 fixtures."""
import json
from typing import Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from core.config import Settings, get_settings
from integrations.supabase import SupabaseClient, get_supabase_client
from main import app


SUPABASE_URL = "https://haven.supabase.test"
SERVICE_KEY = "service-role-key"
ANON_KEY = "anon-key"
EDITOR_EMAIL = "editor@havenequities.org"
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF\n"


def make_settings(**overrides) -> Settings:
    """테스트용 설정 (.env 무시). 별칭 필드는 환경변수 이름으로 지정."""
    values = {
        "SUPABASE_URL": SUPABASE_URL,
        "SUPABASE_SERVICE_ROLE_KEY": SERVICE_KEY,
        "SUPABASE_ANON_KEY": ANON_KEY,
        "REPORTS_BUCKET": "reports",
        "SYSTEM_ALLOWED_EMAILS": EDITOR_EMAIL,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeSupabase:
    """auth / storage / REST 를 흉내내는 인메모리 Supabase."""

    UNIQUE_COLUMNS = {
        "research_reports": "slug",
        "delegate_registrations": "email",
    }

    def __init__(self):
        self.users: dict[str, str] = {}  # access_token -> email
        self.refresh_tokens: dict[str, dict] = {}  # refresh_token -> token 응답
        self.tables: dict[str, list[dict]] = {
            "research_reports": [],
            "delegate_registrations": [],
        }
        self.objects: dict[str, tuple[bytes, str]] = {}  # "bucket/path" -> (content, type)
        self.public_buckets: set[str] = {"reports"}
        self.external: dict[str, tuple[bytes, str]] = {}  # 절대 URL -> (content, type)
        self.failures: dict[str, tuple[int, str]] = {}
        self.network_failures: set[str] = set()
        self.redirects: dict[str, str] = {}  # 절대 URL -> Location
        self.requests: list[httpx.Request] = []

    def fail(self, key: str, status: int, text: str = "") -> None:
        """key: user / refresh / upload / insert / select / sign / download."""
        self.failures[key] = (status, text)

    def fail_network(self, key: str) -> None:
        """key 요청에서 연결 실패 (httpx.ConnectError) 발생."""
        self.network_failures.add(key)

    def _failure(self, key: str) -> Optional[httpx.Response]:
        if key in self.network_failures:
            raise httpx.ConnectError("connection refused")
        if key in self.failures:
            status, text = self.failures[key]
            return httpx.Response(status, text=text)
        return None

    def requests_to(self, prefix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith(prefix)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?")[0]
        if url in self.redirects:
            return httpx.Response(302, headers={"Location": self.redirects[url]})
        if url in self.external:
            if failure := self._failure("download"):
                return failure
            content, content_type = self.external[url]
            return httpx.Response(200, content=content, headers={"Content-Type": content_type})

        path = request.url.path
        if path == "/auth/v1/user":
            return self._get_user(request)
        if path == "/auth/v1/token":
            return self._refresh(request)
        if path.startswith("/storage/v1/object/sign/"):
            return self._signed(request, path[len("/storage/v1/object/sign/"):])
        if path.startswith("/storage/v1/object/public/"):
            return self._download(path[len("/storage/v1/object/public/"):], public=True)
        if path.startswith("/storage/v1/object/"):
            return self._upload(request, path[len("/storage/v1/object/"):])
        if path.startswith("/rest/v1/"):
            table = path[len("/rest/v1/"):]
            if request.method == "POST":
                return self._insert(request, table)
            return self._select(request, table)
        return httpx.Response(404, json={"message": "not found"})

    def _get_user(self, request: httpx.Request) -> httpx.Response:
        if failure := self._failure("user"):
            return failure
        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if token not in self.users:
            return httpx.Response(401, json={"msg": "invalid JWT"})
        email = self.users[token]
        return httpx.Response(200, json={"id": "user-1", "email": email})

    def _refresh(self, request: httpx.Request) -> httpx.Response:
        if failure := self._failure("refresh"):
            return failure
        body = json.loads(request.content or b"{}")
        tokens = self.refresh_tokens.get(body.get("refresh_token"))
        if tokens is None:
            return httpx.Response(400, json={"error": "invalid_grant"})
        return httpx.Response(200, json=tokens)

    def _upload(self, request: httpx.Request, key: str) -> httpx.Response:
        if failure := self._failure("upload"):
            return failure
        self.objects[key] = (request.content, request.headers.get("Content-Type", ""))
        return httpx.Response(200, json={"Key": key})

    def _signed(self, request: httpx.Request, key: str) -> httpx.Response:
        if request.method == "POST":
            if failure := self._failure("sign"):
                return failure
            if key not in self.objects:
                return httpx.Response(400, json={"error": "Object not found"})
            return httpx.Response(200, json={"signedURL": f"/object/sign/{key}?token=signed-token"})
        if request.url.params.get("token") != "signed-token":
            return httpx.Response(400, json={"error": "invalid signature"})
        return self._download(key, public=False)

    def _download(self, key: str, public: bool) -> httpx.Response:
        if failure := self._failure("download"):
            return failure
        bucket = key.split("/", 1)[0]
        if key not in self.objects or (public and bucket not in self.public_buckets):
            return httpx.Response(400, json={"error": "Object not found"})
        content, content_type = self.objects[key]
        return httpx.Response(200, content=content, headers={"Content-Type": content_type})

    def _insert(self, request: httpx.Request, table: str) -> httpx.Response:
        if failure := self._failure("insert"):
            return failure
        row = json.loads(request.content)
        rows = self.tables.setdefault(table, [])
        unique = self.UNIQUE_COLUMNS.get(table)
        if unique and any(r.get(unique) == row.get(unique) for r in rows):
            return httpx.Response(
                409, text=f'duplicate key value violates unique constraint "{table}_{unique}_key"'
            )
        row = {"id": f"{table}-{len(rows) + 1}", **row}
        rows.append(row)
        return httpx.Response(201, json=[row])

    def _select(self, request: httpx.Request, table: str) -> httpx.Response:
        if failure := self._failure("select"):
            return failure
        rows = list(self.tables.get(table, []))
        for column, value in request.url.params.items():
            if column in ("select", "order", "limit"):
                continue
            expected = value.removeprefix("eq.")
            rows = [r for r in rows if str(r.get(column)) == expected]
        order = request.url.params.get("order")
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda r: r.get(column) or "", reverse=direction == "desc")
        limit = request.url.params.get("limit")
        if limit:
            rows = rows[: int(limit)]
        return httpx.Response(200, json=rows)


def report_row(slug: str = "acme-technology-cycle-2", **overrides) -> dict:
    row = {
        "slug": slug,
        "company": "Acme Robotics",
        "ticker": "ACME",
        "sector": "Technology",
        "cycle": 2,
        "analyst": "Jordan Lee",
        "publish_date": "2026-03-02",
        "summary": "Acme is a robotics supplier.",
        "thesis": "Margins expand as automation demand grows.",
        "key_risks": ["Customer concentration"],
        "sources": ["10-K"],
        "pdf_url": None,
    }
    row.update(overrides)
    return row


@pytest.fixture(scope="function")
def fake_backend():
    backend = FakeSupabase()
    backend.users["editor-token"] = EDITOR_EMAIL
    backend.users["outsider-token"] = "someone@example.com"
    return backend


@pytest.fixture(scope="function")
def settings():
    return make_settings()


@pytest.fixture(scope="function")
def supabase(fake_backend, settings):
    return SupabaseClient(
        url=SUPABASE_URL,
        api_key=SERVICE_KEY,
        transport=httpx.MockTransport(fake_backend.handler),
    )


@pytest.fixture(scope="function")
def client(settings, supabase):
    """테스트 클라이언트 (설정/백엔드 클라이언트 주입)."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_supabase_client] = lambda: supabase

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
