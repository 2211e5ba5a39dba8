"""헬스체크 API 테스트."""


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_backend_connected(client):
    response = client.get("/api/health/backend")
    assert response.json() == {"configured": True, "connected": True, "error": None}


def test_backend_not_configured(client, settings):
    settings.supabase_url = None
    response = client.get("/api/health/backend")
    data = response.json()
    assert data["configured"] is False
    assert data["connected"] is False


def test_backend_unreachable(client, fake_backend):
    fake_backend.fail("select", 401, "Invalid API key")
    data = client.get("/api/health/backend").json()
    assert data["configured"] is True
    assert data["connected"] is False
    assert data["error"]
