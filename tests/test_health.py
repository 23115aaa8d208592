"""Health 엔드포인트 테스트. DB·Redis 상태 조합별 status."""

from unittest.mock import AsyncMock


def test_health_without_db_is_degraded(client):
    """테스트 환경은 DATABASE_URL이 비어 있으므로 db=error, status=degraded."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["db"] == "error"
    assert data["status"] == "degraded"
    assert data["redis"] in ("ok", "error")


def test_health_ok_when_all_checks_pass(client, monkeypatch):
    monkeypatch.setattr("app.api.health._check_db", AsyncMock(return_value="ok"))
    monkeypatch.setattr(client.app.state, "redis_blocklist_client", None, raising=False)
    monkeypatch.setattr(client.app.state, "redis_job_lock_client", None, raising=False)

    response = client.get("/health")

    assert response.json() == {"status": "ok", "db": "ok", "redis": "ok"}


def test_health_redis_error_when_any_client_fails(client, monkeypatch):
    """Blocklist 풀은 정상이어도 Job Lock 풀 PING 실패면 redis=error."""
    monkeypatch.setattr("app.api.health._check_db", AsyncMock(return_value="ok"))
    healthy = AsyncMock()
    broken = AsyncMock()
    broken.ping = AsyncMock(side_effect=ConnectionError("down"))
    monkeypatch.setattr(client.app.state, "redis_blocklist_client", healthy, raising=False)
    monkeypatch.setattr(client.app.state, "redis_job_lock_client", broken, raising=False)

    data = client.get("/health").json()

    assert data["redis"] == "error"
    assert data["status"] == "degraded"
    healthy.ping.assert_awaited_once()
