"""API 에러 매핑 테스트. 서비스 예외 → HTTP 상태 + {detail, code}."""

from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError


def test_protected_route_requires_token(client) -> None:
    response = client.post("/v1/posts", json={"content": "hi"})
    assert response.status_code == 401


def test_invalid_bearer_token_401(client) -> None:
    response = client.get(
        "/v1/notifications", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (NotFoundError("Post not found"), 404),
        (PermissionDeniedError("Only the author can delete this post"), 403),
    ],
)
def test_service_error_maps_to_status(auth_client, monkeypatch, error, status) -> None:
    client, _ = auth_client
    monkeypatch.setattr(
        "app.services.post_service.delete_post", AsyncMock(side_effect=error)
    )
    response = client.delete("/v1/posts/1")
    assert response.status_code == status
    assert response.json()["detail"] == error.message
    assert response.json()["code"] == error.code


def test_conflict_keeps_custom_code(auth_client, monkeypatch) -> None:
    client, _ = auth_client
    monkeypatch.setattr(
        "app.services.event_service.join_event",
        AsyncMock(side_effect=ConflictError("Event is full", code="EVENT_FULL")),
    )
    response = client.post("/v1/events/3/attendees")
    assert response.status_code == 409
    assert response.json() == {"detail": "Event is full", "code": "EVENT_FULL"}


def test_unknown_field_is_422(auth_client) -> None:
    client, _ = auth_client
    response = client.post("/v1/posts", json={"content": "hi", "author_id": 5})
    assert response.status_code == 422


def test_unhandled_exception_is_500(auth_client, monkeypatch) -> None:
    client, _ = auth_client
    monkeypatch.setattr(
        "app.services.post_service.delete_post", AsyncMock(side_effect=RuntimeError("boom"))
    )
    response = client.delete("/v1/posts/1")
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


def test_current_user_passed_to_service(auth_client, monkeypatch) -> None:
    client, user = auth_client
    unread = AsyncMock(return_value=4)
    monkeypatch.setattr("app.services.notification_service.unread_count", unread)
    response = client.get("/v1/notifications/unread-count")
    assert response.status_code == 200
    assert unread.await_args.args[1] == user.id


def test_explicit_null_on_required_column_is_422(auth_client, monkeypatch) -> None:
    client, _ = auth_client
    update = AsyncMock()
    monkeypatch.setattr("app.services.event_service.update_event", update)
    response = client.patch("/v1/events/3", json={"start_at": None})
    assert response.status_code == 422
    update.assert_not_awaited()
