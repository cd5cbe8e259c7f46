"""HTTP tests for the post endpoints."""

import pytest
from fastapi.testclient import TestClient

from emojifeed.adapters.storage.in_memory import InMemoryPostStore
from emojifeed.api.dependencies import ServiceContainer
from emojifeed.core.app_factory import create_app
from emojifeed.core.config import AppSettings, LogSettings, Settings
from emojifeed.core.errors import UpstreamUnavailableAppError
from emojifeed.core.rate_limit import PostRateLimitPolicy
from emojifeed.services.feed_assembler import FeedAssembler
from emojifeed.services.post_service import PostService

ALICE = {"Authorization": "Bearer session-u1"}
BOB = {"Authorization": "Bearer session-u2"}


@pytest.fixture
def container(store, directory, limiter, post_service) -> ServiceContainer:
    return ServiceContainer(
        store=store,
        directory=directory,
        limiter=limiter,
        post_service=post_service,
    )


@pytest.fixture
def client(container: ServiceContainer):
    with TestClient(create_app(container)) as test_client:
        yield test_client


def test_create_post_returns_201(client: TestClient) -> None:
    response = client.post("/v1/posts", json={"content": "🎉"}, headers=ALICE)

    assert response.status_code == 201
    body = response.json()
    assert body["author_id"] == "U1"
    assert body["content"] == "🎉"
    assert body["id"]
    assert body["created_at"]


def test_created_post_is_readable(client: TestClient) -> None:
    post_id = client.post("/v1/posts", json={"content": "🍕"}, headers=ALICE).json()["id"]

    response = client.get(f"/v1/posts/{post_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["post"]["id"] == post_id
    assert body["author"] == {
        "id": "U1",
        "name": "alice",
        "profile_image_url": "https://img.example/alice.png",
    }


def test_create_requires_session(client: TestClient) -> None:
    response = client.post("/v1/posts", json={"content": "🎉"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "unauthorized"
    assert response.json()["error"]["message"] == "You must be signed in to do that"


def test_create_rejects_unknown_session(client: TestClient) -> None:
    response = client.post(
        "/v1/posts", json={"content": "🎉"}, headers={"Authorization": "Bearer forged"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Your session is invalid or has expired"


def test_create_rejects_text(client: TestClient) -> None:
    response = client.post("/v1/posts", json={"content": "hello"}, headers=ALICE)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "invalid_content"
    assert error["message"] == "Only emojis are allowed!"
    assert error["details"]["fields"]["content"] == ["Only emojis are allowed!"]


def test_create_rejects_missing_content(client: TestClient) -> None:
    response = client.post("/v1/posts", json={}, headers=ALICE)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "invalid_request"
    assert "content" in error["details"]["fields"]


def test_fourth_post_is_rate_limited(client: TestClient) -> None:
    for _ in range(3):
        assert client.post("/v1/posts", json={"content": "🎉"}, headers=ALICE).status_code == 201

    response = client.post("/v1/posts", json={"content": "🎉"}, headers=ALICE)

    assert response.status_code == 429
    error = response.json()["error"]
    assert error["code"] == "too_many_requests"
    assert error["message"] == "You are posting too fast"
    assert error["details"]["retry_after"] == 60
    assert response.headers["Retry-After"] == "60"
    assert response.headers["X-RateLimit-Limit"] == "3"
    assert response.headers["X-RateLimit-Remaining"] == "0"

    # Other authors keep their own quota.
    assert client.post("/v1/posts", json={"content": "🎉"}, headers=BOB).status_code == 201


def test_get_all_lists_newest_first(client: TestClient, post_clock) -> None:
    client.post("/v1/posts", json={"content": "1️⃣"}, headers=ALICE)
    post_clock.advance(1)
    client.post("/v1/posts", json={"content": "2️⃣"}, headers=BOB)

    response = client.get("/v1/posts")

    assert response.status_code == 200
    body = response.json()
    assert [entry["post"]["content"] for entry in body] == ["2️⃣", "1️⃣"]
    assert [entry["author"]["name"] for entry in body] == ["bob", "alice"]


def test_get_all_empty(client: TestClient) -> None:
    response = client.get("/v1/posts")

    assert response.status_code == 200
    assert response.json() == []


def test_get_by_id_not_found(client: TestClient) -> None:
    response = client.get("/v1/posts/does-not-exist")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "post_not_found"


def test_get_posts_by_user(client: TestClient) -> None:
    client.post("/v1/posts", json={"content": "🍕"}, headers=ALICE)
    client.post("/v1/posts", json={"content": "🍔"}, headers=BOB)

    response = client.get("/v1/users/U1/posts")

    assert response.status_code == 200
    assert [entry["post"]["content"] for entry in response.json()] == ["🍕"]


def test_get_posts_by_user_without_posts(client: TestClient) -> None:
    response = client.get("/v1/users/ghost-user/posts")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "No posts found for this user"


def test_missing_author_is_internal_error(client: TestClient, store: InMemoryPostStore) -> None:
    client.post("/v1/posts", json={"content": "🎉"}, headers=ALICE)
    client.post("/v1/posts", json={"content": "🎉"}, headers={"Authorization": "Bearer session-u3"})

    response = client.get("/v1/posts")

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "author_not_found"
    assert error["message"] == "An unexpected error occurred. Please try again later."
    assert "details" not in error


def test_error_responses_carry_request_id(client: TestClient) -> None:
    response = client.get("/v1/posts/nope", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["error"]["request_id"] == "req-123"


def test_limiter_outage_is_503(store, directory) -> None:
    class DownLimiter:
        async def allow(self, key):
            raise UpstreamUnavailableAppError(code="rate_limit_unavailable", message="down")

        async def close(self):
            return None

    limiter = DownLimiter()
    service = PostService(
        store=store,
        assembler=FeedAssembler(directory),
        rate_limit=PostRateLimitPolicy(limiter),
    )
    container = ServiceContainer(
        store=store, directory=directory, limiter=limiter, post_service=service
    )

    with TestClient(create_app(container)) as client:
        response = client.post("/v1/posts", json={"content": "🎉"}, headers=ALICE)

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "rate_limit_unavailable"


def test_settings_passed_to_create_app_reach_handlers(authors) -> None:
    cfg = Settings(
        app=AppSettings(rate_limit_requests=1, rate_limit_include_headers=False),
        log=LogSettings(request_id_header="X-Correlation-ID"),
    )
    app = create_app(settings=cfg)
    app.state.container.directory.add_author(authors[0])
    app.state.container.directory.add_session("session-u1", "U1")

    assert app.state.container.identity_timeout_seconds == cfg.identity.timeout_seconds

    with TestClient(app) as client:
        assert client.post("/v1/posts", json={"content": "🎉"}, headers=ALICE).status_code == 201
        response = client.post("/v1/posts", json={"content": "🎉"}, headers=ALICE)

    assert response.status_code == 429
    assert "Retry-After" not in response.headers
    assert response.headers["X-Correlation-ID"]
    assert response.json()["error"]["details"]["limit"] == 1


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_openapi_marks_only_create_as_authenticated(client: TestClient) -> None:
    schema = client.get("/openapi.json").json()

    assert "SessionAuth" in schema["components"]["securitySchemes"]
    assert schema["paths"]["/v1/posts"]["post"]["security"] == [{"SessionAuth": []}]
    assert "security" not in schema["paths"]["/v1/posts"]["get"]
