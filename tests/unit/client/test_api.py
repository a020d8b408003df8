from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from lmsq.client.api import ApiFailure, ApiResult, LemonSqueezyClient
from lmsq.core.errors import InvalidUsageError, TransportError

type Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler, *, api_key: str | None = "test-key", max_retries: int = 3) -> LemonSqueezyClient:
    return LemonSqueezyClient(
        api_key,
        base_url="https://api.test/v1",
        timeout=5.0,
        max_retries=max_retries,
        wait_initial=0,
        wait_max=0,
        transport=httpx.MockTransport(handler),
    )


def test_get_sends_json_api_headers_and_cleans_params() -> None:
    """GET requests carry auth and JSON:API headers and drop empty params."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": []})

    with _client(handler) as client:
        result = client.get(
            "/orders",
            params={"page[number]": 2, "filter[status]": None, "include": "store", "test_mode": True},
        )

    assert result == ApiResult(data={"data": []})
    request = seen[0]
    assert request.url.path == "/v1/orders"
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["Accept"] == "application/vnd.api+json"
    assert request.url.params["page[number]"] == "2"
    assert request.url.params["include"] == "store"
    assert request.url.params["test_mode"] == "true"
    assert "filter[status]" not in request.url.params


def test_patch_sends_json_api_body() -> None:
    """Bodies are serialized as JSON with the JSON:API content type."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"type": "customers", "id": "1", "attributes": {}}})

    body = {"data": {"type": "customers", "id": "1", "attributes": {"status": "archived"}}}
    with _client(handler) as client:
        client.patch("/customers/1", body=body)

    request = seen[0]
    assert request.method == "PATCH"
    assert request.headers["Content-Type"] == "application/vnd.api+json"
    assert json.loads(request.content) == body


def test_post_form_is_form_encoded_without_auth() -> None:
    """License API calls are form-encoded and need no API key."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"valid": True})

    with _client(handler, api_key=None) as client:
        result = client.post_form("/licenses/validate", {"license_key": "abc"})

    request = seen[0]
    assert result.data == {"valid": True}
    assert "Authorization" not in request.headers
    assert request.headers["Accept"] == "application/json"
    assert request.content == b"license_key=abc"


def test_no_content_yields_empty_result() -> None:
    """A 204 response has neither data nor error."""
    with _client(lambda _: httpx.Response(204)) as client:
        result = client.delete("/webhooks/9")

    assert result == ApiResult()


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"errors": [{"detail": "Not found", "title": "Not Found"}]}, "Not found"),
        ({"errors": [{"title": "Not Found"}]}, "Not Found"),
        ({"error": "license_key not found."}, "license_key not found."),
        ({"unexpected": True}, "HTTP 404"),
    ],
)
def test_error_responses_become_failures(payload: object, expected: str) -> None:
    """Structured API errors are returned rather than raised."""
    with _client(lambda _: httpx.Response(404, json=payload)) as client:
        result = client.get("/orders/1")

    assert result.data is None
    assert result.error == ApiFailure(message=expected, status=404)


def test_non_json_error_body_uses_status() -> None:
    """Error bodies that are not JSON fall back to the HTTP status."""
    with _client(lambda _: httpx.Response(502, text="<html>bad gateway</html>")) as client:
        result = client.get("/orders")

    assert result.error == ApiFailure(message="HTTP 502", status=502)


def test_transport_errors_are_retried() -> None:
    """Transient connection failures are retried until one succeeds."""
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) < 3:
            message = "connection refused"
            raise httpx.ConnectError(message, request=request)
        return httpx.Response(200, json={"data": []})

    with _client(handler) as client:
        result = client.get("/orders")

    assert len(attempts) == 3
    assert result.data == {"data": []}


def test_transport_errors_surface_after_retries() -> None:
    """Exhausted retries raise the domain TransportError."""

    def handler(request: httpx.Request) -> httpx.Response:
        message = "connection refused"
        raise httpx.ConnectError(message, request=request)

    with _client(handler, max_retries=2) as client, pytest.raises(
        TransportError, match="Network request failed after 2 attempts",
    ):
        client.get("/orders")


def test_http_errors_are_not_retried() -> None:
    """Error statuses are answers, not transport failures."""
    attempts: list[int] = []

    def handler(_: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(500, json={"errors": [{"detail": "boom"}]})

    with _client(handler) as client:
        result = client.get("/orders")

    assert len(attempts) == 1
    assert result.error == ApiFailure(message="boom", status=500)


def test_base_url_and_timeout_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """The base URL can be redirected and bad timeouts are rejected."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    monkeypatch.setenv("LMSQ_API_BASE_URL", "https://staging.test/v1")
    with LemonSqueezyClient("k", transport=httpx.MockTransport(handler)) as client:
        client.get("/stores")
    assert seen[0].url.host == "staging.test"

    monkeypatch.setenv("LMSQ_HTTP_TIMEOUT", "soon")
    with pytest.raises(InvalidUsageError, match="LMSQ_HTTP_TIMEOUT"):
        LemonSqueezyClient("k", transport=httpx.MockTransport(handler))


def test_max_retries_must_be_positive() -> None:
    """Zero attempts is a programming error."""
    with pytest.raises(ValueError, match="max_retries"):
        LemonSqueezyClient("k", max_retries=0)
