"""HTTP transport for the Lemon Squeezy REST API with retries and logging."""

from __future__ import annotations

import logging
import os
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import Retrying, RetryError, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from lmsq.core.errors import InvalidUsageError, TransportError
from lmsq.core.safety import scrub_for_logging

DEFAULT_BASE_URL = "https://api.lemonsqueezy.com/v1"
BASE_URL_ENV = "LMSQ_API_BASE_URL"
TIMEOUT_ENV = "LMSQ_HTTP_TIMEOUT"
JSON_API_MEDIA_TYPE = "application/vnd.api+json"

type QueryParams = Mapping[str, str | int | bool | None]


@dataclass(frozen=True)
class ApiFailure:
    """Structured error returned by the upstream API."""

    message: str
    status: int


@dataclass(frozen=True)
class ApiResult:
    """Outcome of one API call: either a JSON body, an error, or neither (204)."""

    data: Any = None
    error: ApiFailure | None = None


class LemonSqueezyClient:
    """Thin wrapper over :class:`httpx.Client` speaking JSON:API."""

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int = 3,
        wait_initial: float = 0.5,
        wait_max: float = 4.0,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Configure the HTTP client; *api_key* may be ``None`` for public endpoints."""
        if max_retries < 1:
            error_message = "max_retries must be at least 1"
            raise ValueError(error_message)

        headers = {"Accept": JSON_API_MEDIA_TYPE}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self._client = httpx.Client(
            base_url=base_url or os.environ.get(BASE_URL_ENV, DEFAULT_BASE_URL),
            headers=headers,
            timeout=timeout if timeout is not None else _timeout_from_environment(),
            transport=transport,
        )
        self._max_retries = max_retries
        self._wait_initial = wait_initial
        self._wait_max = wait_max
        self._logger = logger or logging.getLogger(__name__)

    def __enter__(self) -> LemonSqueezyClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying connection pool."""
        self._client.close()

    def get(self, path: str, *, params: QueryParams | None = None) -> ApiResult:
        """Issue a ``GET`` request."""
        return self.request("GET", path, params=params)

    def post(
        self, path: str, *, body: Any = None, params: QueryParams | None = None,
    ) -> ApiResult:
        """Issue a ``POST`` request with an optional JSON:API body."""
        return self.request("POST", path, body=body, params=params)

    def patch(self, path: str, *, body: Any) -> ApiResult:
        """Issue a ``PATCH`` request."""
        return self.request("PATCH", path, body=body)

    def delete(self, path: str) -> ApiResult:
        """Issue a ``DELETE`` request."""
        return self.request("DELETE", path)

    def post_form(self, path: str, form: Mapping[str, str]) -> ApiResult:
        """Issue a form-encoded ``POST`` (used by the public License API)."""
        return self._dispatch(
            "POST", path, data=dict(form), headers={"Accept": "application/json"},
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: QueryParams | None = None,
    ) -> ApiResult:
        """Send a JSON:API request and translate the response into an :class:`ApiResult`."""
        kwargs: dict[str, Any] = {"params": _clean_params(params)}
        if body is not None:
            kwargs["json"] = body
            kwargs["headers"] = {"Content-Type": JSON_API_MEDIA_TYPE}
        return self._dispatch(method, path, **kwargs)

    def _dispatch(self, method: str, path: str, **kwargs: Any) -> ApiResult:
        def _invoke() -> httpx.Response:
            self._logger.debug(
                "Dispatching API request",
                extra={"method": method, "path": path, "params": scrub_for_logging(kwargs.get("params"))},
            )
            try:
                return self._client.request(method, path, **kwargs)
            except httpx.TransportError as exc:
                self._logger.warning("API request failed", exc_info=exc)
                raise

        response = self._run_with_retry(_invoke)
        return _to_result(response)

    def _build_retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential_jitter(initial=self._wait_initial, max=self._wait_max),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=False,
        )

    def _run_with_retry(self, func: typing.Callable[[], httpx.Response]) -> httpx.Response:
        retrying = self._build_retrying()
        try:
            return retrying(func)
        except RetryError as exc:
            last_exception = exc.last_attempt.exception()
            self._logger.info(
                "API request abandoned", extra={"attempts": self._max_retries},
            )
            message = f"Network request failed after {self._max_retries} attempts: {last_exception}"
            raise TransportError(message) from last_exception


def _to_result(response: httpx.Response) -> ApiResult:
    if response.is_error:
        return ApiResult(error=ApiFailure(_error_message(response), response.status_code))
    if response.status_code == httpx.codes.NO_CONTENT or not response.content:
        return ApiResult()
    try:
        return ApiResult(data=response.json())
    except ValueError as error:
        message = f"Response from {response.request.url} was not valid JSON"
        raise TransportError(message) from error


def _error_message(response: httpx.Response) -> str:
    fallback = f"HTTP {response.status_code}"
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if not isinstance(payload, Mapping):
        return fallback
    errors = typing.cast("Mapping[str, Any]", payload).get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], Mapping):
        first = typing.cast("Mapping[str, Any]", errors[0])
        for key in ("detail", "title"):
            value = first.get(key)
            if isinstance(value, str) and value:
                return value
    # The License API reports failures as a top-level ``error`` string.
    error_value = typing.cast("Mapping[str, Any]", payload).get("error")
    if isinstance(error_value, str) and error_value:
        return error_value
    return fallback


def _clean_params(params: QueryParams | None) -> dict[str, str | int]:
    cleaned: dict[str, str | int] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = value
    return cleaned


def _timeout_from_environment() -> float:
    raw = os.environ.get(TIMEOUT_ENV)
    if not raw:
        return 30.0
    try:
        return float(raw)
    except ValueError as error:
        message = f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}"
        raise InvalidUsageError(message) from error


__all__ = [
    "DEFAULT_BASE_URL",
    "ApiFailure",
    "ApiResult",
    "LemonSqueezyClient",
    "QueryParams",
]
