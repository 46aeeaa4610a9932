from __future__ import annotations

import base64
import json
import logging
import threading
import time
from typing import Any, Callable, Iterable, Mapping, Union
from urllib.parse import urlsplit

import httpx

from .config_types import DEFAULT_BASE_URL, ClientConfig
from .errors import (
    AuthError,
    ConfigError,
    DecodeError,
    HTTPStatusError,
    RequestCancelled,
    TransportError,
)
from .multipart import StreamingMultipartEncoder

logger = logging.getLogger(__name__)

USER_AGENT = "gowa-client/0.1.0"

POLL_INTERVAL_S = 0.05

Body = Union[bytes, Callable[[], Iterable[bytes]], None]


def basic_auth_header(username: str, password: str) -> str | None:
    if not username and not password:
        return None
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def join_url_path(base_path: str, path: str) -> str:
    head = base_path.rstrip("/")
    tail = "/".join(seg for seg in path.split("/") if seg)
    if not tail:
        return head or "/"
    return f"{head}/{tail}"


class Transport:
    def __init__(
            self,
            cfg: ClientConfig,
            *,
            sleep: Callable[[float], None] = time.sleep,
            clock: Callable[[], float] = time.monotonic,
    ):
        base_url = (cfg.base_url or DEFAULT_BASE_URL).strip()
        parts = urlsplit(base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigError(f"invalid base url: {base_url!r}")
        if cfg.timeout_s is None or cfg.timeout_s <= 0:
            raise ConfigError(f"timeout must be positive, got {cfg.timeout_s!r}")

        self._cfg = cfg
        self._origin = f"{parts.scheme}://{parts.netloc}"
        self._base_path = parts.path
        self._sleep = sleep
        self._clock = clock

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        auth = basic_auth_header(cfg.username, cfg.password)
        if auth:
            headers["Authorization"] = auth
        self._headers = httpx.Headers(headers)

        self._client = httpx.Client(
            timeout=cfg.timeout_s,
            transport=cfg.transport,
            follow_redirects=True,
        )

    @property
    def base_url(self) -> str:
        return self.build_url("")

    @property
    def headers(self) -> httpx.Headers:
        return self._headers.copy()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def build_url(self, path: str) -> str:
        return self._origin + join_url_path(self._base_path, path)

    def _merge_headers(self, overrides: Mapping[str, str] | None) -> httpx.Headers:
        merged = self._headers.copy()
        if overrides:
            merged.update(overrides)
        return merged

    def execute(
            self,
            method: str,
            path: str,
            *,
            params: Mapping[str, Any] | None = None,
            body: Body = None,
            headers: Mapping[str, str] | None = None,
            cancel: threading.Event | None = None,
    ) -> httpx.Response:
        r, _ = self._exchange(method, path, params=params, body=body, headers=headers, cancel=cancel)
        return r

    def _exchange(
            self,
            method: str,
            path: str,
            *,
            params: Mapping[str, Any] | None = None,
            body: Body = None,
            headers: Mapping[str, str] | None = None,
            cancel: threading.Event | None = None,
            read_body: bool = False,
    ) -> tuple[httpx.Response, bytes | None]:
        method = method.upper()
        url = self.build_url(path)
        merged = self._merge_headers(headers)
        policy = self._cfg.retry
        retryable = policy.allows(method)
        deadline = self._clock() + self._cfg.timeout_s
        attempt = 0

        while True:
            if cancel is not None and cancel.is_set():
                raise RequestCancelled(f"{method} {url} cancelled")
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise TransportError(f"{method} {url} timed out after {self._cfg.timeout_s}s")

            content = body() if callable(body) else body
            try:
                request = self._client.build_request(
                    method,
                    url,
                    params=params or None,
                    content=content,
                    headers=merged,
                    timeout=remaining,
                )
            except Exception:
                _close_content(content)
                raise
            logger.debug("%s %s (attempt %d)", method, request.url, attempt + 1)
            inflight = _Attempt(
                self._client, request, content, read_body=read_body, deadline=deadline, clock=self._clock
            )
            inflight.start()
            self._await(inflight, method, url, deadline, cancel)

            try:
                if inflight.error is not None:
                    raise inflight.error
            except httpx.TransportError as e:
                if not retryable or attempt >= policy.max_retries:
                    raise TransportError(f"{method} {url} failed: {e}") from e
                delay = min(policy.backoff(attempt), max(0.0, deadline - self._clock()))
                logger.warning(
                    "%s %s failed (attempt %d/%d): %s; retrying in %.2fs",
                    method, url, attempt + 1, policy.max_retries + 1, e, delay,
                )
                self._wait(delay, cancel)
                attempt += 1
                continue
            except httpx.RequestError as e:
                raise TransportError(f"{method} {url} failed: {e}") from e

            r = inflight.response
            if r.status_code >= 400:
                logger.debug("%s %s -> %d", method, url, r.status_code)
                if r.status_code in (401, 403):
                    raise AuthError(r.status_code, inflight.body)
                raise HTTPStatusError(r.status_code, inflight.body)
            return r, inflight.body

    def _await(
            self,
            inflight: "_Attempt",
            method: str,
            url: str,
            deadline: float,
            cancel: threading.Event | None,
    ) -> None:
        while True:
            remaining = deadline - self._clock()
            if inflight.done.wait(max(0.0, min(POLL_INTERVAL_S, remaining))):
                return
            if cancel is not None and cancel.is_set():
                inflight.abandon()
                raise RequestCancelled(f"{method} {url} cancelled")
            if self._clock() >= deadline:
                inflight.abandon()
                raise TransportError(f"{method} {url} timed out after {self._cfg.timeout_s}s")

    def _wait(self, delay: float, cancel: threading.Event | None) -> None:
        if cancel is None:
            self._sleep(delay)
        elif cancel.wait(delay):
            raise RequestCancelled("cancelled while waiting to retry")

    @staticmethod
    def _decode(raw: bytes | None, model: Any = None) -> Any:
        raw = raw or b""
        if model is None and not raw.strip():
            return None
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise DecodeError(f"invalid JSON response: {e}") from e
        if model is None:
            return data
        return model.from_dict(data)

    def get_json(
            self,
            path: str,
            params: Mapping[str, Any] | None = None,
            *,
            model: Any = None,
            cancel: threading.Event | None = None,
    ) -> Any:
        _, raw = self._exchange("GET", path, params=params, cancel=cancel, read_body=True)
        return self._decode(raw, model)

    def post_json(
            self,
            path: str,
            payload: Any = None,
            *,
            model: Any = None,
            cancel: threading.Event | None = None,
    ) -> Any:
        body = None
        if payload is not None:
            body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        _, raw = self._exchange(
            "POST",
            path,
            body=body,
            headers={"Content-Type": "application/json"},
            cancel=cancel,
            read_body=True,
        )
        return self._decode(raw, model)

    def post_multipart(
            self,
            path: str,
            fields: Mapping[str, Any] | None = None,
            file_field: str | None = None,
            file_path: str | None = None,
            *,
            model: Any = None,
            cancel: threading.Event | None = None,
    ) -> Any:
        encoder = StreamingMultipartEncoder(fields, file_field, file_path, cancel=cancel)
        _, raw = self._exchange(
            "POST",
            path,
            body=encoder.stream,
            headers={"Content-Type": encoder.content_type},
            cancel=cancel,
            read_body=True,
        )
        return self._decode(raw, model)


def _close_content(content: Any) -> None:
    close = getattr(content, "close", None)
    if close is not None:
        close()


class _Attempt:
    """One send on a worker thread, so the caller can stop waiting on cancel or deadline.

    Error responses always have their body read here; successful ones only
    when ``read_body`` is set, otherwise the open response is handed back.
    An abandoned attempt stops at the next body chunk and closes whatever
    response it ends up holding.
    """

    def __init__(
            self,
            client: httpx.Client,
            request: httpx.Request,
            content: Any,
            *,
            read_body: bool,
            deadline: float,
            clock: Callable[[], float],
    ):
        self._client = client
        self._request = request
        self._content = content
        self._read_body = read_body
        self._deadline = deadline
        self._clock = clock
        self._lock = threading.Lock()
        self._abandoned = False
        self.done = threading.Event()
        self.response: httpx.Response | None = None
        self.body: bytes | None = None
        self.error: Exception | None = None

    def start(self) -> None:
        threading.Thread(target=self._run, name="gowa-request", daemon=True).start()

    def abandon(self) -> None:
        with self._lock:
            self._abandoned = True
            finished = self.done.is_set()
        if finished and self.response is not None:
            self.response.close()

    def _run(self) -> None:
        try:
            r = self._client.send(self._request, stream=True)
            if self._read_body or r.status_code >= 400:
                self.body = self._read(r)
            self.response = r
        except Exception as e:
            self.error = e
        finally:
            _close_content(self._content)
            with self._lock:
                self.done.set()
                abandoned = self._abandoned
            if abandoned and self.response is not None:
                self.response.close()

    def _read(self, r: httpx.Response) -> bytes:
        chunks: list[bytes] = []
        try:
            for chunk in r.iter_bytes():
                chunks.append(chunk)
                if self._abandoned:
                    raise TransportError("response abandoned")
                if self._clock() >= self._deadline:
                    req = self._request
                    raise TransportError(f"{req.method} {req.url} timed out reading response body")
        except httpx.HTTPError as e:
            raise TransportError(f"failed to read response body (status {r.status_code}): {e}") from e
        finally:
            r.close()
        return b"".join(chunks)
