from __future__ import annotations

import json
from email import policy
from email.parser import BytesParser
from typing import Any, Callable

import httpx
import pytest

from gowa_client import ClientConfig, GowaClient, RetryPolicy
from gowa_client.transport import Transport

SEND_OK = {"code": "SUCCESS", "message": "ok", "results": {"message_id": "abc", "status": "sent"}}


class FakeGateway:
    """Records every request and answers from a queue of canned outcomes."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._outcomes: list[Any] = []
        self.default: Any = SEND_OK

    def queue(self, *outcomes: Any) -> None:
        self._outcomes.extend(outcomes)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self._outcomes.pop(0) if self._outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(request)
        if isinstance(outcome, httpx.Response):
            return outcome
        return httpx.Response(200, json=outcome)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_transport(gateway, sleeps) -> Callable[..., Transport]:
    def _make(**kwargs: Any) -> Transport:
        kwargs.setdefault("base_url", "http://gw.test/api")
        kwargs.setdefault("retry", RetryPolicy())
        cfg = ClientConfig(transport=httpx.MockTransport(gateway), **kwargs)
        return Transport(cfg, sleep=sleeps.append)

    return _make


@pytest.fixture
def client(make_transport):
    c = GowaClient(transport=make_transport())
    yield c
    c.close()


def _parse_form(content_type: str, body: bytes) -> dict[str, tuple[str | None, bytes]]:
    head = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode("ascii")
    msg = BytesParser(policy=policy.default).parsebytes(head + body)
    assert msg.is_multipart()
    parts: dict[str, tuple[str | None, bytes]] = {}
    for part in msg.iter_parts():
        name = part.get_param("name", header="content-disposition")
        parts[name] = (part.get_filename(), part.get_payload(decode=True))
    return parts


@pytest.fixture
def parse_form() -> Callable[[str, bytes], dict[str, tuple[str | None, bytes]]]:
    """Decode a multipart/form-data body with the stdlib MIME parser."""
    return _parse_form
