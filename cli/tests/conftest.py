from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from gowa_client import ClientConfig, GowaClient, RetryPolicy

from gowa_cli import config
from gowa_cli import http as http_mod

SEND_OK = {"code": "SUCCESS", "message": "Message sent", "results": {"message_id": "3EB0ABC", "status": "sent"}}


class GatewayStub:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.response: Any = SEND_OK
        self.make_client_calls: list[dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, httpx.Response):
            return self.response
        return httpx.Response(200, json=self.response)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    def _config_dir(_: str) -> str:
        return str(tmp_path)

    monkeypatch.setattr(config, "user_config_dir", _config_dir)
    for name in (config.ENV_BASE_URL, config.ENV_USERNAME, config.ENV_PASSWORD):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def gateway(monkeypatch) -> GatewayStub:
    stub = GatewayStub()

    def _make_client(cfg, *, profile, base_url_override):
        stub.make_client_calls.append({"cfg": cfg, "profile": profile, "base_url_override": base_url_override})
        return GowaClient(
            ClientConfig(
                base_url="http://gw.test",
                transport=httpx.MockTransport(stub.handler),
                retry=RetryPolicy.disabled(),
            )
        )

    monkeypatch.setattr(http_mod, "make_client", _make_client)
    return stub
