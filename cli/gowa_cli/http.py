from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict, is_dataclass
from typing import Any, Callable, Iterator, TypeVar

import typer
from gowa_client import (
    AuthError,
    ConfigError,
    DecodeError,
    GowaClient,
    GowaClientError,
    HTTPStatusError,
    TransportError,
    UploadError,
    ValidationError,
)
from gowa_client.config_types import ClientConfig

from . import console
from .config import AppConfig, apply_env, apply_profile, load_config, normalize_base_url
from .state import get_state

T = TypeVar("T")


def make_client(
    cfg: AppConfig,
    *,
    profile: str | None,
    base_url_override: str | None,
) -> GowaClient:
    try:
        effective_cfg = apply_profile(apply_env(cfg), profile)
    except KeyError:
        console.err(f"Unknown profile: {profile}")
        raise typer.Exit(code=2)
    base_url = normalize_base_url(base_url_override or effective_cfg.base_url, warn=True)
    try:
        return GowaClient(
            ClientConfig(
                base_url=base_url,
                username=effective_cfg.username,
                password=effective_cfg.password,
                timeout_s=effective_cfg.timeout_s,
            )
        )
    except ConfigError as e:
        console.err(str(e))
        raise typer.Exit(code=2)


def describe_error(exc: GowaClientError) -> str:
    if isinstance(exc, AuthError):
        return f"Gateway rejected the credentials ({exc.status_code}). Check username/password."
    if isinstance(exc, HTTPStatusError):
        return f"Gateway returned {exc.status_code}: {exc.details or '-'}"
    if isinstance(exc, ValidationError):
        return f"Invalid input: {exc}"
    if isinstance(exc, UploadError):
        return f"Upload failed: {exc}"
    if isinstance(exc, DecodeError):
        return f"Unexpected gateway response: {exc}"
    if isinstance(exc, TransportError):
        return f"Gateway unreachable: {exc}"
    return str(exc)


@contextmanager
def gateway_call(action: str) -> Iterator[None]:
    try:
        yield
    except GowaClientError as e:
        console.err(f"Failed to {action}. {describe_error(e)}")
        raise typer.Exit(code=2)


def to_jsonable(resp: Any) -> Any:
    return asdict(resp) if is_dataclass(resp) else resp


def call_gateway(ctx: typer.Context, action: str, call: Callable[[GowaClient], T]) -> T:
    state = get_state(ctx)
    client = make_client(load_config(), profile=state.profile, base_url_override=state.base_url)
    try:
        with gateway_call(action):
            return call(client)
    finally:
        client.close()


def emit(ctx: typer.Context, resp: Any) -> bool:
    """Print ``resp`` as JSON when --json was given; returns True if it did."""
    if not get_state(ctx).json_out:
        return False
    console.print_json(to_jsonable(resp))
    return True
