from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from gowa_client.config_types import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_S

from . import console

APP_NAME = "gowa"
CONFIG_FILENAME = "config.toml"
ENV_BASE_URL = "GOWA_BASE_URL"
ENV_USERNAME = "GOWA_USER"
ENV_PASSWORD = "GOWA_PASS"

_WARNED_BASE_URL_SCHEME = False


@dataclass
class ProfileConfig:
    base_url: str = ""
    username: str = ""
    password: str = ""


@dataclass
class AppConfig:
    base_url: str
    username: str = ""
    password: str = ""
    timeout_s: float = DEFAULT_TIMEOUT_S
    profiles: dict[str, ProfileConfig] = field(default_factory=dict)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig(base_url=DEFAULT_BASE_URL, username="", password="", timeout_s=DEFAULT_TIMEOUT_S)


def normalize_base_url(raw: str | None, *, warn: bool = False) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        scheme = "http://"
    else:
        scheme = "https://"

    normalized = f"{scheme}{value}"
    if warn:
        _warn_missing_scheme(normalized)
    return normalized


def _warn_missing_scheme(normalized: str) -> None:
    global _WARNED_BASE_URL_SCHEME
    if _WARNED_BASE_URL_SCHEME:
        return
    if not _is_interactive():
        return
    console.warn(f"base_url missing scheme, assuming {normalized}")
    _WARNED_BASE_URL_SCHEME = True


def _is_interactive() -> bool:
    import sys
    return bool(sys.stderr.isatty() or sys.stdout.isatty())


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def _timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_S
    return timeout if timeout > 0 else DEFAULT_TIMEOUT_S


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    data: dict[str, Any] = {
        "base_url": cfg.base_url,
        "username": cfg.username,
        "password": cfg.password,
        "timeout_s": float(cfg.timeout_s),
    }
    if cfg.profiles:
        data["profiles"] = {
            name: {k: v for k, v in vars(p).items() if v}
            for name, p in cfg.profiles.items()
        }
    return data


def from_toml(data: dict[str, Any]) -> AppConfig:
    base_url = normalize_base_url(str(data.get("base_url") or ""), warn=True)
    profiles: dict[str, ProfileConfig] = {}
    profiles_raw = data.get("profiles") or {}
    if isinstance(profiles_raw, dict):
        for name, v in profiles_raw.items():
            if not isinstance(v, dict):
                continue
            profiles[str(name)] = ProfileConfig(
                base_url=normalize_base_url(str(v.get("base_url") or ""), warn=True),
                username=str(v.get("username") or ""),
                password=str(v.get("password") or ""),
            )
    return AppConfig(
        base_url=base_url or DEFAULT_BASE_URL,
        username=str(data.get("username") or ""),
        password=str(data.get("password") or ""),
        timeout_s=_timeout(data.get("timeout_s", DEFAULT_TIMEOUT_S)),
        profiles=profiles,
    )


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return default_config()
    return from_toml(data)


def apply_env(cfg: AppConfig) -> AppConfig:
    base_url = normalize_base_url(os.getenv(ENV_BASE_URL, ""), warn=True)
    return AppConfig(
        base_url=base_url or cfg.base_url,
        username=os.getenv(ENV_USERNAME) or cfg.username,
        password=os.getenv(ENV_PASSWORD) or cfg.password,
        timeout_s=cfg.timeout_s,
        profiles=cfg.profiles,
    )


def apply_profile(cfg: AppConfig, profile: str | None) -> AppConfig:
    if not profile:
        return cfg
    prof = cfg.profiles.get(profile)
    if prof is None:
        raise KeyError(profile)
    return AppConfig(
        base_url=prof.base_url or cfg.base_url,
        username=prof.username or cfg.username,
        password=prof.password or cfg.password,
        timeout_s=cfg.timeout_s,
        profiles=cfg.profiles,
    )


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
