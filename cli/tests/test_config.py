from __future__ import annotations

from gowa_cli import config


def test_load_config_defaults_when_missing() -> None:
    cfg = config.load_config()
    assert cfg.base_url == "http://localhost:3000"
    assert cfg.username == ""
    assert cfg.timeout_s == 30.0


def test_save_and_load_round_trip(isolated_config) -> None:
    cfg = config.default_config()
    cfg.base_url = "https://gw.example.com"
    cfg.username = "admin"
    cfg.password = "s3cret"
    cfg.profiles["dev"] = config.ProfileConfig(base_url="http://localhost:3001")

    path = config.save_config(cfg)
    contents = isolated_config.joinpath("config.toml").read_text(encoding="utf-8")

    assert path.endswith("config.toml")
    assert 'username = "admin"' in contents
    assert "[profiles.dev]" in contents
    assert "password" not in contents.split("[profiles.dev]")[1]

    loaded = config.load_config()
    assert loaded.base_url == "https://gw.example.com"
    assert loaded.password == "s3cret"
    assert loaded.profiles["dev"].base_url == "http://localhost:3001"


def test_invalid_timeout_falls_back_to_default(isolated_config) -> None:
    isolated_config.joinpath("config.toml").write_text('base_url = "http://gw.test"\ntimeout_s = -4\n', encoding="utf-8")
    assert config.load_config().timeout_s == 30.0


def test_env_overrides_file_values(monkeypatch) -> None:
    cfg = config.default_config()
    cfg.username = "file-user"
    monkeypatch.setenv(config.ENV_BASE_URL, "gw.example.com/")
    monkeypatch.setenv(config.ENV_USERNAME, "env-user")
    monkeypatch.setenv(config.ENV_PASSWORD, "env-pass")

    effective = config.apply_env(cfg)

    assert effective.base_url == "https://gw.example.com"
    assert effective.username == "env-user"
    assert effective.password == "env-pass"


def test_apply_profile_overlays_only_set_fields() -> None:
    cfg = config.default_config()
    cfg.username = "base-user"
    cfg.password = "base-pass"
    cfg.profiles["prod"] = config.ProfileConfig(base_url="https://prod.test", username="prod-user")

    effective = config.apply_profile(cfg, "prod")

    assert effective.base_url == "https://prod.test"
    assert effective.username == "prod-user"
    assert effective.password == "base-pass"
    assert config.apply_profile(cfg, None) is cfg


def test_normalize_base_url_defaults_to_https() -> None:
    assert config.normalize_base_url("example.com") == "https://example.com"


def test_normalize_base_url_defaults_to_http_for_localhost() -> None:
    assert config.normalize_base_url("localhost:3000") == "http://localhost:3000"


def test_normalize_base_url_strips_trailing_slash() -> None:
    assert config.normalize_base_url("https://example.com/api/") == "https://example.com/api"
