from __future__ import annotations

import os

import typer

from .. import console
from ..config import ProfileConfig, config_path, default_config, load_config, normalize_base_url, save_config

app = typer.Typer(help="Manage local CLI settings (~/.config/gowa/config.toml).")


@app.command("init")
def init_settings(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        base_url: str = typer.Option(
            ...,
            "--base-url",
            prompt="Gateway base URL",
            help="Gateway base URL like http://localhost:3000",
        ),
        username: str = typer.Option("", "--username", help="Basic auth username."),
        password: str = typer.Option("", "--password", help="Basic auth password."),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.base_url = normalize_base_url(base_url, warn=True)
    if not cfg.base_url:
        console.err("Base URL cannot be empty.")
        raise typer.Exit(code=2)
    cfg.username = username
    cfg.password = password
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_settings():
    cfg = load_config()
    password_state = "(set)" if cfg.password else "(empty)"
    console.console.print(f"config: {config_path()}", markup=False)
    console.console.print(f"base_url={cfg.base_url}", markup=False)
    console.console.print(f"username={cfg.username or '-'}", markup=False)
    console.console.print(f"password={password_state}", markup=False)
    console.console.print(f"timeout_s={cfg.timeout_s}", markup=False)
    for name, prof in sorted(cfg.profiles.items()):
        console.console.print(
            f"[{name}] base_url={prof.base_url or '-'} username={prof.username or '-'}",
            markup=False,
        )


@app.command("set")
def set_setting(
        base_url: str | None = typer.Option(None, "--base-url", help="Set gateway base URL."),
        username: str | None = typer.Option(None, "--username", help="Set basic auth username."),
        password: str | None = typer.Option(None, "--password", help="Set basic auth password."),
        timeout_s: float | None = typer.Option(None, "--timeout", help="Request timeout in seconds."),
        profile: str | None = typer.Option(None, "--profile", help="Write into a named profile instead."),
):
    if timeout_s is not None and timeout_s <= 0:
        console.err("Timeout must be positive.")
        raise typer.Exit(code=2)
    cfg = load_config()
    if profile:
        prof = cfg.profiles.setdefault(profile, ProfileConfig())
        if base_url is not None:
            prof.base_url = normalize_base_url(base_url, warn=True)
        if username is not None:
            prof.username = username
        if password is not None:
            prof.password = password
    else:
        if base_url is not None:
            cfg.base_url = normalize_base_url(base_url, warn=True)
        if username is not None:
            cfg.username = username
        if password is not None:
            cfg.password = password
    if timeout_s is not None:
        cfg.timeout_s = timeout_s
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")
