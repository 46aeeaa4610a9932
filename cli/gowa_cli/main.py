from __future__ import annotations

import typer

from .commands import app_cmd, chats_cmd, message_cmd, send_cmd, settings_cmd, user_cmd
from .logging_ import setup_logging
from .state import CliState


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="gowa",
        help="gowa CLI: talk to a WhatsApp gateway over HTTP.",
        no_args_is_help=True,
    )

    app.add_typer(settings_cmd.app, name="settings")
    app.add_typer(app_cmd.app, name="app")
    app.add_typer(user_cmd.app, name="user")
    app.add_typer(chats_cmd.app, name="chats")
    app.add_typer(send_cmd.app, name="send")
    app.add_typer(message_cmd.app, name="message")

    @app.callback()
    def _main(
            ctx: typer.Context,
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
            profile: str | None = typer.Option(None, "--profile", help="Config profile to use."),
            base_url: str | None = typer.Option(None, "--base-url", help="Override gateway base URL."),
            json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
    ):
        setup_logging(verbose)
        ctx.obj = CliState(profile=profile, base_url=base_url, json_out=json_out)

    return app


app = _build_app()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
