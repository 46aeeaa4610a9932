from __future__ import annotations

import typer

from .. import console
from ..http import call_gateway, emit

app = typer.Typer(help="Act on a sent or received message.")

PhoneOpt = typer.Option(..., "--phone", "-p", help="Chat phone or JID the message belongs to.")


def _done(ctx: typer.Context, resp, fallback: str) -> None:
    if not emit(ctx, resp):
        console.ok(resp.message or fallback)


@app.command("revoke")
def revoke(ctx: typer.Context, message_id: str = typer.Argument(...), phone: str = PhoneOpt):
    _done(ctx, call_gateway(ctx, "revoke message", lambda c: c.revoke_message(message_id, phone)), "Revoked.")


@app.command("delete")
def delete(ctx: typer.Context, message_id: str = typer.Argument(...), phone: str = PhoneOpt):
    _done(ctx, call_gateway(ctx, "delete message", lambda c: c.delete_message(message_id, phone)), "Deleted.")


@app.command("react")
def react(
        ctx: typer.Context,
        message_id: str = typer.Argument(...),
        emoji: str = typer.Argument(..., help="Reaction emoji."),
        phone: str = PhoneOpt,
):
    _done(ctx, call_gateway(ctx, "react", lambda c: c.react_message(message_id, phone, emoji)), "Reacted.")


@app.command("update")
def update(
        ctx: typer.Context,
        message_id: str = typer.Argument(...),
        message: str = typer.Argument(..., help="New message text."),
        phone: str = PhoneOpt,
):
    _done(ctx, call_gateway(ctx, "edit message", lambda c: c.update_message(message_id, phone, message)), "Updated.")


@app.command("read")
def read(ctx: typer.Context, message_id: str = typer.Argument(...), phone: str = PhoneOpt):
    _done(ctx, call_gateway(ctx, "mark as read", lambda c: c.read_message(message_id, phone)), "Marked as read.")


@app.command("star")
def star(ctx: typer.Context, message_id: str = typer.Argument(...), phone: str = PhoneOpt):
    _done(ctx, call_gateway(ctx, "star message", lambda c: c.star_message(message_id, phone)), "Starred.")


@app.command("unstar")
def unstar(ctx: typer.Context, message_id: str = typer.Argument(...), phone: str = PhoneOpt):
    _done(ctx, call_gateway(ctx, "unstar message", lambda c: c.unstar_message(message_id, phone)), "Unstarred.")
