from __future__ import annotations

import typer
from rich.table import Table

from .. import console
from ..http import call_gateway, emit

app = typer.Typer(help="Look up users, contacts and account settings.")


@app.command("info")
def user_info(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Phone or JID."),
):
    resp = call_gateway(ctx, "get user info", lambda c: c.user_info(phone))
    if emit(ctx, resp):
        return
    r = resp.results
    console.console.print(f"verified_name: {r.verified_name or '-'}")
    console.console.print(f"status: {r.status or '-'}")
    console.console.print(f"picture_id: {r.picture_id or '-'}")
    console.console.print(f"devices: {len(r.devices)}")


@app.command("avatar")
def user_avatar(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Phone or JID."),
        preview: bool = typer.Option(False, "--preview", help="Low resolution preview."),
        community: bool = typer.Option(False, "--community", help="The JID is a community."),
):
    resp = call_gateway(
        ctx,
        "get avatar",
        lambda c: c.user_avatar(phone, is_preview=preview, is_community=community or None),
    )
    if not emit(ctx, resp):
        console.console.print(resp.results.url or "-")


@app.command("check")
def user_check(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Phone number."),
):
    resp = call_gateway(ctx, "check user", lambda c: c.user_check(phone))
    if emit(ctx, resp):
        return
    if resp.results.is_on_whatsapp:
        console.ok(f"{phone} is on WhatsApp.")
    else:
        console.warn(f"{phone} is not on WhatsApp.")


@app.command("contacts")
def my_contacts(ctx: typer.Context):
    resp = call_gateway(ctx, "list contacts", lambda c: c.my_contacts())
    if emit(ctx, resp):
        return
    table = Table(title="Contacts")
    table.add_column("jid")
    table.add_column("name")
    for contact in resp.results:
        table.add_row(contact.jid, contact.name or "-")
    console.console.print(table)


@app.command("groups")
def my_groups(ctx: typer.Context):
    resp = call_gateway(ctx, "list groups", lambda c: c.my_groups())
    if emit(ctx, resp):
        return
    table = Table(title="Groups")
    table.add_column("jid")
    table.add_column("name")
    table.add_column("participants", justify="right")
    for group in resp.results:
        table.add_row(group.jid, group.name or "-", str(len(group.participants)))
    console.console.print(table)


@app.command("privacy")
def my_privacy(ctx: typer.Context):
    resp = call_gateway(ctx, "get privacy settings", lambda c: c.my_privacy())
    if emit(ctx, resp):
        return
    for key, value in vars(resp.results).items():
        console.console.print(f"{key}: {value or '-'}")
