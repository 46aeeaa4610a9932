from __future__ import annotations

import typer
from rich.table import Table

from .. import console
from ..http import call_gateway, emit

app = typer.Typer(help="Pair, log out and reconnect the gateway session.")


@app.command("login")
def login(ctx: typer.Context):
    resp = call_gateway(ctx, "start QR login", lambda c: c.login())
    if emit(ctx, resp):
        return
    console.ok(resp.message or "Scan the QR code with WhatsApp.")
    console.console.print(f"  qr_link: {resp.results.qr_link or '-'}")
    console.console.print(f"  qr_duration: {resp.results.qr_duration}s")


@app.command("login-code")
def login_code(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Phone number to pair, digits only."),
):
    resp = call_gateway(ctx, "request pairing code", lambda c: c.login_with_code(phone))
    if emit(ctx, resp):
        return
    console.ok(f"Pairing code: {resp.results.pair_code or '-'}")


@app.command("logout")
def logout(ctx: typer.Context):
    resp = call_gateway(ctx, "log out", lambda c: c.logout())
    if not emit(ctx, resp):
        console.ok(resp.message or "Logged out.")


@app.command("reconnect")
def reconnect(ctx: typer.Context):
    resp = call_gateway(ctx, "reconnect", lambda c: c.reconnect())
    if not emit(ctx, resp):
        console.ok(resp.message or "Reconnected.")


@app.command("devices")
def devices(ctx: typer.Context):
    resp = call_gateway(ctx, "list devices", lambda c: c.devices())
    if emit(ctx, resp):
        return
    table = Table(title="Devices")
    table.add_column("name")
    table.add_column("device")
    for d in resp.results:
        table.add_row(d.name or "-", d.device or "-")
    console.console.print(table)
