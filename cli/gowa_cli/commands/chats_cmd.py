from __future__ import annotations

import typer
from rich.table import Table

from .. import console
from ..http import call_gateway, emit

app = typer.Typer(help="Browse chats and their messages.")


@app.command("list")
def list_chats(
        ctx: typer.Context,
        limit: int = typer.Option(25, "--limit", help="Max chats to return."),
        offset: int = typer.Option(0, "--offset", help="Offset for listing."),
        search: str = typer.Option("", "--search", help="Filter by name."),
        has_media: bool | None = typer.Option(None, "--has-media/--no-media", help="Only chats with/without media."),
):
    resp = call_gateway(
        ctx,
        "list chats",
        lambda c: c.list_chats(limit=limit, offset=offset, search=search, has_media=has_media),
    )
    if emit(ctx, resp):
        return
    if not resp.results:
        console.info("No chats found.")
        return
    table = Table(title="Chats")
    table.add_column("jid")
    table.add_column("name")
    table.add_column("last message")
    for chat in resp.results:
        table.add_row(chat.jid, chat.name or "-", chat.last_message_time or "-")
    console.console.print(table)


@app.command("messages")
def chat_messages(
        ctx: typer.Context,
        jid: str = typer.Argument(..., help="Chat JID."),
        limit: int = typer.Option(25, "--limit"),
        offset: int = typer.Option(0, "--offset"),
        start_time: str = typer.Option("", "--since", help="RFC3339 lower bound."),
        end_time: str = typer.Option("", "--until", help="RFC3339 upper bound."),
        media_only: bool | None = typer.Option(None, "--media-only/--no-media-only"),
        from_me: bool | None = typer.Option(None, "--from-me/--not-from-me"),
        search: str = typer.Option("", "--search"),
):
    resp = call_gateway(
        ctx,
        "list messages",
        lambda c: c.chat_messages(
            jid,
            limit=limit,
            offset=offset,
            start_time=start_time,
            end_time=end_time,
            media_only=media_only,
            is_from_me=from_me,
            search=search,
        ),
    )
    if emit(ctx, resp):
        return
    table = Table(title=jid)
    table.add_column("time")
    table.add_column("from")
    table.add_column("content")
    table.add_column("media")
    for m in resp.results:
        sender = "me" if m.is_from_me else (m.sender_jid or "-")
        table.add_row(m.timestamp or "-", sender, m.content or "", m.media_type or "")
    console.console.print(table)


@app.command("pin")
def pin_chat(
        ctx: typer.Context,
        jid: str = typer.Argument(..., help="Chat JID."),
        unpin: bool = typer.Option(False, "--unpin", help="Unpin instead."),
):
    resp = call_gateway(ctx, "pin chat", lambda c: c.pin_chat(jid, pinned=not unpin))
    if not emit(ctx, resp):
        console.ok(resp.message or ("Unpinned." if unpin else "Pinned."))
