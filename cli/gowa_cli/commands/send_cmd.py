from __future__ import annotations

from pathlib import Path

import typer
from gowa_client.models import SendResponse

from .. import console
from ..http import call_gateway, emit

app = typer.Typer(help="Send messages, media and presence updates.")


def _report(ctx: typer.Context, resp: SendResponse) -> None:
    if emit(ctx, resp):
        return
    r = resp.results
    console.ok(f"{resp.message or resp.code} message_id={r.message_id or '-'} status={r.status or '-'}")


def _send(ctx: typer.Context, action: str, call) -> None:
    _report(ctx, call_gateway(ctx, action, call))


def _media_source(path: Path | None, url: str | None) -> tuple[str | None, str | None]:
    if path is not None and url:
        console.err("Give either a local file or --url, not both.")
        raise typer.Exit(code=2)
    if path is None and not url:
        console.err("A local file or --url is required.")
        raise typer.Exit(code=2)
    return (str(path) if path is not None else None), url


@app.command("text")
def send_text(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Recipient phone or JID."),
        message: str = typer.Argument(..., help="Message text."),
        reply_to: str | None = typer.Option(None, "--reply-to", help="Message id to reply to."),
        forwarded: bool = typer.Option(False, "--forwarded", help="Mark as forwarded."),
        duration: int | None = typer.Option(None, "--duration", help="Disappearing duration in seconds."),
):
    _send(
        ctx,
        "send message",
        lambda c: c.send_message(
            phone,
            message,
            reply_message_id=reply_to,
            is_forwarded=forwarded or None,
            duration=duration,
        ),
    )


@app.command("image")
def send_image(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Recipient phone or JID."),
        path: Path | None = typer.Argument(None, help="Local image file."),
        url: str | None = typer.Option(None, "--url", help="Send an image by URL instead of uploading."),
        caption: str = typer.Option("", "--caption"),
        view_once: bool = typer.Option(False, "--view-once"),
        compress: bool = typer.Option(False, "--compress"),
        duration: int | None = typer.Option(None, "--duration", help="Disappearing duration in seconds."),
):
    file_path, image_url = _media_source(path, url)
    opts = dict(caption=caption, view_once=view_once, compress=compress, duration=duration)
    if file_path:
        _send(ctx, "send image", lambda c: c.send_image_file(phone, file_path, **opts))
    else:
        _send(ctx, "send image", lambda c: c.send_image_url(phone, image_url, **opts))


@app.command("audio")
def send_audio(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Recipient phone or JID."),
        path: Path | None = typer.Argument(None, help="Local audio file."),
        url: str | None = typer.Option(None, "--url", help="Send audio by URL instead of uploading."),
):
    file_path, audio_url = _media_source(path, url)
    if file_path:
        _send(ctx, "send audio", lambda c: c.send_audio_file(phone, file_path))
    else:
        _send(ctx, "send audio", lambda c: c.send_audio_url(phone, audio_url))


@app.command("video")
def send_video(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Recipient phone or JID."),
        path: Path | None = typer.Argument(None, help="Local video file."),
        url: str | None = typer.Option(None, "--url", help="Send a video by URL instead of uploading."),
        caption: str = typer.Option("", "--caption"),
        view_once: bool = typer.Option(False, "--view-once"),
        compress: bool = typer.Option(False, "--compress"),
):
    file_path, video_url = _media_source(path, url)
    opts = dict(caption=caption, view_once=view_once, compress=compress)
    if file_path:
        _send(ctx, "send video", lambda c: c.send_video_file(phone, file_path, **opts))
    else:
        _send(ctx, "send video", lambda c: c.send_video_url(phone, video_url, **opts))


@app.command("file")
def send_file(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Recipient phone or JID."),
        path: Path = typer.Argument(..., help="Local file to upload."),
        caption: str = typer.Option("", "--caption"),
):
    _send(ctx, "send file", lambda c: c.send_file(phone, str(path), caption=caption))


@app.command("contact")
def send_contact(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Recipient phone or JID."),
        name: str = typer.Option(..., "--name", help="Contact display name."),
        contact_phone: str = typer.Option(..., "--phone", help="Contact phone number."),
):
    _send(ctx, "send contact", lambda c: c.send_contact(phone, name, contact_phone))


@app.command("link")
def send_link(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Recipient phone or JID."),
        link: str = typer.Argument(..., help="URL to share."),
        caption: str = typer.Option("", "--caption"),
):
    _send(ctx, "send link", lambda c: c.send_link(phone, link, caption=caption))


@app.command("location")
def send_location(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Recipient phone or JID."),
        latitude: str = typer.Argument(..., help="Latitude; put -- before negative values."),
        longitude: str = typer.Argument(..., help="Longitude."),
):
    _send(ctx, "send location", lambda c: c.send_location(phone, latitude, longitude))


@app.command("poll")
def send_poll(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Recipient phone or JID."),
        question: str = typer.Argument(..., help="Poll question."),
        options: list[str] = typer.Option(..., "--option", "-o", help="Poll option (repeat)."),
        max_answer: int = typer.Option(1, "--max-answer", help="How many options a voter may pick."),
):
    _send(ctx, "send poll", lambda c: c.send_poll(phone, question, options, max_answer=max_answer))


@app.command("presence")
def send_presence(
        ctx: typer.Context,
        presence: str = typer.Argument(..., help="available or unavailable"),
):
    _send(ctx, "send presence", lambda c: c.send_presence(presence))


@app.command("chat-presence")
def send_chat_presence(
        ctx: typer.Context,
        phone: str = typer.Argument(..., help="Chat phone or JID."),
        action: str = typer.Argument(..., help="start or stop (typing indicator)."),
):
    _send(ctx, "send chat presence", lambda c: c.send_chat_presence(phone, action))
