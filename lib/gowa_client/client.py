from __future__ import annotations

import threading
from typing import Any, Iterable
from urllib.parse import quote

from .config_types import ClientConfig
from .errors import ValidationError
from .models import (
    ChatListResponse,
    ChatMessagesResponse,
    ContactListResponse,
    CreateGroupResponse,
    DeviceListResponse,
    GenericResponse,
    GroupInfoResponse,
    GroupListResponse,
    GroupParticipantsResponse,
    LoginResponse,
    LoginWithCodeResponse,
    SendResponse,
    UserAvatarResponse,
    UserCheckResponse,
    UserInfoResponse,
    UserPrivacyResponse,
)
from .transport import Transport

PRESENCE_TYPES = ("available", "unavailable")
CHAT_PRESENCE_ACTIONS = ("start", "stop")
PARTICIPANT_ACTIONS = ("add", "remove", "promote", "demote")

Cancel = threading.Event | None


def _require(value: Any, name: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{name} is required")
    return text


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _segment(value: str) -> str:
    return quote(value, safe="@:+")


def _query(**params: Any) -> dict[str, str]:
    """Drop unset params; booleans become ``true``/``false``."""
    out: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            out[key] = _flag(value)
        elif isinstance(value, int) and value <= 0:
            continue
        else:
            out[key] = str(value)
    return out


class GowaClient:
    def __init__(self, cfg: ClientConfig | None = None, *, transport: Transport | None = None):
        self._t = transport or Transport(cfg or ClientConfig())

    @property
    def transport(self) -> Transport:
        return self._t

    def close(self) -> None:
        self._t.close()

    def __enter__(self) -> "GowaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- app ---
    def login(self, *, cancel: Cancel = None) -> LoginResponse:
        return self._t.get_json("/app/login", model=LoginResponse, cancel=cancel)

    def login_with_code(self, phone: str, *, cancel: Cancel = None) -> LoginWithCodeResponse:
        phone = _require(phone, "phone")
        return self._t.get_json(
            "/app/login-with-code", {"phone": phone}, model=LoginWithCodeResponse, cancel=cancel
        )

    def logout(self, *, cancel: Cancel = None) -> GenericResponse:
        return self._t.get_json("/app/logout", model=GenericResponse, cancel=cancel)

    def reconnect(self, *, cancel: Cancel = None) -> GenericResponse:
        return self._t.get_json("/app/reconnect", model=GenericResponse, cancel=cancel)

    def devices(self, *, cancel: Cancel = None) -> DeviceListResponse:
        return self._t.get_json("/app/devices", model=DeviceListResponse, cancel=cancel)

    # --- user ---
    def user_info(self, phone: str, *, cancel: Cancel = None) -> UserInfoResponse:
        phone = _require(phone, "phone")
        return self._t.get_json("/user/info", {"phone": phone}, model=UserInfoResponse, cancel=cancel)

    def user_avatar(
            self,
            phone: str,
            *,
            is_preview: bool | None = None,
            is_community: bool | None = None,
            cancel: Cancel = None,
    ) -> UserAvatarResponse:
        params = _query(phone=_require(phone, "phone"), is_preview=is_preview, is_community=is_community)
        return self._t.get_json("/user/avatar", params, model=UserAvatarResponse, cancel=cancel)

    def user_check(self, phone: str, *, cancel: Cancel = None) -> UserCheckResponse:
        phone = _require(phone, "phone")
        return self._t.get_json("/user/check", {"phone": phone}, model=UserCheckResponse, cancel=cancel)

    def my_privacy(self, *, cancel: Cancel = None) -> UserPrivacyResponse:
        return self._t.get_json("/user/my/privacy", model=UserPrivacyResponse, cancel=cancel)

    def my_groups(self, *, cancel: Cancel = None) -> GroupListResponse:
        return self._t.get_json("/user/my/groups", model=GroupListResponse, cancel=cancel)

    def my_contacts(self, *, cancel: Cancel = None) -> ContactListResponse:
        return self._t.get_json("/user/my/contacts", model=ContactListResponse, cancel=cancel)

    # --- send ---
    def send_message(
            self,
            phone: str,
            message: str,
            *,
            reply_message_id: str | None = None,
            is_forwarded: bool | None = None,
            duration: int | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        if not str(phone or "").strip() or not str(message or "").strip():
            raise ValidationError("phone and message are required")
        body: dict[str, Any] = {"phone": phone, "message": message}
        if reply_message_id:
            body["reply_message_id"] = reply_message_id
        if is_forwarded is not None:
            body["is_forwarded"] = bool(is_forwarded)
        if duration is not None:
            body["duration"] = int(duration)
        return self._t.post_json("/send/message", body, model=SendResponse, cancel=cancel)

    def send_presence(
            self,
            presence_type: str,
            *,
            is_forwarded: bool | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        if presence_type not in PRESENCE_TYPES:
            raise ValidationError("presence type must be 'available' or 'unavailable'")
        body: dict[str, Any] = {"type": presence_type}
        if is_forwarded is not None:
            body["is_forwarded"] = bool(is_forwarded)
        return self._t.post_json("/send/presence", body, model=SendResponse, cancel=cancel)

    def send_chat_presence(self, phone: str, action: str, *, cancel: Cancel = None) -> SendResponse:
        phone = _require(phone, "phone")
        if action not in CHAT_PRESENCE_ACTIONS:
            raise ValidationError("chat presence action must be 'start' or 'stop'")
        body = {"phone": phone, "action": action}
        return self._t.post_json("/send/chat-presence", body, model=SendResponse, cancel=cancel)

    def _send_media_file(
            self,
            path: str,
            file_field: str,
            phone: str,
            file_path: str,
            fields: dict[str, Any],
            *,
            is_forwarded: bool | None,
            duration: int | None,
            cancel: Cancel,
    ) -> SendResponse:
        if not str(phone or "").strip() or not str(file_path or "").strip():
            raise ValidationError("phone and file_path are required")
        form: dict[str, Any] = {"phone": phone, **fields}
        if is_forwarded is not None:
            form["is_forwarded"] = bool(is_forwarded)
        if duration is not None:
            form["duration"] = int(duration)
        return self._t.post_multipart(path, form, file_field, file_path, model=SendResponse, cancel=cancel)

    def _send_media_url(
            self,
            path: str,
            url_field: str,
            phone: str,
            url: str,
            fields: dict[str, Any],
            *,
            is_forwarded: bool | None,
            duration: int | None,
            cancel: Cancel,
    ) -> SendResponse:
        if not str(phone or "").strip() or not str(url or "").strip():
            raise ValidationError(f"phone and {url_field} are required")
        body: dict[str, Any] = {"phone": phone, **fields, url_field: url}
        if is_forwarded is not None:
            body["is_forwarded"] = bool(is_forwarded)
        if duration is not None:
            body["duration"] = int(duration)
        return self._t.post_json(path, body, model=SendResponse, cancel=cancel)

    def send_image_file(
            self,
            phone: str,
            file_path: str,
            *,
            caption: str = "",
            view_once: bool = False,
            compress: bool = False,
            is_forwarded: bool | None = None,
            duration: int | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        fields = {"caption": caption, "view_once": view_once, "compress": compress}
        return self._send_media_file(
            "/send/image", "image", phone, file_path, fields,
            is_forwarded=is_forwarded, duration=duration, cancel=cancel,
        )

    def send_image_url(
            self,
            phone: str,
            image_url: str,
            *,
            caption: str = "",
            view_once: bool = False,
            compress: bool = False,
            is_forwarded: bool | None = None,
            duration: int | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        fields = {"caption": caption, "view_once": view_once, "compress": compress}
        return self._send_media_url(
            "/send/image", "image_url", phone, image_url, fields,
            is_forwarded=is_forwarded, duration=duration, cancel=cancel,
        )

    def send_audio_file(
            self,
            phone: str,
            file_path: str,
            *,
            is_forwarded: bool | None = None,
            duration: int | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        return self._send_media_file(
            "/send/audio", "audio", phone, file_path, {},
            is_forwarded=is_forwarded, duration=duration, cancel=cancel,
        )

    def send_audio_url(
            self,
            phone: str,
            audio_url: str,
            *,
            is_forwarded: bool | None = None,
            duration: int | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        return self._send_media_url(
            "/send/audio", "audio_url", phone, audio_url, {},
            is_forwarded=is_forwarded, duration=duration, cancel=cancel,
        )

    def send_video_file(
            self,
            phone: str,
            file_path: str,
            *,
            caption: str = "",
            view_once: bool = False,
            compress: bool = False,
            is_forwarded: bool | None = None,
            duration: int | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        fields = {"caption": caption, "view_once": view_once, "compress": compress}
        return self._send_media_file(
            "/send/video", "video", phone, file_path, fields,
            is_forwarded=is_forwarded, duration=duration, cancel=cancel,
        )

    def send_video_url(
            self,
            phone: str,
            video_url: str,
            *,
            caption: str = "",
            view_once: bool = False,
            compress: bool = False,
            is_forwarded: bool | None = None,
            duration: int | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        fields = {"caption": caption, "view_once": view_once, "compress": compress}
        return self._send_media_url(
            "/send/video", "video_url", phone, video_url, fields,
            is_forwarded=is_forwarded, duration=duration, cancel=cancel,
        )

    def send_file(
            self,
            phone: str,
            file_path: str,
            *,
            caption: str = "",
            is_forwarded: bool | None = None,
            duration: int | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        return self._send_media_file(
            "/send/file", "file", phone, file_path, {"caption": caption},
            is_forwarded=is_forwarded, duration=duration, cancel=cancel,
        )

    def send_contact(
            self,
            phone: str,
            contact_name: str,
            contact_phone: str,
            *,
            is_forwarded: bool | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        body: dict[str, Any] = {
            "phone": _require(phone, "phone"),
            "contact_name": _require(contact_name, "contact_name"),
            "contact_phone": _require(contact_phone, "contact_phone"),
        }
        if is_forwarded is not None:
            body["is_forwarded"] = bool(is_forwarded)
        return self._t.post_json("/send/contact", body, model=SendResponse, cancel=cancel)

    def send_link(
            self,
            phone: str,
            link: str,
            *,
            caption: str = "",
            is_forwarded: bool | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        body: dict[str, Any] = {
            "phone": _require(phone, "phone"),
            "link": _require(link, "link"),
            "caption": caption,
        }
        if is_forwarded is not None:
            body["is_forwarded"] = bool(is_forwarded)
        return self._t.post_json("/send/link", body, model=SendResponse, cancel=cancel)

    def send_location(
            self,
            phone: str,
            latitude: str | float,
            longitude: str | float,
            *,
            is_forwarded: bool | None = None,
            cancel: Cancel = None,
    ) -> SendResponse:
        body: dict[str, Any] = {
            "phone": _require(phone, "phone"),
            "latitude": _require(latitude, "latitude"),
            "longitude": _require(longitude, "longitude"),
        }
        if is_forwarded is not None:
            body["is_forwarded"] = bool(is_forwarded)
        return self._t.post_json("/send/location", body, model=SendResponse, cancel=cancel)

    def send_poll(
            self,
            phone: str,
            question: str,
            options: Iterable[str],
            *,
            max_answer: int = 1,
            cancel: Cancel = None,
    ) -> SendResponse:
        opts = [str(o).strip() for o in options or [] if str(o).strip()]
        if len(opts) < 2:
            raise ValidationError("poll needs at least two options")
        if not 1 <= int(max_answer) <= len(opts):
            raise ValidationError(f"max_answer must be between 1 and {len(opts)}")
        body = {
            "phone": _require(phone, "phone"),
            "question": _require(question, "question"),
            "options": opts,
            "max_answer": int(max_answer),
        }
        return self._t.post_json("/send/poll", body, model=SendResponse, cancel=cancel)

    # --- chats ---
    def list_chats(
            self,
            *,
            limit: int = 0,
            offset: int = 0,
            search: str = "",
            has_media: bool | None = None,
            cancel: Cancel = None,
    ) -> ChatListResponse:
        params = _query(limit=limit, offset=offset, search=search, has_media=has_media)
        return self._t.get_json("/chats", params, model=ChatListResponse, cancel=cancel)

    def chat_messages(
            self,
            chat_jid: str,
            *,
            limit: int = 0,
            offset: int = 0,
            start_time: str = "",
            end_time: str = "",
            media_only: bool | None = None,
            is_from_me: bool | None = None,
            search: str = "",
            cancel: Cancel = None,
    ) -> ChatMessagesResponse:
        jid = _require(chat_jid, "chat_jid")
        params = _query(
            limit=limit,
            offset=offset,
            start_time=start_time,
            end_time=end_time,
            media_only=media_only,
            is_from_me=is_from_me,
            search=search,
        )
        return self._t.get_json(
            f"/chat/{_segment(jid)}/messages", params, model=ChatMessagesResponse, cancel=cancel
        )

    def pin_chat(self, chat_jid: str, *, pinned: bool = True, cancel: Cancel = None) -> GenericResponse:
        jid = _require(chat_jid, "chat_jid")
        return self._t.post_json(
            f"/chat/{_segment(jid)}/pin", {"pinned": bool(pinned)}, model=GenericResponse, cancel=cancel
        )

    # --- message actions ---
    def _message_action(
            self,
            message_id: str,
            action: str,
            phone: str,
            extra: dict[str, Any] | None = None,
            *,
            cancel: Cancel,
    ) -> GenericResponse:
        message_id = _require(message_id, "message_id")
        body: dict[str, Any] = {"phone": _require(phone, "phone")}
        if extra:
            body.update(extra)
        return self._t.post_json(
            f"/message/{_segment(message_id)}/{action}", body, model=GenericResponse, cancel=cancel
        )

    def revoke_message(self, message_id: str, phone: str, *, cancel: Cancel = None) -> GenericResponse:
        return self._message_action(message_id, "revoke", phone, cancel=cancel)

    def delete_message(self, message_id: str, phone: str, *, cancel: Cancel = None) -> GenericResponse:
        return self._message_action(message_id, "delete", phone, cancel=cancel)

    def react_message(self, message_id: str, phone: str, emoji: str, *, cancel: Cancel = None) -> GenericResponse:
        emoji = _require(emoji, "emoji")
        return self._message_action(message_id, "reaction", phone, {"emoji": emoji}, cancel=cancel)

    def update_message(self, message_id: str, phone: str, message: str, *, cancel: Cancel = None) -> GenericResponse:
        message = _require(message, "message")
        return self._message_action(message_id, "update", phone, {"message": message}, cancel=cancel)

    def read_message(self, message_id: str, phone: str, *, cancel: Cancel = None) -> GenericResponse:
        return self._message_action(message_id, "read", phone, cancel=cancel)

    def star_message(self, message_id: str, phone: str, *, cancel: Cancel = None) -> GenericResponse:
        return self._message_action(message_id, "star", phone, cancel=cancel)

    def unstar_message(self, message_id: str, phone: str, *, cancel: Cancel = None) -> GenericResponse:
        return self._message_action(message_id, "unstar", phone, cancel=cancel)

    # --- groups ---
    def create_group(
            self,
            title: str,
            participants: Iterable[str] = (),
            *,
            cancel: Cancel = None,
    ) -> CreateGroupResponse:
        body = {
            "title": _require(title, "title"),
            "participants": [p for p in (str(x).strip() for x in participants) if p],
        }
        return self._t.post_json("/group", body, model=CreateGroupResponse, cancel=cancel)

    def join_group_with_link(self, link: str, *, cancel: Cancel = None) -> GenericResponse:
        body = {"link": _require(link, "link")}
        return self._t.post_json("/group/join-with-link", body, model=GenericResponse, cancel=cancel)

    def leave_group(self, group_id: str, *, cancel: Cancel = None) -> GenericResponse:
        body = {"group_id": _require(group_id, "group_id")}
        return self._t.post_json("/group/leave", body, model=GenericResponse, cancel=cancel)

    def group_info(self, group_id: str, *, cancel: Cancel = None) -> GroupInfoResponse:
        group_id = _require(group_id, "group_id")
        return self._t.get_json("/group/info", {"group_id": group_id}, model=GroupInfoResponse, cancel=cancel)

    def group_participants(
            self,
            group_id: str,
            participants: Iterable[str],
            *,
            action: str = "add",
            cancel: Cancel = None,
    ) -> GroupParticipantsResponse:
        if action not in PARTICIPANT_ACTIONS:
            raise ValidationError(f"action must be one of {', '.join(PARTICIPANT_ACTIONS)}")
        members = [p for p in (str(x).strip() for x in participants or []) if p]
        if not members:
            raise ValidationError("participants are required")
        body = {"group_id": _require(group_id, "group_id"), "participants": members}
        path = "/group/participants" if action == "add" else f"/group/participants/{action}"
        return self._t.post_json(path, body, model=GroupParticipantsResponse, cancel=cancel)
