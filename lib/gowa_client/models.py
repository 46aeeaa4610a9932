from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .errors import DecodeError

T = TypeVar("T")


def _obj(value: Any, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(f"{what}: expected object, got {type(value).__name__}")
    return value


def _items(value: Any, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(f"{what}: expected list, got {type(value).__name__}")
    return value


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise DecodeError(f"{key}: expected string, got {type(value).__name__}")
    return str(value)


def _int(data: dict, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool):
        raise DecodeError(f"{key}: expected integer, got bool")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"{key}: expected integer, got {value!r}") from exc


def _bool(data: dict, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(f"{key}: expected boolean, got {value!r}")
    return value


def _envelope(data: Any) -> tuple[str, str, Any]:
    body = _obj(data, "response")
    if not body:
        raise DecodeError("response: empty envelope")
    return _str(body, "code"), _str(body, "message"), body.get("results")


def _data_list(results: Any, parse: Callable[[dict], T]) -> list[T]:
    """Results shaped either as ``{"data": [...]}`` or a bare list."""
    if isinstance(results, list):
        rows = results
    else:
        rows = _items(_obj(results, "results").get("data"), "results.data")
    return [parse(_obj(row, "results.data[]")) for row in rows]


@dataclass
class GenericResponse:
    code: str = ""
    message: str = ""
    results: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> "GenericResponse":
        code, message, results = _envelope(data)
        return cls(code=code, message=message, results=results)


@dataclass
class LoginResult:
    qr_duration: int = 0
    qr_link: str = ""


@dataclass
class LoginResponse:
    code: str = ""
    message: str = ""
    results: LoginResult = field(default_factory=LoginResult)

    @classmethod
    def from_dict(cls, data: Any) -> "LoginResponse":
        code, message, results = _envelope(data)
        r = _obj(results, "results")
        return cls(code, message, LoginResult(qr_duration=_int(r, "qr_duration"), qr_link=_str(r, "qr_link")))


@dataclass
class LoginWithCodeResult:
    pair_code: str = ""


@dataclass
class LoginWithCodeResponse:
    code: str = ""
    message: str = ""
    results: LoginWithCodeResult = field(default_factory=LoginWithCodeResult)

    @classmethod
    def from_dict(cls, data: Any) -> "LoginWithCodeResponse":
        code, message, results = _envelope(data)
        r = _obj(results, "results")
        return cls(code, message, LoginWithCodeResult(pair_code=_str(r, "pair_code")))


@dataclass
class SendResult:
    message_id: str = ""
    status: str = ""


@dataclass
class SendResponse:
    code: str = ""
    message: str = ""
    results: SendResult = field(default_factory=SendResult)

    @classmethod
    def from_dict(cls, data: Any) -> "SendResponse":
        code, message, results = _envelope(data)
        r = _obj(results, "results")
        return cls(code, message, SendResult(message_id=_str(r, "message_id"), status=_str(r, "status")))


@dataclass
class Device:
    name: str = ""
    device: str = ""


@dataclass
class DeviceListResponse:
    code: str = ""
    message: str = ""
    results: list[Device] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "DeviceListResponse":
        code, message, results = _envelope(data)
        devices = [
            Device(name=_str(row, "name"), device=_str(row, "device"))
            for row in (_obj(x, "results[]") for x in _items(results, "results"))
        ]
        return cls(code, message, devices)


@dataclass
class UserInfoResult:
    verified_name: str = ""
    status: str = ""
    picture_id: str = ""
    devices: list[dict] = field(default_factory=list)


@dataclass
class UserInfoResponse:
    code: str = ""
    message: str = ""
    results: UserInfoResult = field(default_factory=UserInfoResult)

    @classmethod
    def from_dict(cls, data: Any) -> "UserInfoResponse":
        code, message, results = _envelope(data)
        r = _obj(results, "results")
        info = UserInfoResult(
            verified_name=_str(r, "verified_name"),
            status=_str(r, "status"),
            picture_id=_str(r, "picture_id"),
            devices=[_obj(d, "results.devices[]") for d in _items(r.get("devices"), "results.devices")],
        )
        return cls(code, message, info)


@dataclass
class UserAvatarResult:
    url: str = ""
    id: str = ""
    type: str = ""


@dataclass
class UserAvatarResponse:
    code: str = ""
    message: str = ""
    results: UserAvatarResult = field(default_factory=UserAvatarResult)

    @classmethod
    def from_dict(cls, data: Any) -> "UserAvatarResponse":
        code, message, results = _envelope(data)
        r = _obj(results, "results")
        return cls(code, message, UserAvatarResult(url=_str(r, "url"), id=_str(r, "id"), type=_str(r, "type")))


@dataclass
class UserCheckResult:
    is_on_whatsapp: bool = False


@dataclass
class UserCheckResponse:
    code: str = ""
    message: str = ""
    results: UserCheckResult = field(default_factory=UserCheckResult)

    @classmethod
    def from_dict(cls, data: Any) -> "UserCheckResponse":
        code, message, results = _envelope(data)
        r = _obj(results, "results")
        return cls(code, message, UserCheckResult(is_on_whatsapp=_bool(r, "is_on_whatsapp")))


@dataclass
class PrivacySettings:
    group_add: str = ""
    last_seen: str = ""
    status: str = ""
    profile: str = ""
    read_receipts: str = ""


@dataclass
class UserPrivacyResponse:
    code: str = ""
    message: str = ""
    results: PrivacySettings = field(default_factory=PrivacySettings)

    @classmethod
    def from_dict(cls, data: Any) -> "UserPrivacyResponse":
        code, message, results = _envelope(data)
        r = _obj(results, "results")
        settings = PrivacySettings(
            group_add=_str(r, "group_add"),
            last_seen=_str(r, "last_seen"),
            status=_str(r, "status"),
            profile=_str(r, "profile"),
            read_receipts=_str(r, "read_receipts"),
        )
        return cls(code, message, settings)


@dataclass
class Contact:
    jid: str = ""
    name: str = ""


@dataclass
class ContactListResponse:
    code: str = ""
    message: str = ""
    results: list[Contact] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ContactListResponse":
        code, message, results = _envelope(data)
        rows = _data_list(results, lambda r: Contact(jid=_str(r, "jid"), name=_str(r, "name")))
        return cls(code, message, rows)


@dataclass
class Group:
    jid: str = ""
    name: str = ""
    owner_jid: str = ""
    participants: list[dict] = field(default_factory=list)


def _group(r: dict) -> Group:
    return Group(
        jid=_str(r, "JID") or _str(r, "jid"),
        name=_str(r, "Name") or _str(r, "name"),
        owner_jid=_str(r, "OwnerJID") or _str(r, "owner_jid"),
        participants=[
            _obj(p, "participants[]")
            for p in _items(r.get("Participants", r.get("participants")), "participants")
        ],
    )


@dataclass
class GroupListResponse:
    code: str = ""
    message: str = ""
    results: list[Group] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "GroupListResponse":
        code, message, results = _envelope(data)
        return cls(code, message, _data_list(results, _group))


@dataclass
class GroupInfoResponse:
    code: str = ""
    message: str = ""
    results: Group = field(default_factory=Group)

    @classmethod
    def from_dict(cls, data: Any) -> "GroupInfoResponse":
        code, message, results = _envelope(data)
        return cls(code, message, _group(_obj(results, "results")))


@dataclass
class CreateGroupResult:
    group_id: str = ""


@dataclass
class CreateGroupResponse:
    code: str = ""
    message: str = ""
    results: CreateGroupResult = field(default_factory=CreateGroupResult)

    @classmethod
    def from_dict(cls, data: Any) -> "CreateGroupResponse":
        code, message, results = _envelope(data)
        r = _obj(results, "results")
        return cls(code, message, CreateGroupResult(group_id=_str(r, "group_id")))


@dataclass
class ParticipantStatus:
    participant: str = ""
    status: str = ""
    message: str = ""


@dataclass
class GroupParticipantsResponse:
    code: str = ""
    message: str = ""
    results: list[ParticipantStatus] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "GroupParticipantsResponse":
        code, message, results = _envelope(data)
        rows = [
            ParticipantStatus(
                participant=_str(row, "participant"),
                status=_str(row, "status"),
                message=_str(row, "message"),
            )
            for row in (_obj(x, "results[]") for x in _items(results, "results"))
        ]
        return cls(code, message, rows)


@dataclass
class Chat:
    jid: str = ""
    name: str = ""
    last_message_time: str = ""
    ephemeral_expiration: int = 0


@dataclass
class ChatListResponse:
    code: str = ""
    message: str = ""
    results: list[Chat] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ChatListResponse":
        code, message, results = _envelope(data)
        rows = _data_list(
            results,
            lambda r: Chat(
                jid=_str(r, "jid"),
                name=_str(r, "name"),
                last_message_time=_str(r, "last_message_time"),
                ephemeral_expiration=_int(r, "ephemeral_expiration"),
            ),
        )
        return cls(code, message, rows)


@dataclass
class ChatMessage:
    id: str = ""
    chat_jid: str = ""
    sender_jid: str = ""
    content: str = ""
    timestamp: str = ""
    is_from_me: bool = False
    media_type: str | None = None


def _chat_message(r: dict) -> ChatMessage:
    media_type = r.get("media_type")
    return ChatMessage(
        id=_str(r, "id"),
        chat_jid=_str(r, "chat_jid"),
        sender_jid=_str(r, "sender_jid"),
        content=_str(r, "content"),
        timestamp=_str(r, "timestamp"),
        is_from_me=_bool(r, "is_from_me"),
        media_type=str(media_type) if media_type is not None else None,
    )


@dataclass
class ChatMessagesResponse:
    code: str = ""
    message: str = ""
    results: list[ChatMessage] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ChatMessagesResponse":
        code, message, results = _envelope(data)
        return cls(code, message, _data_list(results, _chat_message))
