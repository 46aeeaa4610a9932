from __future__ import annotations

import httpx
import pytest

from gowa_client import ClientConfig, DecodeError, GowaClient, ValidationError
from gowa_client.models import ChatListResponse, LoginResponse



def test_send_message_decodes_result(client, gateway) -> None:
    out = client.send_message("5583@s.whatsapp.net", "hello", reply_message_id="r1", is_forwarded=True)
    assert out.results.message_id == "abc"
    assert out.results.status == "sent"
    assert gateway.last.url.path == "/api/send/message"
    assert gateway.last_json() == {
        "phone": "5583@s.whatsapp.net",
        "message": "hello",
        "reply_message_id": "r1",
        "is_forwarded": True,
    }


@pytest.mark.parametrize("phone, message", [("", "hi"), ("  ", "hi"), ("5583", ""), ("5583", "   ")])
def test_send_message_validates_before_any_request(client, gateway, phone, message) -> None:
    with pytest.raises(ValidationError):
        client.send_message(phone, message)
    assert gateway.requests == []


def test_list_chats_has_media_flag(client, gateway) -> None:
    gateway.default = {"code": "SUCCESS", "message": "ok", "results": {"data": []}}
    client.list_chats(has_media=True)
    assert gateway.last.url.params["has_media"] == "true"
    assert "has_media=true" in str(gateway.last.url)

    client.list_chats(limit=10, search="ana")
    params = gateway.last.url.params
    assert "has_media" not in params
    assert params["limit"] == "10"
    assert params["search"] == "ana"
    assert "offset" not in params


def test_list_chats_decodes_rows(client, gateway) -> None:
    gateway.default = {
        "code": "SUCCESS",
        "message": "ok",
        "results": {
            "data": [
                {"jid": "1@s.whatsapp.net", "name": "Ana", "last_message_time": "2024-01-01T00:00:00Z",
                 "ephemeral_expiration": 86400},
            ]
        },
    }
    out = client.list_chats()
    assert isinstance(out, ChatListResponse)
    assert out.results[0].name == "Ana"
    assert out.results[0].ephemeral_expiration == 86400


def test_chat_messages_escapes_jid_and_sets_filters(client, gateway) -> None:
    gateway.default = {
        "code": "SUCCESS",
        "message": "ok",
        "results": {"data": [{"id": "m1", "content": "oi", "is_from_me": False, "media_type": None}]},
    }
    out = client.chat_messages("12/34@g.us", media_only=False, is_from_me=True, limit=5)
    raw_path = gateway.last.url.raw_path.split(b"?")[0]
    assert raw_path == b"/api/chat/12%2F34@g.us/messages"
    params = gateway.last.url.params
    assert params["media_only"] == "false"
    assert params["is_from_me"] == "true"
    assert params["limit"] == "5"
    assert out.results[0].id == "m1"
    assert out.results[0].media_type is None


def test_chat_messages_requires_jid(client, gateway) -> None:
    with pytest.raises(ValidationError):
        client.chat_messages("")
    assert gateway.requests == []


def test_login_decodes_qr_payload(client, gateway) -> None:
    gateway.default = {
        "code": "SUCCESS",
        "message": "ok",
        "results": {"qr_duration": 30, "qr_link": "http://gw/qr.png"},
    }
    out = client.login()
    assert isinstance(out, LoginResponse)
    assert out.results.qr_duration == 30
    assert out.results.qr_link == "http://gw/qr.png"
    assert gateway.last.method == "GET"
    assert gateway.last.url.path == "/api/app/login"


def test_login_with_code_requires_phone(client, gateway) -> None:
    with pytest.raises(ValidationError):
        client.login_with_code(" ")
    gateway.default = {"code": "SUCCESS", "message": "ok", "results": {"pair_code": "ABCD-1234"}}
    assert client.login_with_code("5583").results.pair_code == "ABCD-1234"
    assert gateway.last.url.params["phone"] == "5583"


@pytest.mark.parametrize("method, path", [("logout", "/api/app/logout"), ("reconnect", "/api/app/reconnect")])
def test_session_calls(client, gateway, method, path) -> None:
    gateway.default = {"code": "SUCCESS", "message": "done", "results": None}
    out = getattr(client, method)()
    assert out.message == "done"
    assert gateway.last.url.path == path


def test_user_info_shape_mismatch_is_decode_error(client, gateway) -> None:
    gateway.default = {"code": "SUCCESS", "message": "ok", "results": ["unexpected"]}
    with pytest.raises(DecodeError):
        client.user_info("5583")


def test_user_check(client, gateway) -> None:
    gateway.default = {"code": "SUCCESS", "message": "ok", "results": {"is_on_whatsapp": True}}
    assert client.user_check("5583").results.is_on_whatsapp is True
    assert gateway.last.url.path == "/api/user/check"


def test_send_presence_validates_type(client, gateway) -> None:
    with pytest.raises(ValidationError):
        client.send_presence("busy")
    client.send_presence("available")
    assert gateway.last_json() == {"type": "available"}


def test_send_chat_presence(client, gateway) -> None:
    with pytest.raises(ValidationError):
        client.send_chat_presence("5583", "typing")
    client.send_chat_presence("5583", "start")
    assert gateway.last.url.path == "/api/send/chat-presence"
    assert gateway.last_json() == {"phone": "5583", "action": "start"}


def test_send_image_file_uses_multipart(client, gateway, tmp_path, parse_form) -> None:
    img = tmp_path / "photo.jpg"
    img.write_bytes(b"\xff\xd8\xff" + b"\x01" * 2048)
    out = client.send_image_file("5583", str(img), caption="look", compress=True, duration=3600)
    assert out.results.message_id == "abc"
    parts = parse_form(gateway.last.headers["Content-Type"], gateway.last.content)
    assert parts["phone"] == (None, b"5583")
    assert parts["caption"] == (None, b"look")
    assert parts["view_once"] == (None, b"false")
    assert parts["compress"] == (None, b"true")
    assert parts["duration"] == (None, b"3600")
    assert parts["image"] == ("photo.jpg", img.read_bytes())


def test_send_image_url_uses_json(client, gateway) -> None:
    client.send_image_url("5583", "https://cdn/x.png", caption="c", view_once=True)
    assert gateway.last.headers["Content-Type"] == "application/json"
    assert gateway.last_json() == {
        "phone": "5583",
        "caption": "c",
        "view_once": True,
        "compress": False,
        "image_url": "https://cdn/x.png",
    }


@pytest.mark.parametrize(
    "method, path, field",
    [
        ("send_audio_file", "/api/send/audio", "audio"),
        ("send_video_file", "/api/send/video", "video"),
        ("send_file", "/api/send/file", "file"),
    ],
)
def test_media_file_endpoints(client, gateway, tmp_path, parse_form, method, path, field) -> None:
    media = tmp_path / "media.dat"
    media.write_bytes(b"payload")
    getattr(client, method)("5583", str(media), is_forwarded=False)
    assert gateway.last.url.path == path
    parts = parse_form(gateway.last.headers["Content-Type"], gateway.last.content)
    assert parts[field] == ("media.dat", b"payload")
    assert parts["is_forwarded"] == (None, b"false")


def test_media_file_requires_path(client, gateway) -> None:
    with pytest.raises(ValidationError):
        client.send_video_file("5583", "")
    assert gateway.requests == []


@pytest.mark.parametrize(
    "method, path, url_field",
    [
        ("send_audio_url", "/api/send/audio", "audio_url"),
        ("send_video_url", "/api/send/video", "video_url"),
    ],
)
def test_media_url_endpoints(client, gateway, method, path, url_field) -> None:
    getattr(client, method)("5583", "https://cdn/m")
    assert gateway.last.url.path == path
    assert gateway.last_json()[url_field] == "https://cdn/m"


def test_send_contact_link_location(client, gateway) -> None:
    client.send_contact("5583", "Ana", "5511")
    assert gateway.last_json() == {"phone": "5583", "contact_name": "Ana", "contact_phone": "5511"}
    client.send_link("5583", "https://example.com", caption="see")
    assert gateway.last_json() == {"phone": "5583", "link": "https://example.com", "caption": "see"}
    client.send_location("5583", "-23.55052", "-46.633308")
    assert gateway.last.url.path == "/api/send/location"
    assert gateway.last_json() == {"phone": "5583", "latitude": "-23.55052", "longitude": "-46.633308"}


def test_send_location_accepts_zero_coordinates(client, gateway) -> None:
    client.send_location("5583@s.whatsapp.net", 0.0, 0)
    assert gateway.last_json() == {"phone": "5583@s.whatsapp.net", "latitude": "0.0", "longitude": "0"}


def test_send_location_rejects_missing_coordinate(client, gateway) -> None:
    with pytest.raises(ValidationError):
        client.send_location("5583", None, "-46.6")
    assert gateway.requests == []


def test_send_poll_validates_options(client, gateway) -> None:
    with pytest.raises(ValidationError):
        client.send_poll("5583", "Lunch?", ["pizza"])
    with pytest.raises(ValidationError):
        client.send_poll("5583", "Lunch?", ["pizza", "sushi"], max_answer=3)
    assert gateway.requests == []
    client.send_poll("5583", "Lunch?", ["pizza", " sushi ", ""], max_answer=2)
    assert gateway.last_json() == {
        "phone": "5583",
        "question": "Lunch?",
        "options": ["pizza", "sushi"],
        "max_answer": 2,
    }


@pytest.mark.parametrize(
    "method, action, extra",
    [
        ("revoke_message", "revoke", {}),
        ("delete_message", "delete", {}),
        ("read_message", "read", {}),
        ("star_message", "star", {}),
        ("unstar_message", "unstar", {}),
        ("react_message", "reaction", {"emoji": "👍"}),
        ("update_message", "update", {"message": "edited"}),
    ],
)
def test_message_actions(client, gateway, method, action, extra) -> None:
    gateway.default = {"code": "SUCCESS", "message": "ok", "results": {}}
    getattr(client, method)("3EB0/ABC", "5583", *extra.values())
    raw_path = gateway.last.url.raw_path
    assert raw_path == f"/api/message/3EB0%2FABC/{action}".encode("ascii")
    assert gateway.last_json() == {"phone": "5583", **extra}


def test_message_action_requires_id_and_phone(client, gateway) -> None:
    with pytest.raises(ValidationError):
        client.star_message("", "5583")
    with pytest.raises(ValidationError):
        client.star_message("id", "")
    with pytest.raises(ValidationError):
        client.react_message("id", "5583", "")
    assert gateway.requests == []


def test_pin_chat(client, gateway) -> None:
    gateway.default = {"code": "SUCCESS", "message": "ok", "results": None}
    client.pin_chat("1@s.whatsapp.net", pinned=False)
    assert gateway.last.url.path == "/api/chat/1@s.whatsapp.net/pin"
    assert gateway.last_json() == {"pinned": False}


def test_groups(client, gateway) -> None:
    gateway.default = {"code": "SUCCESS", "message": "ok", "results": {"group_id": "123@g.us"}}
    assert client.create_group("Team", ["5583", " "]).results.group_id == "123@g.us"
    assert gateway.last_json() == {"title": "Team", "participants": ["5583"]}

    gateway.default = {
        "code": "SUCCESS",
        "message": "ok",
        "results": [{"participant": "5583@s.whatsapp.net", "status": "success", "message": ""}],
    }
    out = client.group_participants("123@g.us", ["5583"], action="remove")
    assert gateway.last.url.path == "/api/group/participants/remove"
    assert out.results[0].status == "success"
    client.group_participants("123@g.us", ["5583"])
    assert gateway.last.url.path == "/api/group/participants"
    with pytest.raises(ValidationError):
        client.group_participants("123@g.us", ["5583"], action="ban")


def test_my_contacts_and_groups(client, gateway) -> None:
    gateway.default = {"code": "SUCCESS", "message": "ok", "results": {"data": [{"jid": "1@s", "name": "Ana"}]}}
    assert client.my_contacts().results[0].name == "Ana"
    gateway.default = {
        "code": "SUCCESS",
        "message": "ok",
        "results": {"data": [{"JID": "9@g.us", "Name": "Team", "Participants": [{"JID": "1@s"}]}]},
    }
    groups = client.my_groups().results
    assert groups[0].jid == "9@g.us"
    assert groups[0].participants == [{"JID": "1@s"}]


def test_client_context_manager_closes_transport() -> None:
    calls: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"code": "SUCCESS", "message": "ok", "results": None})

    with GowaClient(ClientConfig(base_url="http://gw.test", transport=httpx.MockTransport(_handler))) as c:
        c.reconnect()
    assert len(calls) == 1
    assert c.transport._client.is_closed
