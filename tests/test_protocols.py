import pytest
from pydantic import ValidationError

from anonychat.transport.protocols import OutMedia, OutText, parse_inbound


def test_parse_inbound_camel_case():
    msg = parse_inbound({"senderId": "628111@c.us", "text": " !Chat now ", "hasMedia": False})
    assert msg.sender_id == "628111@c.us"
    assert msg.has_media is False
    assert msg.command == "!chat"
    assert msg.lower == "!chat now"


def test_parse_inbound_snake_case_media():
    msg = parse_inbound(
        {"sender_id": "628222@c.us", "text": "", "has_media": True, "media_kind": "image", "media": "aGVsbG8="}
    )
    assert msg.has_media is True
    assert msg.media_kind == "image"
    assert msg.command == ""


def test_parse_inbound_requires_sender():
    with pytest.raises(ValidationError):
        parse_inbound({"text": "halo"})

    with pytest.raises(ValidationError):
        parse_inbound({"senderId": "", "text": "halo"})


def test_outgoing_defaults():
    t = OutText(to="a", text="hi")
    assert t.type == "text"
    assert t.delay_ms == 0

    m = OutMedia(to="b", media="x")
    assert m.type == "media"
    assert m.options == {}
