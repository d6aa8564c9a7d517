import pytest
from pydantic import ValidationError

from educanvas.protocol import (
    ChatDeleteMessage,
    JoinMessage,
    SignalMessage,
    StrokeMessage,
    parse_client_message,
)


def test_parse_join_with_optional_secret():
    message = parse_client_message({"type": "join", "name": "Alice"})

    assert isinstance(message, JoinMessage)
    assert message.secret is None


def test_parse_chat_delete():
    message = parse_client_message({"type": "chat_delete", "message_id": "1700000000000"})

    assert isinstance(message, ChatDeleteMessage)


def test_stroke_mode_is_optional_and_rejects_unknown():
    stroke = parse_client_message(
        {"type": "stroke", "from_x": 1, "from_y": 2, "to_x": 3, "to_y": 4, "color": "#000", "width": 2}
    )
    assert isinstance(stroke, StrokeMessage)
    assert stroke.mode is None
    assert "mode" not in stroke.relay_fields()

    with pytest.raises(ValidationError):
        parse_client_message(
            {"type": "stroke", "from_x": 1, "from_y": 2, "to_x": 3, "to_y": 4,
             "color": "#000", "width": 2, "mode": "smudge"}
        )


def test_signal_payload_accepts_any_shape():
    message = parse_client_message({"type": "signal", "to": "b", "kind": "candidate", "payload": [1, "x"]})

    assert isinstance(message, SignalMessage)
    assert message.payload == [1, "x"]


def test_unknown_type_rejected():
    with pytest.raises(ValueError):
        parse_client_message({"type": "draw_data"})


def test_non_object_rejected():
    with pytest.raises(ValueError):
        parse_client_message(["join"])


def test_empty_name_rejected():
    with pytest.raises(ValidationError):
        parse_client_message({"type": "join", "name": ""})


def test_stroke_keeps_numbers_and_extra_fields_as_sent():
    raw = {"type": "stroke", "from_x": 1, "from_y": 2.5, "to_x": 3, "to_y": 4,
           "color": "#000", "width": 2, "mode": "erase", "stroke_id": "s-1", "pressure": 0.5}

    stroke = parse_client_message(raw)

    fields = stroke.relay_fields()
    assert fields == {k: v for k, v in raw.items() if k != "type"}
    assert type(fields["from_x"]) is int
    assert type(fields["from_y"]) is float


def test_stroke_rejects_negative_width_and_string_coordinates():
    base = {"type": "stroke", "from_x": 1, "from_y": 2, "to_x": 3, "to_y": 4, "color": "#000", "width": 2}

    with pytest.raises(ValidationError):
        parse_client_message({**base, "width": -1})
    with pytest.raises(ValidationError):
        parse_client_message({**base, "from_x": "1"})
