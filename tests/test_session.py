from educanvas.protocol import ClaimDenial, Role, StrokeMessage
from educanvas.session import ADMIN_LEFT_REASON, SessionCoordinator

from .conftest import SECRET, of_type, only, payload

STROKE = StrokeMessage(from_x=1, from_y=1, to_x=2, to_y=2, color="#000", width=1, mode="erase")


def _classroom(coordinator: SessionCoordinator) -> None:
    """Alice (admin), Bob and Carol (students)."""
    coordinator.join("alice", "Alice", SECRET)
    coordinator.join("bob", "Bob")
    coordinator.join("carol", "Carol")


def test_first_join_with_secret_becomes_admin_and_announces_to_no_one(coordinator):
    deliveries = coordinator.join("alice", "Alice", SECRET)

    accepted = only(deliveries, "join_accepted")
    assert accepted.recipients == ("alice",)
    snapshot = accepted.payload()
    assert snapshot["role"] == "admin"
    assert snapshot["is_admin"] is True
    assert list(snapshot["participants"]) == ["alice"]
    assert only(deliveries, "participant_joined").recipients == ()
    assert coordinator.session.admin_connection_id == "alice"


def test_second_join_is_student_and_announced_to_others(coordinator):
    coordinator.join("alice", "Alice", SECRET)

    deliveries = coordinator.join("bob", "Bob")

    assert payload(deliveries, "join_accepted")["role"] == "student"
    joined = only(deliveries, "participant_joined")
    assert joined.recipients == ("alice",)
    assert joined.payload()["participant"]["name"] == "Bob"


def test_join_with_secret_when_admin_present_stays_student(coordinator):
    coordinator.join("alice", "Alice", SECRET)

    deliveries = coordinator.join("bob", "Bob", SECRET)

    assert payload(deliveries, "join_accepted")["role"] == "student"
    assert coordinator.session.admin_connection_id == "alice"


def test_repeated_join_is_ignored(coordinator):
    coordinator.join("bob", "Bob")

    assert coordinator.join("bob", "Robert") == []
    assert coordinator.session.registry.lookup("bob").name == "Bob"


def test_snapshot_reflects_prior_changes(coordinator, clock):
    _classroom(coordinator)
    coordinator.send_chat("bob", "first")
    clock.advance(1)
    second = payload(coordinator.send_chat("carol", "second"), "chat_message")["message"]
    coordinator.delete_chat("alice", second["id"])
    coordinator.toggle_drawing("alice", False)
    coordinator.stream_status("bob", True)
    coordinator.disconnect("carol")

    snapshot = payload(coordinator.join("dave", "Dave"), "join_accepted")

    assert [m["body"] for m in snapshot["chat"]] == ["first"]
    assert snapshot["drawing_enabled"] is False
    assert sorted(snapshot["participants"]) == ["alice", "bob", "dave"]
    assert snapshot["participants"]["bob"]["stream_active"] is True


def test_events_from_unjoined_connections_are_ignored(coordinator):
    _classroom(coordinator)
    coordinator.connect("lurker")

    assert coordinator.claim_admin("lurker", SECRET) == []
    assert coordinator.send_chat("lurker", "hi") == []
    assert coordinator.delete_chat("lurker", "1") == []
    assert coordinator.stroke("lurker", STROKE) == []
    assert coordinator.clear_canvas("lurker") == []
    assert coordinator.toggle_drawing("lurker", False) == []
    assert coordinator.stream_status("lurker", True) == []
    assert coordinator.signal("lurker", "bob", "offer", {}) == []
    assert coordinator.stats().chat_message_count == 0
    assert coordinator.stats().drawing_enabled is True


def test_claim_admin_reports_result_privately(coordinator):
    coordinator.join("bob", "Bob")
    coordinator.join("carol", "Carol")

    denied = coordinator.claim_admin("bob", "wrong")
    assert payload(denied, "admin_claim_result") == {
        "type": "admin_claim_result",
        "granted": False,
        "reason": "wrong_secret",
    }
    assert of_type(denied, "admin_assigned") == []

    granted = coordinator.claim_admin("bob", SECRET)
    assert only(granted, "admin_claim_result").recipients == ("bob",)
    assert payload(granted, "admin_claim_result")["granted"] is True
    assigned = only(granted, "admin_assigned")
    assert assigned.recipients == ("carol",)
    assert assigned.payload()["participant"]["role"] == "admin"


def test_second_claim_denied_admin_already_present(coordinator):
    coordinator.join("c1", "One")
    coordinator.join("c2", "Two")

    first = payload(coordinator.claim_admin("c1", SECRET), "admin_claim_result")
    second = payload(coordinator.claim_admin("c2", SECRET), "admin_claim_result")

    assert first["granted"] is True
    assert second == {
        "type": "admin_claim_result",
        "granted": False,
        "reason": ClaimDenial.ADMIN_ALREADY_PRESENT.value,
    }


def test_chat_broadcast_to_everyone_including_sender(coordinator):
    _classroom(coordinator)

    delivery = only(coordinator.send_chat("bob", "hello"), "chat_message")

    assert sorted(delivery.recipients) == ["alice", "bob", "carol"]
    message = delivery.payload()["message"]
    assert message["sender_name"] == "Bob"
    assert message["role"] == "student"


def test_student_delete_never_removes(coordinator):
    _classroom(coordinator)
    message_id = payload(coordinator.send_chat("bob", "keep"), "chat_message")["message"]["id"]

    assert coordinator.delete_chat("carol", message_id) == []
    assert coordinator.delete_chat("bob", message_id) == []
    assert coordinator.delete_chat("bob", "missing") == []
    assert coordinator.stats().chat_message_count == 1


def test_admin_delete_broadcasts(coordinator):
    _classroom(coordinator)
    message_id = payload(coordinator.send_chat("bob", "oops"), "chat_message")["message"]["id"]

    delivery = only(coordinator.delete_chat("alice", message_id), "message_deleted")

    assert sorted(delivery.recipients) == ["alice", "bob", "carol"]
    assert delivery.payload()["message_id"] == message_id
    assert coordinator.stats().chat_message_count == 0
    assert coordinator.delete_chat("alice", message_id) == []


def test_stroke_relay_respects_drawing_flag(coordinator):
    _classroom(coordinator)

    relayed = only(coordinator.stroke("bob", STROKE), "stroke")
    assert sorted(relayed.recipients) == ["alice", "carol"]
    assert relayed.payload()["mode"] == "erase"

    coordinator.toggle_drawing("alice", False)
    assert coordinator.stroke("bob", STROKE) == []
    assert sorted(only(coordinator.stroke("alice", STROKE), "stroke").recipients) == ["bob", "carol"]


def test_toggle_and_clear_are_admin_only(coordinator):
    _classroom(coordinator)

    assert coordinator.toggle_drawing("bob", False) == []
    assert coordinator.clear_canvas("bob") == []

    toggled = only(coordinator.toggle_drawing("alice", False), "drawing_toggled")
    assert sorted(toggled.recipients) == ["alice", "bob", "carol"]
    assert toggled.payload() == {"type": "drawing_toggled", "enabled": False}
    cleared = only(coordinator.clear_canvas("alice"), "canvas_cleared")
    assert sorted(cleared.recipients) == ["alice", "bob", "carol"]


def test_stream_status_updates_roster_and_excludes_sender(coordinator):
    _classroom(coordinator)

    delivery = only(coordinator.stream_status("carol", True), "stream_status_changed")

    assert sorted(delivery.recipients) == ["alice", "bob"]
    assert delivery.payload() == {"type": "stream_status_changed", "connection_id": "carol", "active": True}
    assert coordinator.session.registry.lookup("carol").stream_active is True


def test_signal_is_targeted(coordinator):
    _classroom(coordinator)

    delivery = only(coordinator.signal("bob", "alice", "answer", {"sdp": "x"}), "signal")

    assert delivery.recipients == ("alice",)
    assert delivery.payload()["from_connection_id"] == "bob"
    assert coordinator.signal("bob", "nobody", "answer", {}) == []


def test_student_disconnect_announces_once(coordinator):
    _classroom(coordinator)

    left = only(coordinator.disconnect("bob"), "participant_left")

    assert sorted(left.recipients) == ["alice", "carol"]
    assert left.payload() == {"type": "participant_left", "connection_id": "bob"}
    assert coordinator.disconnect("bob") == []
    assert coordinator.stats().participant_count == 2


def test_disconnect_of_unjoined_connection_is_noop(coordinator):
    coordinator.connect("c1")

    assert coordinator.disconnect("c1") == []
    assert coordinator.disconnect("c1") == []
    assert coordinator.stats().participant_count == 0


def test_admin_disconnect_ends_session_and_resets(coordinator):
    _classroom(coordinator)
    coordinator.send_chat("bob", "hi")
    coordinator.toggle_drawing("alice", False)

    deliveries = coordinator.disconnect("alice")

    assert [d.type for d in deliveries] == ["session_ended"]
    assert sorted(deliveries[0].recipients) == ["bob", "carol"]
    assert deliveries[0].payload()["reason"] == ADMIN_LEFT_REASON
    session = coordinator.session
    assert session.admin_connection_id is None
    assert session.participants == {}
    assert session.chat.messages() == []
    assert session.drawing_enabled is True
    assert coordinator.disconnect("bob") == []


def test_stats(coordinator):
    assert coordinator.stats().to_dict() == {
        "participant_count": 0,
        "admin_present": False,
        "chat_message_count": 0,
        "drawing_enabled": True,
    }

    _classroom(coordinator)
    coordinator.send_chat("bob", "hi")

    stats = coordinator.stats()
    assert stats.participant_count == 3
    assert stats.admin_present is True
    assert stats.chat_message_count == 1


def test_alice_bob_scenario(coordinator):
    alice = coordinator.join("alice", "Alice", secret="teach123")
    assert payload(alice, "join_accepted")["role"] == "admin"
    assert coordinator.session.admin_connection_id == "alice"
    assert only(alice, "participant_joined").recipients == ()

    bob = coordinator.join("bob", "Bob")
    assert payload(bob, "join_accepted")["role"] == "student"
    joined = only(bob, "participant_joined")
    assert joined.recipients == ("alice",)
    assert joined.payload()["participant"]["name"] == "Bob"

    ended = only(coordinator.disconnect("alice"), "session_ended")
    assert ended.recipients == ("bob",)

    rejoin = payload(coordinator.join("bob", "Bob"), "join_accepted")
    assert rejoin["role"] == "student"
    assert list(rejoin["participants"]) == ["bob"]
    assert rejoin["chat"] == []

    claim = payload(coordinator.claim_admin("bob", "teach123"), "admin_claim_result")
    assert claim["granted"] is True
    assert coordinator.session.registry.lookup("bob").role is Role.ADMIN
