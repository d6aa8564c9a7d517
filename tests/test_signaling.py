from educanvas.registry import ConnectionRegistry
from educanvas.signaling import SignalingRelay


def _relay() -> SignalingRelay:
    registry = ConnectionRegistry()
    registry.register("a", "Alice")
    registry.register("b", "Bob")
    return SignalingRelay(registry)


def test_relay_targets_only_destination_with_true_sender():
    offer = {"sdp": "v=0...", "type": "offer"}

    delivery = _relay().relay("a", "b", "offer", offer)

    assert delivery.recipients == ("b",)
    assert delivery.payload() == {
        "type": "signal",
        "from_connection_id": "a",
        "kind": "offer",
        "payload": offer,
    }


def test_payload_is_passed_through_untouched():
    odd = ["not", {"an": "sdp"}, 42, None]

    delivery = _relay().relay("b", "a", "candidate", odd)

    assert delivery.payload()["payload"] == odd


def test_absent_destination_is_dropped():
    assert _relay().relay("a", "gone", "answer", {}) is None


def test_unknown_kind_is_dropped():
    assert _relay().relay("a", "b", "bye", {}) is None
