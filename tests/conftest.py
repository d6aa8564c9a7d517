from __future__ import annotations

from typing import Any

import pytest

from educanvas.config import Settings
from educanvas.delivery import Delivery
from educanvas.registry import ConnectionRegistry
from educanvas.session import SessionCoordinator

SECRET = "teach123"


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def coordinator(clock: FakeClock) -> SessionCoordinator:
    return SessionCoordinator(SECRET, clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, ADMIN_SECRET=SECRET, KEEPALIVE_INTERVAL=30)


def of_type(deliveries: list[Delivery], message_type: str) -> list[Delivery]:
    return [d for d in deliveries if d.type == message_type]


def only(deliveries: list[Delivery], message_type: str) -> Delivery:
    matches = of_type(deliveries, message_type)
    assert len(matches) == 1, f"expected one {message_type}, got {[d.type for d in deliveries]}"
    return matches[0]


def payload(deliveries: list[Delivery], message_type: str) -> dict[str, Any]:
    return only(deliveries, message_type).payload()
