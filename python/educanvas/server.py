"""
FastAPI WebSocket server for EduCanvas Live.

Provides ClassroomServer, which binds the session coordinator to
WebSocket connections and exposes a small read-only HTTP surface.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from typing import Any, Callable

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRouter
from pydantic import ValidationError

from .config import Settings, get_settings
from .delivery import Delivery
from .protocol import (
    ChatDeleteMessage,
    ChatSendMessage,
    ClaimAdminMessage,
    ClearCanvasMessage,
    ErrorCode,
    ErrorMessage,
    JoinMessage,
    PingMessage,
    PongMessage,
    SignalMessage,
    StreamStatusMessage,
    StrokeMessage,
    ToggleDrawingMessage,
    parse_client_message,
)
from .session import SessionCoordinator

logger = logging.getLogger(__name__)

SessionHandler = Callable[[str, Any], list[Delivery]]


class ClassroomServer:
    """
    FastAPI WebSocket server for a single live classroom.

    Handles:
    - WebSocket connections and message decoding
    - Serialized dispatch of every event to the session coordinator
    - Fan-out of the resulting deliveries
    - Health and state queries over HTTP
    """

    def __init__(
        self,
        settings: Settings | None = None,
        coordinator: SessionCoordinator | None = None,
    ):
        self._settings = settings or get_settings()
        self._coordinator = coordinator or SessionCoordinator(self._settings.admin_secret)
        self._path = self._settings.ws_path
        self._max_message_size = self._settings.max_message_size
        self._keepalive_interval = self._settings.keepalive_interval

        self._router = APIRouter()
        self._app: FastAPI | None = None

        # Single mutation boundary: every coordinator call and the writes
        # of its deliveries happen under this lock.
        self._session_lock = asyncio.Lock()
        self._sockets: dict[str, WebSocket] = {}

        self._handlers: dict[str, SessionHandler] = {
            "join": self._handle_join,
            "claim_admin": self._handle_claim_admin,
            "chat_send": self._handle_chat_send,
            "chat_delete": self._handle_chat_delete,
            "stroke": self._handle_stroke,
            "clear_canvas": self._handle_clear_canvas,
            "toggle_drawing": self._handle_toggle_drawing,
            "stream_status": self._handle_stream_status,
            "signal": self._handle_signal,
        }

        self._setup_routes()

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application with routes and CORS configured."""
        if self._app is None:
            self._app = FastAPI(title="EduCanvas Live")
            self._app.add_middleware(
                CORSMiddleware,
                allow_origins=self._settings.cors_allow_origins,
                allow_methods=["GET", "POST"],
                allow_headers=["*"],
            )
            self._app.include_router(self._router)
        return self._app

    @property
    def coordinator(self) -> SessionCoordinator:
        """Get the session coordinator."""
        return self._coordinator

    def _setup_routes(self) -> None:
        """Setup WebSocket and query routes."""
        @self._router.websocket(self._path)
        async def websocket_endpoint(websocket: WebSocket):
            await self._handle_connection(websocket)

        @self._router.get("/health")
        async def health() -> dict[str, Any]:
            stats = self._coordinator.stats()
            return {
                "status": "ok",
                "participants": stats.participant_count,
                "admin": "present" if stats.admin_present else "none",
            }

        @self._router.get("/state")
        async def state() -> dict[str, Any]:
            return self._coordinator.stats().to_dict()

    async def _handle_connection(self, websocket: WebSocket) -> None:
        """Handle a new WebSocket connection."""
        await websocket.accept()

        connection_id = uuid.uuid4().hex
        async with self._session_lock:
            self._sockets[connection_id] = websocket
            self._coordinator.connect(connection_id)

        try:
            while True:
                try:
                    frame = await asyncio.wait_for(
                        websocket.receive(), timeout=self._keepalive_interval
                    )
                except asyncio.TimeoutError:
                    # Send a ping to check if the connection is still alive
                    try:
                        await websocket.send_json({"type": "ping"})
                    except Exception:
                        break
                    continue

                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))

                raw_data = frame.get("text")
                if raw_data is None:
                    await self._send_error(websocket, ErrorCode.INVALID_MESSAGE, "Binary frames are not supported.")
                    continue

                if len(raw_data) > self._max_message_size:
                    await self._send_error(websocket, ErrorCode.INVALID_MESSAGE, "Message too large.")
                    continue

                try:
                    data = json.loads(raw_data)
                except json.JSONDecodeError:
                    await self._send_error(websocket, ErrorCode.INVALID_MESSAGE, "Invalid JSON.")
                    continue

                await self._handle_message(connection_id, websocket, data)

        except WebSocketDisconnect:
            pass
        except Exception:
            logger.exception("WebSocket error")
            await self._send_error(websocket, ErrorCode.INTERNAL_ERROR, "Internal error.")
        finally:
            await self._cleanup_connection(connection_id)

    async def _handle_message(self, connection_id: str, websocket: WebSocket, data: Any) -> None:
        """Handle an incoming message."""
        try:
            message = parse_client_message(data)
        except (ValueError, ValidationError, TypeError):
            await self._send_error(websocket, ErrorCode.INVALID_MESSAGE, "Invalid message format.")
            return

        if isinstance(message, PingMessage):
            await websocket.send_json(PongMessage(timestamp=time.time()).model_dump())
            return

        handler = self._handlers.get(message.type)
        if handler is None:
            await self._send_error(websocket, ErrorCode.INVALID_MESSAGE, f"Unknown message type: {message.type}")
            return

        await self.dispatch(lambda: handler(connection_id, message))

    async def dispatch(self, operation: Callable[[], list[Delivery]]) -> list[Delivery]:
        """
        Run a coordinator operation and deliver its output atomically.

        Returns:
            The deliveries the operation produced.
        """
        async with self._session_lock:
            deliveries = operation()
            await self._deliver(deliveries)
        return deliveries

    # =========================================================================
    # Event Handlers
    # =========================================================================

    def _handle_join(self, connection_id: str, message: JoinMessage) -> list[Delivery]:
        return self._coordinator.join(connection_id, message.name, message.secret)

    def _handle_claim_admin(self, connection_id: str, message: ClaimAdminMessage) -> list[Delivery]:
        return self._coordinator.claim_admin(connection_id, message.secret)

    def _handle_chat_send(self, connection_id: str, message: ChatSendMessage) -> list[Delivery]:
        return self._coordinator.send_chat(connection_id, message.body)

    def _handle_chat_delete(self, connection_id: str, message: ChatDeleteMessage) -> list[Delivery]:
        return self._coordinator.delete_chat(connection_id, message.message_id)

    def _handle_stroke(self, connection_id: str, message: StrokeMessage) -> list[Delivery]:
        return self._coordinator.stroke(connection_id, message)

    def _handle_clear_canvas(self, connection_id: str, message: ClearCanvasMessage) -> list[Delivery]:
        return self._coordinator.clear_canvas(connection_id)

    def _handle_toggle_drawing(self, connection_id: str, message: ToggleDrawingMessage) -> list[Delivery]:
        return self._coordinator.toggle_drawing(connection_id, message.enabled)

    def _handle_stream_status(self, connection_id: str, message: StreamStatusMessage) -> list[Delivery]:
        return self._coordinator.stream_status(connection_id, message.active)

    def _handle_signal(self, connection_id: str, message: SignalMessage) -> list[Delivery]:
        return self._coordinator.signal(connection_id, message.to, message.kind, message.payload)

    # =========================================================================
    # Delivery
    # =========================================================================

    async def _deliver(self, deliveries: list[Delivery]) -> None:
        """Write each delivery to every recipient that still has a socket."""
        for delivery in deliveries:
            data = delivery.payload()
            tasks = []
            recipients = []
            for connection_id in delivery.recipients:
                websocket = self._sockets.get(connection_id)
                if websocket is not None:
                    tasks.append(websocket.send_json(data))
                    recipients.append(connection_id)

            if tasks:
                results = await asyncio.gather(*tasks, return_exceptions=True)
                for connection_id, result in zip(recipients, results):
                    if isinstance(result, Exception):
                        logger.warning(f"Failed to send {delivery.type} to {connection_id}: {result}")

    async def _send_error(
        self, websocket: WebSocket, code: ErrorCode, message: str, details: dict[str, Any] | None = None
    ) -> None:
        """Send an error message to a WebSocket."""
        try:
            await websocket.send_json(ErrorMessage(code=code.value, message=message, details=details).model_dump())
        except Exception:
            logger.debug("Failed to send error message to WebSocket")

    async def _cleanup_connection(self, connection_id: str) -> None:
        """Clean up a disconnected WebSocket."""
        async with self._session_lock:
            self._sockets.pop(connection_id, None)
            deliveries = self._coordinator.disconnect(connection_id)
            await self._deliver(deliveries)
        logger.info(f"Connection closed: {connection_id}")


__all__ = ["ClassroomServer"]
