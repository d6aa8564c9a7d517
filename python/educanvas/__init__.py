"""
EduCanvas Live - a real-time classroom session server.
"""

from educanvas.admin import AdminAuthority, ClaimResult
from educanvas.chat import ChatLog, ChatMessage
from educanvas.config import Settings, get_settings
from educanvas.delivery import Delivery
from educanvas.registry import ConnectionRegistry, Participant
from educanvas.signaling import SignalingRelay
from educanvas.whiteboard import WhiteboardGate

# Protocol message types
from educanvas.protocol import (
    Role,
    ClaimDenial,
    ParticipantInfo,
    ChatMessageInfo,
    # Client messages
    JoinMessage,
    ClaimAdminMessage,
    ChatSendMessage,
    ChatDeleteMessage,
    StrokeMessage,
    ClearCanvasMessage,
    ToggleDrawingMessage,
    StreamStatusMessage,
    SignalMessage,
    PingMessage,
    ClientMessage,
    # Server messages
    JoinAcceptedMessage,
    ParticipantJoinedMessage,
    ParticipantLeftMessage,
    AdminClaimResultMessage,
    AdminAssignedMessage,
    ChatBroadcast,
    MessageDeletedMessage,
    StrokeBroadcast,
    CanvasClearedMessage,
    DrawingToggledMessage,
    StreamStatusChangedMessage,
    SessionEndedMessage,
    SignalBroadcast,
    ErrorMessage,
    PongMessage,
    ServerMessage,
    ErrorCode,
    parse_client_message,
)

# Session
from educanvas.session import Session, SessionCoordinator, SessionStats

# Server
from educanvas.server import ClassroomServer

__version__ = "0.1.0"

__all__ = [
    # Components
    "AdminAuthority",
    "ClaimResult",
    "ChatLog",
    "ChatMessage",
    "ConnectionRegistry",
    "Participant",
    "SignalingRelay",
    "WhiteboardGate",
    "Delivery",
    # Config
    "Settings",
    "get_settings",
    # Protocol - models
    "Role",
    "ClaimDenial",
    "ParticipantInfo",
    "ChatMessageInfo",
    # Protocol - Client messages
    "JoinMessage",
    "ClaimAdminMessage",
    "ChatSendMessage",
    "ChatDeleteMessage",
    "StrokeMessage",
    "ClearCanvasMessage",
    "ToggleDrawingMessage",
    "StreamStatusMessage",
    "SignalMessage",
    "PingMessage",
    "ClientMessage",
    # Protocol - Server messages
    "JoinAcceptedMessage",
    "ParticipantJoinedMessage",
    "ParticipantLeftMessage",
    "AdminClaimResultMessage",
    "AdminAssignedMessage",
    "ChatBroadcast",
    "MessageDeletedMessage",
    "StrokeBroadcast",
    "CanvasClearedMessage",
    "DrawingToggledMessage",
    "StreamStatusChangedMessage",
    "SessionEndedMessage",
    "SignalBroadcast",
    "ErrorMessage",
    "PongMessage",
    "ServerMessage",
    "ErrorCode",
    "parse_client_message",
    # Session
    "Session",
    "SessionCoordinator",
    "SessionStats",
    # Server
    "ClassroomServer",
]
