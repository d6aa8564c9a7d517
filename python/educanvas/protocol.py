"""
WebSocket protocol message types for EduCanvas Live.

Defines all client and server message types using Pydantic models
for validation and serialization. Every frame on the wire is a JSON
object carrying a ``type`` discriminator.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

# Maximum lengths for string fields to prevent DoS
MAX_ID_LENGTH = 256
MAX_NAME_LENGTH = 128
MAX_SECRET_LENGTH = 512
MAX_CHAT_LENGTH = 4096
MAX_COLOR_LENGTH = 64

# Coordinates and widths are relayed verbatim, so no int-to-float coercion
Number = Union[StrictInt, StrictFloat]


class Role(str, Enum):
    """Role of a participant within the session."""

    ADMIN = "admin"
    STUDENT = "student"


class ClaimDenial(str, Enum):
    """Reasons an admin claim is refused."""

    WRONG_SECRET = "wrong_secret"
    ADMIN_ALREADY_PRESENT = "admin_already_present"


class ParticipantInfo(BaseModel):
    """Public view of a participant, as sent to clients."""

    connection_id: str
    name: str
    role: Role
    stream_active: bool = False


class ChatMessageInfo(BaseModel):
    """Public view of a chat message."""

    id: str
    sender_connection_id: str
    sender_name: str
    role: Role
    body: str
    sent_at: str


# =============================================================================
# Client Message Types
# =============================================================================


class JoinMessage(BaseModel):
    """Client asks to join the classroom, optionally claiming admin."""

    type: Literal["join"] = "join"
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    secret: Optional[str] = Field(None, max_length=MAX_SECRET_LENGTH)


class ClaimAdminMessage(BaseModel):
    """Client asks to become admin with the shared secret."""

    type: Literal["claim_admin"] = "claim_admin"
    secret: str = Field(..., max_length=MAX_SECRET_LENGTH)


class ChatSendMessage(BaseModel):
    """Client posts a chat message."""

    type: Literal["chat_send"] = "chat_send"
    body: str = Field(..., max_length=MAX_CHAT_LENGTH)


class ChatDeleteMessage(BaseModel):
    """Admin removes a chat message."""

    type: Literal["chat_delete"] = "chat_delete"
    message_id: str = Field(..., min_length=1, max_length=MAX_ID_LENGTH)


class StrokeMessage(BaseModel):
    """A single whiteboard segment, drawn or erased."""

    model_config = ConfigDict(extra="allow")

    type: Literal["stroke"] = "stroke"
    from_x: Number
    from_y: Number
    to_x: Number
    to_y: Number
    color: str = Field(..., max_length=MAX_COLOR_LENGTH)
    width: Number
    mode: Optional[Literal["draw", "erase"]] = None

    @field_validator("width")
    @classmethod
    def validate_width(cls, v: Union[int, float]) -> Union[int, float]:
        if v < 0:
            raise ValueError("width must not be negative")
        return v

    def relay_fields(self) -> Dict[str, Any]:
        """The stroke exactly as the client sent it, without the type tag."""
        return self.model_dump(exclude={"type"}, exclude_unset=True)


class ClearCanvasMessage(BaseModel):
    """Admin clears the whiteboard for everyone."""

    type: Literal["clear_canvas"] = "clear_canvas"


class ToggleDrawingMessage(BaseModel):
    """Admin enables or disables drawing for students."""

    type: Literal["toggle_drawing"] = "toggle_drawing"
    enabled: bool


class StreamStatusMessage(BaseModel):
    """Client reports whether its media stream is live."""

    type: Literal["stream_status"] = "stream_status"
    active: bool


class SignalMessage(BaseModel):
    """Peer-media negotiation payload addressed to one connection."""

    type: Literal["signal"] = "signal"
    to: str = Field(..., min_length=1, max_length=MAX_ID_LENGTH)
    kind: Literal["offer", "answer", "candidate"]
    payload: Any = None


class PingMessage(BaseModel):
    """Client sends ping to keep connection alive."""

    type: Literal["ping"] = "ping"
    timestamp: Optional[float] = None


# Union of all client message types
ClientMessage = Union[
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
]


# =============================================================================
# Server Message Types
# =============================================================================


class JoinAcceptedMessage(BaseModel):
    """Server confirms a join and sends the full session snapshot."""

    type: Literal["join_accepted"] = "join_accepted"
    connection_id: str
    role: Role
    is_admin: bool
    participants: Dict[str, ParticipantInfo]
    chat: List[ChatMessageInfo]
    drawing_enabled: bool


class ParticipantJoinedMessage(BaseModel):
    """Server notifies that a participant joined."""

    type: Literal["participant_joined"] = "participant_joined"
    participant: ParticipantInfo


class ParticipantLeftMessage(BaseModel):
    """Server notifies that a participant left."""

    type: Literal["participant_left"] = "participant_left"
    connection_id: str


class AdminClaimResultMessage(BaseModel):
    """Server answers an explicit admin claim."""

    type: Literal["admin_claim_result"] = "admin_claim_result"
    granted: bool
    reason: Optional[ClaimDenial] = None


class AdminAssignedMessage(BaseModel):
    """Server announces the participant who became admin."""

    type: Literal["admin_assigned"] = "admin_assigned"
    participant: ParticipantInfo


class ChatBroadcast(BaseModel):
    """Server broadcasts a new chat message."""

    type: Literal["chat_message"] = "chat_message"
    message: ChatMessageInfo


class MessageDeletedMessage(BaseModel):
    """Server broadcasts that a chat message was removed."""

    type: Literal["message_deleted"] = "message_deleted"
    message_id: str


class StrokeBroadcast(BaseModel):
    """
    Server relays a whiteboard segment from another participant.

    Carries the sender's stroke fields verbatim as extras, plus the
    sender's connection id.
    """

    model_config = ConfigDict(extra="allow")

    type: Literal["stroke"] = "stroke"
    connection_id: str


class CanvasClearedMessage(BaseModel):
    """Server broadcasts that the whiteboard was cleared."""

    type: Literal["canvas_cleared"] = "canvas_cleared"


class DrawingToggledMessage(BaseModel):
    """Server broadcasts the new drawing permission."""

    type: Literal["drawing_toggled"] = "drawing_toggled"
    enabled: bool


class StreamStatusChangedMessage(BaseModel):
    """Server relays a participant's stream status."""

    type: Literal["stream_status_changed"] = "stream_status_changed"
    connection_id: str
    active: bool


class SessionEndedMessage(BaseModel):
    """Server tells everyone the session was torn down."""

    type: Literal["session_ended"] = "session_ended"
    reason: str


class SignalBroadcast(BaseModel):
    """Server forwards a negotiation payload to its destination."""

    type: Literal["signal"] = "signal"
    from_connection_id: str
    kind: Literal["offer", "answer", "candidate"]
    payload: Any = None


class ErrorMessage(BaseModel):
    """Server sends an error message."""

    type: Literal["error"] = "error"
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class PongMessage(BaseModel):
    """Server responds to ping."""

    type: Literal["pong"] = "pong"
    timestamp: float


# Union of all server message types
ServerMessage = Union[
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
]


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(str, Enum):
    """Standard error codes for the protocol."""

    INVALID_MESSAGE = "invalid_message"
    INTERNAL_ERROR = "internal_error"


# =============================================================================
# Message Parsing
# =============================================================================


def parse_client_message(data: Dict[str, Any]) -> ClientMessage:
    """
    Parse a raw dictionary into a typed client message.

    Raises:
        ValueError: If the message type is unknown or invalid.
    """
    if not isinstance(data, dict):
        raise ValueError("Message must be a JSON object")

    msg_type = data.get("type")

    type_map = {
        "join": JoinMessage,
        "claim_admin": ClaimAdminMessage,
        "chat_send": ChatSendMessage,
        "chat_delete": ChatDeleteMessage,
        "stroke": StrokeMessage,
        "clear_canvas": ClearCanvasMessage,
        "toggle_drawing": ToggleDrawingMessage,
        "stream_status": StreamStatusMessage,
        "signal": SignalMessage,
        "ping": PingMessage,
    }

    if msg_type not in type_map:
        raise ValueError(f"Unknown message type: {msg_type}")

    return type_map[msg_type](**data)


__all__ = [
    "Role",
    "ClaimDenial",
    "ParticipantInfo",
    "ChatMessageInfo",
    # Client messages
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
    # Server messages
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
    # Error codes
    "ErrorCode",
    # Parsing
    "parse_client_message",
]
