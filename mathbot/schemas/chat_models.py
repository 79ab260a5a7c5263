"""
Chat-related Pydantic models for MathBot API.

Inbound conversation shapes, the outbound model-server request and the
relay's SSE event unit.
"""

import json
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ===== Conversation Models =====

class Role(str, Enum):
    """Who authored a turn"""
    USER = "user"
    ASSISTANT = "assistant"


class AttachmentKind(str, Enum):
    """Attachment payload encoding"""
    IMAGE = "image"  # payload is a base64 data URI
    TEXT = "text"    # payload is the decoded file text


class Attachment(BaseModel):
    """A single file attached to a user message"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    kind: AttachmentKind = Field(..., validation_alias=AliasChoices("kind", "type"))
    payload: str = Field(..., validation_alias=AliasChoices("payload", "data"))


class ConversationMessage(BaseModel):
    """One turn of a conversation"""
    model_config = ConfigDict(populate_by_name=True)

    role: Role
    text: str = ""
    attachment: Optional[Attachment] = Field(
        default=None,
        validation_alias=AliasChoices("attachment", "fileData")
    )


class ChatRequest(BaseModel):
    """Request body for POST /api/chat"""
    messages: List[ConversationMessage] = Field(..., min_length=1)


# ===== Model Server Request =====

class OllamaMessage(BaseModel):
    """Message in the shape Ollama's /api/chat expects"""
    role: str
    content: str
    images: Optional[List[str]] = None


class ModelRequest(BaseModel):
    """Outbound request to the model server, built fresh per call"""
    model: str
    messages: List[OllamaMessage]
    stream: bool = True
    options: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ===== Relay Events =====

DONE_SENTINEL = "[DONE]"


class RelayEvent(BaseModel):
    """
    One unit of the relay's outbound event stream.

    Exactly one of token / error is set; the end-of-stream sentinel is
    represented by done=True.
    """
    token: Optional[str] = None
    error: Optional[str] = None
    done: bool = False

    def encode(self) -> str:
        """Serialize as a single SSE frame"""
        if self.done:
            return f"data: {DONE_SENTINEL}\n\n"
        if self.error is not None:
            return f"data: {json.dumps({'error': self.error})}\n\n"
        return f"data: {json.dumps({'token': self.token})}\n\n"
