"""
API Schemas - Request/Response Models
"""

from .chat_models import (
    DONE_SENTINEL,
    Attachment,
    AttachmentKind,
    ChatRequest,
    ConversationMessage,
    ModelRequest,
    OllamaMessage,
    RelayEvent,
    Role,
)
from .practice_models import (
    Difficulty,
    GradeResult,
    PracticeProblem,
    PracticeRequest,
    Topic,
)

__all__ = [
    "DONE_SENTINEL",
    "Attachment",
    "AttachmentKind",
    "ChatRequest",
    "ConversationMessage",
    "ModelRequest",
    "OllamaMessage",
    "RelayEvent",
    "Role",
    "Difficulty",
    "GradeResult",
    "PracticeProblem",
    "PracticeRequest",
    "Topic",
]
