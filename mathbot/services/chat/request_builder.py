"""
Model Request Construction

Turns the browser's conversation into the message list Ollama expects,
picking the vision model when any turn carries an image.
"""

import logging
import re
from typing import List

from mathbot.schemas.chat_models import (
    AttachmentKind,
    ConversationMessage,
    ModelRequest,
    OllamaMessage,
    Role,
)
from mathbot.services.chat.prompts import (
    CHAT_OPTIONS,
    DEFAULT_FILE_PROMPT,
    DEFAULT_IMAGE_PROMPT,
    SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

_DATA_URI_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


def strip_data_uri(payload: str) -> str:
    """Remove a data:image/...;base64, prefix, leaving the raw base64"""
    return _DATA_URI_PREFIX.sub("", payload, count=1)


def _to_ollama_message(message: ConversationMessage) -> OllamaMessage:
    if message.role != Role.USER:
        return OllamaMessage(role="assistant", content=message.text)

    attachment = message.attachment
    if attachment is None:
        return OllamaMessage(role="user", content=message.text)

    if attachment.kind == AttachmentKind.IMAGE:
        return OllamaMessage(
            role="user",
            content=message.text or DEFAULT_IMAGE_PROMPT,
            images=[strip_data_uri(attachment.payload)],
        )

    text = message.text or DEFAULT_FILE_PROMPT
    return OllamaMessage(
        role="user",
        content=f"{text}\n\n[Uploaded file: {attachment.name}]\n\nFile contents:\n{attachment.payload}",
    )


def needs_vision(messages: List[ConversationMessage]) -> bool:
    """True when any user turn in the conversation carries an image"""
    return any(
        m.role == Role.USER and m.attachment is not None and m.attachment.kind == AttachmentKind.IMAGE
        for m in messages
    )


def build_model_request(
    messages: List[ConversationMessage],
    default_model: str,
    vision_model: str,
) -> ModelRequest:
    """
    Build the streaming Ollama request for a conversation

    Args:
        messages: Full conversation in chronological order
        default_model: Text model used when no image is present
        vision_model: Model used when any turn carries an image

    Returns:
        ModelRequest with the tutoring system prompt prepended
    """
    ollama_messages = [OllamaMessage(role="system", content=SYSTEM_PROMPT)]
    ollama_messages.extend(_to_ollama_message(m) for m in messages)

    model = vision_model if needs_vision(messages) else default_model
    logger.debug(f"Built chat request: model={model}, turns={len(messages)}")

    return ModelRequest(
        model=model,
        messages=ollama_messages,
        stream=True,
        options=dict(CHAT_OPTIONS),
    )
