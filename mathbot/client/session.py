"""
Chat session - one conversation slot bound to a consumer and the store
"""

import logging
from typing import Optional

from mathbot.client.consumer import (
    ConsumerBusyError,
    ConsumerState,
    ExchangeResult,
    StreamConsumer,
    UpdateCallback,
)
from mathbot.client.storage import Conversation, JsonStore, upsert_conversation
from mathbot.schemas.chat_models import Attachment, ConversationMessage, Role

logger = logging.getLogger(__name__)


class ChatSession:
    """
    Appends user turns, streams the reply and persists the conversation.

    After DONE or ERROR the full transcript (including the diagnostic) is
    saved. A cancelled exchange keeps whatever text already streamed and adds
    no diagnostic; a placeholder that received no text is dropped.
    """

    def __init__(
        self,
        consumer: StreamConsumer,
        store: Optional[JsonStore] = None,
        conversation: Optional[Conversation] = None,
    ):
        self.consumer = consumer
        self.store = store
        self.conversation = conversation or Conversation()

    async def ask(
        self,
        text: str,
        attachment: Optional[Attachment] = None,
        on_update: Optional[UpdateCallback] = None,
    ) -> ExchangeResult:
        """
        Send one user turn and stream the reply into the conversation

        Raises:
            ConsumerBusyError: an exchange is in flight; the transcript is untouched
        """
        if self.consumer.in_flight:
            raise ConsumerBusyError(f"Exchange already {self.consumer.state.value}")

        messages = self.conversation.messages
        messages.append(ConversationMessage(role=Role.USER, text=text, attachment=attachment))
        self.conversation.refresh_title()

        result = await self.consumer.send(messages, on_update=on_update)

        if result.state == ConsumerState.CANCELLED and result.placeholder_added and not result.text:
            if messages and messages[-1].role == Role.ASSISTANT:
                messages.pop()

        self.save()
        return result

    def cancel(self) -> None:
        self.consumer.cancel()

    def save(self) -> None:
        if self.store is None:
            return
        upsert_conversation(self.store, self.conversation)
        logger.debug(f"Saved conversation {self.conversation.id} ({len(self.conversation.messages)} messages)")
