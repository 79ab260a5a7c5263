"""
MathBot client side: stream consumer, practice client and local store
"""

from mathbot.client.consumer import (
    ConsumerBusyError,
    ConsumerState,
    ExchangeResult,
    RelayError,
    SSEFrameDecoder,
    StreamConsumer,
    error_diagnostic,
)
from mathbot.client.practice import PracticeClient
from mathbot.client.session import ChatSession
from mathbot.client.storage import (
    CONVERSATIONS_KEY,
    PRACTICE_STATS_KEY,
    THEME_KEY,
    Conversation,
    JsonStore,
    PracticeStats,
    generate_title,
    load_conversations,
    load_practice_stats,
    load_theme,
    save_conversations,
    save_practice_stats,
    save_theme,
    upsert_conversation,
)

__all__ = [
    "ConsumerBusyError",
    "ConsumerState",
    "ExchangeResult",
    "RelayError",
    "SSEFrameDecoder",
    "StreamConsumer",
    "error_diagnostic",
    "PracticeClient",
    "ChatSession",
    "CONVERSATIONS_KEY",
    "PRACTICE_STATS_KEY",
    "THEME_KEY",
    "Conversation",
    "JsonStore",
    "PracticeStats",
    "generate_title",
    "load_conversations",
    "load_practice_stats",
    "load_theme",
    "save_conversations",
    "save_practice_stats",
    "save_theme",
    "upsert_conversation",
]
