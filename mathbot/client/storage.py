"""
Client-side persistence

A small JSON-file key-value store holding the client's conversations, theme
and practice statistics. The whole file is loaded at construction and
rewritten on every mutation; concurrent writers are last-writer-wins.
"""

import json
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from mathbot.schemas.chat_models import ConversationMessage, Role

logger = logging.getLogger(__name__)

CONVERSATIONS_KEY = "mathbot_conversations"
THEME_KEY = "mathbot_theme"
PRACTICE_STATS_KEY = "mathbot_practice_stats"

TITLE_LENGTH = 40
DEFAULT_TITLE = "New Chat"


class JsonStore:
    """Key-value store backed by a single JSON file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring store {self.path}: top level is not an object")
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()

    def _save(self) -> None:
        # Write to a sibling temp file then swap, so readers never see a torn file
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


# ===== Conversations =====

def generate_title(messages: List[ConversationMessage]) -> str:
    """Title from the first user message: first 40 chars, ellipsis when cut"""
    for message in messages:
        if message.role == Role.USER and message.text.strip():
            text = message.text.strip()
            if len(text) > TITLE_LENGTH:
                return text[:TITLE_LENGTH] + "..."
            return text
    return DEFAULT_TITLE


class Conversation(BaseModel):
    """A persisted conversation"""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str = DEFAULT_TITLE
    messages: List[ConversationMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def refresh_title(self) -> None:
        self.title = generate_title(self.messages)


def load_conversations(store: JsonStore) -> List[Conversation]:
    raw = store.get(CONVERSATIONS_KEY, [])
    return [Conversation.model_validate(item) for item in raw]


def save_conversations(store: JsonStore, conversations: List[Conversation]) -> None:
    store.set(
        CONVERSATIONS_KEY,
        [c.model_dump(mode="json", exclude_none=True) for c in conversations],
    )


def upsert_conversation(store: JsonStore, conversation: Conversation) -> None:
    """Insert or replace by id; most recently saved first"""
    conversations = [c for c in load_conversations(store) if c.id != conversation.id]
    conversations.insert(0, conversation)
    save_conversations(store, conversations)


# ===== Theme =====

def load_theme(store: JsonStore) -> str:
    return store.get(THEME_KEY, "light")


def save_theme(store: JsonStore, theme: str) -> None:
    store.set(THEME_KEY, theme)


# ===== Practice statistics =====

class PracticeStats(BaseModel):
    """Running tally of graded practice answers"""
    total: int = 0
    correct: int = 0
    streak: int = 0
    best_streak: int = 0

    @property
    def accuracy(self) -> int:
        """Percentage of correct answers, rounded; 0 before any answer"""
        if self.total == 0:
            return 0
        return round(self.correct / self.total * 100)

    def record(self, correct: bool) -> None:
        self.total += 1
        if correct:
            self.correct += 1
            self.streak += 1
            self.best_streak = max(self.best_streak, self.streak)
        else:
            self.streak = 0


def load_practice_stats(store: JsonStore) -> PracticeStats:
    raw: Optional[Dict[str, Any]] = store.get(PRACTICE_STATS_KEY)
    if not raw:
        return PracticeStats()
    return PracticeStats.model_validate(raw)


def save_practice_stats(store: JsonStore, stats: PracticeStats) -> None:
    store.set(PRACTICE_STATS_KEY, stats.model_dump())
