"""Bounded rolling conversation memory."""

import threading
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from policy_bot.config import settings
from policy_bot.errors import ConfigError
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

ROLE_LABELS = {"user": "User", "assistant": "Assistant"}


class ConversationTurn(BaseModel):
    """One message of the conversation."""

    role: Literal["user", "assistant"]
    content: str = Field(..., description="Message text")


class ConversationMemory:
    """
    Keeps the most recent question/answer turns of one session.

    ``max_turns`` counts user+assistant pairs, so at most ``2 * max_turns``
    turns are held. The oldest turns are dropped right after each append.

    Args:
        max_turns: Pairs to keep (defaults to settings.MAX_MEMORY_TURNS)

    Example:
        >>> memory = ConversationMemory(max_turns=1)
        >>> memory.append_exchange("Hi", "Hello!")
        >>> print(memory.render())
        User: Hi
        Assistant: Hello!
    """

    def __init__(self, max_turns: Optional[int] = None):
        self._max_turns = self._validate(settings.MAX_MEMORY_TURNS if max_turns is None else max_turns)
        self._turns: List[ConversationTurn] = []
        self._lock = threading.Lock()

    @property
    def max_turns(self) -> int:
        return self._max_turns

    @property
    def turns(self) -> List[ConversationTurn]:
        """Copy of the stored turns, oldest first."""
        with self._lock:
            return list(self._turns)

    def __len__(self) -> int:
        with self._lock:
            return len(self._turns)

    def append_turn(self, turn: ConversationTurn) -> None:
        with self._lock:
            self._turns.append(turn)
            self._truncate()

    def append_exchange(self, question: str, answer: Optional[str] = None) -> None:
        """
        Record a question and, when given, its answer as one update.

        Readers never see the question without the answer that came with it.
        """
        with self._lock:
            self._turns.append(ConversationTurn(role="user", content=question))
            if answer is not None:
                self._turns.append(ConversationTurn(role="assistant", content=answer))
            self._truncate()

    def render(self) -> str:
        """One line per turn prefixed by its role label, newest last."""
        with self._lock:
            turns = list(self._turns)
        return "\n".join(f"{ROLE_LABELS[t.role]}: {t.content}" for t in turns)

    def clear(self) -> None:
        with self._lock:
            self._turns.clear()
        logger.debug("Conversation memory cleared")

    def set_max_turns(self, n: int) -> None:
        """Change the window size, truncating immediately if it shrank."""
        n = self._validate(n)
        with self._lock:
            self._max_turns = n
            self._truncate()

    def _truncate(self) -> None:
        # caller holds the lock
        limit = self._max_turns * 2
        if len(self._turns) > limit:
            del self._turns[:-limit]

    @staticmethod
    def _validate(n: int) -> int:
        if n < 1:
            raise ConfigError(f"max_turns must be at least 1, got {n}")
        return n
