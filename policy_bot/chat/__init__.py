"""Conversation memory and the answer pipeline."""

from policy_bot.chat.memory import ConversationMemory, ConversationTurn
from policy_bot.chat.pipeline import (
    ERROR_MESSAGE,
    NO_CONTEXT_MESSAGE,
    NOT_INITIALIZED_MESSAGE,
    AnswerPipeline,
)
from policy_bot.chat.service import PolicyBotService, create_policy_bot_service

__all__ = [
    "ConversationMemory",
    "ConversationTurn",
    "AnswerPipeline",
    "NOT_INITIALIZED_MESSAGE",
    "NO_CONTEXT_MESSAGE",
    "ERROR_MESSAGE",
    "PolicyBotService",
    "create_policy_bot_service",
]
