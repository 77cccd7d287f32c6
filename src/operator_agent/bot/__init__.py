"""discord.py platform client."""

from operator_agent.bot.client import (
    OperatorBot,
    build_intents,
    clean_utterance,
    ignore_reason,
)

__all__ = ["OperatorBot", "build_intents", "clean_utterance", "ignore_reason"]
