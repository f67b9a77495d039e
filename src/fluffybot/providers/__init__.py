from .base import LLMProvider
from .claude import ClaudeProvider
from .openai_compatible import OpenAICompatibleProvider

__all__ = ["LLMProvider", "ClaudeProvider", "OpenAICompatibleProvider"]
