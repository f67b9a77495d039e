from abc import ABC, abstractmethod


class LLMProvider(ABC):
    @abstractmethod
    async def chat(self, prompt: str) -> str:
        """Send prompt to LLM and return its text reply."""
        pass
