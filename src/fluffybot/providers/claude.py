import logging
from anthropic import AsyncAnthropic
from .base import LLMProvider


logger = logging.getLogger(__name__)


class ClaudeProvider(LLMProvider):
    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 1024,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        # No automatic retries: a failed call is reported back to the thread.
        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def chat(self, prompt: str) -> str:
        logger.debug("Calling Anthropic API")
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        logger.debug(f"Anthropic response length: {len(text)} chars")

        if not text.strip():
            raise ValueError(f"{self.model} returned empty response")
        return text
