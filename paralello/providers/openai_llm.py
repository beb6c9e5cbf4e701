"""OpenAI chat-completion provider."""

import logging

from openai import OpenAI, OpenAIError

from paralello.config import settings
from paralello.core.errors import ExternalServiceError
from paralello.providers.base import ChatCompletionProvider

logger = logging.getLogger(__name__)


class OpenAIChatProvider(ChatCompletionProvider):
    """OpenAI chat completions with a bounded per-call timeout."""

    def __init__(self, api_key: str, model: str = None, timeout: float = None):
        super().__init__("openai")
        self.model = model or settings.llm_model
        self.client = OpenAI(api_key=api_key, timeout=timeout or settings.llm_timeout, max_retries=1)

    def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise ExternalServiceError(f"OpenAI Error: {e}") from e

        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()
