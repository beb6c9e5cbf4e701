"""Base interfaces for outbound collaborators."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class ChatCompletionProvider(ABC):
    """Chat-completion style language model."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        """
        Run one completion and return the raw assistant text.

        Raises ExternalServiceError on transport or API failure.
        """
        pass


class MessageRelay(ABC):
    """Webhook relay that delivers messages to WhatsApp."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def dispatch(self, kind: str, payload: Dict[str, Any]) -> Optional[str]:
        """
        Deliver an automation payload (``message``, ``report`` or ``suggestion``).

        Returns the provider message id when the relay reports one.
        Raises ExternalServiceError when the relay rejects the request.
        """
        pass
