"""Outbound collaborators: language model and webhook relays."""

from paralello.providers.base import ChatCompletionProvider, MessageRelay
from paralello.providers.openai_llm import OpenAIChatProvider
from paralello.providers.webhook import AutomationWebhookRelay, WhatsAppRelay

__all__ = [
    "ChatCompletionProvider",
    "MessageRelay",
    "OpenAIChatProvider",
    "AutomationWebhookRelay",
    "WhatsAppRelay",
]
