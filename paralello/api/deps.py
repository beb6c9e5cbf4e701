"""Injected collaborators for API routes.

Each dependency returns a factory so that configuration errors surface inside
the route, where they are reported as a 500 with an ``error`` body.
"""

from typing import Callable

from paralello.providers.base import ChatCompletionProvider, MessageRelay
from paralello.providers.openai_llm import OpenAIChatProvider
from paralello.providers.webhook import AutomationWebhookRelay, WhatsAppRelay


def get_llm_factory() -> Callable[[str], ChatCompletionProvider]:
    return OpenAIChatProvider


def get_relay_factory() -> Callable[[], MessageRelay]:
    return AutomationWebhookRelay


def get_whatsapp_relay_factory() -> Callable[[], WhatsAppRelay]:
    return WhatsAppRelay
