"""HTTP webhook relays for outbound WhatsApp delivery."""

import logging
from typing import Any, Dict, Optional

import httpx

from paralello.config import settings
from paralello.core.errors import ConfigurationError, ExternalServiceError
from paralello.providers.base import MessageRelay

logger = logging.getLogger(__name__)

SOURCE_TAG = "paralello_automation"


def _provider_message_id(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return data.get("provider_message_id") or data.get("uazapiId") or data.get("message_id")


class AutomationWebhookRelay(MessageRelay):
    """Relay for scheduled messages, reports and approved suggestions."""

    def __init__(self, url: str = None, timeout: float = None, client: httpx.Client = None):
        super().__init__("automation_webhook")
        self.url = url if url is not None else settings.automation_dispatch_webhook
        if not self.url:
            raise ConfigurationError("AUTOMATION_DISPATCH_WEBHOOK is not defined")
        self.timeout = timeout or settings.webhook_timeout
        self._client = client

    def dispatch(self, kind: str, payload: Dict[str, Any]) -> Optional[str]:
        body = {"source": SOURCE_TAG, "type": kind, "payload": payload}
        try:
            if self._client is not None:
                response = self._client.post(self.url, json=body, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.url, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"Webhook Error: {e.response.status_code} {e.response.reason_phrase}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Webhook Error: {e}") from e
        return _provider_message_id(response)


class WhatsAppRelay:
    """Relay for direct outbound chat messages typed by agency staff."""

    def __init__(self, url: str = None, timeout: float = None, client: httpx.Client = None):
        self.url = url if url is not None else settings.whatsapp_relay_url
        if not self.url:
            raise ConfigurationError("WHATSAPP_RELAY_URL is not defined")
        self.timeout = timeout or settings.webhook_timeout
        self._client = client

    def send_text(
        self,
        organization_id: int,
        client_id: int,
        message_id: int,
        text: str,
        instance_id: Optional[str] = None,
    ) -> Optional[str]:
        """Send ``text`` and return the provider message id used to track delivery."""
        body = {
            "action": "send_text",
            "organization_id": organization_id,
            "client_id": client_id,
            "instance_id": instance_id,
            "message_id": message_id,
            "text": text,
        }
        try:
            if self._client is not None:
                response = self._client.post(self.url, json=body, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.url, json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"WhatsApp relay error: {e}") from e
        return _provider_message_id(response)
