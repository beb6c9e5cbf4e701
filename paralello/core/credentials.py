"""Credential lookup for outbound services."""

import logging

from sqlalchemy.orm import Session

from paralello.config import settings
from paralello.core.errors import ConfigurationError
from paralello.models.setting import SystemSetting

logger = logging.getLogger(__name__)

OPENAI_KEY_SETTING = "openai_api_key"


def _unquote(value) -> str:
    if value is None:
        return ""
    # JSON values may have been saved as '"sk-..."'
    return value.replace('"', "").strip() if isinstance(value, str) else str(value)


def resolve_openai_api_key(db: Session, env_value: str = None) -> str:
    """
    Return the OpenAI key, preferring the ``system_settings`` row over the environment.

    Raises ConfigurationError when neither source holds a usable key.
    """
    setting = db.query(SystemSetting).filter(SystemSetting.key == OPENAI_KEY_SETTING).first()
    db_key = _unquote(setting.value) if setting else ""
    api_key = db_key or (env_value if env_value is not None else settings.openai_api_key)

    if not api_key or api_key == "placeholder":
        raise ConfigurationError("OPENAI_API_KEY is not defined in System Settings or Env")
    if db_key:
        logger.debug("Using OpenAI key from system settings")
    return api_key
