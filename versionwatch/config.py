import logging
from typing import List, Optional
from uuid import UUID

from pydantic import BaseSettings, Field, validator

logger = logging.getLogger(__name__)

MINECRAFT_MANIFEST_URL = "https://launchermeta.mojang.com/mc/game/version_manifest.json"
JIRA_VERSIONS_URL = "https://bugs.mojang.com/rest/api/latest/project/MC/versions"


class Settings(BaseSettings):
    """Настройки приложения (берутся из окружения или .env)"""
    botx_bot_id: str = Field(..., env="BOTX_BOT_ID")
    botx_host: str = Field("http://localhost:8080", env="BOTX_HOST")
    botx_secret_key: str = Field(..., env="BOTX_SECRET_KEY")
    # Управление ожиданием callback от Express/BotX для отправок сообщений
    botx_wait_callback: bool = Field(False, env="BOTX_WAIT_CALLBACK")
    log_level: str = Field("INFO", env="LOG_LEVEL")

    # Чаты для анонсов: UUID через запятую.
    # MINECRAFT_CHAT_IDS включает поллер целиком, JIRA_CHAT_IDS тогда обязателен.
    minecraft_chat_ids: Optional[str] = Field(None, env="MINECRAFT_CHAT_IDS")
    jira_chat_ids: Optional[str] = Field(None, env="JIRA_CHAT_IDS")

    minecraft_manifest_url: str = Field(MINECRAFT_MANIFEST_URL, env="MINECRAFT_MANIFEST_URL")
    jira_versions_url: str = Field(JIRA_VERSIONS_URL, env="JIRA_VERSIONS_URL")
    # Версии-заглушки в Jira ("Future Version - 1.17+") отслеживаются, но не анонсируются
    jira_placeholder_pattern: str = Field("Future Version", env="JIRA_PLACEHOLDER_PATTERN")

    poll_interval_seconds: float = Field(30, env="POLL_INTERVAL_SECONDS")
    fetch_timeout_seconds: float = Field(10, env="FETCH_TIMEOUT_SECONDS")

    @validator("log_level", pre=True, always=True)
    def validate_log_level(cls, v):
        level = str(v).upper()
        if level not in logging._nameToLevel:
            raise ValueError(f"invalid log level: {v}")
        return level

    @validator("poll_interval_seconds", "fetch_timeout_seconds")
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @property
    def poller_enabled(self) -> bool:
        return bool(self.minecraft_chat_ids and self.minecraft_chat_ids.strip())

    def get_chat_ids(self, raw: Optional[str]) -> List[str]:
        """
        Разобрать список чатов из строки вида "uuid-1,uuid-2".

        Пустые элементы пропускаются, невалидные UUID логируются и отбрасываются.
        """
        chat_ids: List[str] = []
        for item in (raw or "").split(","):
            chat_id = item.strip()
            if not chat_id:
                continue
            try:
                UUID(chat_id)
            except ValueError:
                logger.warning("Ignoring chat id that is not a UUID: %s", chat_id)
                continue
            chat_ids.append(chat_id)
        return chat_ids

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
