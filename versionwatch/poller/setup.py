import asyncio
import logging
import re
from typing import Callable, List, Optional

from versionwatch.config import Settings
from versionwatch.errors import ConfigInvalid, ConfigMissing
from versionwatch.feeds.fetcher import Fetcher
from versionwatch.feeds.sources import jira_feed, minecraft_feed
from versionwatch.poller.engine import FeedState, Sink
from versionwatch.poller.scheduler import Scheduler

logger = logging.getLogger(__name__)


async def setup_poller(
    settings: Settings,
    sink_factory: Callable[[List[str]], Sink],
    fetcher: Optional[Fetcher] = None,
) -> Scheduler:
    """
    Подготовить поллер версий: проверить конфигурацию и заполнить seen-set'ы.

    Args:
        settings: Настройки приложения
        sink_factory: Функция, собирающая отправку анонса по списку чатов
        fetcher: HTTP-клиент фидов (по умолчанию с таймаутом из настроек)

    Returns:
        Планировщик, ещё не запущенный

    Raises:
        ConfigMissing: не задан обязательный список чатов
        ConfigInvalid: JIRA_PLACEHOLDER_PATTERN не является регулярным выражением
        FetchError: не удалось получить начальный список версий
    """
    minecraft_chats = settings.get_chat_ids(settings.minecraft_chat_ids)
    if not minecraft_chats:
        raise ConfigMissing("MINECRAFT_CHAT_IDS")

    jira_chats = settings.get_chat_ids(settings.jira_chat_ids)
    if not jira_chats:
        raise ConfigMissing("JIRA_CHAT_IDS")

    try:
        jira = jira_feed(settings.jira_versions_url, settings.jira_placeholder_pattern or None)
    except re.error as e:
        raise ConfigInvalid("JIRA_PLACEHOLDER_PATTERN", str(e)) from e

    fetcher = fetcher or Fetcher(timeout=settings.fetch_timeout_seconds)

    states = [
        FeedState(
            jira,
            sink_factory(jira_chats),
            fetcher,
        ),
        FeedState(
            minecraft_feed(settings.minecraft_manifest_url),
            sink_factory(minecraft_chats),
            fetcher,
        ),
    ]

    await asyncio.gather(*(state.seed() for state in states))

    return Scheduler(states, interval=settings.poll_interval_seconds)
