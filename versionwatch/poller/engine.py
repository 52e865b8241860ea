import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from versionwatch.errors import NotifyError
from versionwatch.feeds.fetcher import Fetcher
from versionwatch.feeds.models import VersionRecord
from versionwatch.feeds.sources import JsonFeed
from versionwatch.poller.seen import SeenSet

logger = logging.getLogger(__name__)

Sink = Callable[[str], Awaitable[None]]


class FeedState:
    """
    Состояние одного отслеживаемого фида.

    Принадлежит планировщику; busy не даёт запустить второй проход
    по фиду, пока первый не закончился.
    """

    def __init__(self, feed: JsonFeed, sink: Sink, fetcher: Fetcher, seen: Optional[SeenSet] = None):
        self.feed = feed
        self.sink = sink
        self.fetcher = fetcher
        self.seen = seen if seen is not None else SeenSet()
        self.busy = False
        self.notified = 0
        self.last_checked: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.latest: Optional[str] = None

    @property
    def name(self) -> str:
        return self.feed.name

    async def seed(self) -> int:
        """Первичное заполнение seen-set полным списком. FetchError пробрасывается."""
        records = await self.feed.fetch_records(self.fetcher)
        self.seen.initialize(r.id for r in records)
        self.remember_latest(records)
        logger.info("Loaded %d initial %s versions", len(self.seen), self.name)
        return len(self.seen)

    def remember_latest(self, records: List[VersionRecord]) -> None:
        newest = self.feed.latest(records)
        if newest is not None:
            self.latest = newest.name

    def summary(self) -> Dict[str, Any]:
        return {
            "feed": self.name,
            "url": self.feed.url,
            "seen": len(self.seen),
            "notified": self.notified,
            "busy": self.busy,
            "last_checked": self.last_checked.isoformat() if self.last_checked else None,
            "last_error": self.last_error,
            "latest": self.latest,
        }


async def check(state: FeedState) -> int:
    """
    Один проход по фиду: забрать полный список и анонсировать новые версии.

    Новая версия попадает в seen-set до отправки анонса. Ошибка отправки
    прерывает проход: уже отмеченные версии остаются отмеченными,
    остальные будут найдены на следующем проходе.

    Returns:
        Количество отправленных анонсов

    Raises:
        FetchError: список не получен или не разобран, seen-set не изменён
        NotifyError: не удалось отправить анонс
    """
    records = await state.feed.fetch_records(state.fetcher)
    state.last_checked = datetime.now(timezone.utc)
    state.remember_latest(records)

    sent = 0
    for record in records:
        if state.seen.contains(record.id):
            continue

        state.seen.add(record.id)

        if state.feed.is_placeholder(record):
            logger.info("Tracking placeholder %s version %s without announcement", state.name, record.id)
            continue

        message = state.feed.format(record)
        logger.info("New %s version %s: %s", state.name, record.id, message)
        try:
            await state.sink(message)
        except NotifyError:
            raise
        except Exception as e:
            raise NotifyError(f"failed to announce {state.name} version {record.id}: {e}") from e
        sent += 1
        state.notified += 1

    return sent
