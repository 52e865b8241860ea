"""
Фиды версий: откуда забирать список, как его разобрать и как оформить анонс.
"""
import json
import logging
import re
from typing import Any, Callable, List, Optional, Type

from pydantic import BaseModel, ValidationError, parse_obj_as

from versionwatch.errors import ParseError
from versionwatch.feeds.fetcher import Fetcher
from versionwatch.feeds.formatters import format_jira_version, format_minecraft_version
from versionwatch.feeds.models import JiraVersion, MinecraftVersion, VersionRecord

logger = logging.getLogger(__name__)


class JsonFeed:
    """
    Фид, отдающий JSON со списком версий.

    Args:
        name: Имя фида (используется в логах и статусе)
        url: Адрес, по которому забирается полный список
        model: pydantic-модель одного элемента списка, должна уметь to_record()
        formatter: Функция, формирующая текст анонса для записи
        list_key: Ключ списка внутри объекта-обёртки; None для плоского списка
        placeholder_pattern: Регулярка для имён версий-заглушек
        newest_first: Список отсортирован от новых версий к старым
    """

    def __init__(
        self,
        name: str,
        url: str,
        model: Type[BaseModel],
        formatter: Callable[[VersionRecord], str],
        list_key: Optional[str] = None,
        placeholder_pattern: Optional[str] = None,
        newest_first: bool = False,
    ):
        self.name = name
        self.url = url
        self.model = model
        self.formatter = formatter
        self.list_key = list_key
        self._placeholder = re.compile(placeholder_pattern) if placeholder_pattern else None
        self.newest_first = newest_first

    def parse(self, raw: bytes) -> List[VersionRecord]:
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseError(f"{self.name}: invalid JSON payload: {e}") from e

        items = self._extract_items(data)
        try:
            versions = parse_obj_as(List[self.model], items)
        except ValidationError as e:
            raise ParseError(f"{self.name}: unexpected payload shape: {e}") from e
        logger.debug("Parsed %d %s versions", len(versions), self.name)
        return [v.to_record(self.name) for v in versions]

    def _extract_items(self, data: Any) -> List[Any]:
        if self.list_key is None:
            if isinstance(data, list):
                return data
            raise ParseError(f"{self.name}: expected a JSON list")
        if isinstance(data, dict) and isinstance(data.get(self.list_key), list):
            return data[self.list_key]
        raise ParseError(f"{self.name}: expected an object with '{self.list_key}' list")

    async def fetch_records(self, fetcher: Fetcher) -> List[VersionRecord]:
        raw = await fetcher.fetch(self.url)
        return self.parse(raw)

    def is_placeholder(self, record: VersionRecord) -> bool:
        return bool(self._placeholder and self._placeholder.search(record.name))

    def latest(self, records: List[VersionRecord]) -> Optional[VersionRecord]:
        if not records:
            return None
        return records[0] if self.newest_first else records[-1]

    def format(self, record: VersionRecord) -> str:
        return self.formatter(record)

    def __repr__(self) -> str:
        return f"JsonFeed(name={self.name!r}, url={self.url!r})"


def minecraft_feed(url: str) -> JsonFeed:
    # version_manifest.json: {"latest": {...}, "versions": [{"id": ..., "type": ...}, ...]}
    return JsonFeed(
        name="minecraft",
        url=url,
        model=MinecraftVersion,
        formatter=format_minecraft_version,
        list_key="versions",
        newest_first=True,
    )


def jira_feed(url: str, placeholder_pattern: Optional[str] = "Future Version") -> JsonFeed:
    return JsonFeed(
        name="jira",
        url=url,
        model=JiraVersion,
        formatter=format_jira_version,
        placeholder_pattern=placeholder_pattern,
    )
