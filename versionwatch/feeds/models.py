"""
Модели версий.

MinecraftVersion и JiraVersion повторяют только нужные поля ответов
launchermeta и Jira, VersionRecord - общий вид записи для поллера.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class VersionRecord(BaseModel):
    """Неизменяемая запись о версии из фида"""
    id: str
    feed: str
    name: str
    kind: Optional[str] = None
    released: Optional[bool] = None
    release_time: Optional[datetime] = None

    class Config:
        allow_mutation = False


class MinecraftVersion(BaseModel):
    id: str
    type: str
    url: Optional[str] = None
    time: Optional[datetime] = None
    releaseTime: Optional[datetime] = None

    def to_record(self, feed: str) -> VersionRecord:
        return VersionRecord(
            id=self.id,
            feed=feed,
            name=self.id,
            kind=self.type,
            release_time=self.releaseTime,
        )


class JiraVersion(BaseModel):
    # id в Jira числовой и не показывается пользователю, идентификатором служит name
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    archived: bool = False
    released: bool = False
    releaseDate: Optional[str] = None

    def to_record(self, feed: str) -> VersionRecord:
        release_time = None
        if self.releaseDate:
            try:
                release_time = datetime.fromisoformat(self.releaseDate)
            except ValueError:
                release_time = None
        return VersionRecord(
            id=self.name,
            feed=feed,
            name=self.name,
            released=self.released,
            release_time=release_time,
        )
