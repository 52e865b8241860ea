from typing import FrozenSet, Iterable, Set


class SeenSet:
    """
    Множество уже известных идентификаторов версий одного фида.

    Только растёт: удаления нет. Не потокобезопасно, доступ к одному
    фиду сериализует планировщик.
    """

    def __init__(self):
        self._ids: Set[str] = set()
        self._initialized = False

    def initialize(self, ids: Iterable[str]) -> None:
        """Заполнить из полного списка при старте. Вызывается один раз."""
        if self._initialized:
            raise RuntimeError("seen set is already initialized")
        self._ids.update(ids)
        self._initialized = True

    @property
    def initialized(self) -> bool:
        return self._initialized

    def contains(self, version_id: str) -> bool:
        return version_id in self._ids

    def add(self, version_id: str) -> None:
        self._ids.add(version_id)

    def snapshot(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    def __contains__(self, version_id: str) -> bool:
        return self.contains(version_id)

    def __len__(self) -> int:
        return len(self._ids)
