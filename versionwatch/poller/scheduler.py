import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Set

from versionwatch.errors import FetchError, NotifyError
from versionwatch.poller.engine import FeedState, check

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0


class Scheduler:
    """
    Периодический запуск проверки фидов.

    Каждый тик запускает по задаче на фид, фиды проверяются параллельно.
    Если предыдущий проход по фиду ещё идёт, фид в этом тике пропускается.
    """

    def __init__(self, states: Sequence[FeedState], interval: float = DEFAULT_INTERVAL):
        if interval <= 0:
            raise ValueError("interval must be greater than zero")
        self.states: List[FeedState] = list(states)
        self.interval = interval
        self._ticker: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    def get_state(self, name: str) -> Optional[FeedState]:
        for state in self.states:
            if state.name == name:
                return state
        return None

    def start(self) -> "Scheduler":
        if self.running:
            logger.warning("Scheduler already running")
            return self
        self._ticker = asyncio.create_task(self._tick_loop())
        logger.info(
            "Version poller started: feeds=%s, interval=%ss",
            [s.name for s in self.states], self.interval
        )
        return self

    def stop(self) -> None:
        """Остановить тики. Уже запущенные проходы доработают сами."""
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
            logger.info("Version poller stopped (%d passes still in flight)", len(self._in_flight))

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def tick(self) -> Dict[str, asyncio.Task]:
        """Запустить проход по каждому свободному фиду, не дожидаясь результата."""
        tasks: Dict[str, asyncio.Task] = {}
        for state in self.states:
            if state.busy:
                logger.warning("Previous %s check still running, skipping this tick", state.name)
                continue
            # busy ставится до создания задачи, чтобы следующий тик его увидел
            state.busy = True
            task = asyncio.create_task(self._run_feed(state))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            tasks[state.name] = task
        return tasks

    async def run_once(self) -> Dict[str, Optional[int]]:
        """
        Выполнить один проход по всем фидам и дождаться результата.

        Returns:
            Словарь feed -> количество анонсов; None если проход пропущен
            (фид занят) или завершился ошибкой
        """
        tasks = self.tick()
        results: Dict[str, Optional[int]] = {state.name: None for state in self.states}
        if tasks:
            done = await asyncio.gather(*tasks.values())
            results.update(zip(tasks.keys(), done))
        return results

    async def _run_feed(self, state: FeedState) -> Optional[int]:
        try:
            sent = await check(state)
            state.last_error = None
            if sent:
                logger.info("Announced %d new %s versions", sent, state.name)
            return sent
        except FetchError as e:
            state.last_error = str(e)
            logger.warning("Failed to fetch %s versions: %s", state.name, e)
        except NotifyError as e:
            state.last_error = str(e)
            logger.error("Failed to announce %s versions: %s", state.name, e)
        except Exception as e:
            state.last_error = str(e)
            logger.exception("Unexpected error while checking %s versions", state.name)
        finally:
            state.busy = False
        return None
