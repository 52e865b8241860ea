import logging
from typing import Optional

import httpx

from versionwatch.errors import FetchError, FetchTimeout

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class Fetcher:
    """
    HTTP GET для фидов версий.

    Возвращает сырое тело ответа, разбор выполняет сам фид.
    transport подменяется в тестах (httpx.MockTransport).
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = httpx.Timeout(timeout, connect=timeout)
        self.transport = transport

    async def fetch(self, url: str) -> bytes:
        """
        Получить тело ответа.

        Raises:
            FetchTimeout: запрос не уложился в таймаут
            FetchError: сетевая ошибка или код ответа не 2xx
        """
        logger.debug("fetch: url=%s", url)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                resp = await client.get(url, headers={"Accept": "application/json"})
                resp.raise_for_status()
                return resp.content
            except httpx.TimeoutException as e:
                raise FetchTimeout(f"timed out fetching {url}") from e
            except httpx.HTTPStatusError as e:
                raise FetchError(f"HTTP error {e.response.status_code} when fetching {url}") from e
            except httpx.HTTPError as e:
                raise FetchError(f"error fetching {url}: {e}") from e
