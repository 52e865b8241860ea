"""
Ошибки поллера версий.

ConfigError отключает поллер на старте, остальные ошибки относятся
к одному проходу по фиду и логируются планировщиком.
"""


class VersionWatchError(Exception):
    """Базовая ошибка приложения"""


class ConfigError(VersionWatchError):
    """Конфигурация поллера неполная или некорректная"""


class ConfigMissing(ConfigError):
    def __init__(self, name: str):
        super().__init__(f"{name} not configured")
        self.name = name


class ConfigInvalid(ConfigError):
    def __init__(self, name: str, reason: str):
        super().__init__(f"{name} is invalid: {reason}")
        self.name = name


class FetchError(VersionWatchError):
    """Сетевая ошибка или ошибка разбора ответа фида"""


class FetchTimeout(FetchError):
    pass


class ParseError(FetchError):
    pass


class NotifyError(VersionWatchError):
    """Не удалось доставить анонс"""
