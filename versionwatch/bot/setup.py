import logging
from uuid import UUID

from pybotx import Bot, BotAccountWithSecret

from versionwatch.bot.commands import collector
from versionwatch.config import settings

logger = logging.getLogger(__name__)


def create_bot() -> Bot:
    """Создание бота с одним аккаунтом из настроек"""
    try:
        bot_id = UUID(settings.botx_bot_id)
    except ValueError as e:
        logger.error("Invalid BOTX_BOT_ID: %s", settings.botx_bot_id)
        raise ValueError(f"Invalid BOTX_BOT_ID: {e}") from e

    account = BotAccountWithSecret(
        id=bot_id,
        cts_url=settings.botx_host,
        secret_key=settings.botx_secret_key,
    )
    return Bot(collectors=[collector], bot_accounts=[account])
