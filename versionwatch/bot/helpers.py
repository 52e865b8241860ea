"""
Вспомогательные функции для отправки сообщений боту в конкретные чаты.
"""
import logging
from typing import Awaitable, Callable, List, Sequence
from uuid import UUID

from pybotx import Bot

from versionwatch.config import settings
from versionwatch.errors import NotifyError

logger = logging.getLogger(__name__)


async def send_message_to_chat(
    bot: Bot,
    chat_id: str,
    text: str,
) -> bool:
    """
    Отправить сообщение в конкретный чат.

    Args:
        bot: Экземпляр Bot из pybotx
        chat_id: UUID чата в виде строки
        text: Текст сообщения

    Returns:
        True если сообщение отправлено, False если ошибка
    """
    try:
        try:
            chat_uuid = UUID(chat_id)
        except ValueError:
            logger.error("Invalid chat_id format (not a UUID): %s", chat_id)
            return False

        try:
            bot_uuid = UUID(settings.botx_bot_id)
        except ValueError:
            logger.exception("Invalid BOTX_BOT_ID in settings: %s", settings.botx_bot_id)
            return False

        logger.debug("Sending message to chat. bot_id=%s chat_id=%s body=%s", bot_uuid, chat_uuid, text)

        # sync_id пишем в лог, чтобы можно было отследить доставку
        sync_id = await bot.send_message(
            bot_id=bot_uuid,
            chat_id=chat_uuid,
            body=text,
            wait_callback=settings.botx_wait_callback,
        )
        logger.info("bot.send_message returned sync_id=%s for chat=%s", sync_id, chat_uuid)
        return True
    except Exception:
        logger.exception("Error sending message to chat %s", chat_id)
        return False


def make_announcement_sink(bot: Bot, chat_ids: Sequence[str]) -> Callable[[str], Awaitable[None]]:
    """
    Собрать функцию отправки анонса во все чаты фида.

    Анонс считается доставленным, если его принял хотя бы один чат,
    иначе поднимается NotifyError и проход по фиду прерывается.
    """
    targets: List[str] = list(chat_ids)

    async def announce(text: str) -> None:
        if not targets:
            raise NotifyError("no chats configured for announcement")

        delivered = 0
        for chat_id in targets:
            if await send_message_to_chat(bot, chat_id, text):
                delivered += 1

        if delivered == 0:
            raise NotifyError(f"announcement was not delivered to any of {len(targets)} chats")
        if delivered < len(targets):
            logger.warning("Announcement delivered to %d of %d chats", delivered, len(targets))

    return announce
