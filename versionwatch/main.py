import logging
from http import HTTPStatus
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pybotx import build_bot_disabled_response, build_command_accepted_response

from versionwatch.config import settings
from versionwatch.bot.setup import create_bot
from versionwatch.bot.helpers import make_announcement_sink
from versionwatch.bot.commands import bind_scheduler
from versionwatch.errors import ConfigError, FetchError
from versionwatch.poller.scheduler import Scheduler
from versionwatch.poller.setup import setup_poller

# Настройка логирования
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Инициализация FastAPI
app = FastAPI(
    title="Version Watch Bot",
    version="1.0.0",
    description="Bot announcing new Minecraft and issue tracker versions via Express"
)

# Инициализация бота
bot = create_bot()

# Поллер версий; None если отключён конфигурацией или не смог стартовать
scheduler: Optional[Scheduler] = None


async def start_poller() -> Optional[Scheduler]:
    """Поднять поллер версий. Ошибки отключают только поллер, не приложение."""
    if not settings.poller_enabled:
        logger.info("MINECRAFT_CHAT_IDS not set, version poller disabled")
        return None

    try:
        poller = await setup_poller(settings, lambda chat_ids: make_announcement_sink(bot, chat_ids))
    except ConfigError as e:
        logger.error("Failed to setup version check: %s", e)
        return None
    except FetchError as e:
        logger.error("Failed to load initial versions, version poller disabled: %s", e)
        return None

    return poller.start()


# Startup / Shutdown
@app.on_event("startup")
async def on_startup():
    global scheduler
    logger.info("Starting Version Watch Bot...")
    await bot.startup()

    scheduler = await start_poller()
    bind_scheduler(scheduler)


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("Shutting down Version Watch Bot...")
    if scheduler is not None:
        scheduler.stop()
    await bot.shutdown()


# BotX API endpoints
@app.post("/command")
async def command_handler(request: Request) -> JSONResponse:
    """Конечная точка для получения команд от Express/BotX."""
    try:
        bot.async_execute_raw_bot_command(await request.json(), request_headers=request.headers)
    except ValueError:
        logger.exception("Bot command validation error")
        return JSONResponse(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            content=build_bot_disabled_response("Bot command validation error"),
        )
    return JSONResponse(status_code=HTTPStatus.ACCEPTED, content=build_command_accepted_response())


@app.post("/notification/callback")
async def callback_handler(request: Request) -> JSONResponse:
    """Callback для асинхронных операций от BotX/Express"""
    await bot.set_raw_botx_method_result(await request.json(), verify_request=False)
    return JSONResponse(status_code=HTTPStatus.ACCEPTED, content=build_command_accepted_response())


@app.get("/status")
async def http_status(request: Request) -> JSONResponse:
    """Статус бота для Express"""
    status = await bot.raw_get_status(dict(request.query_params), request_headers=request.headers)
    return JSONResponse(status)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check для Kubernetes/Docker"""
    return JSONResponse({
        "status": "healthy",
        "service": "version-watch-bot",
        "poller": "running" if scheduler is not None and scheduler.running else "disabled",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


# ============================================================================
# Feed API endpoints: состояние поллера и ручная проверка
# ============================================================================

@app.get("/api/feeds")
async def get_feeds_http() -> JSONResponse:
    """
    GET /api/feeds

    Состояние отслеживаемых фидов: сколько версий известно, сколько анонсов
    отправлено, последняя ошибка.
    """
    if scheduler is None:
        return JSONResponse(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            content={"status": "error", "detail": "version poller is disabled"}
        )
    return JSONResponse(
        status_code=HTTPStatus.OK,
        content={
            "status": "ok",
            "running": scheduler.running,
            "interval": scheduler.interval,
            "feeds": [state.summary() for state in scheduler.states],
        }
    )


@app.post("/api/feeds/check")
async def check_feeds_http() -> JSONResponse:
    """
    POST /api/feeds/check

    Выполнить проверку всех фидов сейчас, не дожидаясь тика.
    null в результате означает, что фид был занят или проверка упала.
    """
    if scheduler is None:
        return JSONResponse(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            content={"status": "error", "detail": "version poller is disabled"}
        )
    try:
        results = await scheduler.run_once()
        return JSONResponse(status_code=HTTPStatus.OK, content={"status": "ok", "announced": results})
    except Exception:
        logger.exception("Error in check_feeds_http")
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"status": "error", "detail": "Internal server error"}
        )
