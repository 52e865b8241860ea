"""
Bot command collectors and handlers.

Команды регистрируются в CommandRegistry с требуемым правом доступа.
pybotx отдаёт все сообщения в default_message_handler, который
ищет команду в реестре и проверяет право перед вызовом.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

from pybotx import Bot, HandlerCollector, IncomingMessage

from versionwatch.poller.scheduler import Scheduler

logger = logging.getLogger(__name__)

ERROR_REPLY = "An error occurred when processing command, see bot log for more details"


class Capability(enum.Enum):
    ANYONE = "anyone"
    CHAT_ADMIN = "chat_admin"


@dataclass
class CommandContext:
    name: str
    args: List[str]
    is_admin: bool
    reply: Callable[[str], Awaitable[None]]
    scheduler: Optional[Scheduler] = None

    def has_capability(self, capability: Capability) -> bool:
        if capability is Capability.ANYONE:
            return True
        return self.is_admin


CommandHandler = Callable[[CommandContext], Awaitable[None]]


@dataclass
class Command:
    handler: CommandHandler
    capability: Capability
    description: str = ""


@dataclass
class CommandRegistry:
    commands: Dict[str, Command] = field(default_factory=dict)

    def register(self, name: str, capability: Capability, handler: CommandHandler, description: str = "") -> None:
        if name in self.commands:
            raise ValueError(f"duplicate command: {name}")
        self.commands[name] = Command(handler, capability, description)

    def command(self, name: str, capability: Capability = Capability.ANYONE, description: str = ""):
        def decorator(handler: CommandHandler) -> CommandHandler:
            self.register(name, capability, handler, description)
            return handler
        return decorator

    async def dispatch(self, ctx: CommandContext) -> bool:
        """
        Выполнить команду из контекста.

        Returns:
            True если команда найдена и у отправителя есть право её вызвать
        """
        command = self.commands.get(ctx.name)
        if command is None:
            return False

        if not ctx.has_capability(command.capability):
            # Без прав молча игнорируем
            logger.info("Command %s rejected: missing %s capability", ctx.name, command.capability.value)
            return False

        try:
            await command.handler(ctx)
        except Exception:
            logger.exception("An error occurred when processing command %s", ctx.name)
            await ctx.reply(ERROR_REPLY)
        return True


def parse_command(text: Optional[str]):
    """Разобрать "/cmd arg1 arg2" в (cmd, [args]); None если это не команда"""
    parts = (text or "").split()
    if not parts or not parts[0].startswith("/"):
        return None
    return parts[0].lower(), parts[1:]


registry = CommandRegistry()
collector = HandlerCollector()

_scheduler: Optional[Scheduler] = None


def bind_scheduler(scheduler: Optional[Scheduler]) -> None:
    """Сделать планировщик доступным командам (вызывается на старте приложения)"""
    global _scheduler
    _scheduler = scheduler


def format_feed_status(scheduler: Optional[Scheduler]) -> str:
    if scheduler is None:
        return "Version poller is disabled"

    lines = ["Tracked feeds:"]
    for state in scheduler.states:
        status = f"error: {state.last_error}" if state.last_error else "ok"
        lines.append(f"- {state.name}: {len(state.seen)} known versions, {state.notified} announced ({status})")
    return "\n".join(lines)


@registry.command("/feeds", description="List tracked version feeds")
async def feeds_command(ctx: CommandContext) -> None:
    await ctx.reply(format_feed_status(ctx.scheduler))


@registry.command("/checknow", Capability.CHAT_ADMIN, description="Check version feeds right now")
async def checknow_command(ctx: CommandContext) -> None:
    if ctx.scheduler is None:
        await ctx.reply("Version poller is disabled")
        return

    if any(state.busy for state in ctx.scheduler.states):
        await ctx.reply("A version check is already running - try again later!")
        return

    results = await ctx.scheduler.run_once()
    parts = []
    for name, sent in results.items():
        parts.append(f"{name}: {'skipped' if sent is None else sent}")
    lines = ["Check finished, new versions announced: " + ", ".join(parts)]
    for state in ctx.scheduler.states:
        lines.append(f"Latest ({state.name}): {state.latest or 'unknown'}")
    await ctx.reply("\n".join(lines))


@collector.default_message_handler
async def default_handler(message: IncomingMessage, bot: Bot) -> None:
    parsed = parse_command(message.body)
    if parsed is None:
        return

    name, args = parsed

    async def reply(text: str) -> None:
        await bot.answer_message(text)

    ctx = CommandContext(
        name=name,
        args=args,
        is_admin=bool(message.sender.is_chat_admin),
        reply=reply,
        scheduler=_scheduler,
    )
    await registry.dispatch(ctx)
