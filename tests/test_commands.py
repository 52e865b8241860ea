import asyncio

import pytest

from versionwatch.bot import commands
from versionwatch.bot.commands import Capability, CommandContext, CommandRegistry


class Replies:
    def __init__(self):
        self.texts = []

    async def __call__(self, text):
        self.texts.append(text)


def _ctx(name, is_admin=False, scheduler=None, args=()):
    return CommandContext(name=name, args=list(args), is_admin=is_admin, reply=Replies(), scheduler=scheduler)


@pytest.mark.parametrize(
    "text,expect",
    [
        ("/feeds", ("/feeds", [])),
        ("/CheckNow  now please", ("/checknow", ["now", "please"])),
        ("hello /feeds", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_command(text, expect):
    assert commands.parse_command(text) == expect


def test_duplicate_registration_is_rejected():
    registry = CommandRegistry()

    async def handler(ctx):
        pass

    registry.register("/ping", Capability.ANYONE, handler)
    with pytest.raises(ValueError):
        registry.register("/ping", Capability.CHAT_ADMIN, handler)


def test_permission_gate():
    registry = CommandRegistry()
    calls = []

    @registry.command("/purge", Capability.CHAT_ADMIN)
    async def purge(ctx):
        calls.append(ctx.name)

    assert asyncio.run(registry.dispatch(_ctx("/purge", is_admin=False))) is False
    assert calls == []
    assert asyncio.run(registry.dispatch(_ctx("/purge", is_admin=True))) is True
    assert calls == ["/purge"]


def test_unknown_command_is_ignored():
    assert asyncio.run(CommandRegistry().dispatch(_ctx("/nope"))) is False


def test_handler_error_is_reported_to_user():
    registry = CommandRegistry()

    @registry.command("/boom")
    async def boom(ctx):
        raise RuntimeError("boom")

    ctx = _ctx("/boom")
    assert asyncio.run(registry.dispatch(ctx)) is True
    assert ctx.reply.texts == [commands.ERROR_REPLY]


def test_builtin_commands_registered():
    assert commands.registry.commands["/feeds"].capability is Capability.ANYONE
    assert commands.registry.commands["/checknow"].capability is Capability.CHAT_ADMIN


def test_feeds_without_poller():
    ctx = _ctx("/feeds")

    asyncio.run(commands.registry.dispatch(ctx))

    assert ctx.reply.texts == ["Version poller is disabled"]


class FakeState:
    def __init__(self, name, seen, notified, last_error=None, latest=None):
        self.name = name
        self.seen = set(range(seen))
        self.notified = notified
        self.last_error = last_error
        self.latest = latest
        self.busy = False


class FakeScheduler:
    def __init__(self):
        self.states = [FakeState("jira", 3, 1, latest="1.16.5"), FakeState("minecraft", 5, 0, "HTTP error 503")]
        self.runs = 0

    async def run_once(self):
        self.runs += 1
        return {"jira": 2, "minecraft": None}


def test_feeds_lists_status():
    ctx = _ctx("/feeds", scheduler=FakeScheduler())

    asyncio.run(commands.registry.dispatch(ctx))

    assert ctx.reply.texts == [
        "Tracked feeds:\n"
        "- jira: 3 known versions, 1 announced (ok)\n"
        "- minecraft: 5 known versions, 0 announced (error: HTTP error 503)"
    ]


def test_checknow_requires_admin_and_runs_a_pass():
    scheduler = FakeScheduler()

    denied = _ctx("/checknow", scheduler=scheduler)
    asyncio.run(commands.registry.dispatch(denied))
    assert scheduler.runs == 0
    assert denied.reply.texts == []

    allowed = _ctx("/checknow", is_admin=True, scheduler=scheduler)
    asyncio.run(commands.registry.dispatch(allowed))
    assert scheduler.runs == 1
    assert allowed.reply.texts == [
        "Check finished, new versions announced: jira: 2, minecraft: skipped\n"
        "Latest (jira): 1.16.5\n"
        "Latest (minecraft): unknown"
    ]


def test_checknow_refuses_while_a_check_is_running():
    scheduler = FakeScheduler()
    scheduler.states[1].busy = True
    ctx = _ctx("/checknow", is_admin=True, scheduler=scheduler)

    asyncio.run(commands.registry.dispatch(ctx))

    assert scheduler.runs == 0
    assert ctx.reply.texts == ["A version check is already running - try again later!"]
