import asyncio

import pytest

from apextux.command import Command
from apextux.config import Settings
from apextux.content import ContentProvider
from apextux.framebuffer import Device, FrameBuffer
from apextux.scheduler import Scheduler


def marked(index):
    frame = FrameBuffer()
    frame.set_pixel(index, 0, True)
    return frame


class Marker(ContentProvider):
    def __init__(self, label, index):
        self.label = label
        self.index = index

    async def stream(self):
        while True:
            yield marked(self.index)
            await asyncio.sleep(0.005)

    def name(self):
        return self.label


class Silent(ContentProvider):
    async def stream(self):
        await asyncio.Event().wait()
        yield FrameBuffer()

    def name(self):
        return "silent"


class Broken(ContentProvider):
    def stream(self):
        raise RuntimeError("cannot start")

    def name(self):
        return "broken"


class RecordingDevice(Device):
    def __init__(self, commands, on_draw):
        self.commands = commands
        self.on_draw = on_draw
        self.events = []

    async def draw(self, framebuffer):
        self.events.append(("draw", framebuffer))
        self.on_draw(self, framebuffer)

    async def clear(self):
        self.events.append(("clear", None))

    async def shutdown(self):
        self.events.append(("shutdown", None))

    def draws(self):
        return [frame for kind, frame in self.events if kind == "draw"]


def stop_on_first(device, frame):
    device.commands.put_nowait(Command.SHUTDOWN)


async def run(factories, settings, on_draw, notification_factories=()):
    commands = asyncio.Queue()
    device = RecordingDevice(commands, on_draw)
    scheduler = Scheduler(device)
    scheduler.content_factories = factories
    scheduler.notification_factories = list(notification_factories)
    await asyncio.wait_for(scheduler.start(commands, settings), 5)
    return device


@pytest.mark.asyncio
async def test_shutdown_clears_and_releases_device():
    device = await run([lambda s: Marker("a", 0)], Settings(), stop_on_first)
    assert [kind for kind, _ in device.events[-2:]] == ["clear", "shutdown"]
    assert device.draws()[0] == marked(0)


@pytest.mark.asyncio
async def test_lowest_priority_value_goes_first():
    settings = Settings({"a": {"priority": 5}, "b": {"priority": 1}})
    device = await run(
        [lambda s: Marker("a", 0), lambda s: Marker("b", 1)], settings, stop_on_first
    )
    assert device.draws()[0] == marked(1)


@pytest.mark.asyncio
async def test_disabled_provider_is_skipped():
    settings = Settings({"a": {"enabled": False}})
    device = await run(
        [lambda s: Marker("a", 0), lambda s: Marker("b", 1)], settings, stop_on_first
    )
    assert device.draws()[0] == marked(1)


@pytest.mark.asyncio
@pytest.mark.parametrize("command", [Command.NEXT_SOURCE, Command.PREVIOUS_SOURCE])
async def test_switching_source_clears_and_shows_other_provider(command):
    state = {"sent": False}

    def on_draw(device, frame):
        if not state["sent"]:
            state["sent"] = True
            device.commands.put_nowait(command)
        elif frame == marked(1):
            device.commands.put_nowait(Command.SHUTDOWN)

    device = await run(
        [lambda s: Marker("a", 0), lambda s: Marker("b", 1)], Settings(), on_draw
    )
    kinds = [kind for kind, _ in device.events]
    first_clear = kinds.index("clear")
    after_switch = [frame for kind, frame in device.events[first_clear:-2] if kind == "draw"]
    assert after_switch
    assert all(frame == marked(1) for frame in after_switch)


@pytest.mark.asyncio
async def test_notification_frames_are_drawn_in_order():
    class Note:
        async def stream(self):
            yield marked(2)
            yield marked(3)

    class NoteProvider:
        async def stream(self):
            yield Note()
            await asyncio.Event().wait()

    def on_draw(device, frame):
        if frame == marked(3):
            device.commands.put_nowait(Command.SHUTDOWN)

    device = await run(
        [lambda s: Silent()], Settings(), on_draw, notification_factories=[NoteProvider]
    )
    assert device.draws() == [marked(2), marked(3)]


@pytest.mark.asyncio
async def test_provider_failing_to_start_is_skipped():
    device = await run(
        [lambda s: Broken(), lambda s: Marker("b", 1)], Settings(), stop_on_first
    )
    assert device.draws()[0] == marked(1)


@pytest.mark.asyncio
async def test_without_providers_start_fails():
    with pytest.raises(RuntimeError):
        await run([], Settings(), stop_on_first)


@pytest.mark.asyncio
async def test_all_disabled_start_fails():
    settings = Settings({"a": {"enabled": False}})
    with pytest.raises(RuntimeError):
        await run([lambda s: Marker("a", 0)], settings, stop_on_first)


@pytest.mark.asyncio
async def test_factory_error_propagates():
    def failing(settings):
        raise ValueError("bad config")

    with pytest.raises(ValueError, match="bad config"):
        await run([failing], Settings(), stop_on_first)