"""Command line entry: load settings, open the display and run the scheduler."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys
from collections.abc import Sequence
from pathlib import Path

from apextux.command import Command
from apextux.config import Settings, load_settings
from apextux.framebuffer import Device
from apextux.providers import clock, coindesk, image, sysinfo  # noqa: F401  registers providers
from apextux.scheduler import Scheduler

logger = logging.getLogger(__name__)

APP_DIR = "apex-tux"
SETTINGS_NAME = "settings"


def _user_config_dir() -> Path | None:
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else None
    try:
        home = Path.home()
    except RuntimeError:
        home = None
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" if home else None
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    return home / ".config" if home else None


def default_settings_paths() -> list[Path]:
    """The user's settings file first, then ``settings`` in the working directory."""
    paths = []
    config_dir = _user_config_dir()
    if config_dir is not None:
        paths.append(config_dir / APP_DIR / SETTINGS_NAME)
    paths.append(Path(SETTINGS_NAME))
    return paths


async def run(device: Device, settings: Settings) -> None:
    """Drive ``device`` until shut down by a command or by Ctrl+C.

    Commands are read from the device's ``commands`` queue when it has one.
    """
    commands = getattr(device, "commands", None)
    if commands is None:
        commands = asyncio.Queue()

    await device.clear()

    loop = asyncio.get_running_loop()

    def interrupt() -> None:
        logger.info("Ctrl + C received, shutting down!")
        commands.put_nowait(Command.SHUTDOWN)

    try:
        loop.add_signal_handler(signal.SIGINT, interrupt)
        handler_installed = True
    except (NotImplementedError, RuntimeError, ValueError):
        handler_installed = False

    try:
        await Scheduler(device).start(commands, settings)
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apextux", description="Show clocks, prices and more on a keyboard display."
    )
    parser.add_argument("--scale", type=int, default=4, help="simulator window scale")
    parser.add_argument(
        "--debug", action="store_true", help="add a moving test pattern as a source"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    if args.debug:
        from apextux.providers import debug  # noqa: F401  registers the test pattern

    from apextux.simulator import Simulator

    settings = load_settings(default_settings_paths())
    device = Simulator(asyncio.Queue(), scale=args.scale)
    asyncio.run(run(device, settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())