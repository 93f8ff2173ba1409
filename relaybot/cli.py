"""CLI interface for relaybot."""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

import yaml

from relaybot.core.config import Config, load_config
from relaybot.core.logging import setup_logging
from relaybot.runtime.bot import CommandBot

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="relaybot - chat command dispatcher")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to configuration file (default: config.yaml; built-in defaults if missing)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def resolve_config(path: Path) -> Config:
    """Load the config file, falling back to defaults when it does not exist."""
    if path.exists():
        return load_config(path)
    logger.warning(f"Config file {path} not found, using defaults")
    return Config()


async def wait_channels_closed(bot: CommandBot, stop_event: asyncio.Event) -> None:
    """Set ``stop_event`` once every channel has closed and the queue is idle."""
    await asyncio.gather(*(channel.wait_closed() for channel in bot.channels))
    await bot.queue.join()
    logger.info("All channels closed, stopping...")
    stop_event.set()


async def run_bot(config: Config) -> None:
    """Run the bot until SIGINT or SIGTERM, or until all of its channels close."""
    bot = CommandBot.from_config(config)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def signal_handler() -> None:
        logger.info("Shutdown signal received, stopping...")
        stop_event.set()

    loop.add_signal_handler(signal.SIGINT, signal_handler)
    loop.add_signal_handler(signal.SIGTERM, signal_handler)

    await bot.start()
    closed_watcher = asyncio.create_task(wait_channels_closed(bot, stop_event)) if bot.channels else None
    try:
        await stop_event.wait()
    finally:
        if closed_watcher is not None:
            closed_watcher.cancel()
            try:
                await closed_watcher
            except asyncio.CancelledError:
                pass
        loop.remove_signal_handler(signal.SIGINT)
        loop.remove_signal_handler(signal.SIGTERM)
        await bot.stop()


async def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = resolve_config(args.config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config: {e}")
        sys.exit(1)

    level = "DEBUG" if args.verbose else config.logging.level
    setup_logging(
        level=level,
        directory=config.logging.directory,
        max_size_mb=config.logging.max_size_mb,
        backup_count=config.logging.backup_count,
    )

    await run_bot(config)


def run() -> None:
    """Entry point for console scripts."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
