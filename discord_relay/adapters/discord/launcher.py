"""Launch the health listener and the gateway client in one process."""

import asyncio
import contextlib
import signal
import sys
from typing import Optional

import uvicorn

from discord_relay.adapters.discord.adapter import RelayBot
from discord_relay.adapters.web.server import app
from discord_relay.adapters.webhook.client import WebhookClient
from discord_relay.config import AppConfig, ConfigError


def _log(msg: str):
    print(msg, file=sys.stderr)


class HealthServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the launcher."""

    def install_signal_handlers(self):
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def build_health_server(port: int) -> HealthServer:
    config = uvicorn.Config(app, host="0.0.0.0", port=port, log_level="warning", lifespan="off")
    return HealthServer(config)


async def run(config: AppConfig, stop: Optional[asyncio.Event] = None) -> bool:
    """Serve until a shutdown signal or a crash.

    Returns True only for a signal-initiated shutdown.
    """
    bot = RelayBot(config, WebhookClient.from_config(config))
    health = build_health_server(config.health_port)
    if stop is None:
        stop = asyncio.Event()
    signals = (signal.SIGINT, signal.SIGTERM)

    loop = asyncio.get_running_loop()
    for sig in signals:
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, _on_signal, sig, stop)

    health_task = asyncio.create_task(health.serve(), name="health-server")
    bot_task = asyncio.create_task(bot.start(config.discord_token), name="discord-gateway")
    _log(f"[health] listening on :{config.health_port}")

    stop_task = asyncio.create_task(stop.wait())
    done, _ = await asyncio.wait(
        {health_task, bot_task, stop_task}, return_when=asyncio.FIRST_COMPLETED
    )

    clean = stop_task in done
    for task in (health_task, bot_task):
        if task not in done or task.cancelled():
            continue
        clean = False
        error = task.exception()
        if error is not None:
            _log(f"[system] {task.get_name()} crashed: {error!r}")
        else:
            _log(f"[system] {task.get_name()} stopped unexpectedly")

    health.should_exit = True
    if not health_task.done():
        with contextlib.suppress(asyncio.CancelledError):
            await health_task
    _log("[system] health server closed")
    await bot.close()
    _log("[system] gateway connection closed")
    for task in (stop_task, bot_task):
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
    for sig in signals:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(sig)
    return clean


def _on_signal(sig: signal.Signals, stop: asyncio.Event):
    _log(f"[system] {sig.name} received, shutting down...")
    stop.set()


def main():
    try:
        config = AppConfig.from_env()
    except ConfigError as e:
        _log(f"[FATAL] {e}")
        sys.exit(1)
    if not asyncio.run(run(config)):
        sys.exit(1)


if __name__ == "__main__":
    main()
