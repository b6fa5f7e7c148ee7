import asyncio
import signal

from src import create_app
from src.modules.action_generator import RandomActionExecutor

app = create_app()


def log_message(message):
    """Log every broadcast message in its wire shape."""
    app.logger.info(f"Broadcast: {message.to_wire()}")


def setup_signal_handlers(stop_event: asyncio.Event):
    """Set up signal handlers for graceful shutdown."""
    loop = asyncio.get_running_loop()

    def signal_handler(signum):
        app.logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        stop_event.set()

    for signum in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(signum, signal_handler, signum)


async def run_simulation():
    """Drive the store with random actions until a shutdown signal arrives."""
    store = app.extensions["todo_store"]
    broadcaster = app.extensions["broadcaster"]
    broadcaster.subscribe(log_message)

    stop_event = asyncio.Event()
    setup_signal_handlers(stop_event)

    executor = RandomActionExecutor(store)
    executor.launch(
        app.config["SIMULATION_MIN_PERIOD"], app.config["SIMULATION_MAX_PERIOD"]
    )
    try:
        await stop_event.wait()
    finally:
        executor.stop()
        broadcaster.unsubscribe(log_message)
        app.extensions["database"].close()


if __name__ == "__main__":
    app.logger.info("Starting todo backend simulation")
    try:
        asyncio.run(run_simulation())
    except KeyboardInterrupt:
        app.logger.info("Shutdown signal received, stopping simulation")
    finally:
        app.logger.info("Simulation stopped")
