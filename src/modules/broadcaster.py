"""Broadcaster fans committed store changes out to subscribed listeners."""

import asyncio
import inspect
import logging
import traceback
from typing import Callable
from typing import List

from src.models.messages import ChangeEvent
from src.models.messages import SequencedMessage

logger = logging.getLogger(__name__)

Listener = Callable[[SequencedMessage], object]


class Broadcaster:
    """Stamps change events with a sequence id and delivers them to listeners.

    Delivery is synchronous and follows registration order. The sequence id
    starts at 0 and grows by one for every published event, whether or not
    anyone is listening.
    """

    def __init__(self, app=None):
        """Initialise the Broadcaster.

        Args:
            app (Quart, optional): The Quart application instance.
        """
        self.listeners: List[Listener] = []
        self.sequence_id = 0
        self._background_tasks: set = set()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialise the Broadcaster with the Quart app.

        Args:
            app (Quart): The Quart application instance.
        """
        app.extensions["broadcaster"] = self

    @property
    def listener_count(self) -> int:
        return len(self.listeners)

    def subscribe(self, listener: Listener) -> Listener:
        """Register a listener.

        The same listener registered twice receives every message twice.
        Returns the listener so this can be used as a decorator.
        """
        self.listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener):
        """Remove every registration of ``listener``. Unknown listeners are ignored."""
        self.listeners = [
            current for current in self.listeners if current is not listener
        ]

    def publish(self, event: ChangeEvent) -> SequencedMessage:
        """Deliver ``event`` to every listener registered when the call starts.

        Args:
            event: The change produced by a store commit.

        Returns:
            The sequenced message that was dispatched.
        """
        message = SequencedMessage.stamp(self.sequence_id, event)
        self.sequence_id += 1

        for listener in list(self.listeners):
            # Listeners removed by an earlier listener in this dispatch are skipped
            if not any(current is listener for current in self.listeners):
                continue
            self._deliver(listener, message)

        return message

    def _deliver(self, listener: Listener, message: SequencedMessage):
        try:
            result = listener(message.model_copy(deep=True))
            if inspect.iscoroutine(result):
                task = asyncio.create_task(result)
                self._background_tasks.add(task)
                task.add_done_callback(self._background_tasks.discard)
                task.add_done_callback(self._handle_task_exception)
        except Exception as e:
            tb = traceback.format_exc()
            logger.error(
                f"Error delivering message {message.sequence_id} ({message.type.value})"
                f" to listener {listener!r}: {str(e)}\n"
                f"Traceback:\n{tb}"
            )

    def _handle_task_exception(self, task: asyncio.Future):
        """Handle exceptions from coroutine listeners running in the background."""
        try:
            task.result()  # This will raise if the task failed
        except asyncio.CancelledError:
            pass  # Task was cancelled, ignore
        except Exception as e:
            tb = "".join(traceback.format_exception(e))
            logger.error(
                f"Exception in background listener task: {str(e)}\n"
                f"Traceback:\n{tb}"
            )
