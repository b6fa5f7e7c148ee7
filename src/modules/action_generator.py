"""Random traffic generator that drives the todo store for demos."""

import asyncio
import logging
import random
import string
from typing import Optional

from src.modules.errors import ApiError

logger = logging.getLogger(__name__)


class RandomActionExecutor:
    """Periodically performs a random action against a TodoStore.

    Only the store's public operations are used, so every action is subject to
    the store's delay, fault injection and validation like any other caller.
    """

    def __init__(self, store, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng or random.Random()
        self.min_period = 1
        self.max_period = 5
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self.actions = [
            self.move_item,
            self.add_item,
            self.create_list,
            self.delete_list,
            self.remove_item,
        ]

    @property
    def running(self) -> bool:
        return self._running

    def launch(self, min_period: int, max_period: int) -> asyncio.Task:
        """Start performing random actions.

        Args:
            min_period: Minimum number of seconds between two actions.
            max_period: Maximum number of seconds between two actions.
        """
        if min_period < 0 or max_period < 0 or min_period >= max_period:
            raise ValueError(
                "min period must be inferior to max period and both must be positive"
            )
        self.min_period = min_period
        self.max_period = max_period
        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Random actions launched every {min_period}-{max_period} seconds"
        )
        return self._task

    def stop(self):
        """Stop scheduling actions and cancel the pending wait."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
        logger.info("Random actions stopped")

    def next_period(self) -> int:
        return self.rng.randrange(self.min_period, self.max_period)

    async def _run(self):
        while self._running:
            await asyncio.sleep(self.next_period())
            if not self._running:
                break
            await self.perform_random_action()

    async def perform_random_action(self):
        action = self.rng.choice(self.actions)
        try:
            await action()
        except ApiError as e:
            logger.info(f"Random action {action.__name__} failed: {e.to_dict()}")

    def _random_word(self, length: int) -> str:
        return "".join(self.rng.choice(string.ascii_lowercase) for _ in range(length))

    async def move_item(self):
        logger.debug("event generator move item")
        lists = await self.store.list_all()
        if not lists:
            return
        list_index = self.rng.randrange(len(lists))
        items = lists[list_index].items
        if len(items) < 2:
            return
        source_index = self.rng.randrange(len(items))
        dest_index = source_index
        while dest_index == source_index:
            dest_index = self.rng.randrange(len(items))
        await self.store.move_item(list_index, source_index, dest_index)

    async def add_item(self):
        logger.debug("event generator add item")
        lists = await self.store.list_all()
        if not lists:
            return
        list_index = self.rng.randrange(len(lists))
        await self.store.add_item(
            list_index,
            {"description": self._random_word(15), "done": self.rng.random() >= 0.5},
        )

    async def create_list(self):
        logger.debug("event generator create list")
        await self.store.create_list(self._random_word(5))

    async def delete_list(self):
        logger.debug("event generator delete list")
        lists = await self.store.list_all()
        if not lists:
            return
        await self.store.delete_list(self.rng.randrange(len(lists)))

    async def remove_item(self):
        logger.debug("event generator remove item")
        lists = await self.store.list_all()
        if not lists:
            return
        list_index = self.rng.randrange(len(lists))
        items = lists[list_index].items
        if not items:
            return
        await self.store.remove_item(list_index, self.rng.randrange(len(items)))
