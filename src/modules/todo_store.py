"""Simulated todo backend: an in-memory list-of-lists with write-through persistence.

Every operation waits for a simulated network delay, then asks the fault
policy whether it may succeed. Mutations that pass validation are applied,
persisted and broadcast in one uninterrupted step, so concurrent calls can
interleave between operations but never inside a commit.
"""

import asyncio
import copy
import json
import logging
from typing import Any
from typing import Callable
from typing import List
from typing import Optional
from typing import Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.models.messages import ChangeEvent
from src.models.todo import TodoItem
from src.models.todo import TodoList
from src.models.todo import default_todo_lists
from src.modules.blob_store import BlobStore
from src.modules.blob_store import SqlBlobStore
from src.modules.broadcaster import Broadcaster
from src.modules.errors import ServerError
from src.modules.errors import ValidationError
from src.modules.fault_policy import DelayPolicy
from src.modules.fault_policy import FaultPolicy
from src.modules.fault_policy import always_succeed
from src.modules.fault_policy import no_delay
from src.modules.fault_policy import random_delay
from src.modules.fault_policy import success_rate_policy

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "todo-lists"

_lists_adapter = TypeAdapter(List[TodoList])

ItemInput = Union[TodoItem, dict]


class TodoStore:
    """Authoritative holder of all todo lists.

    Args:
        blob_store: Where the serialized lists are read from and written to.
        broadcaster: Receives a change event after every successful mutation.
            A private broadcaster with no listeners is used when omitted.
        fault_policy: Decides per call whether it succeeds. Always succeeds
            when omitted.
        delay_policy: Seconds to wait before each call resolves. No delay
            when omitted.
        storage_key: Blob key holding the serialized lists.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        broadcaster: Optional[Broadcaster] = None,
        fault_policy: Optional[FaultPolicy] = None,
        delay_policy: Optional[DelayPolicy] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        self.blob_store = blob_store
        self.broadcaster = broadcaster or Broadcaster()
        self.fault_policy = fault_policy or always_succeed()
        self.delay_policy = delay_policy or no_delay()
        self.storage_key = storage_key
        self._lists: List[TodoList] = []
        self.reload()

    @property
    def list_count(self) -> int:
        return len(self._lists)

    def reload(self):
        """Load state from the blob store, resetting to the default on bad data."""
        raw = self.blob_store.get(self.storage_key)
        if raw is None:
            logger.info(
                f"No persisted todo lists under {self.storage_key}, using default"
            )
            self._lists = default_todo_lists()
            return

        try:
            self._lists = _lists_adapter.validate_python(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(
                f"Persisted todo lists under {self.storage_key} are malformed,"
                f" resetting to default: {e}"
            )
            self._lists = default_todo_lists()

    async def list_all(self) -> List[TodoList]:
        """Return a deep copy of every list."""
        await self._begin("list_all")
        return [todo_list.model_copy(deep=True) for todo_list in self._lists]

    async def create_list(self, name: str) -> int:
        """Append an empty list named ``name`` and return its index."""
        await self._begin("create_list")
        new_list = self._coerce_list(name)

        def apply() -> ChangeEvent:
            self._lists.append(new_list)
            return ChangeEvent.list_created(new_list.model_copy(deep=True))

        index = len(self._lists)
        self._publish(self._commit(apply))
        logger.info(f"Created list {name!r} at index {index}")
        return index

    async def delete_list(self, index: int) -> bool:
        """Remove the list at ``index``."""
        await self._begin("delete_list")
        self._check_list_index(index)

        def apply() -> ChangeEvent:
            del self._lists[index]
            return ChangeEvent.list_deleted(index)

        self._publish(self._commit(apply))
        logger.info(f"Deleted list {index}")
        return True

    async def add_item(self, list_index: int, item: ItemInput) -> bool:
        """Append a copy of ``item`` to the list at ``list_index``."""
        await self._begin("add_item")
        self._check_list_index(list_index)
        new_item = self._coerce_item(item)

        def apply() -> ChangeEvent:
            self._lists[list_index].items.append(new_item)
            return ChangeEvent.item_added(list_index, new_item.model_copy())

        self._publish(self._commit(apply))
        logger.info(f"Added item to list {list_index}")
        return True

    async def remove_item(self, list_index: int, item_index: int) -> bool:
        """Remove the item at ``item_index`` from the list at ``list_index``."""
        await self._begin("remove_item")
        self._check_item_index(list_index, item_index)

        def apply() -> ChangeEvent:
            del self._lists[list_index].items[item_index]
            return ChangeEvent.item_removed(list_index, item_index)

        self._publish(self._commit(apply))
        logger.info(f"Removed item {item_index} from list {list_index}")
        return True

    async def move_item(
        self, list_index: int, source_index: int, dest_index: int
    ) -> bool:
        """Move an item within a list.

        The item is taken out first and then inserted at ``dest_index`` of the
        shortened list. ``dest_index`` is not range checked: past the end means
        append.
        """
        await self._begin("move_item")
        self._check_item_index(list_index, source_index)
        self._check_int(dest_index)

        def apply() -> ChangeEvent:
            items = self._lists[list_index].items
            items.insert(dest_index, items.pop(source_index))
            return ChangeEvent.item_moved(list_index, source_index, dest_index)

        self._publish(self._commit(apply))
        logger.info(
            f"Moved item {source_index} to {dest_index} in list {list_index}"
        )
        return True

    async def edit_item(
        self, list_index: int, item_index: int, new_value: ItemInput
    ) -> bool:
        """Replace the item at ``item_index`` with a copy of ``new_value``."""
        await self._begin("edit_item")
        self._check_item_index(list_index, item_index)
        replacement = self._coerce_item(new_value)

        def apply() -> ChangeEvent:
            self._lists[list_index].items[item_index] = replacement
            return ChangeEvent.item_edited(
                list_index, item_index, replacement.model_copy()
            )

        self._publish(self._commit(apply))
        logger.info(f"Edited item {item_index} in list {list_index}")
        return True

    async def _begin(self, operation: str):
        """Simulate latency, then sample the fault policy."""
        await asyncio.sleep(self.delay_policy())
        if not self.fault_policy():
            logger.debug(f"{operation} failed by fault injection")
            raise ServerError()

    def _commit(self, apply: Callable[[], ChangeEvent]) -> ChangeEvent:
        """Apply a mutation and persist it, or leave state untouched.

        Returns:
            The change event describing the mutation.
        """
        snapshot = copy.deepcopy(self._lists)
        try:
            event = apply()
            self._persist()
        except Exception as e:
            self._lists = snapshot
            logger.error(f"Commit failed, state rolled back: {str(e)}", exc_info=True)
            raise ServerError() from e
        return event

    def _publish(self, event: ChangeEvent):
        self.broadcaster.publish(event)

    def _persist(self):
        payload = _lists_adapter.dump_python(self._lists, mode="json")
        self.blob_store.set(self.storage_key, json.dumps(payload))

    def _check_int(self, value: Any):
        if not isinstance(value, int) or isinstance(value, bool):
            logger.debug(f"Rejected non-integer index {value!r}")
            raise ValidationError("index must be an integer")

    def _check_list_index(self, list_index: Any):
        self._check_int(list_index)
        if list_index < 0 or list_index >= len(self._lists):
            logger.debug(f"Rejected list index {list_index}")
            raise ValidationError()

    def _check_item_index(self, list_index: Any, item_index: Any):
        self._check_list_index(list_index)
        self._check_int(item_index)
        if item_index < 0 or item_index >= len(self._lists[list_index].items):
            logger.debug(f"Rejected item index {item_index} in list {list_index}")
            raise ValidationError()

    @staticmethod
    def _coerce_item(item: ItemInput) -> TodoItem:
        try:
            if isinstance(item, TodoItem):
                return item.model_copy()
            return TodoItem.model_validate(item, strict=True)
        except PydanticValidationError as e:
            logger.debug(f"Rejected item payload {item!r}: {e}")
            raise ValidationError("invalid item") from e

    @staticmethod
    def _coerce_list(name: Any) -> TodoList:
        try:
            return TodoList.model_validate({"name": name, "items": []}, strict=True)
        except PydanticValidationError as e:
            logger.debug(f"Rejected list name {name!r}: {e}")
            raise ValidationError("invalid name") from e


class TodoStoreExtension:
    """Builds the app's TodoStore from configuration and registered extensions."""

    def __init__(self, app=None):
        self.store: Optional[TodoStore] = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialise the store with the Quart app.

        Requires the ``database`` and ``broadcaster`` extensions.
        """
        database = app.extensions["database"]
        database.create_tables()

        self.store = TodoStore(
            blob_store=SqlBlobStore(database.session_factory),
            broadcaster=app.extensions["broadcaster"],
            fault_policy=success_rate_policy(app.config.get("SUCCESS_RATE", 1.0)),
            delay_policy=random_delay(app.config.get("MAX_DELAY_MS", 1000)),
            storage_key=app.config.get("STORAGE_KEY", DEFAULT_STORAGE_KEY),
        )
        app.extensions["todo_store"] = self.store
        app.logger.info(
            f"Todo store ready with {self.store.list_count} list(s),"
            f" success rate {app.config.get('SUCCESS_RATE', 1.0)}"
        )
