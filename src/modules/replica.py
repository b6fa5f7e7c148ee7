"""Listener-side mirror of the store, kept current from broadcast messages."""

import logging
from typing import List
from typing import Optional
from typing import Tuple

from src.models.messages import MessageKind
from src.models.messages import SequencedMessage
from src.models.todo import TodoList

logger = logging.getLogger(__name__)


def apply_message(lists: List[TodoList], message: SequencedMessage):
    """Apply one broadcast change to ``lists`` in place, as the store did."""
    payload = message.message
    if message.type == MessageKind.CREATE_LIST:
        lists.append(payload.model_copy(deep=True))
    elif message.type == MessageKind.DELETE_LIST:
        del lists[payload.index]
    elif message.type == MessageKind.ADD_ITEM:
        lists[payload.list_index].items.append(payload.item.model_copy())
    elif message.type == MessageKind.REMOVE_ITEM:
        del lists[payload.list_index].items[payload.item_index]
    elif message.type == MessageKind.MOVE_ITEM:
        items = lists[payload.list_index].items
        items.insert(payload.dest_index, items.pop(payload.source_index))
    elif message.type == MessageKind.EDIT_ITEM:
        items = lists[payload.list_index].items
        items[payload.item_index] = payload.new_value.model_copy()
    else:
        raise ValueError(f"Unknown message type: {message.type}")


class TodoReplica:
    """Keeps a local copy of the todo lists in step with a broadcaster.

    A replica starts from a snapshot (usually ``store.list_all()``) and applies
    every message it receives. Ids that do not follow the last one seen are
    recorded as gaps and mark the replica stale until ``resync`` is awaited.
    """

    def __init__(self, broadcaster, lists: Optional[List[TodoList]] = None):
        self.broadcaster = broadcaster
        self.lists: List[TodoList] = [
            todo_list.model_copy(deep=True) for todo_list in lists or []
        ]
        self.last_sequence_id: Optional[int] = None
        self.gaps: List[Tuple[int, int]] = []
        self.stale = False
        # unsubscribe matches by identity, and each self.on_message is a new object
        self._listener = self.broadcaster.subscribe(self.on_message)

    def on_message(self, message: SequencedMessage):
        if self.last_sequence_id is not None:
            expected = self.last_sequence_id + 1
            if message.sequence_id != expected:
                logger.warning(
                    f"Replica expected message {expected}, got {message.sequence_id}"
                )
                self.gaps.append((expected, message.sequence_id))
                self.stale = True
        self.last_sequence_id = message.sequence_id

        if self.stale:
            return
        try:
            apply_message(self.lists, message)
        except (IndexError, ValueError) as e:
            logger.warning(f"Replica could not apply {message.type.value}: {e}")
            self.stale = True

    async def resync(self, store):
        """Replace the local copy with a fresh snapshot from ``store``."""
        self.lists = await store.list_all()
        self.stale = False
        logger.info(f"Replica resynced with {len(self.lists)} list(s)")

    def detach(self):
        self.broadcaster.unsubscribe(self._listener)
