"""Change events emitted by the store and the sequenced broadcast envelope."""

from enum import Enum
from typing import Any
from typing import Dict
from typing import Union

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from src.models.todo import TodoItem
from src.models.todo import TodoList


class MessageKind(str, Enum):
    """Kinds of store mutation, using their wire names."""

    CREATE_LIST = "createList"
    DELETE_LIST = "deleteList"
    ADD_ITEM = "addToDo"
    REMOVE_ITEM = "removeTodo"
    MOVE_ITEM = "moveTodo"
    EDIT_ITEM = "editTodo"


class WireModel(BaseModel):
    """Base for payloads serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListDeleted(WireModel):
    index: int


class ItemAdded(WireModel):
    list_index: int
    item: TodoItem


class ItemRemoved(WireModel):
    list_index: int
    item_index: int


class ItemMoved(WireModel):
    list_index: int
    source_index: int
    dest_index: int


class ItemEdited(WireModel):
    list_index: int
    item_index: int
    new_value: TodoItem


Payload = Union[TodoList, ListDeleted, ItemAdded, ItemRemoved, ItemMoved, ItemEdited]

PAYLOAD_MODELS = {
    MessageKind.CREATE_LIST: TodoList,
    MessageKind.DELETE_LIST: ListDeleted,
    MessageKind.ADD_ITEM: ItemAdded,
    MessageKind.REMOVE_ITEM: ItemRemoved,
    MessageKind.MOVE_ITEM: ItemMoved,
    MessageKind.EDIT_ITEM: ItemEdited,
}


class ChangeEvent(WireModel):
    """Description of one committed mutation, before it is sequenced."""

    type: MessageKind
    message: Payload

    @classmethod
    def list_created(cls, todo_list: TodoList) -> "ChangeEvent":
        return cls(type=MessageKind.CREATE_LIST, message=todo_list)

    @classmethod
    def list_deleted(cls, index: int) -> "ChangeEvent":
        return cls(type=MessageKind.DELETE_LIST, message=ListDeleted(index=index))

    @classmethod
    def item_added(cls, list_index: int, item: TodoItem) -> "ChangeEvent":
        return cls(
            type=MessageKind.ADD_ITEM,
            message=ItemAdded(list_index=list_index, item=item),
        )

    @classmethod
    def item_removed(cls, list_index: int, item_index: int) -> "ChangeEvent":
        return cls(
            type=MessageKind.REMOVE_ITEM,
            message=ItemRemoved(list_index=list_index, item_index=item_index),
        )

    @classmethod
    def item_moved(
        cls, list_index: int, source_index: int, dest_index: int
    ) -> "ChangeEvent":
        return cls(
            type=MessageKind.MOVE_ITEM,
            message=ItemMoved(
                list_index=list_index,
                source_index=source_index,
                dest_index=dest_index,
            ),
        )

    @classmethod
    def item_edited(
        cls, list_index: int, item_index: int, new_value: TodoItem
    ) -> "ChangeEvent":
        return cls(
            type=MessageKind.EDIT_ITEM,
            message=ItemEdited(
                list_index=list_index, item_index=item_index, new_value=new_value
            ),
        )


class SequencedMessage(ChangeEvent):
    """A change event stamped with the broadcaster's sequence id."""

    sequence_id: int

    @classmethod
    def stamp(cls, sequence_id: int, event: ChangeEvent) -> "SequencedMessage":
        """Wrap an event, copying the payload so listeners cannot alter the source."""
        return cls(
            sequence_id=sequence_id,
            type=event.type,
            message=event.message.model_copy(deep=True),
        )

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON-ready envelope: sequenceId, type and message."""
        return {
            "sequenceId": self.sequence_id,
            "type": self.type.value,
            "message": self.message.model_dump(by_alias=True),
        }

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "SequencedMessage":
        """Parse an envelope, using its type to pick the payload model."""
        kind = MessageKind(data["type"])
        payload = PAYLOAD_MODELS[kind].model_validate(data["message"])
        return cls(sequence_id=data["sequenceId"], type=kind, message=payload)
