"""Todo list models shared by the store, the broadcaster and listeners."""

from typing import List

from pydantic import BaseModel
from pydantic import Field

DEFAULT_LIST_NAME = "my first list"


class TodoItem(BaseModel):
    """A single todo entry, identified only by its position in a list."""

    description: str
    done: bool = False


class TodoList(BaseModel):
    """A named, ordered sequence of todo items."""

    name: str
    items: List[TodoItem] = Field(default_factory=list)


def default_todo_lists() -> List[TodoList]:
    """Return the state a store starts from when nothing usable is persisted."""
    return [TodoList(name=DEFAULT_LIST_NAME)]
