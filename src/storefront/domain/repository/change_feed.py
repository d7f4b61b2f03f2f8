"""Row-level change notifications from the backing store.

Repositories publish a ChangeEvent for every insert, update and delete.
Observers subscribe to one table, optionally narrowed by column values,
and get back a Subscription they must cancel when they are done.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ChangeKind(Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: ChangeKind
    new: Any = None
    old: Any = None

    @property
    def record(self) -> Any:
        """The row the event is about: ``new`` unless it was deleted."""
        return self.old if self.kind is ChangeKind.DELETE else self.new

    def matches(self, where: dict[str, Any] | None) -> bool:
        if not where:
            return True
        record = self.record
        return all(getattr(record, col, None) == value for col, value in where.items())


ChangeHandler = Callable[[ChangeEvent], None]


class Subscription(ABC):

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivery.  Calling it more than once is harmless."""

    @property
    @abstractmethod
    def active(self) -> bool:
        """False once unsubscribed."""

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class ChangeFeed(ABC):

    @abstractmethod
    def subscribe(
        self,
        table: str,
        handler: ChangeHandler,
        where: dict[str, Any] | None = None,
    ) -> Subscription:
        """Deliver matching events for ``table`` to ``handler``."""

    @abstractmethod
    def publish(self, event: ChangeEvent) -> None:
        """Queue an event for every matching subscriber.

        Events are delivered in publish order.  An event published while
        another is being delivered waits until that delivery finishes.
        """
