"""
Presentation states exposed by the sync services.

Every operation of a sync service owns one StateSlot. A slot holds the
latest value and notifies subscribers whenever it changes; the UI renders
from slot values and issues new intents in response.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, TypeVar

from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Status(str, Enum):
    INITIAL = "initial"
    LOADING = "loading"
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class State(Generic[T]):
    """One observable status of an operation, with its payload or error."""
    status: Status
    data: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def initial(cls) -> "State[T]":
        return cls(Status.INITIAL)

    @classmethod
    def loading(cls) -> "State[T]":
        return cls(Status.LOADING)

    @classmethod
    def empty(cls) -> "State[T]":
        return cls(Status.EMPTY)

    @classmethod
    def not_found(cls) -> "State[T]":
        return cls(Status.NOT_FOUND)

    @classmethod
    def success(cls, data: Optional[T] = None) -> "State[T]":
        return cls(Status.SUCCESS, data=data)

    @classmethod
    def error(cls, message: str) -> "State[T]":
        return cls(Status.ERROR, message=message)

    @classmethod
    def from_items(cls, items: list) -> "State[list]":
        """Empty for no items, Success otherwise."""
        return cls.success(items) if items else cls.empty()

    @property
    def is_success(self) -> bool:
        return self.status is Status.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is Status.ERROR


class StateSlot(Generic[T]):
    """
    Holds the current value of one piece of exposed state.

    Writes are last-write-wins. Subscribers are called synchronously, in
    subscription order, with every new value.
    """

    def __init__(self, name: str, initial: T):
        self.name = name
        self._value = initial
        self._lock = threading.RLock()
        self._subscribers: List[Callable[[T], Any]] = []

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value
            subscribers = list(self._subscribers)
        self._notify(subscribers, value)

    def update(self, fn: Callable[[T], T]) -> T:
        """Atomically replace the value with ``fn(current)``."""
        with self._lock:
            value = fn(self._value)
            self._value = value
            subscribers = list(self._subscribers)
        self._notify(subscribers, value)
        return value

    def subscribe(self, callback: Callable[[T], Any], replay: bool = True) -> Callable[[], None]:
        """
        Register ``callback`` for value changes.

        Args:
            callback: Called with each new value
            replay: Also call it right away with the current value

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)
            current = self._value

        if replay:
            self._notify([callback], current)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, subscribers: List[Callable[[T], Any]], value: T) -> None:
        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                logger.exception("State subscriber failed", slot=self.name)
