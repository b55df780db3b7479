from __future__ import annotations

from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")


class Observable(Generic[T]):
    """
    A mutable value with change notification.
    ``replace`` swaps the value and calls every subscriber, in the order
    they subscribed, with the new value.
    """

    def __init__(self, initial: T):
        self._value: T = initial
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def replace(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback``; the returned function unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def __repr__(self) -> str:
        return f"Observable({self._value!r})"
