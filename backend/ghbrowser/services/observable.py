from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")

Subscriber = Callable[[T], None]


class Observable(Generic[T]):
    """Current value plus subscribers, notified synchronously on every ``set``."""

    def __init__(self, value: T):
        self._value = value
        self._subscribers: List[Subscriber] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Subscriber, emit_current: bool = True) -> Callable[[], None]:
        self._subscribers.append(callback)
        if emit_current:
            callback(self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
