"""
Reactive state primitive for client-side stores.

A StateNode holds one value and notifies its subscribers synchronously
whenever the value is written. Only the owning store keeps the writable
node; everything else receives a ReadOnlyState view.
"""

import logging
from typing import Any, Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[T], None]
Unsubscribe = Callable[[], None]


class ReadOnlyState(Generic[T]):
    """Read-only view of a StateNode."""

    __slots__ = ("_node",)

    def __init__(self, node: "StateNode[T]") -> None:
        self._node = node

    @property
    def value(self) -> T:
        return self._node.value

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        """Call ``callback`` with every new value; returns an unsubscribe function."""
        return self._node.subscribe(callback)

    def __repr__(self) -> str:
        return f"ReadOnlyState({self._node.value!r})"


class StateNode(Generic[T]):
    """
    Single observable value.

    Writes notify every subscriber before ``set`` returns, in subscription
    order. A failing subscriber is logged and does not stop the others.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: List[Subscriber] = []
        self._view = ReadOnlyState(self)

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception(
                    "State subscriber failed",
                    extra={"extra_fields": {"subscriber": repr(callback)}},
                )

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def read_only(self) -> ReadOnlyState[T]:
        return self._view


def computed(func: Callable[..., T], *sources: ReadOnlyState[Any]) -> ReadOnlyState[T]:
    """
    Derived projection over one or more sources.

    The result is recomputed synchronously whenever any source changes, so
    it is already current when later subscribers of that source run.
    """
    node: StateNode[T] = StateNode(func(*(source.value for source in sources)))

    def recompute(_: Any) -> None:
        node.set(func(*(source.value for source in sources)))

    for source in sources:
        source.subscribe(recompute)

    return node.read_only()
