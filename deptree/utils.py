"""Small shared helpers."""

from collections.abc import Iterable, Iterator, MutableSet
from typing import Any, Generic, Optional, TypeVar

from pydantic_core import core_schema

T = TypeVar("T")


class OrderedSet(MutableSet, Generic[T]):
    """Set that remembers insertion order.

    Adding an element that is already present keeps its original position.
    Elements are compared by ``hash``/``==``, so tree nodes are keyed by
    identity.
    """

    def __init__(self, items: Optional[Iterable[T]] = None) -> None:
        self._items: dict[T, None] = dict.fromkeys(items or ())

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: T) -> None:
        self._items[item] = None

    def discard(self, item: T) -> None:
        self._items.pop(item, None)

    def update(self, items: Iterable[T]) -> None:
        for item in items:
            self.add(item)

    def clear(self) -> None:
        self._items.clear()

    def to_list(self) -> list[T]:
        return list(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedSet):
            return list(self) == list(other)
        return super().__eq__(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> Any:
        """Validate from any iterable and serialize as a list."""
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(list),
        )

    @classmethod
    def _validate(cls, value: Any) -> "OrderedSet":
        if isinstance(value, OrderedSet):
            return value
        if isinstance(value, (list, tuple, set, frozenset)):
            return cls(value)
        raise ValueError(f"Expected a list of items, got {type(value).__name__}")
