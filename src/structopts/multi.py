"""
Bounded, append-only value container for repeatable options.

A field annotated ``Multi[str, 4]`` may be given up to four times on the
command line; each occurrence is appended in order. The same expression
doubles as the field's default factory::

    @dataclass
    class Opts:
        include: Multi[str, 4] = field(default_factory=Multi[str, 4])
"""

from collections.abc import Sequence
from typing import Any, Iterator

from .errors import CapacityExceeded


class MultiAlias:
    """
    The value of ``Multi[item_type, capacity]``.

    It records the element type and capacity for descriptor derivation and,
    when called, returns a fresh empty Multi with those parameters.
    """

    __slots__ = ("item_type", "capacity")

    def __init__(self, item_type: Any, capacity: int) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise TypeError(f"Multi capacity must be an int, got {capacity!r}")
        if capacity < 1:
            raise ValueError(f"Multi capacity must be at least 1, got {capacity}")
        self.item_type = item_type
        self.capacity = capacity

    def __call__(self) -> "Multi":
        return Multi(self.capacity, self.item_type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiAlias):
            return NotImplemented
        return (self.item_type, self.capacity) == (other.item_type, other.capacity)

    def __hash__(self) -> int:
        return hash((MultiAlias, self.item_type, self.capacity))

    def __repr__(self) -> str:
        name = getattr(self.item_type, "__name__", repr(self.item_type))
        return f"Multi[{name}, {self.capacity}]"


class Multi(Sequence):
    """
    An ordered sequence of at most ``capacity`` values.

    Values can only be appended. Appending to a full Multi raises
    CapacityExceeded instead of dropping or overwriting anything.
    """

    def __init__(self, capacity: int, item_type: Any = str) -> None:
        # Validates the parameters the same way the alias does.
        MultiAlias(item_type, capacity)
        self.capacity = capacity
        self.item_type = item_type
        self._items: list[Any] = []

    def __class_getitem__(cls, params: Any) -> MultiAlias:
        if not isinstance(params, tuple) or len(params) != 2:
            raise TypeError("Multi must be parametrized as Multi[item_type, capacity]")
        item_type, capacity = params
        return MultiAlias(item_type, capacity)

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def append(self, value: Any) -> None:
        """
        Append a value.

        Raises:
            CapacityExceeded: If the container already holds ``capacity`` values.
        """
        if self.is_full:
            raise CapacityExceeded(None, self.capacity)
        self._items.append(value)

    def __getitem__(self, index: Any) -> Any:
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Multi):
            return self._items == other._items and self.capacity == other.capacity
        if isinstance(other, (list, tuple)):
            return self._items == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Multi({self._items!r}, capacity={self.capacity})"
