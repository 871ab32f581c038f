"""
In-memory Dao backed by a Python sequence.

Handy for tests and for wrapping data that is already loaded but should be
consumed through the same LazyLoader interface as a remote source.
"""

from collections.abc import Sequence
from typing import Generic, TypeVar

from .dao import Dao
from .pagination import Page, SortOrderKey

ModelT = TypeVar("ModelT")
ContextT = TypeVar("ContextT")


class PositionSortOrderKey(SortOrderKey[slice]):
    """Index of the last item of a page within the backing sequence."""

    def __init__(self, position: int) -> None:
        self._position = position

    @property
    def position(self) -> int:
        return self._position

    def continuation(self) -> slice:
        return slice(self._position + 1, None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PositionSortOrderKey):
            return NotImplemented
        return self._position == other._position

    def __hash__(self) -> int:
        return hash(self._position)

    def __repr__(self) -> str:
        return f"PositionSortOrderKey({self._position})"


class ListDao(Dao[ModelT, ContextT], Generic[ModelT, ContextT]):
    """
    Serves a fixed sequence of models in order.

    The context is ignored unless a subclass overrides _select().
    """

    def __init__(self, models: Sequence[ModelT]) -> None:
        self.models = list(models)

    def _select(self, context: ContextT, models: list[ModelT]) -> list[ModelT]:
        """Hook for subclasses that derive the served models from the context."""
        return models

    def read_all(self, context: ContextT) -> list[ModelT]:
        return self._select(context, list(self.models))

    def get_models_first_batch(self, context: ContextT, batch_size: int) -> Page[ModelT]:
        return self._read_batch(context, 0, batch_size)

    def get_models_batch(
        self, context: ContextT, prev_last_key: SortOrderKey, batch_size: int
    ) -> Page[ModelT]:
        if not isinstance(prev_last_key, PositionSortOrderKey):
            raise TypeError(
                f"ListDao expects a PositionSortOrderKey, got {type(prev_last_key).__name__}"
            )
        start = prev_last_key.continuation().start
        return self._read_batch(context, start, batch_size)

    def _read_batch(self, context: ContextT, start: int, batch_size: int) -> Page[ModelT]:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")

        end = min(start + batch_size, len(self.models))
        items = self._select(context, self.models[start:end])
        last_key = PositionSortOrderKey(end - 1) if end > start else None
        return Page(items=items, last_sort_key=last_key, is_last_batch=end >= len(self.models))
