from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Generic, TypeVar

from .pagination import Page, SortOrderKey

ModelT = TypeVar("ModelT")
ContextT = TypeVar("ContextT")


class Dao(ABC, Generic[ModelT, ContextT]):
    """
    Data source contract consumed by LazyLoader.

    The context is whatever the caller handed to the loader; it is passed
    through untouched and only the Dao gives it meaning.

    Pages chained through their last_sort_key must neither skip nor repeat
    items, and is_last_batch must be True exactly when nothing follows.
    batch_size is an upper bound, a short final page is expected.
    """

    @abstractmethod
    def read_all(self, context: ContextT) -> Sequence[ModelT]:
        """Returns the complete ordered result set in one call."""

    @abstractmethod
    def get_models_first_batch(self, context: ContextT, batch_size: int) -> Page[ModelT]:
        """Returns the first page, starting at the beginning of the ordering."""

    @abstractmethod
    def get_models_batch(
        self, context: ContextT, prev_last_key: SortOrderKey, batch_size: int
    ) -> Page[ModelT]:
        """Returns the page of items ordered strictly after prev_last_key."""
