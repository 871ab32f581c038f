"""
Pagination primitives for lazyloader.

This module provides the cursor abstraction handed back and forth between a
LazyLoader and its data source, and the Page structure one fetch returns.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
PredicateT = TypeVar("PredicateT")


class SortOrderKey(ABC, Generic[PredicateT]):
    """
    Opaque position in a backend-defined ordering.

    A key is produced by a page fetch and handed back unchanged to request the
    following page. Comparison and equality are the backend's business; the
    loader only ever asks a key for its continuation predicate.
    """

    @abstractmethod
    def continuation(self) -> PredicateT:
        """Renders the backend predicate meaning "strictly after this key"."""


@dataclass
class Page(Generic[T]):
    """
    Represents a single batch of results returned by a Dao.

    Attributes:
        items: Models in backend order (possibly empty)
        last_sort_key: Key of the last item, None if the page is empty
        is_last_batch: True if no further items exist beyond this page
    """

    items: list[T]
    last_sort_key: SortOrderKey | None
    is_last_batch: bool

    @property
    def count(self) -> int:
        """Number of items in this page."""
        return len(self.items)

    @property
    def has_more(self) -> bool:
        """Returns True if there are more pages available."""
        return not self.is_last_batch
