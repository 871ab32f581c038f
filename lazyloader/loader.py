"""
Deferred, cursor-paginated sequence over a Dao.

A LazyLoader reads its first batch (or, with paging disabled, everything) when
it is built and then fetches one more batch each time an iterator runs past the
end of what has been buffered so far.
"""

import threading
from collections.abc import Iterable, Iterator
from typing import Any, Generic, TypeVar

from ._logging import logger
from .config import NO_LAZY_LOAD_BATCH_SIZE, LoaderOptions
from .dao import Dao
from .exceptions import handle_load_errors
from .metrics import MeterManager, RateMeter
from .pagination import SortOrderKey

ModelT = TypeVar("ModelT")
ContextT = TypeVar("ContextT")


class LazyLoader(Iterable[ModelT], Generic[ModelT, ContextT]):
    """
    Buffers models read from a Dao and exposes them as a re-iterable sequence.

    Every iterator starts at position 0 of one shared, append-only buffer and
    keeps its own read position. Once a fetch reports the last batch (or the
    single full read completes) the loader never calls the Dao again.

    Failure of the initial fetch propagates unchanged from the constructor.
    Failure of a later fetch surfaces from the iteration step as
    BatchLoadError chained to the original exception.

    Usage:
        loader = LazyLoader(room_id, message_dao, batch_size=50)
        if not loader.is_empty():
            for message in loader:
                ...
    """

    def __init__(
        self,
        context: ContextT,
        dao: Dao[ModelT, ContextT],
        batch_size: int = NO_LAZY_LOAD_BATCH_SIZE,
        meter_manager: MeterManager | None = None,
        unlazy_load_meter: RateMeter | None = None,
        lazy_load_last_batch_meter: RateMeter | None = None,
        lazy_load_batch_meter: RateMeter | None = None,
    ) -> None:
        if batch_size < 0:
            raise ValueError(f"batch_size must be >= 0, got {batch_size}")

        self._dao = dao
        self._context = context
        self._batch_size = batch_size

        self._meter_manager = meter_manager
        self._unlazy_load_meter = unlazy_load_meter
        self._lazy_load_last_batch_meter = lazy_load_last_batch_meter
        self._lazy_load_batch_meter = lazy_load_batch_meter

        # Guards the fetch step: cursor, buffer and all-loaded flag change together
        self._lock = threading.Lock()

        self._last_key: SortOrderKey | None = None
        self._is_all_loaded = False
        self._models: list[ModelT] = []
        self._models.extend(self._load_next_batch())

    @classmethod
    def from_options(
        cls,
        context: ContextT,
        dao: Dao[ModelT, ContextT],
        options: LoaderOptions,
        meter_manager: MeterManager | None = None,
    ) -> "LazyLoader[ModelT, ContextT]":
        """
        Builds a loader from LoaderOptions, resolving its meters by name.

        Args:
            context: Value passed through to every Dao call
            dao: Data source
            options: Batch size and meter naming
            meter_manager: Optional registry the fetch meters are taken from

        Returns:
            A loader whose first batch is already buffered
        """
        unlazy: RateMeter | None = None
        last_batch: RateMeter | None = None
        batch: RateMeter | None = None
        if meter_manager is not None:
            unlazy, last_batch, batch = (meter_manager.meter(n) for n in options.meter_names())
        return cls(
            context,
            dao,
            batch_size=options.batch_size,
            meter_manager=meter_manager,
            unlazy_load_meter=unlazy,
            lazy_load_last_batch_meter=last_batch,
            lazy_load_batch_meter=batch,
        )

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def buffered_count(self) -> int:
        """Number of models fetched so far."""
        return len(self._models)

    def is_empty(self) -> bool:
        """
        True if nothing is buffered right now.

        With paging enabled this says nothing about batches not yet fetched.
        """
        return not self._models

    def is_all_loaded(self) -> bool:
        """True once no further fetch will be issued."""
        return self._is_all_loaded

    def _load_next_batch(self) -> list[ModelT]:
        if self._batch_size == NO_LAZY_LOAD_BATCH_SIZE:
            logger.debug("Reading all models", extra={"operation": "read_all"})
            models = list(self._dao.read_all(self._context))
            self._is_all_loaded = True
            self._increment(self._unlazy_load_meter)
            logger.info(
                "All models loaded", extra={"operation": "read_all", "count": len(models)}
            )
            return models

        logger.debug(
            "Loading batch",
            extra={
                "operation": "load_batch",
                "batch_size": self._batch_size,
                "has_cursor": self._last_key is not None,
            },
        )
        if self._last_key is None:
            page = self._dao.get_models_first_batch(self._context, self._batch_size)
        else:
            page = self._dao.get_models_batch(self._context, self._last_key, self._batch_size)

        # Deliberate deviation from always taking the page's trailing key: an
        # empty page carries none, and resetting to None would restart at page one
        if page.last_sort_key is not None:
            self._last_key = page.last_sort_key
        self._is_all_loaded = page.is_last_batch

        if self._is_all_loaded:
            self._increment(self._lazy_load_last_batch_meter)
            logger.info(
                "All models loaded",
                extra={
                    "operation": "load_batch",
                    "count": page.count,
                    "total": len(self._models) + page.count,
                },
            )
        else:
            self._increment(self._lazy_load_batch_meter)
            if not page.items:
                logger.warning(
                    "Empty intermediate batch",
                    extra={"operation": "load_batch", "batch_size": self._batch_size},
                )
        return list(page.items or [])

    def _increment(self, meter: RateMeter | None) -> None:
        if self._meter_manager is not None:
            self._meter_manager.increment_rate_meter(meter, 1)

    def _has_model_at(self, index: int) -> bool:
        """Fetches at most one batch if index is past the buffered models."""
        if index < len(self._models):
            return True

        # The all-loaded flag flips before the buffer grows, read both under the lock
        with self._lock:
            if index < len(self._models):
                return True
            if self._is_all_loaded:
                return False
            with handle_load_errors():
                models = self._load_next_batch()
            self._models.extend(models)

        return index < len(self._models)

    def __iter__(self) -> "LazyLoaderIterator[ModelT]":
        return LazyLoaderIterator(self)

    def all(self) -> list[ModelT]:
        """
        Fetches every remaining batch and returns all models as a list.

        Unlike a plain for loop, this keeps fetching past empty intermediate
        batches until the loader is all loaded, so it never returns a partial
        result. A source that never reports its last batch makes it loop forever.
        WARNING: Can consume high memory for large datasets.
        """
        iterator = iter(self)
        models: list[ModelT] = []
        while True:
            while iterator.has_next():
                models.append(iterator.next())
            if self._is_all_loaded and not iterator.has_next():
                return models

    def first(self) -> ModelT | None:
        """Returns the first model, or None if there is none."""
        return next(iter(self), None)


class LazyLoaderIterator(Iterator[ModelT]):
    """
    Forward-only cursor over a LazyLoader's buffer.

    has_next()/next() mirror an explicit availability check; __next__ wraps
    both for the Python iteration protocol.
    """

    def __init__(self, loader: LazyLoader[ModelT, Any]) -> None:
        self._loader = loader
        self._index = 0

    @property
    def position(self) -> int:
        return self._index

    def has_next(self) -> bool:
        """
        True if a model is available at the current position.

        May fetch one batch; a fetch failure raises BatchLoadError.
        """
        return self._loader._has_model_at(self._index)

    def next(self) -> ModelT:
        """
        Returns the model at the current position and advances.

        Never fetches. Raises IndexError unless has_next() returned True.
        """
        models = self._loader._models
        if self._index >= len(models):
            raise IndexError(f"No model buffered at position {self._index}")
        model = models[self._index]
        self._index += 1
        return model

    def __next__(self) -> ModelT:
        if not self.has_next():
            raise StopIteration
        return self.next()

    def __iter__(self) -> "LazyLoaderIterator[ModelT]":
        return self
