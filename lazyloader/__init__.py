from .config import NO_LAZY_LOAD_BATCH_SIZE, LoaderOptions
from .dao import Dao
from .dynamo import DynamoQueryDao, DynamoScanDao, DynamoSortOrderKey
from .exceptions import (
    BatchLoadError,
    DynamoSerializationError,
    LazyLoaderError,
    ProvisionedThroughputExceededError,
    RequestTimeoutError,
    TableNotFoundError,
    ValidationError,
)
from .loader import LazyLoader, LazyLoaderIterator
from .memory import ListDao, PositionSortOrderKey
from .metrics import MeterManager, RateMeter
from .pagination import Page, SortOrderKey

__all__ = [
    "LazyLoader",
    "LazyLoaderIterator",
    "LoaderOptions",
    "NO_LAZY_LOAD_BATCH_SIZE",
    # Data source contract
    "Dao",
    "Page",
    "SortOrderKey",
    # Bundled data sources
    "ListDao",
    "PositionSortOrderKey",
    "DynamoQueryDao",
    "DynamoScanDao",
    "DynamoSortOrderKey",
    # Metrics
    "MeterManager",
    "RateMeter",
    # Exceptions
    "LazyLoaderError",
    "BatchLoadError",
    "TableNotFoundError",
    "ProvisionedThroughputExceededError",
    "RequestTimeoutError",
    "ValidationError",
    "DynamoSerializationError",
]
