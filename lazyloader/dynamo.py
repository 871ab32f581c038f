"""
DynamoDB data sources for LazyLoader.

DynamoQueryDao pages through the items of one partition, DynamoScanDao through
a whole table or index. Both translate LastEvaluatedKey into a
DynamoSortOrderKey and validate rows into a Pydantic model.
"""

from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar, cast

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from pydantic import BaseModel

from ._logging import logger, redact_key
from .dao import Dao
from .exceptions import DynamoSerializationError, handle_dynamo_errors
from .pagination import Page, SortOrderKey

T = TypeVar("T", bound=BaseModel)
ContextT = TypeVar("ContextT")

_type_serializer = TypeSerializer()
_type_deserializer = TypeDeserializer()


def key_attribute(value: Any) -> dict[str, Any]:
    """
    Encodes one key value as a DynamoDB attribute, e.g. "general" -> {"S": "general"}.

    Key attributes can only be strings, numbers or bytes. Enums are encoded by
    their value; floats go through Decimal since boto3 rejects them.
    """
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool) or not isinstance(value, (str, bytes, int, float, Decimal)):
        raise DynamoSerializationError(
            f"Unsupported key value {value!r}: keys must be strings, numbers or bytes"
        )
    if isinstance(value, float):
        value = Decimal(str(value))
    return cast(dict[str, Any], _type_serializer.serialize(value))


def _to_python(value: Any) -> Any:
    # Decimal -> int when whole, float otherwise
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    if isinstance(value, list):
        return [_to_python(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_python(v) for k, v in value.items()}
    return value


def decode_item(item: dict[str, Any]) -> dict[str, Any]:
    """Converts a row or key in DynamoDB JSON to a plain Python dict."""
    return {k: _to_python(_type_deserializer.deserialize(v)) for k, v in item.items()}


class DynamoSortOrderKey(SortOrderKey[dict[str, Any]]):
    """
    Wraps a raw DynamoDB LastEvaluatedKey.

    The continuation is the ExclusiveStartKey request parameter, ready to be
    merged into the kwargs of the next query or scan.
    """

    def __init__(self, last_evaluated_key: dict[str, Any]) -> None:
        self._last_evaluated_key = dict(last_evaluated_key)

    @classmethod
    def from_cursor(cls, cursor: dict[str, Any]) -> "DynamoSortOrderKey":
        """Rebuilds a key from the plain dict returned by the cursor property."""
        return cls({name: key_attribute(value) for name, value in cursor.items()})

    @property
    def last_evaluated_key(self) -> dict[str, Any]:
        return dict(self._last_evaluated_key)

    @property
    def cursor(self) -> dict[str, Any]:
        """Plain Python form of the key, e.g. {"room_id": "general", "ts": 12}."""
        return decode_item(self._last_evaluated_key)

    def continuation(self) -> dict[str, Any]:
        return {"ExclusiveStartKey": dict(self._last_evaluated_key)}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DynamoSortOrderKey):
            return NotImplemented
        return self._last_evaluated_key == other._last_evaluated_key

    def __hash__(self) -> int:
        # Key attributes are {"S"|"N"|"B": scalar}, so every part is hashable
        return hash(
            tuple(
                sorted(
                    (name, tuple(sorted(attribute.items())))
                    for name, attribute in self._last_evaluated_key.items()
                )
            )
        )

    def __repr__(self) -> str:
        return f"DynamoSortOrderKey({redact_key(self.cursor)})"


class _DynamoDao(Dao[T, ContextT], Generic[T, ContextT]):
    """Shared request plumbing for query and scan based Daos."""

    operation: ClassVar[str]

    _client_context: ClassVar[ContextVar[Any | None]] = ContextVar(
        "lazyloader_dynamo_client", default=None
    )

    def __init__(
        self,
        model_cls: type[T],
        table_name: str,
        index_name: str | None = None,
        client: Any | None = None,
        region: str | None = None,
    ) -> None:
        self.model_cls = model_cls
        self.table_name = table_name
        self.index_name = index_name
        self.region = region
        self._client = client

    def _get_client(self) -> Any:
        """
        Returns a Boto3 DynamoDB Client.

        A client scoped with using_client() wins, then the one given to the
        constructor, then a default client created on first use.
        """
        ctx_client = self._client_context.get()
        if ctx_client is not None:
            return ctx_client

        if self._client is None:
            self._client = boto3.client("dynamodb", region_name=self.region)
        return self._client

    @classmethod
    @contextmanager
    def using_client(cls, client: Any) -> Generator[None, None, None]:
        """
        Context manager to scope a client to a block of code.
        Thread-safe and Async-safe using contextvars.

        Usage:
            with DynamoQueryDao.using_client(my_client):
                loader = LazyLoader("room-1", dao, batch_size=25)
        """
        token = cls._client_context.set(client)
        try:
            yield
        finally:
            cls._client_context.reset(token)

    def _request_kwargs(self, context: ContextT) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"TableName": self.table_name}
        if self.index_name:
            kwargs["IndexName"] = self.index_name
        return kwargs

    def _log_extra(self, context: ContextT) -> dict[str, Any]:
        return {"table": self.table_name, "index": self.index_name, "operation": self.operation}

    def _deserialize(self, item: dict[str, Any]) -> T:
        # DynamoDB JSON -> Python dict -> Pydantic model
        return self.model_cls.model_validate(decode_item(item))

    def read_all(self, context: ContextT) -> list[T]:
        kwargs = self._request_kwargs(context)

        logger.info("Reading all items", extra=self._log_extra(context))

        with handle_dynamo_errors(table_name=self.table_name):
            paginator = self._get_client().get_paginator(self.operation)
            return [
                self._deserialize(item)
                for page in paginator.paginate(**kwargs)
                for item in page.get("Items", [])
            ]

    def get_models_first_batch(self, context: ContextT, batch_size: int) -> Page[T]:
        return self._read_batch(context, None, batch_size)

    def get_models_batch(
        self, context: ContextT, prev_last_key: SortOrderKey, batch_size: int
    ) -> Page[T]:
        return self._read_batch(context, prev_last_key, batch_size)

    def _read_batch(
        self, context: ContextT, prev_last_key: SortOrderKey | None, batch_size: int
    ) -> Page[T]:
        kwargs = self._request_kwargs(context)
        kwargs["Limit"] = batch_size
        if prev_last_key is not None:
            kwargs.update(prev_last_key.continuation())

        logger.debug(
            "Reading batch",
            extra={
                **self._log_extra(context),
                "limit": batch_size,
                "has_cursor": prev_last_key is not None,
            },
        )

        # Single request (NOT paginator), repeated only past empty filtered pages
        request = getattr(self._get_client(), self.operation)
        with handle_dynamo_errors(table_name=self.table_name):
            response = request(**kwargs)
            # A filter can reject every item DynamoDB evaluated for this page.
            # Keep reading so an empty page is only ever the last one.
            while not response.get("Items") and response.get("LastEvaluatedKey"):
                logger.debug("Skipping empty filtered page", extra=self._log_extra(context))
                kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]
                response = request(**kwargs)

        items = [self._deserialize(item) for item in response.get("Items", [])]

        raw_key = response.get("LastEvaluatedKey")
        last_key = DynamoSortOrderKey(raw_key) if raw_key else None
        return Page(items=items, last_sort_key=last_key, is_last_batch=last_key is None)


class DynamoQueryDao(_DynamoDao[T, Any]):
    """
    Pages through the items of a single partition.

    The loader context is the partition key value.

    Usage:
        dao = DynamoQueryDao(Message, "messages", pk_name="room_id")
        loader = LazyLoader("general", dao, batch_size=25)
    """

    operation = "query"

    def __init__(
        self,
        model_cls: type[T],
        table_name: str,
        pk_name: str,
        index_name: str | None = None,
        scan_forward: bool = True,
        client: Any | None = None,
        region: str | None = None,
    ) -> None:
        super().__init__(model_cls, table_name, index_name, client, region)
        self.pk_name = pk_name
        self.scan_forward = scan_forward

    def _request_kwargs(self, context: Any) -> dict[str, Any]:
        kwargs = super()._request_kwargs(context)
        kwargs["KeyConditionExpression"] = "#pk = :pk"
        kwargs["ExpressionAttributeNames"] = {"#pk": self.pk_name}
        kwargs["ExpressionAttributeValues"] = {":pk": key_attribute(context)}
        kwargs["ScanIndexForward"] = self.scan_forward
        return kwargs

    def _log_extra(self, context: Any) -> dict[str, Any]:
        return {**super()._log_extra(context), "pk_hash": redact_key(context)}


class DynamoScanDao(_DynamoDao[T, dict[str, Any] | None]):
    """
    Pages through a whole table or index.

    The loader context is None or a dict of extra Scan parameters
    (e.g. Segment/TotalSegments or a FilterExpression with its attributes).

    Usage:
        dao = DynamoScanDao(User, "users")
        loader = LazyLoader({"Segment": 0, "TotalSegments": 4}, dao, batch_size=100)
    """

    operation = "scan"

    def _request_kwargs(self, context: dict[str, Any] | None) -> dict[str, Any]:
        kwargs = super()._request_kwargs(context)
        if context:
            kwargs.update(context)
        return kwargs
