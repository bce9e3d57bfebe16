# Copyright 2015-present MongoDB, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Operation class definitions.

A find and modify operation is a mutable value: configure it with the
chained setters, then execute it on a connection, blocking with
:meth:`~_FindAndModifyOperation.execute` or under asyncio with
:meth:`~_FindAndModifyOperation.execute_async`. An operation may be
executed any number of times, one execution at a time. It holds no lock,
so it must not be mutated while an execution is in flight.
"""
from __future__ import annotations

import asyncio
import datetime
from collections import abc
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Generic,
    Iterable,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from bson.codec_options import CodecOptions
from findmodify import common, helpers_shared
from findmodify.codec import Decoder, validate_decoder
from findmodify.message import _gen_find_and_modify_command
from findmodify.namespace import Namespace, _validate_namespace
from findmodify.results import NO_MATCH, _NoMatchType
from pymongo.collation import Collation
from pymongo.write_concern import WriteConcern

if TYPE_CHECKING:
    from findmodify.asynchronous.connection import AsyncConnection
    from findmodify.capabilities import ServerCapabilities
    from findmodify.synchronous.connection import Connection

_T = TypeVar("_T")

_Sort = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]
_Projection = Union[Mapping[str, Any], Iterable[str]]
_DecoderIn = Union[Decoder[Any], CodecOptions, Callable[[Any], Any]]


def _validate_collation_or_none(
    value: Optional[Union[Mapping[str, Any], Collation]]
) -> Optional[Collation]:
    """Normalize a collation argument to a :class:`~pymongo.collation.Collation`."""
    if value is None or isinstance(value, Collation):
        return value
    if isinstance(value, abc.Mapping):
        options = dict(value)
        if "locale" not in options:
            raise TypeError("a collation document must include a 'locale'")
        return Collation(**options)
    raise TypeError(
        "collation must be a dict, an instance of pymongo.collation.Collation, "
        f"or None, not {type(value)}"
    )


class ReturnDocument:
    """An enum used with :meth:`FindOneAndUpdate.return_document` and
    :meth:`FindOneAndReplace.return_document`.
    """

    BEFORE = False
    """Return the original document before it was updated/replaced, or
    :data:`~findmodify.results.NO_MATCH` if no document matches the query.
    """
    AFTER = True
    """Return the updated/replaced or inserted document."""


class _FindAndModifyOperation(Generic[_T]):
    """Private base class for all find and modify operations."""

    def __init__(
        self,
        namespace: Union[Namespace, str],
        write_concern: WriteConcern,
        decoder: _DecoderIn,
    ) -> None:
        # Assigned unvalidated first so repr() works on a partly built operation.
        self.__namespace: Any = namespace
        self.__write_concern = write_concern
        if not isinstance(write_concern, WriteConcern):
            raise TypeError(
                "write_concern must be an instance of pymongo.write_concern.WriteConcern"
            )
        self.__namespace = _validate_namespace(namespace)
        self.__decoder = validate_decoder(decoder)
        self._filter: Optional[Mapping[str, Any]] = None
        self._sort: Optional[_Sort] = None
        self._projection: Optional[_Projection] = None
        self._max_time_ms = 0
        self._collation: Optional[Collation] = None

    @property
    def namespace(self) -> Namespace:
        return self.__namespace

    @property
    def write_concern(self) -> WriteConcern:
        return self.__write_concern

    @property
    def decoder(self) -> Decoder[_T]:
        return self.__decoder

    def filter(self, filter: Optional[Mapping[str, Any]]) -> Any:
        """Set the query that selects the document to modify.

        :param filter: A query document, or ``None`` to match any document.
        """
        common.validate_is_mapping_or_none("filter", filter)
        self._filter = filter
        return self

    def get_filter(self) -> Optional[Mapping[str, Any]]:
        return self._filter

    def sort(self, sort: Optional[_Sort]) -> Any:
        """Set the order used to pick a document when several match.

        :param sort: A mapping or a list of (key, direction) pairs.
        """
        self._sort = sort
        return self

    def get_sort(self) -> Optional[_Sort]:
        return self._sort

    def projection(self, projection: Optional[_Projection]) -> Any:
        """Set the fields to return.

        :param projection: A mapping or a list of field names.
        """
        self._projection = projection
        return self

    def get_projection(self) -> Optional[_Projection]:
        return self._projection

    def max_time_ms(self, max_time_ms: int) -> Any:
        """Set the server side time limit in milliseconds, 0 for no limit.

        The limit is enforced by the server. An operation exceeding it
        raises :exc:`~findmodify.errors.ExecutionTimeout`.
        """
        self._max_time_ms = common.validate_non_negative_integer("max_time_ms", max_time_ms)
        return self

    def max_time(self, max_time: datetime.timedelta) -> Any:
        """Set the server side time limit as a :class:`~datetime.timedelta`."""
        if not isinstance(max_time, datetime.timedelta):
            raise TypeError(f"max_time must be an instance of datetime.timedelta, not {type(max_time)}")
        return self.max_time_ms(int(max_time.total_seconds() * 1000))

    def get_max_time_ms(self) -> int:
        return self._max_time_ms

    def get_max_time(self) -> datetime.timedelta:
        return datetime.timedelta(milliseconds=self._max_time_ms)

    def collation(self, collation: Optional[Union[Mapping[str, Any], Collation]]) -> Any:
        """Set the :class:`~pymongo.collation.Collation` used to match and sort.

        :param collation: A :class:`~pymongo.collation.Collation`, a collation
            document with a ``locale``, or ``None``.
        """
        self._collation = _validate_collation_or_none(collation)
        return self

    def get_collation(self) -> Optional[Collation]:
        return self._collation

    # Fields only the update and replace variants can set.

    def is_upsert(self) -> bool:
        return False

    def is_return_original(self) -> bool:
        return True

    def get_bypass_document_validation(self) -> Optional[bool]:
        return None

    def _primary_field(self) -> Tuple[str, Any]:
        raise NotImplementedError

    def _as_command(self, capabilities: ServerCapabilities) -> dict[str, Any]:
        """Render this operation for a server with `capabilities`."""
        return _gen_find_and_modify_command(self, capabilities)

    def _process_reply(self, reply: Mapping[str, Any]) -> Union[_T, _NoMatchType]:
        """Check `reply` for errors and decode the returned document."""
        helpers_shared._check_find_and_modify_response(reply)
        value = reply.get("value")
        if value is None:
            return NO_MATCH
        return self.__decoder.decode(value)

    def execute(self, conn: Connection) -> Union[_T, _NoMatchType]:
        """Execute this operation on `conn`, blocking until the reply arrives.

        Returns the decoded document, or :data:`~findmodify.results.NO_MATCH`.
        """
        from findmodify.synchronous.executor import execute

        return execute(self, conn)

    def execute_async(
        self,
        conn: AsyncConnection,
        callback: Optional[Callable[[Any, Optional[BaseException]], Any]] = None,
    ) -> asyncio.Task:
        """Schedule this operation on `conn` in the running event loop.

        Returns an :class:`asyncio.Task` resolving to the decoded document,
        or :data:`~findmodify.results.NO_MATCH`. If `callback` is given it is
        called as ``callback(result, error)`` on the event loop once the
        task completes; exactly one of `result` and `error` is set.
        """
        from findmodify.asynchronous.executor import execute_with_callback

        return execute_with_callback(self, conn, callback)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.__namespace!r}, {self.__write_concern!r})"


class _FindAndUpdateBase(_FindAndModifyOperation[_T]):
    """Options shared by the update and replace variants."""

    def __init__(
        self,
        namespace: Union[Namespace, str],
        write_concern: WriteConcern,
        decoder: _DecoderIn,
    ) -> None:
        super().__init__(namespace, write_concern, decoder)
        self._upsert = False
        self._return_original = True
        self._bypass_document_validation: Optional[bool] = None

    def upsert(self, upsert: bool) -> Any:
        """If ``True``, insert a document when no document matches the filter."""
        self._upsert = common.validate_boolean("upsert", upsert)
        return self

    def is_upsert(self) -> bool:
        return self._upsert

    def return_original(self, return_original: bool) -> Any:
        """If ``True`` (the default) return the document as it was before the
        modification, otherwise return the modified or inserted document.
        """
        self._return_original = common.validate_boolean("return_original", return_original)
        return self

    def return_document(self, return_document: bool) -> Any:
        """Set :attr:`ReturnDocument.BEFORE` or :attr:`ReturnDocument.AFTER`."""
        if not isinstance(return_document, bool):
            raise ValueError(
                "return_document must be ReturnDocument.BEFORE or ReturnDocument.AFTER, "
                f"not {type(return_document)}"
            )
        return self.return_original(return_document is ReturnDocument.BEFORE)

    def is_return_original(self) -> bool:
        return self._return_original

    def bypass_document_validation(self, bypass_document_validation: Optional[bool]) -> Any:
        """Set or clear ``bypassDocumentValidation``.

        ``None`` leaves the option out of the command. ``True`` and ``False``
        are sent as given, to servers that support the option, for
        acknowledged writes.
        """
        self._bypass_document_validation = common.validate_boolean_or_none(
            "bypass_document_validation", bypass_document_validation
        )
        return self

    def get_bypass_document_validation(self) -> Optional[bool]:
        return self._bypass_document_validation


class FindOneAndUpdate(_FindAndUpdateBase[_T]):
    """Atomically find a document, apply update operators, and return it.

    :param namespace: The :class:`~findmodify.namespace.Namespace`, or a
        ``"db.coll"`` string.
    :param write_concern: The :class:`~pymongo.write_concern.WriteConcern`.
    :param decoder: A :class:`~findmodify.codec.Decoder`, a
        :class:`~bson.codec_options.CodecOptions`, or a callable, used to
        decode the returned document.
    :param update: The update operations to apply. At least one top-level
        key must be an update operator.
    :param update_operator_prefixes: (optional) The prefixes identifying
        update operator keys. Defaults to
        :data:`~findmodify.common.UPDATE_OPERATOR_PREFIXES`.

    Raises :exc:`~findmodify.errors.InvalidArgument` if `update` contains no
    update operator.

      >>> op = FindOneAndUpdate("test.workers", ACKNOWLEDGED, DocumentDecoder(),
      ...                       {"$inc": {"numberOfJobs": 1}})
      >>> op.filter({"name": "Pete"}).return_original(False).execute(conn)
      {'_id': ObjectId('...'), 'name': 'Pete', 'numberOfJobs': 4}
    """

    def __init__(
        self,
        namespace: Union[Namespace, str],
        write_concern: WriteConcern,
        decoder: _DecoderIn,
        update: Mapping[str, Any],
        update_operator_prefixes: Iterable[str] = common.UPDATE_OPERATOR_PREFIXES,
    ) -> None:
        prefixes = common.validate_update_operator_prefixes(update_operator_prefixes)
        common.validate_ok_for_update(update, prefixes)
        super().__init__(namespace, write_concern, decoder)
        self.__update = update

    @property
    def update(self) -> Mapping[str, Any]:
        return self.__update

    def _primary_field(self) -> Tuple[str, Any]:
        return "update", self.__update


class FindOneAndReplace(_FindAndUpdateBase[_T]):
    """Atomically find a document, replace it, and return it.

    Takes the same parameters as :class:`FindOneAndUpdate`, except that
    `replacement` must not contain any update operator.
    """

    def __init__(
        self,
        namespace: Union[Namespace, str],
        write_concern: WriteConcern,
        decoder: _DecoderIn,
        replacement: Mapping[str, Any],
        update_operator_prefixes: Iterable[str] = common.UPDATE_OPERATOR_PREFIXES,
    ) -> None:
        prefixes = common.validate_update_operator_prefixes(update_operator_prefixes)
        common.validate_ok_for_replace(replacement, prefixes)
        super().__init__(namespace, write_concern, decoder)
        self.__replacement = replacement

    @property
    def replacement(self) -> Mapping[str, Any]:
        return self.__replacement

    def _primary_field(self) -> Tuple[str, Any]:
        return "update", self.__replacement


class FindOneAndDelete(_FindAndModifyOperation[_T]):
    """Atomically find a document, delete it, and return it."""

    def _primary_field(self) -> Tuple[str, Any]:
        return "remove", True
