# Copyright 2009-present MongoDB, Inc.
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

"""Exceptions raised by findmodify.

The hierarchy separates failures detected locally before any I/O
(:exc:`InvalidArgument`, :exc:`UnsupportedFeature`), transport failures
(:exc:`ConnectionFailure`), commands the server rejected outright
(:exc:`CommandFailure`), and writes that took effect but whose requested
acknowledgement could not be satisfied (:exc:`WriteConcernFailure`).
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Tuple

if TYPE_CHECKING:
    from findmodify.results import FindAndModifyWriteResult


class FindModifyError(Exception):
    """Base class for all findmodify exceptions."""

    def __init__(self, message: str = "", error_labels: Optional[Iterable[str]] = None) -> None:
        super().__init__(message)
        self._message = message
        self._error_labels = set(error_labels or [])

    def has_error_label(self, label: str) -> bool:
        """Return True if this error contains the given label."""
        return label in self._error_labels

    @property
    def timeout(self) -> bool:
        """True if this error was caused by a timeout."""
        return False


class InvalidArgument(FindModifyError, ValueError):
    """Raised when an operation is malformed before it reaches the wire.

    For example, an update document without any update operator keys.
    Subclass of :exc:`ValueError`.
    """


class InvalidName(InvalidArgument):
    """Raised when an invalid database or collection name is used."""


class ConfigurationError(FindModifyError):
    """Raised when something is incorrectly configured."""


class UnsupportedFeature(ConfigurationError):
    """Raised when a configured feature is not supported by the server.

    Detected while rendering the command, so no command is sent.
    """


class ConnectionFailure(FindModifyError):
    """Raised when a connection to the database cannot be made or is lost.

    This is the transport failure category. It is never retried by
    findmodify; the operation may or may not have taken effect.
    """


class AutoReconnect(ConnectionFailure):
    """Raised when a connection to the database is lost.

    Subclass of :exc:`~findmodify.errors.ConnectionFailure`.
    """

    errors: Any
    details: Any

    def __init__(self, message: str = "", errors: Optional[Any] = None) -> None:
        error_labels = None
        if errors is not None:
            if isinstance(errors, dict):
                error_labels = errors.get("errorLabels")
        super().__init__(message, error_labels)
        self.errors = self.details = errors or []


class NetworkTimeout(AutoReconnect):
    """An operation on an open connection exceeded the socket timeout.

    You cannot know whether the find and modify took effect.

    Subclass of :exc:`~findmodify.errors.AutoReconnect`.
    """

    @property
    def timeout(self) -> bool:
        return True


def _format_detailed_error(message: str, details: Optional[Any]) -> str:
    if details is not None:
        message = f"{message}, full error: {details}"
    return message


class OperationFailure(FindModifyError):
    """Base class for failures reported by the server in a command reply."""

    def __init__(
        self,
        error: str,
        code: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        error_labels = None
        if details is not None:
            error_labels = details.get("errorLabels")
        super().__init__(_format_detailed_error(error, details), error_labels=error_labels)
        self.__error = error
        self.__code = code
        self.__details = details

    @property
    def code(self) -> Optional[int]:
        """The error code returned by the server, if any."""
        return self.__code

    @property
    def message(self) -> str:
        """The error message returned by the server."""
        return self.__error

    @property
    def details(self) -> Optional[Mapping[str, Any]]:
        """The complete error document returned by the server.

        When connected to a mongos the error document may contain one or
        more subdocuments if errors occurred on multiple shards.
        """
        return self.__details

    @property
    def timeout(self) -> bool:
        return self.__code in (50,)

    def __reduce__(self) -> Tuple[Any, Any]:
        return self.__class__, (self.__error, self.__code, self.__details)


class CommandFailure(OperationFailure):
    """Raised when the server rejected the command outright.

    No mutation took place.
    """


class ExecutionTimeout(CommandFailure):
    """Raised when the command exceeded the ``maxTimeMS`` set on the operation."""

    @property
    def timeout(self) -> bool:
        return True


class DuplicateKeyError(CommandFailure):
    """Raised when an upsert or update fails due to a duplicate key error."""


class DocumentValidationFailure(CommandFailure):
    """Raised when the collection's document validator rejected the write."""


class WriteConcernFailure(OperationFailure):
    """Raised when the write took effect but the write concern was not satisfied.

    :attr:`write_result` describes the write that did happen: how many
    documents were affected, whether an existing document was updated, and
    the ``_id`` of the upserted document, if any.
    """

    def __init__(
        self,
        error: str,
        code: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
        write_result: Optional[FindAndModifyWriteResult] = None,
    ) -> None:
        super().__init__(error, code, details)
        self.__write_result = write_result

    @property
    def write_result(self) -> Optional[FindAndModifyWriteResult]:
        """The :class:`~findmodify.results.FindAndModifyWriteResult`, if known."""
        return self.__write_result

    def __reduce__(self) -> Tuple[Any, Any]:
        return self.__class__, (self.message, self.code, self.details, self.__write_result)


class WTimeoutError(WriteConcernFailure):
    """Raised when ``wtimeout`` expired before replication completed."""

    @property
    def timeout(self) -> bool:
        return True
