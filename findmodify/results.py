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

"""Result class definitions."""
from __future__ import annotations

from typing import Any, Mapping, Optional


class _NoMatchType:
    """Type of the :data:`NO_MATCH` sentinel."""

    __slots__ = ()
    _instance: Optional[_NoMatchType] = None

    def __new__(cls) -> _NoMatchType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_MATCH"

    def __reduce__(self) -> str:
        return "NO_MATCH"


NO_MATCH = _NoMatchType()
"""Returned by a find and modify execution when no document matched the
filter (and no document was upserted). It is falsy, and distinct from
``None`` and from a decoded empty document.
"""


class FindAndModifyWriteResult:
    """What the server reports about the write done by a find and modify.

    Built from the ``lastErrorObject`` of the command reply. Available on
    :attr:`~findmodify.errors.WriteConcernFailure.write_result` when the
    write took effect but the write concern was not satisfied.
    """

    __slots__ = ("__count", "__updated_existing", "__upserted_id")

    def __init__(self, count: int, updated_existing: bool, upserted_id: Any = None) -> None:
        self.__count = count
        self.__updated_existing = updated_existing
        self.__upserted_id = upserted_id

    @classmethod
    def _from_reply(cls, reply: Mapping[str, Any]) -> FindAndModifyWriteResult:
        last_error = reply.get("lastErrorObject") or {}
        return cls(
            last_error.get("n", 0),
            bool(last_error.get("updatedExisting", False)),
            last_error.get("upserted"),
        )

    @property
    def count(self) -> int:
        """The number of documents affected."""
        return self.__count

    @property
    def updated_existing(self) -> bool:
        """``True`` if an existing document was updated, ``False`` if the
        document was upserted or nothing matched.
        """
        return self.__updated_existing

    @property
    def upserted_id(self) -> Any:
        """The _id of the upserted document, or ``None``."""
        return self.__upserted_id

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(count={self.__count!r}, "
            f"updated_existing={self.__updated_existing!r}, "
            f"upserted_id={self.__upserted_id!r})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FindAndModifyWriteResult):
            return (self.__count, self.__updated_existing, self.__upserted_id) == (
                other.count,
                other.updated_existing,
                other.upserted_id,
            )
        return NotImplemented

    def __ne__(self, other: Any) -> bool:
        return not self == other
