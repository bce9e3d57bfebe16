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

"""Database and collection name pairs."""
from __future__ import annotations

from typing import Any, Union

from findmodify.errors import InvalidName

_INVALID_DATABASE_CHARACTERS = (" ", ".", "$", "/", "\\", "\x00", '"')


def _check_database_name(name: Any) -> str:
    """Check if a database name is valid."""
    if not isinstance(name, str):
        raise TypeError(f"database name must be an instance of str, not {type(name)}")
    if not name:
        raise InvalidName("database name cannot be the empty string")

    for invalid_char in _INVALID_DATABASE_CHARACTERS:
        if invalid_char in name:
            raise InvalidName(f"database names cannot contain the character {invalid_char!r}")
    return name


def _check_collection_name(name: Any) -> str:
    """Check if a collection name is valid."""
    if not isinstance(name, str):
        raise TypeError(f"collection name must be an instance of str, not {type(name)}")
    if not name or ".." in name:
        raise InvalidName("collection names cannot be empty")
    if "$" in name and not (name.startswith(("oplog.$main", "$cmd"))):
        raise InvalidName(f"collection names must not contain '$': {name!r}")
    if name[0] == "." or name[-1] == ".":
        raise InvalidName(f"collection names must not start or end with '.': {name!r}")
    if "\x00" in name:
        raise InvalidName("collection names must not contain the null character")
    return name


class Namespace:
    """A database name and collection name pair.

    :param database: The name of the database.
    :param collection: The name of the collection.
    """

    __slots__ = ("__database", "__collection")

    def __init__(self, database: str, collection: str) -> None:
        self.__database = _check_database_name(database)
        self.__collection = _check_collection_name(collection)

    @classmethod
    def from_full_name(cls, full_name: str) -> Namespace:
        """Create a :class:`Namespace` from ``"<database>.<collection>"``."""
        if not isinstance(full_name, str):
            raise TypeError(f"full_name must be an instance of str, not {type(full_name)}")
        database, sep, collection = full_name.partition(".")
        if not sep:
            raise InvalidName(f"{full_name!r} is not a full namespace of the form 'db.coll'")
        return cls(database, collection)

    @property
    def database(self) -> str:
        """The name of the database."""
        return self.__database

    @property
    def collection(self) -> str:
        """The name of the collection."""
        return self.__collection

    @property
    def full_name(self) -> str:
        return f"{self.__database}.{self.__collection}"

    def __repr__(self) -> str:
        return f"Namespace({self.__database!r}, {self.__collection!r})"

    def __str__(self) -> str:
        return self.full_name

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Namespace):
            return (self.__database, self.__collection) == (other.database, other.collection)
        return NotImplemented

    def __ne__(self, other: Any) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash((self.__database, self.__collection))


def _validate_namespace(value: Union[Namespace, str]) -> Namespace:
    if isinstance(value, Namespace):
        return value
    if isinstance(value, str):
        return Namespace.from_full_name(value)
    raise TypeError(f"namespace must be a Namespace or a 'db.coll' string, not {type(value)}")
