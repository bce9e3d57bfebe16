# Copyright 2014-present MongoDB, Inc.
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

"""Describe what the server behind a connection supports."""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from findmodify import common
from findmodify.common import validate_boolean_or_none


class ServerVersion(tuple):
    """A server version, padded to (major, minor, patch)."""

    def __new__(cls, *version: int) -> ServerVersion:
        return super().__new__(cls, tuple(cls._padded(version, 3)))

    @classmethod
    def _padded(cls, iter: Iterable[int], length: int, padding: int = 0) -> list[int]:
        l = list(iter)
        if len(l) < length:
            for _ in range(length - len(l)):
                l.append(padding)
        return l

    @classmethod
    def from_string(cls, version_string: str) -> ServerVersion:
        # Deal with '-rcX' and git describe generated substrings.
        if "-" in version_string:
            version_string = version_string[0 : version_string.find("-")]
        if version_string.endswith("+"):
            version_string = version_string[0:-1]
        return cls(*[int(part) for part in version_string.split(".")])

    @classmethod
    def from_version_array(cls, version_array: Iterable[int]) -> ServerVersion:
        # buildInfo reports pre-releases with a negative last element,
        # [3, 2, 1, -100] for example.
        version = [part for part in version_array if part >= 0]
        return cls(*version[:3])

    def at_least(self, *other_version: int) -> bool:
        return self >= ServerVersion(*other_version)

    def __str__(self) -> str:
        return ".".join(map(str, self))


class ServerCapabilities:
    """The capability descriptor for the server behind a connection.

    :param server_version: The server version, as a tuple, a
        :class:`ServerVersion`, or a string like ``"3.4.0"``.
    :param max_wire_version: (optional) The maxWireVersion reported by the
        server's hello response.
    :param supports_write_concern: (optional) Override whether a
        ``writeConcern`` can be sent with the find and modify command.
    :param supports_collation: (optional) Override whether collation is
        supported.
    :param supports_bypass_document_validation: (optional) Override whether
        ``bypassDocumentValidation`` is supported.

    Unless overridden, each feature flag is derived from the server version
    using the minimums in :mod:`findmodify.common`.
    """

    __slots__ = (
        "__server_version",
        "__max_wire_version",
        "__supports_write_concern",
        "__supports_collation",
        "__supports_bypass_document_validation",
    )

    def __init__(
        self,
        server_version: Any,
        max_wire_version: Optional[int] = None,
        supports_write_concern: Optional[bool] = None,
        supports_collation: Optional[bool] = None,
        supports_bypass_document_validation: Optional[bool] = None,
    ) -> None:
        if isinstance(server_version, str):
            server_version = ServerVersion.from_string(server_version)
        elif not isinstance(server_version, ServerVersion):
            server_version = ServerVersion(*server_version)
        self.__server_version = server_version
        if max_wire_version is not None:
            max_wire_version = common.validate_non_negative_integer(
                "max_wire_version", max_wire_version
            )
        self.__max_wire_version = max_wire_version
        if supports_write_concern is None:
            supports_write_concern = server_version.at_least(*common.MIN_WRITE_CONCERN_VERSION)
        if supports_collation is None:
            supports_collation = server_version.at_least(*common.MIN_COLLATION_VERSION)
        if supports_bypass_document_validation is None:
            supports_bypass_document_validation = server_version.at_least(
                *common.MIN_BYPASS_DOCUMENT_VALIDATION_VERSION
            )
        self.__supports_write_concern = validate_boolean_or_none(
            "supports_write_concern", supports_write_concern
        )
        self.__supports_collation = validate_boolean_or_none(
            "supports_collation", supports_collation
        )
        self.__supports_bypass_document_validation = validate_boolean_or_none(
            "supports_bypass_document_validation", supports_bypass_document_validation
        )

    @classmethod
    def from_max_wire_version(cls, max_wire_version: int) -> ServerCapabilities:
        """Derive capabilities from a hello response's maxWireVersion."""
        max_wire_version = common.validate_non_negative_integer(
            "max_wire_version", max_wire_version
        )
        known = [wv for wv in common.WIRE_VERSION_TO_SERVER_VERSION if wv <= max_wire_version]
        version = common.WIRE_VERSION_TO_SERVER_VERSION[max(known)] if known else (0, 0)
        return cls(version, max_wire_version=max_wire_version)

    @classmethod
    def from_server_info(cls, info: Mapping[str, Any]) -> ServerCapabilities:
        """Derive capabilities from a buildInfo or hello response."""
        max_wire_version = info.get("maxWireVersion")
        if "versionArray" in info:
            version = ServerVersion.from_version_array(info["versionArray"])
        elif "version" in info:
            version = ServerVersion.from_string(info["version"])
        elif max_wire_version is not None:
            return cls.from_max_wire_version(max_wire_version)
        else:
            raise ValueError("server info must include a version or maxWireVersion")
        return cls(version, max_wire_version=max_wire_version)

    @property
    def server_version(self) -> ServerVersion:
        return self.__server_version

    @property
    def max_wire_version(self) -> Optional[int]:
        return self.__max_wire_version

    @property
    def supports_write_concern(self) -> bool:
        """Can the find and modify command carry a ``writeConcern``."""
        return self.__supports_write_concern  # type: ignore[return-value]

    @property
    def supports_collation(self) -> bool:
        return self.__supports_collation  # type: ignore[return-value]

    @property
    def supports_bypass_document_validation(self) -> bool:
        return self.__supports_bypass_document_validation  # type: ignore[return-value]

    def __repr__(self) -> str:
        return (
            f"ServerCapabilities(server_version={self.__server_version!r}, "
            f"max_wire_version={self.__max_wire_version!r}, "
            f"supports_write_concern={self.__supports_write_concern!r}, "
            f"supports_collation={self.__supports_collation!r}, "
            "supports_bypass_document_validation="
            f"{self.__supports_bypass_document_validation!r})"
        )

    def __key(self) -> tuple[Any, ...]:
        return (
            self.__server_version,
            self.__max_wire_version,
            self.__supports_write_concern,
            self.__supports_collation,
            self.__supports_bypass_document_validation,
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ServerCapabilities):
            return self.__key() == other.__key()
        return NotImplemented

    def __ne__(self, other: Any) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash(self.__key())
