# Copyright 2024-present MongoDB, Inc.
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

"""The connection interface an operation is executed on.

findmodify does not open, pool or authenticate connections. The caller
hands an already checked out connection to each execution, and gets it
back untouched when the execution returns.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping, MutableMapping, Optional, Tuple

if TYPE_CHECKING:
    from findmodify.capabilities import ServerCapabilities

_IS_SYNC = True


class Connection(ABC):
    """A connection to one server, able to run a command."""

    @property
    @abstractmethod
    def capabilities(self) -> ServerCapabilities:
        """The :class:`~findmodify.capabilities.ServerCapabilities` of the server."""

    @property
    def address(self) -> Optional[Tuple[str, Optional[int]]]:
        """The (host, port) of the server, used in error messages."""
        return None

    @abstractmethod
    def command(
        self,
        dbname: str,
        spec: MutableMapping[str, Any],
        capabilities: ServerCapabilities,
    ) -> Mapping[str, Any]:
        """Send `spec` to database `dbname` and return the reply document.

        Transport failures should be raised as
        :exc:`~findmodify.errors.ConnectionFailure` or :exc:`OSError`. Server
        side errors are returned in the reply, not raised.
        """
