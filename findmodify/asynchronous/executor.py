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

"""Run a find and modify operation on an asynchronous connection."""
from __future__ import annotations

import asyncio
import datetime
import time
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from findmodify.errors import ConnectionFailure, OperationFailure
from findmodify.helpers_shared import _raise_connection_failure
from findmodify.logger import _COMMAND_LOGGER, _CommandStatusMessage, _debug_log
from findmodify.results import _NoMatchType

if TYPE_CHECKING:
    from findmodify.asynchronous.connection import AsyncConnection
    from findmodify.operations import _FindAndModifyOperation

_IS_SYNC = False

_COMMAND_NAME = "findAndModify"


def _log_failed(
    dbname: str, conn: Any, start: float, exc: BaseException, server_side: bool
) -> None:
    if server_side and isinstance(exc, OperationFailure) and exc.details is not None:
        failure: Any = exc.details
    else:
        failure = repr(exc)
        server_side = False
    _debug_log(
        _COMMAND_LOGGER,
        message=_CommandStatusMessage.FAILED,
        commandName=_COMMAND_NAME,
        databaseName=dbname,
        durationMS=datetime.timedelta(seconds=time.monotonic() - start),
        failure=failure,
        isServerSideError=server_side,
        serverHost=conn.address[0] if conn.address else None,
        serverPort=conn.address[1] if conn.address else None,
    )


async def execute(
    operation: _FindAndModifyOperation[Any], conn: AsyncConnection
) -> Union[Any, _NoMatchType]:
    """Execute `operation` on `conn` and return the decoded document.

    Returns :data:`~findmodify.results.NO_MATCH` when nothing matched.
    Nothing is retried: transport, command and write concern failures are
    raised to the caller after at most one round trip.
    """
    capabilities = conn.capabilities
    cmd = operation._as_command(capabilities)
    dbname = operation.namespace.database
    address = conn.address
    _debug_log(
        _COMMAND_LOGGER,
        message=_CommandStatusMessage.STARTED,
        command=cmd,
        commandName=_COMMAND_NAME,
        databaseName=dbname,
        serverHost=address[0] if address else None,
        serverPort=address[1] if address else None,
    )
    start = time.monotonic()
    try:
        reply = await conn.command(dbname, cmd, capabilities)
    except ConnectionFailure as exc:
        _log_failed(dbname, conn, start, exc, server_side=False)
        raise
    except OSError as exc:
        _log_failed(dbname, conn, start, exc, server_side=False)
        _raise_connection_failure(address, exc)

    try:
        result = operation._process_reply(reply)
    except Exception as exc:
        _log_failed(dbname, conn, start, exc, server_side=isinstance(exc, OperationFailure))
        raise
    _debug_log(
        _COMMAND_LOGGER,
        message=_CommandStatusMessage.SUCCEEDED,
        commandName=_COMMAND_NAME,
        databaseName=dbname,
        durationMS=datetime.timedelta(seconds=time.monotonic() - start),
        reply=reply,
        serverHost=address[0] if address else None,
        serverPort=address[1] if address else None,
    )
    return result


def execute_with_callback(
    operation: _FindAndModifyOperation[Any],
    conn: AsyncConnection,
    callback: Optional[Callable[[Any, Optional[BaseException]], Any]] = None,
) -> asyncio.Task:
    """Schedule :func:`execute` on the running event loop.

    If given, `callback` is called with ``(result, None)`` on success or
    ``(None, error)`` on failure, from the event loop's thread. A cancelled
    task reports :exc:`asyncio.CancelledError` as the error.
    """
    task = asyncio.get_running_loop().create_task(execute(operation, conn))
    if callback is not None:

        def _on_done(fut: asyncio.Task) -> None:
            if fut.cancelled():
                callback(None, asyncio.CancelledError())
                return
            error = fut.exception()
            if error is not None:
                callback(None, error)
            else:
                callback(fut.result(), None)

        task.add_done_callback(_on_done)
    return task
