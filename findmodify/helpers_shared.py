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

"""Bits and pieces used by both the synchronous and asynchronous executors."""
from __future__ import annotations

import socket
from collections import abc
from ssl import SSLError
from typing import Any, Iterable, Mapping, NoReturn, Optional, Sequence, Tuple, Union

from bson.son import SON
from findmodify import common
from findmodify.errors import (
    AutoReconnect,
    CommandFailure,
    DocumentValidationFailure,
    DuplicateKeyError,
    ExecutionTimeout,
    NetworkTimeout,
    WriteConcernFailure,
    WTimeoutError,
)
from findmodify.results import FindAndModifyWriteResult

_Address = Tuple[str, Optional[int]]


def _index_document(index_list: Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]) -> Any:
    """Helper to generate a sort specifying document.

    Takes a mapping, or a list of (key, direction) pairs.
    """
    if isinstance(index_list, abc.Mapping):
        return index_list
    if not isinstance(index_list, (list, tuple)):
        raise TypeError(f"must use a list of (key, direction) pairs, not: {index_list!r}")
    if not len(index_list):
        raise ValueError("key_or_list must not be empty")

    index = SON()
    for item in index_list:
        if isinstance(item, str):
            item = (item, 1)
        key, value = item
        if not isinstance(key, str):
            raise TypeError(f"first item in each key pair must be an instance of str, not {type(key)}")
        index[key] = value
    return index


def _fields_list_to_dict(
    fields: Union[Mapping[str, Any], Iterable[str]], option_name: str
) -> Mapping[str, Any]:
    """Takes a sequence of field names and returns a matching dictionary.

    ["a", "b"] becomes {"a": 1, "b": 1}

    and

    ["a.b.c", "d", "a.c"] becomes {"a.b.c": 1, "d": 1, "a.c": 1}
    """
    if isinstance(fields, abc.Mapping):
        return fields

    if isinstance(fields, (abc.Sequence, abc.Set)):
        if not all(isinstance(field, str) for field in fields):
            raise TypeError(f"{option_name} must be a list of key names, each an instance of str")
        return dict.fromkeys(fields, 1)

    raise TypeError(f"{option_name} must be a mapping or list of key names")


def _raise_connection_failure(
    address: Optional[_Address], error: Exception, msg_prefix: Optional[str] = None
) -> NoReturn:
    """Convert a socket.error to ConnectionFailure and raise it."""
    if address is None:
        msg = str(error)
    else:
        host, port = address
        # If connecting to a Unix socket, port will be None.
        if port is not None:
            msg = "%s:%d: %s" % (host, port, error)
        else:
            msg = f"{host}: {error}"
    if msg_prefix:
        msg = msg_prefix + msg
    if isinstance(error, socket.timeout):
        raise NetworkTimeout(msg) from error
    elif isinstance(error, SSLError) and "timed out" in str(error):
        raise NetworkTimeout(msg) from error
    else:
        raise AutoReconnect(msg) from error


def _check_command_response(response: Mapping[str, Any]) -> None:
    """Check the response to a command for errors."""
    if "ok" not in response:
        # Server didn't recognize our message as a command.
        raise CommandFailure(
            response.get("$err", "unrecognized command reply"),
            response.get("code"),
            response,
        )

    if response["ok"]:
        return

    details = response
    # Mongos returns the error details in a 'raw' object
    # for some errors.
    if "raw" in response:
        for shard in response["raw"].values():
            # Grab the first non-empty raw error from a shard.
            if shard.get("errmsg") and not shard.get("ok"):
                details = shard
                break

    errmsg = details.get("errmsg", "command failed")
    code = details.get("code")

    # findAndModify with upsert can raise duplicate key error
    if code in common._DUPLICATE_KEY_CODES:
        raise DuplicateKeyError(errmsg, code, response)
    elif code == common._MAX_TIME_EXPIRED_CODE:
        raise ExecutionTimeout(errmsg, code, response)
    elif code == common._DOCUMENT_VALIDATION_FAILURE_CODE:
        raise DocumentValidationFailure(errmsg, code, response)

    raise CommandFailure(errmsg, code, response)


def _wtimeout_error(error: Mapping[str, Any]) -> bool:
    """Return True if this writeConcernError doc is a caused by a timeout."""
    return error.get("code") == 50 or bool(
        "errInfo" in error and error["errInfo"].get("wtimeout")
    )


def _raise_write_concern_error(error: Mapping[str, Any], reply: Mapping[str, Any]) -> NoReturn:
    write_result = FindAndModifyWriteResult._from_reply(reply)
    details = dict(error)
    labels = reply.get("errorLabels")
    if labels:
        details["errorLabels"] = labels
    if _wtimeout_error(error):
        # Make sure we raise WTimeoutError
        raise WTimeoutError(error.get("errmsg", ""), error.get("code"), details, write_result)
    raise WriteConcernFailure(error.get("errmsg", ""), error.get("code"), details, write_result)


def _check_find_and_modify_response(reply: Mapping[str, Any]) -> None:
    """Translate a find and modify reply into an exception, if it is one.

    A command failure means nothing happened. A write concern error on a
    successful reply means the write happened but was not acknowledged as
    requested.
    """
    _check_command_response(reply)
    wce = reply.get("writeConcernError")
    if wce:
        _raise_write_concern_error(wce, reply)
