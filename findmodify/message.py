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

"""Generate the find and modify command document.

Rendering is a pure function of the operation and the
:class:`~findmodify.capabilities.ServerCapabilities` of the connection it
will be sent on. Every field that depends on the server is listed in
:data:`_FIND_AND_MODIFY_RULES`, in the order it is added to the command.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, NamedTuple

from bson.int64 import Int64
from findmodify.errors import UnsupportedFeature
from findmodify.helpers_shared import _fields_list_to_dict, _index_document

if TYPE_CHECKING:
    from findmodify.capabilities import ServerCapabilities
    from findmodify.operations import _FindAndModifyOperation


class _CommandRule(NamedTuple):
    """One optional field of the command."""

    field: str
    applies: Callable[[_FindAndModifyOperation, ServerCapabilities], bool]
    value: Callable[[_FindAndModifyOperation], Any]


def _include_write_concern(op: _FindAndModifyOperation, caps: ServerCapabilities) -> bool:
    wc = op.write_concern
    return wc.acknowledged and not wc.is_server_default and caps.supports_write_concern


def _include_bypass_document_validation(
    op: _FindAndModifyOperation, caps: ServerCapabilities
) -> bool:
    return (
        op.get_bypass_document_validation() is not None
        and caps.supports_bypass_document_validation
        and op.write_concern.acknowledged
    )


_FIND_AND_MODIFY_RULES = (
    _CommandRule("query", lambda op, caps: op.get_filter() is not None, lambda op: op.get_filter()),
    _CommandRule(
        "sort",
        lambda op, caps: op.get_sort() is not None,
        lambda op: _index_document(op.get_sort()),
    ),
    _CommandRule(
        "fields",
        lambda op, caps: op.get_projection() is not None,
        lambda op: _fields_list_to_dict(op.get_projection(), "projection"),
    ),
    _CommandRule("upsert", lambda op, caps: op.is_upsert(), lambda op: True),
    _CommandRule("new", lambda op, caps: not op.is_return_original(), lambda op: True),
    _CommandRule(
        "maxTimeMS",
        lambda op, caps: op.get_max_time_ms() > 0,
        lambda op: Int64(op.get_max_time_ms()),
    ),
    _CommandRule("writeConcern", _include_write_concern, lambda op: op.write_concern.document),
    _CommandRule(
        "collation",
        lambda op, caps: op.get_collation() is not None,
        lambda op: op.get_collation().document,
    ),
    _CommandRule(
        "bypassDocumentValidation",
        _include_bypass_document_validation,
        lambda op: op.get_bypass_document_validation(),
    ),
)


def _check_feature_support(op: _FindAndModifyOperation, caps: ServerCapabilities) -> None:
    """Fail before any I/O if the operation needs something the server lacks."""
    if op.get_collation() is not None and not caps.supports_collation:
        raise UnsupportedFeature(
            f"Collation not supported by server version: {caps.server_version}"
        )


def _gen_find_and_modify_command(
    op: _FindAndModifyOperation, caps: ServerCapabilities
) -> dict[str, Any]:
    """Generate a find and modify command document."""
    _check_feature_support(op, caps)
    cmd: dict[str, Any] = {"findandmodify": op.namespace.collection}
    key, value = op._primary_field()
    cmd[key] = value
    for rule in _FIND_AND_MODIFY_RULES:
        if rule.applies(op, caps):
            cmd[rule.field] = rule.value(op)
    return cmd
