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

"""Atomic find and modify commands for MongoDB."""
from __future__ import annotations

from findmodify._version import __version__, get_version_string, version_tuple
from findmodify.capabilities import ServerCapabilities, ServerVersion
from findmodify.codec import Decoder, DocumentDecoder, FunctionDecoder
from findmodify.namespace import Namespace
from findmodify.operations import (
    FindOneAndDelete,
    FindOneAndReplace,
    FindOneAndUpdate,
    ReturnDocument,
)
from findmodify.results import NO_MATCH, FindAndModifyWriteResult
from findmodify.write_concern import (
    ACKNOWLEDGED,
    MAJORITY,
    UNACKNOWLEDGED,
    W1,
    WriteConcern,
)
from pymongo.collation import (
    Collation,
    CollationAlternate,
    CollationCaseFirst,
    CollationMaxVariable,
    CollationStrength,
)

__all__ = [
    "ACKNOWLEDGED",
    "Collation",
    "CollationAlternate",
    "CollationCaseFirst",
    "CollationMaxVariable",
    "CollationStrength",
    "Decoder",
    "DocumentDecoder",
    "FindAndModifyWriteResult",
    "FindOneAndDelete",
    "FindOneAndReplace",
    "FindOneAndUpdate",
    "FunctionDecoder",
    "MAJORITY",
    "NO_MATCH",
    "Namespace",
    "ReturnDocument",
    "ServerCapabilities",
    "ServerVersion",
    "UNACKNOWLEDGED",
    "W1",
    "WriteConcern",
    "get_version_string",
    "version_tuple",
]

version = __version__
"""Current version of findmodify."""
