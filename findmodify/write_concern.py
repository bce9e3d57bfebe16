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

"""Common write concerns for find and modify operations.

These are :class:`pymongo.write_concern.WriteConcern` instances. Any other
:class:`~pymongo.write_concern.WriteConcern` may be used as well.
"""
from __future__ import annotations

from pymongo.write_concern import DEFAULT_WRITE_CONCERN, WriteConcern

ACKNOWLEDGED = DEFAULT_WRITE_CONCERN
"""Acknowledged writes using the server's default write concern."""

W1 = WriteConcern(w=1)
"""Acknowledged by the primary only, sent explicitly with the command."""

UNACKNOWLEDGED = WriteConcern(w=0)
"""Fire and forget."""

MAJORITY = WriteConcern(w="majority")
"""Acknowledged by a majority of the replica set."""

__all__ = ["ACKNOWLEDGED", "MAJORITY", "UNACKNOWLEDGED", "W1", "WriteConcern"]
