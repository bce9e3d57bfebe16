# Copyright 2010-present MongoDB, Inc.
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

"""Synchronous test suite for findmodify."""
from __future__ import annotations

import logging
import unittest
from contextlib import contextmanager
from typing import Any, Iterator

from findmodify.logger import _COMMAND_LOGGER

_IS_SYNC = True


def sanitize_cmd(cmd: Any) -> dict:
    cp = dict(cmd)
    cp.pop("lsid", None)
    cp.pop("$db", None)
    return cp


class FindModifyTestCase(unittest.TestCase):
    def assertEqualCommand(self, expected, actual, msg=None):
        self.assertEqual(sanitize_cmd(expected), sanitize_cmd(actual), msg)

    def assertCommandKeys(self, expected_keys, cmd, msg=None):
        self.assertEqual(list(expected_keys), list(cmd), msg)

    @contextmanager
    def command_logs(self) -> Iterator[Any]:
        with self.assertLogs(_COMMAND_LOGGER, level=logging.DEBUG) as cm:
            yield cm


class UnitTest(FindModifyTestCase):
    """Base class for TestCases that don't require a connection to MongoDB."""

    def setUp(self) -> None:
        pass

    def tearDown(self) -> None:
        pass
