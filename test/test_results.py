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

"""Test results module."""
from __future__ import annotations

import copy
import pickle
import sys

sys.path[0:0] = [""]

from test import UnitTest, unittest

import findmodify
from bson.objectid import ObjectId
from findmodify.results import NO_MATCH, FindAndModifyWriteResult, _NoMatchType


class TestResults(UnitTest):
    def test_no_match(self):
        self.assertIs(NO_MATCH, _NoMatchType())
        self.assertFalse(NO_MATCH)
        self.assertIsNot(None, NO_MATCH)
        self.assertNotEqual({}, NO_MATCH)
        self.assertEqual("NO_MATCH", repr(NO_MATCH))
        self.assertIs(NO_MATCH, pickle.loads(pickle.dumps(NO_MATCH)))
        self.assertIs(NO_MATCH, copy.deepcopy(NO_MATCH))

    def test_write_result_from_reply(self):
        upserted = ObjectId()
        result = FindAndModifyWriteResult._from_reply(
            {"lastErrorObject": {"n": 1, "updatedExisting": False, "upserted": upserted}}
        )
        self.assertEqual(1, result.count)
        self.assertFalse(result.updated_existing)
        self.assertEqual(upserted, result.upserted_id)

        result = FindAndModifyWriteResult._from_reply({"ok": 1})
        self.assertEqual(FindAndModifyWriteResult(0, False), result)

    def test_write_result_repr(self):
        self.assertEqual(
            "FindAndModifyWriteResult(count=1, updated_existing=True, upserted_id=None)",
            repr(FindAndModifyWriteResult(1, True)),
        )
        self.assertNotEqual(FindAndModifyWriteResult(1, True), FindAndModifyWriteResult(1, False))


class TestVersion(UnitTest):
    def test_version(self):
        self.assertEqual(findmodify.__version__, findmodify.version)
        self.assertEqual(findmodify.__version__, findmodify.get_version_string())
        self.assertEqual((1, 0, 0, "dev0"), findmodify.version_tuple)

    def test_public_api(self):
        for name in findmodify.__all__:
            self.assertTrue(hasattr(findmodify, name), name)


if __name__ == "__main__":
    unittest.main()
