# Copyright 2012-present MongoDB, Inc.
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

"""Utilities for testing findmodify without a server."""
from __future__ import annotations

import asyncio
import copy
import datetime
from typing import Any, Mapping, Optional

from bson.objectid import ObjectId
from findmodify.asynchronous.connection import AsyncConnection
from findmodify.capabilities import ServerCapabilities
from findmodify.codec import Decoder
from findmodify.synchronous.connection import Connection

_COMPARISONS = {
    "$eq": lambda a, b: a == b,
    "$gt": lambda a, b: a is not None and a > b,
    "$gte": lambda a, b: a is not None and a >= b,
    "$lt": lambda a, b: a is not None and a < b,
    "$lte": lambda a, b: a is not None and a <= b,
}


def _fold(value: Any, collation: Optional[Mapping[str, Any]]) -> Any:
    # Strength 1 and 2 collations ignore case.
    if collation and collation.get("strength", 3) <= 2 and isinstance(value, str):
        return value.casefold()
    return value


def _matches(
    doc: Mapping[str, Any], query: Mapping[str, Any], collation: Optional[Mapping[str, Any]] = None
) -> bool:
    for key, condition in query.items():
        actual = _fold(doc.get(key), collation)
        if isinstance(condition, Mapping) and condition and all(k.startswith("$") for k in condition):
            for op, operand in condition.items():
                if not _COMPARISONS[op](actual, _fold(operand, collation)):
                    return False
        elif actual != _fold(condition, collation):
            return False
    return True


def _apply_update(doc: Mapping[str, Any], update: Mapping[str, Any]) -> dict:
    if not any(key.startswith("$") for key in update):
        replaced = {"_id": doc["_id"]} if "_id" in doc else {}
        replaced.update(copy.deepcopy(dict(update)))
        return replaced
    new = copy.deepcopy(dict(doc))
    for op, fields in update.items():
        for field, value in fields.items():
            if op == "$set":
                new[field] = value
            elif op == "$inc":
                new[field] = new.get(field, 0) + value
            elif op == "$unset":
                new.pop(field, None)
            else:
                raise ValueError(f"unsupported update operator {op}")
    return new


def _project(doc: Optional[dict], fields: Optional[Mapping[str, Any]]) -> Optional[dict]:
    if doc is None or not fields:
        return doc
    include = {k for k, v in fields.items() if v and k != "_id"}
    if include:
        projected = {k: v for k, v in doc.items() if k in include}
        if fields.get("_id", 1) and "_id" in doc:
            projected = {"_id": doc["_id"], **projected}
        return projected
    return {k: v for k, v in doc.items() if fields.get(k, 1)}


class MockServer:
    """An in-memory server that understands the findAndModify command.

    Supports equality and comparison filters, $set, $inc and $unset,
    replacement, upsert, sort, projection, case insensitive collations, a
    per collection validator, and unsatisfiable write concerns (a numeric
    ``w`` greater than `members`).
    """

    def __init__(self, version: Any = (4, 4, 0), members: int = 1) -> None:
        self.capabilities = ServerCapabilities(version)
        self.members = members
        self.collections: dict[str, list[dict]] = {}
        self.validators: dict[str, Mapping[str, Any]] = {}
        self.commands: list[tuple[str, dict]] = []
        self.max_time_expired = False

    def create_collection(self, name: str, validator: Optional[Mapping[str, Any]] = None) -> None:
        self.collections.setdefault(name, [])
        if validator is not None:
            self.validators[name] = validator

    def insert(self, name: str, *documents: Mapping[str, Any]) -> None:
        docs = self.collections.setdefault(name, [])
        for document in documents:
            doc = copy.deepcopy(dict(document))
            doc.setdefault("_id", ObjectId())
            docs.append(doc)

    def find(self, name: str, query: Optional[Mapping[str, Any]] = None) -> list[dict]:
        return [
            copy.deepcopy(doc) for doc in self.collections.get(name, []) if _matches(doc, query or {})
        ]

    def run_command(self, dbname: str, cmd: Mapping[str, Any]) -> dict:
        self.commands.append((dbname, copy.deepcopy(dict(cmd))))
        if "findandmodify" not in cmd:
            return {"ok": 0, "errmsg": f"no such command: '{next(iter(cmd))}'", "code": 59}
        if self.max_time_expired and cmd.get("maxTimeMS"):
            return {"ok": 0, "errmsg": "operation exceeded time limit", "code": 50}
        reply = self._find_and_modify(cmd)
        wc = cmd.get("writeConcern") or {}
        if reply["ok"] and isinstance(wc.get("w"), int) and wc["w"] > self.members:
            reply["writeConcernError"] = {
                "code": 100,
                "codeName": "UnsatisfiableWriteConcern",
                "errmsg": "Not enough data-bearing nodes",
            }
        return reply

    def _validate(self, name: str, doc: Mapping[str, Any], cmd: Mapping[str, Any]) -> bool:
        validator = self.validators.get(name)
        if validator is None or cmd.get("bypassDocumentValidation") is True:
            return True
        return _matches(doc, validator)

    def _find_and_modify(self, cmd: Mapping[str, Any]) -> dict:
        name = cmd["findandmodify"]
        docs = self.collections.setdefault(name, [])
        query = cmd.get("query") or {}
        collation = cmd.get("collation")
        matches = [doc for doc in docs if _matches(doc, query, collation)]
        for key, direction in reversed(list((cmd.get("sort") or {}).items())):
            matches.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        doc = matches[0] if matches else None

        if cmd.get("remove"):
            if doc is not None:
                docs.remove(doc)
            return {
                "lastErrorObject": {"n": 0 if doc is None else 1},
                "value": _project(copy.deepcopy(doc), cmd.get("fields")),
                "ok": 1,
            }

        update = cmd["update"]
        if doc is None:
            if not cmd.get("upsert"):
                return {
                    "lastErrorObject": {"n": 0, "updatedExisting": False},
                    "value": None,
                    "ok": 1,
                }
            seed = {k: v for k, v in query.items() if not isinstance(v, Mapping)}
            new = _apply_update(seed, update)
            new.setdefault("_id", ObjectId())
            if not self._validate(name, new, cmd):
                return _validation_failure()
            docs.append(new)
            return {
                "lastErrorObject": {"n": 1, "updatedExisting": False, "upserted": new["_id"]},
                "value": _project(copy.deepcopy(new), cmd.get("fields")) if cmd.get("new") else None,
                "ok": 1,
            }

        new = _apply_update(doc, update)
        if not self._validate(name, new, cmd):
            return _validation_failure()
        docs[docs.index(doc)] = new
        value = new if cmd.get("new") else doc
        return {
            "lastErrorObject": {"n": 1, "updatedExisting": True},
            "value": _project(copy.deepcopy(value), cmd.get("fields")),
            "ok": 1,
        }


def _validation_failure() -> dict:
    return {
        "ok": 0,
        "errmsg": "Document failed validation",
        "code": 121,
        "codeName": "DocumentValidationFailure",
    }


class MockConnection(Connection):
    """A blocking connection to a :class:`MockServer`."""

    def __init__(
        self,
        server: MockServer,
        capabilities: Optional[ServerCapabilities] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.server = server
        self._capabilities = capabilities
        self.error = error
        self.commands: list[tuple[str, dict, ServerCapabilities]] = []

    @property
    def capabilities(self) -> ServerCapabilities:
        return self._capabilities or self.server.capabilities

    @property
    def address(self):
        return ("localhost", 27017)

    def command(self, dbname, spec, capabilities):
        self.commands.append((dbname, copy.deepcopy(spec), capabilities))
        if self.error is not None:
            raise self.error
        return self.server.run_command(dbname, spec)


class AsyncMockConnection(AsyncConnection):
    """An asyncio connection to a :class:`MockServer`."""

    def __init__(
        self,
        server: MockServer,
        capabilities: Optional[ServerCapabilities] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.server = server
        self._capabilities = capabilities
        self.error = error
        self.commands: list[tuple[str, dict, ServerCapabilities]] = []

    @property
    def capabilities(self) -> ServerCapabilities:
        return self._capabilities or self.server.capabilities

    @property
    def address(self):
        return ("localhost", 27017)

    async def command(self, dbname, spec, capabilities):
        self.commands.append((dbname, copy.deepcopy(spec), capabilities))
        # Yield to the event loop like a real round trip.
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.server.run_command(dbname, spec)


class CannedConnection(Connection):
    """Record the command sent and answer with a fixed reply."""

    def __init__(self, capabilities: ServerCapabilities, reply: Mapping[str, Any]) -> None:
        self._capabilities = capabilities
        self.reply = reply
        self.commands: list[dict] = []

    @property
    def capabilities(self) -> ServerCapabilities:
        return self._capabilities

    def command(self, dbname, spec, capabilities):
        self.commands.append(copy.deepcopy(spec))
        return copy.deepcopy(self.reply)


class AsyncCannedConnection(AsyncConnection):
    """Record the command sent and answer with a fixed reply."""

    def __init__(self, capabilities: ServerCapabilities, reply: Mapping[str, Any]) -> None:
        self._capabilities = capabilities
        self.reply = reply
        self.commands: list[dict] = []

    @property
    def capabilities(self) -> ServerCapabilities:
        return self._capabilities

    async def command(self, dbname, spec, capabilities):
        self.commands.append(copy.deepcopy(spec))
        return copy.deepcopy(self.reply)


class Worker:
    def __init__(self, name: str, job_title: str, date_started: datetime.datetime, number_of_jobs: int):
        self.name = name
        self.job_title = job_title
        self.date_started = date_started
        self.number_of_jobs = number_of_jobs

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "jobTitle": self.job_title,
            "dateStarted": self.date_started,
            "numberOfJobs": self.number_of_jobs,
        }

    def __eq__(self, other):
        if isinstance(other, Worker):
            return self.to_document() == other.to_document()
        return NotImplemented

    def __repr__(self):
        return f"Worker({self.name!r}, {self.job_title!r}, {self.number_of_jobs!r})"


class WorkerDecoder(Decoder[Worker]):
    def decode(self, document):
        return Worker(
            document["name"], document["jobTitle"], document["dateStarted"], document["numberOfJobs"]
        )
