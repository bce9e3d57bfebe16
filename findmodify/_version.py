# Copyright 2022-present MongoDB, Inc.
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

"""Current version of findmodify."""
from __future__ import annotations

from typing import Tuple, Union

__version__ = "1.0.0.dev0"


def _parse(value: str) -> Tuple[Union[int, str], ...]:
    major, minor, rest = value.split(".", 2)
    patch, _, suffix = rest.partition(".")
    parts: list[Union[int, str]] = [int(major), int(minor), int(patch)]
    if suffix:
        parts.append(suffix)
    return tuple(parts)


version_tuple = _parse(__version__)
version = __version__


def get_version_string() -> str:
    return __version__
