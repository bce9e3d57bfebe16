# Copyright 2011-present MongoDB, Inc.
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


"""Functions and classes common to multiple findmodify modules."""
from __future__ import annotations

import os
from collections import abc
from typing import Any, Iterable, Mapping, Optional, Tuple

from findmodify.errors import InvalidArgument

# Minimum server versions for the find and modify command options that
# are gated on the connected server.
MIN_WRITE_CONCERN_VERSION = (3, 2)
MIN_BYPASS_DOCUMENT_VALIDATION_VERSION = (3, 2)
MIN_COLLATION_VERSION = (3, 4)

# Server release matching each maxWireVersion reported by hello.
WIRE_VERSION_TO_SERVER_VERSION = {
    0: (2, 4),
    2: (2, 6),
    3: (3, 0),
    4: (3, 2),
    5: (3, 4),
    6: (3, 6),
    7: (4, 0),
    8: (4, 2),
    9: (4, 4),
    13: (5, 0),
    17: (6, 0),
    21: (7, 0),
    25: (8, 0),
}

# Top-level keys of an update document starting with one of these
# prefixes are update operators.
UPDATE_OPERATOR_PREFIXES: Tuple[str, ...] = ("$",)

# Maximum length of a document rendered in a command log message.
DEFAULT_LOG_MAX_DOCUMENT_LENGTH = 1000
LOG_MAX_DOCUMENT_LENGTH_ENV = "FINDMODIFY_LOG_MAX_DOCUMENT_LENGTH"

# Server error codes.
_DUPLICATE_KEY_CODES = (11000, 11001, 12582)
_MAX_TIME_EXPIRED_CODE = 50
_DOCUMENT_VALIDATION_FAILURE_CODE = 121


def log_max_document_length() -> int:
    """Return the configured maximum document length for log messages."""
    try:
        length = int(
            os.getenv(LOG_MAX_DOCUMENT_LENGTH_ENV, DEFAULT_LOG_MAX_DOCUMENT_LENGTH)
        )
    except ValueError:
        return DEFAULT_LOG_MAX_DOCUMENT_LENGTH
    if length < 0:
        return DEFAULT_LOG_MAX_DOCUMENT_LENGTH
    return length


def validate_boolean(option: str, value: Any) -> bool:
    """Validates that 'value' is True or False."""
    if isinstance(value, bool):
        return value
    raise TypeError(f"{option} must be True or False, was: {option}={value}")


def validate_boolean_or_none(option: str, value: Any) -> Optional[bool]:
    """Validates that 'value' is True, False or None."""
    if value is None:
        return value
    return validate_boolean(option, value)


def validate_integer(option: str, value: Any) -> int:
    """Validates that 'value' is an integer."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise TypeError(f"Wrong type for {option}, value must be an integer, not {type(value)}")


def validate_non_negative_integer(option: str, value: Any) -> int:
    """Validate that 'value' is a positive integer or 0."""
    val = validate_integer(option, value)
    if val < 0:
        raise ValueError(f"The value of {option} must be a non negative integer, not {value}")
    return val


def validate_string(option: str, value: Any) -> str:
    """Validates that 'value' is an instance of `str`."""
    if isinstance(value, str):
        return value
    raise TypeError(f"Wrong type for {option}, value must be an instance of str, not {type(value)}")


def validate_is_mapping(option: str, value: Any) -> None:
    """Validate the type of method arguments that expect a document."""
    if not isinstance(value, abc.Mapping):
        raise TypeError(
            f"{option} must be an instance of dict, bson.son.SON, or "
            "any other type that inherits from "
            f"collections.Mapping, not {type(value)}"
        )


def validate_is_mapping_or_none(option: str, value: Any) -> None:
    if value is not None:
        validate_is_mapping(option, value)


def validate_update_operator_prefixes(value: Any) -> Tuple[str, ...]:
    """Validate an injected set of update operator prefixes."""
    if isinstance(value, str):
        raise TypeError("update_operator_prefixes must be an iterable of str, not a str")
    prefixes = tuple(value)
    if not prefixes:
        raise ValueError("update_operator_prefixes must not be empty")
    for prefix in prefixes:
        if not validate_string("update operator prefix", prefix):
            raise ValueError("update operator prefixes must not be empty strings")
    return prefixes


def _is_update_operator(key: str, prefixes: Iterable[str]) -> bool:
    return any(key.startswith(prefix) for prefix in prefixes)


def validate_ok_for_update(
    update: Any, prefixes: Iterable[str] = UPDATE_OPERATOR_PREFIXES
) -> None:
    """Validate an update document."""
    validate_is_mapping("update", update)
    prefixes = tuple(prefixes)
    # Update can not be {}
    if not update:
        raise InvalidArgument("update cannot be empty")
    if not any(_is_update_operator(key, prefixes) for key in update):
        raise InvalidArgument(
            "update only works with update operators, "
            f"no top-level key starts with any of {list(prefixes)}"
        )


def validate_ok_for_replace(
    replacement: Mapping[str, Any], prefixes: Iterable[str] = UPDATE_OPERATOR_PREFIXES
) -> None:
    """Validate a replacement document."""
    validate_is_mapping("replacement", replacement)
    prefixes = tuple(prefixes)
    # Replacement can be {}
    for key in replacement:
        if _is_update_operator(key, prefixes):
            raise InvalidArgument("replacement can not include update operators")
