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

"""Decoders turning the document returned by the server into results.

An operation is given its decoder at construction time. Any object
implementing :class:`Decoder` works; the two provided here cover decoding
through BSON :class:`~bson.codec_options.CodecOptions` and wrapping a plain
function.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Mapping, TypeVar, Union

import bson
from bson.codec_options import DEFAULT_CODEC_OPTIONS, CodecOptions
from bson.raw_bson import RawBSONDocument

_T = TypeVar("_T")


class Decoder(ABC, Generic[_T]):
    """Decode the ``value`` document of a find and modify reply."""

    @abstractmethod
    def decode(self, document: Any) -> _T:
        """Decode `document` into the caller's result type."""


class DocumentDecoder(Decoder[Any]):
    """Decode through BSON using :class:`~bson.codec_options.CodecOptions`.

    The ``document_class``, ``tz_aware`` and ``type_registry`` options of
    `codec_options` all apply, so custom types registered as
    :class:`~bson.codec_options.TypeDecoder` come back decoded.

    :param codec_options: (optional) An instance of
        :class:`~bson.codec_options.CodecOptions`.
    """

    __slots__ = ("__codec_options",)

    def __init__(self, codec_options: CodecOptions = DEFAULT_CODEC_OPTIONS) -> None:
        if not isinstance(codec_options, CodecOptions):
            raise TypeError("codec_options must be an instance of bson.codec_options.CodecOptions")
        self.__codec_options = codec_options

    @property
    def codec_options(self) -> CodecOptions:
        return self.__codec_options

    def decode(self, document: Any) -> Any:
        if isinstance(document, RawBSONDocument):
            return bson.decode(document.raw, self.__codec_options)
        if isinstance(document, (bytes, bytearray, memoryview)):
            return bson.decode(bytes(document), self.__codec_options)
        if isinstance(document, Mapping):
            # Round trip so the codec options apply to already decoded replies.
            return bson.decode(bson.encode(document), self.__codec_options)
        raise TypeError(f"cannot decode a document of type {type(document)}")

    def __repr__(self) -> str:
        return f"DocumentDecoder({self.__codec_options!r})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, DocumentDecoder):
            return self.__codec_options == other.codec_options
        return NotImplemented

    def __ne__(self, other: Any) -> bool:
        return not self == other


class FunctionDecoder(Decoder[_T]):
    """Decode by calling `function` with the returned document."""

    __slots__ = ("__function",)

    def __init__(self, function: Callable[[Any], _T]) -> None:
        if not callable(function):
            raise TypeError("function must be callable")
        self.__function = function

    def decode(self, document: Any) -> _T:
        return self.__function(document)

    def __repr__(self) -> str:
        return f"FunctionDecoder({self.__function!r})"


def validate_decoder(value: Union[Decoder[Any], CodecOptions, Callable[[Any], Any]]) -> Decoder[Any]:
    """Normalize a decoder argument."""
    if isinstance(value, Decoder):
        return value
    if isinstance(value, CodecOptions):
        return DocumentDecoder(value)
    if hasattr(value, "decode") and callable(value.decode):
        return FunctionDecoder(value.decode)
    if callable(value):
        return FunctionDecoder(value)
    raise TypeError(
        "decoder must be a findmodify.codec.Decoder, a CodecOptions, or a callable, "
        f"not {type(value)}"
    )
