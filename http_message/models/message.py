"""Header, protocol version and body behavior shared by HTTP messages."""

import copy
import re
from collections.abc import Mapping, Sequence
from typing import Any, BinaryIO, Self

from http_message.core.exceptions import InvalidInputError, type_name
from http_message.models.core import StreamInterface
from http_message.models.stream import Stream

HeaderValue = str | int | float | Sequence[str | int | float]

_TOKEN = re.compile(r"[a-zA-Z0-9'`#$%&*+.^_|~!-]+")
_PROTOCOL_VERSION = re.compile(r"\d(?:\.\d)?")


def normalize_header_name(name: Any) -> str:
    if not isinstance(name, str) or not _TOKEN.fullmatch(name):
        raise InvalidInputError(f'Invalid header name "{name}", it must be an RFC 7230 token')
    return name


def normalize_header_value(value: Any) -> list[str]:
    match value:
        case str() | int() | float() if not isinstance(value, bool):
            values = [value]
        case Sequence() if not isinstance(value, (str, bytes, bytearray)) and value:
            values = list(value)
        case _:
            raise InvalidInputError(
                f'Invalid header value of type "{type_name(value)}", it must be a string, '
                "a number or a non-empty sequence of them"
            )

    normalized = []
    for item in values:
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise InvalidInputError(f'Invalid header value item of type "{type_name(item)}"')
        item = str(item)
        if "\r" in item or "\n" in item:
            raise InvalidInputError(f"Header values must not contain CR or LF characters: {item!r}")
        normalized.append(item.strip(" \t"))
    return normalized


def normalize_protocol_version(version: Any) -> str:
    if not isinstance(version, str) or not _PROTOCOL_VERSION.fullmatch(version):
        raise InvalidInputError(f'Unsupported HTTP protocol version "{version}"')
    return version


def create_body(body: StreamInterface | BinaryIO | bytes | str | None) -> StreamInterface:
    """Turn constructor input into a stream; content is written into memory."""
    match body:
        case None:
            return Stream()
        case StreamInterface():
            return body
        case bytes() | str():
            return Stream.from_bytes(body)
        case _ if hasattr(body, "read"):
            return Stream(body)
        case _:
            raise InvalidInputError(f'Invalid body of type "{type_name(body)}", it must be a stream, bytes, str or None')


class MessageMixin:
    """Case-insensitive multi-value headers, protocol version and body.

    Values live in ``_headers`` keyed by the caller's original name casing,
    ``_header_names`` maps each lowercased name to that casing.
    """

    __slots__ = ()

    _headers: dict[str, list[str]]
    _header_names: dict[str, str]
    _protocol: str
    _body: StreamInterface

    def _clone(self) -> Self:
        return copy.copy(self)

    def _register_headers(self, headers: Mapping[str, HeaderValue] | None) -> None:
        self._headers = {}
        self._header_names = {}
        for name, value in (headers or {}).items():
            name = normalize_header_name(name)
            values = normalize_header_value(value)
            normalized = name.lower()
            if normalized in self._header_names:
                self._headers[self._header_names[normalized]] += values
                continue
            self._header_names[normalized] = name
            self._headers[name] = values

    # -------------------------------------------------------------------------
    # Protocol version
    # -------------------------------------------------------------------------

    @property
    def protocol_version(self) -> str:
        return self._protocol

    def with_protocol_version(self, version: str) -> Self:
        version = normalize_protocol_version(version)
        if version == self._protocol:
            return self
        new = self._clone()
        new._protocol = version
        return new

    # -------------------------------------------------------------------------
    # Headers
    # -------------------------------------------------------------------------

    @property
    def headers(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._headers.items()}

    def has_header(self, name: str) -> bool:
        return isinstance(name, str) and name.lower() in self._header_names

    def get_header(self, name: str) -> list[str]:
        if not self.has_header(name):
            return []
        return list(self._headers[self._header_names[name.lower()]])

    def get_header_line(self, name: str) -> str:
        return ", ".join(self.get_header(name))

    def with_header(self, name: str, value: HeaderValue) -> Self:
        name = normalize_header_name(name)
        values = normalize_header_value(value)
        normalized = name.lower()

        new = self._clone()
        new._headers = dict(self._headers)
        new._header_names = dict(self._header_names)
        if normalized in new._header_names:
            del new._headers[new._header_names[normalized]]
        new._header_names[normalized] = name
        new._headers[name] = values
        return new

    def with_added_header(self, name: str, value: HeaderValue) -> Self:
        name = normalize_header_name(name)
        values = normalize_header_value(value)

        if not self.has_header(name):
            return self.with_header(name, values)

        original = self._header_names[name.lower()]
        new = self._clone()
        new._headers = dict(self._headers)
        new._headers[original] = self._headers[original] + values
        return new

    def without_header(self, name: str) -> Self:
        if not self.has_header(name):
            return self

        normalized = name.lower()
        new = self._clone()
        new._headers = dict(self._headers)
        new._header_names = dict(self._header_names)
        del new._headers[new._header_names.pop(normalized)]
        return new

    # -------------------------------------------------------------------------
    # Body
    # -------------------------------------------------------------------------

    @property
    def body(self) -> StreamInterface:
        return self._body

    def with_body(self, body: StreamInterface) -> Self:
        if not isinstance(body, StreamInterface):
            raise InvalidInputError(f'Invalid body of type "{type_name(body)}", it must implement the stream interface')
        if body is self._body:
            return self
        new = self._clone()
        new._body = body
        return new
