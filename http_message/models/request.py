"""Immutable server-side HTTP request."""

import re
from collections.abc import Hashable, Mapping, Sequence
from types import MappingProxyType
from typing import Any, BinaryIO, Self

from http_message.core.exceptions import InvalidInputError, type_name
from http_message.core.settings import settings as st
from http_message.models.core import StreamInterface, UploadedFileInterface
from http_message.models.message import HeaderValue, MessageMixin, create_body, normalize_protocol_version
from http_message.models.uri import Uri

UploadedFilesTree = Mapping[str, "UploadedFileInterface | UploadedFilesTree | Sequence[Any]"]

_WHITESPACE = re.compile(r"\s")
_SCALARS = (str, bytes, bytearray, int, float, complex, bool)


def _validate_branch(branch: Mapping[str, Any] | Sequence[Any]) -> None:
    entries = branch.values() if isinstance(branch, Mapping) else branch
    for file in entries:
        if isinstance(file, (Mapping, list, tuple)):
            _validate_branch(file)
            continue
        if not isinstance(file, UploadedFileInterface):
            raise InvalidInputError(
                f'Invalid entry in the uploaded files tree, "{type_name(file)}" does not implement the uploaded file interface'
            )


def validate_uploaded_files(uploaded_files: Any) -> None:
    """Recursively check that every leaf of the tree is an uploaded file.

    Branches are mappings, or lists for multi-file fields such as ``files[]``.
    """
    if not isinstance(uploaded_files, Mapping):
        raise InvalidInputError(f'Uploaded files must be a mapping, "{type_name(uploaded_files)}" given')
    _validate_branch(uploaded_files)


def _check_mapping(value: Any, phrase: str) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidInputError(f'{phrase} must be a mapping, "{type_name(value)}" given')
    return dict(value)


def _check_parsed_body(data: Any) -> Any:
    if isinstance(data, _SCALARS):
        raise InvalidInputError(
            f'Invalid parsed body of type "{type_name(data)}", it must be a mapping, a sequence, an object or None'
        )
    return data


class ServerRequest(MessageMixin):
    """Incoming HTTP request as seen by server-side application code.

    Every ``with_*`` call returns a new request and leaves this one unchanged;
    no-op updates return ``self``. A ``Host`` header is derived from the URI
    whenever the request has none.
    """

    __slots__ = (
        "_server_params",
        "_uploaded_files",
        "_cookie_params",
        "_query_params",
        "_parsed_body",
        "_method",
        "_uri",
        "_request_target",
        "_attributes",
        "_headers",
        "_header_names",
        "_body",
        "_protocol",
    )

    def __init__(
        self,
        server_params: Mapping[str, Any] | None = None,
        uploaded_files: UploadedFilesTree | None = None,
        cookie_params: Mapping[str, Any] | None = None,
        query_params: Mapping[str, Any] | None = None,
        parsed_body: Any = None,
        method: str = "GET",
        uri: Uri | str | None = None,
        headers: Mapping[str, HeaderValue] | None = None,
        body: StreamInterface | BinaryIO | bytes | str | None = None,
        protocol: str = st.DEFAULT_PROTOCOL_VERSION,
    ) -> None:
        uploaded_files = uploaded_files or {}
        validate_uploaded_files(uploaded_files)

        self._server_params = _check_mapping(server_params or {}, "Server params")
        self._uploaded_files = dict(uploaded_files)
        self._cookie_params = _check_mapping(cookie_params or {}, "Cookie params")
        self._query_params = _check_mapping(query_params or {}, "Query params")
        self._parsed_body = _check_parsed_body(parsed_body)
        self._method = self._normalize_method(method)
        self._uri = self._create_uri(uri)
        self._request_target: str | None = None
        self._attributes: dict[str, Any] = {}

        self._body = create_body(body)
        self._register_headers(headers)
        self._protocol = normalize_protocol_version(protocol)

        if not self.has_header("host"):
            self._update_host_header_from_uri()

    def __repr__(self) -> str:
        return f"ServerRequest({self._method} {str(self._uri)!r})"

    @staticmethod
    def _create_uri(uri: Uri | str | None) -> Uri:
        match uri:
            case None:
                return Uri()
            case Uri():
                return uri
            case str():
                return Uri(uri)
            case _:
                raise InvalidInputError(f'Invalid URI of type "{type_name(uri)}", it must be a Uri, a string or None')

    @staticmethod
    def _normalize_method(method: Any) -> str:
        if not isinstance(method, str) or not method:
            raise InvalidInputError(f'Invalid HTTP method "{method}", it must be a non-empty string')
        return method

    def _update_host_header_from_uri(self) -> None:
        host = self._uri.host
        if host == "":
            return
        if not self._uri.is_standard_port:
            host += f":{self._uri.port}"

        header_names = dict(self._header_names)
        headers = dict(self._headers)
        if "host" in header_names:
            del headers[header_names.pop("host")]

        self._header_names = {"host": "Host", **header_names}
        self._headers = {"Host": [host], **headers}

    # -------------------------------------------------------------------------
    # Request line
    # -------------------------------------------------------------------------

    @property
    def request_target(self) -> str:
        if self._request_target is not None:
            return self._request_target

        target = self._uri.path or "/"
        if self._uri.query:
            target += f"?{self._uri.query}"
        return target

    def with_request_target(self, request_target: str) -> Self:
        if not isinstance(request_target, str) or _WHITESPACE.search(request_target):
            raise InvalidInputError(
                f'Invalid request target "{request_target}", it must be a string without whitespace'
            )
        if request_target == self._request_target:
            return self

        new = self._clone()
        new._request_target = request_target
        return new

    @property
    def method(self) -> str:
        return self._method

    def with_method(self, method: str) -> Self:
        method = self._normalize_method(method)
        if method == self._method:
            return self
        new = self._clone()
        new._method = method
        return new

    @property
    def uri(self) -> Uri:
        return self._uri

    def with_uri(self, uri: Uri, preserve_host: bool = False) -> Self:
        if not isinstance(uri, Uri):
            raise InvalidInputError(f'Invalid URI of type "{type_name(uri)}", a Uri instance is expected')
        if uri is self._uri:
            return self

        new = self._clone()
        new._uri = uri
        if not preserve_host or not self.has_header("host"):
            new._update_host_header_from_uri()
        return new

    # -------------------------------------------------------------------------
    # Server-side parameters
    # -------------------------------------------------------------------------

    @property
    def server_params(self) -> Mapping[str, Any]:
        return MappingProxyType(self._server_params)

    @property
    def cookie_params(self) -> Mapping[str, Any]:
        return MappingProxyType(self._cookie_params)

    def with_cookie_params(self, cookies: Mapping[str, Any]) -> Self:
        new = self._clone()
        new._cookie_params = _check_mapping(cookies, "Cookie params")
        return new

    @property
    def query_params(self) -> Mapping[str, Any]:
        return MappingProxyType(self._query_params)

    def with_query_params(self, query: Mapping[str, Any]) -> Self:
        new = self._clone()
        new._query_params = _check_mapping(query, "Query params")
        return new

    @property
    def uploaded_files(self) -> Mapping[str, Any]:
        return MappingProxyType(self._uploaded_files)

    def with_uploaded_files(self, uploaded_files: UploadedFilesTree) -> Self:
        validate_uploaded_files(uploaded_files)
        new = self._clone()
        new._uploaded_files = dict(uploaded_files)
        return new

    @property
    def parsed_body(self) -> Any:
        return self._parsed_body

    def with_parsed_body(self, data: Any) -> Self:
        data = _check_parsed_body(data)
        new = self._clone()
        new._parsed_body = data
        return new

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    @property
    def attributes(self) -> Mapping[str, Any]:
        return MappingProxyType(self._attributes)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def with_attribute(self, name: str, value: Any) -> Self:
        if name in self._attributes:
            current = self._attributes[name]
            if current is value or (
                type(current) is type(value) and isinstance(value, Hashable) and current == value
            ):
                return self

        new = self._clone()
        new._attributes = {**self._attributes, name: value}
        return new

    def without_attribute(self, name: str) -> Self:
        if name not in self._attributes:
            return self

        new = self._clone()
        new._attributes = {key: value for key, value in self._attributes.items() if key != name}
        return new
