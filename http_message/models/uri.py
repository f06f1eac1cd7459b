"""Immutable URI value object with RFC 3986 component normalization."""

import copy
import re
from typing import Any, Self
from urllib.parse import urlsplit

from http_message.core.encoding import (
    CONTROL_PATTERN,
    FRAGMENT_PATTERN,
    PATH_PATTERN,
    QUERY_PATTERN,
    USER_INFO_PATTERN,
    encode,
)
from http_message.core.exceptions import InvalidInputError, type_name

STANDARD_PORTS: dict[str, int] = {"http": 80, "https": 443}

_SCHEME_SUFFIX = re.compile(r":(//)?$")


def _check_str(value: Any, phrase: str, method: str) -> None:
    if not isinstance(value, str):
        raise InvalidInputError(f'"{method}" expects a string {phrase}, "{type_name(value)}" received')


def normalize_scheme(scheme: str) -> str:
    scheme = _SCHEME_SUFFIX.sub("", scheme.lower())
    if not scheme:
        return ""
    if scheme not in STANDARD_PORTS:
        supported = '", "'.join(STANDARD_PORTS)
        raise InvalidInputError(f'Scheme "{scheme}" is not supported, it must be empty or one of: "{supported}"')
    return scheme


def normalize_user_info(user: str, password: str | None = None) -> str:
    if user == "":
        return ""
    user_info = encode(user, USER_INFO_PATTERN)
    if password is not None:
        user_info += ":" + encode(password, USER_INFO_PATTERN)
    return user_info


def normalize_host(host: str) -> str:
    return host.lower()


def normalize_port(port: Any) -> int | None:
    if port is None:
        return None

    match port:
        case bool():
            valid = False
        case int():
            valid = True
        case str():
            valid = port.isascii() and port.strip().isdigit()
        case _:
            valid = False

    if not valid:
        raise InvalidInputError(f'Invalid port of type "{type_name(port)}", it must be an integer, a numeric string or None')

    port = int(port)
    if not 1 <= port <= 65535:
        raise InvalidInputError(f'Invalid port "{port}", it must be a TCP/UDP port in range 1..65535')
    return port


def normalize_path(path: str) -> str:
    if path in ("", "/"):
        return path

    path = encode(path, PATH_PATTERN)
    if path.startswith("/"):
        return "/" + path.lstrip("/")
    return path


def normalize_query(query: str) -> str:
    if query.startswith("?"):
        query = query[1:]
    return encode(query, QUERY_PATTERN)


def normalize_fragment(fragment: str) -> str:
    if fragment.startswith("#"):
        fragment = fragment[1:]
    return encode(fragment, FRAGMENT_PATTERN)


class Uri:
    """URI value object.

    Components are normalized on construction and on every ``with_*`` call.
    Updates return a new instance, or ``self`` when the normalized value does
    not change. The rendered string is computed on first use and cached per
    instance.
    """

    __slots__ = ("_scheme", "_user_info", "_host", "_port", "_path", "_query", "_fragment", "_rendered")

    def __init__(self, uri: str = "") -> None:
        _check_str(uri, "URI", "Uri")
        self._scheme = ""
        self._user_info = ""
        self._host = ""
        self._port: int | None = None
        self._path = ""
        self._query = ""
        self._fragment = ""
        self._rendered: str | None = None

        if uri == "":
            return

        try:
            parts = urlsplit(encode(uri, CONTROL_PATTERN))
            port = parts.port
        except ValueError as ex:
            raise InvalidInputError(f'Malformed URI "{uri}": {ex}') from ex

        host = parts.hostname or ""
        if ":" in host:
            host = f"[{host}]"

        self._scheme = normalize_scheme(parts.scheme)
        self._user_info = normalize_user_info(parts.username, parts.password) if parts.username is not None else ""
        self._host = normalize_host(host)
        self._port = normalize_port(port)
        self._path = normalize_path(parts.path)
        self._query = normalize_query(parts.query)
        self._fragment = normalize_fragment(parts.fragment)

    # -------------------------------------------------------------------------
    # Components
    # -------------------------------------------------------------------------

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def user_info(self) -> str:
        return self._user_info

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int | None:
        return self._port

    @property
    def path(self) -> str:
        return self._path

    @property
    def query(self) -> str:
        return self._query

    @property
    def fragment(self) -> str:
        return self._fragment

    @property
    def is_standard_port(self) -> bool:
        """True when no port is set or the port is the scheme's default."""
        return self._port is None or STANDARD_PORTS.get(self._scheme) == self._port

    @property
    def authority(self) -> str:
        if self._host == "":
            return ""

        authority = self._host
        if self._user_info:
            authority = f"{self._user_info}@{authority}"
        if not self.is_standard_port:
            authority += f":{self._port}"
        return authority

    # -------------------------------------------------------------------------
    # Copy-on-write updates
    # -------------------------------------------------------------------------

    def _with(self, field: str, value: Any) -> Self:
        if getattr(self, field) == value:
            return self
        new = copy.copy(self)
        setattr(new, field, value)
        new._rendered = None
        return new

    def with_scheme(self, scheme: str) -> Self:
        _check_str(scheme, "scheme", "Uri.with_scheme")
        return self._with("_scheme", normalize_scheme(scheme))

    def with_user_info(self, user: str, password: str | None = None) -> Self:
        _check_str(user, "user", "Uri.with_user_info")
        if password is not None:
            _check_str(password, "or None password", "Uri.with_user_info")
        return self._with("_user_info", normalize_user_info(user, password))

    def with_host(self, host: str) -> Self:
        _check_str(host, "host", "Uri.with_host")
        return self._with("_host", normalize_host(host))

    def with_port(self, port: int | str | None) -> Self:
        return self._with("_port", normalize_port(port))

    def with_path(self, path: str) -> Self:
        _check_str(path, "path", "Uri.with_path")
        return self._with("_path", normalize_path(path))

    def with_query(self, query: str) -> Self:
        _check_str(query, "query string", "Uri.with_query")
        return self._with("_query", normalize_query(query))

    def with_fragment(self, fragment: str) -> Self:
        _check_str(fragment, "URI fragment", "Uri.with_fragment")
        return self._with("_fragment", normalize_fragment(fragment))

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _render(self) -> str:
        rendered = ""
        if self._scheme:
            rendered += f"{self._scheme}:"

        authority = self.authority
        if authority:
            rendered += f"//{authority}"

        if self._path:
            # Relative paths cannot follow an authority
            rendered += ("/" + self._path.lstrip("/")) if authority else self._path

        if self._query:
            rendered += f"?{self._query}"
        if self._fragment:
            rendered += f"#{self._fragment}"
        return rendered

    def __str__(self) -> str:
        if self._rendered is None:
            self._rendered = self._render()
        return self._rendered

    def __repr__(self) -> str:
        return f"Uri({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Uri):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))
