"""Build server requests from transport-level request data."""

import mimetypes
from collections.abc import Mapping
from http.cookies import CookieError, SimpleCookie
from typing import Any
from urllib.parse import parse_qs, urlencode

from pydantic import BaseModel
from robyn import Request

from http_message.core.body import parse_body
from http_message.core.exceptions import InvalidInputError
from http_message.core.logger import LogIcon, logger
from http_message.core.settings import settings as st
from http_message.models.core import UploadError
from http_message.models.request import ServerRequest, UploadedFilesTree
from http_message.models.stream import Stream
from http_message.models.uploaded_file import UploadedFile
from http_message.models.uri import Uri

_CONTENT_KEYS = {"CONTENT_TYPE": "Content-Type", "CONTENT_LENGTH": "Content-Length"}


# -----------------------------------------------------------------------------
# WSGI / CGI environ
# -----------------------------------------------------------------------------


def headers_from_environ(environ: Mapping[str, Any]) -> dict[str, str]:
    """Collect request headers from ``HTTP_*`` and content keys."""
    headers: dict[str, str] = {}
    for key, value in environ.items():
        if not isinstance(value, str):
            continue
        if key.startswith("HTTP_"):
            headers[key[5:].replace("_", "-").title()] = value
        elif key in _CONTENT_KEYS and value:
            headers[_CONTENT_KEYS[key]] = value
    return headers


def uri_from_environ(environ: Mapping[str, Any]) -> Uri:
    scheme = environ.get("wsgi.url_scheme")
    if not scheme:
        scheme = "https" if str(environ.get("HTTPS", "off")).lower() in ("on", "1") else "http"

    if host := environ.get("HTTP_HOST"):
        uri = Uri(f"{scheme}://{host}")
    else:
        uri = Uri().with_scheme(scheme).with_host(environ.get("SERVER_NAME", ""))
        if port := environ.get("SERVER_PORT"):
            uri = uri.with_port(port)

    if request_uri := environ.get("REQUEST_URI") or environ.get("RAW_URI"):
        path, _, query = request_uri.partition("?")
        query = query.partition("#")[0]
    else:
        path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
        query = environ.get("QUERY_STRING", "")

    return uri.with_path(path).with_query(query)


def cookies_from_header(cookie_header: str) -> dict[str, str]:
    cookie = SimpleCookie()
    try:
        cookie.load(cookie_header)
    except CookieError as ex:
        raise InvalidInputError(f"Malformed Cookie header: {ex}") from ex
    return {name: morsel.value for name, morsel in cookie.items()}


def _read_input(environ: Mapping[str, Any]) -> bytes:
    stream = environ.get("wsgi.input")
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError as ex:
        raise InvalidInputError(f'Invalid Content-Length "{environ.get("CONTENT_LENGTH")}"') from ex
    if stream is None or length <= 0:
        return b""
    return stream.read(length)


def from_environ(
    environ: Mapping[str, Any],
    *,
    files: UploadedFilesTree | None = None,
    model: type[BaseModel] | None = None,
) -> ServerRequest:
    """Create a request from a WSGI/CGI environ mapping.

    Multipart decoding belongs to the transport, so uploaded files are passed
    in already built through ``files``.
    """
    uri = uri_from_environ(environ)
    headers = headers_from_environ(environ)
    raw_body = _read_input(environ)
    protocol = environ.get("SERVER_PROTOCOL", "").rpartition("/")[2] or st.DEFAULT_PROTOCOL_VERSION

    request = ServerRequest(
        server_params=environ,
        uploaded_files=files,
        cookie_params=cookies_from_header(environ.get("HTTP_COOKIE", "")),
        query_params=parse_qs(uri.query, keep_blank_values=True),
        parsed_body=parse_body(raw_body, headers.get("Content-Type"), model),
        method=environ.get("REQUEST_METHOD", "GET"),
        uri=uri,
        headers=headers,
        body=raw_body,
        protocol=protocol,
    )
    logger.debug("Server request created from environ", icon=LogIcon.ADAPTER, method=request.method, uri=str(uri))
    return request


# -----------------------------------------------------------------------------
# Robyn
# -----------------------------------------------------------------------------


def _robyn_headers(request: Request) -> dict[str, Any]:
    headers = request.headers
    if hasattr(headers, "get_headers"):
        return dict(headers.get_headers())
    return dict(headers or {})


def _robyn_query(request: Request) -> dict[str, list[str]]:
    query_params = request.query_params
    if hasattr(query_params, "to_dict"):
        return dict(query_params.to_dict())
    return {key: value if isinstance(value, list) else [value] for key, value in dict(query_params or {}).items()}


def _robyn_files(request: Request) -> dict[str, UploadedFile]:
    files = getattr(request, "files", None) or {}
    return {
        name: UploadedFile(
            Stream.from_bytes(data),
            len(data),
            UploadError.OK,
            client_filename=name,
            client_media_type=mimetypes.guess_type(name)[0],
        )
        for name, data in files.items()
    }


def from_robyn(request: Request, *, model: type[BaseModel] | None = None) -> ServerRequest:
    """Create a request from a Robyn request; path params become attributes."""
    url = request.url
    uri = Uri(f"{url.scheme or 'http'}://{url.host}") if url.host else Uri()
    query_params = _robyn_query(request)
    uri = uri.with_path(url.path or "").with_query(urlencode(query_params, doseq=True))

    headers = _robyn_headers(request)
    content_type = next((value for name, value in headers.items() if name.lower() == "content-type"), None)
    if isinstance(content_type, list):
        content_type = content_type[0] if content_type else None

    raw_body = request.body or b""
    form_data = getattr(request, "form_data", None)
    parsed_body = dict(form_data) if form_data else parse_body(raw_body, content_type, model)

    server_request = ServerRequest(
        server_params={"REMOTE_ADDR": getattr(request, "ip_addr", None), "REQUEST_METHOD": request.method},
        uploaded_files=_robyn_files(request),
        query_params=query_params,
        parsed_body=parsed_body,
        method=request.method,
        uri=uri,
        headers=headers,
        body=raw_body,
    )

    for name, value in (getattr(request, "path_params", None) or {}).items():
        server_request = server_request.with_attribute(name, value)

    logger.debug("Server request created from robyn", icon=LogIcon.ADAPTER, method=server_request.method, uri=str(uri))
    return server_request
