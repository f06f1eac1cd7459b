"""Core enums and capability protocols shared by the message models."""

import os
from collections.abc import Iterable, Mapping
from enum import IntEnum, StrEnum
from typing import Any, BinaryIO, Protocol, runtime_checkable


class BodyType(StrEnum):
    """Body content type classification for request parsing."""

    JSON = "json"
    FORM = "form"
    RAW = "raw"


class UploadError(IntEnum):
    """Upload status codes as reported by the transport for each file."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8

    @property
    def description(self) -> str:
        return _UPLOAD_ERROR_DESCRIPTIONS[self]


_UPLOAD_ERROR_DESCRIPTIONS = {
    UploadError.OK: "File uploaded without errors.",
    UploadError.INI_SIZE: "Uploaded file exceeds the server maximum upload size.",
    UploadError.FORM_SIZE: "Uploaded file exceeds the maximum size declared by the form.",
    UploadError.PARTIAL: "File was only partially uploaded.",
    UploadError.NO_FILE: "No file was uploaded.",
    UploadError.NO_TMP_DIR: "Missing a temporary folder.",
    UploadError.CANT_WRITE: "Failed to write file to disk.",
    UploadError.EXTENSION: "A server extension stopped the file upload.",
}


@runtime_checkable
class StreamInterface(Protocol):
    """Byte stream capability consumed by messages and uploaded files."""

    def read(self, length: int) -> bytes: ...

    def write(self, data: bytes) -> int: ...

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> None: ...

    def rewind(self) -> None: ...

    def tell(self) -> int: ...

    def eof(self) -> bool: ...

    def get_contents(self) -> bytes: ...

    def close(self) -> None: ...

    def detach(self) -> BinaryIO | None: ...

    def get_metadata(self, key: str | None = None) -> Any: ...

    def is_readable(self) -> bool: ...

    def is_writable(self) -> bool: ...

    def is_seekable(self) -> bool: ...


@runtime_checkable
class UploadedFileInterface(Protocol):
    """Uploaded file capability; leaves of the uploaded files tree."""

    @property
    def size(self) -> int | None: ...

    @property
    def error(self) -> UploadError: ...

    @property
    def client_filename(self) -> str | None: ...

    @property
    def client_media_type(self) -> str | None: ...

    def get_stream(self) -> StreamInterface: ...

    def move_to(self, target_path: str | os.PathLike[str]) -> None: ...


@runtime_checkable
class CacheInterface(Protocol):
    """Byte store capability keyed by opaque strings."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: bytes | str, ttl: int | None = None) -> bool: ...

    def has(self, key: str) -> bool: ...

    def delete(self, key: str) -> bool: ...

    def clear(self) -> bool: ...

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> Mapping[str, Any]: ...

    def set_multiple(self, values: Mapping[str, bytes | str], ttl: int | None = None) -> bool: ...

    def delete_multiple(self, keys: Iterable[str]) -> bool: ...
