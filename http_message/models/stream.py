"""Byte stream wrapper over file objects and in-memory buffers."""

import io
import os
from typing import Any, BinaryIO, Self

from http_message.core.exceptions import InvalidInputError, RuntimeIOError, type_name
from http_message.core.logger import LogIcon, logger


class Stream:
    """Readable, writable and seekable view over a binary resource.

    ``resource`` is either ``None`` for a fresh in-memory buffer, a filesystem
    path opened with ``mode``, or an already open binary file object.
    """

    __slots__ = ("_resource", "_eof")

    def __init__(self, resource: str | os.PathLike[str] | BinaryIO | None = None, mode: str = "wb+") -> None:
        self._eof = False

        match resource:
            case None:
                self._resource: BinaryIO | None = io.BytesIO()
            case str() | os.PathLike():
                if not os.fspath(resource):
                    raise RuntimeIOError("Unable to open stream: empty path")
                if "b" not in mode:
                    mode += "b"
                try:
                    self._resource = open(os.fspath(resource), mode)  # noqa: SIM115
                except OSError as ex:
                    raise RuntimeIOError(f"Unable to open stream {os.fspath(resource)!r}: {ex}") from ex
                logger.debug("Stream opened", icon=LogIcon.STREAMING, path=os.fspath(resource), mode=mode)
            case io.TextIOBase():
                raise InvalidInputError("Stream requires a binary file object, text stream given")
            case _ if hasattr(resource, "read") and hasattr(resource, "seekable"):
                self._resource = resource
            case _:
                raise InvalidInputError(
                    f'Stream must be created from a path, a binary file object or None, "{type_name(resource)}" given'
                )

    @classmethod
    def from_bytes(cls, data: bytes | str) -> Self:
        """Create an in-memory stream holding `data`, positioned at the start."""
        if isinstance(data, str):
            data = data.encode()
        stream = cls()
        stream.write(data)
        stream.rewind()
        return stream

    def __del__(self) -> None:
        # __init__ may have failed before the resource was assigned
        if getattr(self, "_resource", None) is not None:
            self.close()

    def __bytes__(self) -> bytes:
        if self.is_seekable():
            self.rewind()
        return self.get_contents()

    def __repr__(self) -> str:
        return f"Stream({self.get_metadata('uri')!r})"

    def _require_resource(self, action: str) -> BinaryIO:
        if self._resource is None:
            raise RuntimeIOError(f"No resource available to {action}")
        return self._resource

    def close(self) -> None:
        resource = self.detach()
        if resource is not None:
            resource.close()

    def detach(self) -> BinaryIO | None:
        """Separate and return the underlying resource; the stream becomes unusable."""
        resource, self._resource = self._resource, None
        return resource

    @property
    def size(self) -> int | None:
        if self._resource is None or self._resource.closed:
            return None

        if self._resource.seekable():
            position = self._resource.tell()
            end = self._resource.seek(0, os.SEEK_END)
            self._resource.seek(position)
            return end

        try:
            return os.fstat(self._resource.fileno()).st_size
        except (OSError, io.UnsupportedOperation):
            return None

    def get_metadata(self, key: str | None = None) -> Any:
        if self._resource is None:
            return None if key else {}

        resource = self._resource
        metadata = {
            "mode": getattr(resource, "mode", "rb+"),
            "seekable": not resource.closed and resource.seekable(),
            "readable": not resource.closed and resource.readable(),
            "writable": not resource.closed and resource.writable(),
            "uri": getattr(resource, "name", None),
            "closed": resource.closed,
            "eof": self.eof(),
        }

        if key is None:
            return metadata
        return metadata.get(key)

    def is_seekable(self) -> bool:
        return self._resource is not None and not self._resource.closed and self._resource.seekable()

    def is_readable(self) -> bool:
        return self._resource is not None and not self._resource.closed and self._resource.readable()

    def is_writable(self) -> bool:
        return self._resource is not None and not self._resource.closed and self._resource.writable()

    def rewind(self) -> None:
        self.seek(0)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> None:
        resource = self._require_resource("seek")
        if not self.is_seekable():
            raise RuntimeIOError("Stream is not seekable")
        try:
            resource.seek(offset, whence)
        except (OSError, ValueError) as ex:
            raise RuntimeIOError(f"Error seeking within stream: {ex}") from ex
        self._eof = False

    def tell(self) -> int:
        resource = self._require_resource("tell the position")
        try:
            return resource.tell()
        except (OSError, ValueError) as ex:
            raise RuntimeIOError(f"Unable to determine stream position: {ex}") from ex

    def eof(self) -> bool:
        if self._resource is None or self._resource.closed:
            return True
        if self._eof:
            return True
        if self._resource.seekable():
            return self._resource.tell() >= self.size
        return False

    def write(self, data: bytes) -> int:
        resource = self._require_resource("write to")
        if not self.is_writable():
            raise RuntimeIOError("Stream is not writable")
        try:
            return resource.write(data)
        except (OSError, ValueError) as ex:
            raise RuntimeIOError(f"Error writing to stream: {ex}") from ex

    def read(self, length: int) -> bytes:
        resource = self._require_resource("read from")
        if not self.is_readable():
            raise RuntimeIOError("Stream is not readable")
        try:
            data = resource.read(length)
        except (OSError, ValueError) as ex:
            raise RuntimeIOError(f"Error reading from stream: {ex}") from ex
        if len(data) < length:
            self._eof = True
        return data

    def get_contents(self) -> bytes:
        """Read the remainder of the stream from the current position."""
        resource = self._require_resource("read from")
        if not self.is_readable():
            raise RuntimeIOError("Stream is not readable")
        try:
            data = resource.read()
        except (OSError, ValueError) as ex:
            raise RuntimeIOError(f"Error reading from stream: {ex}") from ex
        self._eof = True
        return data
