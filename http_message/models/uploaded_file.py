"""Uploaded file descriptor with a single-use move operation."""

import os
import shutil
from pathlib import Path
from typing import BinaryIO

from http_message.core.exceptions import InvalidInputError, RuntimeIOError, type_name
from http_message.core.logger import LogIcon, logger
from http_message.core.settings import settings as st
from http_message.models.core import StreamInterface, UploadError
from http_message.models.stream import Stream


class UploadedFile:
    """One file received in a multipart request.

    The client filename and media type are taken as sent by the client and
    must not be trusted.
    """

    __slots__ = ("_file", "_stream", "_size", "_error", "_client_filename", "_client_media_type", "_moved")

    def __init__(
        self,
        stream_or_file: str | os.PathLike[str] | StreamInterface | BinaryIO | None,
        size: int | None,
        error: int | UploadError,
        client_filename: str | None = None,
        client_media_type: str | None = None,
    ) -> None:
        try:
            self._error = UploadError(error)
        except ValueError as ex:
            allowed = '", "'.join(str(code.value) for code in UploadError)
            raise InvalidInputError(f'Invalid upload status "{error}", it must be one of: "{allowed}"') from ex

        self._size = size
        self._client_filename = client_filename
        self._client_media_type = client_media_type
        self._file: str | None = None
        self._stream: StreamInterface | None = None
        self._moved = False

        if self._error is not UploadError.OK:
            return

        match stream_or_file:
            case str() | os.PathLike():
                self._file = os.fspath(stream_or_file)
            case StreamInterface():
                self._stream = stream_or_file
            case _ if hasattr(stream_or_file, "read"):
                self._stream = Stream(stream_or_file)
            case _:
                raise InvalidInputError(f'"{type_name(stream_or_file)}" is not a valid stream or file for an uploaded file')

    @property
    def size(self) -> int | None:
        return self._size

    @property
    def error(self) -> UploadError:
        return self._error

    @property
    def client_filename(self) -> str | None:
        return self._client_filename

    @property
    def client_media_type(self) -> str | None:
        return self._client_media_type

    @property
    def is_moved(self) -> bool:
        return self._moved

    def _check_available(self) -> None:
        if self._error is not UploadError.OK:
            raise RuntimeIOError(self._error.description)
        if self._moved:
            raise RuntimeIOError("Uploaded file is no longer available, it has already been moved")

    def get_stream(self) -> StreamInterface:
        self._check_available()
        if self._stream is None:
            self._stream = Stream(self._file, "rb")
        return self._stream

    def move_to(self, target_path: str | os.PathLike[str]) -> None:
        """Move the uploaded file to `target_path`; allowed only once."""
        self._check_available()

        if not target_path:
            raise InvalidInputError("Invalid path for moving the uploaded file, it must be a non-empty path")

        target = Path(target_path)
        directory = target.parent
        if not directory.is_dir() or not os.access(directory, os.W_OK):
            raise RuntimeIOError(f'Target directory "{directory}" does not exist or is not writable')
        if target.is_dir():
            raise RuntimeIOError(f'Target "{target}" is a directory, a file path is expected')

        if self._file is not None:
            self._move_file(target)
        else:
            self._write_stream(target)

        self._moved = True
        logger.debug("Uploaded file moved", icon=LogIcon.UPLOAD, target=str(target), filename=self._client_filename)

    def _move_file(self, target: Path) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        try:
            shutil.move(self._file, target)
        except OSError as ex:
            raise RuntimeIOError(f'Uploaded file could not be moved to "{target}": {ex}') from ex

    def _write_stream(self, target: Path) -> None:
        try:
            with target.open("wb") as file_handle:
                if self._stream.is_seekable():
                    self._stream.rewind()
                while not self._stream.eof():
                    chunk = self._stream.read(st.STREAM_CHUNK_SIZE)
                    if not chunk:
                        break
                    file_handle.write(chunk)
        except OSError as ex:
            raise RuntimeIOError(f'Unable to write to "{target}": {ex}') from ex
