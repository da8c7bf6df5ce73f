from __future__ import annotations

import mimetypes
from dataclasses import dataclass

from fastapi import Request
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from .errors import (
    FileTooLarge,
    MalformedUpload,
    NoFileProvided,
    TooManyFiles,
    UnexpectedFieldName,
)
from .schemas import FileMetadata

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _decode(value: bytes, charset: str) -> str:
    try:
        return value.decode(charset)
    except (UnicodeDecodeError, LookupError):
        return value.decode("latin-1")


def guess_content_type(filename: str) -> str:
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or DEFAULT_CONTENT_TYPE


@dataclass
class _FilePart:
    filename: str
    content_type: str
    size: int = 0


class MultipartFileReader:
    """Incremental multipart/form-data reader that keeps file metadata only.

    Chunks are fed with :meth:`feed` as they arrive. File bytes are counted and
    dropped, and every limit is checked while parsing, so a bad upload fails on
    the chunk that breaks the limit.
    """

    def __init__(
        self,
        boundary: bytes,
        *,
        field_name: str,
        max_file_size: int,
        max_files: int,
        limit_label: str,
        charset: str = "utf-8",
    ):
        self.field_name = field_name
        self.max_file_size = max_file_size
        self.max_files = max_files
        self.limit_label = limit_label
        self.charset = charset

        self.files: list[FileMetadata] = []
        self._part: _FilePart | None = None
        self._headers: dict[bytes, bytes] = {}
        self._header_field = b""
        self._header_value = b""
        self._files_seen = 0
        self._finished = False

        callbacks = {
            "on_part_begin": self._on_part_begin,
            "on_part_data": self._on_part_data,
            "on_part_end": self._on_part_end,
            "on_header_field": self._on_header_field,
            "on_header_value": self._on_header_value,
            "on_header_end": self._on_header_end,
            "on_headers_finished": self._on_headers_finished,
            "on_end": self._on_end,
        }
        self._parser = MultipartParser(boundary, callbacks)

    # parser callbacks

    def _on_part_begin(self) -> None:
        self._part = None
        self._headers = {}

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[self._header_field.strip().lower()] = self._header_value.strip()
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        disposition = self._headers.get(b"content-disposition")
        if disposition is None:
            raise MalformedUpload("Missing Content-Disposition header")
        _, options = parse_options_header(disposition)
        if b"name" not in options:
            raise MalformedUpload("Missing field name in Content-Disposition header")

        raw_filename = options.get(b"filename")
        if not raw_filename:
            # text field, or a file input submitted without a selected file
            return

        if self._files_seen >= self.max_files:
            raise TooManyFiles(self.max_files)
        field_name = _decode(options[b"name"], self.charset)
        if field_name != self.field_name:
            raise UnexpectedFieldName(self.field_name)
        self._files_seen += 1

        filename = _decode(raw_filename, self.charset)
        declared = self._headers.get(b"content-type", b"").decode("latin-1").split(";")[0].strip()
        self._part = _FilePart(
            filename=filename,
            content_type=declared or guess_content_type(filename),
        )

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._part is None:
            return
        self._part.size += end - start
        if self._part.size > self.max_file_size:
            raise FileTooLarge(self.limit_label)

    def _on_part_end(self) -> None:
        if self._part is not None:
            self.files.append(
                FileMetadata(
                    name=self._part.filename,
                    type=self._part.content_type,
                    size=self._part.size,
                )
            )
        self._part = None

    def _on_end(self) -> None:
        self._finished = True

    # public API

    def feed(self, chunk: bytes) -> None:
        try:
            self._parser.write(chunk)
        except MultipartParseError as e:
            raise MalformedUpload(str(e)) from e

    def close(self) -> list[FileMetadata]:
        self._parser.finalize()
        if not self._finished:
            raise MalformedUpload("Unexpected end of form")
        return self.files


async def read_upload(
    request: Request,
    *,
    field_name: str,
    max_file_size: int,
    max_files: int,
    limit_label: str,
) -> FileMetadata:
    """Stream the request body and return metadata of the uploaded file."""
    content_type, params = parse_options_header(request.headers.get("content-type", ""))
    if content_type != b"multipart/form-data":
        raise NoFileProvided(field_name)

    boundary = params.get(b"boundary")
    if not boundary:
        raise MalformedUpload("Multipart: Boundary not found")
    charset = params.get(b"charset", b"utf-8").decode("latin-1")

    reader = MultipartFileReader(
        boundary,
        field_name=field_name,
        max_file_size=max_file_size,
        max_files=max_files,
        limit_label=limit_label,
        charset=charset,
    )
    async for chunk in request.stream():
        if chunk:
            reader.feed(chunk)

    files = reader.close()
    if not files:
        raise NoFileProvided(field_name)
    return files[0]
