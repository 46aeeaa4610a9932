from __future__ import annotations

import logging
import mimetypes
import os
import queue
import secrets
import threading
from typing import Any, Iterator, Mapping

from .errors import RequestCancelled, UploadError, ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
PIPE_DEPTH = 8

_EOF = object()


class _PipeClosed(Exception):
    pass


class _Pipe:
    """Bounded hand-off between the writer thread and the body reader."""

    def __init__(self, depth: int):
        self._q: queue.Queue = queue.Queue(maxsize=depth)
        self._reader_gone = threading.Event()

    def write(self, item: Any) -> None:
        while not self._reader_gone.is_set():
            try:
                self._q.put(item, timeout=0.05)
                return
            except queue.Full:
                continue
        raise _PipeClosed()

    def read(self) -> Any:
        return self._q.get()

    def close_reader(self) -> None:
        self._reader_gone.set()
        while True:
            try:
                self._q.get_nowait()
            except queue.Empty:
                return


def _escape_quotes(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _field_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


class StreamingMultipartEncoder:
    """multipart/form-data body produced on a writer thread while httpx reads it.

    Iterating the encoder starts a fresh writer, so the same encoder can be
    replayed by the transport's retry loop without buffering the file.
    """

    def __init__(
            self,
            fields: Mapping[str, Any] | None = None,
            file_field: str | None = None,
            file_path: str | os.PathLike | None = None,
            *,
            boundary: str | None = None,
            chunk_size: int = CHUNK_SIZE,
            pipe_depth: int = PIPE_DEPTH,
            cancel: threading.Event | None = None,
    ):
        if file_path and not file_field:
            raise ValidationError("file_field is required when file_path is given")
        self.fields = {str(k): _field_value(v) for k, v in (fields or {}).items()}
        self.file_field = file_field
        self.file_path = os.fspath(file_path) if file_path else None
        self.boundary = boundary or secrets.token_hex(30)
        self._chunk_size = chunk_size
        self._pipe_depth = pipe_depth
        self._cancel = cancel

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def __iter__(self) -> Iterator[bytes]:
        return self.stream()

    def stream(self) -> Iterator[bytes]:
        pipe = _Pipe(self._pipe_depth)
        writer = threading.Thread(target=self._write, args=(pipe,), name="gowa-multipart-writer", daemon=True)
        writer.start()
        try:
            while True:
                item = pipe.read()
                if item is _EOF:
                    return
                if isinstance(item, BaseException):
                    raise item
                yield item
        finally:
            pipe.close_reader()
            writer.join()

    def _part_header(self, name: str, filename: str | None = None) -> bytes:
        disposition = f'form-data; name="{_escape_quotes(name)}"'
        lines = [f"--{self.boundary}"]
        if filename is None:
            lines.append(f"Content-Disposition: {disposition}")
        else:
            ctype = mimetypes.guess_type(filename)[0] or "application/octet-stream"
            lines.append(f'Content-Disposition: {disposition}; filename="{_escape_quotes(filename)}"')
            lines.append(f"Content-Type: {ctype}")
        return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")

    def _check_cancel(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise RequestCancelled("upload cancelled")

    def _write(self, pipe: _Pipe) -> None:
        try:
            for name, value in self.fields.items():
                pipe.write(self._part_header(name) + value.encode("utf-8") + b"\r\n")
            if self.file_path:
                self._write_file(pipe)
            pipe.write(f"--{self.boundary}--\r\n".encode("ascii"))
            pipe.write(_EOF)
        except _PipeClosed:
            logger.debug("multipart reader closed before body was complete")
        except (UploadError, RequestCancelled) as exc:
            self._abort(pipe, exc)
        except Exception as exc:
            self._abort(pipe, UploadError(f"multipart encoding failed: {exc}"))

    def _write_file(self, pipe: _Pipe) -> None:
        path = self.file_path
        try:
            f = open(path, "rb")
        except OSError as exc:
            raise UploadError(f"cannot open {path}: {exc}") from exc
        with f:
            pipe.write(self._part_header(self.file_field, os.path.basename(path)))
            while True:
                self._check_cancel()
                try:
                    chunk = f.read(self._chunk_size)
                except OSError as exc:
                    raise UploadError(f"cannot read {path}: {exc}") from exc
                if not chunk:
                    break
                pipe.write(chunk)
        pipe.write(b"\r\n")

    @staticmethod
    def _abort(pipe: _Pipe, exc: BaseException) -> None:
        try:
            pipe.write(exc)
        except _PipeClosed:
            pass
