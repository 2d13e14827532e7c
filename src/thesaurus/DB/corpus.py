from __future__ import annotations
import os
from typing import BinaryIO, Optional

from ..errors import DecodeError, IoError, MissingFile
from ..models import Entry


class CorpusReader:
    """Random-access reader over a .dict file; keeps one handle open."""

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)
        try:
            self._fd: Optional[BinaryIO] = open(self.path, "rb")
        except FileNotFoundError:
            raise MissingFile(self.path) from None

    def size(self) -> int:
        return os.fstat(self._handle().fileno()).st_size

    def read(self, offset: int, length: int) -> str:
        """Return exactly `length` bytes at `offset`, decoded as strict UTF-8."""
        fd = self._handle()
        try:
            fd.seek(offset)
            raw = fd.read(length)
        except (OSError, ValueError) as exc:
            raise IoError(self.path, f"read of {length} bytes at {offset} failed: {exc}") from exc
        if len(raw) != length:
            raise IoError(self.path, f"short read at {offset}: wanted {length}, got {len(raw)}")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(self.path, offset + exc.start, exc.reason) from None

    def read_entry(self, entry: Entry) -> Entry:
        if entry.corpus is not None:
            return entry
        return entry.with_corpus(self.read(entry.offset, entry.length))

    def close(self) -> None:
        if self._fd is not None:
            try:
                self._fd.close()
            finally:
                self._fd = None

    def _handle(self) -> BinaryIO:
        if self._fd is None:
            raise IoError(self.path, "reader is closed")
        return self._fd

    def __enter__(self) -> "CorpusReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
