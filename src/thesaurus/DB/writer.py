from __future__ import annotations
import io
import os
import struct
from typing import Dict, List, Optional, Tuple

_RECORD_TAIL = struct.Struct(">II")
_IFO_MAGIC = "StarDict's dict ifo file"


class ArchiveWriter:
    """
    Write an uncompressed three-file dictionary archive.
    Layout:
      <name>.ifo  : magic line, then key=value lines (bookname, wordcount, ...)
      <name>.idx  : [lemma:utf8][0x00][offset:u32 BE][length:u32 BE] per entry
      <name>.dict : concatenated UTF-8 entry texts
    Entries are written in insertion order; that order is the entry id.
    """

    def __init__(self, directory: str, name: str, bookname: str = "",
                 info: Optional[Dict[str, str]] = None) -> None:
        self.directory = directory
        self.name = name
        self.bookname = bookname
        self.info = dict(info or {})
        self._items: List[Tuple[str, str]] = []

    def add(self, lemma: str, text: str) -> "ArchiveWriter":
        if "\0" in lemma:
            raise ValueError(f"lemma may not contain NUL: {lemma!r}")
        self._items.append((lemma, text))
        return self

    def path(self, ext: str) -> str:
        return os.path.join(self.directory, self.name + ext)

    def save(self) -> str:
        """Write all three files and return the archive's base path."""
        os.makedirs(self.directory or ".", exist_ok=True)

        idx = io.BytesIO()
        body = io.BytesIO()
        for lemma, text in self._items:
            raw = text.encode("utf-8")
            idx.write(lemma.encode("utf-8"))
            idx.write(b"\0")
            idx.write(_RECORD_TAIL.pack(body.tell(), len(raw)))
            body.write(raw)

        idx_bytes = idx.getvalue()
        _write_atomic(self.path(".dict"), body.getvalue())
        _write_atomic(self.path(".idx"), idx_bytes)

        meta = {
            "version": "2.4.2",
            "bookname": self.bookname,
            "wordcount": str(len(self._items)),
            "idxfilesize": str(len(idx_bytes)),
        }
        meta.update(self.info)
        lines = [_IFO_MAGIC] + [f"{k}={v}" for k, v in meta.items()]
        _write_atomic(self.path(".ifo"), ("\n".join(lines) + "\n").encode("utf-8"))
        return os.path.join(self.directory, self.name)


def _write_atomic(path: str, data: bytes) -> None:
    tmp = f"{path}.tmp"
    with open(tmp, "wb") as f:
        f.write(data)
    os.replace(tmp, path)
