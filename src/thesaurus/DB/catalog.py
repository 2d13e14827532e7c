from __future__ import annotations
import logging
import os
import struct
from typing import Dict, Iterator, List, Optional

from ..errors import DecodeError, MalformedIndex, MissingFile
from ..models import Entry

log = logging.getLogger(__name__)

# File format (.idx):
#   repeated records:
#       lemma:utf8 | 0x00
#       offset:u32 | length:u32   (big-endian, into the .dict file)
#   record ordinal == Entry.id

_RECORD_TAIL = struct.Struct(">II")


def parse_metadata(path: str) -> Dict[str, str]:
    """Read a .ifo file: one key=value per line; lines without '=' are skipped."""
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        raise MissingFile(path) from None
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(path, exc.start, exc.reason) from None

    info: Dict[str, str] = {}
    for line in text.split("\n"):
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        info[key.strip("\r")] = value.replace("\r", "")
    return info


def parse_index(path: str, corpus_size: Optional[int] = None) -> List[Entry]:
    """
    Decode every record of a .idx file, strictly: a bad lemma or a record
    pointing past the end of the corpus aborts the whole load, since a
    truncated table would hand out wrong ids.
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except FileNotFoundError:
        raise MissingFile(path) from None

    entries: List[Entry] = []
    pos = 0
    end = len(data)
    tail = _RECORD_TAIL.size
    while pos < end:
        nul = data.find(b"\0", pos)
        if nul == -1:
            raise MalformedIndex(path, f"unterminated lemma at byte {pos}")
        if nul + 1 + tail > end:
            raise MalformedIndex(path, f"truncated record at byte {pos}")
        try:
            lemma = data[pos:nul].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(path, pos + exc.start, exc.reason) from None
        offset, length = _RECORD_TAIL.unpack_from(data, nul + 1)
        if corpus_size is not None and offset + length > corpus_size:
            raise MalformedIndex(
                path,
                f"record #{len(entries)} ({lemma!r}) spans {offset}+{length} "
                f"past corpus end {corpus_size}",
            )
        entries.append(Entry(id=len(entries), lemma=lemma, offset=offset, length=length))
        pos = nul + 1 + tail
    return entries


class IndexCatalog:
    """
    Ordered, id-addressed table of index entries plus the archive metadata.
    Read-only once loaded; entries keep their on-disk order.
    """

    def __init__(self, entries: List[Entry], info: Optional[Dict[str, str]] = None) -> None:
        self._entries: List[Entry] = list(entries)
        self.info: Dict[str, str] = dict(info or {})

    @classmethod
    def load(
        cls,
        metadata_path: str,
        index_path: str,
        *,
        corpus_path: Optional[str] = None,
    ) -> "IndexCatalog":
        info = parse_metadata(metadata_path)
        corpus_size = None
        if corpus_path is not None:
            try:
                corpus_size = os.path.getsize(corpus_path)
            except FileNotFoundError:
                raise MissingFile(corpus_path) from None
        entries = parse_index(index_path, corpus_size)
        log.info("Parsed %s: %d entries", index_path, len(entries))
        return cls(entries, info)

    @property
    def title(self) -> str:
        return self.info.get("bookname", "")

    # ---- lookups ----

    def get(self, eid: int) -> Entry:
        if eid < 0:
            raise KeyError(eid)
        try:
            return self._entries[eid]
        except IndexError:
            raise KeyError(eid) from None

    def all(self) -> List[Entry]:
        return list(self._entries)

    def count(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __contains__(self, eid: object) -> bool:
        return isinstance(eid, int) and 0 <= eid < len(self._entries)
