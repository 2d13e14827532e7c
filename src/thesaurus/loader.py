"""
Opening dictionary archives.

An archive is three files sharing a base name in one directory:
<name>.ifo (metadata), <name>.idx (index) and <name>.dict (entry texts).
Dictionary wraps one opened archive; open_dictionaries() opens several
at once, one task per archive, and reports the ones that failed instead
of giving up on the whole set.
"""
from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from . import config as CFG
from .DB.catalog import IndexCatalog
from .DB.corpus import CorpusReader
from .errors import MissingFile, ThesaurusError
from .models import Entry, Resolution
from .search import ResolveOptions, resolve

log = logging.getLogger(__name__)

ArchiveSpec = Tuple[str, str]   # (name, directory)


def archive_paths(name: str, path: str) -> Tuple[str, str, str]:
    base = os.path.join(path, name)
    ifo, idx, dct = (base + ext for ext in CFG.ARCHIVE_EXTS)
    return ifo, idx, dct


class Dictionary:
    """One opened archive: its catalog and a reader on its corpus file."""

    def __init__(self, name: str, path: str, catalog: IndexCatalog, reader: CorpusReader) -> None:
        self.name = name
        self.path = path
        self.catalog = catalog
        self.reader = reader

    @classmethod
    def open(cls, name: str, path: str) -> "Dictionary":
        if not name:
            raise ValueError("No name specified for dictionary")
        ifo, idx, dct = archive_paths(name, path)
        for p in (ifo, idx, dct):
            if not os.path.isfile(p):
                raise MissingFile(p)
        log.info("Opening dictionary %s from %s", name, path)
        catalog = IndexCatalog.load(ifo, idx, corpus_path=dct)
        reader = CorpusReader(dct)
        log.info("Dictionary %s ready: %d entries", name, catalog.count())
        return cls(name, path, catalog, reader)

    @property
    def title(self) -> str:
        return self.catalog.title

    def info(self) -> Dict[str, str]:
        return dict(self.catalog.info)

    # ------------- query -------------

    def search(self, query: str, options: ResolveOptions) -> Resolution:
        """Resolve query against the index and read the text of whatever was found."""
        res = resolve(self.catalog, query, options)
        matches = [self.reader.read_entry(e) for e in res.matches]
        nearest = self.reader.read_entry(res.nearest) if res.nearest is not None else None
        return Resolution(matches=matches, nearest=nearest)

    def lookup(self, ids: Iterable[int]) -> List[Entry]:
        """Entries (with text) for the given ids; stops at the end of the catalog."""
        last = self.catalog.count() - 1
        out: List[Entry] = []
        for n in ids:
            if n > last:
                break
            if n < 0:
                continue
            out.append(self.reader.read_entry(self.catalog.get(n)))
        return out

    # ------------- teardown -------------

    def close(self) -> None:
        self.reader.close()

    def __repr__(self) -> str:
        return f"Dictionary(name={self.name!r}, entries={self.catalog.count()})"


@dataclass
class LoadReport:
    dictionaries: Dict[str, Dictionary] = field(default_factory=dict)
    failures: Dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return bool(self.dictionaries)


def discover_archives(root: str) -> List[ArchiveSpec]:
    """Every <name>.ifo directly inside root, as (name, root) pairs, sorted by name."""
    if not os.path.isdir(root):
        raise FileNotFoundError(root)
    ifo_ext = CFG.ARCHIVE_EXTS[0]
    out: List[ArchiveSpec] = []
    with os.scandir(root) as it:
        for entry in it:
            if not entry.is_file() or not entry.name.lower().endswith(ifo_ext):
                continue
            stem = entry.name[: -len(ifo_ext)]
            if not stem:
                log.info("Skipping nameless archive %s", entry.path)
                continue
            out.append((stem, root))
    out.sort()
    return out


def open_dictionaries(specs: Sequence[ArchiveSpec], workers: Optional[int] = None) -> LoadReport:
    """
    Fork-join: open every archive in its own task and wait for all of them.
    A failing archive lands in report.failures; the others still load.
    """
    names = [name for name, _ in specs]
    dupes = {n for n in names if names.count(n) > 1}
    if dupes:
        raise ValueError(f"duplicate dictionary names: {sorted(dupes)}")

    report = LoadReport()
    if not specs:
        return report

    workers = max(1, min(workers or CFG.DEFAULT_WORKERS, len(specs)))
    with ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [(name, ex.submit(Dictionary.open, name, path)) for name, path in specs]
        for name, fut in futures:
            try:
                report.dictionaries[name] = fut.result()
            except (ThesaurusError, OSError, ValueError) as exc:
                log.warning("Could not load dictionary %s: %s", name, exc)
                report.failures[name] = exc
    return report
