# thesaurus/engine.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .buffer import PagedBuffer
from .config import Options
from .errors import ThesaurusError
from .format import EntryFormatter
from .loader import ArchiveSpec, Dictionary, open_dictionaries
from .models import MatchKind, Position, RenderedEntry
from .search import ResolveOptions, Span

log = logging.getLogger(__name__)


class DictionarySession:
    """
    One navigation context over one dictionary: the last query, the paged
    buffer it seeded and the options it was made with.

    Public API (used by the REPL, Flask and the desktop app):
      * search(term):      resolve term and seed the buffer
      * scroll / repeat / jump_entries: page through the buffer
      * search_visible(term): highlight spans in the lines on screen
      * get_position / set_position: snapshot and restore the window
      * set_strict / set_regexp / set_normalize / set_foldcase: mode toggles
    """

    def __init__(self, dictionary: Dictionary, options: Optional[Options] = None) -> None:
        self.dictionary = dictionary
        self.options = options or Options()
        self.query: str = ""
        self.formatter = self._make_formatter()
        self.buffer = PagedBuffer(self._fetch, entryload=self.options.entryload,
                                  strict=self.options.strict)

    @property
    def name(self) -> str:
        return self.dictionary.name

    @property
    def displayed(self) -> List[str]:
        return list(self.buffer.displayed)

    # ------------- query -------------

    # /* ~~~ Resolve a term and put what was found into the buffer ~~~ */
    def search(self, term: str) -> Optional[List[str]]:
        """
        Strict mode seeds the buffer with every exact (or regex) match;
        otherwise with the first match or, failing that, the nearest hit.
        Returns all seeded lines, or None when nothing was found.
        """
        self.buffer.clear()
        self.query = ""
        if not term or not term.strip():
            return None

        opts = self.options
        res = self.dictionary.search(term, ResolveOptions(
            normalize_diacritics=opts.normalize,
            fold_case=opts.foldcase,
            as_regex=opts.regexp,
            max_matches=None if opts.strict else 1,
        ))
        entries = res.matches if opts.strict else res.entries
        if not entries:
            log.info("%s: no match for %r", self.name, term)
            return None

        kind = self._kind()
        rendered = [self.formatter.render(e, kind=kind) for e in entries]
        self.buffer.seed(rendered, [e.id for e in entries])
        self.query = term
        return [line for r in rendered for line in r.lines]

    def reset(self) -> None:
        """Drop the buffer and the last query; the catalog stays open."""
        self.buffer.clear()
        self.query = ""

    def dump(self) -> str:
        """Full text of the entry under the cursor."""
        entry = self.buffer.current_entry()
        if entry is None:
            return ""
        return "\n".join(entry.lines) + "\n"

    # ------------- movement -------------

    def scroll(self, count: int = 0, increment: int = 0) -> Optional[List[str]]:
        if self.buffer.empty:
            return None
        return self.buffer.scroll(count, increment)

    def repeat(self, count: int = 0) -> Optional[List[str]]:
        if self.buffer.empty:
            return None
        return self.buffer.repeat(count)

    def jump_entries(self, delta: int, lines: int = 0) -> Optional[List[str]]:
        if self.buffer.empty:
            return None
        return self.buffer.jump_entries(delta, lines)

    def search_visible(self, term: str, as_regex: bool = False) -> List[Span]:
        return self.buffer.search_visible(term, as_regex=as_regex, raw=self.options.query_raw)

    def get_position(self) -> Tuple[Position, Position]:
        return self.buffer.get_position()

    def set_position(self, start, end) -> None:
        self.buffer.set_position(start, end)

    # ------------- mode toggles -------------

    def set_strict(self, flag: bool) -> Optional[List[str]]:
        return self._retune(strict=bool(flag))

    def set_regexp(self, flag: bool) -> Optional[List[str]]:
        return self._retune(regexp=bool(flag))

    def set_normalize(self, flag: bool) -> Optional[List[str]]:
        return self._retune(normalize=bool(flag))

    def set_foldcase(self, flag: bool) -> Optional[List[str]]:
        return self._retune(foldcase=bool(flag))

    # ------------- internals -------------

    def _retune(self, **changes) -> Optional[List[str]]:
        """Apply new options, then re-seed the buffer from the last query."""
        last = self.query
        self.options = self.options.replace(**changes)
        self.formatter = self._make_formatter()
        self.buffer.strict = self.options.strict
        self.buffer.entryload = self.options.entryload
        self.reset()
        if not last:
            return None
        try:
            return self.search(last)
        except ThesaurusError as exc:
            log.warning("%s: re-running %r failed: %s", self.name, last, exc)
            self.reset()
            return None

    def _make_formatter(self) -> EntryFormatter:
        o = self.options
        return EntryFormatter(o.width, o.lmargin, o.rmargin, o.header, self.dictionary.title)

    def _kind(self) -> MatchKind:
        return MatchKind.of(self.options.strict, self.options.regexp)

    def _fetch(self, ids: Sequence[int]) -> List[RenderedEntry]:
        kind = self._kind()
        return [self.formatter.render(e, kind=kind) for e in self.dictionary.lookup(ids)]


class Session:
    """
    All dictionaries opened for one user, each with its own navigation
    context, plus the name of the selected one.
    """

    def __init__(self, dictionaries: Dict[str, Dictionary], options: Optional[Options] = None,
                 failures: Optional[Dict[str, Exception]] = None) -> None:
        self.options = options or Options()
        self.failures: Dict[str, Exception] = dict(failures or {})
        self.contexts: Dict[str, DictionarySession] = {
            name: DictionarySession(d, self.options) for name, d in dictionaries.items()
        }
        self.selected: Optional[str] = next(iter(self.contexts), None)

    # /* ~~~ Open every archive (fork-join) and wrap the survivors ~~~ */
    @classmethod
    def open(cls, specs: Sequence[ArchiveSpec], options: Optional[Options] = None,
             workers: Optional[int] = None) -> "Session":
        report = open_dictionaries(specs, workers=workers)
        for name, exc in report.failures.items():
            log.warning("Dictionary %s excluded: %s", name, exc)
        return cls(report.dictionaries, options, report.failures)

    @property
    def ok(self) -> bool:
        return bool(self.contexts)

    def names(self) -> List[str]:
        return list(self.contexts)

    def select(self, name: str) -> DictionarySession:
        if name not in self.contexts:
            raise KeyError(name)
        self.selected = name
        return self.contexts[name]

    def get(self, name: Optional[str] = None) -> DictionarySession:
        key = name or self.selected
        if key is None:
            raise RuntimeError("No dictionary loaded.")
        try:
            return self.contexts[key]
        except KeyError:
            raise KeyError(key) from None

    @property
    def current(self) -> DictionarySession:
        return self.get()

    # ------------- query -------------

    def search(self, term: str, name: Optional[str] = None) -> Optional[List[str]]:
        """Search one dictionary; a read failure there counts as no match."""
        ctx = self.get(name)
        try:
            return ctx.search(term)
        except ThesaurusError as exc:
            log.warning("%s: search for %r failed: %s", ctx.name, term, exc)
            ctx.reset()
            return None

    def search_all(self, term: str) -> Dict[str, Optional[List[str]]]:
        return {name: self.search(term, name) for name in self.contexts}

    # ------------- teardown -------------

    def close(self) -> None:
        for ctx in self.contexts.values():
            try:
                ctx.dictionary.close()
            except OSError as exc:
                log.warning("Closing %s failed: %s", ctx.name, exc)
        self.contexts.clear()
        self.selected = None
        log.info("Session shutdown complete")

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def open_session(specs: Iterable[ArchiveSpec], **options) -> Session:
    """Convenience: Session.open with options given by name ('width', '-strict', ...)."""
    return Session.open(list(specs), Options.from_mapping(options) if options else None)
