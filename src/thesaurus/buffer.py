# thesaurus/buffer.py
"""
Paged buffer over rendered dictionary entries.

The buffer holds a contiguous run of rendered entries and two cursors:
`start` sits before the first line on screen, `end` after the last one.
Paging forward emits the lines after `end`, paging backward the lines
before `start`. A title block is never split across pages: it is
emitted whole, even when it alone is longer than the page. When a page
runs off the loaded entries the buffer asks its fetch callback for the
neighbouring catalog ids (lazy load), unless it is in strict mode.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .config import ENTRYLOAD
from .errors import ThesaurusError
from .models import Position, RenderedEntry
from .search import Span, search_lines

log = logging.getLogger(__name__)

Fetcher = Callable[[Sequence[int]], List[RenderedEntry]]
PositionLike = Union[Position, Tuple[int, int]]

_ORIGIN = Position(0, 0)


class PagedBuffer:
    def __init__(self, fetch: Optional[Fetcher] = None, *,
                 entryload: int = ENTRYLOAD, strict: bool = False) -> None:
        self._fetch = fetch
        self.entryload = entryload
        self.strict = strict
        self.loaded: List[RenderedEntry] = []
        self.start: Position = _ORIGIN
        self.end: Position = _ORIGIN
        self.first_id: Optional[int] = None
        self.last_id: Optional[int] = None
        self.count: int = 0                 # last page size asked for
        self.displayed: List[str] = []      # lines emitted by the last movement

    # ------------- lifecycle -------------

    def seed(self, rendered: Sequence[RenderedEntry], ids: Optional[Sequence[int]] = None) -> None:
        """Replace the buffer contents; both cursors go to the top of the first entry."""
        self.loaded = list(rendered)
        ids = list(ids) if ids is not None else [r.source_id for r in self.loaded]
        self.start = self.end = _ORIGIN
        self.first_id = ids[0] if ids else None
        self.last_id = ids[-1] if ids else None
        self.displayed = []

    def clear(self) -> None:
        self.seed([])

    @property
    def empty(self) -> bool:
        return not self.loaded

    # ------------- movement -------------

    def scroll(self, count: int = 0, increment: int = 0) -> Optional[List[str]]:
        """
        Without increment: show `count` lines after the current page
        (count > 0) or before it (count < 0).

        With increment: move the page by `increment` lines, then show
        abs(count) lines from there.
        """
        count = self._page(count)
        if not increment:
            lines = self._forward(count) if count > 0 else self._backward(-count)
            return self._shown(lines)

        n = abs(count)
        if increment > 0:
            self.end = self.start
            self._forward(increment)
        else:
            self._backward(-increment)
            self.end = self.start
        return self._shown(self._forward(n))

    def repeat(self, count: int = 0) -> Optional[List[str]]:
        """Show `count` lines again from the current start (or, if negative, up to the current end)."""
        count = self._page(count)
        if count > 0:
            self.end = self.start
            return self._shown(self._forward(count))
        self.start = self.end
        return self._shown(self._backward(-count))

    def jump_entries(self, delta: int, lines: int = 0) -> Optional[List[str]]:
        """Move `delta` whole entries from the one on screen, then show `lines` lines."""
        n = abs(self._page(lines))
        if not self.loaded:
            return None

        target = self._top_entry() + delta
        while target >= len(self.loaded) and self._load(1):
            pass
        while target < 0:
            added = self._load(-1)
            if not added:
                break
            target += added
        target = max(0, min(target, len(self.loaded) - 1))

        self.end = self._canon(Position(target, 0))
        return self._shown(self._forward(n))

    # ------------- position snapshot -------------

    def get_position(self) -> Tuple[Position, Position]:
        return self.start, self.end

    def set_position(self, start: PositionLike, end: PositionLike) -> None:
        s, e = Position(*start), Position(*end)
        for p in (s, e):
            self._check(p)
        if e < s:
            raise ValueError(f"start {s.as_tuple()} lies after end {e.as_tuple()}")
        self.start, self.end = s, e

    # ------------- queries -------------

    def search_visible(self, term: str, as_regex: bool = False, raw: bool = False) -> List[Span]:
        return search_lines(self.displayed, term, as_regex=as_regex, raw=raw)

    def current_entry(self) -> Optional[RenderedEntry]:
        if not self.loaded:
            return None
        return self.loaded[min(self.end.entry, len(self.loaded) - 1)]

    def ids(self) -> List[int]:
        return [r.source_id for r in self.loaded]

    # ------------- internals -------------

    def _page(self, count: int) -> int:
        count = count or self.count
        if not count:
            raise ValueError("I cannot print 0 lines!")
        self.count = count
        return count

    def _shown(self, lines: Optional[List[str]]) -> Optional[List[str]]:
        if lines is not None:
            self.displayed = lines
        return lines

    def _forward(self, n: int) -> Optional[List[str]]:
        out: List[str] = []
        cur = self.end
        while len(out) < n:
            if cur.entry < len(self.loaded) and cur.line < len(self.loaded[cur.entry]):
                chunk = self._chunk_after(cur)
                if out and len(out) + len(chunk) > n:
                    break
                out.extend(chunk)
                cur = Position(cur.entry, cur.line + len(chunk))
            elif cur.entry + 1 < len(self.loaded):
                cur = Position(cur.entry + 1, 0)
            elif not self._load(1):
                break
        if not out:
            return None
        self.start, self.end = self.end, cur
        return out

    def _backward(self, n: int) -> Optional[List[str]]:
        out: List[str] = []
        cur = self.start
        while len(out) < n:
            if cur.line > 0:
                chunk = self._chunk_before(cur)
                if out and len(out) + len(chunk) > n:
                    break
                out.extend(reversed(chunk))
                cur = Position(cur.entry, cur.line - len(chunk))
            elif cur.entry > 0:
                prev = cur.entry - 1
                cur = Position(prev, len(self.loaded[prev]))
            else:
                added = self._load(-1)
                if not added:
                    break
                cur = Position(cur.entry + added, cur.line)
        if not out:
            return None
        out.reverse()
        self.start, self.end = self._canon(cur), self._canon(self.start)
        return out

    # a title block is emitted whole or not at all
    def _chunk_after(self, cur: Position) -> Tuple[str, ...]:
        r = self.loaded[cur.entry]
        t = len(r.title_lines)
        if cur.line < t:
            return r.lines[cur.line:t]
        return r.lines[cur.line:cur.line + 1]

    def _chunk_before(self, cur: Position) -> Tuple[str, ...]:
        r = self.loaded[cur.entry]
        if cur.line <= len(r.title_lines):
            return r.lines[:cur.line]
        return r.lines[cur.line - 1:cur.line]

    def _load(self, direction: int) -> int:
        """Pull `entryload` neighbouring entries into the buffer; return how many arrived."""
        if self.strict or self._fetch is None or self.first_id is None or self.last_id is None:
            return 0
        if direction > 0:
            ids = range(self.last_id + 1, self.last_id + 1 + self.entryload)
        else:
            ids = range(max(0, self.first_id - self.entryload), self.first_id)
        if not ids:
            return 0

        try:
            fresh = list(self._fetch(ids))
        except (ThesaurusError, OSError) as exc:
            log.warning("Lazy load of ids %d..%d failed, stopping here: %s", ids[0], ids[-1], exc)
            return 0

        if direction > 0:
            fresh = [r for r in fresh if r.source_id > self.last_id]
            if not fresh:
                return 0
            self.loaded.extend(fresh)
            self.last_id = fresh[-1].source_id
        else:
            fresh = [r for r in fresh if r.source_id < self.first_id]
            if not fresh:
                return 0
            self.loaded[:0] = fresh
            self.first_id = fresh[0].source_id
            k = len(fresh)
            self.start = Position(self.start.entry + k, self.start.line)
            self.end = Position(self.end.entry + k, self.end.line)

        log.debug("Lazy load %s: asked %d..%d, got %d",
                  "forward" if direction > 0 else "backward", ids[0], ids[-1], len(fresh))
        return len(fresh)

    def _canon(self, pos: Position) -> Position:
        # (e, 0) and (e-1, len(e-1)) are the same place; keep the latter
        if pos.line == 0 and pos.entry > 0:
            prev = pos.entry - 1
            return Position(prev, len(self.loaded[prev]))
        return pos

    def _top_entry(self) -> int:
        s = self.start
        if s.entry < len(self.loaded) and s.line >= len(self.loaded[s.entry]):
            return min(s.entry + 1, len(self.loaded) - 1)
        return s.entry

    def _check(self, p: Position) -> None:
        if not self.loaded:
            if p != _ORIGIN:
                raise ValueError(f"position {p.as_tuple()} outside an empty buffer")
            return
        if not 0 <= p.entry < len(self.loaded):
            raise ValueError(f"entry index {p.entry} outside 0..{len(self.loaded) - 1}")
        if not 0 <= p.line <= len(self.loaded[p.entry]):
            raise ValueError(f"line {p.line} outside entry {p.entry}")
