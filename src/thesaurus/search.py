from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Entry, Resolution
from .normalize import (
    common_prefix_len,
    normalize_and_map,
    normalize_lemma,
    normalize_query,
    strip_diacritics,
    strip_markup,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveOptions:
    normalize_diacritics: bool = True
    fold_case: bool = False
    as_regex: bool = False
    max_matches: Optional[int] = None   # None = unbounded


def compile_query(query: str, as_regex: bool) -> Optional[re.Pattern]:
    """
    Compile a (normalized) query once per search. Returns None when the
    query is to be compared literally, including when it is not a valid
    pattern.
    """
    if not as_regex:
        return None
    try:
        return re.compile(query)
    except re.error as exc:
        log.info("Invalid pattern %r (%s); matching literally", query, exc)
        return None


def _replaces_nearest(cand: str, query: str, nearest: str, pos: int) -> bool:
    """
    Tie-break between two entries sharing `pos` leading characters with the
    query: take the candidate when its next character sorts below the
    query's and closer to it than the current nearest's does.
    """
    if pos >= len(cand) or pos >= len(query):
        return False
    c, q = cand[pos], query[pos]
    if c >= q:
        return False
    if pos >= len(nearest):
        return True
    n = nearest[pos]
    return n > q or c > n


def resolve(catalog: Iterable[Entry], raw_query: str, options: ResolveOptions) -> Resolution:
    """
    Scan the catalog in on-disk order for entries whose normalized lemma
    equals (or, in regex mode, contains a match of) the normalized query.

    While nothing has matched, keep a single nearest hit: the entry sharing
    the longest prefix with the query, ties going to the entry sorting
    closest below the query. The nearest hit is dropped as soon as a real
    match turns up.
    """
    diacritics = options.normalize_diacritics
    fold = options.fold_case
    query = normalize_query(raw_query, diacritics=diacritics, foldcase=fold)
    pattern = compile_query(query, options.as_regex)
    limit = options.max_matches

    matches: List[Entry] = []
    nearest: Optional[Entry] = None
    nearest_lemma = ""
    best = 0

    for entry in catalog:
        lemma = normalize_lemma(entry.lemma, diacritics=diacritics, foldcase=fold)
        hit = pattern.search(lemma) is not None if pattern is not None else lemma == query
        if hit:
            matches.append(entry)
            nearest = None
            if limit and len(matches) >= limit:
                break
            continue

        if matches:
            continue

        lcp = common_prefix_len(lemma, query)
        if lcp > best:
            nearest, nearest_lemma, best = entry, lemma, lcp
        elif best and lcp == best and _replaces_nearest(lemma, query, nearest_lemma, best):
            nearest, nearest_lemma = entry, lemma

    return Resolution(matches=matches, nearest=None if matches else nearest)


# ---------- searching the displayed lines ----------

Span = Tuple[int, int, int]   # (line index, start column, end column)


def _visible_pattern(term: str, as_regex: bool) -> re.Pattern:
    term = strip_diacritics(term).casefold()
    pat = compile_query(term, as_regex)
    return pat if pat is not None else re.compile(re.escape(term))


def search_lines(lines: Sequence[str], term: str, as_regex: bool = False,
                 raw: bool = False) -> List[Span]:
    """
    Find every non-overlapping occurrence of term in lines, ignoring
    diacritics and case. Unless raw, inline markers (<b>, <i>, <t>,
    <font ...>) are removed first and columns refer to the line without
    them.
    """
    if not term:
        return []
    pat = _visible_pattern(term, as_regex)
    spans: List[Span] = []
    for i, line in enumerate(lines):
        shown = line if raw else strip_markup(line)
        norm, mapping = normalize_and_map(shown)
        for m in pat.finditer(norm):
            a, b = m.span()
            if a == b:
                continue
            spans.append((i, mapping[a], mapping[b - 1] + 1))
    return spans
