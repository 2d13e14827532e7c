from __future__ import annotations
import re
import unicodedata
from typing import List

# inline emphasis markers: <b> <i> <t> and font changes, opening or closing
_MARKUP_RE = re.compile(r"</?[bit]>|</?font.*?>", re.S)
_DIGIT_SUFFIX_RE = re.compile(r"^(.*?\D)\d+$", re.S)


def strip_diacritics(text: str) -> str:
    """Canonical decomposition, then drop nonspacing marks ('café' -> 'cafe')."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def strip_digit_suffix(lemma: str) -> str:
    """
    'bank1' -> 'bank'. Homographs are told apart by a trailing number;
    an all-digit lemma ('1984') is left alone.
    """
    m = _DIGIT_SUFFIX_RE.match(lemma)
    return m.group(1) if m else lemma


def normalize_query(text: str, *, diacritics: bool, foldcase: bool) -> str:
    if diacritics:
        text = strip_diacritics(text)
    if foldcase:
        text = text.casefold()
    return text


def normalize_lemma(lemma: str, *, diacritics: bool, foldcase: bool) -> str:
    return normalize_query(strip_digit_suffix(lemma), diacritics=diacritics, foldcase=foldcase)


def strip_markup(text: str) -> str:
    return _MARKUP_RE.sub("", text)


def visible_len(text: str) -> int:
    """Column width of text once inline markers are hidden by the renderer."""
    return len(text) - sum(len(m.group(0)) for m in _MARKUP_RE.finditer(text))


def normalize_and_map(text: str) -> tuple[str, List[int]]:
    """
    Normalize text for visible-line search and return:
      - normalized string (diacritics stripped, casefolded)
      - mapping list: normalized index -> index in the ORIGINAL string,
        with one trailing sentinel equal to len(text)
    Works per character, so a match in the normalized string can be
    reported in the columns the user actually sees.
    """
    out_chars: List[str] = []
    mapping: List[int] = []
    for orig_i, ch in enumerate(text):
        piece = strip_diacritics(ch).casefold()
        for p in piece:
            out_chars.append(p)
            mapping.append(orig_i)
    mapping.append(len(text))
    return "".join(out_chars), mapping


def common_prefix_len(a: str, b: str) -> int:
    n = 0
    for x, y in zip(a, b):
        if x != y:
            break
        n += 1
    return n
