"""
Typesetting of dictionary entries into fixed-width display lines.

An entry becomes an optional title block (separator, dictionary title,
lemma, separator, blank line) followed by the word-wrapped body
"<t>lemma</t>, corpus text". Inline markers (<b>, <i>, <t>, <font ...>)
stay in the output for the front end to style but take no columns when
deciding where to wrap.
"""
from __future__ import annotations
import re
from typing import List, Optional, Tuple

from .models import Entry, MatchKind, RenderedEntry
from .normalize import visible_len

_BR_RE = re.compile(r"</?br\s*/?>", re.I)
_BR_TOKEN = "\x00br\x00"

_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", "'"),
    ("&amp;", "&"),
)


def decode_entities(text: str) -> str:
    for ent, ch in _ENTITIES:
        text = text.replace(ent, ch)
    return text


def center(text: str, width: int) -> str:
    """Pad text to sit in the middle of width columns; overlong text ends in '...'."""
    if len(text) > width:
        text = text[: width - 3] + "..."
    padding = int(width / 2 - len(text) / 2)
    return " " * padding + text


def typeset(text: str, width: int, indent: int = 0) -> List[str]:
    """
    Greedy word wrap to `width` columns with `indent` leading spaces.
    A <br> marker ends the line and continues at twice the indent.
    """
    text = _BR_RE.sub(f" {_BR_TOKEN} ", text)
    lines: List[str] = []
    prefix = " " * indent
    line = prefix
    filled = False
    for word in text.split():
        if word == _BR_TOKEN:
            lines.append(line.rstrip(" "))
            prefix = " " * (2 * indent)
            line, filled = prefix, False
            continue
        if not filled or visible_len(line) + visible_len(word) <= width:
            line += word + " "
            filled = True
        else:
            lines.append(line.rstrip(" "))
            line = " " * indent + word + " "
    if filled:
        lines.append(line.rstrip(" "))
    return lines


class EntryFormatter:
    def __init__(self, width: int, lmargin: int = 0, rmargin: int = 0,
                 header: bool = True, title: str = "") -> None:
        self.width = width
        self.lmargin = lmargin
        self.rmargin = rmargin
        self.header = header
        self.title = title

    def title_block(self, lemma: str, kind: MatchKind) -> Tuple[str, ...]:
        sep = kind.separator * self.width
        out = [sep]
        if self.title:
            out.append(_center_marked(self.title, self.width))
        out.append(_center_marked(lemma, self.width))
        out.append(sep)
        out.append("")
        return tuple(out)

    def body(self, lemma: str, corpus: str) -> Tuple[str, ...]:
        text = decode_entities(f"<t>{lemma}</t>, {corpus}")
        return tuple(typeset(text, self.width - self.rmargin, self.lmargin))

    def render(self, entry: Entry, corpus: Optional[str] = None,
               kind: MatchKind = MatchKind.NEAREST_LITERAL) -> RenderedEntry:
        text = corpus if corpus is not None else (entry.corpus or "")
        title = self.title_block(entry.lemma, kind) if self.header else ()
        return RenderedEntry(
            source_id=entry.id,
            title_lines=title,
            body_lines=self.body(entry.lemma, text),
        )


def _center_marked(text: str, width: int) -> str:
    # center the visible text, then wrap it in a title marker
    line = center(text, width)
    stripped = line.lstrip(" ")
    return line[: len(line) - len(stripped)] + f"<t>{stripped}</t>"


def render(entry: Entry, corpus_text: str, width: int, left_margin: int, right_margin: int,
           show_header: bool, match_kind: MatchKind, title: str = "") -> RenderedEntry:
    """Functional form of EntryFormatter.render."""
    fmt = EntryFormatter(width, left_margin, right_margin, show_header, title)
    return fmt.render(entry, corpus_text, match_kind)
