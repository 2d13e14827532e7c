# thesaurus/models.py
"""
Data models for the dictionary engine.

- Entry: one index record (lemma + byte range in the corpus file).
- Resolution: the outcome of a query against a catalog.
- RenderedEntry: an entry typeset into display lines.
- Position: a cursor into the paged buffer.
- MatchKind: which search mode produced an entry (drives the title separator).

These classes hold no business logic; reading, matching, formatting and
paging live in their own modules.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class Entry:
    """
    One record of the dictionary index.

    Attributes
    ----------
    id : int
        Ordinal position of the record in the on-disk index (0-based). Stable
        for the life of the catalog and the only handle used for re-lookup.
    lemma : str
        Headword as stored in the index.
    offset : int
        Byte offset of the entry text in the corpus file.
    length : int
        Byte length of the entry text.
    corpus : Optional[str]
        Entry text, populated only once it has been read from the corpus file.
    """
    id: int
    lemma: str
    offset: int
    length: int
    corpus: Optional[str] = None

    def with_corpus(self, text: str) -> "Entry":
        return replace(self, corpus=text)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Exact/regex matches in catalog order, or a single nearest hit when there are none."""
    matches: List[Entry] = field(default_factory=list)
    nearest: Optional[Entry] = None

    @property
    def entries(self) -> List[Entry]:
        """Matches if any, else the nearest hit (non-strict reading)."""
        if self.matches:
            return list(self.matches)
        return [self.nearest] if self.nearest is not None else []

    def __bool__(self) -> bool:
        return bool(self.matches) or self.nearest is not None


class MatchKind(enum.Enum):
    """Search mode an entry was rendered under; the value is the title separator."""
    STRICT_LITERAL = "-"
    STRICT_REGEX = "="
    NEAREST_LITERAL = "~"
    NEAREST_REGEX = "≈"

    @classmethod
    def of(cls, strict: bool, regexp: bool) -> "MatchKind":
        if strict:
            return cls.STRICT_REGEX if regexp else cls.STRICT_LITERAL
        return cls.NEAREST_REGEX if regexp else cls.NEAREST_LITERAL

    @property
    def separator(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class RenderedEntry:
    source_id: int
    title_lines: Tuple[str, ...]
    body_lines: Tuple[str, ...]

    @property
    def lines(self) -> Tuple[str, ...]:
        return self.title_lines + self.body_lines

    def __len__(self) -> int:
        return len(self.title_lines) + len(self.body_lines)


@dataclass(frozen=True, order=True, slots=True)
class Position:
    """
    Cursor into the paged buffer.

    entry : index into the loaded entries
    line  : number of display lines of that entry behind the cursor
            (0 = header not consumed yet)
    """
    entry: int
    line: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.entry, self.line)

    def __iter__(self):
        yield self.entry
        yield self.line
