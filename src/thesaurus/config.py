# thesaurus/config.py
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, fields, replace as _dc_replace
from typing import Any, Mapping

from .errors import ConfigError

# number of entries pulled in when scrolling reaches the edge of the buffer
ENTRYLOAD: int = 20

# left/right margins of the wrapped entry body
LMARGIN: int = 4
RMARGIN: int = 4

# output width: terminal columns minus some slack, never below MIN_WIDTH
MIN_WIDTH: int = 20
WIDTH_SLACK: int = 5
FALLBACK_COLUMNS: int = 80

# an archive is three files sharing a base name
ARCHIVE_EXTS = (".ifo", ".idx", ".dict")

# fork-join workers for loading several dictionaries at once
_cpu = os.cpu_count() or 4
DEFAULT_WORKERS: int = _cpu * 2

# default page size for front ends
PAGE_LINES: int = 20


def default_width() -> int:
    cols = shutil.get_terminal_size((FALLBACK_COLUMNS, 24)).columns
    return max(MIN_WIDTH, cols - WIDTH_SLACK)


@dataclass(frozen=True)
class Options:
    """
    Search and display options of one dictionary session.

    normalize  : strip diacritics when comparing lemmas
    foldcase   : compare lemmas case-insensitively
    regexp     : treat queries as regular expressions
    strict     : only exact (or regex) matches, all of them; no lazy loading
    raw        : leave inline markup for the front end (no colouring in the core)
    header     : prepend a title block to every entry
    query_raw  : do not ignore inline markup when searching visible lines
    width      : output width in columns
    entryload  : entries fetched per lazy load
    lmargin    : left indent of the entry body
    rmargin    : right margin of the entry body
    """
    normalize: bool = True
    foldcase: bool = False
    regexp: bool = False
    strict: bool = False
    raw: bool = True
    header: bool = True
    query_raw: bool = False
    width: int = 0
    entryload: int = ENTRYLOAD
    lmargin: int = LMARGIN
    rmargin: int = RMARGIN

    def __post_init__(self) -> None:
        if self.width == 0:
            object.__setattr__(self, "width", default_width())
        if self.width < MIN_WIDTH:
            raise ConfigError(f"width must be at least {MIN_WIDTH}, got {self.width}")
        if self.entryload < 1:
            raise ConfigError(f"entryload must be positive, got {self.entryload}")
        if self.lmargin < 0 or self.rmargin < 0:
            raise ConfigError("margins must not be negative")
        if self.lmargin + self.rmargin >= self.width:
            raise ConfigError(
                f"margins ({self.lmargin}+{self.rmargin}) leave no room in width {self.width}"
            )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Options":
        """Build options from loosely spelled names ('-Width', 'width', ...)."""
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for raw_key, value in mapping.items():
            key = validate_key(raw_key, known)
            kwargs[key] = _coerce(key, known[key].type, value)
        return cls(**kwargs)

    def replace(self, **changes: Any) -> "Options":
        return _dc_replace(self, **changes)


def validate_key(raw_key: str, known: Mapping[str, Any] | None = None) -> str:
    known = known if known is not None else {f.name: f for f in fields(Options)}
    key = str(raw_key).lstrip("-").lower().replace("-", "_")
    if key not in known:
        raise ConfigError(f"Configuration error in parameter: {raw_key}")
    return key


def _coerce(key: str, typ: Any, value: Any) -> Any:
    # annotations are strings under postponed evaluation
    if typ in (bool, "bool"):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if typ in (int, "int"):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{key} expects an integer, got {value!r}") from None
    return value
