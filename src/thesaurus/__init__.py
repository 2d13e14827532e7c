"""
Thesaurus: dictionaries on the command line.

Opens one or more uncompressed StarDict-style archives (.ifo/.idx/.dict),
resolves queries to entries (exact, regex or nearest hit), typesets the
entries to a fixed width and pages through them, loading neighbouring
entries on demand.

Example Usage:
    from thesaurus import Session

    with Session.open([("mydict", "/path/to/dicts")]) as s:
        if s.search("example"):
            print("\\n".join(s.current.scroll(20)))
"""
from .config import Options
from .engine import DictionarySession, Session, open_session
from .errors import (
    ConfigError,
    DecodeError,
    IoError,
    MalformedIndex,
    MissingFile,
    ThesaurusError,
)
from .loader import Dictionary, discover_archives, open_dictionaries

__version__ = "0.1.0"
__all__ = [
    "Options",
    "Session",
    "DictionarySession",
    "Dictionary",
    "open_session",
    "open_dictionaries",
    "discover_archives",
    "ThesaurusError",
    "MissingFile",
    "MalformedIndex",
    "DecodeError",
    "IoError",
    "ConfigError",
]
