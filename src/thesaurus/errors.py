"""
Error taxonomy of the dictionary engine.

Opening a dictionary may fail with MissingFile, MalformedIndex or
DecodeError; reading entry text may fail with IoError or DecodeError.
Each class also derives from the matching builtin so callers that only
know about FileNotFoundError / ValueError / OSError still catch them.
"""
from __future__ import annotations

from typing import Optional


class ThesaurusError(Exception):
    """Base class for every error raised by the engine."""


class MissingFile(ThesaurusError, FileNotFoundError):
    def __init__(self, path: str) -> None:
        super().__init__(f"I cannot find {path}!")
        self.path = path
        self.filename = path


class MalformedIndex(ThesaurusError, ValueError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class DecodeError(ThesaurusError, ValueError):
    def __init__(self, path: str, offset: int, detail: Optional[str] = None) -> None:
        msg = f"{path}: invalid UTF-8 at byte {offset}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)
        self.path = path
        self.offset = offset


class IoError(ThesaurusError, OSError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigError(ThesaurusError, ValueError):
    pass
