from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .errors import UnsupportedLanguageError


class Direction(str, Enum):
    LTR = "ltr"
    RTL = "rtl"


class Language(str, Enum):
    """Languages the tool can translate from and to."""

    EN = "en"
    EN_GB = "en-gb"
    FA = "fa"

    @classmethod
    def parse(cls, code: str) -> "Language":
        try:
            return cls(code.strip().lower())
        except ValueError:
            supported = ", ".join(language.value for language in cls)
            raise UnsupportedLanguageError(
                f"Unsupported language '{code}' (supported: {supported})"
            ) from None

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def direction(self) -> Direction:
        return Direction.RTL if self is Language.FA else Direction.LTR

    def __str__(self) -> str:
        return self.value


_DISPLAY_NAMES = {
    Language.EN: "English",
    Language.EN_GB: "British English",
    Language.FA: "Persian",
}


@dataclass
class Cue:
    """Single WebVTT cue with timing data."""

    start: dt.timedelta
    end: dt.timedelta
    text_lines: List[str] = field(default_factory=list)
    identifier: Optional[str] = None


@dataclass(frozen=True)
class ChunkRef:
    """A fragment of one cue text line that belongs to a sentence."""

    cue_index: int
    line_index: int
    start: int
    length: int


@dataclass
class SentenceSpan:
    """A reconstructed sentence and the cue fragments it was built from."""

    text: str
    chunks: List[ChunkRef] = field(default_factory=list)

    @property
    def cue_range(self) -> range:
        if not self.chunks:
            return range(0)
        return range(self.chunks[0].cue_index, self.chunks[-1].cue_index + 1)

    @property
    def weights(self) -> List[int]:
        return [chunk.length for chunk in self.chunks]


@dataclass
class TranslatedSentence:
    span: SentenceSpan
    translated_text: str


@dataclass
class TranslationResult:
    """Translated sentences in request order plus what the service reported."""

    sentences: List[str]
    direction: Direction = Direction.LTR
    detected_language: Optional[str] = None


@dataclass
class TranslationArtifacts:
    """Outcome of a successful translation run."""

    target_path: Path
    source_language: Optional[str]
    direction: Direction
    cue_count: int
    sentence_count: int
