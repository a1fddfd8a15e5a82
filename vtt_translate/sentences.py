from __future__ import annotations

import logging
import re
from typing import Iterable, List

from .types import ChunkRef, Cue, SentenceSpan

logger = logging.getLogger(__name__)

# Terminal punctuation, optionally closed by quotes or brackets, at a word end
SENTENCE_END_RE = re.compile(r"[.?!…]+[\"'”’)\]]*(?=\s|$)")


def reconstruct_sentences(cues: Iterable[Cue]) -> List[SentenceSpan]:
    """Merge cue text into whole sentences.

    Cues often break mid-sentence for display timing, so text lines are
    scanned in order and cut after terminal punctuation. Every fragment is
    recorded as a ``ChunkRef`` so the translated sentence can later be
    spread back over the same cue lines. Text left over at the end without
    terminal punctuation still becomes a final sentence.
    """

    sentences: List[SentenceSpan] = []
    fragments: List[str] = []
    chunks: List[ChunkRef] = []

    def flush() -> None:
        nonlocal fragments, chunks
        if chunks:
            sentences.append(SentenceSpan(text=" ".join(fragments), chunks=chunks))
        fragments, chunks = [], []

    for cue_index, cue in enumerate(cues):
        for line_index, raw_line in enumerate(cue.text_lines):
            line = raw_line.strip()
            position = 0
            for match in SENTENCE_END_RE.finditer(line):
                _add_fragment(line, position, match.end(), cue_index, line_index, fragments, chunks)
                flush()
                position = match.end()
            _add_fragment(line, position, len(line), cue_index, line_index, fragments, chunks)
    flush()

    logger.debug("Reconstructed %s sentences", len(sentences))
    return sentences


def _add_fragment(
    line: str,
    start: int,
    end: int,
    cue_index: int,
    line_index: int,
    fragments: List[str],
    chunks: List[ChunkRef],
) -> None:
    piece = line[start:end]
    text = piece.strip()
    if not text:
        return
    offset = start + (len(piece) - len(piece.lstrip()))
    fragments.append(text)
    chunks.append(ChunkRef(cue_index=cue_index, line_index=line_index, start=offset, length=len(text)))
