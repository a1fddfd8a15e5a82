from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from .types import Cue, TranslatedSentence

logger = logging.getLogger(__name__)


def split_proportionally(text: str, weights: Sequence[int]) -> List[str]:
    """Split ``text`` at word boundaries into ``len(weights)`` pieces.

    Each cut is placed at the word boundary closest to where the cumulative
    weight ratio falls in the text, so a sentence that originally spanned
    fragments of 5 and 6 characters is divided roughly 5:6. While enough
    words remain every piece receives at least one of them.
    """

    if not weights:
        raise ValueError("At least one weight is required")
    words = text.split()
    if len(weights) == 1:
        return [" ".join(words)]

    total_weight = sum(weights)
    if total_weight <= 0:
        weights = [1] * len(weights)
        total_weight = len(weights)

    word_ends: List[int] = []
    position = 0
    for word in words:
        position += len(word)
        word_ends.append(position)
        position += 1
    text_length = max(position - 1, 0)

    pieces: List[str] = []
    start = 0
    cumulative = 0
    for index, weight in enumerate(weights[:-1]):
        cumulative += weight
        target = text_length * cumulative / total_weight
        pieces_after = len(weights) - index - 1
        if len(words) - start > pieces_after:
            low, high = start + 1, len(words) - pieces_after
        else:
            low, high = start, min(start + 1, len(words))

        best = low
        best_distance = None
        for cut in range(low, high + 1):
            boundary = word_ends[cut - 1] if cut else 0
            distance = abs(boundary - target)
            if best_distance is None or distance < best_distance:
                best, best_distance = cut, distance
        pieces.append(" ".join(words[start:best]))
        start = best
    pieces.append(" ".join(words[start:]))
    return pieces


def resegment(cues: Sequence[Cue], translated: Sequence[TranslatedSentence]) -> List[Cue]:
    """Build output cues carrying the translated text on the original timings.

    Identifiers, timings and the number of text lines of every cue
    are kept; only the line contents change.
    """

    output = [replace(cue, text_lines=["" for _ in cue.text_lines]) for cue in cues]
    for sentence in translated:
        chunks = sentence.span.chunks
        if not chunks:
            continue
        pieces = split_proportionally(sentence.translated_text, sentence.span.weights)
        for chunk, piece in zip(chunks, pieces):
            if not piece:
                continue
            lines = output[chunk.cue_index].text_lines
            lines[chunk.line_index] = f"{lines[chunk.line_index]} {piece}" if lines[chunk.line_index] else piece

    empty = sum(1 for cue in output if cue.text_lines and not any(cue.text_lines))
    if empty:
        logger.warning("%s cues received no translated text", empty)
    return output
