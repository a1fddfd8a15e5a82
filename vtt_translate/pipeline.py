from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from .config import PipelineConfig
from .errors import TranslationError, WriteError
from .resegment import resegment
from .sentences import reconstruct_sentences
from .translation import BaseTranslator, build_translator
from .types import Language, TranslatedSentence, TranslationArtifacts
from .vtt import read_vtt, write_vtt

logger = logging.getLogger(__name__)


class VttTranslationAgent:
    """High-level orchestrator for the parse, translate and resegment pipeline."""

    def __init__(self, config: Optional[PipelineConfig] = None, translator: Optional[BaseTranslator] = None):
        self.config = config or PipelineConfig()
        self.translator = translator or build_translator(self.config.translation)

    def run(self, source_path: Path, target_path: Optional[Path] = None) -> TranslationArtifacts:
        source_path = Path(source_path)
        target_language = self.config.target_language
        logger.info("Starting translation of %s into %s", source_path, target_language)
        if target_path:
            _check_not_source(source_path, Path(target_path))

        logger.info("Step 1/4: Parsing VTT file %s...", source_path)
        cues = read_vtt(source_path)

        logger.info("Step 2/4: Reconstructing sentences from %s cues...", len(cues))
        spans = reconstruct_sentences(cues)

        logger.info("Step 3/4: Translating %s sentences...", len(spans))
        result = self.translator.translate(
            [span.text for span in spans],
            self.config.source_language,
            target_language,
        )
        if len(result.sentences) != len(spans):
            raise TranslationError(
                f"Translator returned {len(result.sentences)} sentences for {len(spans)} source sentences"
            )
        logger.info("Identified source language as %s", result.detected_language or "unknown")
        logger.info("Text direction for target language %s is %s", target_language, result.direction.value)

        logger.info("Step 4/4: Resegmenting translated text into cues...")
        translated = [
            TranslatedSentence(span=span, translated_text=text)
            for span, text in zip(spans, result.sentences)
        ]
        output_cues = resegment(cues, translated)

        target_path = Path(target_path) if target_path else default_target_filename(
            source_path, result.detected_language, target_language
        )
        _check_not_source(source_path, target_path)
        logger.info("Writing translated VTT file to %s...", target_path)
        write_vtt(output_cues, target_path, direction=result.direction, overwrite=self.config.overwrite)

        artifacts = TranslationArtifacts(
            target_path=target_path,
            source_language=result.detected_language,
            direction=result.direction,
            cue_count=len(output_cues),
            sentence_count=len(spans),
        )
        logger.info("Translation run completed. Artifacts: %s", artifacts)
        return artifacts


def default_target_filename(source_path: Path, source_language: Optional[str], target_language: Language) -> Path:
    """Derive the translated file name from the source file name.

    A trailing source language tag is replaced by the target language
    (``talk-en-GB.vtt`` -> ``talk-fa.vtt``); otherwise the target language is
    appended (``talk.vtt`` -> ``talk.fa.vtt``).
    """

    source_path = Path(source_path)
    extension = source_path.suffix or ".vtt"
    stem = source_path.stem if source_path.suffix else source_path.name

    prefix, separator = stem, "."
    if source_language:
        primary = re.escape(source_language.split("-")[0])
        match = re.match(rf"^(?P<prefix>.+?)(?P<sep>[-.])(?i:{primary})(?:-[A-Za-z]{{2}})?$", stem)
        if match:
            prefix, separator = match.group("prefix"), match.group("sep")

    return source_path.parent / f"{prefix}{separator}{target_language}{extension}"


def _check_not_source(source_path: Path, target_path: Path) -> None:
    if target_path.resolve() == source_path.resolve():
        raise WriteError(f"Refusing to overwrite the source file {source_path}; pass a different target file")
