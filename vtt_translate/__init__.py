"""Translate WebVTT subtitles sentence by sentence while keeping the original cue timings."""

from .config import PipelineConfig, TranslationConfig
from .pipeline import VttTranslationAgent

__all__ = ["VttTranslationAgent", "PipelineConfig", "TranslationConfig"]
