"""Shared fixtures for the vtt_translate test suite."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from vtt_translate.errors import TranslationError  # noqa: E402

from .fakes import FakeTranslator  # noqa: E402

SAMPLE_VTT = """WEBVTT
Kind: captions

NOTE This file was exported from a meeting recording

f9e6254d-71b5-400f-bdcc-802831ce24f4-0
00:00:01.000 --> 00:00:02.000
Hello

f9e6254d-71b5-400f-bdcc-802831ce24f4-1
00:00:02.000 --> 00:00:04.000 align:start
world. How are

00:00:04.500 --> 00:00:06.000
you today?
I am fine
"""


@pytest.fixture
def sample_vtt_text() -> str:
    return SAMPLE_VTT


@pytest.fixture
def sample_vtt_file(tmp_path: Path) -> Path:
    path = tmp_path / "talk-en.vtt"
    path.write_text(SAMPLE_VTT, encoding="utf-8")
    return path


@pytest.fixture
def fake_translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def failing_translator() -> FakeTranslator:
    return FakeTranslator(error=TranslationError("boom"))
