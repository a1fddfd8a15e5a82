import logging
from pathlib import Path

import pytest

from vtt_translate import cli
from vtt_translate.errors import AuthError
from vtt_translate.types import Language

from .fakes import FakeTranslator


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)


def test_build_config_uses_flags() -> None:
    args = cli.parse_args(
        [
            "-f", "talk.vtt",
            "--source-language", "en-GB",
            "-l", "fa",
            "--azure-resource-key", "key",
            "--azure-resource-region", "westeurope",
            "--max-retries", "5",
            "--no-overwrite",
        ]
    )

    config = cli.build_config(args)

    assert config.source_language is Language.EN_GB
    assert config.target_language is Language.FA
    assert config.translation.api_key == "key"
    assert config.translation.region == "westeurope"
    assert config.translation.max_retries == 5
    assert config.overwrite is False


def test_defaults_target_persian_with_auto_detection() -> None:
    config = cli.build_config(cli.parse_args(["-f", "talk.vtt"]))

    assert config.source_language is None
    assert config.target_language is Language.FA
    assert config.translation.provider == "azure"
    assert config.overwrite is True


def test_openai_provider_reads_openai_key() -> None:
    config = cli.build_config(cli.parse_args(["-f", "talk.vtt", "--translation-provider", "openai"]))

    assert config.translation.api_key_env == "OPENAI_API_KEY"


def test_main_translates_file(monkeypatch, sample_vtt_file: Path) -> None:
    translator = FakeTranslator()
    monkeypatch.setattr("vtt_translate.pipeline.build_translator", lambda config: translator)

    exit_code = cli.main(["-f", str(sample_vtt_file), "--log-level", "debug"])

    assert exit_code == 0
    assert (sample_vtt_file.parent / "talk-fa.vtt").exists()


def test_main_reports_unsupported_language(sample_vtt_file: Path, caplog) -> None:
    with caplog.at_level(logging.ERROR):
        exit_code = cli.main(["-f", str(sample_vtt_file), "-l", "fr"])

    assert exit_code == 1
    assert "Unsupported language 'fr'" in caplog.text


def test_main_reports_missing_credentials(monkeypatch, sample_vtt_file: Path, caplog) -> None:
    monkeypatch.delenv("AZURE_TRANSLATION_RESOURCE_KEY", raising=False)
    monkeypatch.delenv("AZURE_TRANSLATION_RESOURCE_REGION", raising=False)

    with caplog.at_level(logging.ERROR):
        exit_code = cli.main(["-f", str(sample_vtt_file)])

    assert exit_code == 1
    assert "resource key not found" in caplog.text
    assert sorted(p.name for p in sample_vtt_file.parent.iterdir()) == ["talk-en.vtt"]


def test_main_reports_translation_failure(monkeypatch, sample_vtt_file: Path) -> None:
    translator = FakeTranslator(error=AuthError("invalid subscription key"))
    monkeypatch.setattr("vtt_translate.pipeline.build_translator", lambda config: translator)

    assert cli.main(["-f", str(sample_vtt_file)]) == 1
    assert not (sample_vtt_file.parent / "talk-fa.vtt").exists()
