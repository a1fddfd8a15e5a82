import os
from dataclasses import dataclass, field
from typing import Optional

from .types import Language


@dataclass
class TranslationConfig:
    """Configuration for the translation service."""

    provider: str = "azure"
    endpoint: str = "https://api.cognitive.microsofttranslator.com"
    api_version: str = "3.0"
    api_key: Optional[str] = None
    region: Optional[str] = None
    api_key_env: Optional[str] = "AZURE_TRANSLATION_RESOURCE_KEY"
    region_env: Optional[str] = "AZURE_TRANSLATION_RESOURCE_REGION"
    model: str = "gpt-4o-mini"  # only used by the openai provider
    temperature: float = 0.3
    max_retries: int = 3
    retry_delay: float = 3.0
    timeout: float = 30.0
    # Azure accepts at most 1000 elements and 50k characters per request
    max_batch_size: int = 100
    max_batch_chars: int = 10000

    def resolve_api_key(self) -> Optional[str]:
        if self.api_key:
            return self.api_key
        return os.getenv(self.api_key_env) if self.api_key_env else None

    def resolve_region(self) -> Optional[str]:
        if self.region:
            return self.region
        return os.getenv(self.region_env) if self.region_env else None


@dataclass
class PipelineConfig:
    """Top level configuration for a VTT translation run."""

    translation: TranslationConfig = field(default_factory=TranslationConfig)
    source_language: Optional[Language] = None  # auto-detect when unset
    target_language: Language = Language.FA
    overwrite: bool = True
