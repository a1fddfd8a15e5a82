from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, TypeVar

import openai
import requests
from openai import OpenAI

from .config import TranslationConfig
from .errors import (
    AuthError,
    NetworkError,
    RateLimitError,
    TranslationError,
    UnsupportedLanguageError,
)
from .types import Direction, Language, TranslationResult

logger = logging.getLogger(__name__)

TRANSLATE_PATH = "/translate"
LANGUAGES_PATH = "/languages"

# Azure error codes for an unknown "from" / "to" language
_INVALID_LANGUAGE_CODES = {400035, 400036}

DEFAULT_PROMPT = (
    "Translate the following subtitle sentence {source}into {target}. "
    "Keep the meaning and tone. Reply with the translation only, without notes or numbering."
)

T = TypeVar("T")


class BaseTranslator:
    def translate(
        self,
        sentences: Sequence[str],
        source_language: Optional[Language],
        target_language: Language,
    ) -> TranslationResult:
        raise NotImplementedError

    def _with_retries(self, action: Callable[[], T]) -> T:
        attempts = max(1, self.config.max_retries)
        for attempt in range(1, attempts + 1):
            try:
                return action()
            except (NetworkError, RateLimitError) as exc:
                logger.warning("Translation attempt %s failed: %s", attempt, exc)
                if attempt >= attempts:
                    raise
                time.sleep(self.config.retry_delay)
        raise RuntimeError("Unreachable translation retry loop")


class AzureTranslator(BaseTranslator):
    """Translate sentences with the Azure Translator REST API."""

    def __init__(self, config: TranslationConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.api_key = config.resolve_api_key()
        self.region = config.resolve_region()
        if not self.api_key:
            raise AuthError(
                f"Azure translation resource key not found. Pass it explicitly or set '{config.api_key_env}'."
            )
        if not self.region:
            raise AuthError(
                f"Azure translation resource region not found. Pass it explicitly or set '{config.region_env}'."
            )
        self.base_url = config.endpoint.rstrip("/")
        self.session = session or requests.Session()

    def translate(
        self,
        sentences: Sequence[str],
        source_language: Optional[Language],
        target_language: Language,
    ) -> TranslationResult:
        translated: List[str] = []
        detected: Optional[str] = None
        best_score = -1.0
        if source_language is not None:
            detected, best_score = source_language.value, 1.0

        batches = list(_batches(sentences, self.config.max_batch_size, self.config.max_batch_chars))
        for number, batch in enumerate(batches, start=1):
            logger.info("Translating batch %s/%s (%s sentences)...", number, len(batches), len(batch))
            items = self._with_retries(
                lambda: self._translate_batch(batch, source_language, target_language)
            )
            for source, item in zip(batch, items):
                if not isinstance(item, dict):
                    raise TranslationError(f"Unexpected translation item {item!r}")
                detection = item.get("detectedLanguage")
                if detection:
                    language, score = _detection(detection)
                    if score > best_score:
                        detected, best_score = language, score
                translated.append(_finish_sentence(source, _translation_text(item)))

        direction = self._with_retries(lambda: self._target_direction(target_language))
        return TranslationResult(sentences=translated, direction=direction, detected_language=detected)

    def _translate_batch(
        self,
        batch: Sequence[str],
        source_language: Optional[Language],
        target_language: Language,
    ) -> List[dict]:
        params = {"api-version": self.config.api_version, "to": target_language.value}
        if source_language is not None:
            params["from"] = source_language.value
        headers = {
            "Ocp-Apim-Subscription-Key": self.api_key,
            "Ocp-Apim-Subscription-Region": self.region,
            "X-ClientTraceId": str(uuid.uuid4()),
            "Content-Type": "application/json",
        }
        payload = [{"Text": sentence} for sentence in batch]
        try:
            response = self.session.post(
                f"{self.base_url}{TRANSLATE_PATH}",
                params=params,
                headers=headers,
                json=payload,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise NetworkError(f"Error calling the Azure translation API: {exc}") from exc
        _raise_for_status(response, TRANSLATE_PATH)

        data = _json_body(response)
        if not isinstance(data, list) or len(data) != len(batch):
            raise TranslationError(
                f"Azure translation API returned {len(data) if isinstance(data, list) else 'no'} "
                f"translations for {len(batch)} sentences"
            )
        return data

    def _target_direction(self, target_language: Language) -> Direction:
        try:
            response = self.session.get(
                f"{self.base_url}{LANGUAGES_PATH}",
                params={"api-version": self.config.api_version, "scope": "translation"},
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise NetworkError(f"Error calling the Azure translation API {LANGUAGES_PATH} endpoint: {exc}") from exc
        _raise_for_status(response, LANGUAGES_PATH)

        body = _json_body(response)
        languages = body.get("translation") if isinstance(body, dict) else None
        if not isinstance(languages, dict):
            raise TranslationError(f"Azure translation API {LANGUAGES_PATH} returned an unexpected body")
        entry = languages.get(target_language.value)
        if entry is None:
            raise UnsupportedLanguageError(
                f"Target language '{target_language}' not returned by the {LANGUAGES_PATH} endpoint"
            )
        if not isinstance(entry, dict):
            raise TranslationError(f"Unexpected {LANGUAGES_PATH} entry for '{target_language}': {entry!r}")
        try:
            return Direction(entry.get("dir", "ltr"))
        except (TypeError, ValueError) as exc:
            raise TranslationError(f"Unknown text direction {entry.get('dir')!r}") from exc


class OpenAITranslator(BaseTranslator):
    """Translate sentences one by one through an OpenAI-compatible Responses API."""

    def __init__(self, config: TranslationConfig, client=None):
        self.config = config
        if client is None:
            kwargs = {}
            api_key = config.resolve_api_key()
            if api_key:
                kwargs["api_key"] = api_key
            client = OpenAI(**kwargs)
        self.client = client

    def translate(
        self,
        sentences: Sequence[str],
        source_language: Optional[Language],
        target_language: Language,
    ) -> TranslationResult:
        translated: List[str] = []
        for index, sentence in enumerate(sentences, start=1):
            logger.debug("Translating sentence %s/%s", index, len(sentences))
            content = self._with_retries(
                lambda: self._translate_text(sentence, source_language, target_language)
            )
            translated.append(_finish_sentence(sentence, content))
        detected = source_language.value if source_language is not None else None
        return TranslationResult(sentences=translated, direction=target_language.direction, detected_language=detected)

    def _translate_text(self, text: str, source_language: Optional[Language], target_language: Language) -> str:
        source = f"from {source_language.display_name} " if source_language is not None else ""
        prompt = DEFAULT_PROMPT.format(source=source, target=target_language.display_name)
        try:
            response = self.client.responses.create(
                model=self.config.model,
                input=[
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": text.strip()},
                ],
                temperature=self.config.temperature,
            )
        except openai.AuthenticationError as exc:
            raise AuthError(str(exc)) from exc
        except openai.PermissionDeniedError as exc:
            raise AuthError(str(exc)) from exc
        except openai.RateLimitError as exc:
            raise RateLimitError(str(exc)) from exc
        except openai.APIConnectionError as exc:
            raise NetworkError(str(exc)) from exc
        except openai.APIError as exc:
            raise TranslationError(str(exc)) from exc
        content = response.output_text.strip()
        logger.debug("Translation result: %s -> %s", text, content)
        return content


def build_translator(config: TranslationConfig, **kwargs) -> BaseTranslator:
    provider = (config.provider or "azure").lower()
    if provider == "azure":
        return AzureTranslator(config=config, session=kwargs.get("session"))
    if provider == "openai":
        return OpenAITranslator(config=config, client=kwargs.get("client"))
    raise ValueError(f"Unsupported translation provider: {config.provider}")


def _batches(sentences: Sequence[str], max_size: int, max_chars: int) -> Iterator[List[str]]:
    batch: List[str] = []
    chars = 0
    for sentence in sentences:
        if batch and (len(batch) >= max_size or chars + len(sentence) > max_chars):
            yield batch
            batch, chars = [], 0
        batch.append(sentence)
        chars += len(sentence)
    if batch:
        yield batch


def _raise_for_status(response: requests.Response, path: str) -> None:
    status = response.status_code
    if status == 200:
        return
    code, message = _error_details(response)
    detail = f"Azure translation API {path} returned HTTP {status}: {message}"
    if status in (401, 403):
        raise AuthError(detail)
    if status == 429:
        raise RateLimitError(detail)
    if status == 400 and code in _INVALID_LANGUAGE_CODES:
        raise UnsupportedLanguageError(detail)
    if status >= 500:
        raise NetworkError(detail)
    raise TranslationError(detail)


def _error_details(response: requests.Response):
    try:
        error = response.json().get("error", {})
        return error.get("code"), error.get("message", response.text)
    except (ValueError, AttributeError):
        return None, response.text


def _json_body(response: requests.Response):
    try:
        return response.json()
    except ValueError as exc:
        raise TranslationError(f"Azure translation API returned invalid JSON: {exc}") from exc


def _translation_text(item: dict) -> str:
    translations = item.get("translations") or []
    if not isinstance(translations, list) or len(translations) != 1:
        raise TranslationError(f"Expected one translation per sentence, got {translations!r}")
    text = translations[0].get("text") if isinstance(translations[0], dict) else None
    if not isinstance(text, str):
        raise TranslationError(f"Translation without text: {translations[0]!r}")
    return text


def _detection(detection) -> Tuple[Optional[str], float]:
    try:
        return detection.get("language"), float(detection.get("score"))
    except (AttributeError, TypeError, ValueError) as exc:
        raise TranslationError(f"Unexpected detected language {detection!r}") from exc


def _finish_sentence(source: str, translated: str) -> str:
    # The service does not always keep the final full stop
    translated = translated.strip()
    if _ends_sentence(source.strip()) and not _ends_sentence(translated):
        translated += "."
    return translated


def _ends_sentence(text: str) -> bool:
    return bool(text) and text.rstrip("\"'”’»)]")[-1:] in {".", "?", "!", "…", "؟", "。", "？", "！"}
