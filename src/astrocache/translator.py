"""Translation pipeline: cache lookup, provider call, cache store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from astrocache.errors import TranslationError
from astrocache.keys import translation_key
from astrocache.protocols import TranslationProvider
from astrocache.translation import TranslationCache

if TYPE_CHECKING:
    from astrocache.config import Settings

logger = logging.getLogger(__name__)

SOURCE_LANG = "en"
DEFAULT_TIMEOUT = 10.0
GOOGLE_URL = "https://translation.googleapis.com/language/translate/v2"
DEEPL_FREE_URL = "https://api-free.deepl.com/v2/translate"
DEEPL_PRO_URL = "https://api.deepl.com/v2/translate"
DEEPL_FREE_KEY_PREFIX = "DeepL-Auth-Key "
RECORD_FIELDS = ("title", "explanation", "copyright")

_LOG_TEXT_LIMIT = 50
_MOCK_TEXT_LIMIT = 100


def _truncate(text: str) -> str:
    if len(text) > _LOG_TEXT_LIMIT:
        return text[:_LOG_TEXT_LIMIT] + "..."
    return text


class MockTranslationProvider:
    """Offline provider that tags text with the target language."""

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        if len(text) > _MOCK_TEXT_LIMIT:
            return f"{text[:_MOCK_TEXT_LIMIT]}... [Translated to {target_lang}]"
        return f"{text} [{target_lang}]"

    def close(self) -> None:
        pass


class _HTTPProvider:
    """Shared plumbing for JSON translation APIs."""

    name = "provider"

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def _post(self, url: str, body: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._client.post(url, json=body, **kwargs)
        except httpx.HTTPError as exc:
            raise TranslationError(f"{self.name} request failed: {exc}") from exc
        if response.status_code != httpx.codes.OK:
            raise TranslationError(
                f"{self.name} returned status {response.status_code}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise TranslationError(f"{self.name} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise TranslationError(f"{self.name} returned an unexpected payload")
        return data

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()


class GoogleTranslateProvider(_HTTPProvider):
    """Google Cloud Translation (v2) provider."""

    name = "Google Translate"

    def __init__(
        self,
        api_key: str,
        *,
        url: str = GOOGLE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(
            httpx.Client(
                headers={"Content-Type": "application/json"},
                timeout=timeout,
            )
        )
        self._api_key = api_key
        self._url = url

    @staticmethod
    def language_code(lang: str) -> str:
        """Google wants the bare primary subtag: ``pt-BR`` becomes ``pt``."""
        return lang.split("-")[0].lower()

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        data = self._post(
            self._url,
            {
                "q": [text],
                "source": self.language_code(source_lang),
                "target": self.language_code(target_lang),
                "format": "text",
            },
            params={"key": self._api_key},
        )
        try:
            translations = data.get("data", {}).get("translations") or []
            if not translations:
                raise TranslationError("Google Translate returned no translation")
            return str(translations[0]["translatedText"])
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise TranslationError(
                f"Google Translate returned an unexpected payload: {exc!r}"
            ) from exc


class DeepLProvider(_HTTPProvider):
    """DeepL provider, free or pro endpoint depending on the key."""

    name = "DeepL"

    def __init__(
        self,
        api_key: str,
        *,
        url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(
            httpx.Client(
                headers={
                    "Authorization": api_key,
                    "Content-Type": "application/json",
                },
                timeout=timeout,
            )
        )
        if url is None:
            free = api_key.startswith(DEEPL_FREE_KEY_PREFIX)
            url = DEEPL_FREE_URL if free else DEEPL_PRO_URL
        self._url = url

    @staticmethod
    def language_code(lang: str) -> str:
        """DeepL wants upper case codes: ``pt-br`` becomes ``PT-BR``."""
        return "-".join(lang.split("-")[:2]).upper()

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        body: dict[str, Any] = {
            "text": [text],
            "target_lang": self.language_code(target_lang),
        }
        if source_lang:
            body["source_lang"] = self.language_code(source_lang)
        data = self._post(self._url, body)
        try:
            translations = data.get("translations") or []
            if not translations:
                raise TranslationError("DeepL returned no translation")
            return str(translations[0]["text"])
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise TranslationError(
                f"DeepL returned an unexpected payload: {exc!r}"
            ) from exc


def provider_from_settings(settings: Settings) -> TranslationProvider:
    """Pick Google, then DeepL, then the offline mock."""
    timeout = settings.provider_timeout_seconds
    if settings.google_translate_api_key:
        logger.info("Using Google Translate for translations")
        return GoogleTranslateProvider(settings.google_translate_api_key, timeout=timeout)
    if settings.deepl_api_key:
        logger.info("Using DeepL for translations")
        return DeepLProvider(settings.deepl_api_key, timeout=timeout)
    logger.info("No translation API configured, using mock translations")
    return MockTranslationProvider()


class Translator:
    """Translate text through a provider, caching every result."""

    def __init__(
        self,
        provider: TranslationProvider,
        cache: TranslationCache | None = None,
        *,
        source_lang: str = SOURCE_LANG,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._source_lang = source_lang

    @property
    def provider(self) -> TranslationProvider:
        return self._provider

    def translate(self, text: str, target_lang: str, source_lang: str | None = None) -> str:
        """Translate ``text`` into ``target_lang``.

        Text in the source language, an empty target, or blank text is
        returned unchanged.

        Raises:
            TranslationError: the provider failed.
        """
        source = source_lang or self._source_lang
        if not target_lang or target_lang == source or not text.strip():
            return text

        key = translation_key(text, source, target_lang)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        logger.info("Translating '%s' to '%s'", _truncate(text), target_lang)
        translated = self._provider.translate(text, source, target_lang)
        if self._cache is not None:
            self._cache.set(key, translated)
        return translated

    def try_translate(self, text: str, target_lang: str) -> str:
        """Translate ``text``, falling back to the original on failure."""
        try:
            return self.translate(text, target_lang)
        except TranslationError as exc:
            logger.warning("Translation failed, serving original text: %s", exc)
            return text

    def translate_record(
        self,
        record: dict[str, Any],
        lang: str,
        fields: tuple[str, ...] = RECORD_FIELDS,
    ) -> dict[str, Any]:
        """Translate the text ``fields`` of ``record`` in place."""
        if not lang or lang == self._source_lang:
            return record
        for field in fields:
            value = record.get(field)
            if isinstance(value, str) and value:
                record[field] = self.try_translate(value, lang)
        return record

    def close(self) -> None:
        """Release provider resources."""
        close = getattr(self._provider, "close", None)
        if close is not None:
            close()
