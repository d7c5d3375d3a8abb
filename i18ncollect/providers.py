"""Translation provider abstractions."""

from __future__ import annotations

import html
import json
import re
import sys
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from .configuration import normalise_provider_name
from .errors import (
    TranslationProviderConfigurationError,
    TranslationProviderError,
)

PLACEHOLDER_PATTERN = re.compile(r"\{\{[^{}]*\}\}")


class TranslationProvider(ABC):
    """Abstract adapter for translation providers."""

    name = "abstract"

    @abstractmethod
    def translate(
        self,
        texts: Sequence[str],
        *,
        source_language: str | None,
        target_language: str,
        model: str | None = None,
    ) -> List[str]:
        """Translate ``texts`` and return the results in the same order."""

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not getattr(self, "debug", False):
            return
        if isinstance(payload, (dict, list)):
            message = json.dumps(payload, ensure_ascii=False, indent=2, default=str)
        else:
            message = str(payload)
        print(f"[i18n-collect][provider-debug] {label}:\n{message}", file=sys.stderr)


class EchoTranslationProvider(TranslationProvider):
    """A provider that returns the original text (useful for testing)."""

    name = "echo"

    def translate(
        self,
        texts: Sequence[str],
        *,
        source_language: str | None,
        target_language: str,
        model: str | None = None,
    ) -> List[str]:
        return list(texts)


class OpenAITranslationProvider(TranslationProvider):
    """Translation provider that uses OpenAI (or Azure OpenAI) models."""

    name = "openai"
    DEFAULT_MODEL = "gpt-5-mini"

    SYSTEM_PROMPT = (
        "You are a professional translator working on user interface strings. "
        "Return only JSON. Translate the provided texts into the requested language. "
        "Placeholders written as {{name}} must be kept exactly as they are, "
        "untranslated and in a sensible position. "
        "Respond strictly with an object shaped as "
        '{"translations": [{"id": "...", "translated": "..."}]}. '
        "Do not add commentary. Do not wrap the JSON in markdown code fences."
    )

    def __init__(self, settings: Any = None, *, azure: bool = False, debug: bool = False) -> None:
        self.settings = settings
        self.debug = debug
        self.azure = azure
        self._client, self._default_model = self._build_client()

    def _setting(self, name: str) -> Any:
        return getattr(self.settings, name, None)

    def _build_client(self) -> tuple[Any, str]:
        try:
            from openai import AzureOpenAI, OpenAI  # type: ignore
        except ImportError as exc:  # pragma: no cover - import guard
            raise TranslationProviderConfigurationError(
                "OpenAI Python SDK not installed. Install with `pip install openai`."
            ) from exc

        if not self.azure:
            api_key = self._setting("OPENAI_API_KEY")
            if not api_key:
                raise TranslationProviderConfigurationError(
                    "OpenAI configuration missing. Set OPENAI_API_KEY or choose a "
                    "different provider."
                )
            return OpenAI(api_key=api_key), self.DEFAULT_MODEL

        required = {
            name: self._setting(name)
            for name in (
                "AZURE_OPENAI_API_KEY",
                "AZURE_OPENAI_ENDPOINT",
                "AZURE_OPENAI_API_VERSION",
                "AZURE_OPENAI_DEPLOYMENT_NAME",
            )
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise TranslationProviderConfigurationError(
                "Azure OpenAI configuration incomplete. Please set: "
                + ", ".join(missing)
                + "."
            )
        client = AzureOpenAI(
            api_key=required["AZURE_OPENAI_API_KEY"],
            api_version=required["AZURE_OPENAI_API_VERSION"],
            azure_endpoint=required["AZURE_OPENAI_ENDPOINT"],
        )
        return client, required["AZURE_OPENAI_DEPLOYMENT_NAME"]

    def translate(
        self,
        texts: Sequence[str],
        *,
        source_language: str | None,
        target_language: str,
        model: str | None = None,
    ) -> List[str]:
        if not texts:
            return []

        user_prompt = {
            "target_language": target_language,
            "source_language": source_language,
            "texts": [{"id": str(index), "text": text} for index, text in enumerate(texts)],
        }
        self._log_debug("provider.request.payload", user_prompt)

        items = self._invoke_model(user_payload=user_prompt, model=model or self._default_model)
        self._log_debug("provider.response.items", items)
        return self._order_translations(items, len(texts))

    def _invoke_model(self, *, user_payload: dict, model: str) -> list[dict[str, Any]]:
        """Call the Responses API and return the parsed translation list."""

        try:
            response = self._client.responses.create(
                model=model,
                input=[
                    {
                        "role": "system",
                        "content": [{"type": "input_text", "text": self.SYSTEM_PROMPT}],
                    },
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "input_text",
                                "text": json.dumps(user_payload, ensure_ascii=False),
                            }
                        ],
                    },
                ],
            )
        except Exception as exc:  # pragma: no cover - network call
            raise TranslationProviderError(
                f"Translation service temporarily unavailable: {exc}"
            ) from exc

        output_text = getattr(response, "output_text", None)
        if not output_text:
            raise TranslationProviderError(
                "Translation provider response empty or unrecognised."
            )
        self._log_debug("provider.response.raw", output_text)
        return self._normalise_translations(output_text)

    @staticmethod
    def _strip_code_fence(text: str) -> str:
        """Remove leading/trailing markdown code fences if present."""

        stripped = text.strip()
        if not stripped.startswith("```"):
            return stripped
        first_newline = stripped.find("\n")
        if first_newline == -1:
            return stripped
        body = stripped[first_newline + 1 :]
        closing_index = body.rfind("```")
        if closing_index != -1:
            body = body[:closing_index]
        return body.strip()

    def _normalise_translations(self, payload: Any) -> list[dict[str, Any]]:
        """Normalise raw payloads into a list of translation dictionaries."""

        if isinstance(payload, str):
            try:
                payload = json.loads(self._strip_code_fence(payload))
            except json.JSONDecodeError as exc:
                raise TranslationProviderError(
                    f"Translation provider returned invalid JSON: {exc}"
                ) from exc

        if isinstance(payload, dict):
            payload = payload.get("translations")
        if isinstance(payload, list):
            return payload

        raise TranslationProviderError(
            "Translation provider response malformed: could not find translations list."
        )

    @staticmethod
    def _order_translations(items: Sequence[Any], expected: int) -> List[str]:
        mapping: Dict[str, str] = {}
        for item in items:
            if not isinstance(item, dict):
                raise TranslationProviderError(
                    "Translation provider response malformed: expected objects."
                )
            text_id = item.get("id")
            translated = item.get("translated")
            if not isinstance(text_id, str) or not isinstance(translated, str):
                raise TranslationProviderError(
                    "Translation provider response malformed: missing fields."
                )
            mapping[text_id] = translated

        missing = [str(index) for index in range(expected) if str(index) not in mapping]
        if missing:
            raise TranslationProviderError(
                "Translation provider response is missing texts: " + ", ".join(missing)
            )
        return [mapping[str(index)] for index in range(expected)]


class DeepLTranslationProvider(TranslationProvider):
    """Translation via the DeepL REST API (free or pro)."""

    name = "deepl"
    FREE_URL = "https://api-free.deepl.com/v2/translate"
    PRO_URL = "https://api.deepl.com/v2/translate"
    PLACEHOLDER_TAG = "x"
    TIMEOUT_SECONDS = 60

    TARGET_LANGUAGES = frozenset({
        "BG", "CS", "DA", "DE", "EL", "EN", "EN-GB", "EN-US", "ES", "ET", "FI",
        "FR", "HU", "ID", "IT", "JA", "KO", "LT", "LV", "NB", "NL", "PL", "PT",
        "PT-BR", "PT-PT", "RO", "RU", "SK", "SL", "SV", "TR", "UK", "ZH",
    })

    def __init__(self, auth_key: str | None, *, pro: bool = False, debug: bool = False) -> None:
        if not auth_key:
            raise TranslationProviderConfigurationError(
                "DeepL configuration missing. Set DEEPL_AUTH_KEY or choose a "
                "different provider."
            )
        self.auth_key = auth_key
        self.url = self.PRO_URL if pro else self.FREE_URL
        self.debug = debug

    def target_code(self, language: str) -> str:
        code = language.strip().upper()
        if code not in self.TARGET_LANGUAGES:
            raise TranslationProviderConfigurationError(
                f'"{language}" can not be accepted as DeepL target language. Valid '
                f"target languages are: {', '.join(sorted(self.TARGET_LANGUAGES))}."
            )
        return code

    def source_code(self, language: str | None) -> str | None:
        """Return the DeepL source code, or ``None`` to let DeepL auto-detect."""

        if not language:
            return None
        code = language.strip().upper().split("-")[0]
        if code not in self.TARGET_LANGUAGES:
            print(f"Unknown source language '{language}'. Falling back to auto detection.")
            return None
        return code

    def protect_placeholders(self, text: str) -> str:
        """Escape the text for XML handling and wrap ``{{name}}`` in ignored tags."""

        escaped = html.escape(text, quote=False)
        tag = self.PLACEHOLDER_TAG
        return PLACEHOLDER_PATTERN.sub(lambda match: f"<{tag}>{match.group(0)}</{tag}>", escaped)

    def restore_placeholders(self, text: str) -> str:
        tag = self.PLACEHOLDER_TAG
        return html.unescape(text.replace(f"<{tag}>", "").replace(f"</{tag}>", ""))

    def translate(
        self,
        texts: Sequence[str],
        *,
        source_language: str | None,
        target_language: str,
        model: str | None = None,
    ) -> List[str]:
        if not texts:
            return []

        fields: List[tuple[str, str]] = [
            ("text", self.protect_placeholders(text)) for text in texts
        ]
        fields.append(("target_lang", self.target_code(target_language)))
        source = self.source_code(source_language)
        if source:
            fields.append(("source_lang", source))
        fields.extend([("tag_handling", "xml"), ("ignore_tags", self.PLACEHOLDER_TAG)])
        self._log_debug("provider.request.payload", [list(field) for field in fields])

        request = urllib.request.Request(
            self.url,
            data=urllib.parse.urlencode(fields).encode("utf-8"),
            headers={
                "Authorization": f"DeepL-Auth-Key {self.auth_key}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
        )
        try:
            with urllib.request.urlopen(request, timeout=self.TIMEOUT_SECONDS) as response:
                result = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            raise TranslationProviderError(
                f"DeepL rejected the request with status {exc.code}: {exc.reason}"
            ) from exc
        except urllib.error.URLError as exc:
            raise TranslationProviderError(
                f"Translation service temporarily unavailable: {exc.reason}"
            ) from exc
        except json.JSONDecodeError as exc:
            raise TranslationProviderError(
                f"Translation provider returned invalid JSON: {exc}"
            ) from exc
        self._log_debug("provider.response.raw", result)

        translations = result.get("translations") if isinstance(result, dict) else None
        if not isinstance(translations, list) or len(translations) != len(texts):
            raise TranslationProviderError(
                "Translation provider response malformed: unexpected number of translations."
            )
        return [self.restore_placeholders(str(item.get("text", ""))) for item in translations]


def build_provider(
    name: str | None,
    *,
    settings: Any = None,
    debug: bool = False,
) -> TranslationProvider:
    """Factory to create providers by name."""

    raw = (name or getattr(settings, "TRANSLATION_PROVIDER", None) or "openai").strip().lower()
    normalized = normalise_provider_name(raw)
    if normalized == "openai" and raw.replace("-", "_") not in {"openai", "gpt", "default"}:
        raise TranslationProviderConfigurationError(
            f"Unknown translation provider '{name}'."
        )
    if normalized == "echo":
        return EchoTranslationProvider()
    if normalized == "deepl":
        return DeepLTranslationProvider(
            getattr(settings, "DEEPL_AUTH_KEY", None),
            pro=bool(getattr(settings, "DEEPL_PRO_API", False)) or raw.endswith("pro"),
            debug=debug,
        )
    return OpenAITranslationProvider(
        settings,
        azure=normalized == "azure_openai",
        debug=debug,
    )
