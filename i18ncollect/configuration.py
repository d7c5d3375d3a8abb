"""Settings for the ``i18n-translate`` command.

Values are read from a ``.env`` file in the working directory and then
from the process environment, which wins on conflicts. Only the names
declared on :class:`I18nCollectConfig` are picked up. The collect
command needs no settings at all.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal, Mapping

from dotenv import dotenv_values
from prepper import Field, SchemaError, SchemaModel, ValidationError, model_validator
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .errors import TranslationProviderConfigurationError

ENV_FILE_NAME = ".env"

PROVIDER_SYNONYMS = {
    "azure_open_ai": "azure_openai",
    "azureopenai": "azure_openai",
    "deepl_free": "deepl",
    "deepl_pro": "deepl",
    "noop": "echo",
    "mock": "echo",
}

# Settings each provider cannot start without.
REQUIRED_SETTINGS: dict[str, tuple[str, ...]] = {
    "openai": ("OPENAI_API_KEY",),
    "azure_openai": (
        "AZURE_OPENAI_API_KEY",
        "AZURE_OPENAI_ENDPOINT",
        "AZURE_OPENAI_API_VERSION",
        "AZURE_OPENAI_DEPLOYMENT_NAME",
    ),
    "deepl": ("DEEPL_AUTH_KEY",),
    "echo": (),
}


def normalise_provider_name(value: str | None) -> str:
    """Map user supplied provider names onto the known identifiers."""

    name = (value or "openai").strip().lower().replace("-", "_")
    name = PROVIDER_SYNONYMS.get(name, name)
    return name if name in REQUIRED_SETTINGS else "openai"


class I18nCollectConfig(SchemaModel):
    """Translation provider selection and credentials."""

    TRANSLATION_PROVIDER: Literal["openai", "azure_openai", "deepl", "echo"] = Field(
        default="openai",
        description="Service used to translate catalog values.",
    )
    OPENAI_API_KEY: str | None = Field(default=None, secret=True)
    AZURE_OPENAI_API_KEY: str | None = Field(default=None, secret=True)
    AZURE_OPENAI_ENDPOINT: str | None = Field(default=None)
    AZURE_OPENAI_API_VERSION: str | None = Field(default=None)
    AZURE_OPENAI_DEPLOYMENT_NAME: str | None = Field(default=None)
    DEEPL_AUTH_KEY: str | None = Field(default=None, secret=True)
    DEEPL_PRO_API: bool = Field(default=False, description="Use the DeepL Pro host.")
    I18N_COLLECT_PROVIDER_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_provider(data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("TRANSLATION_PROVIDER"), str):
            data["TRANSLATION_PROVIDER"] = normalise_provider_name(data["TRANSLATION_PROVIDER"])
        return data


def missing_provider_settings(values: Mapping[str, Any]) -> list[str]:
    """Names the selected provider requires but ``values`` leaves unset."""

    provider = normalise_provider_name(values.get("TRANSLATION_PROVIDER"))
    return [name for name in REQUIRED_SETTINGS[provider] if not values.get(name)]


def read_settings_layers(
    app_dir: Path,
    environ: Mapping[str, str],
) -> tuple[dict[str, Any], ProvenanceRecorder]:
    """Collect the known setting names from ``.env`` and then ``environ``."""

    names = set(I18nCollectConfig.__field_infos__)
    env_file = app_dir / ENV_FILE_NAME
    layers = (
        (ENV_FILE_NAME, dotenv_values(env_file) if env_file.is_file() else {}),
        ("process", environ),
    )

    provenance = ProvenanceRecorder()
    values: dict[str, Any] = {}
    for label, layer in layers:
        picked = {key: value for key, value in layer.items() if key in names and value is not None}
        if picked:
            merge_layer(values, picked, provenance=provenance, source=f"env:{label}", layer="env")
    return values, provenance


def get_settings(
    app_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> I18nCollectConfig:
    """Load and validate the translation settings.

    Raises :class:`TranslationProviderConfigurationError` when the selected
    provider lacks its credentials or a value has the wrong type.
    """

    values, provenance = read_settings_layers(
        app_dir or Path.cwd(),
        os.environ if environ is None else environ,
    )
    missing = missing_provider_settings(values)
    if missing:
        provider = normalise_provider_name(values.get("TRANSLATION_PROVIDER"))
        raise TranslationProviderConfigurationError(
            f"Provider '{provider}' needs {', '.join(missing)}. "
            f"Set them in {ENV_FILE_NAME} or the environment, or pick another provider."
        )
    try:
        return I18nCollectConfig.validate(values, provenance=provenance)
    except (SchemaError, ValidationError) as exc:
        raise TranslationProviderConfigurationError(f"Invalid translation settings: {exc}") from exc
