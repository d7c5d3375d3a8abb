"""Error definitions for the i18n key collector."""

from __future__ import annotations


class I18nCollectError(Exception):
    """Base exception for all custom errors."""


class InputValidationError(I18nCollectError):
    """Raised when arguments are rejected before any scanning happens."""


class CatalogReadError(I18nCollectError):
    """Raised when an existing catalog cannot be read for an update."""


class CatalogFormatError(I18nCollectError):
    """Raised when a catalog holds values that are neither strings nor mappings."""


class TranslationProviderConfigurationError(I18nCollectError):
    """Raised when the translation provider is misconfigured."""


class TranslationProviderError(I18nCollectError):
    """Raised when the translation provider fails permanently."""
