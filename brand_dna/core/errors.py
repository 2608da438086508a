"""Exception hierarchy for the brand DNA service."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from brand_dna.models.brand import ValidationResult


class BrandDNAError(Exception):
    """Base class for every error raised by this package."""


class BrandNotLoadedError(BrandDNAError):
    """Raised when an operation needs a current configuration and there is none."""


class BrandValidationError(BrandDNAError):
    """A configuration failed structural validation."""

    def __init__(self, result: "ValidationResult"):
        self.result = result
        super().__init__(result.summary())


class FontNotFoundError(BrandDNAError):
    pass


class FontLoadError(BrandDNAError):
    def __init__(self, font_name: str, reason: str):
        self.font_name = font_name
        self.reason = reason
        super().__init__(f'Failed to load font "{font_name}": {reason}')


class StorageError(BrandDNAError):
    """Wraps I/O failures from a persistence backend."""
