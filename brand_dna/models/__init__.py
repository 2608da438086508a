from brand_dna.models.brand import (
    BrandAssets,
    BrandColors,
    BrandConfiguration,
    BrandMetadata,
    BrandSpacing,
    BrandStrategy,
    BrandTypography,
    BrandValue,
    ContrastResult,
    FontFamily,
    Logo,
    ToneOfVoice,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "BrandAssets",
    "BrandColors",
    "BrandConfiguration",
    "BrandMetadata",
    "BrandSpacing",
    "BrandStrategy",
    "BrandTypography",
    "BrandValue",
    "ContrastResult",
    "FontFamily",
    "Logo",
    "ToneOfVoice",
    "ValidationIssue",
    "ValidationResult",
]
