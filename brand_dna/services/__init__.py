from brand_dna.services.store import BrandStore
from brand_dna.services.theme import PreviewScope, StyleContract, ThemeRenderer, render_style_contract
from brand_dna.services.validator import check_contrast, validate_brand_dna, validate_imported_json

__all__ = [
    "BrandStore",
    "PreviewScope",
    "StyleContract",
    "ThemeRenderer",
    "render_style_contract",
    "check_contrast",
    "validate_brand_dna",
    "validate_imported_json",
]
