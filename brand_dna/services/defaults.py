"""Default brand configuration and the built-in brand templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from brand_dna.models.brand import BrandConfiguration
from brand_dna.services.fonts import catalog_font_to_family, get_font_by_name
from brand_dna.services.merge import deep_merge, utc_now

DEFAULT_BRAND_NAME = "Quickfy"

_LIGHT = {
    "background": "0 0% 100%",
    "foreground": "222.2 84% 4.9%",
    "card": "0 0% 100%",
    "card-foreground": "222.2 84% 4.9%",
    "popover": "0 0% 100%",
    "popover-foreground": "222.2 84% 4.9%",
    "primary": "221.2 83.2% 53.3%",
    "primary-foreground": "210 40% 98%",
    "secondary": "210 40% 96.1%",
    "secondary-foreground": "222.2 47.4% 11.2%",
    "muted": "210 40% 96.1%",
    "muted-foreground": "215.4 16.3% 46.9%",
    "accent": "210 40% 96.1%",
    "accent-foreground": "222.2 47.4% 11.2%",
    "destructive": "0 84.2% 60.2%",
    "destructive-foreground": "210 40% 98%",
    "border": "214.3 31.8% 91.4%",
    "input": "214.3 31.8% 91.4%",
    "ring": "221.2 83.2% 53.3%",
}

_DARK = {
    "background": "222.2 84% 4.9%",
    "foreground": "210 40% 98%",
    "card": "222.2 84% 4.9%",
    "card-foreground": "210 40% 98%",
    "popover": "222.2 84% 4.9%",
    "popover-foreground": "210 40% 98%",
    "primary": "217.2 91.2% 59.8%",
    "primary-foreground": "222.2 47.4% 11.2%",
    "secondary": "217.2 32.6% 17.5%",
    "secondary-foreground": "210 40% 98%",
    "muted": "217.2 32.6% 17.5%",
    "muted-foreground": "215 20.2% 65.1%",
    "accent": "217.2 32.6% 17.5%",
    "accent-foreground": "210 40% 98%",
    "destructive": "0 62.8% 30.6%",
    "destructive-foreground": "210 40% 98%",
    "border": "217.2 32.6% 17.5%",
    "input": "217.2 32.6% 17.5%",
    "ring": "217.2 91.2% 59.8%",
}

_CHART = ["12 76% 61%", "173 58% 39%", "197 37% 24%", "43 74% 66%", "27 87% 67%"]

_SCALE = {
    "xs": "0.75rem",
    "sm": "0.875rem",
    "base": "1rem",
    "lg": "1.125rem",
    "xl": "1.25rem",
    "2xl": "1.5rem",
    "3xl": "1.875rem",
    "4xl": "2.25rem",
    "5xl": "3rem",
    "6xl": "3.75rem",
    "7xl": "4.5rem",
    "8xl": "6rem",
    "9xl": "8rem",
}

_RADIUS = {
    "sm": "0.125rem",
    "md": "0.375rem",
    "lg": "0.5rem",
    "xl": "0.75rem",
    "2xl": "1rem",
    "full": "9999px",
}

_SPACING = {
    "xs": "0.5rem",
    "sm": "0.75rem",
    "md": "1rem",
    "lg": "1.5rem",
    "xl": "2rem",
    "2xl": "3rem",
    "3xl": "4rem",
    "4xl": "6rem",
}


def _catalog_family(name: str, weights: List[int]) -> Dict[str, Any]:
    font = get_font_by_name(name)
    return catalog_font_to_family(font, weights).model_dump(mode="json", by_alias=True)


def default_brand_data(now: Optional[str] = None) -> Dict[str, Any]:
    """Wire-form default configuration. Only the timestamps vary between calls."""
    now = now or utc_now()
    return {
        "metadata": {
            "name": DEFAULT_BRAND_NAME,
            "tagline": "Marketing automation platform",
            "description": "Default Quickfy brand identity with modern, professional styling",
            "industry": "SaaS / Marketing Technology",
            "createdAt": now,
            "updatedAt": now,
            "version": "1.0.0",
        },
        "colors": {
            "light": dict(_LIGHT),
            "dark": dict(_DARK),
            "chart": list(_CHART),
        },
        "typography": {
            "fontHeading": _catalog_family("Inter", [400, 500, 600, 700, 800, 900]),
            "fontBody": _catalog_family("Lora", [400, 500, 600]),
            "fontMono": _catalog_family("Fira Code", [400, 500, 600]),
            "scale": dict(_SCALE),
            "lineHeight": {"tight": 1.25, "normal": 1.5, "relaxed": 1.75},
            "letterSpacing": {"tight": "-0.05em", "normal": "0", "wide": "0.05em"},
        },
        "spacing": {
            "radius": dict(_RADIUS),
            "spacing": dict(_SPACING),
        },
        "strategy": {
            "values": [],
            "toneOfVoice": {"traits": []},
        },
        "assets": {"additionalAssets": []},
    }


def get_default_brand(now: Optional[str] = None) -> BrandConfiguration:
    return BrandConfiguration.model_validate(default_brand_data(now))


def merge_brand_defaults(partial: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill a partial wire-form configuration with default values."""
    return deep_merge(default_brand_data(), partial)


def is_default_brand(config: BrandConfiguration) -> bool:
    defaults = get_default_brand()
    return (
        config.colors.light.get("primary") == defaults.colors.light["primary"]
        and config.typography.font_body.name == defaults.typography.font_body.name
    )


# ── Templates ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BrandTemplate:
    id: str
    name: str
    description: str
    category: str
    patch: Mapping[str, Any] = field(default_factory=dict)

    def build(self, now: Optional[str] = None) -> BrandConfiguration:
        return BrandConfiguration.model_validate(deep_merge(default_brand_data(now), self.patch))


_TEMPLATES = (
    BrandTemplate("default", "Default", "The Quickfy default identity", "default"),
    BrandTemplate(
        "minimal",
        "Minimal",
        "Clean and understated design with neutral colors",
        "minimal",
        {
            "metadata": {"name": "Minimal Brand", "tagline": "Less is more"},
            "colors": {
                "light": {
                    "primary": "0 0% 9%",
                    "secondary": "0 0% 96%",
                    "accent": "0 0% 45%",
                    "destructive": "0 0% 20%",
                    "muted": "0 0% 96%",
                    "foreground": "0 0% 9%",
                    "border": "0 0% 90%",
                    "input": "0 0% 90%",
                    "ring": "0 0% 9%",
                },
                "dark": {
                    "primary": "0 0% 98%",
                    "secondary": "0 0% 14%",
                    "accent": "0 0% 24%",
                    "destructive": "0 0% 40%",
                    "muted": "0 0% 14%",
                    "background": "0 0% 9%",
                    "foreground": "0 0% 98%",
                    "card": "0 0% 9%",
                    "popover": "0 0% 9%",
                    "border": "0 0% 20%",
                    "input": "0 0% 20%",
                    "ring": "0 0% 98%",
                },
                "chart": ["0 0% 20%", "0 0% 35%", "0 0% 50%", "0 0% 65%", "0 0% 80%"],
            },
            "typography": {
                "fontBody": {
                    "name": "Inter",
                    "weights": [400, 500],
                    "styles": ["normal"],
                    "url": "https://fonts.googleapis.com/css2?family=Inter:wght@400;500&display=swap",
                    "fallback": ["system-ui", "sans-serif"],
                },
            },
        },
    ),
    BrandTemplate(
        "professional",
        "Professional",
        "Elegant and trustworthy design for corporate brands",
        "professional",
        {
            "metadata": {"name": "Professional Brand", "tagline": "Excellence in every detail"},
            "colors": {
                "light": {
                    "primary": "210 100% 35%",
                    "secondary": "210 15% 90%",
                    "accent": "195 100% 40%",
                    "destructive": "355 75% 45%",
                    "muted": "210 15% 90%",
                    "foreground": "210 50% 10%",
                    "border": "210 20% 85%",
                    "input": "210 20% 85%",
                    "ring": "210 100% 35%",
                },
                "dark": {
                    "primary": "210 100% 60%",
                    "secondary": "210 15% 20%",
                    "accent": "195 80% 50%",
                    "destructive": "355 65% 50%",
                    "muted": "210 15% 20%",
                    "background": "210 30% 8%",
                    "foreground": "210 20% 95%",
                    "card": "210 30% 8%",
                    "popover": "210 30% 8%",
                    "border": "210 20% 18%",
                    "input": "210 20% 18%",
                    "ring": "210 100% 60%",
                },
                "chart": ["210 100% 35%", "195 100% 40%", "170 60% 45%", "200 70% 50%", "220 80% 55%"],
            },
            "typography": {
                "fontHeading": {
                    "name": "Playfair Display",
                    "weights": [600, 700, 800],
                    "styles": ["normal"],
                    "url": "https://fonts.googleapis.com/css2?family=Playfair+Display:wght@600;700;800&display=swap",
                    "fallback": ["Georgia", "serif"],
                },
            },
        },
    ),
    BrandTemplate(
        "vibrant",
        "Vibrant",
        "Bold, saturated colors for energetic brands",
        "vibrant",
        {
            "metadata": {"name": "Vibrant Brand", "tagline": "Bold and beautiful"},
            "colors": {
                "light": {
                    "primary": "280 100% 60%",
                    "secondary": "340 100% 65%",
                    "accent": "160 100% 50%",
                    "destructive": "15 100% 55%",
                    "muted": "280 20% 95%",
                    "foreground": "280 50% 15%",
                    "border": "280 30% 85%",
                    "input": "280 30% 85%",
                    "ring": "280 100% 60%",
                },
                "dark": {
                    "primary": "280 90% 70%",
                    "secondary": "340 80% 65%",
                    "accent": "160 80% 55%",
                    "destructive": "15 90% 60%",
                    "muted": "280 20% 20%",
                    "background": "280 30% 10%",
                    "foreground": "280 20% 95%",
                    "card": "280 30% 10%",
                    "popover": "280 30% 10%",
                    "border": "280 20% 25%",
                    "input": "280 20% 25%",
                    "ring": "280 90% 70%",
                },
                "chart": ["280 100% 60%", "340 100% 65%", "160 100% 50%", "50 100% 55%", "15 100% 55%"],
            },
            "typography": {
                "fontHeading": {
                    "name": "Poppins",
                    "weights": [600, 700, 800],
                    "styles": ["normal"],
                    "url": "https://fonts.googleapis.com/css2?family=Poppins:wght@600;700;800&display=swap",
                    "fallback": ["system-ui", "sans-serif"],
                },
            },
        },
    ),
)

BRAND_TEMPLATES: Dict[str, BrandTemplate] = {t.id: t for t in _TEMPLATES}


def list_templates() -> List[BrandTemplate]:
    return list(_TEMPLATES)


def get_template(template_id: str) -> Optional[BrandTemplate]:
    return BRAND_TEMPLATES.get(template_id)
