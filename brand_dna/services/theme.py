"""Style contract rendering ("theme application").

A configuration is rendered into named style variables grouped by role. The
variables only ever live on a :class:`PreviewScope`; the renderer refuses
document-wide selectors so a tenant's palette cannot reach the product chrome.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from brand_dna.core.config import settings
from brand_dna.core.errors import BrandValidationError
from brand_dna.models.brand import (
    COLOR_ROLES,
    FONT_ROLES,
    LETTER_SPACING_PRESETS,
    LINE_HEIGHT_PRESETS,
    RADIUS_TOKENS,
    SCALE_TOKENS,
    SPACING_TOKENS,
    THEMES,
    BrandConfiguration,
)
from brand_dna.services.fonts import FontLoader
from brand_dna.services.validator import validate_brand_dna

logger = logging.getLogger(__name__)

GLOBAL_SELECTORS = frozenset({":root", "html", "body", "*", ":host"})


def _check_scoped(selector: str) -> None:
    if not selector or selector.strip().lower() in GLOBAL_SELECTORS:
        raise ValueError(f"Brand variables must be scoped to a preview container, got {selector!r}")


@dataclass
class PreviewScope:
    """The preview container that consuming components resolve variables from."""

    selector: str = field(default_factory=lambda: settings.PREVIEW_SCOPE_SELECTOR)
    theme: str = "light"
    variables: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        _check_scoped(self.selector)
        if self.theme not in THEMES:
            raise ValueError(f"Unknown theme: {self.theme}")

    def apply(self, variables: Dict[str, str]) -> None:
        self.variables.update(variables)

    def resolve(self, name: str) -> Optional[str]:
        key = name if name.startswith("--") else f"--{name}"
        return self.variables.get(key)

    def clear(self) -> None:
        self.variables.clear()


@dataclass(frozen=True)
class StyleContract:
    selector: str
    colors: Dict[str, Dict[str, str]]
    typography: Dict[str, str]
    spacing: Dict[str, str]

    def variables(self, theme: str = "light") -> Dict[str, str]:
        merged = dict(self.colors[theme])
        merged.update(self.typography)
        merged.update(self.spacing)
        return merged

    def to_css(self) -> str:
        light = _block(self.selector, self.variables("light"))
        dark_selector = f"{self.selector}.dark,\n.dark {self.selector}"
        dark = _block(dark_selector, self.colors["dark"])
        return f"{light}\n\n{dark}\n"


def _block(selector: str, variables: Dict[str, str]) -> str:
    declarations = "\n".join(f"  {name}: {value};" for name, value in variables.items())
    return f"{selector} {{\n{declarations}\n}}"


def _color_variables(config: BrandConfiguration, theme: str) -> Dict[str, str]:
    palette = getattr(config.colors, theme)
    variables = {f"--{role}": palette[role] for role in COLOR_ROLES}
    for index, color in enumerate(config.colors.chart, start=1):
        variables[f"--chart-{index}"] = color
    return variables


def _typography_variables(config: BrandConfiguration) -> Dict[str, str]:
    typography = config.typography
    variables = {f"--font-{role}": typography.font(role).css_stack() for role in FONT_ROLES}
    for token in SCALE_TOKENS:
        variables[f"--font-size-{token}"] = typography.scale[token]
    for preset in LINE_HEIGHT_PRESETS:
        variables[f"--line-height-{preset}"] = f"{typography.line_height[preset]:g}"
    for preset in LETTER_SPACING_PRESETS:
        variables[f"--letter-spacing-{preset}"] = typography.letter_spacing[preset]
    return variables


def _spacing_variables(config: BrandConfiguration) -> Dict[str, str]:
    spacing = config.spacing
    variables = {"--radius": spacing.radius["lg"]}
    for token in RADIUS_TOKENS:
        variables[f"--radius-{token}"] = spacing.radius[token]
    for token in SPACING_TOKENS:
        variables[f"--spacing-{token}"] = spacing.spacing[token]
    return variables


def render_style_contract(config: BrandConfiguration, selector: Optional[str] = None) -> StyleContract:
    """Render a structurally valid configuration into scoped style variables."""
    selector = selector or settings.PREVIEW_SCOPE_SELECTOR
    _check_scoped(selector)

    result = validate_brand_dna(config, source="render")
    if not result.valid:
        raise BrandValidationError(result)

    return StyleContract(
        selector=selector,
        colors={theme: _color_variables(config, theme) for theme in THEMES},
        typography=_typography_variables(config),
        spacing=_spacing_variables(config),
    )


@dataclass
class ThemeApplication:
    contract: StyleContract
    loaded_fonts: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class ThemeRenderer:
    def __init__(self, font_loader: FontLoader):
        self.font_loader = font_loader

    async def apply(self, config: BrandConfiguration, scope: PreviewScope) -> ThemeApplication:
        """Write variables to ``scope`` then fetch the referenced font stylesheets.

        Font failures are collected, not raised; variables already applied to
        the scope stay in place.
        """
        contract = render_style_contract(config, scope.selector)
        scope.apply(contract.variables(scope.theme))
        application = ThemeApplication(contract=contract)

        families = [config.typography.font(role) for role in FONT_ROLES]
        results = await asyncio.gather(
            *(self.font_loader.load_family(family) for family in families),
            return_exceptions=True,
        )
        for family, outcome in zip(families, results):
            if isinstance(outcome, BaseException):
                logger.error("Failed to load brand font %s: %s", family.name, outcome)
                application.errors.append(str(outcome))
            elif outcome and outcome not in application.loaded_fonts:
                application.loaded_fonts.append(outcome)

        return application
