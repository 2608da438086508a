"""Structural validation and WCAG contrast checks for brand configurations.

Structural errors are blocking: a configuration that fails them is never
persisted, exported or rendered. Contrast findings are advisory and are
returned as ``warnings``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from brand_dna.core.metrics import CONTRAST_FINDINGS, VALIDATION_TOTAL
from brand_dna.models.brand import (
    CHART_SIZE,
    COLOR_ROLES,
    FONT_ROLES,
    FONT_STYLES,
    FOREGROUND_PAIRED_ROLES,
    LETTER_SPACING_PRESETS,
    LINE_HEIGHT_PRESETS,
    RADIUS_TOKENS,
    SCALE_TOKENS,
    SPACING_TOKENS,
    THEMES,
    BrandConfiguration,
    ContrastResult,
    ValidationIssue,
    ValidationResult,
)
from brand_dna.models.color import is_valid_hsl, relative_luminance
from brand_dna.services.fonts import available_weights

logger = logging.getLogger(__name__)

MISSING_FIELD = "MISSING_FIELD"
INVALID_COLOR_FORMAT = "INVALID_COLOR_FORMAT"
INVALID_COLOR_ROLE = "INVALID_COLOR_ROLE"
INVALID_WEIGHT = "INVALID_WEIGHT"
INVALID_FONT_STYLE = "INVALID_FONT_STYLE"
INVALID_TYPE = "INVALID_TYPE"
INVALID_LENGTH = "INVALID_LENGTH"
PALETTE_SIZE_MISMATCH = "PALETTE_SIZE_MISMATCH"
IMPORT_PARSE_ERROR = "IMPORT_PARSE_ERROR"
CONTRAST_WARNING = "CONTRAST_WARNING"

WCAG_AA = 4.5
WCAG_AA_LARGE = 3.0
WCAG_AAA = 7.0

# strategy text limits (characters / entries)
MAX_PURPOSE = 200
MAX_VISION = 200
MAX_MISSION = 300
MAX_VALUES = 5
MAX_VALUE_LABEL = 50
MAX_VALUE_DESCRIPTION = 200
MAX_TRAITS = 7
MAX_TRAIT = 30

# (theme-relative text role, background role) pairs checked for contrast
CONTRAST_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("foreground", "background"),
    ("primary", "background"),
) + tuple((f"{role}-foreground", role) for role in FOREGROUND_PAIRED_ROLES)


def _issue(field: str, message: str, code: str) -> ValidationIssue:
    return ValidationIssue(field=field, message=message, code=code)


class _StructureWalker:
    """Walks the closed key sets of a wire-form configuration."""

    def __init__(self, data: Mapping[str, Any]):
        self.data = data
        self.errors: List[ValidationIssue] = []

    def error(self, field: str, message: str, code: str) -> None:
        self.errors.append(_issue(field, message, code))

    def section(self, parent: Any, key: str, path: str) -> Optional[Mapping[str, Any]]:
        value = parent.get(key) if isinstance(parent, Mapping) else None
        if value is None:
            self.error(path, f"{path} is required", MISSING_FIELD)
            return None
        if not isinstance(value, Mapping):
            self.error(path, f"{path} must be an object", INVALID_TYPE)
            return None
        return value

    def closed_map(self, parent: Any, key: str, path: str, tokens, numeric: bool = False) -> None:
        section = self.section(parent, key, path)
        if section is None:
            return
        for token in tokens:
            field = f"{path}.{token}"
            if token not in section or section[token] is None:
                self.error(field, f"{field} is required", MISSING_FIELD)
                continue
            value = section[token]
            if numeric:
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    self.error(field, f"{field} must be a number", INVALID_TYPE)
            elif not isinstance(value, str) or not value.strip():
                self.error(field, f"{field} must be a non-empty length string", INVALID_TYPE)

    def run(self) -> List[ValidationIssue]:
        self.metadata()
        self.colors()
        self.typography()
        spacing = self.section(self.data, "spacing", "spacing")
        if spacing is not None:
            self.closed_map(spacing, "radius", "spacing.radius", RADIUS_TOKENS)
            self.closed_map(spacing, "spacing", "spacing.spacing", SPACING_TOKENS)
        self.strategy()
        return self.errors

    def metadata(self) -> None:
        metadata = self.section(self.data, "metadata", "metadata")
        if metadata is None:
            return
        name = metadata.get("name")
        if not isinstance(name, str) or not name.strip():
            self.error("metadata.name", "Brand name is required", MISSING_FIELD)
        for key in ("createdAt", "updatedAt"):
            if not metadata.get(key):
                self.error(f"metadata.{key}", f"metadata.{key} is required", MISSING_FIELD)

    def colors(self) -> None:
        colors = self.section(self.data, "colors", "colors")
        if colors is None:
            return
        for theme in THEMES:
            palette = self.section(colors, theme, f"colors.{theme}")
            if palette is None:
                continue
            for role in COLOR_ROLES:
                field = f"colors.{theme}.{role}"
                if role not in palette:
                    self.error(field, f"Color role {theme}.{role} is required", MISSING_FIELD)
                elif not is_valid_hsl(palette[role]):
                    self.error(field, f"Invalid HSL color format: {palette[role]}", INVALID_COLOR_FORMAT)
            for role in palette:
                if role not in COLOR_ROLES:
                    self.error(f"colors.{theme}.{role}", f"Unknown color role: {role}", INVALID_COLOR_ROLE)

        chart = colors.get("chart")
        if chart is None:
            self.error("colors.chart", "colors.chart is required", MISSING_FIELD)
        elif not isinstance(chart, list):
            self.error("colors.chart", "colors.chart must be a list", INVALID_TYPE)
        elif len(chart) != CHART_SIZE:
            self.error(
                "colors.chart",
                f"Chart colors must contain exactly {CHART_SIZE} colors (got {len(chart)})",
                PALETTE_SIZE_MISMATCH,
            )
        else:
            for index, color in enumerate(chart):
                if not is_valid_hsl(color):
                    self.error(f"colors.chart[{index}]", f"Invalid HSL color format: {color}", INVALID_COLOR_FORMAT)

    def typography(self) -> None:
        typography = self.section(self.data, "typography", "typography")
        if typography is None:
            return
        for wire_key in FONT_ROLES.values():
            self.font(typography, wire_key)
        self.closed_map(typography, "scale", "typography.scale", SCALE_TOKENS)
        self.closed_map(typography, "lineHeight", "typography.lineHeight", LINE_HEIGHT_PRESETS, numeric=True)
        self.closed_map(typography, "letterSpacing", "typography.letterSpacing", LETTER_SPACING_PRESETS)

    def font(self, typography: Mapping[str, Any], wire_key: str) -> None:
        path = f"typography.{wire_key}"
        font = self.section(typography, wire_key, path)
        if font is None:
            return
        name = font.get("name")
        if not isinstance(name, str) or not name.strip():
            self.error(f"{path}.name", "Font name is required", MISSING_FIELD)
            return

        weights = font.get("weights")
        if not isinstance(weights, list) or not weights:
            self.error(f"{path}.weights", f"Font {name} must declare at least one weight", INVALID_WEIGHT)
        else:
            allowed = available_weights(name)
            for weight in weights:
                if isinstance(weight, bool) or not isinstance(weight, int) or weight not in allowed:
                    self.error(
                        f"{path}.weights",
                        f"Weight {weight} is not available for {name}",
                        INVALID_WEIGHT,
                    )

        styles = font.get("styles", [])
        if isinstance(styles, list):
            for style in styles:
                if style not in FONT_STYLES:
                    self.error(f"{path}.styles", f"Unsupported font style: {style}", INVALID_FONT_STYLE)

    def strategy(self) -> None:
        strategy = self.data.get("strategy")
        if strategy is None:
            return
        if not isinstance(strategy, Mapping):
            self.error("strategy", "strategy must be an object", INVALID_TYPE)
            return

        for key, limit in (("purpose", MAX_PURPOSE), ("vision", MAX_VISION), ("mission", MAX_MISSION)):
            text = strategy.get(key)
            if isinstance(text, str) and len(text) > limit:
                self.error(f"strategy.{key}", f"{key.capitalize()} should not exceed {limit} characters", INVALID_LENGTH)

        values = strategy.get("values") or []
        if isinstance(values, list):
            if len(values) > MAX_VALUES:
                self.error("strategy.values", f"Maximum {MAX_VALUES} values allowed", INVALID_LENGTH)
            for index, value in enumerate(values):
                if not isinstance(value, Mapping):
                    continue
                label = value.get("label", value.get("name"))
                if not isinstance(label, str) or not label.strip():
                    self.error(f"strategy.values[{index}].label", "Value label is required", MISSING_FIELD)
                elif len(label) > MAX_VALUE_LABEL:
                    self.error(
                        f"strategy.values[{index}].label",
                        f"Value label should not exceed {MAX_VALUE_LABEL} characters",
                        INVALID_LENGTH,
                    )
                description = value.get("description")
                if isinstance(description, str) and len(description) > MAX_VALUE_DESCRIPTION:
                    self.error(
                        f"strategy.values[{index}].description",
                        f"Value description should not exceed {MAX_VALUE_DESCRIPTION} characters",
                        INVALID_LENGTH,
                    )

        tone = strategy.get("toneOfVoice")
        traits = tone.get("traits") if isinstance(tone, Mapping) else None
        if isinstance(traits, list):
            if len(traits) > MAX_TRAITS:
                self.error("strategy.toneOfVoice.traits", f"Maximum {MAX_TRAITS} tone traits allowed", INVALID_LENGTH)
            for index, trait in enumerate(traits):
                field = f"strategy.toneOfVoice.traits[{index}]"
                if not isinstance(trait, str) or not trait.strip():
                    self.error(field, "Trait cannot be empty", MISSING_FIELD)
                elif len(trait) > MAX_TRAIT:
                    self.error(field, f"Trait should not exceed {MAX_TRAIT} characters", INVALID_LENGTH)


def _pydantic_issues(exc: ValidationError) -> List[ValidationIssue]:
    issues = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"])
        code = MISSING_FIELD if err["type"] == "missing" else INVALID_TYPE
        issues.append(_issue(field, f"{field}: {err['msg']}", code))
    return issues


def _as_wire(config: Union[BrandConfiguration, Mapping[str, Any]]) -> Any:
    if isinstance(config, BrandConfiguration):
        return config.to_wire()
    return config


def parse_brand(
    data: Union[BrandConfiguration, Mapping[str, Any]],
) -> Tuple[Optional[BrandConfiguration], ValidationResult]:
    """Validate structurally and build the model when the data passes."""
    wire = _as_wire(data)
    if not isinstance(wire, Mapping):
        return None, ValidationResult.failed(
            [_issue("", "Brand configuration must be a JSON object", INVALID_TYPE)]
        )

    errors = _StructureWalker(wire).run()
    if errors:
        return None, ValidationResult.failed(errors)

    try:
        config = BrandConfiguration.model_validate(wire)
    except ValidationError as e:
        return None, ValidationResult.failed(_pydantic_issues(e))

    return config, ValidationResult.ok(contrast_findings(config))


def validate_brand_dna(
    config: Union[BrandConfiguration, Mapping[str, Any]],
    source: str = "store",
) -> ValidationResult:
    _, result = parse_brand(config)
    VALIDATION_TOTAL.labels(source=source, result="valid" if result.valid else "invalid").inc()
    if not result.valid:
        logger.info("Brand DNA invalid (%s): %d errors", source, len(result.errors))
    elif source == "store":
        # only store validations feed the contrast metric
        for finding in result.warnings:
            CONTRAST_FINDINGS.labels(theme=finding.field.split(".")[1]).inc()
    return result


def validate_imported_json(
    raw: str,
    transform: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
) -> Tuple[Optional[BrandConfiguration], ValidationResult]:
    """Parse an import payload; a parse failure stops before structural checks.

    ``transform`` runs on the parsed object before validation (export-field
    stripping, sanitization).
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        VALIDATION_TOTAL.labels(source="import", result="invalid").inc()
        return None, ValidationResult.failed(
            [_issue("json", f"Invalid JSON format: {e}", IMPORT_PARSE_ERROR)]
        )

    if not isinstance(data, dict):
        VALIDATION_TOTAL.labels(source="import", result="invalid").inc()
        return None, ValidationResult.failed(
            [_issue("json", "Imported JSON must be an object", IMPORT_PARSE_ERROR)]
        )

    if transform is not None:
        data = transform(data)

    config, result = parse_brand(data)
    VALIDATION_TOTAL.labels(source="import", result="valid" if result.valid else "invalid").inc()
    return config, result


# ── Contrast ──────────────────────────────────────────────────────────────

def contrast_level(ratio: float) -> str:
    if ratio >= WCAG_AAA:
        return "AAA"
    if ratio >= WCAG_AA:
        return "AA"
    if ratio >= WCAG_AA_LARGE:
        return "AA-large"
    return "fail"


def check_contrast(foreground: str, background: str) -> ContrastResult:
    """WCAG 2.1 contrast between two HSL colors. Raises ValueError on bad input."""
    lum1 = relative_luminance(foreground)
    lum2 = relative_luminance(background)
    lighter, darker = max(lum1, lum2), min(lum1, lum2)
    ratio = (lighter + 0.05) / (darker + 0.05)

    return ContrastResult(
        ratio=round(ratio, 2),
        aa=ratio >= WCAG_AA,
        aa_large=ratio >= WCAG_AA_LARGE,
        aaa=ratio >= WCAG_AAA,
        aaa_large=ratio >= WCAG_AA,
        level=contrast_level(ratio),
    )


def contrast_findings(config: BrandConfiguration) -> List[ValidationIssue]:
    """Advisory findings for text/background pairs below WCAG AA."""
    findings = []
    for theme in THEMES:
        palette = getattr(config.colors, theme)
        for text_role, bg_role in CONTRAST_PAIRS:
            if text_role not in palette or bg_role not in palette:
                continue
            result = check_contrast(palette[text_role], palette[bg_role])
            if result.aa:
                continue
            findings.append(
                ValidationIssue(
                    field=f"colors.{theme}.{text_role}",
                    message=(
                        f"{theme}.{text_role} on {theme}.{bg_role} has contrast "
                        f"{result.ratio}:1, below WCAG AA (4.5:1)"
                    ),
                    code=CONTRAST_WARNING,
                    ratio=result.ratio,
                    level=result.level,
                )
            )
    return findings
