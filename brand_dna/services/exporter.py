"""Brand DNA export formats and share tokens."""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional

from brand_dna.core.config import settings
from brand_dna.core.errors import BrandValidationError
from brand_dna.models.brand import FONT_ROLES, BrandConfiguration
from brand_dna.services.merge import utc_now
from brand_dna.services.theme import render_style_contract
from brand_dna.services.validator import validate_brand_dna

EXPORT_FORMATS = ("json", "css", "tailwind", "typescript")


def _ensure_valid(config: BrandConfiguration) -> None:
    result = validate_brand_dna(config, source="export")
    if not result.valid:
        raise BrandValidationError(result)


def export_payload(config: BrandConfiguration, exported_at: Optional[str] = None) -> dict:
    """Full configuration plus the export-only ``exportedAt``/``exportVersion`` fields."""
    _ensure_valid(config)
    payload = config.to_wire()
    payload["exportedAt"] = exported_at or utc_now()
    payload["exportVersion"] = settings.EXPORT_VERSION
    return payload


def export_as_json(config: BrandConfiguration, pretty: bool = True) -> str:
    return json.dumps(export_payload(config), indent=2 if pretty else None, ensure_ascii=False)


def export_as_css(config: BrandConfiguration, selector: Optional[str] = None) -> str:
    contract = render_style_contract(config, selector)
    header = (
        "/**\n"
        f" * Brand DNA: {config.metadata.name}\n"
        f" * Generated: {utc_now()}\n"
        f" * Version: {config.metadata.version}\n"
        " */\n\n"
    )
    return header + contract.to_css()


def export_as_tailwind(config: BrandConfiguration) -> str:
    _ensure_valid(config)
    light = config.colors.light
    typography = config.typography

    colors = {
        "brand": {role: f"hsl({light[role]})" for role in ("primary", "secondary", "accent", "destructive", "muted")},
        "chart": {str(i): f"hsl({c})" for i, c in enumerate(config.colors.chart, start=1)},
    }
    font_family = {
        role: [typography.font(role).name, *typography.font(role).fallback] for role in FONT_ROLES
    }
    theme = {
        "extend": {
            "colors": colors,
            "fontFamily": font_family,
            "fontSize": typography.scale,
            "borderRadius": config.spacing.radius,
            "spacing": config.spacing.spacing,
        }
    }
    body = json.dumps({"theme": theme}, indent=2, ensure_ascii=False)
    return (
        f"// Brand DNA: {config.metadata.name}\n"
        f"// Generated: {utc_now()}\n\n"
        f"module.exports = {body};\n"
    )


def export_as_typescript(config: BrandConfiguration) -> str:
    _ensure_valid(config)
    colors = config.colors
    typography = config.typography.model_dump(mode="json", by_alias=True)
    spacing = config.spacing.model_dump(mode="json", by_alias=True)
    metadata = config.metadata.model_dump(mode="json", by_alias=True)

    def literal(value) -> str:
        return json.dumps(value, indent=2, ensure_ascii=False)

    return (
        f"// Brand DNA: {config.metadata.name}\n"
        f"// Generated: {utc_now()}\n\n"
        "export const brandColors = {\n"
        f"  light: {literal(colors.light)},\n"
        f"  dark: {literal(colors.dark)},\n"
        f"  chart: {literal(colors.chart)},\n"
        "} as const;\n\n"
        f"export const brandTypography = {literal(typography)} as const;\n\n"
        f"export const brandSpacing = {literal(spacing)} as const;\n\n"
        f"export const brandMetadata = {literal(metadata)} as const;\n"
    )


def export_brand(config: BrandConfiguration, fmt: str = "json") -> str:
    if fmt == "json":
        return export_as_json(config)
    if fmt == "css":
        return export_as_css(config)
    if fmt == "tailwind":
        return export_as_tailwind(config)
    if fmt == "typescript":
        return export_as_typescript(config)
    raise ValueError(f"Unknown export format: {fmt}")


def format_bytes(size: int) -> str:
    if size == 0:
        return "0 B"
    value = float(size)
    for unit in ("B", "KB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} MB"


def export_summary(config: BrandConfiguration) -> Dict[str, Dict[str, Any]]:
    """Byte size and line count of every export format."""
    summary = {}
    for fmt in EXPORT_FORMATS:
        content = export_brand(config, fmt)
        size = len(content.encode("utf-8"))
        summary[fmt] = {
            "size": size,
            "size_formatted": format_bytes(size),
            "lines": content.count("\n") + 1,
        }
    return summary


def generate_share_token(config: BrandConfiguration) -> str:
    """URL-safe token carrying the compact JSON export."""
    raw = export_as_json(config, pretty=False).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def parse_share_token(token: str) -> str:
    """Decode a share token back into export JSON text. Raises ValueError."""
    padded = token + "=" * (-len(token) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (ValueError, UnicodeError) as e:
        raise ValueError("Invalid share token. The link may be corrupted or outdated.") from e
