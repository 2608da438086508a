"""Import sources for brand JSON and sanitization of free-text fields.

The helpers here fetch, clean and preview import payloads; adoption happens in
``BrandStore.import_brand``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx
from pydantic import BaseModel, Field

from brand_dna.models.brand import EXPORT_ONLY_FIELDS, BrandConfiguration
from brand_dna.services.exporter import parse_share_token
from brand_dna.services.validator import validate_imported_json

logger = logging.getLogger(__name__)

_SCRIPT = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_IFRAME = re.compile(r"<iframe[^>]*>.*?</iframe>", re.IGNORECASE | re.DOTALL)
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)

_METADATA_TEXT = ("name", "tagline", "description", "industry")
_STRATEGY_TEXT = ("purpose", "vision", "mission", "positioning", "targetAudience")


def strip_export_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in EXPORT_ONLY_FIELDS}


def sanitize_string(text: str) -> str:
    text = _SCRIPT.sub("", text)
    text = _IFRAME.sub("", text)
    text = _JS_PROTOCOL.sub("", text)
    return _EVENT_HANDLER.sub("", text)


def _sanitize_fields(section: Any, keys) -> Any:
    if not isinstance(section, Mapping):
        return section
    cleaned = dict(section)
    for key in keys:
        if isinstance(cleaned.get(key), str):
            cleaned[key] = sanitize_string(cleaned[key])
    return cleaned


def sanitize_brand(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Strip markup and script vectors from free-text fields of a wire-form config."""
    cleaned = dict(data)
    cleaned["metadata"] = _sanitize_fields(data.get("metadata"), _METADATA_TEXT)

    strategy = data.get("strategy")
    if isinstance(strategy, Mapping):
        strategy = _sanitize_fields(strategy, _STRATEGY_TEXT)
        values = strategy.get("values")
        if isinstance(values, list):
            strategy["values"] = [_sanitize_fields(v, ("label", "name", "description")) for v in values]
        cleaned["strategy"] = strategy
    return cleaned


async def import_from_file(path: str | Path) -> str:
    path = Path(path)
    if path.suffix.lower() != ".json":
        raise ValueError("Invalid file type. Please provide a JSON file.")
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


async def import_from_url(url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0) -> str:
    logger.info("Fetching brand JSON from %s", url)
    if client is not None:
        resp = await client.get(url)
        resp.raise_for_status()
        return resp.text
    async with httpx.AsyncClient(timeout=timeout) as http:
        resp = await http.get(url)
        resp.raise_for_status()
        return resp.text


def import_from_share_token(token: str) -> str:
    return parse_share_token(token)


def prepare_import(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop export-only fields and sanitize text before structural validation."""
    return sanitize_brand(strip_export_fields(data))


# ── Preview / comparação ──────────────────────────────────────────────────

class ImportPreview(BaseModel):
    """Summary of an import payload, computed without applying it."""

    valid: bool
    brand_name: str = "Unknown"
    version: str = "Unknown"
    colors: int = 0
    fonts: int = 0
    assets: int = 0
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class BrandDifference(BaseModel):
    field: str
    current: Any = None
    imported: Any = None


def preview_import(raw: str) -> Tuple[ImportPreview, Optional[BrandConfiguration]]:
    config, result = validate_imported_json(raw, prepare_import)
    preview = ImportPreview(valid=result.valid, errors=[e.message for e in result.errors])
    if config is None:
        return preview, None

    assets = config.assets
    preview.brand_name = config.metadata.name
    preview.version = config.metadata.version
    preview.colors = len(config.colors.light)
    preview.fonts = 3
    preview.assets = sum(1 for logo in (assets.primary_logo, assets.secondary_logo, assets.favicon) if logo)

    if assets.primary_logo is None:
        preview.warnings.append("No primary logo uploaded")
    if config.typography.font_heading.name == config.typography.font_body.name:
        preview.warnings.append("Heading and body fonts are the same")
    preview.warnings.extend(w.message for w in result.warnings)
    return preview, config


def compare_brands(current: BrandConfiguration, imported: BrandConfiguration) -> List[BrandDifference]:
    """Headline fields that an import would change."""
    fields = (
        ("Primary Color", lambda c: c.colors.light["primary"]),
        ("Heading Font", lambda c: c.typography.font_heading.name),
        ("Body Font", lambda c: c.typography.font_body.name),
        ("Mono Font", lambda c: c.typography.font_mono.name),
        ("Brand Name", lambda c: c.metadata.name),
    )
    differences = []
    for label, getter in fields:
        before, after = getter(current), getter(imported)
        if before != after:
            differences.append(BrandDifference(field=label, current=before, imported=after))
    return differences
