"""Brand DNA configuration model.

The closed key sets below are shared by the default factory, the validator and
the style contract renderer. Field names are snake_case in Python and camelCase
on the wire (storage records, exports, MCP payloads).
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

THEMES = ("light", "dark")

BASE_COLOR_ROLES = (
    "background",
    "foreground",
    "primary",
    "secondary",
    "accent",
    "destructive",
    "border",
    "input",
    "ring",
    "card",
    "popover",
    "muted",
)

# roles that carry a "<role>-foreground" text color
FOREGROUND_PAIRED_ROLES = (
    "primary",
    "secondary",
    "accent",
    "destructive",
    "card",
    "popover",
    "muted",
)

COLOR_ROLES = BASE_COLOR_ROLES + tuple(f"{role}-foreground" for role in FOREGROUND_PAIRED_ROLES)

CHART_SIZE = 5

# font role -> wire field name
FONT_ROLES = {
    "heading": "fontHeading",
    "body": "fontBody",
    "mono": "fontMono",
}

FONT_STYLES = ("normal", "italic")

SCALE_TOKENS = ("xs", "sm", "base", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl", "7xl", "8xl", "9xl")
LINE_HEIGHT_PRESETS = ("tight", "normal", "relaxed")
LETTER_SPACING_PRESETS = ("tight", "normal", "wide")
RADIUS_TOKENS = ("sm", "md", "lg", "xl", "2xl", "full")
SPACING_TOKENS = ("xs", "sm", "md", "lg", "xl", "2xl", "3xl", "4xl")

EXPORT_ONLY_FIELDS = ("exportedAt", "exportVersion")


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class FontFamily(_WireModel):
    name: str
    weights: List[int]
    styles: List[str] = Field(default_factory=lambda: ["normal"])
    fallback: List[str] = Field(default_factory=list)
    url: Optional[str] = None

    def css_stack(self) -> str:
        """Font-family declaration value, family name first."""
        family = f'"{self.name}"' if " " in self.name else self.name
        return ", ".join([family, *self.fallback])


class BrandColors(_WireModel):
    light: Dict[str, str]
    dark: Dict[str, str]
    chart: List[str]


class BrandTypography(_WireModel):
    font_heading: FontFamily
    font_body: FontFamily
    font_mono: FontFamily
    scale: Dict[str, str]
    line_height: Dict[str, float]
    letter_spacing: Dict[str, str]

    def font(self, role: str) -> FontFamily:
        return {"heading": self.font_heading, "body": self.font_body, "mono": self.font_mono}[role]


class BrandSpacing(_WireModel):
    radius: Dict[str, str]
    spacing: Dict[str, str]


class Logo(_WireModel):
    id: str
    name: str
    light_url: str
    dark_url: str
    width: Optional[int] = None
    height: Optional[int] = None
    file_size: Optional[int] = None
    uploaded_at: Optional[str] = None


class BrandAssets(_WireModel):
    primary_logo: Optional[Logo] = None
    secondary_logo: Optional[Logo] = None
    favicon: Optional[Logo] = None
    additional_assets: List[Logo] = Field(default_factory=list)


class BrandMetadata(_WireModel):
    name: str
    tagline: Optional[str] = None
    description: Optional[str] = None
    industry: Optional[str] = None
    created_at: str
    updated_at: str
    version: str = "1.0.0"


class BrandValue(_WireModel):
    id: str
    label: str = Field(validation_alias=AliasChoices("label", "name"))
    description: str = ""
    icon: Optional[str] = None


class ToneOfVoice(_WireModel):
    traits: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    dos: Optional[List[str]] = None
    donts: Optional[List[str]] = None


class BrandStrategy(_WireModel):
    purpose: Optional[str] = None
    vision: Optional[str] = None
    mission: Optional[str] = None
    values: List[BrandValue] = Field(default_factory=list)
    tone_of_voice: ToneOfVoice = Field(default_factory=ToneOfVoice)
    positioning: Optional[str] = None
    target_audience: Optional[str] = None
    differentiators: Optional[List[str]] = None


class BrandConfiguration(_WireModel):
    """The aggregate "Brand DNA" record. Instances are immutable snapshots."""

    metadata: BrandMetadata
    strategy: Optional[BrandStrategy] = None
    colors: BrandColors
    typography: BrandTypography
    spacing: BrandSpacing
    assets: BrandAssets = Field(default_factory=BrandAssets)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ValidationIssue(BaseModel):
    field: str
    message: str
    code: str
    ratio: Optional[float] = None
    level: Optional[str] = None


class ValidationResult(BaseModel):
    valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    # advisory findings, never affect ``valid``
    warnings: List[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def ok(cls, warnings: Optional[List[ValidationIssue]] = None) -> "ValidationResult":
        return cls(valid=True, errors=[], warnings=warnings or [])

    @classmethod
    def failed(cls, errors: List[ValidationIssue]) -> "ValidationResult":
        return cls(valid=False, errors=errors)

    def codes(self) -> List[str]:
        return [e.code for e in self.errors]

    def summary(self) -> str:
        return ", ".join(e.message for e in self.errors)


class ContrastResult(BaseModel):
    ratio: float
    aa: bool
    aa_large: bool
    aaa: bool
    aaa_large: bool
    level: str  # "AAA", "AA", "AA-large" or "fail"
