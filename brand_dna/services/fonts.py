"""Curated web font catalog, pairing suggestions and stylesheet loading."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from brand_dna.core.config import settings
from brand_dna.core.errors import FontLoadError, FontNotFoundError
from brand_dna.core.metrics import FONT_LOADS
from brand_dna.models.brand import FontFamily

logger = logging.getLogger(__name__)

FONT_CATEGORIES = ("sans-serif", "serif", "monospace", "display", "handwriting")

_GOOGLE_FONTS_CSS = "https://fonts.googleapis.com/css2"

# any weight a generic or self-hosted family may declare
CSS_WEIGHTS = (100, 200, 300, 400, 500, 600, 700, 800, 900)


@dataclass(frozen=True)
class CatalogFont:
    name: str
    category: str
    weights: Tuple[int, ...]
    styles: Tuple[str, ...]
    variants: int
    popularity: int
    fallback: Tuple[str, ...]

    @property
    def url(self) -> str:
        family = self.name.replace(" ", "+")
        if self.weights == (400,):
            return f"{_GOOGLE_FONTS_CSS}?family={family}&display=swap"
        weights = ";".join(str(w) for w in self.weights)
        return f"{_GOOGLE_FONTS_CSS}?family={family}:wght@{weights}&display=swap"


@dataclass(frozen=True)
class FontPairing:
    name: str
    heading: str
    body: str
    description: str


_SANS = ("system-ui", "sans-serif")
_SERIF = ("Georgia", "serif")
_MONO = ("monospace",)
_DISPLAY = ("Impact", "sans-serif")
_ALL = CSS_WEIGHTS
_BOTH = ("normal", "italic")

FONT_CATALOG: Tuple[CatalogFont, ...] = (
    # Sans-serif
    CatalogFont("Inter", "sans-serif", _ALL, _BOTH, 18, 100, _SANS),
    CatalogFont("Roboto", "sans-serif", (100, 300, 400, 500, 700, 900), _BOTH, 12, 95, _SANS),
    CatalogFont("Open Sans", "sans-serif", (300, 400, 500, 600, 700, 800), _BOTH, 12, 90, _SANS),
    CatalogFont("Poppins", "sans-serif", _ALL, _BOTH, 18, 85, _SANS),
    CatalogFont("Montserrat", "sans-serif", _ALL, _BOTH, 18, 85, _SANS),
    CatalogFont("Lato", "sans-serif", (100, 300, 400, 700, 900), _BOTH, 10, 80, _SANS),
    CatalogFont("Raleway", "sans-serif", _ALL, _BOTH, 18, 75, _SANS),
    CatalogFont("Nunito", "sans-serif", (200, 300, 400, 500, 600, 700, 800, 900), _BOTH, 16, 75, _SANS),
    # Serif
    CatalogFont("Playfair Display", "serif", (400, 500, 600, 700, 800, 900), _BOTH, 12, 80, _SERIF),
    CatalogFont("Merriweather", "serif", (300, 400, 700, 900), _BOTH, 8, 75, _SERIF),
    CatalogFont("Lora", "serif", (400, 500, 600, 700), _BOTH, 8, 75, _SERIF),
    CatalogFont("PT Serif", "serif", (400, 700), _BOTH, 4, 70, _SERIF),
    # Monospace
    CatalogFont("Fira Code", "monospace", (300, 400, 500, 600, 700), ("normal",), 5, 90, _MONO),
    CatalogFont("JetBrains Mono", "monospace", (100, 200, 300, 400, 500, 600, 700, 800), _BOTH, 16, 85, _MONO),
    CatalogFont("Source Code Pro", "monospace", (200, 300, 400, 500, 600, 700, 900), _BOTH, 14, 80, _MONO),
    CatalogFont("Space Mono", "monospace", (400, 700), _BOTH, 4, 70, _MONO),
    # Display
    CatalogFont("Bebas Neue", "display", (400,), ("normal",), 1, 75, _DISPLAY),
    CatalogFont("Oswald", "display", (200, 300, 400, 500, 600, 700), ("normal",), 6, 75, _DISPLAY),
)

FONT_PAIRINGS: Tuple[FontPairing, ...] = (
    FontPairing("Modern & Clean", "Inter", "Inter", "Versatile system font, perfect for modern interfaces"),
    FontPairing("Classic & Professional", "Playfair Display", "Lato", "Elegant serif headings with clean sans-serif body"),
    FontPairing("Bold & Friendly", "Montserrat", "Open Sans", "Strong headings with approachable body text"),
    FontPairing("Minimal & Geometric", "Poppins", "Poppins", "Clean geometric sans-serif for minimalist designs"),
    FontPairing("Editorial & Refined", "Playfair Display", "Merriweather", "Beautiful serif combination for content-heavy sites"),
    FontPairing("Tech & Modern", "Raleway", "Roboto", "Contemporary pairing for tech and startup brands"),
)

_BY_NAME: Dict[str, CatalogFont] = {font.name: font for font in FONT_CATALOG}


def get_fonts_by_category(category: str) -> List[CatalogFont]:
    return [font for font in FONT_CATALOG if font.category == category]


def search_fonts(query: str) -> List[CatalogFont]:
    needle = query.lower()
    return [font for font in FONT_CATALOG if needle in font.name.lower()]


def get_font_by_name(name: str) -> Optional[CatalogFont]:
    return _BY_NAME.get(name)


def get_popular_fonts(limit: int = 10) -> List[CatalogFont]:
    return sorted(FONT_CATALOG, key=lambda f: f.popularity, reverse=True)[:limit]


def get_font_pairings() -> List[FontPairing]:
    return list(FONT_PAIRINGS)


def available_weights(name: str) -> Tuple[int, ...]:
    """Weights a family may declare: the catalog's list, or the CSS range for unknown families."""
    font = _BY_NAME.get(name)
    return font.weights if font else CSS_WEIGHTS


def catalog_font_to_family(font: CatalogFont, weights: Optional[Sequence[int]] = None) -> FontFamily:
    """Build a FontFamily value; selects every catalog weight unless told otherwise."""
    return FontFamily(
        name=font.name,
        weights=list(weights) if weights is not None else list(font.weights),
        styles=list(font.styles),
        url=font.url,
        fallback=list(font.fallback),
    )


class FontLoader:
    """Fetches font stylesheets for live preview.

    Loading is idempotent per stylesheet URL: a URL already fetched resolves
    immediately and concurrent requests for the same URL share one fetch.
    The loader only downloads; it never touches style variables.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout if timeout is not None else settings.FONT_LOAD_TIMEOUT
        self._stylesheets: Dict[str, str] = {}
        self._pending: Dict[str, asyncio.Task] = {}

    @property
    def loaded_urls(self) -> List[str]:
        return list(self._stylesheets)

    def is_loaded(self, url: str) -> bool:
        return url in self._stylesheets

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def load_font(self, font_name: str) -> str:
        """Load a catalog font by name. Returns the stylesheet URL."""
        font = get_font_by_name(font_name)
        if font is None:
            raise FontNotFoundError(f'Font "{font_name}" not found')
        await self.load_stylesheet(font.url, font_name)
        return font.url

    async def load_family(self, family: FontFamily) -> Optional[str]:
        url = family.url
        if not url:
            font = get_font_by_name(family.name)
            url = font.url if font else None
        if not url:
            logger.debug("Font %s has no stylesheet, relying on local fallback", family.name)
            return None
        await self.load_stylesheet(url, family.name)
        return url

    async def load_stylesheet(self, url: str, font_name: str) -> None:
        if url in self._stylesheets:
            FONT_LOADS.labels(status="cached").inc()
            return

        task = self._pending.get(url)
        if task is None:
            task = asyncio.ensure_future(self._fetch(url, font_name))
            self._pending[url] = task
            task.add_done_callback(lambda _t: self._pending.pop(url, None))

        await asyncio.shield(task)

    async def _fetch(self, url: str, font_name: str) -> None:
        logger.info("Loading font stylesheet %s (%s)", font_name, url)
        try:
            response = await self._get_client().get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            FONT_LOADS.labels(status="error").inc()
            logger.warning("Font stylesheet failed for %s: %s", font_name, e)
            raise FontLoadError(font_name, str(e)) from e

        self._stylesheets[url] = response.text
        FONT_LOADS.labels(status="loaded").inc()

    async def preload(self, font_names: Iterable[str]) -> None:
        await asyncio.gather(*(self.load_font(name) for name in font_names))

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
