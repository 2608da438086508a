import asyncio

import httpx
import pytest


# ── Catálogo ──────────────────────────────────────────────────────────────

def test_fonts_by_category():
    from brand_dna.services.fonts import get_fonts_by_category
    mono = get_fonts_by_category("monospace")
    assert "Fira Code" in [f.name for f in mono]
    assert all(f.category == "monospace" for f in mono)
    assert get_fonts_by_category("cursive") == []


def test_search_is_case_insensitive_substring():
    from brand_dna.services.fonts import search_fonts
    assert [f.name for f in search_fonts("PLAY")] == ["Playfair Display"]
    assert {f.name for f in search_fonts("mono")} == {"JetBrains Mono", "Space Mono"}


def test_lookup_by_exact_name():
    from brand_dna.services.fonts import get_font_by_name
    assert get_font_by_name("Lora").category == "serif"
    assert get_font_by_name("lora") is None


def test_catalog_font_to_family_selects_all_weights():
    from brand_dna.services.fonts import catalog_font_to_family, get_font_by_name
    family = catalog_font_to_family(get_font_by_name("Lora"))
    assert family.weights == [400, 500, 600, 700]
    assert family.fallback == ["Georgia", "serif"]
    assert "family=Lora:wght@400;500;600;700" in family.url


def test_single_weight_font_url_has_no_axis():
    from brand_dna.services.fonts import get_font_by_name
    url = get_font_by_name("Bebas Neue").url
    assert url == "https://fonts.googleapis.com/css2?family=Bebas+Neue&display=swap"


def test_available_weights_for_unknown_family():
    from brand_dna.services.fonts import CSS_WEIGHTS, available_weights
    assert available_weights("Some Local Font") == CSS_WEIGHTS
    assert available_weights("PT Serif") == (400, 700)


def test_pairings_are_static_suggestions():
    from brand_dna.services.fonts import get_font_by_name, get_font_pairings
    pairings = get_font_pairings()
    assert len(pairings) == 6
    for pairing in pairings:
        assert get_font_by_name(pairing.heading) is not None
        assert get_font_by_name(pairing.body) is not None


def test_popular_fonts_sorted():
    from brand_dna.services.fonts import get_popular_fonts
    popular = get_popular_fonts(3)
    assert popular[0].name == "Inter"
    assert len(popular) == 3


# ── Carregamento de stylesheets ───────────────────────────────────────────

def _counting_client(status: int = 200):
    calls = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        await asyncio.sleep(0.01)
        return httpx.Response(status, request=request, text="@font-face { font-family: 'X'; }")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), calls


@pytest.mark.asyncio
async def test_concurrent_loads_share_one_fetch():
    from brand_dna.services.fonts import FontLoader
    client, calls = _counting_client()
    loader = FontLoader(client=client)
    try:
        urls = await asyncio.gather(*(loader.load_font("Inter") for _ in range(5)))
        assert len(calls) == 1
        assert len(set(urls)) == 1
        assert loader.is_loaded(urls[0])

        await loader.load_font("Inter")
        assert len(calls) == 1
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_unknown_font_raises():
    from brand_dna.core.errors import FontNotFoundError
    from brand_dna.services.fonts import FontLoader
    loader = FontLoader(client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))))
    with pytest.raises(FontNotFoundError):
        await loader.load_font("Comic Neue Ultra")


@pytest.mark.asyncio
async def test_failed_fetch_is_not_cached():
    from brand_dna.core.errors import FontLoadError
    from brand_dna.services.fonts import FontLoader
    client, calls = _counting_client(status=503)
    loader = FontLoader(client=client)
    try:
        with pytest.raises(FontLoadError):
            await loader.load_font("Lora")
        assert loader.loaded_urls == []

        with pytest.raises(FontLoadError):
            await loader.load_font("Lora")
        assert len(calls) == 2
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_family_without_url_uses_catalog():
    from brand_dna.models.brand import FontFamily
    from brand_dna.services.fonts import FontLoader, get_font_by_name
    client, calls = _counting_client()
    loader = FontLoader(client=client)
    try:
        url = await loader.load_family(FontFamily(name="Roboto", weights=[400]))
        assert url == get_font_by_name("Roboto").url

        local = await loader.load_family(FontFamily(name="Corporate Sans", weights=[400]))
        assert local is None
        assert len(calls) == 1
    finally:
        await client.aclose()
