import asyncio
import json

import httpx
import pytest


def _store(initial=None):
    from brand_dna.services.fonts import FontLoader
    from brand_dna.services.storage import MemoryBrandStorage
    from brand_dna.services.store import BrandStore
    return BrandStore(storage=MemoryBrandStorage(initial), font_loader=FontLoader())


def _slow_storage(initial=None):
    """In-memory storage whose reads block until ``release`` is set."""
    from brand_dna.services.storage import MemoryBrandStorage

    class SlowStorage(MemoryBrandStorage):
        def __init__(self):
            super().__init__(initial)
            self.release = asyncio.Event()

        async def _read(self):
            await self.release.wait()
            return await super()._read()

    return SlowStorage()


def _broken_storage():
    from brand_dna.services.storage import BrandStorage

    class BrokenStorage(BrandStorage):
        backend = "broken"

        async def _read(self):
            raise OSError("storage unavailable")

        async def _write(self, payload):
            raise OSError("storage unavailable")

    return BrokenStorage()


# ── Load ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_first_load_uses_default():
    store = _store()
    assert store.current is None
    await store.load_brand()
    assert store.current.metadata.name == "Quickfy"
    assert store.error is None
    assert store.has_unsaved_changes is False
    assert store.is_loading is False


@pytest.mark.asyncio
async def test_corrupt_record_falls_back_to_default():
    store = _store("{this is not json")
    await store.load_brand()
    assert store.current.metadata.name == "Quickfy"
    assert store.error is None


@pytest.mark.asyncio
async def test_structurally_invalid_record_falls_back_to_default():
    from brand_dna.services.defaults import default_brand_data
    from brand_dna.services.storage import encode_record
    data = default_brand_data()
    data["metadata"]["name"] = "Broken Co"
    data["colors"]["chart"] = data["colors"]["chart"][:4]
    store = _store(encode_record(data))
    await store.load_brand()
    assert store.current.metadata.name == "Quickfy"
    assert store.error is None


@pytest.mark.asyncio
async def test_storage_failure_on_load_sets_error():
    from brand_dna.services.fonts import FontLoader
    from brand_dna.services.store import BrandStore
    store = BrandStore(storage=_broken_storage(), font_loader=FontLoader())
    await store.load_brand()
    assert store.current is None
    assert "storage unavailable" in store.error


# ── Round trip ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_save_then_load_round_trip():
    from brand_dna.services.store import BrandStore
    store = _store()
    await store.load_brand()
    store.update_metadata({"name": "Acme", "tagline": "Built to last"})
    store.update_colors({"light": {"primary": "10 80% 45%"}})

    result = await store.save_brand()
    assert result.valid is True
    assert store.has_unsaved_changes is False

    reloaded = BrandStore(storage=store.storage, font_loader=store.font_loader)
    await reloaded.load_brand()
    assert reloaded.current == store.current
    assert reloaded.current.to_wire() == store.current.to_wire()
    assert reloaded.has_unsaved_changes is False


@pytest.mark.asyncio
async def test_saved_record_format():
    store = _store()
    await store.load_brand()
    await store.save_brand()
    record = json.loads(store.storage.payload)
    assert record["schemaVersion"] == 1
    assert record["state"]["brandDNA"]["metadata"]["name"] == "Quickfy"


# ── Atualizações parciais ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_partial_color_update_is_non_destructive():
    store = _store()
    await store.load_brand()
    before = store.current

    assert store.update_colors({"light": {"primary": "10 80% 50%"}}) is True

    after = store.current
    assert after.colors.light["primary"] == "10 80% 50%"
    assert after.colors.light["background"] == before.colors.light["background"]
    assert after.colors.dark == before.colors.dark
    assert after.colors.chart == before.colors.chart
    assert after.metadata.updated_at >= before.metadata.updated_at
    assert store.has_unsaved_changes is True
    # snapshot anterior não é alterado
    assert before.colors.light["primary"] == "221.2 83.2% 53.3%"


@pytest.mark.asyncio
async def test_nested_typography_and_spacing_maps_merge():
    store = _store()
    await store.load_brand()
    store.update_typography({"scale": {"base": "1.05rem"}, "lineHeight": {"tight": 1.1}})
    store.update_spacing({"radius": {"lg": "0.75rem"}})

    typography = store.current.typography
    assert typography.scale["base"] == "1.05rem"
    assert typography.scale["xl"] == "1.25rem"
    assert typography.line_height == {"tight": 1.1, "normal": 1.5, "relaxed": 1.75}
    assert store.current.spacing.radius["lg"] == "0.75rem"
    assert store.current.spacing.radius["full"] == "9999px"


@pytest.mark.asyncio
async def test_update_without_current_starts_from_default():
    store = _store()
    store.update_metadata({"name": "Acme"})
    assert store.current.metadata.name == "Acme"
    assert store.current.typography.font_heading.name == "Inter"


@pytest.mark.asyncio
async def test_ill_typed_update_is_rejected():
    store = _store()
    await store.load_brand()
    before = store.current
    assert store.update_typography({"lineHeight": {"tight": "very"}}) is False
    assert store.current is before
    assert store.error.startswith("Invalid brand data")
    assert store.has_unsaved_changes is False


@pytest.mark.asyncio
async def test_tone_of_voice_update():
    store = _store()
    await store.load_brand()
    store.update_strategy({"purpose": "Help teams ship"})
    store.update_tone_of_voice({"traits": ["Friendly", "Direct"]})
    strategy = store.current.strategy
    assert strategy.purpose == "Help teams ship"
    assert strategy.tone_of_voice.traits == ["Friendly", "Direct"]


# ── Valores de marca ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_value_list_operations():
    store = _store()
    await store.load_brand()

    value_id = store.add_value({"label": "Trust", "description": "We keep our word"})
    assert value_id
    store.add_value({"id": "v-2", "label": "Speed"})
    assert [v.label for v in store.current.strategy.values] == ["Trust", "Speed"]

    assert store.update_value("v-2", {"description": "Ship often"}) is True
    updated = store.current.strategy.values[1]
    assert (updated.id, updated.label, updated.description) == ("v-2", "Speed", "Ship often")

    assert store.remove_value(value_id) is True
    assert [v.id for v in store.current.strategy.values] == ["v-2"]


@pytest.mark.asyncio
async def test_removing_unknown_value_is_noop():
    store = _store()
    await store.load_brand()
    before = store.current
    assert store.remove_value("does-not-exist") is False
    assert store.current is before
    assert store.has_unsaved_changes is False


# ── Save ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_save_rejects_palette_size_mismatch():
    store = _store()
    await store.load_brand()
    store.update_colors({"chart": ["0 0% 10%", "0 0% 20%", "0 0% 30%", "0 0% 40%"]})

    result = await store.save_brand()
    assert result.valid is False
    assert "PALETTE_SIZE_MISMATCH" in result.codes()
    assert store.error.startswith("Invalid brand data: ")
    assert store.has_unsaved_changes is True
    assert store.storage.payload is None


@pytest.mark.asyncio
async def test_contrast_warning_does_not_block_save():
    store = _store()
    await store.load_brand()
    store.update_colors({"light": {"foreground": "0 0% 100%"}})

    result = await store.save_brand()
    assert result.valid is True
    assert "colors.light.foreground" in [w.field for w in result.warnings]
    assert store.storage.payload is not None

    report = store.contrast_report()
    finding = next(f for f in report if f.field == "colors.light.foreground")
    assert finding.ratio == 1.0


@pytest.mark.asyncio
async def test_storage_failure_on_save_keeps_edits():
    from brand_dna.services.fonts import FontLoader
    from brand_dna.services.store import BrandStore
    store = BrandStore(storage=_broken_storage(), font_loader=FontLoader())
    store.update_metadata({"name": "Acme"})

    result = await store.save_brand()
    assert result.codes() == ["STORAGE_ERROR"]
    assert "storage unavailable" in store.error
    assert store.current.metadata.name == "Acme"
    assert store.has_unsaved_changes is True


@pytest.mark.asyncio
async def test_save_without_brand():
    store = _store()
    result = await store.save_brand()
    assert result.valid is False
    assert store.error == "No brand data to save"


# ── Import / export ───────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_bad_import_leaves_current_untouched():
    store = _store()
    await store.load_brand()
    before = store.current

    result = await store.import_brand("{ definitely not json")
    assert result.codes() == ["IMPORT_PARSE_ERROR"]
    assert store.current is before
    assert store.has_unsaved_changes is False
    assert store.error.startswith("Invalid brand data")


@pytest.mark.asyncio
async def test_deeply_nested_import_rejected():
    store = _store()
    await store.load_brand()
    before = store.current

    result = await store.import_brand("[" * 100000 + "]" * 100000)
    assert result.codes() == ["IMPORT_PARSE_ERROR"]
    assert store.current is before
    assert store.has_unsaved_changes is False
    assert store.error.startswith("Invalid brand data")


@pytest.mark.asyncio
async def test_deeply_nested_record_loads_default():
    store = _store('{"state": {"brandDNA": ' + "[" * 100000 + "]" * 100000 + "}}")
    await store.load_brand()
    assert store.current.metadata.name == "Quickfy"
    assert store.error is None


@pytest.mark.asyncio
async def test_structurally_invalid_import_rejected():
    from brand_dna.services.defaults import default_brand_data
    store = _store()
    await store.load_brand()
    before = store.current
    data = default_brand_data()
    data["typography"]["fontBody"]["weights"] = [1000]

    result = await store.import_brand(json.dumps(data))
    assert result.codes() == ["INVALID_WEIGHT"]
    assert store.current is before


@pytest.mark.asyncio
async def test_export_then_import_replaces_brand():
    from brand_dna.services.defaults import get_template
    from brand_dna.services.exporter import export_as_json
    store = _store()
    await store.load_brand()
    vibrant = get_template("vibrant").build("2020-01-01T00:00:00+00:00")

    result = await store.import_brand(export_as_json(vibrant))
    assert result.valid is True
    assert store.current.metadata.name == "Vibrant Brand"
    assert store.current.colors == vibrant.colors
    assert store.current.metadata.updated_at > "2020-01-01T00:00:00+00:00"
    assert store.has_unsaved_changes is True
    assert "exportedAt" not in store.current.to_wire()


@pytest.mark.asyncio
async def test_preview_import_leaves_store_untouched():
    from brand_dna.services.defaults import get_template
    from brand_dna.services.exporter import export_as_json
    store = _store()
    await store.load_brand()
    before = store.current

    outcome = store.preview_import(export_as_json(get_template("professional").build()))
    assert outcome["preview"].valid is True
    assert "Brand Name" in [d.field for d in outcome["differences"]]
    assert store.current is before
    assert store.has_unsaved_changes is False


@pytest.mark.asyncio
async def test_import_sanitizes_text():
    from brand_dna.services.defaults import default_brand_data
    store = _store()
    data = default_brand_data()
    data["metadata"]["name"] = "<script>alert(1)</script>Acme"
    result = await store.import_brand(json.dumps(data))
    assert result.valid is True
    assert store.current.metadata.name == "Acme"


@pytest.mark.asyncio
async def test_export_requires_current():
    from brand_dna.core.errors import BrandNotLoadedError
    store = _store()
    with pytest.raises(BrandNotLoadedError):
        store.export_brand()


@pytest.mark.asyncio
async def test_export_json_contains_export_metadata():
    store = _store()
    await store.load_brand()
    payload = json.loads(store.export_brand())
    assert payload["exportVersion"] == "1.0.0"
    assert "exportedAt" in payload


# ── Substituição e templates ──────────────────────────────────────────────

@pytest.mark.asyncio
async def test_reset_marks_unsaved():
    store = _store()
    await store.load_brand()
    store.update_metadata({"name": "Acme"})
    await store.save_brand()
    store.reset()
    assert store.current.metadata.name == "Quickfy"
    assert store.has_unsaved_changes is True


@pytest.mark.asyncio
async def test_apply_template():
    store = _store()
    await store.load_brand()
    assert store.apply_template("minimal") is True
    assert store.current.metadata.name == "Minimal Brand"
    assert store.has_unsaved_changes is True

    assert store.apply_template("brutalist") is False
    assert store.current.metadata.name == "Minimal Brand"
    assert "brutalist" in store.error


@pytest.mark.asyncio
async def test_set_brand_and_mark_as_saved():
    from brand_dna.services.defaults import get_template
    store = _store()
    professional = get_template("professional").build()
    store.set_brand(professional)
    assert store.current is professional
    assert store.has_unsaved_changes is True
    store.mark_as_saved()
    assert store.has_unsaved_changes is False


# ── Concorrência (geração) ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_stale_load_discarded_after_reset():
    from brand_dna.services.defaults import get_template
    from brand_dna.services.fonts import FontLoader
    from brand_dna.services.storage import encode_record
    from brand_dna.services.store import BrandStore
    storage = _slow_storage(encode_record(get_template("professional").build().to_wire()))
    store = BrandStore(storage=storage, font_loader=FontLoader())

    load = asyncio.create_task(store.load_brand())
    await asyncio.sleep(0)
    assert store.is_loading is True

    store.reset()
    storage.release.set()
    await load

    assert store.current.metadata.name == "Quickfy"
    assert store.has_unsaved_changes is True
    assert store.is_loading is False


@pytest.mark.asyncio
async def test_slow_load_does_not_clobber_import():
    from brand_dna.services.defaults import get_template
    from brand_dna.services.exporter import export_as_json
    from brand_dna.services.fonts import FontLoader
    from brand_dna.services.storage import encode_record
    from brand_dna.services.store import BrandStore
    storage = _slow_storage(encode_record(get_template("minimal").build().to_wire()))
    store = BrandStore(storage=storage, font_loader=FontLoader())

    load = asyncio.create_task(store.load_brand())
    await asyncio.sleep(0)
    result = await store.import_brand(export_as_json(get_template("vibrant").build()))
    assert result.valid is True

    storage.release.set()
    await load
    assert store.current.metadata.name == "Vibrant Brand"
    assert store.has_unsaved_changes is True


@pytest.mark.asyncio
async def test_rejected_import_does_not_discard_load():
    from brand_dna.services.defaults import get_template
    from brand_dna.services.fonts import FontLoader
    from brand_dna.services.storage import encode_record
    from brand_dna.services.store import BrandStore
    storage = _slow_storage(encode_record(get_template("professional").build().to_wire()))
    store = BrandStore(storage=storage, font_loader=FontLoader())

    load = asyncio.create_task(store.load_brand())
    await asyncio.sleep(0)
    generation = store.generation
    result = await store.import_brand("{not json")
    assert result.codes() == ["IMPORT_PARSE_ERROR"]
    assert store.generation == generation

    storage.release.set()
    await load
    assert store.current.metadata.name == "Professional Brand"
    assert store.has_unsaved_changes is False


@pytest.mark.asyncio
async def test_import_completing_after_reset_is_flagged_stale():
    from brand_dna.services.defaults import get_template
    from brand_dna.services.exporter import export_as_json
    store = _store()
    await store.load_brand()

    task = asyncio.create_task(store.import_brand(export_as_json(get_template("vibrant").build())))
    await asyncio.sleep(0)
    store.reset()
    result = await task

    assert result.valid is True
    assert "STALE_IMPORT" in [w.code for w in result.warnings]
    assert store.current.metadata.name == "Quickfy"


@pytest.mark.asyncio
async def test_edits_during_save_stay_unsaved():
    from brand_dna.services.fonts import FontLoader
    from brand_dna.services.storage import MemoryBrandStorage
    from brand_dna.services.store import BrandStore

    class SlowWrite(MemoryBrandStorage):
        def __init__(self):
            super().__init__()
            self.release = asyncio.Event()

        async def _write(self, payload):
            await self.release.wait()
            await super()._write(payload)

    storage = SlowWrite()
    store = BrandStore(storage=storage, font_loader=FontLoader())
    await store.load_brand()
    store.update_metadata({"name": "First"})

    save = asyncio.create_task(store.save_brand())
    await asyncio.sleep(0)
    store.update_metadata({"name": "Second"})
    storage.release.set()
    result = await save

    assert result.valid is True
    assert "First" in storage.payload
    assert store.has_unsaved_changes is True


# ── Ciclo de vida e tema ──────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_close_flushes_unsaved_changes():
    store = _store()
    await store.start()
    store.update_metadata({"name": "Flushed Co"})
    await store.close(flush=True)
    assert "Flushed Co" in store.storage.payload


@pytest.mark.asyncio
async def test_close_without_flush():
    store = _store()
    await store.start()
    store.update_metadata({"name": "Dropped Co"})
    await store.close(flush=False)
    assert store.storage.payload is None


@pytest.mark.asyncio
async def test_async_context_manager():
    from brand_dna.services.fonts import FontLoader
    from brand_dna.services.storage import MemoryBrandStorage
    from brand_dna.services.store import BrandStore
    storage = MemoryBrandStorage()
    async with BrandStore(storage=storage, font_loader=FontLoader()) as store:
        assert store.current.metadata.name == "Quickfy"
        store.update_metadata({"name": "Context Co"})
    assert "Context Co" in storage.payload


@pytest.mark.asyncio
async def test_apply_theme_without_brand_is_noop():
    store = _store()
    assert await store.apply_theme() is None


@pytest.mark.asyncio
async def test_apply_theme_scoped():
    from brand_dna.services.fonts import FontLoader
    from brand_dna.services.storage import MemoryBrandStorage
    from brand_dna.services.store import BrandStore
    from brand_dna.services.theme import PreviewScope

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    store = BrandStore(storage=MemoryBrandStorage(), font_loader=FontLoader(client=client))
    await store.load_brand()
    scope = PreviewScope()
    try:
        application = await store.apply_theme(scope)
    finally:
        await client.aclose()

    assert application is not None
    assert scope.resolve("primary") == "221.2 83.2% 53.3%"
    assert store.error
