# ── Merge parcial ─────────────────────────────────────────────────────────

def test_deep_merge_nested_and_lists():
    from brand_dna.services.merge import deep_merge
    base = {"colors": {"light": {"primary": "a", "secondary": "b"}, "chart": [1, 2, 3]}}
    patch = {"colors": {"light": {"primary": "z"}, "chart": [9]}}
    merged = deep_merge(base, patch)
    assert merged == {"colors": {"light": {"primary": "z", "secondary": "b"}, "chart": [9]}}
    # entradas intactas
    assert base["colors"]["light"]["primary"] == "a"
    assert patch == {"colors": {"light": {"primary": "z"}, "chart": [9]}}


def test_next_timestamp_never_goes_backwards():
    from brand_dna.services.merge import next_timestamp
    future = "2999-01-01T00:00:00+00:00"
    assert next_timestamp(future) == future
    assert next_timestamp("2000-01-01T00:00:00Z") > "2000-01-01T00:00:00+00:00"
    assert next_timestamp(None)


def test_stamp_updated_only_touches_updated_at():
    from brand_dna.services.defaults import default_brand_data
    from brand_dna.services.merge import stamp_updated
    data = default_brand_data("2020-01-01T00:00:00+00:00")
    stamped = stamp_updated(data)
    assert stamped["metadata"]["updatedAt"] != "2020-01-01T00:00:00+00:00"
    assert stamped["metadata"]["createdAt"] == "2020-01-01T00:00:00+00:00"
    assert stamped["colors"] == data["colors"]


# ── Default factory ───────────────────────────────────────────────────────

def test_default_brand_shape():
    from brand_dna.models.brand import CHART_SIZE, COLOR_ROLES
    from brand_dna.services.defaults import get_default_brand
    brand = get_default_brand()
    assert brand.metadata.name == "Quickfy"
    assert brand.metadata.version == "1.0.0"
    assert len(brand.colors.chart) == CHART_SIZE
    for role in COLOR_ROLES:
        assert role in brand.colors.light
        assert role in brand.colors.dark
    assert brand.typography.font_heading.name == "Inter"
    assert brand.typography.font_body.name == "Lora"
    assert brand.typography.font_mono.name == "Fira Code"


def test_default_brand_timestamps():
    from brand_dna.services.defaults import get_default_brand
    brand = get_default_brand("2026-03-01T12:00:00+00:00")
    assert brand.metadata.created_at == brand.metadata.updated_at == "2026-03-01T12:00:00+00:00"


def test_default_brand_instances_are_independent():
    from brand_dna.services.defaults import default_brand_data
    a = default_brand_data()
    a["colors"]["light"]["primary"] = "0 0% 0%"
    assert default_brand_data()["colors"]["light"]["primary"] == "221.2 83.2% 53.3%"


def test_merge_brand_defaults_fills_missing_sections():
    from brand_dna.services.defaults import merge_brand_defaults
    merged = merge_brand_defaults({"metadata": {"name": "Acme"}})
    assert merged["metadata"]["name"] == "Acme"
    assert merged["metadata"]["tagline"] == "Marketing automation platform"
    assert len(merged["colors"]["chart"]) == 5


def test_is_default_brand():
    from brand_dna.services.defaults import get_default_brand, get_template, is_default_brand
    assert is_default_brand(get_default_brand()) is True
    assert is_default_brand(get_template("vibrant").build()) is False


# ── Templates ─────────────────────────────────────────────────────────────

def test_template_ids():
    from brand_dna.services.defaults import list_templates
    assert [t.id for t in list_templates()] == ["default", "minimal", "professional", "vibrant"]


def test_every_template_builds_a_valid_brand():
    from brand_dna.services.defaults import list_templates
    from brand_dna.services.validator import validate_brand_dna
    for template in list_templates():
        result = validate_brand_dna(template.build())
        assert result.valid, (template.id, result.summary())


def test_template_overrides_keep_other_roles():
    from brand_dna.services.defaults import get_default_brand, get_template
    professional = get_template("professional").build()
    default = get_default_brand()
    assert professional.colors.light["primary"] == "210 100% 35%"
    assert professional.colors.light["background"] == default.colors.light["background"]
    assert professional.typography.font_heading.name == "Playfair Display"
    assert professional.typography.font_body.name == "Lora"


def test_unknown_template():
    from brand_dna.services.defaults import get_template
    assert get_template("brutalist") is None
