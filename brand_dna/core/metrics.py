"""Prometheus custom metrics for the Brand DNA Service."""

from prometheus_client import Counter, Histogram

# --- Validation ---
VALIDATION_TOTAL = Counter(
    "brand_validation_total",
    "Total de validações estruturais executadas",
    ["source", "result"],  # store/import/export/render, valid/invalid
)

CONTRAST_FINDINGS = Counter(
    "brand_contrast_findings_total",
    "Avisos de contraste WCAG emitidos",
    ["theme"],
)

# --- Store ---
STORE_OPERATIONS = Counter(
    "brand_store_operations_total",
    "Operações executadas no brand store",
    ["operation", "status"],  # load/save/import/reset/..., success/error/rejected/stale
)

STALE_COMPLETIONS = Counter(
    "brand_store_stale_completions_total",
    "Operações assíncronas descartadas por geração desatualizada",
    ["operation"],
)

STORAGE_DURATION = Histogram(
    "brand_storage_duration_seconds",
    "Latência de leitura/escrita no storage",
    ["backend", "operation"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5),
)

# --- Fonts ---
FONT_LOADS = Counter(
    "brand_font_loads_total",
    "Carregamentos de stylesheet de fontes",
    ["status"],  # loaded/cached/error
)
