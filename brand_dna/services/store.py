"""Brand store: the stateful orchestrator around a single brand configuration.

Every mutation produces a new immutable ``BrandConfiguration`` snapshot. The
asynchronous operations (``load_brand``, ``import_brand``) capture the
generation when they start. The generation only moves when ``current`` is
replaced wholesale, so a load or import that finds it moved is discarded instead
of overwriting newer state. Rejected operations never move it.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from brand_dna.core.config import settings
from brand_dna.core.errors import BrandNotLoadedError, BrandValidationError, StorageError
from brand_dna.core.metrics import STALE_COMPLETIONS, STORE_OPERATIONS
from brand_dna.models.brand import BrandConfiguration, BrandValue, ValidationIssue, ValidationResult
from brand_dna.services import exporter, importer
from brand_dna.services.defaults import default_brand_data, get_default_brand, get_template
from brand_dna.services.fonts import FontLoader
from brand_dna.services.importer import prepare_import
from brand_dna.services.merge import deep_merge, stamp_updated
from brand_dna.services.storage import BrandStorage, decode_record, encode_record, storage_from_url
from brand_dna.services.theme import PreviewScope, ThemeApplication, ThemeRenderer
from brand_dna.services.validator import (
    IMPORT_PARSE_ERROR,
    contrast_findings,
    parse_brand,
    validate_brand_dna,
    validate_imported_json,
)

logger = logging.getLogger(__name__)

STORAGE_ERROR = "STORAGE_ERROR"
STALE_IMPORT = "STALE_IMPORT"

Patch = Mapping[str, Any]


class BrandStore:
    """Holds ``current``, ``error`` and ``has_unsaved_changes`` for one tenant brand."""

    def __init__(
        self,
        storage: Optional[BrandStorage] = None,
        font_loader: Optional[FontLoader] = None,
    ):
        self.storage = storage if storage is not None else storage_from_url()
        self.font_loader = font_loader if font_loader is not None else FontLoader()
        self.renderer = ThemeRenderer(self.font_loader)

        self.current: Optional[BrandConfiguration] = None
        self.error: Optional[str] = None
        self.has_unsaved_changes = False

        self._generation = 0
        self._inflight = 0

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def start(self) -> "BrandStore":
        await self.load_brand()
        return self

    async def close(self, flush: Optional[bool] = None) -> None:
        """Flush unsaved valid changes (when enabled) and release resources."""
        flush = settings.FLUSH_ON_SHUTDOWN if flush is None else flush
        if flush and self.has_unsaved_changes and self.current is not None:
            result = await self.save_brand()
            if not result.valid:
                logger.warning("Alterações não salvas descartadas no shutdown: %s", self.error)
        await self.storage.close()
        await self.font_loader.close()
        logger.info("Brand store encerrado")

    async def __aenter__(self) -> "BrandStore":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ── State ─────────────────────────────────────────────────────────────

    @property
    def is_loading(self) -> bool:
        return self._inflight > 0

    @property
    def generation(self) -> int:
        return self._generation

    def state(self) -> Dict[str, Any]:
        return {
            "brandDNA": self.current.to_wire() if self.current is not None else None,
            "isLoading": self.is_loading,
            "error": self.error,
            "hasUnsavedChanges": self.has_unsaved_changes,
        }

    def _advance(self) -> int:
        self._generation += 1
        return self._generation

    def _is_stale(self, generation: int, operation: str) -> bool:
        if generation == self._generation:
            return False
        STALE_COMPLETIONS.labels(operation=operation).inc()
        STORE_OPERATIONS.labels(operation=operation, status="stale").inc()
        logger.info("Descartando %s obsoleto (geração %d, atual %d)", operation, generation, self._generation)
        return True

    def _base_wire(self) -> Dict[str, Any]:
        if self.current is not None:
            return self.current.to_wire()
        return default_brand_data()

    def _commit(self, data: Mapping[str, Any], operation: str) -> bool:
        """Adopt a wire-form snapshot with a fresh ``updatedAt`` and mark it unsaved."""
        previous = self.current.metadata.updated_at if self.current is not None else None
        try:
            config = BrandConfiguration.model_validate(stamp_updated(data, previous))
        except ValidationError as e:
            self.error = f"Invalid brand data: {e.error_count()} field error(s) in {operation}"
            STORE_OPERATIONS.labels(operation=operation, status="rejected").inc()
            logger.warning("Atualização %s rejeitada: %s", operation, e)
            return False

        self.current = config
        self.has_unsaved_changes = True
        STORE_OPERATIONS.labels(operation=operation, status="success").inc()
        return True

    def _update_section(self, section: str, patch: Patch) -> bool:
        return self._commit(deep_merge(self._base_wire(), {section: dict(patch)}), f"update_{section}")

    # ── Partial updates ───────────────────────────────────────────────────

    def update_colors(self, patch: Patch) -> bool:
        return self._update_section("colors", patch)

    def update_typography(self, patch: Patch) -> bool:
        return self._update_section("typography", patch)

    def update_spacing(self, patch: Patch) -> bool:
        return self._update_section("spacing", patch)

    def update_assets(self, patch: Patch) -> bool:
        return self._update_section("assets", patch)

    def update_metadata(self, patch: Patch) -> bool:
        return self._update_section("metadata", patch)

    def update_strategy(self, patch: Patch) -> bool:
        return self._update_section("strategy", patch)

    def update_tone_of_voice(self, patch: Patch) -> bool:
        return self._update_section("strategy", {"toneOfVoice": dict(patch)})

    # ── Strategy values ───────────────────────────────────────────────────

    def _values(self, wire: Mapping[str, Any]) -> List[Dict[str, Any]]:
        strategy = wire.get("strategy") or {}
        return list(strategy.get("values") or [])

    def add_value(self, value: Union[BrandValue, Patch]) -> Optional[str]:
        """Append a value to ``strategy.values``. Returns its id."""
        if isinstance(value, BrandValue):
            entry = value.model_dump(mode="json", by_alias=True)
        else:
            entry = dict(value)
        entry.setdefault("id", str(uuid.uuid4()))

        wire = self._base_wire()
        values = self._values(wire) + [entry]
        if not self._commit(deep_merge(wire, {"strategy": {"values": values}}), "add_value"):
            return None
        return entry["id"]

    def remove_value(self, value_id: str) -> bool:
        wire = self._base_wire()
        values = self._values(wire)
        remaining = [v for v in values if v.get("id") != value_id]
        if len(remaining) == len(values):
            return False
        return self._commit(deep_merge(wire, {"strategy": {"values": remaining}}), "remove_value")

    def update_value(self, value_id: str, patch: Patch) -> bool:
        wire = self._base_wire()
        values = self._values(wire)
        if not any(v.get("id") == value_id for v in values):
            return False
        updated = [deep_merge(v, {**patch, "id": value_id}) if v.get("id") == value_id else v for v in values]
        return self._commit(deep_merge(wire, {"strategy": {"values": updated}}), "update_value")

    # ── Wholesale replacement ─────────────────────────────────────────────

    def reset(self) -> None:
        self._advance()
        self.current = get_default_brand()
        self.has_unsaved_changes = True
        self.error = None
        STORE_OPERATIONS.labels(operation="reset", status="success").inc()

    def apply_template(self, template_id: str) -> bool:
        template = get_template(template_id)
        if template is None:
            self.error = f"Unknown brand template: {template_id}"
            STORE_OPERATIONS.labels(operation="apply_template", status="rejected").inc()
            return False
        self._advance()
        self.current = template.build()
        self.has_unsaved_changes = True
        self.error = None
        STORE_OPERATIONS.labels(operation="apply_template", status="success").inc()
        return True

    def set_brand(self, config: BrandConfiguration) -> None:
        self._advance()
        self.current = config
        self.has_unsaved_changes = True
        self.error = None
        STORE_OPERATIONS.labels(operation="set_brand", status="success").inc()

    def mark_as_saved(self) -> None:
        self.has_unsaved_changes = False

    # ── Async I/O ─────────────────────────────────────────────────────────

    async def _track(self, operation: Callable[[], Any]) -> Any:
        self._inflight += 1
        try:
            return await operation()
        finally:
            self._inflight -= 1

    async def load_brand(self) -> None:
        """Adopt the persisted configuration, falling back to defaults.

        An absent or structurally invalid record degrades to the default
        configuration without setting ``error``. A storage failure sets
        ``error`` and leaves ``current`` untouched.
        """
        generation = self._generation
        self.error = None
        try:
            raw = await self._track(self.storage.read)
        except StorageError as e:
            if not self._is_stale(generation, "load"):
                self.error = str(e)
                STORE_OPERATIONS.labels(operation="load", status="error").inc()
                logger.error("Falha ao carregar marca: %s", e)
            return

        if self._is_stale(generation, "load"):
            return

        config = None
        try:
            data = decode_record(raw)
            if data is not None:
                config, result = parse_brand(data)
                if config is None:
                    logger.warning("Marca persistida inválida, usando padrão: %s", result.summary())
        except Exception as e:
            logger.exception("Erro ao decodificar marca persistida, usando padrão: %s", e)
            config = None
        if config is None:
            config = get_default_brand()

        self._advance()
        self.current = config
        self.has_unsaved_changes = False
        STORE_OPERATIONS.labels(operation="load", status="success").inc()

    async def save_brand(self) -> ValidationResult:
        """Validate then persist ``current``. A rejected save changes nothing but ``error``."""
        if self.current is None:
            self.error = "No brand data to save"
            STORE_OPERATIONS.labels(operation="save", status="rejected").inc()
            return ValidationResult.failed(
                [ValidationIssue(field="", message=self.error, code="MISSING_FIELD")]
            )

        snapshot = self.current
        result = validate_brand_dna(snapshot, source="store")
        if not result.valid:
            self.error = f"Invalid brand data: {result.summary()}"
            STORE_OPERATIONS.labels(operation="save", status="rejected").inc()
            return result

        self.error = None
        try:
            await self._track(lambda: self.storage.write(encode_record(snapshot.to_wire())))
        except StorageError as e:
            self.error = str(e)
            STORE_OPERATIONS.labels(operation="save", status="error").inc()
            logger.error("Falha ao salvar marca: %s", e)
            return ValidationResult.failed([ValidationIssue(field="", message=str(e), code=STORAGE_ERROR)])

        # edits made while the write was in flight remain unsaved
        if self.current is snapshot:
            self.has_unsaved_changes = False
        STORE_OPERATIONS.labels(operation="save", status="success").inc()
        logger.info("Marca salva: %s", snapshot.metadata.name)
        return result

    async def import_brand(self, raw: str) -> ValidationResult:
        """Validate an exported JSON document and adopt it wholesale.

        Export-only fields are stripped and free text is sanitized before the
        structural checks. A rejected import leaves ``current`` untouched. A
        valid import that completes after ``current`` was replaced is not
        applied; its result carries a ``STALE_IMPORT`` warning.
        """
        generation = self._generation
        self.error = None
        try:
            config, result = await self._track(
                lambda: asyncio.to_thread(validate_imported_json, raw, prepare_import)
            )
        except Exception as e:
            logger.exception("Erro inesperado ao importar marca: %s", e)
            config = None
            result = ValidationResult.failed(
                [ValidationIssue(field="json", message=f"Import failed: {e}", code=IMPORT_PARSE_ERROR)]
            )

        if not result.valid:
            if not self._is_stale(generation, "import"):
                self.error = f"Invalid brand data: {result.summary()}"
                STORE_OPERATIONS.labels(operation="import", status="rejected").inc()
            return result

        if self._is_stale(generation, "import"):
            stale = ValidationIssue(
                field="",
                message="Import discarded: the brand was replaced while it was being validated",
                code=STALE_IMPORT,
            )
            return ValidationResult.ok(result.warnings + [stale])

        self._advance()
        self.current = BrandConfiguration.model_validate(
            stamp_updated(config.to_wire(), config.metadata.updated_at)
        )
        self.has_unsaved_changes = True
        STORE_OPERATIONS.labels(operation="import", status="success").inc()
        logger.info("Marca importada: %s", self.current.metadata.name)
        return result

    def preview_import(self, raw: str) -> Dict[str, Any]:
        """Validate ``raw`` without applying it and diff it against ``current``."""
        preview, imported = importer.preview_import(raw)
        differences = []
        if imported is not None and self.current is not None:
            differences = importer.compare_brands(self.current, imported)
        return {"preview": preview, "differences": differences}

    # ── Read-only views ───────────────────────────────────────────────────

    def _require_current(self) -> BrandConfiguration:
        if self.current is None:
            raise BrandNotLoadedError("No brand data to export")
        return self.current

    def export_brand(self, fmt: str = "json") -> str:
        """Serialize ``current``. Raises BrandNotLoadedError or BrandValidationError."""
        return exporter.export_brand(self._require_current(), fmt)

    def share_token(self) -> str:
        return exporter.generate_share_token(self._require_current())

    def export_summary(self) -> Dict[str, Dict[str, Any]]:
        return exporter.export_summary(self._require_current())

    def validate(self) -> ValidationResult:
        return validate_brand_dna(self._require_current(), source="store")

    def contrast_report(self) -> List[ValidationIssue]:
        if self.current is None:
            return []
        return contrast_findings(self.current)

    async def apply_theme(self, scope: Optional[PreviewScope] = None) -> Optional[ThemeApplication]:
        """Render ``current`` into ``scope`` and fetch its fonts. No-op when unloaded."""
        if self.current is None:
            logger.warning("No brand data to apply")
            return None

        scope = scope if scope is not None else PreviewScope()
        try:
            application = await self.renderer.apply(self.current, scope)
        except BrandValidationError as e:
            self.error = f"Invalid brand data: {e}"
            logger.warning("Tema não aplicado: %s", e)
            return None
        if not application.ok:
            self.error = "; ".join(application.errors)
        return application
