"""
MCP Server configuration and tools for Brand DNA management.
"""

import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from brand_dna.api.schemas import (
    BrandDifferenceSchema,
    BrandStateResponse,
    ContrastResponse,
    ExportResponse,
    ExportSizeSchema,
    FontPairingSchema,
    FontSchema,
    ImportPreviewResponse,
    IssueSchema,
    MutationResponse,
    StyleContractResponse,
    TemplateSchema,
    ValidationResponse,
)
from brand_dna.core.config import settings
from brand_dna.core.errors import BrandDNAError
from brand_dna.models.brand import ValidationResult
from brand_dna.services import BrandStore, PreviewScope, check_contrast, render_style_contract
from brand_dna.services.defaults import list_templates
from brand_dna.services.fonts import (
    FONT_CATALOG,
    get_font_pairings as catalog_pairings,
    get_fonts_by_category,
    search_fonts,
)
from brand_dna.services.importer import import_from_share_token, import_from_url
from brand_dna.services.store import STALE_IMPORT

logger = logging.getLogger(__name__)

INSTRUCTIONS = """
MCP server que gerencia o Brand DNA do tenant: cores, tipografia, espaçamento,
assets e estratégia de marca em uma única configuração versionada.

- Atualizações parciais são mescladas na configuração atual (chaves camelCase).
- save_brand valida antes de persistir; erros estruturais bloqueiam.
- Avisos de contraste WCAG são apenas informativos.
- render_style_contract gera variáveis CSS com escopo no container de preview.
"""


def _validation(result: ValidationResult) -> ValidationResponse:
    return ValidationResponse(
        valid=result.valid,
        errors=[IssueSchema(**e.model_dump()) for e in result.errors],
        warnings=[IssueSchema(**w.model_dump()) for w in result.warnings],
    )


def _state(store: BrandStore) -> Dict[str, Any]:
    return BrandStateResponse(
        brand=store.current.to_wire() if store.current is not None else None,
        is_loading=store.is_loading,
        error=store.error,
        has_unsaved_changes=store.has_unsaved_changes,
    ).model_dump()


def _mutation(store: BrandStore, success: bool, result: Optional[ValidationResult] = None) -> Dict[str, Any]:
    return MutationResponse(
        success=success,
        validation=_validation(result) if result is not None else None,
        brand=store.current.to_wire() if store.current is not None else None,
        is_loading=store.is_loading,
        error=store.error,
        has_unsaved_changes=store.has_unsaved_changes,
    ).model_dump()


async def _read_import_source(json_text: str, url: str, share_token: str) -> str:
    """Resolve exactly one import source into raw JSON text. Raises ValueError."""
    sources = [s for s in (json_text, url, share_token) if s]
    if len(sources) != 1:
        raise ValueError("Provide exactly one of json_text, url or share_token")
    if url:
        return await import_from_url(url)
    if share_token:
        return import_from_share_token(share_token)
    return json_text


def build_mcp(store: BrandStore) -> FastMCP:
    """Create the FastMCP server bound to ``store``."""
    mcp = FastMCP(
        settings.SERVICE_NAME,
        instructions=INSTRUCTIONS,
        json_response=True,
        stateless_http=True,
        transport_security=TransportSecuritySettings(enable_dns_rebinding_protection=False),
    )

    updaters = {
        "colors": store.update_colors,
        "typography": store.update_typography,
        "spacing": store.update_spacing,
        "assets": store.update_assets,
        "metadata": store.update_metadata,
        "strategy": store.update_strategy,
        "toneOfVoice": store.update_tone_of_voice,
    }

    @mcp.tool()
    async def get_brand() -> Dict[str, Any]:
        """
        Retorna a configuração de marca atual e o estado do store.

        Returns:
            Dict com brand (camelCase ou null), is_loading, error e has_unsaved_changes.
        """
        return _state(store)

    @mcp.tool()
    async def update_brand(section: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Mescla uma atualização parcial em uma seção da marca.

        Mapas aninhados (light/dark, scale, radius, ...) são mesclados chave a
        chave; listas substituem o valor anterior.

        Args:
            section: colors, typography, spacing, assets, metadata, strategy ou toneOfVoice
            patch: Campos parciais em camelCase (ex: {"light": {"primary": "220 90% 56%"}})
        """
        updater = updaters.get(section)
        if updater is None:
            logger.warning("update_brand: unknown section %s", section)
            payload = _mutation(store, False)
            payload["error"] = f"Unknown section: {section}. Expected one of {sorted(updaters)}"
            return payload
        logger.info("update_brand: section=%s keys=%s", section, list(patch))
        return _mutation(store, updater(patch))

    @mcp.tool()
    async def add_brand_value(label: str, description: str = "", icon: Optional[str] = None) -> Dict[str, Any]:
        """
        Adiciona um valor de marca em strategy.values.

        Args:
            label: Nome do valor (até 50 caracteres)
            description: Descrição (até 200 caracteres)
            icon: Ícone opcional
        """
        value_id = store.add_value({"label": label, "description": description, "icon": icon})
        payload = _mutation(store, value_id is not None)
        payload["value_id"] = value_id
        return payload

    @mcp.tool()
    async def remove_brand_value(value_id: str) -> Dict[str, Any]:
        """Remove um valor de marca pelo id. Ids inexistentes não alteram nada."""
        return _mutation(store, store.remove_value(value_id))

    @mcp.tool()
    async def reset_brand() -> Dict[str, Any]:
        """Substitui a marca atual pela configuração padrão (não salva)."""
        store.reset()
        return _mutation(store, True)

    @mcp.tool()
    async def apply_brand_template(template_id: str) -> Dict[str, Any]:
        """
        Substitui a marca atual por um template predefinido (não salva).

        Args:
            template_id: default, minimal, professional ou vibrant
        """
        return _mutation(store, store.apply_template(template_id))

    @mcp.tool()
    async def save_brand() -> Dict[str, Any]:
        """
        Valida e persiste a marca atual.

        Erros estruturais (MISSING_FIELD, INVALID_COLOR_FORMAT, INVALID_WEIGHT,
        PALETTE_SIZE_MISMATCH, ...) rejeitam o salvamento sem efeitos colaterais.
        """
        result = await store.save_brand()
        logger.info("save_brand: valid=%s errors=%d", result.valid, len(result.errors))
        return _mutation(store, result.valid, result)

    @mcp.tool()
    async def import_brand(json_text: str = "", url: str = "", share_token: str = "") -> Dict[str, Any]:
        """
        Importa uma marca exportada, substituindo a atual se for válida.

        Informe exatamente uma fonte: json_text, url ou share_token. Campos
        exportedAt/exportVersion são ignorados.
        """
        try:
            raw = await _read_import_source(json_text, url, share_token)
        except Exception as e:
            logger.error("import_brand error: %s", e)
            payload = _mutation(store, False)
            payload["error"] = f"Erro ao obter JSON da marca: {str(e)}"
            return payload

        result = await store.import_brand(raw)
        applied = result.valid and all(w.code != STALE_IMPORT for w in result.warnings)
        return _mutation(store, applied, result)

    @mcp.tool()
    async def preview_import(json_text: str = "", url: str = "", share_token: str = "") -> Dict[str, Any]:
        """
        Valida uma marca exportada sem aplicá-la e compara com a marca atual.

        Informe exatamente uma fonte: json_text, url ou share_token.

        Returns:
            Dict com valid, brand_name, version, contagens, warnings, errors e differences.
        """
        try:
            raw = await _read_import_source(json_text, url, share_token)
            outcome = store.preview_import(raw)
        except Exception as e:
            logger.error("preview_import error: %s", e)
            return ImportPreviewResponse(valid=False, errors=[str(e)]).model_dump()

        preview = outcome["preview"]
        return ImportPreviewResponse(
            **preview.model_dump(),
            differences=[BrandDifferenceSchema(**d.model_dump()) for d in outcome["differences"]],
        ).model_dump()

    @mcp.tool()
    async def export_brand(format: str = "json") -> Dict[str, Any]:
        """
        Exporta a marca atual.

        Args:
            format: json (com exportedAt/exportVersion), css (variáveis com escopo), tailwind ou typescript
        """
        try:
            content = store.export_brand(format)
            token = store.share_token() if format == "json" else None
            return ExportResponse(format=format, content=content, share_token=token).model_dump()
        except (BrandDNAError, ValueError) as e:
            logger.error("export_brand error: %s", e)
            return {"format": format, "content": "", "error": str(e)}

    @mcp.tool()
    async def get_export_summary() -> Dict[str, Any]:
        """Tamanho em bytes e quantidade de linhas de cada formato de exportação."""
        try:
            summary = store.export_summary()
        except BrandDNAError as e:
            logger.error("get_export_summary error: %s", e)
            return {"error": str(e)}
        return {fmt: ExportSizeSchema(**item).model_dump() for fmt, item in summary.items()}

    @mcp.tool()
    async def validate_brand() -> Dict[str, Any]:
        """Executa a validação estrutural e os avisos de contraste na marca atual."""
        try:
            return _validation(store.validate()).model_dump()
        except BrandDNAError as e:
            return ValidationResponse(
                valid=False,
                errors=[IssueSchema(field="", code="MISSING_FIELD", message=str(e))],
            ).model_dump()

    @mcp.tool()
    async def check_color_contrast(foreground: str, background: str) -> Dict[str, Any]:
        """
        Calcula o contraste WCAG 2.1 entre duas cores HSL ("H S% L%").

        Returns:
            Dict com ratio, aa, aa_large, aaa e level (AAA, AA, AA-large ou fail).
        """
        try:
            result = check_contrast(foreground, background)
        except ValueError as e:
            return {"foreground": foreground, "background": background, "error": str(e)}
        return ContrastResponse(
            foreground=foreground,
            background=background,
            ratio=result.ratio,
            aa=result.aa,
            aa_large=result.aa_large,
            aaa=result.aaa,
            level=result.level,
        ).model_dump()

    @mcp.tool()
    async def list_fonts(category: str = "", query: str = "") -> List[Dict[str, Any]]:
        """
        Lista fontes do catálogo.

        Args:
            category: Filtro opcional (sans-serif, serif, monospace, display, handwriting)
            query: Busca opcional por nome (sem diferenciar maiúsculas)
        """
        fonts = search_fonts(query) if query else list(FONT_CATALOG)
        if category:
            allowed = {f.name for f in get_fonts_by_category(category)}
            fonts = [f for f in fonts if f.name in allowed]
        return [
            FontSchema(
                name=f.name,
                category=f.category,
                weights=list(f.weights),
                variants=f.variants,
                url=f.url,
                fallback=list(f.fallback),
            ).model_dump()
            for f in fonts
        ]

    @mcp.tool()
    async def get_font_pairings() -> List[Dict[str, Any]]:
        """Retorna as combinações de fontes recomendadas (apenas sugestões)."""
        return [
            FontPairingSchema(name=p.name, heading=p.heading, body=p.body, description=p.description).model_dump()
            for p in catalog_pairings()
        ]

    @mcp.tool(name="render_style_contract")
    async def render_brand_style(theme: str = "light", selector: str = "") -> Dict[str, Any]:
        """
        Renderiza a marca atual em variáveis CSS com escopo.

        Seletores globais (:root, html, body, *) são recusados.

        Args:
            theme: light ou dark
            selector: Container de preview (padrão .brand-preview-scope)
        """
        if store.current is None:
            return {"error": "No brand data to render"}
        try:
            scope = PreviewScope(selector=selector or settings.PREVIEW_SCOPE_SELECTOR, theme=theme)
            contract = render_style_contract(store.current, scope.selector)
        except (BrandDNAError, ValueError) as e:
            logger.error("render_style_contract error: %s", e)
            return {"error": str(e)}
        return StyleContractResponse(
            selector=contract.selector,
            theme=scope.theme,
            variables=contract.variables(scope.theme),
            css=contract.to_css(),
        ).model_dump()

    @mcp.tool()
    async def list_brand_templates() -> List[Dict[str, Any]]:
        """Lista os templates de marca disponíveis."""
        return [
            TemplateSchema(id=t.id, name=t.name, description=t.description, category=t.category).model_dump()
            for t in list_templates()
        ]

    return mcp
