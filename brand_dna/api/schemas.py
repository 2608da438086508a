"""Pydantic schemas for the Brand DNA MCP tools."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


class IssueSchema(BaseModel):
    """A structural error or an advisory contrast finding."""
    field: str = Field(..., description="Caminho do campo (ex: colors.light.primary)")
    code: str = Field(..., description="Código estável do erro (ex: INVALID_COLOR_FORMAT)")
    message: str = Field("", description="Mensagem descritiva")
    ratio: Optional[float] = Field(None, description="Razão de contraste, apenas para CONTRAST_WARNING")
    level: Optional[str] = Field(None, description="Nível WCAG atingido, apenas para CONTRAST_WARNING")


class ValidationResponse(BaseModel):
    """Result of structural validation."""
    valid: bool = Field(..., description="Se a configuração passou na validação estrutural")
    errors: List[IssueSchema] = Field(default_factory=list, description="Erros bloqueantes")
    warnings: List[IssueSchema] = Field(default_factory=list, description="Avisos de contraste (não bloqueiam)")


class BrandStateResponse(BaseModel):
    """Snapshot of the brand store."""
    brand: Optional[Dict[str, Any]] = Field(None, description="Configuração atual (camelCase) ou null")
    is_loading: bool = Field(False, description="Se há operação assíncrona em andamento")
    error: Optional[str] = Field(None, description="Última mensagem de erro legível")
    has_unsaved_changes: bool = Field(False, description="Se há alterações não persistidas")


class MutationResponse(BrandStateResponse):
    """Outcome of a store mutation plus the resulting state."""
    success: bool = Field(..., description="Se a operação foi aplicada")
    validation: Optional[ValidationResponse] = Field(None, description="Resultado da validação, quando aplicável")


class ContrastResponse(BaseModel):
    """WCAG 2.1 contrast between two HSL colors."""
    foreground: str = Field(..., description="Cor do texto (HSL)")
    background: str = Field(..., description="Cor de fundo (HSL)")
    ratio: float = Field(..., ge=1, le=21, description="Razão de contraste (1-21)")
    aa: bool = Field(..., description="AA texto normal (>= 4.5)")
    aa_large: bool = Field(..., description="AA texto grande (>= 3.0)")
    aaa: bool = Field(..., description="AAA texto normal (>= 7.0)")
    level: Literal["AAA", "AA", "AA-large", "fail"] = Field(..., description="Maior nível atingido")


class ExportResponse(BaseModel):
    """Serialized brand configuration."""
    format: Literal["json", "css", "tailwind", "typescript"] = Field(..., description="Formato de exportação")
    content: str = Field(..., description="Conteúdo exportado")
    share_token: Optional[str] = Field(None, description="Token de compartilhamento (apenas json)")


class ExportSizeSchema(BaseModel):
    """Size of one export format."""
    size: int = Field(..., description="Tamanho em bytes (UTF-8)")
    size_formatted: str = Field(..., description="Tamanho legível (ex: 2.4 KB)")
    lines: int = Field(..., description="Quantidade de linhas")


class BrandDifferenceSchema(BaseModel):
    """A headline field that an import would change."""
    field: str = Field(..., description="Campo comparado (ex: Primary Color)")
    current: Any = Field(None, description="Valor atual")
    imported: Any = Field(None, description="Valor importado")


class ImportPreviewResponse(BaseModel):
    """Import payload summary, computed without applying it."""
    valid: bool = Field(..., description="Se o payload seria aceito na importação")
    brand_name: str = Field("Unknown", description="Nome da marca importada")
    version: str = Field("Unknown", description="Versão da marca importada")
    colors: int = Field(0, description="Quantidade de cores no tema claro")
    fonts: int = Field(0, description="Quantidade de fontes (heading, body, mono)")
    assets: int = Field(0, description="Quantidade de logos/favicon presentes")
    warnings: List[str] = Field(default_factory=list, description="Avisos não bloqueantes")
    errors: List[str] = Field(default_factory=list, description="Erros que bloqueiam a importação")
    differences: List[BrandDifferenceSchema] = Field(default_factory=list, description="Diferenças em relação à marca atual")


class FontSchema(BaseModel):
    """A catalog font."""
    name: str = Field(..., description="Nome da família")
    category: str = Field(..., description="Categoria: sans-serif, serif, monospace, display, handwriting")
    weights: List[int] = Field(..., description="Pesos disponíveis")
    variants: int = Field(..., description="Quantidade de variantes")
    url: str = Field(..., description="URL do stylesheet")
    fallback: List[str] = Field(default_factory=list, description="Cadeia de fallback genérica")


class FontPairingSchema(BaseModel):
    """A curated heading/body pairing suggestion."""
    name: str = Field(..., description="Nome da combinação")
    heading: str = Field(..., description="Fonte de títulos")
    body: str = Field(..., description="Fonte de corpo")
    description: str = Field("", description="Descrição da combinação")


class TemplateSchema(BaseModel):
    """A predefined brand template."""
    id: str = Field(..., description="Identificador do template")
    name: str = Field(..., description="Nome exibido")
    description: str = Field("", description="Descrição")
    category: str = Field(..., description="Categoria do template")


class StyleContractResponse(BaseModel):
    """Scoped style variables rendered from the current brand."""
    selector: str = Field(..., description="Seletor do container de preview")
    theme: Literal["light", "dark"] = Field(..., description="Tema renderizado")
    variables: Dict[str, str] = Field(..., description="Variáveis CSS (--role: valor)")
    css: str = Field(..., description="Bloco CSS com temas claro e escuro")
