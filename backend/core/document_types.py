"""
Trade document types.

Catalog of the document types handled by the import workflow, their
display metadata and the NocoDB tables each saveable type writes to.

Dependencies: None (pure domain layer)
System role: Document type registry shared by extraction and persistence
"""

from dataclasses import dataclass, field
from enum import Enum

from backend.core import field_mappings as fm
from backend.core.exceptions import UnsupportedDocumentTypeError


class DocumentType(str, Enum):
    """Document types known to the extraction pipeline."""

    PROFORMA_INVOICE = "proforma_invoice"
    COMMERCIAL_INVOICE = "commercial_invoice"
    PACKING_LIST = "packing_list"
    BL = "bl"
    DI = "di"
    NOTA_FISCAL = "nota_fiscal"
    SWIFT = "swift"
    NUMERARIO = "numerario"
    CONTRATO_CAMBIO = "contrato_cambio"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DocumentTypeInfo:
    """Display and workflow metadata for a document type."""

    value: DocumentType
    label: str
    description: str
    is_required: bool
    stage: str
    has_multi_step: bool
    supported_formats: tuple[str, ...] = ("pdf",)

    def to_dict(self) -> dict:
        return {
            "value": self.value.value,
            "label": self.label,
            "description": self.description,
            "isRequired": self.is_required,
            "stage": self.stage,
            "hasMultiStep": self.has_multi_step,
            "supportedFormats": list(self.supported_formats),
        }


DOCUMENT_TYPE_INFOS: dict[DocumentType, DocumentTypeInfo] = {
    info.value: info
    for info in (
        DocumentTypeInfo(
            DocumentType.PROFORMA_INVOICE, "Proforma Invoice",
            "Fatura proforma com detalhes preliminares de venda",
            is_required=True, stage="solicitado", has_multi_step=True,
        ),
        DocumentTypeInfo(
            DocumentType.COMMERCIAL_INVOICE, "Commercial Invoice",
            "Fatura comercial com informações de venda",
            is_required=False, stage="solicitado", has_multi_step=True,
        ),
        DocumentTypeInfo(
            DocumentType.PACKING_LIST, "Packing List",
            "Lista de embalagem com pesos e volumes",
            is_required=False, stage="solicitado", has_multi_step=True,
        ),
        DocumentTypeInfo(
            DocumentType.BL, "Bill of Lading (BL)",
            "Conhecimento de embarque marítimo",
            is_required=True, stage="em_transporte_internacional", has_multi_step=True,
        ),
        DocumentTypeInfo(
            DocumentType.DI, "Declaração de Importação (DI)",
            "Documento oficial de importação",
            is_required=True, stage="processamento_nacional", has_multi_step=True,
        ),
        DocumentTypeInfo(
            DocumentType.NOTA_FISCAL, "Nota Fiscal",
            "Nota fiscal nacional",
            is_required=True, stage="recebido", has_multi_step=True,
        ),
        DocumentTypeInfo(
            DocumentType.SWIFT, "SWIFT",
            "Comprovante de transferência bancária",
            is_required=False, stage="solicitado", has_multi_step=False,
        ),
        DocumentTypeInfo(
            DocumentType.NUMERARIO, "Numerário",
            "Documento de câmbio",
            is_required=False, stage="solicitado", has_multi_step=True,
        ),
        DocumentTypeInfo(
            DocumentType.CONTRATO_CAMBIO, "Contrato de Câmbio",
            "Contrato de câmbio da operação",
            is_required=False, stage="solicitado", has_multi_step=False,
        ),
    )
}

# Labels emitted by the identification prompt
IDENTIFICATION_TYPE_MAP: dict[str, DocumentType] = {
    "PROFORMA_INVOICE": DocumentType.PROFORMA_INVOICE,
    "COMMERCIAL_INVOICE": DocumentType.COMMERCIAL_INVOICE,
    "PACKING_LIST": DocumentType.PACKING_LIST,
    "SWIFT": DocumentType.SWIFT,
    "DI": DocumentType.DI,
    "NUMERARIO": DocumentType.NUMERARIO,
    "NOTA_FISCAL_TRADING": DocumentType.NOTA_FISCAL,
    "BILL_OF_LADING": DocumentType.BL,
    "CONTRATO_CAMBIO": DocumentType.CONTRATO_CAMBIO,
    "COMPROVANTE_CAMBIO": DocumentType.CONTRATO_CAMBIO,
    "DESCONHECIDO": DocumentType.UNKNOWN,
}


@dataclass(frozen=True)
class ChildTable:
    """A NocoDB table holding rows that belong to a document header."""

    section: str
    table_attr: str
    mapping: dict[str, str]
    # Header document field copied into each child row (e.g. invoice number)
    link_field: str | None = None


@dataclass(frozen=True)
class DocumentTableLayout:
    """Where and how a saveable document type is persisted.

    ``table_attr`` values name attributes of NocoDBSettings so table ids
    stay configurable per environment.
    """

    header_table_attr: str
    header_mapping: dict[str, str]
    id_field: str
    children: tuple[ChildTable, ...] = field(default_factory=tuple)


DOCUMENT_TABLE_LAYOUTS: dict[DocumentType, DocumentTableLayout] = {
    DocumentType.DI: DocumentTableLayout(
        header_table_attr="table_di_headers",
        header_mapping=fm.DI_HEADER,
        id_field="numero_DI",
        children=(
            ChildTable("items", "table_di_items", fm.DI_ITEM, link_field="numero_di"),
            ChildTable("taxInfo", "table_di_tax_info", fm.DI_TAX_ITEM),
        ),
    ),
    DocumentType.COMMERCIAL_INVOICE: DocumentTableLayout(
        header_table_attr="table_commercial_invoice_headers",
        header_mapping=fm.COMMERCIAL_INVOICE_HEADER,
        id_field="invoice_number",
        children=(
            ChildTable(
                "items", "table_commercial_invoice_items", fm.COMMERCIAL_INVOICE_ITEM,
                link_field="invoice_number",
            ),
        ),
    ),
    DocumentType.PACKING_LIST: DocumentTableLayout(
        header_table_attr="table_packing_list_headers",
        header_mapping=fm.PACKING_LIST_HEADER,
        id_field="invoice",
        children=(
            ChildTable("containers", "table_packing_list_containers", fm.PACKING_LIST_CONTAINER),
            ChildTable("items", "table_packing_list_items", fm.PACKING_LIST_ITEM),
        ),
    ),
    DocumentType.PROFORMA_INVOICE: DocumentTableLayout(
        header_table_attr="table_proforma_invoice_headers",
        header_mapping=fm.PROFORMA_INVOICE_HEADER,
        id_field="invoice_number",
        children=(
            ChildTable(
                "items", "table_proforma_invoice_items", fm.PROFORMA_INVOICE_ITEM,
                link_field="invoice_number",
            ),
        ),
    ),
    DocumentType.SWIFT: DocumentTableLayout(
        header_table_attr="table_swift",
        header_mapping=fm.SWIFT,
        id_field="senders_reference",
    ),
    DocumentType.NUMERARIO: DocumentTableLayout(
        header_table_attr="table_numerario",
        header_mapping=fm.NUMERARIO,
        id_field="invoice_number",
    ),
    DocumentType.NOTA_FISCAL: DocumentTableLayout(
        header_table_attr="table_nota_fiscal_headers",
        header_mapping=fm.NOTA_FISCAL_HEADER,
        id_field="numero_nf",
        children=(
            ChildTable(
                "items", "table_nota_fiscal_items", fm.NOTA_FISCAL_ITEM,
                link_field="invoice_number",
            ),
        ),
    ),
}

SAVEABLE_TYPES: tuple[DocumentType, ...] = tuple(DOCUMENT_TABLE_LAYOUTS)

# Types whose processed rows can be served back from the hash cache
CACHEABLE_TYPES: tuple[DocumentType, ...] = (
    DocumentType.DI,
    DocumentType.COMMERCIAL_INVOICE,
    DocumentType.PACKING_LIST,
    DocumentType.PROFORMA_INVOICE,
    DocumentType.SWIFT,
    DocumentType.NUMERARIO,
)


def parse_document_type(value: str, allow_unknown: bool = False) -> DocumentType:
    """
    Parse a document type string.

    Raises:
        UnsupportedDocumentTypeError: If the value is not a known type, or
            is ``unknown`` while ``allow_unknown`` is False
    """
    try:
        document_type = DocumentType(value)
    except ValueError:
        raise UnsupportedDocumentTypeError(value)
    if document_type is DocumentType.UNKNOWN and not allow_unknown:
        raise UnsupportedDocumentTypeError(value)
    return document_type


def map_identified_type(label: str | None) -> DocumentType:
    """Map an identification label (e.g. ``NOTA_FISCAL_TRADING``) to a DocumentType."""
    if not label:
        return DocumentType.UNKNOWN
    return IDENTIFICATION_TYPE_MAP.get(label.strip().upper(), DocumentType.UNKNOWN)


def get_table_layout(document_type: DocumentType) -> DocumentTableLayout:
    layout = DOCUMENT_TABLE_LAYOUTS.get(document_type)
    if layout is None:
        raise UnsupportedDocumentTypeError(document_type.value)
    return layout


def get_type_name(document_type: str) -> str:
    """Human-readable name for a document type string, falling back to the raw value."""
    try:
        return DOCUMENT_TYPE_INFOS[DocumentType(document_type)].label
    except (ValueError, KeyError):
        return document_type
