"""
Test suite for the document type catalog.

System role: Verification of type parsing and table layouts
"""

import pytest

from backend.core.document_types import (
    CACHEABLE_TYPES,
    DOCUMENT_TYPE_INFOS,
    SAVEABLE_TYPES,
    DocumentType,
    get_table_layout,
    get_type_name,
    map_identified_type,
    parse_document_type,
)
from backend.core.exceptions import UnsupportedDocumentTypeError


class TestParseDocumentType:
    """Test suite for parse_document_type."""

    def test_should_parse_known_value(self):
        assert parse_document_type("packing_list") is DocumentType.PACKING_LIST

    def test_should_reject_unknown_value(self):
        with pytest.raises(UnsupportedDocumentTypeError) as exc_info:
            parse_document_type("invoice")

        assert exc_info.value.details["document_type"] == "invoice"

    def test_should_reject_unknown_type_unless_allowed(self):
        with pytest.raises(UnsupportedDocumentTypeError):
            parse_document_type("unknown")

        assert parse_document_type("unknown", allow_unknown=True) is DocumentType.UNKNOWN


class TestIdentificationLabels:
    """Test suite for map_identified_type."""

    @pytest.mark.parametrize(
        "label, expected",
        [
            ("NOTA_FISCAL_TRADING", DocumentType.NOTA_FISCAL),
            ("bill_of_lading", DocumentType.BL),
            (" COMPROVANTE_CAMBIO ", DocumentType.CONTRATO_CAMBIO),
            ("DESCONHECIDO", DocumentType.UNKNOWN),
            ("RECIBO", DocumentType.UNKNOWN),
            (None, DocumentType.UNKNOWN),
        ],
    )
    def test_should_map_labels(self, label, expected):
        assert map_identified_type(label) is expected


class TestLayouts:
    """Test suite for table layouts."""

    def test_commercial_invoice_items_link_to_header(self):
        layout = get_table_layout(DocumentType.COMMERCIAL_INVOICE)

        assert layout.header_table_attr == "table_commercial_invoice_headers"
        assert layout.id_field == "invoice_number"
        assert layout.children[0].link_field == "invoice_number"

    def test_bl_has_no_layout(self):
        with pytest.raises(UnsupportedDocumentTypeError):
            get_table_layout(DocumentType.BL)

    def test_saveable_and_cacheable_types(self):
        assert DocumentType.BL not in SAVEABLE_TYPES
        assert DocumentType.CONTRATO_CAMBIO not in SAVEABLE_TYPES
        assert set(CACHEABLE_TYPES) <= set(SAVEABLE_TYPES)

    def test_type_infos_should_serialize_camel_case(self):
        info = DOCUMENT_TYPE_INFOS[DocumentType.DI].to_dict()

        assert info["value"] == "di"
        assert info["isRequired"] is True
        assert info["stage"] == "processamento_nacional"
        assert info["supportedFormats"] == ["pdf"]

    def test_type_name_should_fall_back_to_raw_value(self):
        assert get_type_name("nota_fiscal") == "Nota Fiscal"
        assert get_type_name("bogus") == "bogus"
