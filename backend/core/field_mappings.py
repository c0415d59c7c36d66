"""
Field mappings between extracted document fields and NocoDB columns.

Every mapping goes from the field name produced by extraction to the
column name stored in NocoDB. Reading rows back applies the reverse.

Dependencies: None (pure domain layer)
System role: Vocabulary translation for document persistence
"""

from typing import Any


def _identity(*fields: str) -> dict[str, str]:
    return {field: field for field in fields}


PROCESSOS_IMPORTACAO = _identity(
    "numero_processo",
    "invoiceNumber",
    "numero_di",
    "empresa",
    "cnpj_empresa",
    "responsavel",
    "email_responsavel",
    "data_inicio",
    "data_conclusao",
    "status",
    "etapa",
    "valor_total_estimado",
    "moeda",
    "porto_embarque",
    "porto_destino",
    "condicoes_pagamento",
    "proforma_invoice_id",
    "proforma_invoice_doc_id",
    "descricao",
    "criado_por",
    "documentsPipeline",
)

PROCESSO_DOCUMENTO_REL = _identity("processo_importacao", "hash_arquivo_upload")

ETAPA_AUDIT = _identity(
    "hash_arquivo_origem",
    "numero_processo",
    "responsavel",
    "ultima_etapa",
    "nova_etapa",
    "descricao_regra",
)

DI_HEADER = _identity(
    "numero_DI",
    "numero_invoice",
    "data_registro_DI",
    "nome_importador",
    "cnpj_importador",
    "nome_adquirente",
    "cnpj_adquirente",
    "representante_legal_nome",
    "representante_legal_CPF",
    "modalidade_despacho",
    "quantidade_total_adicoes",
    "recinto_aduaneiro",
    "numero_BL",
    "numero_CE_Mercante",
    "nome_navio",
    "lista_containers",
    "data_chegada",
    "peso_bruto_total_kg",
    "peso_liquido_total_kg",
    "quantidade_total_embalagens",
    "taxa_dolar",
    "frete_usd",
    "seguro_usd",
    "VMLE_usd",
    "VMLD_usd",
    "tributo_II_recolhido_total",
    "tributo_IPI_suspenso_total",
    "tributo_IPI_recolhido_total",
    "tributo_PIS_recolhido_total",
    "tributo_COFINS_recolhido_total",
    "valor_total_impostos_recolhidos",
)

DI_ITEM = _identity(
    "numero_di",
    "numero_adicao",
    "invoice_number",
    "ncm_completa",
    "codigo_item",
    "descricao_completa_detalhada_produto",
    "reference",
    "exportador_nome",
    "pais_origem",
    "pais_aquisicao",
    "incoterm",
    "quantidade_produto",
    "unidade_comercial_produto",
    "peso_liquido_adicao_kg",
    "valor_unitario_produto_usd",
    "valor_total_item_usd",
)

DI_TAX_ITEM = _identity(
    "invoice_number",
    "numero_adicao",
    "codigo_item",
    "quantidade_item",
    "vucv_usd",
    "valor_total_item_usd",
    "participacao_percentual_item",
    "regime_tributacao_ii",
    "aliquota_ii_percentual",
    "valor_ii_recolhido",
    "regime_tributacao_ipi",
    "aliquota_ipi_percentual",
    "valor_ipi_recolhido",
    "base_calculo_pis",
    "aliquota_pis_percentual",
    "valor_pis_recolhido",
    "base_calculo_cofins",
    "aliquota_cofins_percentual",
    "valor_cofins_recolhido",
    "valor_total_tributos",
)

COMMERCIAL_INVOICE_HEADER = {
    "invoice_number": "invoiceNumber",
    "invoice_date": "dataFatura",
    "load_port": "portoEmbarque",
    "destination_port": "portoDestino",
    "shipper_company": "nomeExportador",
    "shipper_address": "enderecoExportador",
    "shipper_tel": "telefoneExportador",
    "shipper_email": "emailExportador",
    "consignee_company": "nomeImportador",
    "consignee_address": "enderecoImportador",
    "consignee_cnpj": "cnpjImportador",
    "notify_party_company": "nomeNotificado",
    "notify_party_cnpj": "cnpjNotificado",
    "notify_party_address": "enderecoNotificado",
    "total_amount_usd": "valorTotalUsd",
    "total_amount_words": "valorTotalExtenso",
}

COMMERCIAL_INVOICE_ITEM = {
    "invoice_number": "invoiceNumber",
    "item_number": "numeroItem",
    "reference": "referencia",
    "name_chinese": "nomeChinês",
    "name_english": "nomeIngles",
    "quantity": "quantidade",
    "unit": "unidade",
    "unit_price_usd": "precoUnitarioUsd",
    "amount_usd": "valorTotalUsd",
}

PACKING_LIST_HEADER = {
    "consignee": "destinatario",
    "contracted_company": "empresa_contratada",
    "contracted_email": "email_contratado",
    "date": "data",
    "destination": "destino",
    "invoice": "invoiceNumber",
    "items_qty_total": "quantidade_total_itens",
    "load_port": "porto_embarque",
    "notify_party": "parte_notificada",
    "package_total": "total_volumes",
    "total_gw": "peso_bruto_total",
}

PACKING_LIST_CONTAINER = {
    "booking": "reserva",
    "container": "container",
    "from_item": "item_inicial",
    "from_package": "pacote_inicial",
    "invoice": "invoiceNumber",
    "peso_bruto": "peso_bruto",
    "quantidade_de_pacotes": "quantidade_volumes",
    "tipo_container": "tipo_container",
    "to_item": "item_final",
    "to_package": "pacote_final",
    "volume": "volume",
}

PACKING_LIST_ITEM = {
    "altura_pacote": "altura_pacote",
    "comprimento_pacote": "comprimento_pacote",
    "container": "container",
    "descricao_chines": "descricao_chines",
    "descricao_ingles": "descricao_ingles",
    "numero_item": "numero_item",
    "largura_pacote": "largura_pacote",
    "marcacao_do_pacote": "marcacao_pacote",
    "peso_bruto_por_pacote": "peso_bruto_unitario",
    "peso_bruto_total": "peso_bruto_total",
    "peso_liquido_por_pacote": "peso_liquido_unitario",
    "peso_liquido_total": "peso_liquido_total",
    "quantidade_de_pacotes": "quantidade_pacotes",
    "quantidade_por_pacote": "quantidade_unitaria",
    "quantidade_total": "quantidade_total",
    "reference": "referencia",
}

PROFORMA_INVOICE_HEADER = {
    "contracted_company": "empresa_contratada",
    "contracted_email": "email_contratado",
    "invoice_number": "invoiceNumber",
    "date": "data_fatura",
    "load_port": "porto_embarque",
    "destination": "destino",
    "total_price": "preco_total",
    "payment_terms": "condicoes_pagamento",
    "package": "embalagem",
}

PROFORMA_INVOICE_ITEM = {
    "invoice_number": "invoiceNumber",
    "item_number": "numero_item",
    "item": "item",
    "description_in_english": "descricao_ingles",
    "description_in_chinese": "descricao_chines",
    "specifications": "especificacoes",
    "quantity": "quantidade",
    "unit_price": "preco_unitario",
    "package": "embalagem",
}

SWIFT = {
    "message_type": "tipo_mensagem",
    "senders_reference": "referencia_remetente",
    "transaction_reference": "referencia_transacao",
    "uetr": "uetr",
    "bank_operation_code": "codigo_operacao_bancaria",
    "value_date": "data_valor",
    "currency": "moeda",
    "amount": "valor",
    "fatura": "invoiceNumber",
    "details_of_charges": "detalhes_tarifas",
    "remittance_information": "informacoes_remessa",
    "account_with_institution_bic": "bic_instituicao_conta",
    "ordering_customer_name": "cliente_ordenante_nome",
    "ordering_customer_address": "cliente_ordenante_endereco",
    "ordering_institution_name": "instituicao_ordenante_nome",
    "ordering_institution_bic": "instituicao_ordenante_bic",
    "ordering_institution_address": "instituicao_ordenante_endereco",
    "receiver_institution_name": "instituicao_receptora_nome",
    "receiver_institution_bic": "instituicao_receptora_bic",
    "beneficiary_account": "beneficiario_conta",
    "beneficiary_name": "beneficiario_nome",
    "beneficiary_address": "beneficiario_endereco",
}

NUMERARIO = {
    "invoice_number": "invoiceNumber",
    "tipo_documento": "tipo_documento",
    "data_documento": "data_documento",
    "cliente_cnpj": "cnpj_cliente",
    "cliente_nome": "nome_cliente",
    "cambio_brl": "taxa_cambio",
    "valor_reais": "valor_reais",
    "banco": "banco",
    "conta_destino": "conta_destino",
    "forma_pagamento": "forma_pagamento",
    "parcelas": "parcelas",
    "impostos": "impostos",
    "taxas": "taxas",
    "desconto": "desconto",
    "valor_liquido": "valor_liquido",
    "vendedor": "vendedor",
    "comissao": "comissao",
    "referencia_pedido": "referencia_pedido",
    "observacoes": "observacoes",
    "categoria": "categoria",
    "nf_emitida": "nf_emitida",
    "numero_nf": "numero_nf",
    "data_emissao_nf": "data_emissao_nf",
    "chave_nf": "chave_nf",
    "created_by": "criado_por",
    "updated_by": "atualizado_por",
}

NOTA_FISCAL_HEADER = {
    "invoice_number": "invoiceNumber",
    "numero_nf": "numeroNF",
    "serie": "serie",
    "data_emissao": "dataEmissao",
    "data_saida": "dataSaida",
    "hora_saida": "horaSaida",
    "chave_acesso": "chaveAcesso",
    "natureza_operacao": "naturezaOperacao",
    "protocolo_autorizacao": "protocoloAutorizacao",
    "emitente_razao_social": "emitenteRazaoSocial",
    "destinatario_razao_social": "destinatarioRazaoSocial",
    "valor_total_produtos": "valorTotalProdutos",
    "valor_total_nota": "valorTotalNota",
    "base_calculo_icms": "baseCalculoIcms",
    "valor_icms": "valorIcms",
    "valor_total_ipi": "valorTotalIpi",
    "valor_frete": "valorFrete",
    "valor_seguro": "valorSeguro",
    "desconto": "desconto",
    "outras_despesas": "outrasDespesas",
    "frete_por_conta": "fretePorConta",
    "quantidade_volumes": "quantidadeVolumes",
    "especie_volumes": "especieVolumes",
    "peso_bruto": "pesoBruto",
    "peso_liquido": "pesoLiquido",
    "informacoes_complementares": "informacoesComplementares",
    "informacoes_fisco": "informacoesFisco",
    "di_number": "diNumber",
}

NOTA_FISCAL_ITEM = {
    "invoice_number": "invoiceNumber",
    "chave_acesso": "chaveAcesso",
    "codigo_produto": "codigoProduto",
    "descricao_produto": "descricaoProduto",
    "ncm_sh": "ncmSh",
    "cfop": "cfop",
    "unidade": "unidade",
    "quantidade": "quantidade",
    "valor_unitario": "valorUnitario",
    "valor_total_produto": "valorTotalProduto",
    "base_icms": "baseIcms",
    "valor_icms_produto": "valorIcmsProduto",
    "aliquota_icms": "aliquotaIcms",
    "valor_ipi_produto": "valorIpiProduto",
    "aliquota_ipi": "aliquotaIpi",
    "reference": "reference",
}

TABLE_FIELD_MAPPINGS: dict[str, dict[str, str]] = {
    "PROCESSOS_IMPORTACAO": PROCESSOS_IMPORTACAO,
    "PROCESSO_DOCUMENTO_REL": PROCESSO_DOCUMENTO_REL,
    "ETAPA_AUDIT": ETAPA_AUDIT,
    "DI_HEADER": DI_HEADER,
    "DI_ITEM": DI_ITEM,
    "DI_TAX_ITEM": DI_TAX_ITEM,
    "COMMERCIAL_INVOICE_HEADER": COMMERCIAL_INVOICE_HEADER,
    "COMMERCIAL_INVOICE_ITEM": COMMERCIAL_INVOICE_ITEM,
    "PACKING_LIST_HEADER": PACKING_LIST_HEADER,
    "PACKING_LIST_CONTAINER": PACKING_LIST_CONTAINER,
    "PACKING_LIST_ITEM": PACKING_LIST_ITEM,
    "PROFORMA_INVOICE_HEADER": PROFORMA_INVOICE_HEADER,
    "PROFORMA_INVOICE_ITEM": PROFORMA_INVOICE_ITEM,
    "SWIFT": SWIFT,
    "NUMERARIO": NUMERARIO,
    "NOTA_FISCAL_HEADER": NOTA_FISCAL_HEADER,
    "NOTA_FISCAL_ITEM": NOTA_FISCAL_ITEM,
}


def transform_to_nocodb(data: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    """
    Rename document fields to NocoDB columns.

    Only keys present both in the mapping and in ``data`` are kept.
    """
    return {column: data[field] for field, column in mapping.items() if field in data}


def transform_from_nocodb(row: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    """Rename NocoDB columns back to document fields, dropping unmapped columns."""
    reverse = {column: field for field, column in mapping.items()}
    return {reverse[column]: value for column, value in row.items() if column in reverse}


# Nested SWIFT groups and the sub-fields stored for each
_SWIFT_GROUPS: dict[str, tuple[str, ...]] = {
    "ordering_customer": ("name", "address"),
    "ordering_institution": ("name", "bic", "address"),
    "receiver_institution": ("name", "bic"),
    "beneficiary": ("account", "name", "address"),
}

_SWIFT_SCALARS = (
    "message_type",
    "senders_reference",
    "transaction_reference",
    "uetr",
    "bank_operation_code",
    "value_date",
    "currency",
    "amount",
    "fatura",
    "details_of_charges",
    "remittance_information",
    "account_with_institution_bic",
)


def flatten_swift(data: dict[str, Any]) -> dict[str, Any]:
    """
    Flatten nested SWIFT parties into ``<group>_<field>`` keys.

    ``value_date`` falls back to ``data_valor`` and ``fatura`` to
    ``invoiceNumber`` since older prompts emitted those names.
    """
    flat: dict[str, Any] = {key: data.get(key) for key in _SWIFT_SCALARS}
    flat["value_date"] = data.get("value_date") or data.get("data_valor")
    flat["fatura"] = data.get("fatura") or data.get("invoiceNumber")
    for group, fields in _SWIFT_GROUPS.items():
        nested = data.get(group)
        if isinstance(nested, dict):
            for field in fields:
                flat[f"{group}_{field}"] = nested.get(field) or ""
    return {key: value for key, value in flat.items() if value is not None}


def unflatten_swift(flat: dict[str, Any]) -> dict[str, Any]:
    """Rebuild nested SWIFT parties; a group is omitted when all its fields are empty."""
    data: dict[str, Any] = {key: flat.get(key) for key in _SWIFT_SCALARS}
    for group, fields in _SWIFT_GROUPS.items():
        values = {field: flat.get(f"{group}_{field}") or "" for field in fields}
        if any(values.values()):
            data[group] = values
    return data
