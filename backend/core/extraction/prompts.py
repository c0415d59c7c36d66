"""
Extraction prompts per document type.

Each document type is extracted in one or more sequential steps. A step
that ``expects_input`` receives the previous step's output appended to
its prompt.

Dependencies: None (pure domain layer)
System role: Prompt catalog for multi-step document extraction
"""

from dataclasses import dataclass

from backend.core.document_types import DocumentType
from backend.core.exceptions import UnsupportedDocumentTypeError

PREVIOUS_STEP_SUFFIX = "\n\nInformação do módulo anterior: {previous}"

_PURE_JSON = (
    "Entregue um json válido e puro. A resposta deve ser apenas o json e sem "
    "sequer a informação de que é um json. Não use ```json nem blocos de código."
)


@dataclass(frozen=True)
class PromptStep:
    step: int
    name: str
    description: str
    prompt: str
    expects_input: bool = False

    def render(self, previous_result: str | None = None) -> str:
        """Prompt text for this step, with the previous output appended when expected."""
        if self.expects_input and previous_result:
            return self.prompt + PREVIOUS_STEP_SUFFIX.format(previous=previous_result)
        return self.prompt

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "name": self.name,
            "description": self.description,
            "expectsInput": self.expects_input,
        }


def _fields_prompt(intro: str, fields: list[tuple[str, str]], shape: str, rules: str = "") -> str:
    lines = [intro, "", "Campos a extrair:"]
    lines.extend(f"- {name}: {hint}" for name, hint in fields)
    if rules:
        lines.extend(["", rules])
    lines.extend(["", f"Retorne {shape}.", _PURE_JSON])
    return "\n".join(lines)


_BR_DATE = "converta datas para o formato brasileiro DD/MM/AAAA."

PROFORMA_STEPS = (
    PromptStep(
        1,
        "Extração de Dados Gerais",
        "Extraindo informações do cabeçalho da proforma invoice",
        _fields_prompt(
            "Extract the general fields of the proforma invoice. The contracted company "
            "is the seller/issuer, NEVER the buyer.",
            [
                ("contracted_company", "company issuing the document (seller/supplier)"),
                ("contracted_email", "email of the contracted company, never the buyer's"),
                ("invoice_number", 'value after "INVOICE NO.", "Invoice #" or similar'),
                ("date", "document date in DD/MM/YYYY"),
                ("load_port", "loading port, city name when available"),
                ("destination", "destination, city name when available"),
                ("total_price", "total invoice amount in USD (number)"),
                ("payment_terms", "payment terms exactly as written"),
                ("package", "packaging description"),
            ],
            "a single JSON object (not an array)",
        ),
    ),
    PromptStep(
        2,
        "Extração de Itens",
        "Extraindo lista detalhada de itens da proforma invoice",
        _fields_prompt(
            "Extraia todos os itens listados na proforma invoice, sem exceção, na ordem original.",
            [
                ("item_number", "número sequencial do item, começando em 1"),
                ("item", "nome completo do item incluindo código e variantes"),
                ("description_in_english", "descrição em inglês"),
                ("description_in_chinese", "descrição apenas em caracteres chineses"),
                ("specifications", "medidas, capacidades e dados técnicos"),
                ("quantity", "quantidade de unidades"),
                ("unit_price", "valor unitário"),
                ("package", "tipo de embalagem do item"),
            ],
            "um array JSON de itens",
            "Elimine linhas de cabeçalho, totalizadores e duplicadas.",
        ),
    ),
)

COMMERCIAL_INVOICE_STEPS = (
    PromptStep(
        1,
        "Extração de Dados Gerais",
        "Extraindo informações do cabeçalho da commercial invoice",
        _fields_prompt(
            "Extract the header fields of the commercial invoice.",
            [
                ("invoice_number", "invoice number"),
                ("invoice_date", "invoice date in DD/MM/YYYY"),
                ("load_port", "port of loading"),
                ("destination_port", "port of destination"),
                ("shipper_company", "exporter company name"),
                ("shipper_address", "exporter address"),
                ("shipper_tel", "exporter phone"),
                ("shipper_email", "exporter email"),
                ("consignee_company", "importer company name"),
                ("consignee_address", "importer address"),
                ("consignee_cnpj", "importer CNPJ"),
                ("notify_party_company", "notify party name"),
                ("notify_party_cnpj", "notify party CNPJ"),
                ("notify_party_address", "notify party address"),
                ("total_amount_usd", "total amount in USD (number)"),
                ("total_amount_words", "total amount written in words"),
            ],
            "a single JSON object",
        ),
    ),
    PromptStep(
        2,
        "Extração de Itens",
        "Extraindo lista detalhada de itens da commercial invoice",
        _fields_prompt(
            "Extraia todos os itens da commercial invoice, sem exceção, na ordem original.",
            [
                ("item_number", "número sequencial do item"),
                ("reference", "referência ou código do item"),
                ("name_chinese", "nome em chinês"),
                ("name_english", "nome em inglês"),
                ("quantity", "quantidade"),
                ("unit", "unidade comercial"),
                ("unit_price_usd", "preço unitário em USD"),
                ("amount_usd", "valor total do item em USD"),
            ],
            "um array JSON de itens",
        ),
    ),
)

PACKING_LIST_STEPS = (
    PromptStep(
        1,
        "Extração de Dados Gerais",
        "Extraindo informações básicas do cabeçalho (invoice, consignee, datas, etc.)",
        _fields_prompt(
            "Extraia os dados gerais do packing list.",
            [
                ("invoice", "número da invoice"),
                ("consignee", "destinatário"),
                ("contracted_company", "empresa emissora (fornecedor)"),
                ("contracted_email", "email do fornecedor"),
                ("date", "data do documento; " + _BR_DATE),
                ("destination", "destino"),
                ("load_port", "porto de embarque"),
                ("notify_party", "parte notificada"),
                ("items_qty_total", "quantidade total de itens"),
                ("package_total", "total de volumes"),
                ("total_gw", "peso bruto total"),
            ],
            "um único objeto JSON",
        ),
    ),
    PromptStep(
        2,
        "Identificação de Contêineres",
        "Identificando contêineres e mapeando itens para cada contêiner",
        _fields_prompt(
            "Identifique todos os contêineres do packing list e a faixa de itens e pacotes de cada um.",
            [
                ("container", "número do contêiner"),
                ("booking", "número da reserva"),
                ("tipo_container", "tipo, ex: 40HQ"),
                ("invoice", "número da invoice"),
                ("from_item", "primeiro item no contêiner"),
                ("to_item", "último item no contêiner"),
                ("from_package", "primeiro pacote"),
                ("to_package", "último pacote"),
                ("quantidade_de_pacotes", "quantidade de pacotes"),
                ("peso_bruto", "peso bruto do contêiner"),
                ("volume", "volume em CBM"),
            ],
            "um array JSON de contêineres",
        ),
    ),
    PromptStep(
        3,
        "Explicação da Disposição",
        "Criando explicação da distribuição de itens nos contêineres",
        "Com base nos contêineres identificados, explique em texto corrido como os itens "
        "estão distribuídos em cada contêiner, incluindo itens divididos entre contêineres. "
        "Responda apenas com a explicação em texto, sem JSON.",
        expects_input=True,
    ),
    PromptStep(
        4,
        "Distribuição Final",
        "Distribuindo itens finais com todos os detalhes por contêiner",
        _fields_prompt(
            "Usando a explicação da disposição, liste cada item com seu contêiner e todos os detalhes.",
            [
                ("numero_item", "número do item"),
                ("container", "contêiner onde o item está"),
                ("reference", "referência do item"),
                ("descricao_ingles", "descrição em inglês"),
                ("descricao_chines", "descrição em chinês"),
                ("marcacao_do_pacote", "marcação do pacote"),
                ("quantidade_de_pacotes", "quantidade de pacotes"),
                ("quantidade_por_pacote", "quantidade por pacote"),
                ("quantidade_total", "quantidade total"),
                ("peso_liquido_por_pacote", "peso líquido por pacote"),
                ("peso_liquido_total", "peso líquido total"),
                ("peso_bruto_por_pacote", "peso bruto por pacote"),
                ("peso_bruto_total", "peso bruto total"),
                ("comprimento_pacote", "comprimento do pacote"),
                ("largura_pacote", "largura do pacote"),
                ("altura_pacote", "altura do pacote"),
            ],
            "um array JSON de itens",
        ),
        expects_input=True,
    ),
)

DI_STEPS = (
    PromptStep(
        1,
        "Dados Gerais da DI",
        "Extraindo informações gerais da Declaração de Importação",
        _fields_prompt(
            "Extraia os dados gerais da Declaração de Importação (DI). O número da invoice "
            'está nos dados complementares, após "FATURA".',
            [
                ("numero_DI", "número da DI"),
                ("numero_invoice", "número da fatura/invoice"),
                ("data_registro_DI", "data de registro; " + _BR_DATE),
                ("nome_importador", "importador"),
                ("cnpj_importador", "CNPJ do importador"),
                ("nome_adquirente", "adquirente"),
                ("cnpj_adquirente", "CNPJ do adquirente"),
                ("representante_legal_nome", "representante legal"),
                ("representante_legal_CPF", "CPF do representante legal"),
                ("modalidade_despacho", "modalidade de despacho"),
                ("quantidade_total_adicoes", "quantidade de adições"),
                ("recinto_aduaneiro", "recinto aduaneiro"),
                ("numero_BL", "número do conhecimento de embarque"),
                ("numero_CE_Mercante", "número do CE Mercante"),
                ("nome_navio", "nome do navio"),
                ("lista_containers", "contêineres separados por vírgula"),
                ("data_chegada", "data de chegada"),
                ("peso_bruto_total_kg", "peso bruto total"),
                ("peso_liquido_total_kg", "peso líquido total"),
                ("quantidade_total_embalagens", "quantidade de embalagens"),
                ("taxa_dolar", "taxa do dólar"),
                ("frete_usd", "frete em USD"),
                ("seguro_usd", "seguro em USD"),
                ("VMLE_usd", "VMLE em USD"),
                ("VMLD_usd", "VMLD em USD"),
                ("tributo_II_recolhido_total", "II recolhido"),
                ("tributo_IPI_suspenso_total", "IPI suspenso"),
                ("tributo_IPI_recolhido_total", "IPI recolhido"),
                ("tributo_PIS_recolhido_total", "PIS recolhido"),
                ("tributo_COFINS_recolhido_total", "COFINS recolhido"),
                ("valor_total_impostos_recolhidos", "total de impostos recolhidos"),
            ],
            "um único objeto JSON",
        ),
    ),
    PromptStep(
        2,
        "Itens da DI",
        "Extraindo todos os itens individualmente com seus detalhes",
        _fields_prompt(
            "Extraia cada item de cada adição da DI individualmente.",
            [
                ("numero_adicao", "número da adição"),
                ("invoice_number", "número da invoice"),
                ("ncm_completa", "NCM completa"),
                ("codigo_item", "código do item"),
                ("descricao_completa_detalhada_produto", "descrição completa"),
                ("reference", "referência do produto"),
                ("exportador_nome", "exportador"),
                ("pais_origem", "país de origem"),
                ("pais_aquisicao", "país de aquisição"),
                ("incoterm", "incoterm"),
                ("quantidade_produto", "quantidade"),
                ("unidade_comercial_produto", "unidade comercial"),
                ("peso_liquido_adicao_kg", "peso líquido da adição"),
                ("valor_unitario_produto_usd", "valor unitário em USD"),
                ("valor_total_item_usd", "valor total em USD"),
            ],
            "um array JSON de itens",
        ),
        expects_input=True,
    ),
    PromptStep(
        3,
        "Informações Tributárias",
        "Extraindo informações tributárias por item",
        _fields_prompt(
            "Com base nos itens extraídos, calcule e extraia as informações tributárias por item.",
            [
                ("invoice_number", "número da invoice"),
                ("numero_adicao", "número da adição"),
                ("codigo_item", "código do item"),
                ("quantidade_item", "quantidade"),
                ("vucv_usd", "valor unitário na condição de venda"),
                ("valor_total_item_usd", "valor total em USD"),
                ("participacao_percentual_item", "participação percentual na adição"),
                ("regime_tributacao_ii", "regime do II"),
                ("aliquota_ii_percentual", "alíquota do II"),
                ("valor_ii_recolhido", "II recolhido"),
                ("regime_tributacao_ipi", "regime do IPI"),
                ("aliquota_ipi_percentual", "alíquota do IPI"),
                ("valor_ipi_recolhido", "IPI recolhido"),
                ("base_calculo_pis", "base de cálculo do PIS"),
                ("aliquota_pis_percentual", "alíquota do PIS"),
                ("valor_pis_recolhido", "PIS recolhido"),
                ("base_calculo_cofins", "base de cálculo do COFINS"),
                ("aliquota_cofins_percentual", "alíquota do COFINS"),
                ("valor_cofins_recolhido", "COFINS recolhido"),
                ("valor_total_tributos", "total de tributos do item"),
            ],
            "um array JSON",
        ),
        expects_input=True,
    ),
)

NOTA_FISCAL_STEPS = (
    PromptStep(
        1,
        "Header",
        "Extraindo informações gerais da Nota Fiscal Eletrônica",
        _fields_prompt(
            "Extraia os dados gerais da Nota Fiscal Eletrônica (NF-e).",
            [
                ("numero_nf", "número da NF"),
                ("serie", "série"),
                ("invoice_number", "número da invoice citada nas informações complementares"),
                ("data_emissao", "data de emissão; " + _BR_DATE),
                ("data_saida", "data de saída"),
                ("hora_saida", "hora de saída"),
                ("chave_acesso", "chave de acesso com 44 dígitos"),
                ("natureza_operacao", "natureza da operação"),
                ("protocolo_autorizacao", "protocolo de autorização"),
                ("emitente_razao_social", "razão social do emitente"),
                ("destinatario_razao_social", "razão social do destinatário"),
                ("valor_total_produtos", "valor total dos produtos"),
                ("valor_total_nota", "valor total da nota"),
                ("base_calculo_icms", "base de cálculo do ICMS"),
                ("valor_icms", "valor do ICMS"),
                ("valor_total_ipi", "valor total do IPI"),
                ("valor_frete", "frete"),
                ("valor_seguro", "seguro"),
                ("desconto", "desconto"),
                ("outras_despesas", "outras despesas"),
                ("frete_por_conta", "modalidade do frete"),
                ("quantidade_volumes", "quantidade de volumes"),
                ("especie_volumes", "espécie dos volumes"),
                ("peso_bruto", "peso bruto"),
                ("peso_liquido", "peso líquido"),
                ("informacoes_complementares", "informações complementares"),
                ("informacoes_fisco", "informações de interesse do fisco"),
                ("di_number", "número da DI citado na nota"),
            ],
            "um único objeto JSON",
        ),
    ),
    PromptStep(
        2,
        "Items",
        "Extraindo todos os produtos/itens da Nota Fiscal",
        _fields_prompt(
            "Extraia todos os produtos da NF-e.",
            [
                ("codigo_produto", "código do produto"),
                ("descricao_produto", "descrição"),
                ("ncm_sh", "NCM/SH"),
                ("cfop", "CFOP"),
                ("unidade", "unidade"),
                ("quantidade", "quantidade"),
                ("valor_unitario", "valor unitário"),
                ("valor_total_produto", "valor total"),
                ("base_icms", "base do ICMS"),
                ("valor_icms_produto", "ICMS do item"),
                ("aliquota_icms", "alíquota do ICMS"),
                ("valor_ipi_produto", "IPI do item"),
                ("aliquota_ipi", "alíquota do IPI"),
                ("reference", "referência do produto na descrição"),
            ],
            "um array JSON de itens",
        ),
        expects_input=True,
    ),
)

SWIFT_STEPS = (
    PromptStep(
        1,
        "Extração de Dados SWIFT",
        "Extraindo todos os campos da mensagem SWIFT",
        _fields_prompt(
            "Você é um extrator de dados especializado em mensagens SWIFT. Procure cada campo "
            'pela tag (":20:", ":32A:", ...) ou pelo cabeçalho descritivo.',
            [
                ("message_type", 'ex: "FIN 103"; "UNKNOWN" se ausente'),
                ("senders_reference", ":20:"),
                ("transaction_reference", ":21:"),
                ("uetr", ":121: (UUID)"),
                ("bank_operation_code", ":23B:"),
                ("value_date", ":32A: data em DD/MM/AAAA"),
                ("currency", ":32A: moeda"),
                ("amount", ":32A: valor numérico com ponto decimal"),
                ("ordering_customer", "objeto {name, address} do bloco :50K:"),
                ("ordering_institution", "objeto {name, bic, address} do bloco :52D: ou :53B:"),
                ("account_with_institution_bic", ":57A:"),
                ("receiver_institution", "objeto {name, bic} do banco beneficiário"),
                ("beneficiary", "objeto {account, name, address} do bloco :59:; conta só com números"),
                ("remittance_information", ":70: texto completo"),
                ("fatura", 'primeiro código após "FATURA", "INV/", "INVOICE NO"'),
                ("details_of_charges", ":71A: (OUR, SHA, BEN)"),
            ],
            "um único objeto JSON; campos ausentes como \"\" ou 0",
        ),
    ),
)

NUMERARIO_STEPS = (
    PromptStep(
        1,
        "Extração do Número da DI",
        "Extraindo número da DI das informações complementares",
        _fields_prompt(
            "Localize o número da DI nas informações complementares do documento de numerário.",
            [("di_number", "número da DI, somente dígitos; null se ausente")],
            "um único objeto JSON",
        ),
    ),
    PromptStep(
        2,
        "Dados Gerais",
        "Extraindo dados gerais do numerário",
        _fields_prompt(
            "Extraia os dados gerais do numerário (solicitação, fechamento financeiro ou prestação de contas).",
            [
                ("invoice_number", 'invoice/proforma referenciada ("REF. ADQUIRENTE", "VIM...")'),
                ("tipo_documento", "tipo do documento"),
                ("data_documento", "data; " + _BR_DATE),
                ("cliente_nome", "cliente"),
                ("cliente_cnpj", "CNPJ do cliente"),
                ("cambio_brl", "taxa de câmbio"),
                ("valor_reais", "valor total em reais"),
                ("banco", "banco"),
                ("conta_destino", "conta de destino"),
                ("forma_pagamento", "forma de pagamento"),
                ("impostos", "total de impostos"),
                ("taxas", "total de taxas"),
                ("desconto", "desconto"),
                ("valor_liquido", "valor líquido a depositar"),
                ("observacoes", "observações"),
                ("nf_emitida", "se há NF emitida (true/false)"),
                ("numero_nf", "número da NF"),
                ("data_emissao_nf", "data de emissão da NF"),
                ("chave_nf", "chave da NF"),
            ],
            "um único objeto JSON",
        ),
        expects_input=True,
    ),
    PromptStep(
        3,
        "Itens",
        "Extraindo despesas listadas no numerário",
        _fields_prompt(
            "Liste todas as despesas do numerário.",
            [
                ("descricao", "descrição da despesa"),
                ("valor", "valor em reais"),
                ("categoria", "imposto, taxa, frete, armazenagem ou outros"),
            ],
            "um array JSON",
        ),
        expects_input=True,
    ),
)

BL_STEPS = (
    PromptStep(
        1,
        "Header",
        "Extraindo dados gerais do Bill of Lading",
        _fields_prompt(
            "Você recebeu uma Bill of Lading (BL). Extraia com precisão absoluta os dados abaixo.",
            [
                ("bl_number", "número da BL"),
                ("issue_date", "data de emissão"),
                ("onboard_date", "data de embarque"),
                ("shipper", "exportador"),
                ("consignee", "importador"),
                ("notify_party", "parte notificante"),
                ("cnpj_consignee", "CNPJ do importador"),
                ("place_of_receipt", "local de recebimento"),
                ("port_of_loading", "porto de carregamento"),
                ("port_of_discharge", "porto de descarga"),
                ("place_of_delivery", "local de entrega"),
                ("freight_term", "condição de frete"),
                ("cargo_description", "descrição da carga"),
                ("ncm_codes", "códigos NCM"),
                ("package_type", "tipo de embalagem"),
                ("total_packages", "quantidade de pacotes"),
                ("total_weight_kg", "peso bruto total"),
                ("total_volume_cbm", "volume total"),
                ("freight_value_usd", "frete em USD"),
                ("freight_value_brl", "frete em BRL"),
                ("freight_agent", "agente de frete"),
                ("vessel_name", "navio"),
                ("voy_number", "viagem"),
            ],
            "um único objeto JSON",
        ),
    ),
    PromptStep(
        2,
        "Containers",
        "Extraindo contêineres do Bill of Lading",
        _fields_prompt(
            "Liste todos os contêineres da BL.",
            [
                ("container_number", "número do contêiner"),
                ("container_type", "tipo"),
                ("seal_number", "lacre"),
                ("packages", "quantidade de pacotes"),
                ("gross_weight_kg", "peso bruto"),
                ("volume_cbm", "volume"),
            ],
            "um array JSON",
        ),
        expects_input=True,
    ),
)

CONTRATO_CAMBIO_STEPS = (
    PromptStep(
        1,
        "Contrato de Câmbio",
        "Extraindo dados do contrato de câmbio",
        _fields_prompt(
            'You are receiving a Brazilian foreign exchange contract ("CONTRATO DE CÂMBIO").',
            [
                ("contrato", "contract number"),
                ("data", "contract date DD/MM/YYYY"),
                ("corretora", "authorized institution"),
                ("moeda", "3-letter currency code"),
                ("valor_estrangeiro", "format USD XXX.XXX,XX"),
                ("taxa_cambial", "format R$ X,XXX"),
                ("valor_nacional", "format R$ XXX.XXX,XX"),
                ("fatura", 'first code after "FATURA", "INVOICE", "INV/"'),
                ("recebedor", "foreign recipient"),
                ("pais", "recipient country"),
                ("endereco", "recipient address"),
                ("conta_bancaria", "IBAN or account"),
                ("swift", "SWIFT code"),
                ("banco_beneficiario", "beneficiary bank"),
            ],
            "a single JSON object; missing fields as null",
        ),
    ),
)

IDENTIFICATION_PROMPT = "\n".join(
    [
        "Você é um classificador de DOCUMENTOS DE IMPORTAÇÃO.",
        "Compare o documento com a tabela e escolha tipo e proximo_modulo:",
        "PROFORMA INVOICE -> PROFORMA_INVOICE / extrair_proforma",
        "CONTRATO DE CAMBIO -> CONTRATO_CAMBIO / extrair_contrato_cambio",
        "COMPROVANTE DE PAGAMENTO -> COMPROVANTE_CAMBIO / extrair_comprovante_cambio",
        "SWIFT -> SWIFT / extrair_swift",
        "PACKING LIST -> PACKING_LIST / extrair_packing_list",
        "COMMERCIAL INVOICE -> COMMERCIAL_INVOICE / extrair_commercial_inv",
        "BILL OF LADING -> BILL_OF_LADING / extrair_bl",
        "NOTA FISCAL TRADING -> NOTA_FISCAL_TRADING / extrair_nf_trading",
        "DECLARACAO DE IMPORTACAO -> DI / extrair_di",
        "NUMERÁRIO -> NUMERARIO / extrair_numerario",
        "Solicitação numerário, Fechamento Financeiro e Prestação de contas são NUMERARIO.",
        "Se nada casar: tipo = DESCONHECIDO, proximo_modulo = fila_manual.",
        "",
        "document_number deve conter SOMENTE o número da INVOICE/FATURA (null se ausente);",
        "nunca o número da BL, da DI ou do contrato. Para CONTRATO_CAMBIO use null.",
        "has_invoice_number indica se o número da invoice foi encontrado.",
        "resumo: no máximo 200 caracteres com tipo, empresa, valor e data.",
        "",
        "Retorne exatamente:",
        '{"tipo": "<TIPO>", "proximo_modulo": "<MODULO>", "document_number": "<NUMERO|null>",'
        ' "has_invoice_number": <true|false>, "resumo": "<RESUMO>", "data": "<DATA>"}',
        _PURE_JSON,
    ]
)

_STEPS_BY_TYPE: dict[DocumentType, tuple[PromptStep, ...]] = {
    DocumentType.PROFORMA_INVOICE: PROFORMA_STEPS,
    DocumentType.COMMERCIAL_INVOICE: COMMERCIAL_INVOICE_STEPS,
    DocumentType.PACKING_LIST: PACKING_LIST_STEPS,
    DocumentType.DI: DI_STEPS,
    DocumentType.NOTA_FISCAL: NOTA_FISCAL_STEPS,
    DocumentType.SWIFT: SWIFT_STEPS,
    DocumentType.NUMERARIO: NUMERARIO_STEPS,
    DocumentType.BL: BL_STEPS,
    DocumentType.CONTRATO_CAMBIO: CONTRATO_CAMBIO_STEPS,
}

EXTRACTABLE_TYPES: tuple[DocumentType, ...] = tuple(_STEPS_BY_TYPE)


def get_steps(document_type: DocumentType) -> tuple[PromptStep, ...]:
    """
    Prompt steps for a document type.

    Raises:
        UnsupportedDocumentTypeError: If the type has no extraction prompts
    """
    steps = _STEPS_BY_TYPE.get(document_type)
    if steps is None:
        raise UnsupportedDocumentTypeError(document_type.value)
    return steps
