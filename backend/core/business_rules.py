"""
Business rules for import process stages.

Kanban stage configuration, per-stage document requirements and the
RN-xx rule checks evaluated against the documents linked to a process.
Violations are advisory: callers report them, they never block writes
unless a caller decides to.

Dependencies: None (pure domain layer)
System role: Stage workflow rules
"""

from dataclasses import dataclass, field
from typing import Iterable

from backend.core.document_types import get_type_name

STAGES: list[dict[str, str]] = [
    {"id": "solicitado", "title": "Solicitado"},
    {"id": "em_transporte_internacional", "title": "Em Transporte Internacional"},
    {"id": "processamento_nacional", "title": "Processamento Nacional"},
    {"id": "em_transporte_local", "title": "Em Transporte Local"},
    {"id": "recebido", "title": "Recebido"},
    {"id": "auditado", "title": "Auditado"},
]

STAGE_ORDER: list[str] = [stage["id"] for stage in STAGES]

DEFAULT_STAGE = "solicitado"

# One step forward or any step back; em_transporte_local may also be skipped
TRANSITIONS: dict[str, list[str]] = {
    "solicitado": ["em_transporte_internacional"],
    "em_transporte_internacional": ["solicitado", "processamento_nacional"],
    "processamento_nacional": [
        "solicitado",
        "em_transporte_internacional",
        "em_transporte_local",
        "recebido",
    ],
    "em_transporte_local": [
        "solicitado",
        "em_transporte_internacional",
        "processamento_nacional",
        "recebido",
    ],
    "recebido": [
        "solicitado",
        "em_transporte_internacional",
        "processamento_nacional",
        "em_transporte_local",
        "auditado",
    ],
    "auditado": [
        "solicitado",
        "em_transporte_internacional",
        "processamento_nacional",
        "em_transporte_local",
        "recebido",
    ],
}

# Legacy etapa labels written before stage ids were normalized
STAGE_MAPPINGS: dict[str, str] = {
    "Solicitado": "solicitado",
    "solicitado ": "solicitado",
    "Em Transporte Internacional": "em_transporte_internacional",
    "em transporte internacional": "em_transporte_internacional",
    "Processamento Nacional": "processamento_nacional",
    "processamento nacional": "processamento_nacional",
    "Em Transporte Local": "em_transporte_local",
    "em transporte local": "em_transporte_local",
    "Recebido": "recebido",
    "Auditado": "auditado",
}

STAGE_REQUIREMENTS: dict[str, list[str]] = {
    "solicitado": ["proforma_invoice"],
    "em_transporte_internacional": ["proforma_invoice", "bl"],
    "processamento_nacional": ["proforma_invoice", "bl", "di"],
    "em_transporte_local": ["proforma_invoice", "bl", "di"],
    "recebido": ["proforma_invoice", "bl", "di", "nota_fiscal"],
    "auditado": ["proforma_invoice", "bl", "di", "nota_fiscal"],
}


@dataclass
class RuleViolation:
    rule_id: str
    severity: str  # error | warning | info
    message: str
    required_documents: list[str] = field(default_factory=list)
    current_stage: str | None = None
    suggested_stage: str | None = None

    def to_dict(self) -> dict:
        data = {
            "ruleId": self.rule_id,
            "severity": self.severity,
            "message": self.message,
            "formattedMessage": format_violation_message(self),
        }
        if self.required_documents:
            data["requiredDocuments"] = self.required_documents
        if self.current_stage:
            data["currentStage"] = self.current_stage
        if self.suggested_stage:
            data["suggestedStage"] = self.suggested_stage
        return data


@dataclass
class StageTransition:
    from_stage: str
    to_stage: str
    allowed: bool
    violations: list[RuleViolation]
    required_documents: list[str]

    def to_dict(self) -> dict:
        return {
            "fromStage": self.from_stage,
            "toStage": self.to_stage,
            "allowed": self.allowed,
            "violations": [v.to_dict() for v in self.violations],
            "requiredDocuments": self.required_documents,
        }


def is_valid_stage(stage: str) -> bool:
    return stage in STAGE_ORDER


def _missing(required: Iterable[str], documents: set[str]) -> list[str]:
    return [doc for doc in required if doc not in documents]


def check_proforma_invoice_rule(documents: set[str]) -> RuleViolation | None:
    """RN-01: every process needs a proforma invoice."""
    if "proforma_invoice" in documents:
        return None
    return RuleViolation(
        rule_id="RN-01",
        severity="error",
        message="Um processo de importação deve conter o anexo da Proforma Invoice",
        required_documents=["proforma_invoice"],
    )


def check_solicitado_stage_rules(current_stage: str, documents: set[str]) -> list[RuleViolation]:
    """RN-02: solicitado needs a proforma or a commercial invoice."""
    if current_stage != "solicitado":
        return []
    if "proforma_invoice" in documents or "commercial_invoice" in documents:
        return []
    return [
        RuleViolation(
            rule_id="RN-02",
            severity="warning",
            message="A etapa Solicitado requer Proforma Invoice ou Commercial Invoice",
            required_documents=["proforma_invoice", "commercial_invoice"],
        )
    ]


def check_transporte_internacional_transition(
    current_stage: str, documents: set[str]
) -> list[RuleViolation]:
    """RN-04: a BL in solicitado means the process can move to international transport."""
    if current_stage != "solicitado" or "bl" not in documents:
        return []
    return [
        RuleViolation(
            rule_id="RN-04",
            severity="info",
            message='BL detectado - processo pode avançar para "Em Transporte Internacional"',
            suggested_stage="em_transporte_internacional",
        )
    ]


def check_processamento_nacional_transition(
    current_stage: str, documents: set[str]
) -> list[RuleViolation]:
    """RN-05: a DI during international transport allows national processing."""
    if current_stage != "em_transporte_internacional" or "di" not in documents:
        return []
    return [
        RuleViolation(
            rule_id="RN-05",
            severity="info",
            message='DI detectada - processo pode avançar para "Processamento Nacional"',
            suggested_stage="processamento_nacional",
        )
    ]


def check_recebido_stage_requirements(
    current_stage: str, documents: set[str]
) -> list[RuleViolation]:
    """RN-07: a nota fiscal after customs clearance allows receipt."""
    if current_stage not in ("processamento_nacional", "em_transporte_local"):
        return []
    if "nota_fiscal" not in documents:
        return []
    return [
        RuleViolation(
            rule_id="RN-07",
            severity="info",
            message='Nota Fiscal detectada - processo pode avançar para "Recebido"',
            suggested_stage="recebido",
        )
    ]


def check_auditado_requirements(documents: set[str]) -> list[RuleViolation]:
    """RN-10: auditing needs every required document attached."""
    missing = _missing(STAGE_REQUIREMENTS["auditado"], documents)
    if not missing:
        return []
    return [
        RuleViolation(
            rule_id="RN-10",
            severity="warning",
            message="Para finalizar auditoria, todos os documentos devem estar anexados",
            required_documents=missing,
        )
    ]


# Stages a process may only pass with the given document, and the rule broken otherwise
_CUMULATIVE_CHECKS: dict[str, tuple[str, str, str]] = {
    "em_transporte_internacional": ("bl", "RN-04", "Processo avançou sem Bill of Lading (BL)"),
    "processamento_nacional": ("di", "RN-05", "Processo avançou sem Declaração de Importação (DI)"),
    "recebido": ("nota_fiscal", "RN-07", "Processo avançou sem Nota Fiscal"),
}


def get_all_violations(current_stage: str, documents: Iterable[str]) -> list[RuleViolation]:
    """
    Evaluate every rule for a process.

    Args:
        current_stage: The process etapa
        documents: Document types linked to the process

    Returns:
        list[RuleViolation]: Violations ordered from critical to informative
    """
    docs = set(documents)
    violations: list[RuleViolation] = []

    proforma = check_proforma_invoice_rule(docs)
    if proforma:
        violations.append(proforma)

    current_index = STAGE_ORDER.index(current_stage) if current_stage in STAGE_ORDER else 0

    violations.extend(check_solicitado_stage_rules(current_stage, docs))

    for stage in STAGE_ORDER[:current_index]:
        check = _CUMULATIVE_CHECKS.get(stage)
        if check is None:
            continue
        doc_type, rule_id, message = check
        if doc_type not in docs:
            violations.append(
                RuleViolation(
                    rule_id=rule_id,
                    severity="error",
                    message=message,
                    required_documents=[doc_type],
                )
            )

    violations.extend(check_transporte_internacional_transition(current_stage, docs))
    violations.extend(check_processamento_nacional_transition(current_stage, docs))
    violations.extend(check_recebido_stage_requirements(current_stage, docs))
    if current_stage == "auditado":
        violations.extend(check_auditado_requirements(docs))

    return violations


def check_stage_transition(
    from_stage: str,
    to_stage: str,
    documents: Iterable[str],
    force: bool = False,
) -> StageTransition:
    """
    Decide whether a process may move between two stages.

    Backward moves are always allowed. Forward moves need the target
    stage's documents and a configured transition unless ``force`` is set.
    """
    docs = set(documents)
    from_index = STAGE_ORDER.index(from_stage) if from_stage in STAGE_ORDER else 0
    to_index = STAGE_ORDER.index(to_stage)

    if to_index < from_index:
        return StageTransition(from_stage, to_stage, True, [], [])

    missing = _missing(STAGE_REQUIREMENTS.get(to_stage, []), docs)
    violations: list[RuleViolation] = []
    if missing and not force:
        violations.append(
            RuleViolation(
                rule_id="RN-08",
                severity="warning",
                message=f'Documentos faltantes para a etapa "{to_stage}": {", ".join(missing)}',
                required_documents=missing,
                current_stage=from_stage,
                suggested_stage=from_stage,
            )
        )

    in_transitions = to_stage in TRANSITIONS.get(from_stage, []) or force
    return StageTransition(
        from_stage=from_stage,
        to_stage=to_stage,
        allowed=in_transitions and (not missing or force),
        violations=violations,
        required_documents=missing,
    )


def get_suggested_stage(documents: Iterable[str]) -> str:
    """Most advanced stage the linked documents support (never auditado)."""
    docs = set(documents)
    for stage in ("recebido", "processamento_nacional", "em_transporte_internacional"):
        if not _missing(STAGE_REQUIREMENTS[stage], docs):
            return stage
    return DEFAULT_STAGE


def get_stage_required_documents(stage: str) -> list[dict[str, str]]:
    return [
        {"type": doc_type, "name": get_type_name(doc_type)}
        for doc_type in STAGE_REQUIREMENTS.get(stage, [])
    ]


def format_violation_message(violation: RuleViolation) -> str:
    """Append the readable names of the required documents to the message."""
    if not violation.required_documents:
        return violation.message
    names = ", ".join(get_type_name(doc_type) for doc_type in violation.required_documents)
    return f"{violation.message} ({names})"
