from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict

class RiskLevel(str, Enum):
    CRITICAL = "Crítico"
    HIGH = "Alto"
    MEDIUM = "Médio"
    LOW = "Baixo"

class RiskStatus(str, Enum):
    IDENTIFIED = "Identificado"
    UNDER_ANALYSIS = "Em Análise"
    IN_PROGRESS = "Em Andamento"
    MONITORING = "Em Monitoramento"
    MITIGATED = "Mitigado"
    ELIMINATED = "Eliminado"
    ACCEPTED = "Aceito"
    TRANSFERRED = "Transferido"

class Strategy(str, Enum):
    AVOID = "Evitar"
    MITIGATE = "Mitigar"
    TRANSFER = "Transferir"
    ACCEPT = "Aceitar"

class RiskCategory(str, Enum):
    STRATEGIC = "Estratégico"
    OPERATIONAL = "Operacional"
    FINANCIAL = "Financeiro"
    COMPLIANCE = "Compliance"
    REGULATORY = "Regulatório"

HIGH_PRIORITY_LEVELS = (RiskLevel.CRITICAL, RiskLevel.HIGH)


class Risk(BaseModel):
    """One row of the risk register, as handed over by the data layer.

    Enumerated fields are plain strings: values outside the known sets are
    accepted and simply never match a rule.
    """
    # Exported registers often carry numeric ids.
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    codigo: Optional[str] = None
    categoria: str
    nivel_risco: str
    status: str
    responsavel_id: Optional[str] = None
    responsavel_nome: Optional[str] = None
    projeto_nome: Optional[str] = None
    prazo: Optional[date] = None
    acoes_mitigacao: Optional[str] = None
    estrategia: Optional[str] = None
    data_identificacao: Optional[date] = None

    @property
    def plan_length(self) -> int:
        return len(self.acoes_mitigacao or "")

    @property
    def has_owner(self) -> bool:
        return bool(self.responsavel_id)

    @property
    def has_deadline(self) -> bool:
        return self.prazo is not None

    @property
    def is_high_priority(self) -> bool:
        return self.nivel_risco in HIGH_PRIORITY_LEVELS

    @property
    def label(self) -> str:
        return self.codigo or self.id

    def days_open(self, reference: date) -> Optional[int]:
        if self.data_identificacao is None:
            return None
        return (reference - self.data_identificacao).days
