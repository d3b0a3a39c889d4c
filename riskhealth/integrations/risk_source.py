import csv
import json
from datetime import date, timedelta
from pathlib import Path
from typing import Optional
from loguru import logger
from pydantic import ValidationError
from riskhealth.config.settings import settings
from riskhealth.errors import RiskSourceError
from riskhealth.models.risk import Risk


class RiskRegisterSource:
    """Reads the risk register from a JSON or CSV export.

    JSON files hold an array of records (or an object with a ``risks`` array);
    CSV files use the Risk field names as headers. Empty cells are treated
    as missing values.
    """

    def __init__(self, path: Optional[str] = None, mock: Optional[bool] = None):
        self.mock = settings.MOCK_MODE if mock is None else mock
        target = path or settings.RISK_DATA_FILE
        self.path = Path(target) if target else None
        if self.mock:
            logger.warning("RiskRegisterSource: MOCK MODE active.")
        else:
            logger.info(f"RiskRegisterSource: reading {self.path}")

    def load(self) -> list[Risk]:
        if self.mock:
            rows = self._mock_risks()
        else:
            rows = self._read_rows()
        risks = [self._parse(i, row) for i, row in enumerate(rows, 1)]
        logger.info(f"Loaded {len(risks)} risk(s) from the register.")
        return risks

    # ------------------------------------------------------------------
    # File readers
    # ------------------------------------------------------------------
    def _read_rows(self) -> list[dict]:
        if self.path is None:
            raise RiskSourceError("No risk register configured. Set RISK_DATA_FILE or enable MOCK_MODE.")
        if not self.path.exists():
            raise RiskSourceError(f"Risk register not found: {self.path}")

        suffix = self.path.suffix.lower()
        if suffix == ".json":
            return self._read_json()
        elif suffix == ".csv":
            return self._read_csv()
        raise RiskSourceError(f"Unsupported register format '{suffix}' (use .json or .csv).")

    def _read_json(self) -> list[dict]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise RiskSourceError(f"Invalid JSON in {self.path}: {e}")
        except UnicodeDecodeError as e:
            raise RiskSourceError(f"{self.path} is not UTF-8 encoded: {e}")
        except OSError as e:
            raise RiskSourceError(f"Cannot read risk register {self.path}: {e}")
        if isinstance(data, dict):
            data = data.get("risks", [])
        if not isinstance(data, list):
            raise RiskSourceError(f"{self.path} must contain a list of risks.")
        return data

    def _read_csv(self) -> list[dict]:
        try:
            with self.path.open(newline="", encoding="utf-8-sig") as fh:
                reader = csv.DictReader(fh)
                return [{k: (v if v != "" else None) for k, v in row.items() if k} for row in reader]
        except UnicodeDecodeError as e:
            raise RiskSourceError(f"{self.path} is not UTF-8 encoded (re-export as CSV UTF-8): {e}")
        except OSError as e:
            raise RiskSourceError(f"Cannot read risk register {self.path}: {e}")

    @staticmethod
    def _parse(index: int, row) -> Risk:
        if not isinstance(row, dict):
            raise RiskSourceError(f"Risk #{index} is not an object.")
        try:
            return Risk(**row)
        except ValidationError as e:
            ref = row.get("codigo") or row.get("id") or f"#{index}"
            raise RiskSourceError(f"Invalid risk {ref}: {e.error_count()} field error(s)\n{e}")

    # ==================================================================
    # MOCK DATA
    # ==================================================================
    def _mock_risks(self) -> list[dict]:
        today = date.today()

        def ago(days):
            return (today - timedelta(days=days)).isoformat()

        def ahead(days):
            return (today + timedelta(days=days)).isoformat()

        erp = "Implantação Sistema ERP Integrado"
        digital = "Transformação Digital Corporativa"
        portal = "Portal de Serviços ao Cidadão"
        detailed = (
            "Realizar mapeamento detalhado de todas as integrações; criar provas de conceito "
            "das integrações críticas; contratar especialistas em sistemas legados; estabelecer "
            "arquitetura de microsserviços com camada de abstração; revisar quinzenalmente o "
            "andamento com o comitê de TI e registrar lições aprendidas. Indicadores de acompanhamento: "
            "percentual de integrações validadas, defeitos abertos por sprint e desvio de cronograma. "
            "Plano de contingência acionado se o desvio passar de duas semanas."
        )
        short = "Acompanhar fornecedor e revisar contrato."
        medium = (
            "Negociar cláusulas de reajuste com fornecedores estratégicos, criar reserva de "
            "contingência de 10% e revisar o fluxo de caixa mensalmente com a controladoria."
        )

        return [
            {"id": "r-001", "codigo": "R-EST-001", "categoria": "Estratégico", "nivel_risco": "Alto",
             "status": "Em Andamento", "responsavel_id": "u-01", "responsavel_nome": "Ana Souza",
             "projeto_nome": digital, "prazo": ahead(45), "acoes_mitigacao": detailed,
             "estrategia": "Mitigar", "data_identificacao": ago(120)},
            {"id": "r-002", "codigo": "R-EST-002", "categoria": "Estratégico", "nivel_risco": "Crítico",
             "status": "Identificado", "responsavel_id": None, "projeto_nome": digital,
             "prazo": None, "acoes_mitigacao": short, "estrategia": "Mitigar",
             "data_identificacao": ago(75)},
            {"id": "r-003", "codigo": "R-FIN-001", "categoria": "Financeiro", "nivel_risco": "Alto",
             "status": "Em Monitoramento", "responsavel_id": "u-02", "responsavel_nome": "Carlos Lima",
             "projeto_nome": erp, "prazo": ahead(30), "acoes_mitigacao": medium,
             "estrategia": "Mitigar", "data_identificacao": ago(200)},
            {"id": "r-004", "codigo": "R-FIN-002", "categoria": "Financeiro", "nivel_risco": "Médio",
             "status": "Mitigado", "responsavel_id": "u-02", "responsavel_nome": "Carlos Lima",
             "projeto_nome": erp, "prazo": ago(10), "acoes_mitigacao": detailed,
             "estrategia": "Transferir", "data_identificacao": ago(240)},
            {"id": "r-005", "codigo": "R-OPE-001", "categoria": "Operacional", "nivel_risco": "Médio",
             "status": "Em Análise", "responsavel_id": "u-03", "responsavel_nome": "Beatriz Rocha",
             "projeto_nome": portal, "prazo": ahead(60), "acoes_mitigacao": medium,
             "estrategia": "Mitigar", "data_identificacao": ago(30)},
            {"id": "r-006", "codigo": "R-OPE-002", "categoria": "Operacional", "nivel_risco": "Baixo",
             "status": "Aceito", "responsavel_id": "u-03", "responsavel_nome": "Beatriz Rocha",
             "projeto_nome": portal, "prazo": None, "acoes_mitigacao": None,
             "estrategia": "Aceitar", "data_identificacao": ago(90)},
            {"id": "r-007", "codigo": "R-OPE-003", "categoria": "Operacional", "nivel_risco": "Alto",
             "status": "Identificado", "responsavel_id": "u-01", "responsavel_nome": "Ana Souza",
             "projeto_nome": erp, "prazo": None, "acoes_mitigacao": medium,
             "estrategia": "Aceitar", "data_identificacao": ago(95)},
            {"id": "r-008", "codigo": "R-COM-001", "categoria": "Compliance", "nivel_risco": "Alto",
             "status": "Em Andamento", "responsavel_id": "u-04", "responsavel_nome": "Diego Alves",
             "projeto_nome": portal, "prazo": ahead(20), "acoes_mitigacao": detailed,
             "estrategia": "Evitar", "data_identificacao": ago(50)},
            {"id": "r-009", "codigo": "R-REG-001", "categoria": "Regulatório", "nivel_risco": "Crítico",
             "status": "Em Andamento", "responsavel_id": "u-04", "responsavel_nome": "Diego Alves",
             "projeto_nome": portal, "prazo": ahead(15), "acoes_mitigacao": detailed,
             "estrategia": "Mitigar", "data_identificacao": ago(40)},
            {"id": "r-010", "codigo": "R-REG-002", "categoria": "Regulatório", "nivel_risco": "Médio",
             "status": "Identificado", "responsavel_id": None, "projeto_nome": erp,
             "prazo": None, "acoes_mitigacao": None, "estrategia": "Mitigar",
             "data_identificacao": ago(15)},
            {"id": "r-011", "codigo": "R-TEC-001", "categoria": "Tecnologia", "nivel_risco": "Alto",
             "status": "Em Monitoramento", "responsavel_id": "u-05", "responsavel_nome": "Elisa Matos",
             "projeto_nome": digital, "prazo": ahead(90), "acoes_mitigacao": detailed,
             "estrategia": "Mitigar", "data_identificacao": ago(150)},
            {"id": "r-012", "codigo": "R-TEC-002", "categoria": "Tecnologia", "nivel_risco": "Baixo",
             "status": "Eliminado", "responsavel_id": "u-05", "responsavel_nome": "Elisa Matos",
             "projeto_nome": digital, "prazo": ago(5), "acoes_mitigacao": medium,
             "estrategia": "Evitar", "data_identificacao": ago(180)},
        ]
