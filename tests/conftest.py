from datetime import date
from itertools import count

import pytest

from riskhealth.models.risk import Risk

REFERENCE_DATE = date(2024, 6, 30)

_ids = count(1)


def make_risk(**overrides) -> Risk:
    """Build a Risk with neutral defaults: low level, under analysis, no
    owner, no deadline, no plan."""
    n = next(_ids)
    fields = {
        "id": f"r-{n:03d}",
        "codigo": f"R-{n:03d}",
        "categoria": "Operacional",
        "nivel_risco": "Baixo",
        "status": "Em Análise",
    }
    fields.update(overrides)
    return Risk(**fields)


def well_managed(**overrides) -> Risk:
    """A risk that tops the quality ladder and is already mitigated."""
    fields = {
        "status": "Mitigado",
        "responsavel_id": "u-01",
        "responsavel_nome": "Ana Souza",
        "prazo": date(2024, 12, 31),
        "acoes_mitigacao": "x" * 500,
        "estrategia": "Mitigar",
    }
    fields.update(overrides)
    return make_risk(**fields)


@pytest.fixture
def reference_date():
    return REFERENCE_DATE


@pytest.fixture
def scenario_a():
    return [make_risk(nivel_risco="Crítico", status="Identificado", acoes_mitigacao="")]


@pytest.fixture
def scenario_c():
    return [well_managed(responsavel_id="u-01"), well_managed(responsavel_id="u-02")]
