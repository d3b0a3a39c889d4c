import json

import pytest

from riskhealth.config.settings import Settings
from riskhealth.errors import RiskSourceError
from riskhealth.integrations.risk_source import RiskRegisterSource


def test_mock_register_loads():
    risks = RiskRegisterSource(mock=True).load()
    assert len(risks) == 12
    assert len({r.id for r in risks}) == 12
    assert "Tecnologia" in {r.categoria for r in risks}
    assert all(r.projeto_nome for r in risks)


def test_json_list(tmp_path):
    path = tmp_path / "risks.json"
    path.write_text(json.dumps([
        {"id": "1", "codigo": "R-1", "categoria": "Financeiro", "nivel_risco": "Alto",
         "status": "Identificado", "prazo": "2024-09-30"},
        {"id": "2", "categoria": "Compliance", "nivel_risco": "Baixo", "status": "Mitigado"},
    ]), encoding="utf-8")

    risks = RiskRegisterSource(path=str(path), mock=False).load()
    assert [r.label for r in risks] == ["R-1", "2"]
    assert risks[0].prazo.isoformat() == "2024-09-30"
    assert risks[1].prazo is None


def test_json_object_with_risks_key(tmp_path):
    path = tmp_path / "export.json"
    path.write_text(json.dumps({"risks": [
        {"id": "1", "categoria": "Operacional", "nivel_risco": "Médio", "status": "Em Andamento"},
    ]}), encoding="utf-8")
    assert len(RiskRegisterSource(path=str(path), mock=False).load()) == 1


def test_csv_empty_cells_are_missing(tmp_path):
    path = tmp_path / "risks.csv"
    path.write_text(
        "id,codigo,categoria,nivel_risco,status,responsavel_id,prazo,acoes_mitigacao\n"
        "1,R-1,Financeiro,Crítico,Identificado,,,\n"
        "2,R-2,Compliance,Baixo,Mitigado,u-01,2024-12-31,Revisar contratos\n",
        encoding="utf-8",
    )
    first, second = RiskRegisterSource(path=str(path), mock=False).load()
    assert not first.has_owner
    assert not first.has_deadline
    assert first.plan_length == 0
    assert second.responsavel_id == "u-01"
    assert second.has_deadline


def test_missing_file(tmp_path):
    with pytest.raises(RiskSourceError, match="not found"):
        RiskRegisterSource(path=str(tmp_path / "nope.json"), mock=False).load()


def test_unsupported_format(tmp_path):
    path = tmp_path / "risks.xlsx"
    path.write_bytes(b"")
    with pytest.raises(RiskSourceError, match="Unsupported"):
        RiskRegisterSource(path=str(path), mock=False).load()


def test_invalid_json(tmp_path):
    path = tmp_path / "risks.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(RiskSourceError, match="Invalid JSON"):
        RiskRegisterSource(path=str(path), mock=False).load()


def test_invalid_record_names_the_risk(tmp_path):
    path = tmp_path / "risks.json"
    path.write_text(json.dumps([{"id": "1", "codigo": "R-BAD", "categoria": "Financeiro"}]),
                    encoding="utf-8")
    with pytest.raises(RiskSourceError, match="Invalid risk R-BAD"):
        RiskRegisterSource(path=str(path), mock=False).load()


def test_non_object_record(tmp_path):
    path = tmp_path / "risks.json"
    path.write_text("[1]", encoding="utf-8")
    with pytest.raises(RiskSourceError, match="#1 is not an object"):
        RiskRegisterSource(path=str(path), mock=False).load()


def test_no_register_configured(monkeypatch):
    monkeypatch.setattr(Settings, "RISK_DATA_FILE", "")
    with pytest.raises(RiskSourceError, match="No risk register configured"):
        RiskRegisterSource(mock=False).load()


def test_numeric_ids_are_read_as_text(tmp_path):
    path = tmp_path / "risks.json"
    path.write_text(json.dumps([
        {"id": 1, "categoria": "Financeiro", "nivel_risco": "Alto", "status": "Identificado",
         "responsavel_id": 7},
    ]), encoding="utf-8")

    risk = RiskRegisterSource(path=str(path), mock=False).load()[0]
    assert risk.id == "1"
    assert risk.responsavel_id == "7"
    assert risk.has_owner


def test_csv_in_legacy_encoding(tmp_path):
    path = tmp_path / "riscos.csv"
    path.write_bytes(
        "id,categoria,nivel_risco,status\n1,Financeiro,Crítico,Identificado\n".encode("cp1252")
    )
    with pytest.raises(RiskSourceError, match="not UTF-8 encoded"):
        RiskRegisterSource(path=str(path), mock=False).load()


def test_json_in_legacy_encoding(tmp_path):
    path = tmp_path / "riscos.json"
    path.write_bytes('[{"id": "1", "nivel_risco": "Crítico"}]'.encode("cp1252"))
    with pytest.raises(RiskSourceError, match="not UTF-8 encoded"):
        RiskRegisterSource(path=str(path), mock=False).load()


def test_unreadable_register_path(tmp_path):
    path = tmp_path / "risks.json"
    path.mkdir()
    with pytest.raises(RiskSourceError, match="Cannot read risk register"):
        RiskRegisterSource(path=str(path), mock=False).load()
