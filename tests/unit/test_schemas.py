"""
Testes dos modelos do boletim (aliases do formulário, nulos, semana)
"""
import pytest
from pydantic import ValidationError

from controle_vetorial.schemas.reports import ReportCreate, ReportPayload


def _report(**overrides) -> dict:
    body = {
        "localidade": "Centro",
        "semana_epidemiologica": "SE 07",
        "ciclo": 1,
        "ano": 2026,
    }
    body.update(overrides)
    return body


class TestReportPayload:

    def test_reads_form_keys(self):
        payload = ReportPayload.model_validate({
            "tipoAtividade": ["LI+T"],
            "imoveis": {"residencias": 4, "fechados": 1, "informados": 5},
            "larvicida1": {"tipo": "BTI", "quantidade": "2.5", "dep tratados": 3},
            "diasTrabalhados": 2,
            "nomeSupervisor": "Maria",
        })

        assert payload.tipo_atividade == ["LI+T"]
        assert payload.imoveis.residential == 4
        assert payload.larvicida1.quantity == 2.5
        assert payload.larvicida1.containers_treated == 3
        assert payload.days_worked == 2
        assert payload.supervisor_name == "Maria"

    def test_null_counts_become_zero(self):
        payload = ReportPayload.model_validate({
            "imoveis": {"residencias": None, "informados": 3},
            "agentes": None,
            "veiculos": "",
        })

        assert payload.imoveis.residential == 0
        assert payload.imoveis.informed == 3
        assert payload.agents == 0
        assert payload.vehicles == 0

    def test_null_text_and_list_become_empty(self):
        payload = ReportPayload.model_validate({
            "nomeSupervisor": None,
            "tipoAtividade": None,
            "larvicida2": {"tipo": None, "quantidade": 1},
            "adulticida": {"tipo": None, "cargas": None},
        })

        assert payload.supervisor_name == ""
        assert payload.tipo_atividade == []
        assert payload.larvicida2.tipo == ""
        assert (payload.adulticida.tipo, payload.adulticida.loads) == ("", 0)

    def test_negative_count_is_rejected(self):
        with pytest.raises(ValidationError):
            ReportPayload.model_validate({"depositos": {"A1": -1}})

    def test_dump_by_alias_keeps_form_keys(self):
        payload = ReportPayload.model_validate({"larvicida1": {"dep tratados": 2}, "eliminados": 4})

        dumped = payload.model_dump(by_alias=True)

        assert dumped["eliminados"] == 4
        assert dumped["larvicida1"]["dep tratados"] == 2
        assert dumped["imoveis"] is None


class TestReportCreate:

    @pytest.mark.parametrize("week", ["SE 01", "SE 07", "SE 52"])
    def test_accepts_valid_weeks(self, week):
        report = ReportCreate.model_validate(_report(semana_epidemiologica=week))

        assert report.semana_epidemiologica == week

    @pytest.mark.parametrize("week", ["SE 00", "SE 53", "SE 60", "SE 7", "07", "se 07"])
    def test_rejects_invalid_weeks(self, week):
        with pytest.raises(ValidationError):
            ReportCreate.model_validate(_report(semana_epidemiologica=week))

    def test_cycle_must_be_positive(self):
        with pytest.raises(ValidationError):
            ReportCreate.model_validate(_report(ciclo=0))

    def test_missing_data_defaults_to_empty_payload(self):
        report = ReportCreate.model_validate(_report())

        assert report.data == ReportPayload()
        assert report.concluido is False

    @pytest.mark.parametrize("category", ["", "1", "2"])
    def test_accepts_known_locality_categories(self, category):
        report = ReportCreate.model_validate(_report(categoria_localidade=category))

        assert report.categoria_localidade == category

    def test_rejects_unknown_locality_category(self):
        with pytest.raises(ValidationError):
            ReportCreate.model_validate(_report(categoria_localidade="BRR"))
