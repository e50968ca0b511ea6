"""
Testes da preparação do export de boletins (sem banco)
"""
import json
from datetime import date

import pandas as pd

from controle_vetorial.scripts.import_reports import load_export, prepare_data


def _export_records():
    return [
        {
            "id": "b-1",
            "municipio": "itabuna",
            "localidade": "Centro",
            "categoriaLocalidade": 1,
            "semanaEpidemiologica": "SE 07",
            "ciclo": 1,
            "ano": 2026,
            "concluido": True,
            "data": {
                "dataInicio": "2026-02-09",
                "dataFim": "2026-02-13",
                "tipoAtividade": ["LI+T"],
                "imoveis": {"residencias": 12, "fechados": 3, "recuperados": 1, "informados": 15},
                "larvicida1": {"tipo": "BTI", "quantidade": 4.5, "dep tratados": 2},
                "agentes": 2,
            },
        },
        {
            "id": "b-2",
            "municipio": "itabuna",
            "localidade": "Fatima",
            "categoriaLocalidade": 2,
            "semanaEpidemiologica": "SE 08",
            "ciclo": 1,
            "ano": 2026,
            "concluido": False,
            "data": {"depositos": {"A1": 3}},
        },
    ]


class TestPrepareData:

    def test_converts_export_rows(self):
        df = pd.json_normalize(_export_records())

        rows = prepare_data(df)

        assert [row["id"] for row in rows] == ["b-1", "b-2"]
        first = rows[0]
        assert first["semana_epidemiologica"] == "SE 07"
        assert first["categoria_localidade"] == "1"
        assert first["data_inicio"] == date(2026, 2, 9)
        assert first["data_fim"] == date(2026, 2, 13)
        assert first["concluido"] is True
        assert first["content"]["imoveis"]["residencias"] == 12
        assert first["content"]["larvicida1"]["dep tratados"] == 2

    def test_missing_cells_count_as_zero(self):
        df = pd.json_normalize(_export_records())

        rows = prepare_data(df)

        second = rows[1]
        assert second["content"]["depositos"]["A1"] == 3
        assert second["content"]["agentes"] == 0
        assert second["data_inicio"] is None

    def test_invalid_rows_are_skipped(self, caplog):
        records = _export_records()
        records[1]["semanaEpidemiologica"] = "SE 60"

        rows = prepare_data(pd.json_normalize(records))

        assert [row["id"] for row in rows] == ["b-1"]
        assert "b-2" in caplog.text

    def test_duplicate_ids_are_dropped(self):
        records = _export_records()
        records.append(dict(records[0]))

        rows = prepare_data(pd.json_normalize(records))

        assert len(rows) == 2


class TestLoadExport:

    def test_reads_json_envelope(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"dados": _export_records()}), encoding="utf-8")

        df = load_export(str(path))

        assert len(df) == 2
        assert "data.imoveis.residencias" in df.columns

    def test_reads_csv_with_dotted_columns(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text(
            "id,localidade,semanaEpidemiologica,ciclo,ano,data.imoveis.informados,data.imoveis.fechados\n"
            "c-1,Zizo,SE 03,2,2026,10,1\n",
            encoding="utf-8",
        )

        rows = prepare_data(load_export(str(path)))

        assert len(rows) == 1
        assert rows[0]["ciclo"] == 2
        assert rows[0]["content"]["imoveis"]["informados"] == 10
